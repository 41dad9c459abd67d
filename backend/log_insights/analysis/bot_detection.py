import re
from typing import List, Optional, Pattern

# Known automated-client signatures, checked in order, case-insensitive.
# Adding a signature is a data change; rows already stored keep the flag
# they were given at load time until they are reloaded.
BOT_SIGNATURES = [
    # Generic crawler naming
    'bot', 'crawler', 'spider', 'scraper',
    # Search engines
    'googlebot', 'bingbot', 'slurp', 'duckduckbot', 'baiduspider', 'yandexbot',
    # Social platforms and link previews
    'facebookexternalhit', 'twitterbot', 'linkedinbot', 'whatsapp', 'telegrambot',
    # HTTP client libraries and API tools
    'curl', 'wget', 'python-requests', 'go-http-client', 'java',
    'apache-httpclient', 'okhttp', 'postman', 'zapier',
    # Probing keywords
    'monitor', 'check', 'test', 'scan', 'probe',
    # Performance and uptime services
    'lighthouse', 'pagespeed', 'gtmetrix', 'pingdom', 'uptimerobot', 'newrelic',
]

BOT_PATTERNS: List[Pattern] = [
    re.compile(re.escape(signature), re.IGNORECASE) for signature in BOT_SIGNATURES
]


def is_bot(user_agent: Optional[str]) -> bool:
    """True when the user agent matches any known automated-client signature."""
    if not user_agent:
        return False
    return any(pattern.search(user_agent) for pattern in BOT_PATTERNS)


def matching_signatures(user_agent: Optional[str]) -> List[str]:
    """Signatures that matched, in table order. Useful when auditing the table."""
    if not user_agent:
        return []
    return [
        signature for signature, pattern in zip(BOT_SIGNATURES, BOT_PATTERNS)
        if pattern.search(user_agent)
    ]
