import pytest
from datetime import datetime, timedelta, timezone

from log_insights.analyzer import LogAnalyzer

SAMPLE_IP = "172.16.6.142"
SAMPLE_HOST = "scott.willeke.com"

BROWSER_UA = ("Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
              "(KHTML, like Gecko) Chrome/139.0.0.0 Safari/537.36")
AHREFS_UA = "Mozilla/5.0 (compatible; AhrefsBot/7.0; +http://ahrefs.com/robot/)"
AMAZON_UA = ("Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko; compatible; "
             "Amazonbot/0.1; +https://developer.amazon.com/support/amazonbot) Chrome/119.0.6045.214 Safari/537.36")
CURL_UA = "curl/8.5.0"

# (count, method, url, status, size, referrer, user agent)
SAMPLE_BLOCKS = [
    (40, "GET", "/feed.rss", 200, "5120", "-", "Zapier"),
    (30, "GET", "/", 200, "2048", "https://activescott.com/", BROWSER_UA),
    (10, "GET", "/", 200, "2048", "-", AHREFS_UA),
    (10, "GET", "/posts/hello-world", 200, "4096", "-", AMAZON_UA),
    (15, "GET", "/js/script.js", 200, "1650", "https://example.com/", BROWSER_UA),
    (10, "GET", "/wp-login.php", 404, "-", "-", CURL_UA),
    (6, "GET", "/missing", 404, "512", "https://activescott.com/posts", BROWSER_UA),
]

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_log_time(instant: datetime, offset_minutes: int = -420) -> str:
    """Render a UTC instant the way nginx does, in the given zone offset."""
    local = instant.astimezone(timezone.utc) + timedelta(minutes=offset_minutes)
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return "%02d/%s/%04d:%02d:%02d:%02d %s%02d%02d" % (
        local.day, MONTH_NAMES[local.month - 1], local.year,
        local.hour, local.minute, local.second, sign, hours, minutes
    )


def make_line(instant, url="/", status=200, size="1024", referrer="-", user_agent=BROWSER_UA,
              ip=SAMPLE_IP, method="GET", forwarded_for=None, offset_minutes=-420) -> str:
    line = '%s - - [%s] "%s %s HTTP/1.1" %s %s "%s" "%s"' % (
        ip, format_log_time(instant, offset_minutes), method, url, status, size, referrer, user_agent
    )
    if forwarded_for is not None:
        line += ' "%s"' % forwarded_for
    return line


def build_sample_lines(now: datetime):
    """121 lines from one IP, spaced 20 minutes apart going back from now."""
    lines = []
    for count, method, url, status, size, referrer, user_agent in SAMPLE_BLOCKS:
        for _ in range(count):
            instant = now - timedelta(minutes=20 * len(lines) + 1)
            forwarded = "205.169.39.128" if len(lines) % 3 == 0 else None
            lines.append(make_line(instant, url, status, size, referrer, user_agent,
                                   method=method, forwarded_for=forwarded))
    return lines


@pytest.fixture
def now():
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def sample_log(tmp_path, now):
    path = tmp_path / "sample.log"
    path.write_text("\n".join(build_sample_lines(now)) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test-logs.db'}"


@pytest.fixture
def analyzer(database_url):
    analyzer = LogAnalyzer.connect(database_url)
    yield analyzer
    analyzer.close()
