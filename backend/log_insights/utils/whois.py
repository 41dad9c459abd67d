import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional

import requests

from log_insights.config import settings
from log_insights.exceptions import LookupFailure

logger = logging.getLogger(__name__)

class OrganizationLookup:
    """
    Best-effort organization names for IP addresses via RDAP.

    Owns its cache: one entry per IP, written once (empty string on failure)
    and kept for the lifetime of the object.
    """

    def __init__(self, session: Optional[requests.Session] = None, url: str = None, timeout: float = None):
        self.session = session or requests.Session()
        self.url = url or settings.RDAP_URL
        self.timeout = timeout if timeout is not None else settings.WHOIS_TIMEOUT
        self.cache: Dict[str, str] = {}

    def lookup(self, ip: str) -> str:
        """Organization for one IP, or "" when it cannot be determined."""
        if ip in self.cache:
            return self.cache[ip]

        try:
            organization = self._fetch(ip)
        except LookupFailure as e:
            logger.warning("Failed to look up organization for %s: %s", ip, e)
            organization = ""

        self.cache[ip] = organization
        return organization

    def lookup_many(self, ips: Iterable[str], workers: int = None) -> Dict[str, str]:
        """Organizations for several IPs; uncached ones are fetched concurrently."""
        ips = list(ips)
        pending = sorted({ip for ip in ips if ip not in self.cache})

        if pending:
            with ThreadPoolExecutor(max_workers=workers or settings.WHOIS_WORKERS) as pool:
                fetched = list(pool.map(self._fetch_quietly, pending))
            for ip, organization in zip(pending, fetched):
                self.cache.setdefault(ip, organization)

        return {ip: self.cache[ip] for ip in ips}

    def _fetch_quietly(self, ip: str) -> str:
        try:
            return self._fetch(ip)
        except LookupFailure as e:
            logger.warning("Failed to look up organization for %s: %s", ip, e)
            return ""

    def _fetch(self, ip: str) -> str:
        try:
            response = self.session.get(self.url.format(ip=ip), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise LookupFailure(str(e)) from e

        organization = extract_organization(data)
        if not organization:
            logger.debug("No organization found in RDAP data for %s", ip)
        return organization


def extract_organization(data: Dict) -> str:
    """
    Pull an organization name out of an RDAP IP network response.
    Prefers the registrant's vCard name, then the network name and handle.
    """
    if not isinstance(data, dict):
        return ""

    for entity in data.get("entities") or []:
        if "registrant" not in (entity.get("roles") or []):
            continue
        name = _vcard_name(entity.get("vcardArray"))
        if name:
            return name

    for key in ("name", "handle"):
        value = data.get(key)
        if isinstance(value, list):
            value = value[0] if value else ""
        if value:
            return str(value).strip()

    return ""


def _vcard_name(vcard) -> str:
    # jCard: ["vcard", [["fn", {}, "text", "Example Org"], ...]]
    if not isinstance(vcard, list) or len(vcard) < 2:
        return ""
    for prop in vcard[1]:
        if isinstance(prop, list) and len(prop) >= 4 and prop[0] == "fn":
            return str(prop[3]).strip()
    return ""
