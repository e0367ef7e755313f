"""URL validation and domain allowlist utilities."""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from outsyd_scraper.config.sources import EventSource


def is_valid_url(url: str | None) -> bool:
    """Check if a string is a valid http(s) URL.

    Args:
        url: URL string to validate

    Returns:
        True if valid URL, False otherwise
    """
    if not url:
        return False

    try:
        result = urlparse(url.strip())
        return all([result.scheme in ("http", "https"), result.netloc])
    except ValueError:
        return False


def normalize_domain(domain: str | None) -> str | None:
    """Lowercase a bare domain and strip a leading ``www.``."""
    if not domain:
        return None

    domain = domain.strip().lower().rstrip(".")
    if domain.startswith("www."):
        domain = domain[4:]
    return domain or None


def extract_domain(url: str | None) -> str | None:
    """Extract the allowlist domain from a URL.

    - Lowercases the hostname
    - Strips a leading ``www.``
    - Ignores port and credentials

    Args:
        url: Full URL

    Returns:
        Domain name, or None for unparsable/non-http URLs
    """
    if not is_valid_url(url):
        return None

    try:
        hostname = urlparse(url.strip()).hostname
    except ValueError:
        return None

    return normalize_domain(hostname)


def build_allowlist(sources: Iterable["EventSource"]) -> frozenset[str]:
    """Collect the domains of every source into an allowlist."""
    return frozenset(
        domain for domain in (source.resolved_domain for source in sources) if domain
    )


def is_allowed_url(url: str | None, allowlist: Iterable[str]) -> bool:
    """Check that a URL's host is one of the allowlisted domains.

    Args:
        url: URL to check (caller-supplied scrape target or extracted ticket link)
        allowlist: Normalized domains (see ``build_allowlist``)

    Returns:
        True if allowed, False if not allowed or malformed
    """
    domain = extract_domain(url)
    if domain is None:
        return False
    return domain in allowlist
