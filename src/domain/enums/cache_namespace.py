"""Cache namespace enumeration.

Each namespace groups one class of upstream fact and carries the TTL that
matches how often that fact actually changes.

Usage:
    from src.domain.enums import CacheNamespace

    await cache.get_or_set(domain, fetch_whois, namespace=CacheNamespace.WHOIS)
"""

from enum import Enum

_DEFAULT_TTL_SECONDS = 3600


class CacheNamespace(str, Enum):
    """Namespaces for cached lookup results.

    Key Format:
        cache:{namespace}:{key}
    """

    WHOIS = "whois"
    """WHOIS registration data. Changes rarely (1 day)."""

    DNS = "dns"
    """DNS records (1 hour)."""

    WAYBACK = "wayback"
    """Wayback Machine snapshot listings. Historical, nearly static (7 days)."""

    SECURITY = "security"
    """Reputation and blocklist checks (12 hours)."""

    SEO = "seo"
    """SEO metrics (12 hours)."""

    STATUS = "status"
    """Domain availability status (1 hour)."""

    ANALYSIS = "analysis"
    """Composite analysis results (1 hour)."""

    @property
    def default_ttl(self) -> int:
        """TTL in seconds applied when the caller does not pass one.

        Returns:
            int: Seconds before entries in this namespace expire.
        """
        return _NAMESPACE_TTLS.get(self, _DEFAULT_TTL_SECONDS)


_NAMESPACE_TTLS: dict[CacheNamespace, int] = {
    CacheNamespace.WHOIS: 86400,
    CacheNamespace.DNS: 3600,
    CacheNamespace.WAYBACK: 604800,
    CacheNamespace.SECURITY: 43200,
    CacheNamespace.SEO: 43200,
    CacheNamespace.STATUS: 3600,
}
