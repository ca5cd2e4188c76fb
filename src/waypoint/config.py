"""Linking configuration.

LinkingConfig is a frozen dataclass: link prefixes, the auth resume window,
and the storage keys every component reads and writes.
"""

from dataclasses import dataclass

from waypoint.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class LinkingConfig:
    """Deep-link configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = LinkingConfig(scheme="bulge-dev", base_url="https://staging.bulgeapp.com")
    """

    # Link prefixes
    scheme: str = "bulge"
    base_url: str = "https://bulgeapp.com"

    # Share links
    share_source: str = "app_share"

    # Auth resume window (epoch milliseconds)
    pending_navigation_ttl_ms: int = 3_600_000

    # Storage keys
    pending_navigation_key: str = "pending_navigation"
    referral_key: str = "referral_data"
    campaign_key: str = "campaign_attribution"
    invite_key: str = "pending_invite"
    auth_token_key: str = "auth_token"

    def __post_init__(self) -> None:
        if not self.scheme or "://" in self.scheme:
            msg = f"scheme must be a bare scheme name like 'bulge', got {self.scheme!r}"
            raise ConfigurationError(msg)
        if not self.base_url.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got {self.base_url!r}"
            raise ConfigurationError(msg)
        if self.pending_navigation_ttl_ms < 0:
            msg = "pending_navigation_ttl_ms must be >= 0"
            raise ConfigurationError(msg)

    @property
    def scheme_prefix(self) -> str:
        """The app-scheme prefix, e.g. ``bulge://``."""
        return f"{self.scheme}://"
