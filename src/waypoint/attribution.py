"""Referral, campaign, and invite attribution.

Each record lives under its own storage key and is overwritten by the
latest link (last write wins, no expiry). Writes are best-effort: a
failing store is logged and never blocks navigation.
"""

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from waypoint.clock import Clock, now_ms
from waypoint.config import LinkingConfig
from waypoint.storage import KeyValueStore, load_json, save_json

logger = logging.getLogger("waypoint.attribution")


@dataclass(frozen=True, slots=True)
class ReferralData:
    """Who referred the user, from ``ref``/``referrer`` query params."""

    referrer: str
    source: str | None = None
    medium: str | None = None
    campaign: str | None = None
    timestamp: int = 0


@dataclass(frozen=True, slots=True)
class CampaignAttribution:
    """Marketing campaign a user arrived through."""

    campaign: str
    source: str | None = None
    medium: str | None = None
    content: str | None = None
    timestamp: int = 0


@dataclass(frozen=True, slots=True)
class PendingInvite:
    """An invite code held for the signup flow."""

    code: str
    invited_by: str | None = None
    timestamp: int = 0


T = TypeVar("T")


def _build(cls: type[T], data: Any) -> T | None:
    if not isinstance(data, Mapping):
        return None
    try:
        return cls(**data)
    except TypeError:
        return None


class AttributionRecorder:
    """Persists attribution metadata extracted from incoming links."""

    __slots__ = ("_clock", "_config", "_store")

    def __init__(
        self,
        store: KeyValueStore,
        *,
        config: LinkingConfig | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._store = store
        self._config = config or LinkingConfig()
        self._clock = clock

    async def record_referral(self, params: Mapping[str, str]) -> ReferralData | None:
        """Store referral data if *params* carries ``ref`` or ``referrer``."""
        referrer = params.get("ref") or params.get("referrer")
        if not referrer:
            return None
        data = ReferralData(
            referrer=referrer,
            source=params.get("source"),
            medium=params.get("medium"),
            campaign=params.get("campaign"),
            timestamp=self._clock(),
        )
        await self._save(self._config.referral_key, asdict(data))
        return data

    async def record_campaign(
        self,
        campaign: str,
        *,
        source: str | None = None,
        medium: str | None = None,
        content: str | None = None,
    ) -> CampaignAttribution:
        """Store campaign attribution ahead of campaign navigation."""
        data = CampaignAttribution(
            campaign=campaign,
            source=source,
            medium=medium,
            content=content,
            timestamp=self._clock(),
        )
        await self._save(self._config.campaign_key, asdict(data))
        return data

    async def record_invite(self, code: str, invited_by: str | None = None) -> PendingInvite:
        """Hold an invite code for the signup flow."""
        data = PendingInvite(code=code, invited_by=invited_by, timestamp=self._clock())
        await self._save(self._config.invite_key, asdict(data))
        return data

    async def referral(self) -> ReferralData | None:
        return _build(ReferralData, await self._load(self._config.referral_key))

    async def campaign(self) -> CampaignAttribution | None:
        return _build(CampaignAttribution, await self._load(self._config.campaign_key))

    async def invite(self) -> PendingInvite | None:
        return _build(PendingInvite, await self._load(self._config.invite_key))

    async def _save(self, key: str, value: dict[str, Any]) -> None:
        result = await save_json(self._store, key, value)
        if not result:
            logger.warning("Failed to store %s: %s", key, result.error)

    async def _load(self, key: str) -> Any:
        result = await load_json(self._store, key)
        if not result:
            logger.warning("Failed to load %s: %s", key, result.error)
            return None
        return result.value
