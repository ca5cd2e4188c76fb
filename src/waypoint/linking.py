"""Outbound links — share URLs and the navigation framework's linking config.

Share links are the inverse of parsing: every generated URL parses back
to a path in the default route table, with ``source=app_share`` marking
where it came from.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode

from waypoint.config import LinkingConfig

# Content type -> path template under the base URL
SHARE_PATHS: dict[str, str] = {
    "workout": "/share/workout/{id}",
    "achievement": "/achievement/{id}",
    "invite": "/invite/{id}",
    "premium": "/premium",
}


def generate_share_link(
    kind: str,
    id: str | int | None = None,
    params: Mapping[str, Any] | None = None,
    *,
    config: LinkingConfig | None = None,
) -> str:
    """Build a canonical shareable URL.

    ``source`` is set to the configured share marker, then caller params
    are applied on top::

        >>> generate_share_link("workout", "42", {"sharedBy": "u1"})
        'https://bulgeapp.com/share/workout/42?source=app_share&sharedBy=u1'

    Unknown kinds fall back to the bare base URL with the query string.
    """
    cfg = config or LinkingConfig()
    query = urlencode({"source": cfg.share_source, **(params or {})})
    base = cfg.base_url.rstrip("/")

    template = SHARE_PATHS.get(kind)
    if template is None:
        return f"{base}?{query}"
    path = template.format(id=quote(str(id if id is not None else ""), safe=""))
    return f"{base}{path}?{query}"


def linking_config(config: LinkingConfig | None = None) -> dict[str, Any]:
    """Return the prefix and screen→path table for the navigation framework."""
    cfg = config or LinkingConfig()
    return {
        "prefixes": [cfg.base_url, cfg.scheme_prefix],
        "config": {
            "screens": {
                "Auth": {
                    "screens": {
                        "Login": "login",
                        "Signup": "signup",
                        "ResetPassword": "reset-password",
                    },
                },
                "Main": {
                    "screens": {
                        "Dashboard": "dashboard",
                        "Workout": "workout",
                        "WorkoutDetail": "workout/:id",
                        "Achievements": "achievements",
                        "Premium": "premium",
                    },
                },
                "SharedWorkout": "share/workout/:id",
                "Help": "help",
                "Campaign": "campaign/:name",
            },
        },
    }
