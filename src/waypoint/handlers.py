"""Built-in link handlers — the product's route table.

``LinkHandlers`` binds each handler to the navigator, auth gate,
attribution recorder, and analytics tracker. ``register_default_handlers``
installs them into a registry, most specific pattern first.

Every handler has the ``(params, path)`` shape of ``RouteHandler``.
"""

from collections.abc import Mapping
from typing import Any

from waypoint._internal.invoke import invoke
from waypoint.analytics import Tracker
from waypoint.attribution import AttributionRecorder
from waypoint.auth import AuthGate
from waypoint.navigation import NavRoute, Navigator, navigate_to_default, screen
from waypoint.routing.pattern import extract_path_param
from waypoint.routing.registry import RouteRegistry

# Campaign name -> (navigator target, screen, extra params)
CAMPAIGN_SCREENS: dict[str, tuple[str, str, dict[str, Any]]] = {
    "new-year-fitness": ("Campaign", "NewYearFitness", {}),
    "summer-shred": ("Campaign", "SummerShred", {}),
    "premium-trial": ("Main", "Premium", {"trial": True}),
}


class LinkHandlers:
    """The handlers behind the default route table."""

    __slots__ = ("_gate", "_navigator", "_recorder", "_tracker")

    def __init__(
        self,
        navigator: Navigator,
        gate: AuthGate,
        recorder: AttributionRecorder,
        tracker: Tracker,
    ) -> None:
        self._navigator = navigator
        self._gate = gate
        self._recorder = recorder
        self._tracker = tracker

    async def _navigate(self, target: str, params: dict[str, Any]) -> None:
        await invoke(self._navigator.navigate, target, params)

    async def _reset_to_auth(self, name: str, params: Mapping[str, str]) -> None:
        route = NavRoute("Auth", state=(NavRoute(name, dict(params)),))
        await invoke(self._navigator.reset_to, [route])

    async def _gated(self, gate_screen: str, main_screen: str, params: dict[str, Any]) -> None:
        if await self._gate.require(gate_screen, params):
            await self._navigate("Main", screen(main_screen, params))

    # -- Authentication ---------------------------------------------------

    async def login(self, params: Mapping[str, str], path: str) -> None:
        await self._tracker.track("deep_link_login", {"source": params.get("source")})
        await self._reset_to_auth("Login", params)

    async def signup(self, params: Mapping[str, str], path: str) -> None:
        await self._tracker.track(
            "deep_link_signup",
            {"source": params.get("source"), "campaign": params.get("campaign")},
        )
        await self._reset_to_auth("Signup", params)

    async def reset_password(self, params: Mapping[str, str], path: str) -> None:
        token = params.get("token")
        await self._tracker.track("deep_link_password_reset", {"has_token": bool(token)})
        await self._navigate(
            "Auth", screen("ResetPassword", {"token": token, "email": params.get("email")})
        )

    # -- Content ----------------------------------------------------------

    async def workout(self, params: Mapping[str, str], path: str) -> None:
        workout_id = extract_path_param(path, "/workout/:id")
        await self._tracker.track(
            "deep_link_workout", {"workout_id": workout_id, "source": params.get("source")}
        )
        await self._gated("Workout", "WorkoutDetail", {"workoutId": workout_id, **params})

    async def achievement(self, params: Mapping[str, str], path: str) -> None:
        achievement_id = extract_path_param(path, "/achievement/:id")
        await self._tracker.track(
            "deep_link_achievement",
            {"achievement_id": achievement_id, "source": params.get("source")},
        )
        if await self._gate.require("Achievement", {"achievementId": achievement_id, **params}):
            await self._navigate(
                "Main", screen("Achievements", {"selectedAchievement": achievement_id, **params})
            )

    async def challenge(self, params: Mapping[str, str], path: str) -> None:
        challenge_id = extract_path_param(path, "/challenge/:id")
        await self._tracker.track(
            "deep_link_challenge", {"challenge_id": challenge_id, "source": params.get("source")}
        )
        await self._gated("Challenge", "ChallengeDetail", {"challengeId": challenge_id, **params})

    # -- Social -----------------------------------------------------------

    async def shared_workout(self, params: Mapping[str, str], path: str) -> None:
        workout_id = extract_path_param(path, "/share/workout/:id")
        await self._tracker.track(
            "deep_link_shared_workout",
            {
                "workout_id": workout_id,
                "shared_by": params.get("sharedBy"),
                "source": params.get("source"),
            },
        )
        # Previews are open to anonymous users
        await self._navigate(
            "SharedWorkout",
            {"workoutId": workout_id, "sharedBy": params.get("sharedBy"), **params},
        )

    async def invite(self, params: Mapping[str, str], path: str) -> None:
        invite_code = extract_path_param(path, "/invite/:code") or ""
        invited_by = params.get("invitedBy")
        await self._tracker.track(
            "deep_link_invite", {"invite_code": invite_code, "invited_by": invited_by}
        )
        await self._recorder.record_invite(invite_code, invited_by)

        if await self._gate.is_authenticated():
            await self._navigate("Main", screen("ProcessInvite", {"inviteCode": invite_code, **params}))
        else:
            await self._navigate(
                "Auth", screen("Signup", {"inviteCode": invite_code, "invitedBy": invited_by})
            )

    async def friend(self, params: Mapping[str, str], path: str) -> None:
        friend_id = extract_path_param(path, "/friend/:id")
        await self._tracker.track(
            "deep_link_friend", {"friend_id": friend_id, "source": params.get("source")}
        )
        await self._gated("FriendProfile", "FriendProfile", {"friendId": friend_id, **params})

    # -- Marketing --------------------------------------------------------

    async def campaign(self, params: Mapping[str, str], path: str) -> None:
        name = extract_path_param(path, "/campaign/:name") or ""
        await self._tracker.track(
            "deep_link_campaign",
            {"campaign_name": name, "source": params.get("source"), "medium": params.get("medium")},
        )
        await self._recorder.record_campaign(
            name,
            source=params.get("source"),
            medium=params.get("medium"),
            content=params.get("content"),
        )

        entry = CAMPAIGN_SCREENS.get(name)
        if entry is None:
            await navigate_to_default(
                self._navigator, self._tracker, params, reason="unknown_campaign", path=path
            )
            return
        target, campaign_screen, extra = entry
        await self._navigate(target, screen(campaign_screen, {**params, **extra}))

    async def promo(self, params: Mapping[str, str], path: str) -> None:
        code = extract_path_param(path, "/promo/:code")
        await self._tracker.track(
            "deep_link_promo", {"promo_code": code, "source": params.get("source")}
        )
        await self._gated("Premium", "Premium", {"promoCode": code, **params})

    # -- Premium ----------------------------------------------------------

    async def premium(self, params: Mapping[str, str], path: str) -> None:
        await self._tracker.track(
            "deep_link_premium", {"source": params.get("source"), "promo": params.get("promo")}
        )
        await self._gated("Premium", "Premium", dict(params))

    async def subscription(self, params: Mapping[str, str], path: str) -> None:
        await self._tracker.track("deep_link_subscription", {"source": params.get("source")})
        await self._gated("Subscription", "Subscription", dict(params))

    # -- Help -------------------------------------------------------------

    async def help(self, params: Mapping[str, str], path: str) -> None:
        help_path = path.removeprefix("/help/")
        await self._tracker.track(
            "deep_link_help", {"help_path": help_path, "source": params.get("source")}
        )
        await self._navigate("Help", screen("HelpDetail", {"path": help_path, **params}))

    async def support(self, params: Mapping[str, str], path: str) -> None:
        await self._tracker.track("deep_link_support", {"source": params.get("source")})
        await self._navigate("Help", screen("Support", params))


def register_default_handlers(registry: RouteRegistry, handlers: LinkHandlers) -> None:
    """Install the product route table, most specific pattern first."""
    # Authentication
    registry.register("/login", handlers.login)
    registry.register("/signup", handlers.signup)
    registry.register("/reset-password", handlers.reset_password)

    # Content
    registry.register("/workout/:id", handlers.workout)
    registry.register("/achievement/:id", handlers.achievement)
    registry.register("/challenge/:id", handlers.challenge)

    # Social
    registry.register("/share/workout/:id", handlers.shared_workout)
    registry.register("/invite/:code", handlers.invite)
    registry.register("/friend/:id", handlers.friend)

    # Marketing
    registry.register("/campaign/:name", handlers.campaign)
    registry.register("/promo/:code", handlers.promo)

    # Premium
    registry.register("/premium", handlers.premium)
    registry.register("/subscription", handlers.subscription)

    # Support and help
    registry.register("/help/*", handlers.help)
    registry.register("/support", handlers.support)
