"""Tests for waypoint.linking — share links and linking config."""

import json

import pytest

from waypoint.config import LinkingConfig
from waypoint.linking import generate_share_link, linking_config
from waypoint.parsing import parse_url
from waypoint.routing.registry import RouteRegistry


class TestShareLinks:
    def test_workout_round_trip(self) -> None:
        url = generate_share_link("workout", "42", {"sharedBy": "u1"})
        link = parse_url(url)
        assert link is not None
        assert link.path == "/share/workout/42"
        assert link.params["sharedBy"] == "u1"
        assert link.params["source"] == "app_share"

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            ("workout", "https://bulgeapp.com/share/workout/9?source=app_share"),
            ("achievement", "https://bulgeapp.com/achievement/9?source=app_share"),
            ("invite", "https://bulgeapp.com/invite/9?source=app_share"),
            ("premium", "https://bulgeapp.com/premium?source=app_share"),
            ("recipe", "https://bulgeapp.com?source=app_share"),
        ],
    )
    def test_kinds(self, kind: str, expected: str) -> None:
        assert generate_share_link(kind, "9") == expected

    def test_caller_params_override_source(self) -> None:
        url = generate_share_link("premium", None, {"source": "email"})
        assert url == "https://bulgeapp.com/premium?source=email"

    def test_id_is_quoted(self) -> None:
        url = generate_share_link("invite", "a b/c")
        link = parse_url(url)
        assert link is not None
        assert link.path == "/invite/a%20b%2Fc"

    @pytest.mark.anyio
    async def test_handler_sees_original_id(self, coordinator, navigator, store) -> None:
        url = generate_share_link("invite", "a b/c", {"invitedBy": "u3"})
        await coordinator.handle_url(url)

        invite = json.loads(store.get("pending_invite") or "")
        assert invite["code"] == "a b/c"
        assert navigator.last.params == {
            "screen": "Signup",
            "params": {"inviteCode": "a b/c", "invitedBy": "u3"},
        }

    def test_custom_base_url(self) -> None:
        config = LinkingConfig(base_url="https://staging.bulgeapp.com/")
        url = generate_share_link("achievement", 3, config=config)
        assert url == "https://staging.bulgeapp.com/achievement/3?source=app_share"

    def test_generated_links_resolve(self, coordinator) -> None:
        registry: RouteRegistry = coordinator.registry
        expected = {
            "workout": "/share/workout/:id",
            "achievement": "/achievement/:id",
            "invite": "/invite/:code",
            "premium": "/premium",
        }
        for kind, pattern in expected.items():
            link = parse_url(generate_share_link(kind, "1"))
            assert link is not None
            match = registry.resolve(link.path)
            assert match is not None
            assert match.route.pattern == pattern


def test_linking_config_prefixes() -> None:
    config = linking_config(LinkingConfig(scheme="bulge-dev"))
    assert config["prefixes"] == ["https://bulgeapp.com", "bulge-dev://"]
    screens = config["config"]["screens"]
    assert screens["Auth"]["screens"]["Login"] == "login"
    assert screens["SharedWorkout"] == "share/workout/:id"
