"""Single-slot buffer for links that arrive before navigation is ready.

Holds at most one link. A newer link overwrites the held one; there is
no queue. ``take()`` empties the slot, so a held link is replayed once.
"""

from waypoint.parsing import ParsedLink


class PendingLinkSlot:
    """``empty | holding(ParsedLink)``."""

    __slots__ = ("_link",)

    def __init__(self) -> None:
        self._link: ParsedLink | None = None

    def hold(self, link: ParsedLink) -> ParsedLink | None:
        """Hold *link*, returning the link it replaced (if any)."""
        replaced = self._link
        self._link = link
        return replaced

    def take(self) -> ParsedLink | None:
        """Return the held link and empty the slot."""
        link = self._link
        self._link = None
        return link

    def peek(self) -> ParsedLink | None:
        return self._link

    @property
    def is_empty(self) -> bool:
        return self._link is None

    def __bool__(self) -> bool:
        return self._link is not None

    def __repr__(self) -> str:
        if self._link is None:
            return "PendingLinkSlot(empty)"
        return f"PendingLinkSlot(holding={self._link.original_url!r})"
