"""Incoming link decomposition.

Turns a raw URI (app-scheme ``bulge://workout/5`` or universal
``https://bulgeapp.com/workout/5``) into an immutable ``ParsedLink``.
Parsing never raises: anything unusable comes back as ``None`` and the
caller drops the link.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import parse_qsl, urlsplit

logger = logging.getLogger("waypoint.parsing")

# Schemes whose authority is a real host rather than the first path segment
UNIVERSAL_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def _freeze(params: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(params))


@dataclass(frozen=True, slots=True)
class ParsedLink:
    """A decomposed incoming link.

    ``path`` always starts with ``/``. ``params`` is a read-only mapping of
    decoded query parameters (last occurrence wins for repeated keys).
    """

    original_url: str
    hostname: str | None
    path: str = "/"
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.path.startswith("/"):
            object.__setattr__(self, "path", "/" + self.path)
        if not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, "params", _freeze(self.params))

    @property
    def source(self) -> str:
        """The ``source`` query parameter, or ``"unknown"``."""
        return self.params.get("source") or "unknown"


def parse_query(query: str) -> dict[str, str]:
    """Decode a query string into a flat dict.

    Blank values are kept. Repeated keys collapse to the last occurrence::

        >>> parse_query("a=1&b=&a=2")
        {'a': '2', 'b': ''}
    """
    return dict(parse_qsl(query, keep_blank_values=True))


def parse_url(url: str | None) -> ParsedLink | None:
    """Decompose *url* into a ``ParsedLink``.

    Returns ``None`` for empty or non-string input, URIs without a scheme,
    and anything ``urllib.parse`` rejects.

    Examples::

        "bulge://achievement/7?source=push" -> path="/achievement/7", params={"source": "push"}
        "https://bulgeapp.com/workout/5"     -> path="/workout/5", hostname="bulgeapp.com"
        "bulge://premium"                    -> path="/premium"
    """
    if not url or not isinstance(url, str):
        return None

    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
        params = parse_query(parts.query)
    except ValueError:
        logger.debug("Dropping unparseable link %r", url)
        return None

    if not parts.scheme:
        logger.debug("Dropping link without scheme %r", url)
        return None

    pathname = parts.path
    if parts.scheme.lower() not in UNIVERSAL_SCHEMES and parts.netloc:
        # App-scheme links carry the first path segment in the authority slot
        pathname = f"/{parts.netloc}{pathname}"

    path = pathname
    if hostname and not path:
        path = f"/{hostname}"

    return ParsedLink(
        original_url=url,
        hostname=hostname or None,
        path=path or "/",
        params=params,
    )
