"""Pattern compilation and path-parameter extraction.

Pattern syntax:

- a ``:name`` segment captures one non-``/`` segment, percent-decoded
- a ``*`` segment matches any suffix, including ``/``
- everything else is literal
"""

import re
from urllib.parse import unquote

from waypoint.errors import ConfigurationError
from waypoint.routing.route import PathSegment

_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def parse_pattern(pattern: str) -> list[PathSegment]:
    """Split a pattern into segments.

    Examples::

        "/workout/:id" -> [PathSegment("workout"), PathSegment(":id", is_param=True, param_name="id")]
        "/help/*"      -> [PathSegment("help"), PathSegment("*", is_wildcard=True)]

    Raises ``ConfigurationError`` for patterns that do not start with ``/``
    or that use an invalid parameter name.
    """
    if not pattern.startswith("/"):
        msg = f"Route pattern must start with '/': {pattern!r}"
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in pattern.split("/")[1:]:
        if part.startswith(":"):
            name = part[1:]
            if not _NAME.match(name):
                msg = f"Invalid parameter name {name!r} in pattern {pattern!r}"
                raise ConfigurationError(msg)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        elif part == "*":
            segments.append(PathSegment(value=part, is_wildcard=True))
        else:
            segments.append(PathSegment(value=part))
    return segments


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile *pattern* into an anchored regex.

    A ``*`` segment becomes ``.*``, a ``:name`` segment becomes a named
    ``[^/]+`` group, and every other segment is matched literally::

        >>> compile_pattern("/help/*").pattern
        '^/help/.*$'
    """
    pieces: list[str] = []
    seen: set[str] = set()
    for seg in parse_pattern(pattern):
        if seg.is_wildcard:
            pieces.append(".*")
        elif seg.is_param:
            if seg.param_name in seen:
                msg = f"Duplicate parameter name {seg.param_name!r} in pattern {pattern!r}"
                raise ConfigurationError(msg)
            seen.add(seg.param_name or "")
            pieces.append(f"(?P<{seg.param_name}>[^/]+)")
        else:
            pieces.append(re.escape(seg.value))
    return re.compile("^/" + "/".join(pieces) + "$")


def extract_path_param(path: str, pattern: str) -> str | None:
    """Return the decoded path segment aligned with the first ``:name`` segment.

    Walks pattern and path segments pairwise on the raw path, so an encoded
    ``%2F`` stays inside its segment::

        >>> extract_path_param("/invite/a%20b", "/invite/:code")
        'a b'

    Returns ``None`` if the pattern has no parameter or the path is too short.
    """
    path_parts = path.split("/")
    for i, part in enumerate(pattern.split("/")):
        if part.startswith(":"):
            if i < len(path_parts):
                return unquote(path_parts[i])
            return None
    return None


def extract_path_params(path: str, pattern: str) -> dict[str, str]:
    """Return every ``:name`` segment of *pattern* mapped to its decoded value in *path*."""
    path_parts = path.split("/")
    params: dict[str, str] = {}
    for i, part in enumerate(pattern.split("/")):
        if part.startswith(":") and i < len(path_parts):
            params[part[1:]] = unquote(path_parts[i])
    return params
