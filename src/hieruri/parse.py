"""hieruri.parse
The grammar engine: splitting text into URI components, decomposing
authorities, and collapsing dot-segments.
Deliberately lenient: malformed input degrades into a well-defined result
instead of raising.
"""

import dataclasses
import logging
import re

_logger: logging.Logger = logging.getLogger(__name__)

# Each of these ABNF rules is from RFC 3986 or 5234.

# ALPHA = %x41-5A / %x61-7A
_ALPHA: str = r"[A-Za-z]"

# DIGIT = %x30-39
_DIGIT: str = r"[0-9]"

# scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME: str = rf"{_ALPHA}(?:{_ALPHA}|{_DIGIT}|[+\-.])*"
_SCHEME_PAT: re.Pattern[str] = re.compile(_SCHEME)

# port = *DIGIT
# (the empty port is treated as absent)
_PORT: str = rf"{_DIGIT}+"
_PORT_PAT: re.Pattern[str] = re.compile(_PORT)

UNDEFINED_PORT: int = -1
MAX_PORT: int = 65535


class NullArgumentError(TypeError):
    """Raised when a required argument is None."""


@dataclasses.dataclass(frozen=True)
class Authority:
    """The pieces of a [ userinfo "@" ] host [ ":" port ] string."""

    userinfo: str | None
    host: str | None
    port: int = UNDEFINED_PORT


@dataclasses.dataclass(frozen=True)
class ParsedComponents:
    """Everything one pass of the parser finds in a URI-reference."""

    scheme: str | None
    authority: str | None
    userinfo: str | None
    host: str | None
    port: int
    path: str
    query: str | None
    fragment: str | None


def _find_first_of(data: str, chars: str, start: int, end: int) -> int:
    """Index of the first character of data[start:end] that is in chars, or -1."""
    for i in range(max(0, start), min(end, len(data))):
        if data[i] in chars:
            return i
    return -1


def _min_position(a: int, b: int, default: int) -> int:
    """The smaller of two found positions; -1 means "not found"."""
    if a < 0 and b < 0:
        return default
    if a < 0:
        return b
    if b < 0:
        return a
    return min(a, b)


def is_valid_scheme(candidate: str) -> bool:
    return _SCHEME_PAT.fullmatch(candidate) is not None


def parse_port(data: str | None) -> int:
    """Returns the port number, or UNDEFINED_PORT for anything that isn't 0-65535 written in digits."""
    if data is None or _PORT_PAT.fullmatch(data) is None:
        return UNDEFINED_PORT
    # Bail out as soon as the value passes MAX_PORT.
    value: int = 0
    for c in data:
        value = value * 10 + ord(c) - ord("0")
        if value > MAX_PORT:
            return UNDEFINED_PORT
    return value


def split_authority(authority: str | None) -> Authority:
    """Decomposes an authority into userinfo, host and port.
    IP literals keep their brackets, e.g. split_authority("u@[::1]:80") == Authority("u", "[::1]", 80)
    """
    if authority is None:
        return Authority(userinfo=None, host=None)

    userinfo: str | None = None
    rest: str = authority
    before, at, after = authority.rpartition("@")
    if at:
        userinfo = before
        rest = after

    host: str
    port: int = UNDEFINED_PORT
    if rest.startswith("["):
        bracket: int = rest.find("]")
        if bracket < 0:
            _logger.debug("Unterminated IP literal in authority %r; keeping it verbatim", authority)
            host = rest
        else:
            host = rest[: bracket + 1]
            trailer: str = rest[bracket + 1 :]
            if trailer.startswith(":"):
                port = _lenient_port(trailer[1:], authority)
            elif trailer:
                _logger.debug("Ignoring %r after IP literal in authority %r", trailer, authority)
    else:
        host, colon, port_text = rest.rpartition(":")
        if colon:
            port = _lenient_port(port_text, authority)
        else:
            host = rest

    return Authority(userinfo=userinfo, host=host, port=port)


def _lenient_port(data: str, authority: str) -> int:
    port: int = parse_port(data)
    if port == UNDEFINED_PORT and len(data) > 0:
        _logger.debug("Invalid port %r in authority %r; using %d", data, authority, UNDEFINED_PORT)
    return port


def _parse_hierarchical(data: str, start: int, end: int) -> tuple[str | None, str, str | None]:
    """Splits data[start:end] into (authority, path, query).
    This is the same for URIs and for scheme-less references.
    """
    authority: str | None = None
    path_start: int = start
    if data.startswith("//", start, end):
        authority_start: int = start + 2
        path_start = _min_position(
            _find_first_of(data, "/", authority_start, end),
            _find_first_of(data, "?", authority_start, end),
            end,
        )
        authority = data[authority_start:path_start]

    question_mark: int = _find_first_of(data, "?", path_start, end)
    if question_mark < 0:
        return authority, data[path_start:end], None
    return authority, data[path_start:question_mark], data[question_mark + 1 : end]


def parse_components(data: str) -> ParsedComponents:
    """Splits a URI-reference into its components.
    Never fails: text that doesn't look like scheme ":" ... is parsed as a relative reference.
    """
    end: int = len(data)

    fragment: str | None = None
    hash_mark: int = _find_first_of(data, "#", 0, end)
    if hash_mark >= 0:
        fragment = data[hash_mark + 1 :]
        end = hash_mark

    scheme: str | None = None
    start: int = 0
    colon: int = _find_first_of(data, ":", 0, end)
    if colon >= 0:
        if is_valid_scheme(data[:colon]):
            scheme = data[:colon]
            start = colon + 1
        else:
            _logger.debug("%r is not a scheme; parsing %r as a relative reference", data[:colon], data)

    authority, path, query = _parse_hierarchical(data, start, end)
    parts: Authority = split_authority(authority)
    return ParsedComponents(
        scheme=scheme,
        authority=authority,
        userinfo=parts.userinfo,
        host=parts.host,
        port=parts.port,
        path=path,
        query=query,
        fragment=fragment,
    )


_ROOT: str = ""


def collapse_dot_segments(path: str, has_authority: bool) -> str:
    """Removes "." and ".." segments from path.
    Not quite RFC 3986 section 5.2.4: empty segments are dropped, a path only keeps its leading "/"
    when there is an authority, and a ".." with nothing to remove is kept,
    e.g. collapse_dot_segments("../a/./b", False) == "../a/b"
    """
    if len(path) == 0:
        return path

    stack: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            if segment == _ROOT and len(stack) == 0 and has_authority:
                stack.append(_ROOT)
            continue
        if segment == "..":
            # Never climb above the root.
            if len(stack) > 0 and stack != [_ROOT]:
                stack.pop()
            else:
                stack.append("..")
            continue
        stack.append(segment)

    if len(stack) == 0:
        return "/" if has_authority else ""
    if stack == [_ROOT]:
        return "/"
    return "/".join(stack)
