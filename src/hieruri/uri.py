"""hieruri.uri
An immutable, hierarchical URI value with RFC 3986 reference resolution.
"""

import dataclasses
import functools

from typing import Self

from .parse import (
    Authority,
    NullArgumentError,
    ParsedComponents,
    collapse_dot_segments,
    parse_components,
    split_authority,
)

# The fields that take part in equality, hashing and ordering.
# userinfo, host and port are derived from authority, and raw is just the input text.
_COMPARED_FIELDS: tuple[str, ...] = ("scheme", "authority", "path", "query", "fragment")


@functools.total_ordering
@dataclasses.dataclass(frozen=True, repr=False)
class URI:
    """A class to hold a hierarchical URI-Reference. Use parse_uri (or URI.create) to make one from text."""

    scheme: str | None
    authority: str | None
    userinfo: str | None = dataclasses.field(compare=False)
    host: str | None = dataclasses.field(compare=False)
    port: int = dataclasses.field(compare=False)
    path: str
    query: str | None
    fragment: str | None
    raw: str = dataclasses.field(compare=False)

    @classmethod
    def create(cls: type[Self], data: str) -> Self:
        return parse_uri(data)

    def is_absolute(self: Self) -> bool:
        return self.scheme is not None

    def is_opaque(self: Self) -> bool:
        # Only hierarchical URIs are supported.
        return False

    def to_string(self: Self) -> str:
        return _compose(self.scheme, self.authority, self.path, self.query, self.fragment)

    def to_ascii_string(self: Self) -> str:
        """Same as to_string; hosts are not punycoded and nothing is percent-encoded."""
        return self.to_string()

    def __str__(self: Self) -> str:
        return self.to_string()

    def __repr__(self: Self) -> str:
        return f"{self.__class__.__name__}({self.to_string()!r})"

    def compare_to(self: Self, other: "URI") -> int:
        """Compares scheme, authority, path, query and fragment in that order.
        None sorts before every string.
        """
        if other is None:
            raise NullArgumentError("other")
        for name in _COMPARED_FIELDS:
            result: int = _compare_optional(getattr(self, name), getattr(other, name))
            if result != 0:
                return result
        return 0

    def __lt__(self: Self, other: object) -> bool:
        if not isinstance(other, URI):
            return NotImplemented
        return self.compare_to(other) < 0

    def normalize(self: Self) -> Self:
        """Collapses dot-segments in the path. Returns self if there is nothing to do."""
        if len(self.path) == 0:
            return self
        path: str = collapse_dot_segments(self.path, self.authority is not None)
        if path == self.path:
            return self
        return build_uri(
            scheme=self.scheme,
            authority=self.authority,
            path=path,
            query=self.query,
            fragment=self.fragment,
        )

    def resolve(self: Self, ref: "URI | str") -> "URI":
        """Implementation of the "Transform References" algorithm from RFC 3986 section 5.2.2,
        using this URI as the base.
        """
        r: URI = _as_uri(ref, "ref")

        if r.scheme is not None:
            return r.normalize()

        if r.authority is not None:
            return build_uri(
                scheme=self.scheme,
                authority=r.authority,
                path=collapse_dot_segments(r.path, True),
                query=r.query,
                fragment=r.fragment,
            )

        if len(r.path) == 0:
            return build_uri(
                scheme=self.scheme,
                authority=self.authority,
                path=self.path,
                query=r.query if r.query is not None else self.query,
                fragment=r.fragment,
            )

        return build_uri(
            scheme=self.scheme,
            authority=self.authority,
            path=collapse_dot_segments(_merge_paths(self, r), self.authority is not None),
            query=r.query,
            fragment=r.fragment,
        )

    def relativize(self: Self, other: "URI") -> "URI":
        """Inverse of resolve: a reference that resolves against this URI to other.
        Returns other unchanged when there is no such reference with a shared path prefix.
        """
        if other is None:
            raise NullArgumentError("other")
        if self.scheme != other.scheme or self.authority != other.authority:
            return other

        prefix: str = _directory_prefix(self.path)
        if not other.path.startswith(prefix):
            return other

        path: str = other.path[len(prefix) :]
        if path.startswith("/"):
            path = path[1:]
        return build_uri(path=path, query=other.query, fragment=other.fragment)


def parse_uri(data: str) -> URI:
    """Lenient URI-Reference parser.
    Anything that is a str parses; e.g. an invalid port becomes -1 and a bad scheme makes the whole thing relative.
    """
    if data is None:
        raise NullArgumentError("URI string is None")
    if not isinstance(data, str):
        raise TypeError(f"Expected str, got {type(data).__name__}")
    parts: ParsedComponents = parse_components(data)
    return URI(
        scheme=parts.scheme,
        authority=parts.authority,
        userinfo=parts.userinfo,
        host=parts.host,
        port=parts.port,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
        raw=data,
    )


def build_uri(
    *,
    scheme: str | None = None,
    authority: str | None = None,
    path: str | None = "",
    query: str | None = None,
    fragment: str | None = None,
) -> URI:
    """Assembles a URI from components. userinfo, host and port are always derived from authority."""
    if path is None:
        path = ""
    parts: Authority = split_authority(authority)
    return URI(
        scheme=scheme,
        authority=authority,
        userinfo=parts.userinfo,
        host=parts.host,
        port=parts.port,
        path=path,
        query=query,
        fragment=fragment,
        raw=_compose(scheme, authority, path, query, fragment),
    )


def _as_uri(ref: "URI | str", name: str) -> URI:
    if ref is None:
        raise NullArgumentError(name)
    if isinstance(ref, str):
        return parse_uri(ref)
    if not isinstance(ref, URI):
        raise TypeError(f"Cannot resolve a {type(ref).__name__}")
    return ref


def _compose(
    scheme: str | None, authority: str | None, path: str, query: str | None, fragment: str | None
) -> str:
    """Component recomposition, as in RFC 3986 section 5.3"""
    result: str = ""
    if scheme is not None:
        result += f"{scheme}:"
    if authority is not None:
        result += f"//{authority}"
        if len(path) > 0 and not path.startswith("/"):
            result += "/"
    result += path
    if query is not None:
        result += f"?{query}"
    if fragment is not None:
        result += f"#{fragment}"
    return result


def _compare_optional(a: str | None, b: str | None) -> int:
    """Orders by UTF-16 code unit, so astral characters sort before U+E000-U+FFFF."""
    if a == b:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    return -1 if _code_units(a) < _code_units(b) else 1


def _code_units(data: str) -> bytes:
    # Big-endian UTF-16 bytes compare in the same order as the code units they encode.
    return data.encode("utf-16-be", errors="surrogatepass")


def _merge_paths(base: URI, r: URI) -> str:
    """Implementation of the "merge" routine defined in RFC 3986 section 5.2.3"""
    if base.authority is not None and len(base.path) == 0:
        return f"/{r.path}"
    dirname, slash, _ = base.path.rpartition("/")
    return dirname + slash + r.path


def _directory_prefix(path: str) -> str:
    """Everything up to and including the last "/" of path."""
    dirname, slash, _ = path.rpartition("/")
    return dirname + slash
