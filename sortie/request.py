"""Request descriptor models.

A RequestDescriptor is an immutable description of an HTTP request built
outside the scenario API: method, URI, ordered message headers and optional
content. The adapter in sortie.adapter turns one into scenario calls.

Usage:
    from sortie.request import Content, RequestDescriptor

    request = RequestDescriptor(
        method="POST",
        uri="http://localhost/api/json",
        headers={"Authorization": "Bearer abc123"},
        content=Content.from_text('{"name":"test"}', media_type="application/json"),
    )
"""

import json
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, BinaryIO, TypeAlias

import httpx

from sortie.errors import ContentReadError

HeaderValues: TypeAlias = str | Sequence[str]
HeaderSource: TypeAlias = Mapping[str, HeaderValues] | Iterable[tuple[str, HeaderValues]]

# Headers that describe the body rather than the request envelope
CONTENT_HEADER_NAMES: frozenset[str] = frozenset({
    "allow",
    "content-disposition",
    "content-encoding",
    "content-language",
    "content-length",
    "content-location",
    "content-md5",
    "content-range",
    "content-type",
    "expires",
    "last-modified",
})

# Derived by the transport from the URL and body
TRANSPORT_HEADER_NAMES: frozenset[str] = frozenset({"host", "content-length"})


class Headers:
    """Immutable, insertion-ordered header multimap.

    Names compare case-insensitively. Adding a value under a name that is
    already present appends to that entry, keeping its first position and
    spelling.
    """

    __slots__ = ("_entries",)

    def __init__(self, source: "HeaderSource | Headers | None" = None) -> None:
        entries: list[tuple[str, tuple[str, ...]]] = []
        if source is not None:
            if isinstance(source, Headers):
                pairs: Iterable[tuple[str, HeaderValues]] = list(source)
            elif isinstance(source, Mapping):
                pairs = source.items()
            else:
                pairs = source
            for name, values in pairs:
                entries = _merge(entries, name, values)
        self._entries: tuple[tuple[str, tuple[str, ...]], ...] = tuple(entries)

    def add(self, name: str, value: HeaderValues) -> "Headers":
        """Return a copy with value(s) appended under name."""
        merged = Headers()
        merged._entries = tuple(_merge(list(self._entries), name, value))
        return merged

    def without(self, name: str) -> "Headers":
        """Return a copy with every entry for name removed."""
        remaining = Headers()
        remaining._entries = tuple(
            (key, values) for key, values in self._entries if key.lower() != name.lower()
        )
        return remaining

    def get(self, name: str) -> tuple[str, ...] | None:
        for key, values in self._entries:
            if key.lower() == name.lower():
                return values
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"Headers({list(self._entries)!r})"


def _merge(
    entries: list[tuple[str, tuple[str, ...]]],
    name: str,
    values: HeaderValues,
) -> list[tuple[str, tuple[str, ...]]]:
    new_values = (values,) if isinstance(values, str) else tuple(values)
    for index, (key, existing) in enumerate(entries):
        if key.lower() == name.lower():
            entries[index] = (key, existing + new_values)
            return entries
    entries.append((name, new_values))
    return entries


@dataclass(frozen=True)
class MediaType:
    """A media type with its parameters, e.g. ``application/json; charset=utf-8``."""

    media_type: str
    parameters: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, value: str) -> "MediaType":
        """Parse a Content-Type header value."""
        media_type, *raw_params = (part.strip() for part in value.split(";"))
        parameters = []
        for raw in raw_params:
            if not raw:
                continue
            name, _, param_value = raw.partition("=")
            parameters.append((name.strip().lower(), param_value.strip()))
        return cls(media_type=media_type, parameters=tuple(parameters))

    def __str__(self) -> str:
        rendered = self.media_type
        for name, value in self.parameters:
            rendered += f"; {name}={value}"
        return rendered


@dataclass(frozen=True)
class Content:
    """Request body plus the headers that describe it.

    ``body`` is either the bytes themselves or a readable binary stream that
    is drained once, when the content is applied to a scenario.
    """

    body: bytes | BinaryIO
    content_type: MediaType | None = None
    headers: Headers = field(default_factory=Headers)

    def __post_init__(self) -> None:
        if isinstance(self.content_type, str):
            object.__setattr__(self, "content_type", MediaType.parse(self.content_type))
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))

        # Content-Type lives in content_type only; an explicit content_type wins
        listed = self.headers.get("Content-Type")
        if listed is not None:
            if self.content_type is None:
                object.__setattr__(self, "content_type", MediaType.parse(", ".join(listed)))
            object.__setattr__(self, "headers", self.headers.without("Content-Type"))

    @classmethod
    def from_bytes(cls, data: bytes, content_type: MediaType | str | None = None) -> "Content":
        return cls(body=bytes(data), content_type=_as_media_type(content_type))

    @classmethod
    def from_stream(
        cls, stream: BinaryIO, content_type: MediaType | str | None = None
    ) -> "Content":
        return cls(body=stream, content_type=_as_media_type(content_type))

    @classmethod
    def from_text(
        cls,
        text: str,
        encoding: str = "utf-8",
        media_type: str = "text/plain",
    ) -> "Content":
        """Encode text and declare its charset in the content type."""
        return cls(
            body=text.encode(encoding),
            content_type=MediaType(media_type, (("charset", encoding.lower()),)),
        )

    @classmethod
    def from_json(cls, value: Any) -> "Content":
        """Serialize value as compact UTF-8 JSON."""
        return cls.from_text(
            json.dumps(value, separators=(",", ":")),
            media_type="application/json",
        )

    def with_header(self, name: str, value: HeaderValues) -> "Content":
        """Return a copy with an extra content header.

        A Content-Type passed here replaces ``content_type``.
        """
        if name.lower() == "content-type":
            rendered = value if isinstance(value, str) else ", ".join(value)
            return replace(self, content_type=MediaType.parse(rendered))
        return replace(self, headers=self.headers.add(name, value))


@dataclass(frozen=True, init=False)
class RequestDescriptor:
    """Method, URI, message headers and optional content of one request.

    ``uri`` may be absolute or relative; strings are parsed with httpx.URL.
    A None uri is allowed here and rejected when the descriptor is adapted.
    """

    method: str
    uri: httpx.URL | None
    headers: Headers = field(default_factory=Headers)
    content: Content | None = None

    def __init__(
        self,
        method: str,
        uri: httpx.URL | str | None,
        headers: "HeaderSource | Headers | None" = None,
        content: Content | None = None,
    ) -> None:
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "uri", httpx.URL(uri) if isinstance(uri, str) else uri)
        object.__setattr__(self, "headers", Headers(headers))
        object.__setattr__(self, "content", content)

    def with_header(self, name: str, value: HeaderValues) -> "RequestDescriptor":
        """Return a copy with an extra message header."""
        return RequestDescriptor(
            method=self.method,
            uri=self.uri,
            headers=self.headers.add(name, value),
            content=self.content,
        )


def _as_media_type(value: MediaType | str | None) -> MediaType | None:
    if isinstance(value, str):
        return MediaType.parse(value)
    return value


def from_httpx_request(request: httpx.Request) -> RequestDescriptor:
    """Build a descriptor from an httpx.Request.

    Headers are split into message and content headers by name. Host and
    Content-Length are dropped since the scenario host derives them again.
    The request body is read here; a consumed or async-only stream raises
    ContentReadError.
    """
    try:
        body = request.read()
    except (httpx.StreamError, RuntimeError) as e:
        raise ContentReadError(f"Could not read httpx request body: {e}") from e

    encoding = request.headers.encoding
    message_headers = Headers()
    content_type: MediaType | None = None
    content_headers = Headers()

    for raw_name, raw_value in request.headers.raw:
        name = raw_name.decode(encoding)
        value = raw_value.decode(encoding)
        lowered = name.lower()
        if lowered in TRANSPORT_HEADER_NAMES:
            continue
        if lowered == "content-type":
            content_type = MediaType.parse(value)
        elif lowered in CONTENT_HEADER_NAMES:
            content_headers = content_headers.add(name, value)
        else:
            message_headers = message_headers.add(name, value)

    content = None
    if body or content_type is not None or len(content_headers):
        content = Content(body=body, content_type=content_type, headers=content_headers)

    return RequestDescriptor(
        method=request.method,
        uri=request.url,
        headers=message_headers,
        content=content,
    )
