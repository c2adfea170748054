"""Adapter from request descriptors to scenario configuration.

Translates a RequestDescriptor into the calls a scenario builder exposes:
the verb entry point and URL, message headers (with bearer tokens routed
through the dedicated call), then content headers and body bytes.

The adapter only relies on the builder protocols below; sortie.scenario
provides the concrete implementation.
"""

from contextlib import closing
from typing import BinaryIO, Protocol

import httpx

from sortie.config import get_settings
from sortie.errors import (
    ContentReadError,
    InvalidDescriptorError,
    MissingDescriptorError,
    UnsupportedMethodError,
)
from sortie.request import Content, Headers, RequestDescriptor

BEARER_PREFIX = "Bearer "


class RequestContinuation(Protocol):
    """Configuration surface available once the URL is set."""

    def with_request_header(self, name: str, value: str) -> "RequestContinuation": ...

    def with_bearer_token(self, token: str) -> "RequestContinuation": ...

    def byte_array(self, data: bytes) -> "RequestContinuation": ...


class UrlConfigurator(Protocol):
    """Verb-specific entry point that accepts the relative URL."""

    def url(self, relative_url: str) -> RequestContinuation: ...


class ScenarioBuilder(Protocol):
    """Verb entry points of a scenario."""

    @property
    def get(self) -> UrlConfigurator: ...

    @property
    def post(self) -> UrlConfigurator: ...

    @property
    def put(self) -> UrlConfigurator: ...

    @property
    def delete(self) -> UrlConfigurator: ...

    @property
    def patch(self) -> UrlConfigurator: ...

    @property
    def head(self) -> UrlConfigurator: ...


def from_request(
    scenario: ScenarioBuilder,
    request: RequestDescriptor | None,
    *,
    max_body_bytes: int | None = None,
) -> RequestContinuation:
    """Configure a scenario from a request descriptor.

    Args:
        scenario: The scenario to configure
        request: The request to replay through the scenario
        max_body_bytes: Upper bound for the body read; defaults to
            ``content.max_body_bytes`` from settings

    Returns:
        The continuation returned by the verb entry point's ``url()``

    Raises:
        MissingDescriptorError: request is None
        InvalidDescriptorError: request has no URI
        UnsupportedMethodError: method is not GET, POST, PUT, DELETE, PATCH or HEAD
        ContentReadError: the body could not be drained; message headers
            have already been applied at that point
    """
    if request is None:
        raise MissingDescriptorError()

    if request.uri is None:
        raise InvalidDescriptorError("RequestDescriptor must have a uri")

    url_expression = select_url_expression(scenario, request.method)
    continuation = url_expression.url(relative_url(request.uri))

    apply_message_headers(continuation, request.headers)

    if request.content is not None:
        apply_content(continuation, request.content, max_body_bytes=max_body_bytes)

    return continuation


def relative_url(uri: httpx.URL) -> str:
    """Path plus query of an absolute URI, or a relative URI as written."""
    if uri.is_absolute_url:
        return uri.raw_path.decode("ascii")
    return str(uri)


def select_url_expression(scenario: ScenarioBuilder, method: str) -> UrlConfigurator:
    """Pick the scenario entry point for an HTTP method."""
    match method.upper():
        case "GET":
            return scenario.get
        case "POST":
            return scenario.post
        case "PUT":
            return scenario.put
        case "DELETE":
            return scenario.delete
        case "PATCH":
            return scenario.patch
        case "HEAD":
            return scenario.head
        case _:
            raise UnsupportedMethodError(method)


def apply_message_headers(continuation: RequestContinuation, headers: Headers) -> None:
    """Apply request headers in order, routing bearer credentials separately."""
    for name, values in headers:
        value = ", ".join(values)

        if (
            name.lower() == "authorization"
            and value[: len(BEARER_PREFIX)].lower() == BEARER_PREFIX.lower()
        ):
            continuation.with_bearer_token(value[len(BEARER_PREFIX):])
        else:
            continuation.with_request_header(name, value)


def apply_content(
    continuation: RequestContinuation,
    content: Content,
    *,
    max_body_bytes: int | None = None,
) -> None:
    """Drain the body, then apply Content-Type, other content headers and the bytes."""
    data = read_body(content, max_body_bytes=max_body_bytes)

    if content.content_type is not None:
        continuation.with_request_header("Content-Type", str(content.content_type))

    for name, values in content.headers:
        if name.lower() == "content-type":
            continue
        continuation.with_request_header(name, ", ".join(values))

    continuation.byte_array(data)


def read_body(content: Content, *, max_body_bytes: int | None = None) -> bytes:
    """Read the whole body into memory.

    Streams are closed after the read, so a stream can only be drained once.
    """
    if max_body_bytes is None:
        max_body_bytes = get_settings().content.max_body_bytes

    if isinstance(content.body, (bytes, bytearray, memoryview)):
        data = bytes(content.body)
    else:
        data = _drain(content.body, max_body_bytes)

    if len(data) > max_body_bytes:
        raise ContentReadError(
            f"Request content exceeds the {max_body_bytes} byte limit"
        )

    return bytes(data)


def _drain(stream: BinaryIO, max_body_bytes: int) -> bytes:
    """Read a stream until EOF or until it passes max_body_bytes, then close it.

    Raw streams may return short reads, so reading continues until read()
    returns empty.
    """
    chunks: list[bytes] = []
    total = 0
    try:
        with closing(stream):
            while total <= max_body_bytes:
                chunk = stream.read(max_body_bytes + 1 - total)
                if chunk is None:
                    raise ContentReadError("Request content stream returned no data")
                if not chunk:
                    break
                chunks.append(chunk)
                total += len(chunk)
    except (OSError, ValueError) as e:
        raise ContentReadError(f"Could not read request content: {e}") from e

    return b"".join(chunks)
