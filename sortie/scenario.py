"""Fluent scenario builder.

A Scenario records one request (verb, URL, headers, body) and the
expectations to check against its response. ScenarioHost executes it.

Usage:
    def configure(scenario: Scenario) -> None:
        scenario.post.url("/api/data").text("test data")
        scenario.status_code_should_be_ok()
        scenario.content_should_be("received")
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, cast

import httpx

from sortie import adapter
from sortie.errors import ScenarioConfigurationError
from sortie.request import RequestDescriptor

# An expectation returns a failure message, or None when it holds
Expectation = Callable[[httpx.Response], str | None]


@dataclass
class ScenarioRequest:
    """The request a configured scenario will send."""

    method: str
    url: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None


class UrlExpression:
    """Entry point for one HTTP verb; nothing is recorded until url() is called."""

    def __init__(self, scenario: "Scenario", method: str) -> None:
        self._scenario = scenario
        self.method = method

    def url(self, relative_url: str) -> "SendExpression":
        self._scenario._set_target(self.method, relative_url)
        return SendExpression(self._scenario)

    def __repr__(self) -> str:
        return f"UrlExpression(method={self.method!r})"


class SendExpression:
    """Continuation returned by UrlExpression.url() for further request configuration."""

    def __init__(self, scenario: "Scenario") -> None:
        self._scenario = scenario

    @property
    def scenario(self) -> "Scenario":
        return self._scenario

    def with_request_header(self, name: str, value: str) -> "SendExpression":
        self._scenario.with_request_header(name, value)
        return self

    def with_bearer_token(self, token: str) -> "SendExpression":
        self._scenario.with_bearer_token(token)
        return self

    def byte_array(self, data: bytes) -> "SendExpression":
        self._scenario.byte_array(data)
        return self

    def text(self, text: str) -> "SendExpression":
        self._scenario.text(text)
        return self

    def json(self, value: Any) -> "SendExpression":
        self._scenario.json(value)
        return self


class Scenario:
    """Request configuration and response expectations for one in-process call."""

    def __init__(self) -> None:
        self._method: str | None = None
        self._url: str | None = None
        self._headers: list[tuple[str, str]] = []
        self._bearer_token: str | None = None
        self._body: bytes | None = None
        self._expected_status: int | None = 200
        self._expectations: list[Expectation] = []

    # Verb entry points

    @property
    def get(self) -> UrlExpression:
        return UrlExpression(self, "GET")

    @property
    def post(self) -> UrlExpression:
        return UrlExpression(self, "POST")

    @property
    def put(self) -> UrlExpression:
        return UrlExpression(self, "PUT")

    @property
    def delete(self) -> UrlExpression:
        return UrlExpression(self, "DELETE")

    @property
    def patch(self) -> UrlExpression:
        return UrlExpression(self, "PATCH")

    @property
    def head(self) -> UrlExpression:
        return UrlExpression(self, "HEAD")

    def from_request(self, request: RequestDescriptor | None) -> SendExpression:
        """Configure this scenario from a RequestDescriptor."""
        return cast(SendExpression, adapter.from_request(self, request))

    def _set_target(self, method: str, relative_url: str) -> None:
        if self._url is not None:
            raise ScenarioConfigurationError(
                f"Scenario already targets {self._method} {self._url}"
            )
        self._method = method
        self._url = relative_url

    # Request configuration

    def with_request_header(self, name: str, value: str) -> "Scenario":
        """Set a request header, replacing any earlier value for the same name."""
        for index, (existing, _) in enumerate(self._headers):
            if existing.lower() == name.lower():
                self._headers[index] = (existing, value)
                return self
        self._headers.append((name, value))
        return self

    def with_bearer_token(self, token: str) -> "Scenario":
        self._bearer_token = token
        return self

    def byte_array(self, data: bytes) -> "Scenario":
        self._body = bytes(data)
        return self

    def text(self, text: str) -> "Scenario":
        self._body = text.encode("utf-8")
        return self.with_request_header("Content-Type", "text/plain; charset=utf-8")

    def json(self, value: Any) -> "Scenario":
        self._body = json.dumps(value, separators=(",", ":")).encode("utf-8")
        return self.with_request_header("Content-Type", "application/json; charset=utf-8")

    def to_request(self) -> ScenarioRequest:
        """Return the request this scenario sends.

        Raises:
            ScenarioConfigurationError: If no verb and URL were configured
        """
        if self._method is None or self._url is None:
            raise ScenarioConfigurationError(
                "Scenario has no request; call e.g. scenario.get.url('/path')"
            )

        headers = list(self._headers)
        if self._bearer_token is not None:
            headers = [(k, v) for k, v in headers if k.lower() != "authorization"]
            headers.append(("Authorization", f"Bearer {self._bearer_token}"))

        return ScenarioRequest(
            method=self._method,
            url=self._url,
            headers=headers,
            body=self._body,
        )

    # Expectations

    def status_code_should_be(self, status_code: int) -> "Scenario":
        self._expected_status = status_code
        return self

    def status_code_should_be_ok(self) -> "Scenario":
        return self.status_code_should_be(200)

    def ignore_status_code(self) -> "Scenario":
        self._expected_status = None
        return self

    def content_should_be(self, expected: str) -> "Scenario":
        def check(response: httpx.Response) -> str | None:
            if response.text != expected:
                return f"Expected content {expected!r}, got {response.text!r}"
            return None

        self._expectations.append(check)
        return self

    def content_should_contain(self, expected: str) -> "Scenario":
        def check(response: httpx.Response) -> str | None:
            if expected not in response.text:
                return f"Expected content to contain {expected!r}"
            return None

        self._expectations.append(check)
        return self

    def header_should_be(self, name: str, expected: str) -> "Scenario":
        def check(response: httpx.Response) -> str | None:
            actual = response.headers.get(name)
            if actual != expected:
                return f"Expected header {name!r} to be {expected!r}, got {actual!r}"
            return None

        self._expectations.append(check)
        return self

    def evaluate(self, response: httpx.Response) -> list[str]:
        """Check every expectation against the response and return the failures."""
        failures: list[str] = []
        if self._expected_status is not None and response.status_code != self._expected_status:
            failures.append(
                f"Expected status code {self._expected_status}, got {response.status_code}"
            )
        for expectation in self._expectations:
            failure = expectation(response)
            if failure is not None:
                failures.append(failure)
        return failures
