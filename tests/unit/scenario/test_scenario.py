"""Unit tests for the fluent scenario builder."""

import httpx
import pytest

from sortie.errors import ScenarioConfigurationError, UnsupportedMethodError
from sortie.request import Content, RequestDescriptor
from sortie.scenario import Scenario, SendExpression


@pytest.fixture
def scenario() -> Scenario:
    return Scenario()


class TestRequestConfiguration:
    """Tests for building the scenario request."""

    def test_entry_point_does_not_configure(self, scenario: Scenario) -> None:
        _ = scenario.get

        with pytest.raises(ScenarioConfigurationError):
            scenario.to_request()

    def test_url_records_method_and_target(self, scenario: Scenario) -> None:
        send = scenario.delete.url("/api/remove")

        assert isinstance(send, SendExpression)
        request = scenario.to_request()
        assert request.method == "DELETE"
        assert request.url == "/api/remove"
        assert request.body is None

    def test_url_twice_raises(self, scenario: Scenario) -> None:
        scenario.get.url("/a")

        with pytest.raises(ScenarioConfigurationError, match="GET /a"):
            scenario.post.url("/b")

    def test_send_expression_chains_to_scenario(self, scenario: Scenario) -> None:
        send = scenario.post.url("/api/data").with_request_header("X-A", "1").text("hi")

        assert send.scenario is scenario
        request = scenario.to_request()
        assert request.headers == [
            ("X-A", "1"),
            ("Content-Type", "text/plain; charset=utf-8"),
        ]
        assert request.body == b"hi"

    def test_header_replaced_case_insensitively(self, scenario: Scenario) -> None:
        scenario.get.url("/a")
        scenario.with_request_header("X-A", "1").with_request_header("x-a", "2")

        assert scenario.to_request().headers == [("X-A", "2")]

    def test_bearer_token_rendered_as_authorization(self, scenario: Scenario) -> None:
        scenario.get.url("/api/secure").with_bearer_token("test-token-123")

        assert scenario.to_request().headers == [("Authorization", "Bearer test-token-123")]

    def test_bearer_token_overrides_raw_authorization(self, scenario: Scenario) -> None:
        scenario.get.url("/api/secure")
        scenario.with_request_header("Authorization", "Basic abc").with_bearer_token("t")

        assert scenario.to_request().headers == [("Authorization", "Bearer t")]

    def test_json_body(self, scenario: Scenario) -> None:
        scenario.post.url("/api/json").json({"name": "test"})

        request = scenario.to_request()
        assert request.body == b'{"name":"test"}'
        assert ("Content-Type", "application/json; charset=utf-8") in request.headers


class TestFromRequest:
    """Tests for Scenario.from_request."""

    def test_matches_native_configuration(self) -> None:
        """A descriptor configures the same request as the fluent API."""
        adapted = Scenario()
        adapted.from_request(
            RequestDescriptor(
                "POST",
                "http://localhost/api/json?v=2",
                headers={"Authorization": "Bearer abc", "X-Custom-Header": "custom-value"},
                content=Content.from_text('{"name":"test"}', media_type="application/json"),
            )
        )

        native = Scenario()
        native.post.url("/api/json?v=2").with_bearer_token("abc").with_request_header(
            "X-Custom-Header", "custom-value"
        ).with_request_header(
            "Content-Type", "application/json; charset=utf-8"
        ).byte_array(b'{"name":"test"}')

        assert adapted.to_request() == native.to_request()

    def test_returns_send_expression(self, scenario: Scenario) -> None:
        send = scenario.from_request(RequestDescriptor("HEAD", "/api/head"))

        assert isinstance(send, SendExpression)
        assert send.scenario is scenario

    def test_unsupported_method_leaves_scenario_unconfigured(self, scenario: Scenario) -> None:
        with pytest.raises(UnsupportedMethodError):
            scenario.from_request(RequestDescriptor("OPTIONS", "/api/test"))

        with pytest.raises(ScenarioConfigurationError):
            scenario.to_request()


class TestEvaluate:
    """Tests for response expectations."""

    def test_default_expects_200(self, scenario: Scenario) -> None:
        assert scenario.evaluate(httpx.Response(200)) == []
        assert scenario.evaluate(httpx.Response(404)) == [
            "Expected status code 200, got 404"
        ]

    def test_status_code_should_be(self, scenario: Scenario) -> None:
        scenario.status_code_should_be(201)

        assert scenario.evaluate(httpx.Response(201)) == []

    def test_ignore_status_code(self, scenario: Scenario) -> None:
        scenario.ignore_status_code()

        assert scenario.evaluate(httpx.Response(500)) == []

    def test_collects_every_failure(self, scenario: Scenario) -> None:
        scenario.content_should_be("ok").header_should_be("X-Result", "yes")

        failures = scenario.evaluate(httpx.Response(500, text="boom"))

        assert failures == [
            "Expected status code 200, got 500",
            "Expected content 'ok', got 'boom'",
            "Expected header 'X-Result' to be 'yes', got None",
        ]

    def test_content_should_contain(self, scenario: Scenario) -> None:
        scenario.content_should_contain("found")

        assert scenario.evaluate(httpx.Response(200, text="item found")) == []
        assert scenario.evaluate(httpx.Response(200, text="nothing")) == [
            "Expected content to contain 'found'"
        ]
