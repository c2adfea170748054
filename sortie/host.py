"""In-process scenario host.

Wraps an ASGI application (FastAPI, Starlette) in a TestClient and runs
scenarios against it without opening a socket. Logging is configured from
settings on first use unless the application already configured structlog.

Usage:
    from sortie.host import ScenarioHost

    with ScenarioHost(app) as host:
        result = host.scenario(lambda s: s.get.url("/health"))
        assert result.read_as_json()["status"] == "healthy"
"""

from collections.abc import Callable
from types import TracebackType
from typing import Any, TypeVar

import httpx
import structlog
from fastapi.testclient import TestClient
from pydantic import BaseModel

from sortie.config import get_settings
from sortie.errors import ScenarioAssertionError
from sortie.observability.logging import get_logger, setup_logging_from_settings
from sortie.scenario import Scenario

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ScenarioResult:
    """Response of an executed scenario."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    def read_as_text(self) -> str:
        return self.response.text

    def read_as_json(self, model: type[ModelT] | None = None) -> Any:
        """Decode the JSON body, validating it against model when given."""
        if model is not None:
            return model.model_validate_json(self.response.content)
        return self.response.json()


class ScenarioHost:
    """Runs scenarios against an ASGI app in-process.

    Attributes:
        app: The wrapped ASGI application
    """

    def __init__(
        self,
        app: Any,
        base_url: str | None = None,
        raise_server_exceptions: bool | None = None,
    ) -> None:
        """Initialize the host.

        Args:
            app: ASGI application to run scenarios against
            base_url: Base URL for relative scenario URLs (defaults to settings)
            raise_server_exceptions: Re-raise unhandled app exceptions
                (defaults to settings)
        """
        if not structlog.is_configured():
            setup_logging_from_settings()

        settings = get_settings()
        self.app = app
        self._client = TestClient(
            app,
            base_url=base_url or settings.host.base_url,
            raise_server_exceptions=(
                settings.host.raise_server_exceptions
                if raise_server_exceptions is None
                else raise_server_exceptions
            ),
        )

    def __enter__(self) -> "ScenarioHost":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying test client."""
        self._client.close()

    def scenario(self, configure: Callable[[Scenario], Any]) -> ScenarioResult:
        """Configure, execute and verify one scenario.

        Args:
            configure: Callback that sets up the request and expectations

        Returns:
            ScenarioResult wrapping the response

        Raises:
            ScenarioConfigurationError: If the scenario has no verb and URL
            ScenarioAssertionError: If any expectation failed
        """
        scenario = Scenario()
        configure(scenario)
        request = scenario.to_request()

        response = self._client.request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
        )

        logger.info(
            "scenario_executed",
            method=request.method,
            url=request.url,
            status_code=response.status_code,
        )

        failures = scenario.evaluate(response)
        if failures:
            logger.debug("scenario_failed", url=request.url, failures=failures)
            raise ScenarioAssertionError(failures, body=response.text)

        return ScenarioResult(response)
