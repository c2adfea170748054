"""sortie: in-process HTTP scenarios for ASGI applications.

Usage:
    from sortie import Content, RequestDescriptor, ScenarioHost

    request = RequestDescriptor("GET", "http://localhost/api/search?q=test")

    with ScenarioHost(app) as host:
        host.scenario(lambda s: s.from_request(request))
"""

from sortie.adapter import from_request
from sortie.errors import (
    ContentReadError,
    ErrorCode,
    InvalidDescriptorError,
    MissingDescriptorError,
    ScenarioAssertionError,
    ScenarioConfigurationError,
    SortieError,
    UnsupportedMethodError,
)
from sortie.host import ScenarioHost, ScenarioResult
from sortie.request import Content, Headers, MediaType, RequestDescriptor, from_httpx_request
from sortie.scenario import Scenario, SendExpression, UrlExpression

__all__ = [
    "Content",
    "ContentReadError",
    "ErrorCode",
    "Headers",
    "InvalidDescriptorError",
    "MediaType",
    "MissingDescriptorError",
    "RequestDescriptor",
    "Scenario",
    "ScenarioAssertionError",
    "ScenarioConfigurationError",
    "ScenarioHost",
    "ScenarioResult",
    "SendExpression",
    "SortieError",
    "UnsupportedMethodError",
    "UrlExpression",
    "from_httpx_request",
    "from_request",
]
