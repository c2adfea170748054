"""Scenario harness configuration models."""

from pydantic import BaseModel, Field


class ContentConfig(BaseModel):
    """Limits applied when request content is materialized."""

    max_body_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Largest request body drained into memory",
    )


class HostConfig(BaseModel):
    """In-process host configuration."""

    base_url: str = Field(
        default="http://testserver",
        description="Base URL the test client resolves relative URLs against",
    )
    raise_server_exceptions: bool = Field(
        default=True,
        description="Re-raise unhandled application exceptions instead of returning a 500",
    )
