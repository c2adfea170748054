"""Logging configuration model."""

from typing import Literal

from pydantic import BaseModel, Field

LogFormat = Literal["json", "console"]


class LoggingConfig(BaseModel):
    """Structured logging configuration."""

    format: LogFormat = Field(
        default="console",
        description="Output format: 'json' for CI log shipping, 'console' for local runs",
    )
    redact_pii: bool = Field(
        default=True,
        description="Mask credentials and PII in log events",
    )
