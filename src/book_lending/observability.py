"""Logfire tracing for the lending façade."""

import functools
import logging
import os
from collections.abc import Callable
from datetime import datetime

import logfire
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ObservabilityConfig(BaseModel):
    """Configuration for Logfire observability."""

    token: str | None = Field(default_factory=lambda: os.getenv("LOGFIRE_TOKEN") or None)
    service_name: str = "book-lending"
    environment: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))

    console_output: bool = Field(
        default_factory=lambda: os.getenv("LOGFIRE_CONSOLE", "false").lower() == "true"
    )
    send_to_logfire: bool = Field(
        default_factory=lambda: os.getenv("LOGFIRE_SEND", "false").lower() == "true"
    )


def initialize_observability(config: ObservabilityConfig | None = None) -> ObservabilityConfig:
    """Configure logfire. Nothing leaves the process unless LOGFIRE_SEND=true."""
    config = config or ObservabilityConfig()
    logfire.configure(
        token=config.token,
        service_name=config.service_name,
        environment=config.environment,
        send_to_logfire=config.send_to_logfire,
        console=None if config.console_output else False,
    )
    logger.debug("Observability initialized for %s", config.environment)
    return config


def trace_operation(operation: str):
    """Wrap an async façade operation in a logfire span."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            with logfire.span(f"lending.{operation}", operation=operation) as span:
                start_time = datetime.now()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_attribute("operation.success", False)
                    span.set_attribute("operation.error", type(e).__name__)
                    raise

                span.set_attribute("operation.success", True)
                span.set_attribute(
                    "operation.duration_ms", (datetime.now() - start_time).total_seconds() * 1000
                )
                if hasattr(result, "success"):
                    span.set_attribute("result.success", result.success)
                return result

        return wrapper

    return decorator
