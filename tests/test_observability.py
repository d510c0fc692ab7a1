"""Tests for the façade tracing decorator and logfire settings."""

import pytest

from book_lending.models import BookUpdateResult
from book_lending.observability import ObservabilityConfig, trace_operation


@trace_operation("sample")
async def succeed(value):
    return BookUpdateResult(success=True, message=value)


@trace_operation("sample_failure")
async def fail():
    raise ValueError("boom")


async def test_traced_operation_returns_result():
    result = await succeed("done")

    assert result.success is True
    assert result.message == "done"
    assert succeed.__name__ == "succeed"


async def test_traced_operation_reraises():
    with pytest.raises(ValueError, match="boom"):
        await fail()


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("LOGFIRE_SEND", "true")
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.delenv("LOGFIRE_TOKEN", raising=False)

    config = ObservabilityConfig()

    assert config.send_to_logfire is True
    assert config.environment == "staging"
    assert config.token is None


def test_config_stays_local_by_default(monkeypatch):
    monkeypatch.delenv("LOGFIRE_SEND", raising=False)
    monkeypatch.delenv("LOGFIRE_CONSOLE", raising=False)

    config = ObservabilityConfig()

    assert config.send_to_logfire is False
    assert config.console_output is False
