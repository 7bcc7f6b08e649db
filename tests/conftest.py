"""Shared test fixtures for apiconnector.

Provides settings factories, ``httpx.MockTransport`` based connectors backed
by ``diskcache`` stores under ``tmp_path``, and resets the global output and
logging state between tests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from apiconnector.connector import ApiConnector
from apiconnector.models import ApiSettings, CacheConfig
from apiconnector.output import reset_output

Handler = Callable[[httpx.Request], httpx.Response]


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear APICONNECTOR_* env vars and undo CLI output/logging setup.

    The CLI installs a RichHandler bound to the runner's stderr and turns
    off propagation, which would hide records from ``caplog`` in later
    tests.
    """
    monkeypatch.delenv("APICONNECTOR_SETTINGS", raising=False)
    monkeypatch.delenv("APICONNECTOR_CACHE_DIR", raising=False)
    yield
    reset_output()
    logger = logging.getLogger("apiconnector")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Settings and connectors
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> ApiSettings:
    """Build ApiSettings for ``https://api.example.com/v2/`` with two actions."""
    data: dict[str, Any] = {
        "api_url": "https://api.example.com/v2/",
        "timeout": 5,
        "parameters": {"api_key": "xyz", "format": "json"},
        "actions": {"forecast": "forecast.php", "subscribe": "subscribe"},
    }
    data.update(overrides)
    return ApiSettings(**data)


@pytest.fixture
def settings() -> ApiSettings:
    return make_settings()


@pytest.fixture
def make_connector(tmp_path: Path):
    """Factory for connectors whose HTTP traffic goes to *handler*.

    All connectors made by one test share the same cache directory, so a
    second connector sees what the first one persisted. Every connector is
    closed at teardown.
    """
    created: list[ApiConnector] = []

    def _make(
        handler: Handler,
        connector_cls: type[ApiConnector] = ApiConnector,
        **settings_overrides: Any,
    ) -> ApiConnector:
        connector = connector_cls.open(
            make_settings(**settings_overrides),
            CacheConfig(directory=str(tmp_path / "cache")),
            transport=httpx.MockTransport(handler),
        )
        created.append(connector)
        return connector

    yield _make
    for connector in created:
        connector.close()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def settings_factory() -> Callable[..., ApiSettings]:
    """The :func:`make_settings` factory, for tests that vary settings."""
    return make_settings
