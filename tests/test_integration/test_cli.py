"""Integration tests for the apiconnector CLI.

Each test writes a YAML settings file into ``tmp_path``, points the cache
at ``tmp_path`` as well, and routes HTTP through an ``httpx.MockTransport``
passed to the app via ``obj``.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from apiconnector import __version__
from apiconnector.app import app
from apiconnector.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_NO_DATA,
    EXIT_REQUEST_FAILED,
)

SETTINGS = """\
Acme:
  Weather:
    apiUrl: 'https://api.example.com/v2/'
    timeout: 5
    parameters:
      api_key: 'xyz'
    actions:
      forecast: 'forecast.php'
      subscribe: 'subscribe'
    username: 'user'
    password: 'secret'
    useFallbackCache: {fallback}
"""


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(SETTINGS.format(fallback="false"), encoding="utf-8")
    return path


@pytest.fixture
def base_args(settings_file: Path, tmp_path: Path) -> list[str]:
    return [
        "--no-color",
        "--settings",
        str(settings_file),
        "--section",
        "Acme.Weather",
        "--cache-dir",
        str(tmp_path / "cache"),
    ]


def _transport(status: int = 200, text: str = "hello", requests: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status, text=text)

    return httpx.MockTransport(handler)


def _down_transport():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


class TestGlobal:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestUri:
    def test_prints_uri(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(app, [*base_args, "uri", "forecast", "-P", "city=Berlin"])
        assert result.exit_code == 0, result.output
        assert "https://api.example.com/v2/forecast.php?api_key=xyz&city=Berlin" in result.stdout

    def test_unknown_action(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(app, [*base_args, "uri", "history"])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_bad_param(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(app, [*base_args, "uri", "forecast", "-P", "novalue"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_missing_settings_file(self, cli_runner, tmp_path) -> None:
        result = cli_runner.invoke(app, ["--settings", str(tmp_path / "nope.yaml"), "uri", "forecast"])
        assert result.exit_code == EXIT_CONFIG_ERROR


class TestFetch:
    def test_prints_body(self, cli_runner, base_args) -> None:
        requests: list[httpx.Request] = []
        result = cli_runner.invoke(
            app,
            [*base_args, "fetch", "forecast", "-P", "city=Berlin", "--raw"],
            obj={"transport": _transport(text="sunny", requests=requests)},
        )
        assert result.exit_code == 0, result.output
        assert "sunny" in result.stdout
        assert requests[0].url.params["city"] == "Berlin"

    def test_json_body_formatted(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(
            app,
            ["--json", *base_args, "fetch", "forecast"],
            obj={"transport": _transport(text='{"temp":21}')},
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"temp": 21}

    def test_no_data_exit_code(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(
            app, [*base_args, "fetch", "forecast"], obj={"transport": _down_transport()}
        )
        assert result.exit_code == EXIT_NO_DATA

    def test_fallback_cache_serves_when_api_down(
        self, cli_runner, base_args, settings_file: Path
    ) -> None:
        settings_file.write_text(SETTINGS.format(fallback="true"), encoding="utf-8")

        first = cli_runner.invoke(
            app, [*base_args, "fetch", "forecast", "--raw"], obj={"transport": _transport(text="sunny")}
        )
        assert first.exit_code == 0, first.output

        second = cli_runner.invoke(
            app, [*base_args, "fetch", "forecast", "--raw"], obj={"transport": _down_transport()}
        )
        assert second.exit_code == 0, second.output
        assert "sunny" in second.stdout


class TestPost:
    def test_success(self, cli_runner, base_args) -> None:
        requests: list[httpx.Request] = []
        result = cli_runner.invoke(
            app,
            [*base_args, "post", "subscribe", "-d", '{"email": "ada@example.com"}'],
            obj={"transport": _transport(status=204, text="", requests=requests)},
        )
        assert result.exit_code == 0, result.output
        assert json.loads(requests[0].content) == {"email": "ada@example.com"}

    def test_data_file(self, cli_runner, base_args, tmp_path: Path) -> None:
        body = tmp_path / "body.json"
        body.write_text('{"email": "ada@example.com"}', encoding="utf-8")
        requests: list[httpx.Request] = []
        result = cli_runner.invoke(
            app,
            [*base_args, "post", "subscribe", "--data-file", str(body)],
            obj={"transport": _transport(status=200, requests=requests)},
        )
        assert result.exit_code == 0, result.output
        assert json.loads(requests[0].content) == {"email": "ada@example.com"}

    def test_failure_exit_code(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(
            app,
            [*base_args, "post", "subscribe", "-d", "{}"],
            obj={"transport": _transport(status=500)},
        )
        assert result.exit_code == EXIT_REQUEST_FAILED

    def test_invalid_json_body(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(app, [*base_args, "post", "subscribe", "-d", "{nope"])
        assert result.exit_code == EXIT_INVALID_USAGE


class TestSettingsShow:
    def test_password_masked(self, cli_runner, base_args) -> None:
        result = cli_runner.invoke(app, ["--json", *base_args, "settings", "show"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["api_url"] == "https://api.example.com/v2/"
        assert data["password"] == "********"
        assert "secret" not in result.stdout


class TestCacheCommands:
    def test_stats_and_clear(self, cli_runner, base_args, settings_file: Path) -> None:
        settings_file.write_text(SETTINGS.format(fallback="true"), encoding="utf-8")
        cli_runner.invoke(
            app, [*base_args, "fetch", "forecast"], obj={"transport": _transport(text="sunny")}
        )

        stats = cli_runner.invoke(app, ["--json", *base_args, "cache", "stats"])
        assert stats.exit_code == 0, stats.output
        rows = {row["cache"]: row for row in json.loads(stats.stdout)}
        assert rows["fallback"]["entries"] == "1"
        assert rows["objects"]["entries"] == "0"

        cleared = cli_runner.invoke(app, [*base_args, "cache", "clear"])
        assert cleared.exit_code == 0, cleared.output

        after = cli_runner.invoke(app, ["--json", *base_args, "cache", "stats"])
        rows = {row["cache"]: row for row in json.loads(after.stdout)}
        assert rows["fallback"]["entries"] == "0"
