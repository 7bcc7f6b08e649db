"""Settings loading and directory resolution.

This module handles everything a connector needs before its first request:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apiconnector/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_cache_dir`.
* **Settings files** -- JSON or YAML documents, optionally nested the way
  framework settings usually are (``Vendor.Package.implementation``).
  :func:`load_api_settings` selects the section, resolves credential
  sources, and validates the result into an
  :class:`~apiconnector.models.ApiSettings`.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from environment variables or files so they stay out of settings files.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from apiconnector.exceptions import ConfigError
from apiconnector.models import ApiSettings

_APP_NAME = "apiconnector"

SETTINGS_ENV_VAR = "APICONNECTOR_SETTINGS"
"""Environment variable naming the default settings file."""

CACHE_DIR_ENV_VAR = "APICONNECTOR_CACHE_DIR"
"""Environment variable overriding the cache directory."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/apiconnector/`` (default
    ``~/.config/apiconnector/``). On macOS/Windows: ``~/.apiconnector/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    ``$APICONNECTOR_CACHE_DIR`` wins when set. Otherwise on Linux/BSD:
    ``$XDG_CACHE_HOME/apiconnector/`` (default ``~/.cache/apiconnector/``),
    on macOS/Windows: ``~/.apiconnector/cache/``.

    Deleting this directory loses fallback responses and memoized objects
    but is otherwise safe.
    """
    override = os.environ.get(CACHE_DIR_ENV_VAR, "")
    if override:
        path = Path(override)
    elif _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Settings files ---


def load_settings_file(path: str | Path) -> dict[str, Any]:
    """Load a settings document from a JSON or YAML file.

    The format is taken from the file extension (``.json``, ``.yaml``,
    ``.yml``); other extensions are tried as JSON first, then YAML.

    Raises:
        ConfigError: If the file is missing, empty, unreadable, or does not
            contain a mapping.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Settings file not found: {file_path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read settings file {file_path}: {exc}") from exc

    if not content.strip():
        raise ConfigError(f"Settings file is empty: {file_path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint, source=str(file_path))


def _parse_content(content: str, hint: str = "", source: str = "<string>") -> dict[str, Any]:
    """Parse content as JSON or YAML, JSON first unless hinted as YAML."""
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigError(f"Invalid JSON in {source}: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result, source)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {source} as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise ConfigError(msg) from exc
    return _require_mapping(result, source)


def _require_mapping(result: Any, source: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise ConfigError(f"Settings in {source} must be a mapping (got {kind})")
    return result


def select_section(data: dict[str, Any], section: Optional[str]) -> dict[str, Any]:
    """Return the nested mapping at dot-separated *section*.

    ``None`` or an empty string returns *data* unchanged.

    Example::

        select_section({"Acme": {"Weather": {...}}}, "Acme.Weather")

    Raises:
        ConfigError: If a segment is missing or does not lead to a mapping.
    """
    if not section:
        return data
    current: Any = data
    walked: list[str] = []
    for segment in section.split("."):
        walked.append(segment)
        if not isinstance(current, dict) or segment not in current:
            raise ConfigError(f"Settings section '{'.'.join(walked)}' not found")
        current = current[segment]
    if not isinstance(current, dict):
        raise ConfigError(f"Settings section '{section}' is not a mapping")
    return current


# --- Credential source resolution ---


def resolve_credential(value: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else is returned unchanged as a literal value

    Raises:
        ConfigError: If the environment variable is unset or the file
            cannot be read.
    """
    if value.startswith("env:"):
        var_name = value[4:]
        resolved = os.environ.get(var_name)
        if resolved is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set (source: {value})")
        return resolved

    if value.startswith("file:"):
        path = Path(value[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {value})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    return value


def build_api_settings(data: dict[str, Any]) -> ApiSettings:
    """Validate a raw settings mapping into :class:`ApiSettings`.

    ``username`` and ``password`` values are passed through
    :func:`resolve_credential` first.

    Raises:
        ConfigError: If a credential source cannot be resolved or the
            mapping fails validation.
    """
    resolved = dict(data)
    for key in ("username", "password"):
        raw = resolved.get(key)
        if isinstance(raw, str) and raw:
            resolved[key] = resolve_credential(raw)
    try:
        return ApiSettings.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigError(f"Invalid API settings: {exc}") from exc


def load_api_settings(
    path: Optional[str | Path] = None,
    section: Optional[str] = None,
) -> ApiSettings:
    """Load, select, and validate connector settings from a file.

    Args:
        path: Settings file. Defaults to ``$APICONNECTOR_SETTINGS``, then
            ``<config_dir>/settings.yaml``.
        section: Dot-separated path to the connector's mapping inside the
            file, e.g. ``"Acme.Weather"``.

    Returns:
        The validated :class:`~apiconnector.models.ApiSettings`.

    Raises:
        ConfigError: If the file cannot be loaded, the section is missing,
            or validation fails.
    """
    if path is None:
        env_path = os.environ.get(SETTINGS_ENV_VAR)
        path = Path(env_path) if env_path else get_config_dir() / "settings.yaml"
    data = load_settings_file(path)
    return build_api_settings(select_section(data, section))
