"""Canonical Pydantic models shared across apiconnector modules.

**ApiSettings** -- the per-connector configuration (base URL, timeout,
default query parameters, action mapping, optional Basic credentials and
the fallback cache switch). It is usually loaded from a YAML or JSON file
by :func:`~apiconnector.config.load_api_settings` and is immutable once
constructed.

**CacheConfig** -- where the persistent caches live and whether their
entries expire.

Field names are snake_case, but the camelCase keys used in settings files
(``apiUrl``, ``useFallbackCache``) are accepted as aliases.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiSettings(BaseModel):
    """Settings for one API connector.

    Example::

        ApiSettings(
            api_url="https://my.rest.api/v2/",
            timeout=30,
            parameters={"api_key": "xyz", "format": "json"},
            actions={"forecast": "forecast.php"},
            use_fallback_cache=True,
        )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_url: str = Field(alias="apiUrl", description="Base URL every action path is appended to")
    timeout: int = Field(default=30, gt=0, description="Connect timeout in seconds")
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="Query parameters added to each request; nested mappings become a[b] keys",
    )
    actions: dict[str, str] = Field(description="Action name to path suffix")
    username: Optional[str] = Field(default=None, description="Basic auth user name")
    password: Optional[str] = Field(default=None, description="Basic auth password")
    use_fallback_cache: bool = Field(
        default=False,
        alias="useFallbackCache",
        description="Serve cached response bodies instead of live requests when present",
    )

    @field_validator("api_url")
    @classmethod
    def _check_api_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("apiUrl must not be empty")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"apiUrl must be an http(s) URL, got '{value}'")
        return value

    @property
    def has_credentials(self) -> bool:
        """Whether both a user name and a password are set and non-empty."""
        return bool(self.username) and bool(self.password)

    def redacted_dump(self) -> dict[str, Any]:
        """Return the settings as JSON-ready data with the password masked."""
        data = self.model_dump(mode="json")
        if data.get("password"):
            data["password"] = "********"
        return data


class CacheConfig(BaseModel):
    """Location and expiry of the persistent caches.

    When ``directory`` is ``None`` the caches live under
    :func:`~apiconnector.config.get_cache_dir`. A TTL of ``None`` keeps
    entries until they are removed explicitly.
    """

    directory: Optional[str] = Field(default=None, description="Cache root directory")
    fallback_ttl_seconds: Optional[int] = Field(
        default=None, gt=0, description="Expiry for fallback response bodies"
    )
    object_ttl_seconds: Optional[int] = Field(
        default=None, gt=0, description="Expiry for object cache entries"
    )
