"""Runner configuration: Pydantic BaseSettings.

Two settings groups:

``ProviderSettings``
    Where the chat-completions endpoint lives. Values come from an optional
    JSON file first (``CUSTOM_PROVIDER_CONFIG``, default
    ``/workspace/env-dir/custom-provider.json``), then from
    ``CUSTOM_PROVIDER_*`` environment variables. The file accepts both the
    camelCase keys written by the host (``baseURL``, ``apiKey``) and the
    snake_case field names.

``RunnerSettings``
    Sandbox paths and loop limits, from ``CLAWBOX_*`` environment variables.

Priority (highest wins): init args > JSON file > env vars

Usage::

    from clawbox.config import load_provider_settings

    provider = load_provider_settings()
    print(provider.base_url, provider.model)
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from clawbox.logger import logger

DEFAULT_PROVIDER_CONFIG_PATH = Path("/workspace/env-dir/custom-provider.json")
DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"

# camelCase keys the host writes → field names
_FILE_KEY_ALIASES = {
    "baseURL": "base_url",
    "baseUrl": "base_url",
    "apiKey": "api_key",
}


class ProviderConfigError(RuntimeError):
    """The provider endpoint or credentials are not configured."""


def provider_config_path() -> Path:
    override = os.environ.get("CUSTOM_PROVIDER_CONFIG")
    return Path(override) if override else DEFAULT_PROVIDER_CONFIG_PATH


def _read_provider_file(path: Path) -> dict[str, Any]:
    """Return normalized settings from the provider JSON file, or {} if unusable."""
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Failed to load provider config", path=str(path), error=str(exc))
        return {}
    if not isinstance(raw, dict):
        logger.warning("Provider config is not a JSON object", path=str(path))
        return {}

    data: dict[str, Any] = {}
    for key, value in raw.items():
        name = _FILE_KEY_ALIASES.get(key, key)
        if name in ProviderSettings.model_fields and value is not None:
            data[name] = value
    return data


class _ProviderFileSource(PydanticBaseSettingsSource):
    """Settings source backed by the provider JSON file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path) -> None:
        super().__init__(settings_cls)
        self.path = path
        self._data = _read_provider_file(path)
        if self._data:
            logger.debug("Using provider config file", path=str(path))

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CUSTOM_PROVIDER_", extra="ignore")

    base_url: str | None = None
    api_key: SecretStr | None = None
    model: str = DEFAULT_MODEL

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.rstrip("/") or None

    @field_validator("model")
    @classmethod
    def default_blank_model(cls, v: str) -> str:
        return v.strip() or DEFAULT_MODEL

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init > JSON file > env vars."""
        return (
            init_settings,
            _ProviderFileSource(settings_cls, provider_config_path()),
            env_settings,
        )


class RunnerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLAWBOX_", extra="ignore")

    workspace_dir: Path = Path("/workspace/group")
    ipc_dir: Path = Path("/workspace/ipc")
    max_rounds: int = 30

    @field_validator("max_rounds")
    @classmethod
    def clamp_max_rounds(cls, v: int) -> int:
        return max(1, v)


def load_provider_settings(**overrides: Any) -> ProviderSettings:
    """Build provider settings, failing fast when the endpoint is unusable.

    Raises:
        ProviderConfigError: base URL or API key could not be resolved.
    """
    try:
        settings = ProviderSettings(**overrides)
    except ValidationError as exc:
        raise ProviderConfigError(f"Invalid provider settings: {exc}") from exc
    require_endpoint(settings)
    return settings


def require_endpoint(settings: ProviderSettings) -> tuple[str, str]:
    """Return ``(base_url, api_key)``.

    Raises:
        ProviderConfigError: either value is missing.
    """
    api_key = settings.api_key.get_secret_value() if settings.api_key else ""
    if not settings.base_url or not api_key:
        raise ProviderConfigError(
            "Set CUSTOM_PROVIDER_BASE_URL and CUSTOM_PROVIDER_API_KEY, or create "
            f"{provider_config_path()} with baseURL and apiKey"
        )
    return settings.base_url, api_key
