"""Typed settings for constructing a ``Networking`` facade.

Precedence is init kwargs, then ``NETKIT_`` environment variables, then the
optional YAML file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "networking_kit" / "networking.yaml"


class NetworkingSettings(BaseSettings):
    """Runtime settings resolved from init/env/yaml sources."""

    model_config = SettingsConfigDict(
        env_prefix="NETKIT_",
        extra="ignore",
    )

    base_url: str = ""
    accepted_status_codes: list[int] = Field(default_factory=list)
    strict_json_body: bool = False

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @field_validator("accepted_status_codes")
    @classmethod
    def _check_status_codes(cls, value: list[int]) -> list[int]:
        """Reject values that are not HTTP status codes."""
        for code in value:
            if not 100 <= code <= 599:
                raise ValueError(f"accepted_status_codes contains invalid code {code}")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )


def load_settings(**overrides: Any) -> NetworkingSettings:
    """Resolve settings, with keyword overrides taking highest precedence."""
    return NetworkingSettings(**overrides)
