from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from spacedrill.domain.constants import (
    DEFAULT_LEECH_THRESHOLD,
    DEFAULT_PROJECTION_DAYS,
    REQUEST_TIMEOUT,
)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/spacedrill/config.toml",
        Path.home() / ".spacedrill.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for spacedrill.
    Supports loading from:
    1. Environment variables (SPACEDRILL_*)
    2. Config file (~/.config/spacedrill/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="SPACEDRILL_",
        extra="ignore",
    )

    # Storage
    backend: Literal["file", "http", "memory"] = "file"
    data_file: Path = Field(
        default_factory=lambda: Path.home() / ".config/spacedrill/deck.yaml"
    )
    store_url: str = "http://localhost:8790"
    request_timeout: float = REQUEST_TIMEOUT

    # Session
    strict_session: bool = False

    # Analytics
    projection_days: int = Field(default=DEFAULT_PROJECTION_DAYS, ge=0)
    leech_threshold: int = Field(default=DEFAULT_LEECH_THRESHOLD, ge=1)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/spacedrill/config.toml (if exists)
    3. Environment variables (SPACEDRILL_*)
    4. cli_overrides (passed from Typer; None values are dropped)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
