from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from eduquest.domain.constants import SRS_STORAGE_KEY


class AppConfig(BaseSettings):
    """
    Configuration model for eduquest.
    Supports loading from:
    1. Environment variables (EDUQUEST_*)
    2. Config file (~/.config/eduquest/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="EDUQUEST_",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".config/eduquest/data")
    storage_backend: Literal["file", "memory"] = "file"
    storage_key: str = SRS_STORAGE_KEY
    recover_corrupt_state: bool = False

    # Server
    host: str = "127.0.0.1"
    port: int = 8787

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

        # Home may be patched in tests, so resolve at call time
        toml_files = [
            Path.home() / ".config/eduquest/config.toml",
            Path.home() / ".eduquest.toml",
        ]
        toml_file = next((f for f in toml_files if f.exists()), None)

        # Earlier sources win
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/eduquest/config.toml (if exists)
    3. Environment variables (EDUQUEST_*)
    4. cli_overrides (passed from Typer); None values are ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
