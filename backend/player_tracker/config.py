import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("PLAYER_TRACKER_CONFIG", "config.toml")
_ENV_PATH = os.getenv("PLAYER_TRACKER_ENV", ".env")

# Ticks faster than this would hammer the remote hosts
MIN_PING_INTERVAL_MS = 5000


class PingSettings(BaseModel):
    interval_ms: int = 60_000
    probe_timeout_ms: int = 5000
    max_concurrent_probes: int = 0  # 0 = one probe per server, no cap


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
    )

    database_url: str = "sqlite:///player_tracker.db"
    database_echo: bool = False

    host: str = "0.0.0.0"
    port: int = 5678
    logs_dir: Path = Field(default=Path("logs"))

    ping: PingSettings = Field(default_factory=PingSettings)
    bucket_width_ms: int = 15_000

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > config.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()
