"""
Config loading via Pydantic v2, TOML and python-dotenv.

The config file provides two required sections, ``[server]`` and
``[telegram]``; ``[monitor]`` and ``[logging]`` are optional. Environment
variables (optionally from ``.env``) override file values.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)


BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
DEFAULT_CONFIG_PATH = Path("config.toml")

# Переменные окружения перекрывают значения из файла
ENV_OVERRIDES = {
    "SERVER_ADDRESS": ("server", "address"),
    "TELEGRAM_BOT_TOKEN": ("telegram", "bot_token"),
    "TELEGRAM_CHAT_ID": ("telegram", "chat_id"),
    "POLL_INTERVAL": ("monitor", "poll_interval"),
    "LOG_LEVEL": ("logging", "log_level"),
}

if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=False)


class ConfigError(Exception):
    """Configuration is missing or invalid."""


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str = Field(min_length=1, validation_alias=AliasChoices("address", "ip"))


class TelegramConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    bot_token: str = Field(pattern=r"^\d+:\S+$")
    chat_id: int
    api_base: str = "https://api.telegram.org"


class MonitorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(default=60, ge=1)
    request_timeout: float = Field(default=10, gt=0)
    status_api_base: str = "https://api.mcsrvstat.us/2"

    @model_validator(mode="after")
    def _timeout_below_interval(self) -> "MonitorConfig":
        if self.request_timeout >= self.poll_interval:
            raise ValueError("request_timeout must be shorter than poll_interval")
        return self


class LoggingConfig(BaseModel):
    logs_dir: Path = Field(default_factory=lambda: BASE_DIR / "logs")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    max_bytes: int = Field(default=5 * 1024 * 1024)  # 5 MB
    backup_count: int = Field(default=5)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class Settings(BaseModel):
    server: ServerConfig
    telegram: TelegramConfig
    monitor: MonitorConfig = MonitorConfig()
    logging: LoggingConfig = LoggingConfig()


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def load_settings(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build settings from the config file and environment overrides.

    A missing file is tolerated only when the environment supplies every
    required value. Raises ConfigError on any problem.
    """
    env = os.environ if env is None else env
    if path is None:
        path = Path(env.get("PLAYER_WATCH_CONFIG", DEFAULT_CONFIG_PATH))

    raw: dict[str, Any] = _read_toml(path) if path.exists() else {}

    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            block = raw.setdefault(section, {})
            if not isinstance(block, dict):
                raise ConfigError(f"[{section}] must be a table")
            block[key] = value

    if "server" not in raw or "telegram" not in raw:
        missing = [s for s in ("server", "telegram") if s not in raw]
        where = str(path) if path.exists() else f"{path} (not found)"
        raise ConfigError(f"missing section(s) {', '.join(missing)} in {where}")

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


__all__ = [
    "ConfigError",
    "LoggingConfig",
    "MonitorConfig",
    "ServerConfig",
    "Settings",
    "TelegramConfig",
    "load_settings",
    "BASE_DIR",
]
