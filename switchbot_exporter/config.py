"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean application settings with lowercase fields and derived values

Command-line flags supply the fallback for the listen address and the
SwitchBot credentials; an environment variable only wins when it is set
to a non-empty value.
"""

import argparse
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from switchbot_exporter.exceptions import ConfigurationError

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_LISTEN_ADDRESS = ":8080"
DEFAULT_API_URL = "https://api.switch-bot.com"


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Exporter ───────────────────────────────────────────────────────

    WEB_LISTEN_ADDRESS: str = Field(default="")
    FLASK_ENV: str = Field(default="production")
    LOG_LEVEL: str = Field(default="")
    GRACEFUL_SHUTDOWN_TIMEOUT: int = Field(default=30)
    WAITRESS_THREADS: int = Field(default=8)

    # ── SwitchBot API ──────────────────────────────────────────────────

    SWITCHBOT_OPENTOKEN: str = Field(default="")
    SWITCHBOT_SECRETKEY: str = Field(default="")
    SWITCHBOT_API_URL: str = Field(default=DEFAULT_API_URL)
    SWITCHBOT_API_TIMEOUT: float = Field(default=10.0)


class Settings(BaseModel):
    """Application settings with lowercase fields and derived values."""

    model_config = ConfigDict(from_attributes=True)

    # ── Exporter ───────────────────────────────────────────────────────

    listen_address: str = DEFAULT_LISTEN_ADDRESS
    flask_env: str = "production"
    log_level: str = "INFO"
    graceful_shutdown_timeout: int = 30
    waitress_threads: int = 8

    # ── SwitchBot API ──────────────────────────────────────────────────

    switchbot_open_token: str = ""
    switchbot_secret_key: str = ""
    switchbot_api_url: str = DEFAULT_API_URL
    switchbot_api_timeout: float = 10.0

    @property
    def is_production(self) -> bool:
        return self.flask_env == "production"

    @property
    def host(self) -> str:
        host, _, _ = self.listen_address.rpartition(":")
        host = host.strip("[]")
        return host or "0.0.0.0"

    @property
    def port(self) -> int:
        _, _, port = self.listen_address.rpartition(":")
        try:
            return int(port)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid listen address {self.listen_address!r}: expected host:port"
            ) from e

    def validate_required(self) -> None:
        errors: list[str] = []

        if not self.switchbot_open_token:
            errors.append("--switchbot.open-token (or SWITCHBOT_OPENTOKEN) is required")
        if not self.switchbot_secret_key:
            errors.append("--switchbot.secret-key (or SWITCHBOT_SECRETKEY) is required")

        try:
            self.port
        except ConfigurationError as e:
            errors.append(str(e))

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(
        cls,
        env: "Environment | None" = None,
        args: argparse.Namespace | None = None,
    ) -> "Settings":
        try:
            if env is None:
                env = Environment()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid environment: {e}") from e

        def pick(env_value: str, flag: str, default: str) -> str:
            if env_value:
                return env_value
            flag_value = getattr(args, flag, None) if args is not None else None
            return flag_value or default

        return cls(
            listen_address=pick(env.WEB_LISTEN_ADDRESS, "listen_address", DEFAULT_LISTEN_ADDRESS),
            flask_env=env.FLASK_ENV,
            log_level=pick(env.LOG_LEVEL, "log_level", "INFO").upper(),
            graceful_shutdown_timeout=env.GRACEFUL_SHUTDOWN_TIMEOUT,
            waitress_threads=env.WAITRESS_THREADS,
            switchbot_open_token=pick(env.SWITCHBOT_OPENTOKEN, "open_token", ""),
            switchbot_secret_key=pick(env.SWITCHBOT_SECRETKEY, "secret_key", ""),
            switchbot_api_url=env.SWITCHBOT_API_URL,
            switchbot_api_timeout=env.SWITCHBOT_API_TIMEOUT,
        )
