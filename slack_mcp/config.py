from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

__all__ = ["ConfigurationError", "Settings", "load_environment"]

BOT_TOKEN_ENV = "SLACK_BOT_TOKEN"
USER_TOKEN_ENV = "SLACK_USER_TOKEN"


class ConfigurationError(Exception):
    """Raised when the process cannot start with the supplied configuration."""


def load_environment(dotenv_path: str | Path | None = None) -> None:
    """Populate ``os.environ`` from a ``.env`` file without overriding it."""

    load_dotenv(dotenv_path=dotenv_path, override=False)


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-level configuration shared by both transports."""

    bot_token: str
    user_token: str
    port: int | None = None
    host: str = "127.0.0.1"
    json_response: bool = False
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        if not self.bot_token:
            raise ConfigurationError(
                f"{BOT_TOKEN_ENV} is not set. Please set it in your environment or .env file."
            )
        if not self.user_token:
            raise ConfigurationError(
                f"{USER_TOKEN_ENV} is not set. Please set it in your environment or .env file."
            )
        if self.port is not None and not 0 < self.port <= 65535:
            raise ConfigurationError(f"Invalid port number: {self.port}")

    @property
    def transport(self) -> str:
        return "http" if self.port is not None else "stdio"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        port: int | None = None,
        host: str = "127.0.0.1",
        json_response: bool = False,
        log_dir: Path | str | None = None,
    ) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            bot_token=env.get(BOT_TOKEN_ENV, "").strip(),
            user_token=env.get(USER_TOKEN_ENV, "").strip(),
            port=port,
            host=host,
            json_response=json_response,
            log_dir=Path(log_dir) if log_dir is not None else None,
        )
