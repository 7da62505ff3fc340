"""Configuration read from the environment and an optional `.env` file."""

from __future__ import annotations

from typing import Annotated, Any, Final, Literal, get_args

from dotenv import find_dotenv, load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

__all__ = ['Settings', 'load_settings', 'DEFAULT_MODEL', 'DEFAULT_PORT', 'LOG_LEVELS', 'LogLevel']

DEFAULT_MODEL: Final[str] = 'openai:gpt-4o-mini'
"""Model used when `GENUI_MODEL` is not set."""

DEFAULT_PORT: Final[int] = 3001

LogLevel = Literal['critical', 'error', 'warning', 'info', 'debug']
LOG_LEVELS: Final[tuple[str, ...]] = get_args(LogLevel)


class Settings(BaseSettings):
    """Server settings.

    Each field can be set with the matching `GENUI_*` environment variable, e.g. `GENUI_PORT=8080`.
    Empty variables are ignored. Provider credentials such as `OPENAI_API_KEY` are read by the
    model provider itself.
    """

    model_config = SettingsConfigDict(
        env_prefix='GENUI_',
        env_file='.env',
        env_file_encoding='utf-8',
        env_ignore_empty=True,
        extra='ignore',
    )

    model: str = DEFAULT_MODEL
    host: str = '127.0.0.1'
    port: int = DEFAULT_PORT
    cors_origins: Annotated[list[str], NoDecode] = ['*']
    """Allowed CORS origins, comma separated in the environment."""
    stream: bool = False
    """Forward model deltas as they arrive on the fixed-catalog endpoint."""
    log_level: LogLevel = 'info'

    @field_validator('cors_origins', mode='before')
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(',') if origin.strip()]
        return value

    @field_validator('log_level', mode='before')
    @classmethod
    def _lower_log_level(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


def load_settings() -> Settings:
    """Load the nearest `.env` file, searched from the working directory, then read the settings.

    The file is loaded into `os.environ` so model providers see the credentials it holds.

    Raises:
        pydantic.ValidationError: If a variable has an invalid value.
    """
    load_dotenv(find_dotenv(usecwd=True))
    return Settings()
