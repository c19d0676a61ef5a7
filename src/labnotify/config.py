"""
Runtime configuration.

Values come from ``LABNOTIFY_*`` environment variables, optionally
loaded from a .env file.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "LABNOTIFY_"


def default_env_locations() -> list[Path]:
    """.env files searched when none is given, resolved at call time."""
    return [
        Path.cwd() / ".env",
        Path.home() / ".labnotify" / ".env",
    ]


class Settings(BaseModel):
    """Engine, transport and storage settings."""

    api_base_url: str = "http://localhost:8000"
    requests_path: str = "/requests"
    owner_param: str = "ownerId"

    poll_interval_seconds: float = Field(default=10.0, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    single_flight: bool = True

    data_dir: Path = Path("~/.labnotify")
    webhook_url: str | None = None

    @property
    def db_path(self) -> Path:
        return self.data_dir.expanduser() / "state.sqlite"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> Settings:
        """
        Build settings from the environment.

        An explicit env_file is loaded if it exists; otherwise the first
        existing default location is used. Variables already set in the
        process environment take precedence over the file.
        """
        locations = [Path(env_file)] if env_file else default_env_locations()
        for env_path in locations:
            if env_path.exists():
                load_dotenv(env_path)
                break

        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = os.environ.get(ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        return cls.model_validate(values)
