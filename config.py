"""Configuration load for dayplan: defaults, optional config.json, then environment."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator

CONFIG_PATH = Path(__file__).resolve().parent / "config.json"
_DEFAULT_STATIC_DIR = Path(__file__).resolve().parent / "static"

# Environment variable -> AppConfig field
_ENV_FIELDS = {
    "PORT": "port",
    "HOST": "host",
    "DATABASE_PATH": "database_path",
    "STATIC_DIR": "static_dir",
    "SESSION_SECRET": "session_secret",
    "GOOGLE_CLIENT_ID": "google_client_id",
    "GOOGLE_CLIENT_SECRET": "google_client_secret",
    "GOOGLE_CALLBACK_URL": "google_callback_url",
    "REQUIRE_LOGIN": "require_login",
    "DEBUG": "debug",
}

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off", ""})


class AppConfig(BaseModel):
    """Application configuration."""

    port: int = Field(default=3001, ge=1, le=65535, description="HTTP listen port")
    host: str = Field(default="0.0.0.0", description="HTTP listen address")
    database_path: str = Field(default="database.db", description="SQLite file; relative paths resolve against the working directory")
    static_dir: str = Field(default=str(_DEFAULT_STATIC_DIR), description="Directory holding index.html, style.css, app.js")
    session_secret: str = Field(default="", description="Signing secret for the session cookie; empty disables sessions")
    google_client_id: str = ""
    google_client_secret: str = ""
    google_callback_url: str = Field(default="", description="Redirect URI registered with Google, e.g. http://localhost:3001/auth/google/callback")
    require_login: bool = Field(default=False, description="Require a signed-in session for /api/tasks")
    debug: bool = Field(default=False, description="Log every API request and response status")

    @field_validator("require_login", "debug", mode="before")
    @classmethod
    def _parse_bool(cls, v: Any) -> Any:
        if isinstance(v, str):
            word = v.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        return v

    @property
    def sessions_enabled(self) -> bool:
        return bool(self.session_secret)

    @property
    def oauth_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret and self.google_callback_url)

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None, path: Path | None = None) -> "AppConfig":
        """Merge config.json (if present) with environment overrides."""
        raw: dict[str, Any] = {}
        config_path = path or CONFIG_PATH
        if config_path.exists():
            raw.update(json.loads(config_path.read_text()))
        env = os.environ if environ is None else environ
        for var, field in _ENV_FIELDS.items():
            if var in env:
                raw[field] = env[var]
        return cls.model_validate(raw)


def load() -> AppConfig:
    """Load config from disk and environment. Convenience alias for AppConfig.load()."""
    return AppConfig.load()
