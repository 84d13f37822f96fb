from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_auth_mode: str
    api_auth_token: str | None
    api_debug_log: bool
    cors_origins: list[str]
    api_url: str
    autosave_debounce_ms: int
    server_port: int


def load_settings() -> Settings:
    database_url = os.environ.get("DATABASE_URL", "sqlite:///./jotpad.db")
    api_auth_mode = os.environ.get("API_AUTH_MODE", "none").lower()
    api_auth_token = os.environ.get("API_AUTH_TOKEN")
    api_debug_log = os.environ.get("API_DEBUG_LOG", "false").lower() == "true"
    cors_origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
    api_url = os.environ.get("JOTPAD_API_URL", "http://localhost:2022")
    autosave_debounce_ms = int(os.environ.get("AUTOSAVE_DEBOUNCE_MS", "2000"))
    server_port = int(os.environ.get("SERVER_PORT", "2022"))
    return Settings(
        database_url=database_url,
        api_auth_mode=api_auth_mode,
        api_auth_token=api_auth_token,
        api_debug_log=api_debug_log,
        cors_origins=cors_origins,
        api_url=api_url,
        autosave_debounce_ms=autosave_debounce_ms,
        server_port=server_port,
    )
