"""
Application configuration via environment variables (12-factor).
Pydantic BaseSettings validates and coerces all values at startup.

The same Settings object serves both halves of the system:
  - the credential service (signing keys, admission rules)
  - the client runtime (connection modes, parser endpoint, document cache)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Credential issuance (server side)
    # ------------------------------------------------------------------
    livekit_api_key:    str = ""   # empty = service cannot sign (500)
    livekit_api_secret: str = ""

    token_ttl_seconds: int = 6 * 60 * 60

    # Reject credential requests that carry no parsed document
    require_document_payload: bool = True
    max_metadata_bytes:       int  = 64 * 1024

    # ------------------------------------------------------------------
    # Transport endpoints (client side)
    # ------------------------------------------------------------------
    livekit_url: str = ""   # wss://<project>.livekit.cloud (required by env mode)

    token_endpoint_url: str = "http://localhost:8000/api/token"

    # cloud mode: managed token generator
    cloud_token_url:   str = ""
    cloud_ws_url:      str = ""
    cloud_project_key: str = ""

    # manual mode: static credential pair
    manual_token:  str = ""
    manual_ws_url: str = ""

    # Optional names sent along with env-mode credential requests
    room_name:        str = ""
    participant_name: str = ""
    participant_role: str = "user"

    fence_connect_requests: bool = True

    # ------------------------------------------------------------------
    # Document parsing
    # ------------------------------------------------------------------
    parser_api_url:         str   = "http://localhost:8080"
    parser_timeout_seconds: float = 60.0
    max_document_bytes:     int   = 10 * 1024 * 1024   # 10 MB

    # ------------------------------------------------------------------
    # Document cache
    # ------------------------------------------------------------------
    document_cache_path:        str = ".intervita/storage.json"
    document_cache_key:         str = "savedResumes"
    document_cache_quota_bytes: int = 5 * 1024 * 1024

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------
    app_env: str = "development"   # development | staging | production
    debug: bool = False

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def can_sign_tokens(self) -> bool:
        return bool(self.livekit_api_key and self.livekit_api_secret)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
