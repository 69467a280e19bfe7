"""Application settings via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from twg.signing.keys import KeyEncoding

__all__ = ["Settings"]


class Settings(BaseSettings):
    """Central configuration, all values from environment (or .env)."""

    model_config = SettingsConfigDict(env_prefix="TWG_", env_file=".env", extra="ignore")

    # Shared secret issued by Teams when the outgoing webhook was created
    shared_secret: str = ""
    secret_encoding: KeyEncoding = KeyEncoding.BASE64

    # Hash every candidate even after a match (constant total work)
    evaluate_all_candidates: bool = True

    # Largest accepted webhook body
    max_body_bytes: int = 4 * 1024 * 1024

    # Logging
    log_json: bool = True
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
