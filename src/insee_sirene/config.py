"""insee_sirene.config

Connection settings for the INSEE API, read from the environment (or a
`.env` file) when not passed explicitly.
"""
from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

__all__ = ["InseeSettings", "DEFAULT_API_URL"]

DEFAULT_API_URL = "https://api.insee.fr"


class InseeSettings(BaseModel):
    """Credentials and endpoint options for the SIRENE client."""

    model_config = ConfigDict(frozen=True)

    consumer_key: str = Field(..., description="OAuth2 consumer key")
    consumer_secret: SecretStr = Field(..., description="OAuth2 consumer secret")
    sirene_api_version: str = Field(
        default="",
        description="SIRENE API version, e.g. 'v3'. Empty means no version segment.",
    )
    api_url: str = Field(default=DEFAULT_API_URL, description="Base URL of the INSEE API")

    @field_validator("consumer_key", "consumer_secret")
    @classmethod
    def _not_blank(cls, value):
        raw = value.get_secret_value() if isinstance(value, SecretStr) else value
        if not raw.strip():
            raise ValueError("must not be empty")
        return value

    @classmethod
    def from_env(cls) -> "InseeSettings":
        """Build settings from INSEE_* environment variables (loading `.env` first)."""
        load_dotenv()
        return cls(
            consumer_key=os.getenv("INSEE_CONSUMER_KEY", ""),
            consumer_secret=os.getenv("INSEE_CONSUMER_SECRET", ""),
            sirene_api_version=os.getenv("INSEE_SIRENE_API_VERSION", ""),
            api_url=os.getenv("INSEE_API_URL", DEFAULT_API_URL),
        )
