"""Application configuration and AWS client factories."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

# External calls are attempted exactly once per request.
SINGLE_ATTEMPT = Config(retries={"mode": "standard", "total_max_attempts": 1})

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


def _require_env(name: str, *, default: Optional[str] = None) -> str:
    """Fetch an environment variable or raise if it is missing."""
    value = os.getenv(name, default)
    if value is None or value == "":
        raise ConfigurationError(f"Environment variable {name} is required")
    return value


def _bool_env(name: str, default: bool = True) -> bool:
    """Parse boolean environment variable values."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "y"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return max(1, int(raw))
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    """In-memory representation of runtime settings."""

    app_env: str
    aws_region: str
    bedrock_model_id: Optional[str]
    bedrock_guardrail_id: Optional[str]
    bedrock_guardrail_ver: Optional[int]
    log_level: str
    typo_correction_enabled: bool
    typo_max_output_tokens: int
    fallback_max_output_tokens: int
    # Reference datasets: S3 URIs take precedence over local paths
    scope_data_en_path: str
    scope_data_id_path: str
    scope_data_en_s3_uri: Optional[str]
    scope_data_id_s3_uri: Optional[str]

    @property
    def bedrock_enabled(self) -> bool:
        return bool(self.bedrock_model_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache application settings from the environment."""
    bedrock_guardrail_ver_raw = os.getenv("BEDROCK_GUARDRAIL_VER")
    try:
        guardrail_version = int(bedrock_guardrail_ver_raw) if bedrock_guardrail_ver_raw else None
    except ValueError as exc:
        raise ConfigurationError("BEDROCK_GUARDRAIL_VER must be an integer") from exc

    return Settings(
        app_env=os.getenv("APP_ENV", "dev"),
        aws_region=_require_env("AWS_REGION"),
        bedrock_model_id=os.getenv("BEDROCK_MODEL_ID") or None,
        bedrock_guardrail_id=os.getenv("BEDROCK_GUARDRAIL_ID"),
        bedrock_guardrail_ver=guardrail_version,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        typo_correction_enabled=_bool_env("TYPO_CORRECTION_ENABLED", default=True),
        typo_max_output_tokens=_int_env("TYPO_MAX_OUTPUT_TOKENS", 100),
        fallback_max_output_tokens=_int_env("FALLBACK_MAX_OUTPUT_TOKENS", 8192),
        scope_data_en_path=os.getenv(
            "SCOPE_DATA_EN_PATH", str(DEFAULT_DATA_DIR / "scope_en.json")
        ),
        scope_data_id_path=os.getenv(
            "SCOPE_DATA_ID_PATH", str(DEFAULT_DATA_DIR / "scope_id.json")
        ),
        scope_data_en_s3_uri=os.getenv("SCOPE_DATA_EN_S3_URI") or None,
        scope_data_id_s3_uri=os.getenv("SCOPE_DATA_ID_S3_URI") or None,
    )


@lru_cache(maxsize=1)
def _boto_session():
    """Create and cache a boto3 session bound to the configured region."""
    settings = get_settings()
    return boto3.session.Session(region_name=settings.aws_region)


def get_bedrock_runtime_client():
    """Return a boto3 Bedrock runtime client."""
    return _boto_session().client("bedrock-runtime", config=SINGLE_ATTEMPT)


def get_s3_client():
    """Return a boto3 S3 client."""
    return _boto_session().client("s3")


def configure_logging():
    """Configure the root logger once using LOG_LEVEL from the environment."""
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def clear_caches() -> None:
    """Reset cached settings and sessions (useful for tests)."""
    get_settings.cache_clear()
    _boto_session.cache_clear()
