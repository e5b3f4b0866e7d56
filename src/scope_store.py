"""Read-only access to the scope reference datasets (English and Indonesian)."""

from __future__ import annotations

import json
import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

import config
from schemas import ScopeDataset, parse_scope_document

logger = logging.getLogger(__name__)


class Language(str, Enum):
    ENGLISH = "en"
    INDONESIAN = "id"


def _parse_s3_uri(uri: str) -> tuple[str, str]:
    if not uri.startswith("s3://"):
        raise ValueError("S3 URI must start with s3://")
    path = uri[5:]
    if "/" not in path:
        return path, ""
    bucket, key = path.split("/", 1)
    return bucket, key


def _sources(language: Language) -> tuple[str, Optional[str]]:
    settings = config.get_settings()
    if language is Language.INDONESIAN:
        return settings.scope_data_id_path, settings.scope_data_id_s3_uri
    return settings.scope_data_en_path, settings.scope_data_en_s3_uri


def _read_s3_document(uri: str) -> str:
    bucket, key = _parse_s3_uri(uri)
    try:
        obj = config.get_s3_client().get_object(Bucket=bucket, Key=key)
    except (ClientError, BotoCoreError) as exc:
        raise config.ConfigurationError(f"Failed to fetch scope data from {uri}") from exc
    return obj["Body"].read().decode("utf-8")


def _read_local_document(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise config.ConfigurationError(f"Scope data file not readable: {path}") from exc


def _decode(raw: str, source: str) -> Dict[str, Any]:
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise config.ConfigurationError(f"Scope data at {source} is not valid JSON") from exc
    if not isinstance(document, dict):
        raise config.ConfigurationError(f"Scope data at {source} must be a JSON object")
    return document


@lru_cache(maxsize=2)
def load_scope_data(language: Language) -> ScopeDataset:
    """Load, normalize and cache the dataset for ``language``.

    Priority:
    1) S3 object from ``SCOPE_DATA_<LANG>_S3_URI`` (format s3://bucket/key)
    2) Local path from ``SCOPE_DATA_<LANG>_PATH``
    """
    path, s3_uri = _sources(language)
    if s3_uri:
        source = s3_uri
        raw = _read_s3_document(s3_uri)
    else:
        source = path
        raw = _read_local_document(path)

    dataset = parse_scope_document(_decode(raw, source))
    logger.info(
        "scope_data_loaded",
        extra={"language": language.value, "source": source, "scopes": len(dataset)},
    )
    return dataset


def clear_caches() -> None:
    """Reset cached datasets (useful for tests)."""
    load_scope_data.cache_clear()
