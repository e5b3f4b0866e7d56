"""Validation of structured answers returned by the AI fallback search."""

from __future__ import annotations

import json
import re
from typing import Any, Dict

MALFORMED_EXPLANATION = "Terjadi kesalahan dalam memproses respons AI"
MALFORMED_SUGGESTION = "Silakan coba dengan kata kunci yang lebih spesifik"

_JSON_FENCE_START = re.compile(r"^```json\s*")
_FENCE_START = re.compile(r"^```\s*")
_FENCE_END = re.compile(r"\s*```$")


class AIResponseMalformed(ValueError):
    """Raised when the AI answer is not a JSON object with a result list."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


def strip_code_fence(text: str) -> str:
    """Remove an optional surrounding ```json / ``` markdown fence."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = _FENCE_END.sub("", _JSON_FENCE_START.sub("", cleaned))
    elif cleaned.startswith("```"):
        cleaned = _FENCE_END.sub("", _FENCE_START.sub("", cleaned))
    return cleaned


def parse_ai_answer(raw_text: str) -> Dict[str, Any]:
    """
    Parse the AI fallback answer.

    Returns the decoded object; its ``hasil_pencarian`` is guaranteed to be a list.
    """
    try:
        payload = json.loads(strip_code_fence(raw_text))
    except json.JSONDecodeError as exc:
        raise AIResponseMalformed(f"AI response is not valid JSON: {exc}", raw_text) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("hasil_pencarian"), list):
        raise AIResponseMalformed("Invalid AI response structure", raw_text)

    return payload
