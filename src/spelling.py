"""AI-assisted typo correction for search queries."""

from __future__ import annotations

import logging
from typing import Tuple

from bedrock_client import TextCompletion

logger = logging.getLogger(__name__)

TYPO_PROMPT_TEMPLATE = """
Analyze the following search query and check for typos or spelling mistakes.
If there are typos, correct them and return ONLY the corrected query.
If there are no typos, return the original query exactly as is.

Context: This is for searching industrial/business scope certifications (ISO, manufacturing, services, etc.)

Common words in this domain (Indonesian & English):
- transportasi/transport, kendaraan/vehicle, otomotif/automotive
- pertanian/agriculture, perikanan/fishery, kehutanan/forestry
- manufaktur/manufacturing, produksi/production
- teknologi/technology, informasi/information
- konstruksi/construction, bangunan/building
- kesehatan/health, pendidikan/education
- keuangan/finance, perbankan/banking

Query: "{query}"

Instructions:
- ONLY return the corrected word/phrase, nothing else
- If no correction needed, return the exact original query
- Do NOT add explanations or extra text
- Examples:
  * "trasnport" -> "transport"
  * "transportsi" -> "transportasi"
  * "otmotif" -> "otomotif"
  * "kesehatn" -> "kesehatan"
  * "transport" -> "transport" (no change if already correct)
"""

DEFAULT_MAX_OUTPUT_TOKENS = 100


def build_typo_prompt(query: str) -> str:
    return TYPO_PROMPT_TEMPLATE.format(query=query)


def correct_query(
    query: str,
    completion: TextCompletion,
    *,
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
) -> Tuple[str, bool]:
    """Return ``(query, corrected)``; any failure keeps the original query."""
    try:
        suggestion = (completion.complete(build_typo_prompt(query), max_output_tokens=max_output_tokens) or "").strip()
    except Exception as exc:
        logger.warning("typo_correction_failed", extra={"error": str(exc)})
        return query, False

    if not suggestion or suggestion == query or suggestion.lower() == query.lower():
        logger.info("typo_not_detected", extra={"query": query})
        return query, False

    logger.info("typo_corrected", extra={"query": query, "corrected_query": suggestion})
    return suggestion, True
