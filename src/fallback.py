"""AI fallback search used when the keyword search finds nothing."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError

import guard
from bedrock_client import TextCompletion
from grouper import contains_iaf_match, group_matches
from schemas import MatchRecord, ResultCard, ScopeDataset, dump_scope_dataset

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_TOKENS = 8192

FALLBACK_PROMPT_TEMPLATE = """
Tugas Anda:
1. Analisis maksud pencarian user: "{query}"
2. Temukan SEMUA scope, IAF_CODE, NACE, NACE_CHILD, dan nace_child_detail yang mengandung kata kunci dari data scope berikut
3. Cari kecocokan di SEMUA level: standar, IAF_CODE, NACE description, nace_child_title, title, dan terutama nace_child_detail_description
4. KEMBALIKAN SEMUA HASIL yang ditemukan, jangan dibatasi hanya top results
5. Urutkan berdasarkan relevansi tertinggi
6. Format response dalam JSON dengan struktur:
{{
    "hasil_pencarian": [
        {{
            "scope_key": "scope_9001_2015",
            "iaf_code": "Pertanian, Kehutanan, dan Perikanan (01)",
            "nace_code": "01",
            "nace_child_code": "01.1",
            "nace_child_detail_code": "01.11",
            "relevance_score": 95
        }},
        ... (kembalikan SEMUA hasil yang match, bisa ratusan)
    ],
    "penjelasan": "penjelasan singkat kenapa hasil ini cocok",
    "saran": "saran tambahan jika ada"
}}

Data Scope yang tersedia:
{scope_context}

Pencarian user: "{query}"

ATURAN PENTING:
- Cari di semua level termasuk nace_child_detail_description yang sangat detail
- KEMBALIKAN SEMUA hasil yang mengandung kata kunci, JANGAN batasi jumlahnya
- Jika kata kunci ditemukan di IAF_CODE, NACE description, atau detail description, HARUS dikembalikan
- Berikan relevance_score (0-100) untuk setiap hasil
- hasil_pencarian harus array of objects dengan struktur di atas (bisa ratusan items)
- Urutkan dari relevance_score tertinggi
- Berikan response dalam format JSON yang valid
- JANGAN skip hasil yang relevan, kembalikan SEMUA yang ditemukan
"""


class AIServiceError(RuntimeError):
    """Raised when the AI service returns no usable text."""


@dataclass
class FallbackResult:
    cards: List[ResultCard]
    explanation: str
    suggestion: Optional[str]


def build_fallback_prompt(query: str, dataset: ScopeDataset) -> str:
    scope_context = json.dumps(dump_scope_dataset(dataset), indent=2, ensure_ascii=False)
    return FALLBACK_PROMPT_TEMPLATE.format(query=query, scope_context=scope_context)


def _match_records(items: list) -> List[MatchRecord]:
    records: List[MatchRecord] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            records.append(MatchRecord.model_validate(item))
        except ValidationError as exc:
            logger.warning("ai_result_item_invalid", extra={"error": str(exc)})
    return records


def ai_search(
    query: str,
    dataset: ScopeDataset,
    completion: TextCompletion,
    *,
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
) -> FallbackResult:
    """Ask the AI to perform the scope search, then re-validate and group its answer.

    Raises ``AIServiceError`` when the completion is empty and
    ``guard.AIResponseMalformed`` when the answer lacks a result list.
    """
    raw_text = completion.complete(
        build_fallback_prompt(query, dataset), max_output_tokens=max_output_tokens
    )
    if not raw_text:
        raise AIServiceError("Invalid response from AI")

    try:
        answer = guard.parse_ai_answer(raw_text)
    except guard.AIResponseMalformed:
        logger.error("ai_response_malformed", extra={"raw_ai_response": raw_text})
        raise

    records = _match_records(answer["hasil_pencarian"])
    logger.info("ai_fallback_results", extra={"declared": len(answer["hasil_pencarian"]), "valid": len(records)})

    cards = group_matches(records, dataset, iaf_matcher=contains_iaf_match)
    explanation = answer.get("penjelasan")
    suggestion = answer.get("saran")
    return FallbackResult(
        cards=cards,
        explanation=explanation if isinstance(explanation, str) else "",
        suggestion=suggestion if isinstance(suggestion, str) else None,
    )
