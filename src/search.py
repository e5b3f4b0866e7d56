"""Scope determination pipeline: typo correction, keyword search, AI fallback."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import config
import fallback
import guard
import nlu
import spelling
from bedrock_client import TextCompletion
from grouper import exact_iaf_match, group_matches
from matcher import search_scope_data
from schemas import ResultCard, ScopeDataset, SearchResponse
from scope_store import Language, load_scope_data

logger = logging.getLogger(__name__)

DIRECT_SUGGESTION = (
    "Periksa setiap kategori untuk menemukan scope yang paling sesuai dengan kegiatan "
    "perusahaan Anda. Anda dapat memilih lebih dari satu scope jika perusahaan memiliki "
    "berbagai jenis kegiatan."
)

DatasetLoader = Callable[[Language], ScopeDataset]


def typo_notice(query: str, corrected_query: str) -> str:
    return (
        "Kami mendeteksi kemungkinan typo pada pencarian Anda. "
        f'Pencarian "{query}" telah dikoreksi menjadi "{corrected_query}".\n\n'
    )


def direct_explanation(total: int, corrected_query: str) -> str:
    return (
        f'Ditemukan {total} kategori scope yang mengandung kata "{corrected_query}". '
        "Hasil ditampilkan berdasarkan tingkat relevansi, dengan yang paling sesuai "
        "ditampilkan terlebih dahulu."
    )


def compose_response(
    query: str,
    corrected_query: str,
    corrected: bool,
    results: List[ResultCard],
    explanation: str,
    suggestion: str,
    raw_ai_response: Optional[str] = None,
) -> SearchResponse:
    """Build the outbound payload, prefixing the typo notice when applicable."""
    if corrected:
        explanation = typo_notice(query, corrected_query) + explanation
    return SearchResponse(
        results=results,
        explanation=explanation,
        suggestion=suggestion,
        total=len(results),
        query=query,
        corrected_query=corrected_query if corrected else None,
        raw_ai_response=raw_ai_response,
    )


def run_search(
    query: str,
    completion: TextCompletion,
    *,
    dataset_loader: DatasetLoader = load_scope_data,
) -> SearchResponse:
    """Run the full search for one request.

    Raises ``fallback.AIServiceError`` when the AI fallback answers with empty text.
    """
    settings = config.get_settings()

    corrected_query, corrected = query, False
    if settings.typo_correction_enabled:
        corrected_query, corrected = spelling.correct_query(
            query, completion, max_output_tokens=settings.typo_max_output_tokens
        )

    language = nlu.detect_language(corrected_query)
    dataset = dataset_loader(language)
    logger.info("language_detected", extra={"language": language.value, "scopes": len(dataset)})

    keywords = nlu.extract_keywords(corrected_query)
    matches = search_scope_data(keywords, dataset)
    logger.info("direct_search_completed", extra={"keywords": keywords, "matches": len(matches)})

    if matches:
        cards = group_matches(matches, dataset, iaf_matcher=exact_iaf_match)
        return compose_response(
            query,
            corrected_query,
            corrected,
            cards,
            direct_explanation(len(cards), corrected_query),
            DIRECT_SUGGESTION,
        )

    logger.info("ai_fallback_triggered", extra={"query": corrected_query})
    try:
        result = fallback.ai_search(
            corrected_query,
            dataset,
            completion,
            max_output_tokens=settings.fallback_max_output_tokens,
        )
    except guard.AIResponseMalformed as exc:
        return compose_response(
            query,
            corrected_query,
            corrected,
            [],
            guard.MALFORMED_EXPLANATION,
            guard.MALFORMED_SUGGESTION,
            raw_ai_response=exc.raw_text,
        )

    return compose_response(
        query,
        corrected_query,
        corrected,
        result.cards,
        result.explanation,
        result.suggestion if result.suggestion is not None else DIRECT_SUGGESTION,
    )
