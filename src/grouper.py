"""Group matched leaves into result cards keyed by scope, IAF, NACE and NACE child."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Set, Tuple

from schemas import (
    ChildDetail,
    DetailEntry,
    MatchRecord,
    NaceChildRef,
    NaceRef,
    ResultCard,
    ScopeDataset,
)

logger = logging.getLogger(__name__)

IafMatcher = Callable[[str, str], bool]
CardKey = Tuple[str, str, str, str]


def exact_iaf_match(dataset_label: str, requested: str) -> bool:
    return dataset_label == requested


def contains_iaf_match(dataset_label: str, requested: str) -> bool:
    """Lenient match for labels echoed back by the AI, e.g. a shortened "Agriculture (01)".

    Only the text before the first "(" is compared, as a substring of the dataset label.
    """
    return requested.split("(")[0].strip() in dataset_label


def _target_first(details: List[ChildDetail], target_code: str | None) -> List[ChildDetail]:
    if not target_code:
        return list(details)
    return sorted(details, key=lambda detail: detail.code != target_code)


def group_matches(
    matches: Iterable[MatchRecord],
    dataset: ScopeDataset,
    iaf_matcher: IafMatcher = exact_iaf_match,
) -> List[ResultCard]:
    """Merge matches into cards holding every detail of the matched NACE child.

    Matches are processed by descending relevance so each card keeps the score of
    its best match. Detail codes are unique within a card and the detail a match
    points at is listed first when that match created the card's entries.
    """
    ordered = sorted(matches, key=lambda match: match.relevance_score, reverse=True)
    cards: Dict[CardKey, ResultCard] = {}
    seen_codes: Dict[CardKey, Set[str]] = {}

    for match in ordered:
        entry = dataset.get(match.scope_key)
        if entry is None:
            continue

        for iaf_scope in entry.scope:
            if match.iaf_code and not iaf_matcher(iaf_scope.iaf_code, match.iaf_code):
                continue

            for nace_detail in iaf_scope.nace_details:
                if match.nace_code and nace_detail.nace.code != match.nace_code:
                    continue

                for nace_child in nace_detail.children:
                    if match.nace_child_code and nace_child.code != match.nace_child_code:
                        continue

                    key = (match.scope_key, iaf_scope.iaf_code, nace_detail.nace.code, nace_child.code)
                    card = cards.get(key)
                    if card is None:
                        card = ResultCard(
                            scope_key=match.scope_key,
                            standard=entry.standard,
                            iaf_code=iaf_scope.iaf_code,
                            nace=NaceRef(
                                code=nace_detail.nace.code,
                                description=nace_detail.nace.description,
                            ),
                            nace_child=NaceChildRef(code=nace_child.code, title=nace_child.title),
                            relevance_score=match.relevance_score,
                        )
                        cards[key] = card
                        seen_codes[key] = set()

                    codes = seen_codes[key]
                    for detail in _target_first(nace_child.details, match.nace_child_detail_code):
                        if detail.code in codes:
                            continue
                        codes.add(detail.code)
                        card.nace_child_details.append(
                            DetailEntry(
                                code=detail.code,
                                title=detail.title,
                                description=detail.description,
                            )
                        )

    results = [card for card in cards.values() if card.nace_child_details]
    logger.info(
        "results_grouped",
        extra={
            "cards": len(results),
            "detail_codes": sum(len(card.nace_child_details) for card in results),
        },
    )
    return results
