"""Deterministic keyword search over the scope hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from schemas import ChildDetail, IafScope, MatchRecord, NaceChild, NaceDetail, ScopeDataset

IAF_WEIGHT = 30
NACE_WEIGHT = 25
NACE_CHILD_WEIGHT = 20
TITLE_WEIGHT = 15
DESCRIPTION_WEIGHT = 10
KEYWORD_BONUS = 5

# Fields are tested in this order and only the first hit per keyword counts.
LEVEL_WEIGHTS: Tuple[int, ...] = (
    IAF_WEIGHT,
    NACE_WEIGHT,
    NACE_CHILD_WEIGHT,
    TITLE_WEIGHT,
    DESCRIPTION_WEIGHT,
)


@dataclass(frozen=True)
class LeafScore:
    matched_levels: Tuple[bool, ...]
    matched_keywords: int

    @property
    def score(self) -> int:
        level_score = sum(
            weight for weight, matched in zip(LEVEL_WEIGHTS, self.matched_levels) if matched
        )
        return level_score + KEYWORD_BONUS * self.matched_keywords


def score_leaf(keywords: Sequence[str], fields: Sequence[str]) -> LeafScore:
    """Credit each keyword to the first field (by level priority) containing it."""
    matched = [False] * len(LEVEL_WEIGHTS)
    matched_keywords = 0
    for keyword in keywords:
        if not keyword:
            continue
        for level, text in enumerate(fields):
            if keyword in text:
                matched[level] = True
                matched_keywords += 1
                break
    return LeafScore(matched_levels=tuple(matched), matched_keywords=matched_keywords)


def iter_leaves(
    dataset: ScopeDataset,
) -> Iterator[Tuple[str, IafScope, NaceDetail, NaceChild, ChildDetail]]:
    for scope_key, entry in dataset.items():
        for iaf_scope in entry.scope:
            for nace_detail in iaf_scope.nace_details:
                for nace_child in nace_detail.children:
                    for child_detail in nace_child.details:
                        yield scope_key, iaf_scope, nace_detail, nace_child, child_detail


def search_scope_data(keywords: Sequence[str], dataset: ScopeDataset) -> List[MatchRecord]:
    """Return one record per leaf that matched at least one keyword, in dataset order."""
    results: List[MatchRecord] = []
    for scope_key, iaf_scope, nace_detail, nace_child, child_detail in iter_leaves(dataset):
        fields = (
            iaf_scope.iaf_code.lower(),
            nace_detail.nace.description.lower(),
            nace_child.title.lower(),
            child_detail.title.lower(),
            child_detail.description.lower(),
        )
        leaf = score_leaf(keywords, fields)
        if leaf.matched_keywords == 0:
            continue
        results.append(
            MatchRecord(
                scope_key=scope_key,
                iaf_code=iaf_scope.iaf_code,
                nace_code=nace_detail.nace.code,
                nace_child_code=nace_child.code,
                nace_child_detail_code=child_detail.code,
                relevance_score=leaf.score,
            )
        )

    return results
