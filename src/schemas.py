"""Pydantic models for the scope reference dataset and search payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return ""
    return str(value)


def _object_items(value: Any) -> List[Dict[str, Any]]:
    """Keep only object entries of a child collection; anything else is empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


class _ScopeNode(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class ChildDetail(_ScopeNode):
    """Leaf classification unit."""

    code: str = ""
    title: str = ""
    description: str = Field(default="", alias="nace_child_detail_description")

    @field_validator("code", "title", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)


class NaceChild(_ScopeNode):
    code: str = ""
    title: str = Field(default="", alias="nace_child_title")
    details: List[ChildDetail] = Field(default_factory=list, alias="nace_child_detail")

    @field_validator("code", "title", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("details", mode="before")
    @classmethod
    def _details(cls, value: Any) -> List[Dict[str, Any]]:
        return _object_items(value)


class Nace(_ScopeNode):
    code: str = ""
    description: str = Field(default="", alias="nace_description")

    @field_validator("code", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)


class NaceDetail(_ScopeNode):
    nace: Nace = Field(alias="NACE")
    children: List[NaceChild] = Field(default_factory=list, alias="NACE_CHILD")

    @field_validator("children", mode="before")
    @classmethod
    def _children(cls, value: Any) -> List[Dict[str, Any]]:
        return _object_items(value)


class IafScope(_ScopeNode):
    iaf_code: str = Field(default="", alias="IAF_CODE")
    nace_details: List[NaceDetail] = Field(default_factory=list, alias="NACE_DETAIL_INFORMATION")

    @field_validator("iaf_code", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("nace_details", mode="before")
    @classmethod
    def _nace_details(cls, value: Any) -> List[Dict[str, Any]]:
        # A NACE detail without a NACE object cannot be matched or grouped.
        return [item for item in _object_items(value) if isinstance(item.get("NACE"), dict)]


class ScopeEntry(_ScopeNode):
    """One certification standard's classification tree."""

    standard: str = Field(default="", alias="standar")
    scope: List[IafScope] = Field(default_factory=list)

    @field_validator("standard", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("scope", mode="before")
    @classmethod
    def _scope(cls, value: Any) -> List[Dict[str, Any]]:
        return _object_items(value)


ScopeDataset = Dict[str, ScopeEntry]


def parse_scope_document(document: Dict[str, Any]) -> ScopeDataset:
    """Normalize a raw scope document; non-object scope values are skipped."""
    return {
        str(key): ScopeEntry.model_validate(value)
        for key, value in document.items()
        if isinstance(value, dict)
    }


def dump_scope_dataset(dataset: ScopeDataset) -> Dict[str, Any]:
    """Serialize a normalized dataset back to its wire keys."""
    return {key: entry.model_dump(by_alias=True) for key, entry in dataset.items()}


class MatchRecord(BaseModel):
    """A matched leaf reference, from the matcher or declared by the AI fallback."""

    model_config = ConfigDict(extra="ignore")

    scope_key: str
    iaf_code: Optional[str] = None
    nace_code: Optional[str] = None
    nace_child_code: Optional[str] = None
    nace_child_detail_code: Optional[str] = None
    relevance_score: int = 0

    @field_validator("scope_key", mode="before")
    @classmethod
    def _scope_key(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("iaf_code", "nace_code", "nace_child_code", "nace_child_detail_code", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return _as_text(value)

    @field_validator("relevance_score", mode="before")
    @classmethod
    def _parse_score(cls, value: Any) -> int:
        if value in (None, "") or isinstance(value, bool):
            return 0
        try:
            return int(float(value))
        except (ValueError, TypeError):
            return 0


class NaceRef(BaseModel):
    code: str
    description: str


class NaceChildRef(BaseModel):
    code: str
    title: str


class DetailEntry(BaseModel):
    code: str
    title: str
    description: str


class ResultCard(BaseModel):
    """Grouped search result for one (scope, IAF, NACE, NACE child) combination."""

    model_config = ConfigDict(populate_by_name=True)

    scope_key: str
    standard: str = Field(alias="standar")
    iaf_code: str
    nace: NaceRef
    nace_child: NaceChildRef
    nace_child_details: List[DetailEntry] = Field(default_factory=list)
    relevance_score: int = 0


class SearchRequest(BaseModel):
    """Inbound request body."""

    query: StrictStr = Field(min_length=1)


class SearchResponse(BaseModel):
    """Outbound payload; optional fields are omitted when unset."""

    model_config = ConfigDict(populate_by_name=True)

    results: List[ResultCard] = Field(default_factory=list, alias="hasil_pencarian")
    explanation: str = Field(alias="penjelasan")
    suggestion: str = Field(alias="saran")
    total: int = Field(alias="total_hasil")
    query: str
    corrected_query: Optional[str] = None
    raw_ai_response: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
