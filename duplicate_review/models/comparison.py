"""
比对结果数据模型 - 检测后端返回的比对结果

后端数据可信：数值不做范围校验，缺失的可选字段使用空默认值，未知字段直接忽略。
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Side(str, Enum):
    """Which of the two compared documents a rendering belongs to."""

    SUBJECT = "subject"
    OTHER = "other"


class CandidateStatus(str, Enum):
    """Duplicate-rate tier of a candidate document."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StatusFilter(str, Enum):
    ALL = "all"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SortKey(str, Enum):
    DUPLICATE_RATE = "duplicateRate"
    FILE_NAME = "fileName"
    UPLOADED_AT = "uploadedAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PayloadModel(BaseModel):
    """Base for backend payload models: camelCase keys, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def fallback_match_ids(ids: Sequence[Optional[str]]) -> List[str]:
    """
    Fill in missing match ids with ``match-<n>`` values.

    ``n`` starts at the match position and is bumped past any id already
    present, so a generated id never collides with an explicit one.
    """
    taken = {value for value in ids if value is not None}
    resolved: List[str] = []
    for index, value in enumerate(ids):
        if value is None:
            candidate = index
            while f"match-{candidate}" in taken:
                candidate += 1
            value = f"match-{candidate}"
            taken.add(value)
        resolved.append(value)
    return resolved


class Match(PayloadModel):
    """A claim that a span of the subject text resembles a span of another document."""

    id: Optional[str] = None
    document_id: Optional[str] = None
    original_text: str = Field(
        default="",
        validation_alias=AliasChoices("originalText", "original_text", "inputSentence"),
    )
    matched_text: str = Field(
        default="",
        validation_alias=AliasChoices(
            "matchedText",
            "matched_text",
            "docSentence",
            "matched",
            "sourceSentence",
            "matchedSentence",
        ),
    )
    similarity: float = 0.0

    @field_validator("id", "document_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("original_text", "matched_text", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else value

    @field_validator("similarity", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    def text_for(self, side: Side) -> str:
        """The substring this match claims on the given side."""
        return self.original_text if side == Side.SUBJECT else self.matched_text


class DocumentInfo(PayloadModel):
    """One of the two documents shown side by side."""

    id: Optional[str] = None
    file_name: str = ""
    file_size: int = 0
    file_type: str = ""
    author: str = ""
    word_count: Optional[int] = None
    duplicate_rate: float = Field(
        default=0.0,
        validation_alias=AliasChoices("duplicateRate", "duplicate_rate", "duplicatePercentage"),
    )
    content: str = Field(
        default="",
        validation_alias=AliasChoices("content", "originalText", "original_text"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("file_name", "file_type", "author", "content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else value

    @field_validator("file_size", "duplicate_rate", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class CandidateDocument(PayloadModel):
    """A row of the "documents matching this subject" list; read-only snapshot."""

    id: Optional[str] = None
    document_id: Optional[str] = None
    file_name: Optional[str] = None
    file_size: int = 0
    file_type: str = "Unknown"
    author: str = "Unknown"
    uploaded_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("uploadedAt", "uploaded_at", "createdAt"),
    )
    duplicate_rate: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("duplicateRate", "duplicate_rate", "duplicatePercentage"),
    )
    status: Optional[CandidateStatus] = None

    @field_validator("id", "document_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("uploaded_at", mode="before")
    @classmethod
    def _lenient_datetime(cls, value: Any) -> Any:
        # 无法解析的日期按缺失处理
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            except ValueError:
                return None
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _unknown_status(cls, value: Any) -> Any:
        if value in {s.value for s in CandidateStatus} or isinstance(value, CandidateStatus):
            return value
        return None


class ComparisonPayload(PayloadModel):
    """Detection backend result for one subject document."""

    current_document: DocumentInfo = Field(default_factory=DocumentInfo)
    most_similar_document: Optional[DocumentInfo] = None
    detailed_matches: List[Match] = Field(default_factory=list)
    overall_similarity: float = 0.0
    matching_documents: List[CandidateDocument] = Field(default_factory=list)
    # 后端汇总计数，仅透传
    dtotal: Optional[float] = None
    dab: Optional[float] = None

    @field_validator("overall_similarity", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("current_document", mode="before")
    @classmethod
    def _none_to_document(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("detailed_matches", "matching_documents", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("detailed_matches", mode="before")
    @classmethod
    def _flatten_sentence_details(cls, value: Any) -> Any:
        """
        Expand per-document entries that carry ``duplicateSentencesDetails``
        into one match per sentence detail.
        """
        if not isinstance(value, list):
            return value
        flattened: list[Any] = []
        for entry in value:
            details = entry.get("duplicateSentencesDetails") if isinstance(entry, dict) else None
            if not details:
                flattened.append(entry)
                continue
            parent_similarity = entry.get("similarity")
            parent_document = entry.get("documentId", entry.get("id"))
            for detail in details:
                if not isinstance(detail, dict):
                    continue
                item = dict(detail)
                item.pop("id", None)
                item.setdefault("documentId", parent_document)
                if not isinstance(item.get("similarity"), (int, float)):
                    item["similarity"] = parent_similarity
                flattened.append(item)
        return flattened

    @model_validator(mode="after")
    def _assign_missing_match_ids(self) -> "ComparisonPayload":
        ids = fallback_match_ids([match.id for match in self.detailed_matches])
        for match, match_id in zip(self.detailed_matches, ids):
            match.id = match_id
        return self
