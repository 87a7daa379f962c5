"""Payload models shared by the services and the API layer."""

from duplicate_review.models.comparison import (
    CandidateDocument,
    CandidateStatus,
    ComparisonPayload,
    DocumentInfo,
    Match,
    Side,
    SortKey,
    SortOrder,
    StatusFilter,
)

__all__ = [
    "CandidateDocument",
    "CandidateStatus",
    "ComparisonPayload",
    "DocumentInfo",
    "Match",
    "Side",
    "SortKey",
    "SortOrder",
    "StatusFilter",
]
