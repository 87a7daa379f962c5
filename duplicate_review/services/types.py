"""Shared dataclasses used across services."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from duplicate_review.models.comparison import CandidateDocument, Side


@dataclass(frozen=True, slots=True)
class Highlight:
    """Tag carried by a highlighted run."""

    match_id: str
    similarity: float
    side: Side


@dataclass(slots=True)
class Segment:
    """Contiguous run of rendered text, plain when ``highlight`` is None."""

    text: str
    highlight: Optional[Highlight] = None

    @property
    def match_id(self) -> Optional[str]:
        return self.highlight.match_id if self.highlight else None


@dataclass(slots=True)
class TextStats:
    characters: int
    words: int
    sentences: int


@dataclass(slots=True)
class PaneGeometry:
    """Scroll geometry of one pane, in pixels."""

    scroll_top: float = 0.0
    scroll_height: float = 0.0
    client_height: float = 0.0


@dataclass(slots=True)
class CompanionLink:
    """Segment index carrying a match id on each side (None where absent)."""

    match_id: str
    subject_index: Optional[int] = None
    other_index: Optional[int] = None


@dataclass(slots=True)
class ViewStatistics:
    characters: int
    words: int
    total_sentences: int
    duplicate_sentences: int
    sentence_duplicate_rate: float
    dtotal: float
    overall_similarity: float
    has_highlights: bool
    located_matches: int
    skipped_matches: int


@dataclass(slots=True)
class ComparisonView:
    """Render-ready comparison of a subject document and one compared document."""

    selected_document_id: Optional[str]
    subject_segments: List[Segment]
    other_segments: List[Segment]
    companions: Dict[str, CompanionLink]
    statistics: ViewStatistics
    candidates: List[CandidateDocument] = field(default_factory=list)
    total_candidates: int = 0
