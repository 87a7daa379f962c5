"""Comparison view APIs consumed by the review frontend."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from duplicate_review.api.deps import get_backend_session, get_detection_client, get_view_service
from duplicate_review.core.logging import get_logger
from duplicate_review.models.comparison import (
    CandidateDocument,
    ComparisonPayload,
    Match,
    Side,
    SortKey,
    SortOrder,
    StatusFilter,
)
from duplicate_review.services.candidate_ranker import filter_and_sort, with_status
from duplicate_review.services.comparison_view import ComparisonViewService, ViewOptions
from duplicate_review.services.detection_client import BackendSession, DetectionBackendClient
from duplicate_review.services.match_highlighter import (
    highlight,
    highlight_color,
    segment_offsets,
    similarity_color,
)
from duplicate_review.services.scroll_sync import sync_scroll
from duplicate_review.services.text_segmenter import segment, text_stats
from duplicate_review.services.types import ComparisonView, Segment

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/comparison", tags=["Comparison"])


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- requests ----

class ListControls(ApiModel):
    filter_status: StatusFilter = StatusFilter.ALL
    sort_by: SortKey = SortKey.DUPLICATE_RATE
    sort_order: SortOrder = SortOrder.DESC


class ViewRequest(ListControls):
    payload: ComparisonPayload
    document_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=0)
    latest_sources: List[CandidateDocument] = Field(default_factory=list)


class HighlightRequest(ApiModel):
    text: str = ""
    matches: List[Match] = Field(default_factory=list)
    side: Side = Side.SUBJECT


class SegmentRequest(ApiModel):
    text: str = ""


class CandidatesRequest(ListControls):
    candidates: List[CandidateDocument] = Field(default_factory=list)


class ScrollSyncRequest(ApiModel):
    source_scroll_top: float
    source_scroll_height: float
    source_client_height: float
    target_scroll_height: float
    target_client_height: float
    target_scroll_top: float = 0.0


# ---- responses ----

class HighlightOut(ApiModel):
    match_id: str
    similarity: float
    side: Side
    color: str
    tier_color: str


class SegmentOut(ApiModel):
    text: str
    start: int
    highlight: Optional[HighlightOut] = None


class HighlightResponse(ApiModel):
    segments: List[SegmentOut]
    highlighted_count: int


class TextStatsOut(ApiModel):
    characters: int
    words: int
    sentences: int


class SegmentResponse(ApiModel):
    sentences: List[str]
    stats: TextStatsOut


class CandidatesResponse(ApiModel):
    items: List[CandidateDocument]
    total: int
    filtered_out: int


class ScrollSyncResponse(ApiModel):
    target_scroll_top: float


class CompanionOut(ApiModel):
    match_id: str
    subject_index: Optional[int]
    other_index: Optional[int]


class StatisticsOut(ApiModel):
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


class ViewResponse(ApiModel):
    selected_document_id: Optional[str]
    subject_segments: List[SegmentOut]
    other_segments: List[SegmentOut]
    companions: Dict[str, CompanionOut]
    statistics: StatisticsOut
    candidates: List[CandidateDocument]
    total_candidates: int

    @classmethod
    def from_view(cls, view: ComparisonView) -> "ViewResponse":
        return cls(
            selected_document_id=view.selected_document_id,
            subject_segments=_segments_out(view.subject_segments),
            other_segments=_segments_out(view.other_segments),
            companions={
                match_id: CompanionOut(
                    match_id=link.match_id,
                    subject_index=link.subject_index,
                    other_index=link.other_index,
                )
                for match_id, link in view.companions.items()
            },
            statistics=StatisticsOut(
                characters=view.statistics.characters,
                words=view.statistics.words,
                total_sentences=view.statistics.total_sentences,
                duplicate_sentences=view.statistics.duplicate_sentences,
                sentence_duplicate_rate=view.statistics.sentence_duplicate_rate,
                dtotal=view.statistics.dtotal,
                overall_similarity=view.statistics.overall_similarity,
                has_highlights=view.statistics.has_highlights,
                located_matches=view.statistics.located_matches,
                skipped_matches=view.statistics.skipped_matches,
            ),
            candidates=view.candidates,
            total_candidates=view.total_candidates,
        )


def _segments_out(segments: Sequence[Segment]) -> List[SegmentOut]:
    items: List[SegmentOut] = []
    for start, segment in zip(segment_offsets(segments), segments):
        tag = segment.highlight
        items.append(
            SegmentOut(
                text=segment.text,
                start=start,
                highlight=HighlightOut(
                    match_id=tag.match_id,
                    similarity=tag.similarity,
                    side=tag.side,
                    color=highlight_color(tag.match_id),
                    tier_color=similarity_color(tag.similarity),
                ) if tag else None,
            )
        )
    return items


# ---- routes ----

@router.post("/view", response_model=ViewResponse, summary="Build a comparison view from a payload")
async def build_view(
    body: ViewRequest,
    service: ComparisonViewService = Depends(get_view_service),
) -> ViewResponse:
    view = service.build_view(
        body.payload,
        ViewOptions(
            document_id=body.document_id,
            filter_status=body.filter_status,
            sort_by=body.sort_by,
            sort_order=body.sort_order,
            limit=body.limit,
            latest_sources=body.latest_sources,
        ),
    )
    return ViewResponse.from_view(view)


@router.get(
    "/checks/{check_id}/view",
    response_model=ViewResponse,
    summary="Build a comparison view for a detection check",
)
async def build_check_view(
    check_id: str = Path(..., description="Detection check ID"),
    document_id: Optional[str] = Query(default=None, alias="documentId"),
    filter_status: StatusFilter = Query(default=StatusFilter.ALL, alias="filterStatus"),
    sort_by: SortKey = Query(default=SortKey.DUPLICATE_RATE, alias="sortBy"),
    sort_order: SortOrder = Query(default=SortOrder.DESC, alias="sortOrder"),
    limit: Optional[int] = Query(default=None, ge=0),
    client: DetectionBackendClient = Depends(get_detection_client),
    session: BackendSession = Depends(get_backend_session),
    service: ComparisonViewService = Depends(get_view_service),
) -> ViewResponse:
    logger.info("Building comparison view for check", check_id=check_id, document_id=document_id)
    payload = await client.fetch_comparison(check_id, session)
    view = service.build_view(
        payload,
        ViewOptions(
            document_id=document_id,
            filter_status=filter_status,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
        ),
    )
    return ViewResponse.from_view(view)


@router.post("/highlight", response_model=HighlightResponse, summary="Highlight matches in a text")
async def highlight_text(body: HighlightRequest) -> HighlightResponse:
    segments = highlight(body.text, body.matches, body.side)
    return HighlightResponse(
        segments=_segments_out(segments),
        highlighted_count=sum(1 for segment in segments if segment.highlight),
    )


@router.post("/segments", response_model=SegmentResponse, summary="Split a text into sentences")
async def segment_text(body: SegmentRequest) -> SegmentResponse:
    stats = text_stats(body.text)
    return SegmentResponse(
        sentences=segment(body.text),
        stats=TextStatsOut(characters=stats.characters, words=stats.words, sentences=stats.sentences),
    )


@router.post("/candidates", response_model=CandidatesResponse, summary="Filter and sort candidates")
async def rank_candidates(
    body: CandidatesRequest,
    service: ComparisonViewService = Depends(get_view_service),
) -> CandidatesResponse:
    high, medium = service.settings.get_status_thresholds()
    items = filter_and_sort(
        [with_status(candidate, high, medium) for candidate in body.candidates],
        body.filter_status,
        body.sort_by,
        body.sort_order,
    )
    return CandidatesResponse(
        items=items,
        total=len(items),
        filtered_out=len(body.candidates) - len(items),
    )


@router.post("/scroll-sync", response_model=ScrollSyncResponse, summary="Map a scroll offset between panes")
async def scroll_sync(body: ScrollSyncRequest) -> ScrollSyncResponse:
    return ScrollSyncResponse(
        target_scroll_top=sync_scroll(
            body.source_scroll_top,
            body.source_scroll_height,
            body.source_client_height,
            body.target_scroll_height,
            body.target_client_height,
            body.target_scroll_top,
        )
    )
