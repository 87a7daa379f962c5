"""
比对视图服务 - 为一份检测结果组装可直接渲染的左右对照视图

组合分句、高亮和候选文档排序，不做任何 I/O。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from duplicate_review.core.logging import LogEvent
from duplicate_review.models.comparison import (
    CandidateDocument,
    ComparisonPayload,
    Match,
    Side,
    SortKey,
    SortOrder,
    StatusFilter,
)
from duplicate_review.services.base_service import BaseService, singleton
from duplicate_review.services.candidate_ranker import filter_and_sort, merge_latest_sources, with_status
from duplicate_review.services.match_highlighter import find_companion, highlight, segment_offsets
from duplicate_review.services.text_segmenter import segment_spans, text_stats
from duplicate_review.services.types import CompanionLink, ComparisonView, Segment, ViewStatistics


@dataclass
class ViewOptions:
    """Selection and candidate-list controls of a comparison view."""

    document_id: Optional[str] = None
    filter_status: StatusFilter = StatusFilter.ALL
    sort_by: SortKey = SortKey.DUPLICATE_RATE
    sort_order: SortOrder = SortOrder.DESC
    limit: Optional[int] = None
    # 最新一次检测的来源文档，用于刷新候选列表
    latest_sources: List[CandidateDocument] = field(default_factory=list)


@singleton
class ComparisonViewService(BaseService):
    """组装比对视图"""

    def build_view(
        self,
        payload: ComparisonPayload,
        options: Optional[ViewOptions] = None,
    ) -> ComparisonView:
        options = options or ViewOptions()

        selected_id = self.select_document_id(payload, options.document_id)
        matches = self.matches_for_document(payload.detailed_matches, selected_id)

        subject_text = payload.current_document.content
        other_text = self._other_text(payload, selected_id)
        subject_segments = highlight(subject_text, matches, Side.SUBJECT)
        other_segments = highlight(other_text, matches, Side.OTHER)

        companions = self._companions(matches, subject_segments, other_segments)
        statistics = self._statistics(payload, matches, subject_text, subject_segments, other_segments)

        high, medium = self.settings.get_status_thresholds()
        merged = merge_latest_sources(payload.matching_documents, options.latest_sources, high, medium)
        candidates = filter_and_sort(
            [with_status(candidate, high, medium) for candidate in merged],
            options.filter_status,
            options.sort_by,
            options.sort_order,
        )
        total_candidates = len(candidates)
        if options.limit is not None:
            candidates = candidates[: options.limit]

        self.logger.info(
            LogEvent.VIEW_BUILT,
            selected_document_id=selected_id,
            matches=len(matches),
            located=statistics.located_matches,
            subject_segments=len(subject_segments),
            other_segments=len(other_segments),
            candidates=total_candidates,
        )

        return ComparisonView(
            selected_document_id=selected_id,
            subject_segments=subject_segments,
            other_segments=other_segments,
            companions=companions,
            statistics=statistics,
            candidates=candidates,
            total_candidates=total_candidates,
        )

    @staticmethod
    def select_document_id(payload: ComparisonPayload, requested: Optional[str] = None) -> Optional[str]:
        """Requested document, else the most similar one, else the best match's document."""
        if requested:
            return requested
        if payload.most_similar_document and payload.most_similar_document.id:
            return payload.most_similar_document.id
        best = max(payload.detailed_matches, key=lambda match: match.similarity, default=None)
        return best.document_id if best else None

    @staticmethod
    def matches_for_document(matches: Sequence[Match], document_id: Optional[str]) -> List[Match]:
        # 未标注 documentId 的匹配对任意文档都有效
        return [
            match
            for match in matches
            if document_id is None or match.document_id is None or match.document_id == document_id
        ]

    @staticmethod
    def _other_text(payload: ComparisonPayload, selected_id: Optional[str]) -> str:
        other = payload.most_similar_document
        if other is None:
            return ""
        if other.id is None or selected_id is None or other.id == selected_id:
            return other.content
        # 只有最相似文档附带正文
        return ""

    @staticmethod
    def _companions(
        matches: Sequence[Match],
        subject_segments: Sequence[Segment],
        other_segments: Sequence[Segment],
    ) -> Dict[str, CompanionLink]:
        companions: Dict[str, CompanionLink] = {}
        for match in matches:
            if match.id is None or match.id in companions:
                continue
            subject_index = find_companion(subject_segments, match.id)
            other_index = find_companion(other_segments, match.id)
            if subject_index is None and other_index is None:
                continue
            companions[match.id] = CompanionLink(
                match_id=match.id,
                subject_index=subject_index,
                other_index=other_index,
            )
        return companions

    def _statistics(
        self,
        payload: ComparisonPayload,
        matches: Sequence[Match],
        subject_text: str,
        subject_segments: Sequence[Segment],
        other_segments: Sequence[Segment],
    ) -> ViewStatistics:
        stats = text_stats(subject_text)
        intervals = _highlighted_intervals(subject_segments)
        duplicate_sentences = sum(
            1
            for start, end in segment_spans(subject_text)
            if any(low < end and start < high for low, high in intervals)
        )
        sentence_rate = (
            round(duplicate_sentences / stats.sentences * 100, 2) if stats.sentences else 0.0
        )

        located_ids = {segment.match_id for segment in subject_segments if segment.highlight}
        located = sum(1 for match in matches if match.id in located_ids)

        tagged = bool(located_ids) or any(segment.highlight for segment in other_segments)
        has_highlights = tagged or (
            payload.current_document.duplicate_rate > self.settings.highlight_fallback_rate
        )

        return ViewStatistics(
            characters=stats.characters,
            words=stats.words,
            total_sentences=stats.sentences,
            duplicate_sentences=duplicate_sentences,
            sentence_duplicate_rate=sentence_rate,
            dtotal=_dtotal(payload),
            overall_similarity=payload.overall_similarity,
            has_highlights=has_highlights,
            located_matches=located,
            skipped_matches=len(matches) - located,
        )


def _highlighted_intervals(segments: Sequence[Segment]) -> List[Tuple[int, int]]:
    return [
        (offset, offset + len(segment.text))
        for offset, segment in zip(segment_offsets(segments), segments)
        if segment.highlight is not None
    ]


def _dtotal(payload: ComparisonPayload) -> float:
    """Backend dtotal when present, else overall similarity, else the best match."""
    if payload.dtotal is not None:
        return round(payload.dtotal)
    if payload.overall_similarity:
        return round(payload.overall_similarity)
    best = max((match.similarity for match in payload.detailed_matches), default=0.0)
    return round(best)
