"""
匹配高亮 - 把文本切分为普通片段和高亮片段

匹配按输入顺序占用字符。每个匹配只标记其子串第一个完全落在未标记字符上的出现位置，
之后的出现保持普通文本；找不到这样位置的匹配直接跳过。重复的短语只会被高亮一次。
"""
import hashlib
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from duplicate_review.core.logging import LogEvent, get_logger
from duplicate_review.models.comparison import Match, Side, fallback_match_ids
from duplicate_review.services.types import Highlight, Segment

logger = get_logger(__name__)

# 高亮调色板，按 match id 稳定取色
HIGHLIGHT_PALETTE: Tuple[str, ...] = (
    "#fecaca",  # red
    "#fed7aa",  # orange
    "#fef08a",  # yellow
    "#bbf7d0",  # green
    "#bfdbfe",  # blue
    "#c7d2fe",  # indigo
    "#e9d5ff",  # purple
    "#fbcfe8",  # pink
    "#a5f3fc",  # cyan
    "#99f6e4",  # teal
)

SIMILARITY_HIGH_COLOR = "#ef4444"
SIMILARITY_MEDIUM_COLOR = "#f59e0b"
SIMILARITY_LOW_COLOR = "#22c55e"


def highlight(
    text: Optional[str],
    matches: Optional[Iterable[Union[Match, dict]]],
    side: Union[Side, str] = Side.SUBJECT,
) -> List[Segment]:
    """
    Compute the run partition of ``text`` for one side of a comparison.

    Args:
        text: text to render
        matches: matches in backend order; earlier matches claim characters first
        side: ``subject`` uses ``original_text``, ``other`` uses ``matched_text``

    Returns:
        Ordered segments whose texts concatenate back to ``text``.
    """
    if not text:
        return []

    side = Side(side)
    tags: List[Optional[Highlight]] = [None] * len(text)

    resolved = [_as_match(raw) for raw in matches or []]
    match_ids = fallback_match_ids([match.id for match in resolved])

    for match, match_id in zip(resolved, match_ids):
        span = _first_untagged_occurrence(text, match.text_for(side), tags)
        if span is None:
            logger.debug(LogEvent.MATCH_SKIPPED, match_id=match_id, side=side.value)
            continue
        tag = Highlight(
            match_id=match_id,
            similarity=float(match.similarity),
            side=side,
        )
        for position in range(*span):
            tags[position] = tag

    return _collect_runs(text, tags)


def _as_match(raw: Union[Match, dict, Any]) -> Match:
    if isinstance(raw, Match):
        return raw
    return Match.model_validate(raw)


def _first_untagged_occurrence(
    text: str,
    needle: str,
    tags: Sequence[Optional[Highlight]],
) -> Optional[Tuple[int, int]]:
    """Leftmost occurrence of ``needle`` whose whole span is untagged."""
    if not needle:
        return None

    start = text.find(needle)
    while start != -1:
        end = start + len(needle)
        if all(tags[position] is None for position in range(start, end)):
            return start, end
        start = text.find(needle, start + 1)
    return None


def _identity(tag: Optional[Highlight]) -> Optional[str]:
    return tag.match_id if tag is not None else None


def _collect_runs(text: str, tags: Sequence[Optional[Highlight]]) -> List[Segment]:
    segments: List[Segment] = []
    run_start = 0
    for position in range(1, len(text) + 1):
        if position == len(text) or _identity(tags[position]) != _identity(tags[run_start]):
            segments.append(Segment(text=text[run_start:position], highlight=tags[run_start]))
            run_start = position
    return segments


def find_companion(segments: Sequence[Segment], match_id: str) -> Optional[int]:
    """Index of the first segment tagged with ``match_id``, used for jump-to-companion."""
    for index, segment in enumerate(segments):
        if segment.match_id == match_id:
            return index
    return None


def segment_offsets(segments: Sequence[Segment]) -> List[int]:
    """Start offset of every segment in the original text."""
    offsets: List[int] = []
    position = 0
    for segment in segments:
        offsets.append(position)
        position += len(segment.text)
    return offsets


def highlight_color(match_id: str) -> str:
    """Palette colour for a match id, stable across processes."""
    digest = hashlib.sha256(str(match_id).encode("utf-8")).hexdigest()
    return HIGHLIGHT_PALETTE[int(digest[:8], 16) % len(HIGHLIGHT_PALETTE)]


def similarity_color(similarity: float) -> str:
    if similarity >= 80:
        return SIMILARITY_HIGH_COLOR
    if similarity >= 60:
        return SIMILARITY_MEDIUM_COLOR
    return SIMILARITY_LOW_COLOR


__all__ = [
    "HIGHLIGHT_PALETTE",
    "find_companion",
    "highlight",
    "highlight_color",
    "segment_offsets",
    "similarity_color",
]
