"""
文本分句 - 用于"总句数"统计的朴素分句

按连续的 ``.``、``!``、``?`` 切分，不处理缩写和语言差异。结果只作为重复率展示的分母，
从不参与匹配。
"""
import re
from typing import List, Optional, Tuple

from duplicate_review.services.types import TextStats

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def segment_spans(text: Optional[str]) -> List[Tuple[int, int]]:
    """Character spans ``(start, end)`` of each trimmed, non-empty sentence."""
    if not text:
        return []

    spans: List[Tuple[int, int]] = []
    start = 0
    for boundary in _SENTENCE_BOUNDARY.finditer(text):
        _append_trimmed(spans, text, start, boundary.start())
        start = boundary.end()
    _append_trimmed(spans, text, start, len(text))
    return spans


def _append_trimmed(spans: List[Tuple[int, int]], text: str, start: int, end: int) -> None:
    piece = text[start:end]
    stripped = piece.strip()
    if not stripped:
        return
    offset = start + (len(piece) - len(piece.lstrip()))
    spans.append((offset, offset + len(stripped)))


def segment(text: Optional[str]) -> List[str]:
    """Split ``text`` into sentence-like units; empty input gives ``[]``."""
    if not text:
        return []
    return [text[start:end] for start, end in segment_spans(text)]


def count_words(text: Optional[str]) -> int:
    if not text or not text.strip():
        return 0
    return len(text.split())


def text_stats(text: Optional[str]) -> TextStats:
    """Character, word and sentence counters shown next to a document."""
    text = text or ""
    return TextStats(
        characters=len(text),
        words=count_words(text),
        sentences=len(segment(text)),
    )
