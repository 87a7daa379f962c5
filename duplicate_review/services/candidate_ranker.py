"""Candidate document tiers, merge, filter and sort."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Union

from duplicate_review.models.comparison import (
    CandidateDocument,
    CandidateStatus,
    SortKey,
    SortOrder,
    StatusFilter,
)

DEFAULT_HIGH_THRESHOLD = 50.0
DEFAULT_MEDIUM_THRESHOLD = 25.0

_EPOCH_MIN = datetime.min.replace(tzinfo=timezone.utc)


def derive_status(
    duplicate_rate: Optional[float],
    high: float = DEFAULT_HIGH_THRESHOLD,
    medium: float = DEFAULT_MEDIUM_THRESHOLD,
) -> CandidateStatus:
    rate = duplicate_rate or 0.0
    if rate >= high:
        return CandidateStatus.HIGH
    if rate >= medium:
        return CandidateStatus.MEDIUM
    return CandidateStatus.LOW


def with_status(
    candidate: CandidateDocument,
    high: float = DEFAULT_HIGH_THRESHOLD,
    medium: float = DEFAULT_MEDIUM_THRESHOLD,
) -> CandidateDocument:
    """Copy of ``candidate`` with ``status`` filled in when the backend left it out."""
    if candidate.status is not None:
        return candidate
    return candidate.model_copy(update={"status": derive_status(candidate.duplicate_rate, high, medium)})


def filter_and_sort(
    candidates: Optional[Iterable[CandidateDocument]],
    filter_status: Union[StatusFilter, str] = StatusFilter.ALL,
    sort_by: Union[SortKey, str] = SortKey.DUPLICATE_RATE,
    sort_order: Union[SortOrder, str] = SortOrder.DESC,
) -> List[CandidateDocument]:
    """
    Filter candidates by status tier and order them by one key.

    Ties on the key are broken by ``id`` ascending, so the ordering is total
    and applying it twice gives the same result. The input is not mutated.
    """
    filter_status = StatusFilter(filter_status)
    sort_by = SortKey(sort_by)
    sort_order = SortOrder(sort_order)

    kept = [
        candidate
        for candidate in candidates or []
        if filter_status == StatusFilter.ALL or _effective_status(candidate).value == filter_status.value
    ]

    # 先按 id 排序，再按主键稳定排序；reverse 不会打乱相等元素的顺序
    ordered = sorted(kept, key=_tie_break_key)
    ordered.sort(key=_SORT_KEYS[sort_by], reverse=sort_order == SortOrder.DESC)
    return ordered


def _effective_status(candidate: CandidateDocument) -> CandidateStatus:
    return candidate.status or derive_status(candidate.duplicate_rate)


def _tie_break_key(candidate: CandidateDocument) -> str:
    return candidate.id if candidate.id is not None else ""


def _rate_key(candidate: CandidateDocument) -> float:
    return float(candidate.duplicate_rate or 0.0)


def _name_key(candidate: CandidateDocument) -> str:
    return candidate.file_name or ""


def _date_key(candidate: CandidateDocument) -> datetime:
    value = candidate.uploaded_at
    if value is None:
        return _EPOCH_MIN
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


_SORT_KEYS: dict[SortKey, Callable[[CandidateDocument], object]] = {
    SortKey.DUPLICATE_RATE: _rate_key,
    SortKey.FILE_NAME: _name_key,
    SortKey.UPLOADED_AT: _date_key,
}


def _same_document(left: CandidateDocument, right: CandidateDocument) -> bool:
    for attr in ("document_id", "file_name", "id"):
        left_value = getattr(left, attr)
        if left_value and left_value == getattr(right, attr):
            return True
    return False


def merge_latest_sources(
    original: Sequence[CandidateDocument],
    latest: Sequence[CandidateDocument],
    high: float = DEFAULT_HIGH_THRESHOLD,
    medium: float = DEFAULT_MEDIUM_THRESHOLD,
) -> List[CandidateDocument]:
    """
    Refresh candidate rates from a newer detection result.

    Candidates found again (by a non-empty document id, file name or id)
    take the newer rate and a re-derived status; candidates only present in
    ``latest`` are appended with defaults. Without a newer result the
    original list is returned as-is.
    """
    if not latest:
        return list(original)

    merged: List[CandidateDocument] = []
    for candidate in original:
        source = next((item for item in latest if _same_document(item, candidate)), None)
        if source is None:
            merged.append(candidate)
            continue
        rate = source.duplicate_rate or candidate.duplicate_rate or 0.0
        merged.append(
            candidate.model_copy(
                update={"duplicate_rate": rate, "status": derive_status(rate, high, medium)}
            )
        )

    now = datetime.now(timezone.utc)
    for source in latest:
        if any(_same_document(source, candidate) for candidate in original):
            continue
        rate = source.duplicate_rate or 0.0
        merged.append(
            source.model_copy(
                update={
                    "duplicate_rate": rate,
                    "status": derive_status(rate, high, medium),
                    "uploaded_at": source.uploaded_at or now,
                }
            )
        )
    return merged
