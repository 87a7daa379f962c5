"""Dual-pane scroll synchronisation."""
from typing import Dict, Optional, Union

from duplicate_review.models.comparison import Side
from duplicate_review.services.types import PaneGeometry


def sync_scroll(
    source_scroll_top: float,
    source_scroll_height: float,
    source_client_height: float,
    target_scroll_height: float,
    target_client_height: float,
    target_scroll_top: float = 0.0,
) -> float:
    """
    Map the source pane's scroll fraction onto the target pane.

    Returns ``target_scroll_top`` unchanged when either pane's content fits in
    its viewport. The fraction is clamped to [0, 1] so overscroll never pushes
    the target past its range.
    """
    source_range = source_scroll_height - source_client_height
    target_range = target_scroll_height - target_client_height
    if source_range <= 0 or target_range <= 0:
        return target_scroll_top

    fraction = min(max(source_scroll_top / source_range, 0.0), 1.0)
    return fraction * target_range


class DualPaneScrollSync:
    """
    Keeps two panes scrolled to the same relative position.

    Either pane may drive. Applying an offset to the target makes the target
    emit its own scroll event; that echo is consumed once instead of being
    synced back to the source.
    """

    def __init__(
        self,
        subject: Optional[PaneGeometry] = None,
        other: Optional[PaneGeometry] = None,
    ):
        self.panes: Dict[Side, PaneGeometry] = {
            Side.SUBJECT: subject or PaneGeometry(),
            Side.OTHER: other or PaneGeometry(),
        }
        self._pending_echo: Dict[Side, Optional[float]] = {Side.SUBJECT: None, Side.OTHER: None}

    def resize(self, side: Union[Side, str], scroll_height: float, client_height: float) -> None:
        pane = self.panes[Side(side)]
        pane.scroll_height = scroll_height
        pane.client_height = client_height

    def is_syncing(self, side: Union[Side, str]) -> bool:
        """True while an offset applied to ``side`` has not echoed back yet."""
        return self._pending_echo[Side(side)] is not None

    def on_scroll(self, side: Union[Side, str], scroll_top: float) -> Optional[float]:
        """
        Handle a scroll event from ``side``.

        Returns:
            The offset to apply to the opposite pane, or None when the event is
            the echo of a previous sync or the opposite pane needs no change.
        """
        side = Side(side)
        source = self.panes[side]
        source.scroll_top = scroll_top

        if self._pending_echo[side] is not None:
            self._pending_echo[side] = None
            return None

        target_side = Side.OTHER if side == Side.SUBJECT else Side.SUBJECT
        target = self.panes[target_side]
        new_top = sync_scroll(
            source.scroll_top,
            source.scroll_height,
            source.client_height,
            target.scroll_height,
            target.client_height,
            target.scroll_top,
        )
        if new_top == target.scroll_top:
            return None

        target.scroll_top = new_top
        self._pending_echo[target_side] = new_top
        return new_top
