"""Convert between viewport space (top-left, scaled) and page space (bottom-left)."""

from __future__ import annotations

from .config import MANUAL_SELECTION_TEXT, MIN_DRAG_PIXELS
from .errors import InputValidationError
from .models import Match, SelectionRect


def is_degenerate_drag(width_px: float, height_px: float) -> bool:
    """True when a drag is too small to be a deliberate selection."""
    return width_px < MIN_DRAG_PIXELS or height_px < MIN_DRAG_PIXELS


def selection_from_drag(
    start: tuple[float, float],
    end: tuple[float, float],
    scale: float,
    page_index: int,
    viewport_height_px: float,
) -> SelectionRect | None:
    """Turn a drag gesture in display pixels into an unscaled ``SelectionRect``.

    The drag may run in any direction. Returns ``None`` for a degenerate
    drag; the size check happens on display pixels, before unscaling.
    """
    if scale <= 0:
        raise InputValidationError(f"Display scale must be positive, got {scale}")

    x = min(start[0], end[0])
    y = min(start[1], end[1])
    width = abs(end[0] - start[0])
    height = abs(end[1] - start[1])
    if is_degenerate_drag(width, height):
        return None

    return SelectionRect(
        x=x / scale,
        y=y / scale,
        width=width / scale,
        height=height / scale,
        page_index=page_index,
        viewport_height=viewport_height_px / scale,
    )


def reconcile(selection: SelectionRect) -> Match:
    """Flip an unscaled viewport rectangle into a page-space ``Match``.

    Only ``y`` changes: ``y_doc = viewport_height - y - height``.
    """
    return Match(
        page_index=selection.page_index,
        x=selection.x,
        y=selection.viewport_height - selection.y - selection.height,
        width=selection.width,
        height=selection.height,
        text=MANUAL_SELECTION_TEXT,
    )


def to_viewport(match: Match, viewport_height: float) -> SelectionRect:
    """Inverse of ``reconcile``: page-space box back to top-left viewport space."""
    return SelectionRect(
        x=match.x,
        y=viewport_height - match.y - match.height,
        width=match.width,
        height=match.height,
        page_index=match.page_index,
        viewport_height=viewport_height,
    )
