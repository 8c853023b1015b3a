"""Rectangle helpers for region-of-interest management."""

from __future__ import annotations

from typing import Iterable, List

from facetrack.types import Point, Rect, rect_area

SELECTION_POLICIES = ("smallest", "largest")


def frame_bounds(width: int, height: int) -> Rect:
    return (0, 0, int(width), int(height))


def offset_rect(rect: Rect, origin: Point) -> Rect:
    """Translate a rectangle found inside a sub-window back to frame space."""
    x, y, w, h = rect
    ox, oy = origin
    return (x + ox, y + oy, w, h)


def clip_rect(rect: Rect, bounds: Rect) -> Rect:
    """Intersect ``rect`` with ``bounds``; disjoint inputs collapse to a zero-size rect."""
    x, y, w, h = rect
    bx, by, bw, bh = bounds
    x1 = min(max(x, bx), bx + bw)
    y1 = min(max(y, by), by + bh)
    x2 = min(max(x + w, bx), bx + bw)
    y2 = min(max(y + h, by), by + bh)
    return (x1, y1, max(0, x2 - x1), max(0, y2 - y1))


def expand_double(rect: Rect, bounds: Rect) -> Rect:
    """Double ``rect`` around its own center and clip it to ``bounds``.

    Overflow past the left or top edge moves the origin onto the edge and
    shrinks the size by the overflow. Overflow past the right or bottom edge
    truncates the size.
    """
    x, y, w, h = rect
    bx, by, bw, bh = bounds

    out_w = w * 2
    out_h = h * 2
    out_x = x - w // 2
    out_y = y - h // 2

    if out_x < bx:
        out_w += out_x - bx
        out_x = bx
    if out_y < by:
        out_h += out_y - by
        out_y = by

    right = bx + bw
    bottom = by + bh
    out_x = min(out_x, right)
    out_y = min(out_y, bottom)
    if out_x + out_w > right:
        out_w = right - out_x
    if out_y + out_h > bottom:
        out_h = bottom - out_y

    return (out_x, out_y, max(0, out_w), max(0, out_h))


def center_of(rect: Rect) -> Point:
    x, y, w, h = rect
    return (x + w // 2, y + h // 2)


def select_representative(candidates: Iterable[Rect], policy: str = "smallest") -> Rect:
    """Pick the one candidate that stands for the tracked face.

    ``"smallest"`` keeps the minimum-area box, ``"largest"`` the maximum-area
    one. Equal areas are resolved on the coordinates so the answer does not
    depend on the order the detector reported the boxes in.
    """
    boxes: List[Rect] = [tuple(int(v) for v in box) for box in candidates]  # type: ignore[misc]
    if not boxes:
        raise ValueError("select_representative requires at least one candidate")
    if policy == "smallest":
        return min(boxes, key=lambda box: (rect_area(box), box))
    if policy == "largest":
        return min(boxes, key=lambda box: (-rect_area(box), box))
    raise ValueError(f"Unknown selection policy {policy!r}; expected one of {SELECTION_POLICIES}")
