"""Mapping of normalized face boxes to pixel crop rectangles.

Detector boxes use a bottom-left origin in the unit square; pixel
rectangles use a top-left origin. A face box is converted, expanded by a
margin on every side around its center, then clamped to the image.
"""

from __future__ import annotations

import math

from faceextract.config import DEFAULT_MARGIN_FACTOR
from faceextract.errors import DegenerateCropError
from faceextract.types import NormalizedFaceBox, PixelRect

# Float noise below this is dropped before snapping to the pixel grid.
_SNAP_DIGITS = 6

RawRect = tuple[float, float, float, float]  # x, y, w, h in pixels


def to_pixel_rect(box: NormalizedFaceBox, image_width: int, image_height: int) -> RawRect:
    """Convert a normalized bottom-left box to a top-left pixel rect.

    Returns:
        Tuple ``(x, y, w, h)`` of floats, not yet expanded or clamped.
    """
    w = box.width * image_width
    h = box.height * image_height
    x = box.x * image_width
    y = (1 - box.y) * image_height - h
    return x, y, w, h


def expand_rect(rect: RawRect, margin_factor: float = DEFAULT_MARGIN_FACTOR) -> PixelRect:
    """Grow a rect by ``margin_factor`` of its size on every side.

    The center is preserved; the resulting size is
    ``raw * (1 + 2 * margin_factor)``. The origin is floored and the far
    edge ceiled so the integer rect covers the float rect.
    """
    x, y, w, h = rect
    dx = w * margin_factor
    dy = h * margin_factor
    x1 = math.floor(round(x - dx, _SNAP_DIGITS))
    y1 = math.floor(round(y - dy, _SNAP_DIGITS))
    x2 = math.ceil(round(x + w + dx, _SNAP_DIGITS))
    y2 = math.ceil(round(y + h + dy, _SNAP_DIGITS))
    return PixelRect(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


def clamp_rect(rect: PixelRect, image_width: int, image_height: int) -> PixelRect:
    """Intersect ``rect`` with ``[0, image_width) x [0, image_height)``.

    Raises:
        DegenerateCropError: If nothing of the rect is left inside the image.
    """
    x1 = max(0, rect.x)
    y1 = max(0, rect.y)
    x2 = min(image_width, rect.x2)
    y2 = min(image_height, rect.y2)
    if x2 <= x1 or y2 <= y1:
        raise DegenerateCropError(
            f"Crop rect {rect} is empty inside {image_width}x{image_height} image"
        )
    return PixelRect(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


def map_face_box(
    box: NormalizedFaceBox,
    image_width: int,
    image_height: int,
    margin_factor: float = DEFAULT_MARGIN_FACTOR,
) -> PixelRect:
    """Map a detector box to the clamped pixel rect to crop.

    Raises:
        DegenerateCropError: If the expanded rect falls outside the image.
    """
    raw = to_pixel_rect(box, image_width, image_height)
    expanded = expand_rect(raw, margin_factor)
    return clamp_rect(expanded, image_width, image_height)


__all__ = ["to_pixel_rect", "expand_rect", "clamp_rect", "map_face_box"]
