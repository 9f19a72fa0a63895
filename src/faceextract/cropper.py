"""Face crop extraction."""

import numpy as np

from faceextract.geometry import clamp_rect
from faceextract.types import DecodedImage, PixelRect


def crop_face(image: DecodedImage, rect: PixelRect) -> np.ndarray:
    """Cut ``rect`` out of ``image``.

    The rect is clamped to the image bounds first, so the read never goes
    out of range. The returned array is a copy; the source is untouched.

    Raises:
        DegenerateCropError: If the clamped rect is empty.
    """
    r = clamp_rect(rect, image.width, image.height)
    return image.pixels[r.y:r.y2, r.x:r.x2].copy()


__all__ = ["crop_face"]
