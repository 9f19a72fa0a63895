"""Face extraction domain types."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class ImageRecord:
    """An eligible image file found in the input directory.

    Attributes:
        path: Path to the image file.
        index: 1-based ordinal of the file in the batch.
    """

    path: Path
    index: int


@dataclass
class DecodedImage:
    """Decoded pixels of one source image.

    Attributes:
        pixels: BGR image as numpy array (H, W, 3).
        path: Source file, if the image came from disk.
    """

    pixels: np.ndarray
    path: Optional[Path] = None

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


@dataclass(frozen=True)
class NormalizedFaceBox:
    """Face bounding box as fractions of the image size.

    The origin is the bottom-left corner of the image, so ``y`` is the
    distance of the box's lower edge from the bottom of the frame.

    Attributes:
        x: Left edge [0, 1].
        y: Bottom edge [0, 1].
        width: Box width, at most ``1 - x``.
        height: Box height, at most ``1 - y``.
        confidence: Detection confidence [0, 1].
    """

    x: float
    y: float
    width: float
    height: float
    confidence: float = 1.0


@dataclass(frozen=True)
class PixelRect:
    """Integer rectangle in pixel space, origin top-left.

    Before clamping the rectangle may extend past the image bounds.
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        return self.x + self.width

    @property
    def y2(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass
class FaceCrop:
    """A cropped face ready to be written.

    Attributes:
        pixels: Cropped BGR pixels (h, w, 3).
        source_index: Ordinal of the source image in the batch.
        identifier: Run-unique opaque token, used as the output file stem.
        rect: Clamped rectangle the crop was taken from.
    """

    pixels: np.ndarray
    source_index: int
    identifier: str
    rect: Optional[PixelRect] = None


__all__ = [
    "ImageRecord",
    "DecodedImage",
    "NormalizedFaceBox",
    "PixelRect",
    "FaceCrop",
]
