"""Test helpers: synthetic images and stand-in collaborators."""

from pathlib import Path
from typing import Dict, List, Optional, Union

import cv2
import numpy as np

from faceextract.types import DecodedImage, NormalizedFaceBox


def make_image(width: int = 200, height: int = 100) -> np.ndarray:
    """Create a BGR test image with a horizontal/vertical gradient."""
    xs = np.linspace(0, 255, width, dtype=np.uint8)
    ys = np.linspace(0, 255, height, dtype=np.uint8)
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :, 0] = xs[None, :]
    img[:, :, 1] = ys[:, None]
    img[:, :, 2] = 128
    return img


def write_image(path: Path, width: int = 200, height: int = 100) -> Path:
    """Write a gradient test image; format follows the file extension."""
    assert cv2.imwrite(str(path), make_image(width, height))
    return path


class FakeDetector:
    """Detector stub answering by source file name.

    ``faces`` maps a file name to the boxes to return, or to an exception
    instance to raise. Unknown names yield no faces.
    """

    def __init__(self, faces: Optional[Dict[str, Union[List[NormalizedFaceBox], Exception]]] = None):
        self._faces = faces or {}
        self.calls: List[str] = []

    def detect(self, image: DecodedImage) -> List[NormalizedFaceBox]:
        name = image.path.name
        self.calls.append(name)
        result = self._faces.get(name, [])
        if isinstance(result, Exception):
            raise result
        return result


class RecordingReporter:
    """Reporter that keeps every message instead of printing."""

    def __init__(self):
        self.progress_calls = []
        self.infos = []
        self.errors = []
        self.failures = []

    def progress(self, current, total, path):
        self.progress_calls.append((current, total, path))

    def info(self, message):
        self.infos.append(message)

    def error(self, message):
        self.errors.append(message)

    def fail(self, message):
        self.failures.append(message)
