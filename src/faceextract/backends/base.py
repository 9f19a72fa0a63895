"""Backend protocol definitions for face detection."""

from dataclasses import dataclass
from typing import Protocol, List
import numpy as np


@dataclass
class DetectedFace:
    """Result from face detection backend.

    Attributes:
        bbox: Bounding box (x, y, width, height) in pixels, origin top-left.
        confidence: Detection confidence [0, 1].
    """

    bbox: tuple[int, int, int, int]  # x, y, w, h in pixels
    confidence: float


class FaceDetectionBackend(Protocol):
    """Protocol for face detection backends.

    Implementations should be swappable without changing pipeline logic.
    Examples: InsightFace SCRFD, YuNet, RetinaFace.
    """

    def initialize(self, device: str = "cpu") -> None:
        """Initialize the backend and load models."""
        ...

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in a BGR image (H, W, 3)."""
        ...

    def cleanup(self) -> None:
        """Release resources and unload models."""
        ...


__all__ = ["DetectedFace", "FaceDetectionBackend"]
