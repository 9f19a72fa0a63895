"""FaceDetector - blocking adapter over a face detection backend.

Backends report pixel boxes with a top-left origin. The adapter turns them
into :class:`NormalizedFaceBox` values (unit square, bottom-left origin),
which is the contract the geometry stage consumes.
"""

import logging
import threading
from typing import List, Optional, Sequence

from faceextract.backends.base import DetectedFace, FaceDetectionBackend
from faceextract.errors import DetectionError
from faceextract.types import DecodedImage, NormalizedFaceBox

logger = logging.getLogger(__name__)


def normalize_detections(
    faces: Optional[Sequence[DetectedFace]],
    image_width: int,
    image_height: int,
) -> List[NormalizedFaceBox]:
    """Convert backend pixel boxes to normalized bottom-left boxes.

    Boxes are clipped to the image first; boxes left empty are dropped.
    ``None`` is treated as no faces.
    """
    if not faces:
        return []

    boxes = []
    for face in faces:
        x, y, w, h = face.bbox
        x1 = max(0, x)
        y1 = max(0, y)
        x2 = min(image_width, x + w)
        y2 = min(image_height, y + h)
        if x2 <= x1 or y2 <= y1:
            logger.debug("Dropping empty detection %s", face.bbox)
            continue

        boxes.append(
            NormalizedFaceBox(
                x=x1 / image_width,
                y=1 - y2 / image_height,
                width=(x2 - x1) / image_width,
                height=(y2 - y1) / image_height,
                confidence=face.confidence,
            )
        )
    return boxes


class FaceDetector:
    """Run a detection backend synchronously on decoded images.

    Args:
        backend: Detection backend. Defaults to :class:`InsightFaceSCRFD`,
            created on :meth:`initialize`.
        device: Device passed to the backend ("cpu", "cuda:0", ...).
        timeout: Seconds to wait for one ``detect`` call. ``None`` waits
            until the backend returns. A call that times out keeps running
            on a daemon thread; until it returns, later calls wait at most
            ``timeout`` for it and then fail without touching the backend.

    Example:
        >>> with FaceDetector() as detector:
        ...     boxes = detector.detect(image)
    """

    def __init__(
        self,
        backend: Optional[FaceDetectionBackend] = None,
        device: str = "cpu",
        timeout: Optional[float] = None,
    ):
        self._backend = backend
        self._device = device
        self._timeout = timeout
        self._stalled: Optional[threading.Thread] = None
        self._initialized = False

    @property
    def stalled(self) -> bool:
        """True while a timed-out backend call is still running."""
        return self._stalled is not None and self._stalled.is_alive()

    def initialize(self) -> None:
        if self._initialized:
            return

        if self._backend is None:
            from faceextract.backends.insightface import InsightFaceSCRFD
            self._backend = InsightFaceSCRFD()

        self._backend.initialize(self._device)
        self._initialized = True
        logger.info("FaceDetector initialized (%s)", type(self._backend).__name__)

    def cleanup(self) -> None:
        if self.stalled:
            logger.warning("Abandoning a face detection call that never returned")
        if self._backend is not None and self._initialized:
            self._backend.cleanup()
        self._initialized = False

    def __enter__(self) -> "FaceDetector":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def detect(self, image: DecodedImage) -> List[NormalizedFaceBox]:
        """Detect faces and return normalized bottom-left boxes.

        Blocks until the backend has finished reading ``image``.

        Raises:
            DetectionError: If the backend fails or exceeds the timeout.
        """
        self.initialize()

        try:
            if self._timeout is None:
                faces = self._backend.detect(image.pixels)
            else:
                faces = self._detect_with_timeout(image.pixels)
        except DetectionError:
            raise
        except Exception as e:
            raise DetectionError(f"Face detection failed: {e}") from e

        return normalize_detections(faces, image.width, image.height)

    def _detect_with_timeout(self, pixels) -> Optional[List[DetectedFace]]:
        # Backends are not thread-safe: never start a call while one is running.
        if self._stalled is not None:
            self._stalled.join(self._timeout)
            if self._stalled.is_alive():
                raise DetectionError(
                    "Face detector is still busy with a call that timed out"
                )
            self._stalled = None

        outcome = {}

        def target() -> None:
            try:
                outcome["faces"] = self._backend.detect(pixels)
            except Exception as e:
                outcome["error"] = e

        # Daemon, so a call that never returns cannot keep the process alive.
        worker = threading.Thread(target=target, name="detect", daemon=True)
        worker.start()
        worker.join(self._timeout)

        if worker.is_alive():
            self._stalled = worker
            raise DetectionError(f"Face detection timed out after {self._timeout}s")
        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("faces")


__all__ = ["FaceDetector", "normalize_detections"]
