"""InsightFace SCRFD backend for face detection."""

import contextlib
import io
from pathlib import Path
from typing import List, Optional, Union
import logging

import numpy as np

from faceextract.backends.base import DetectedFace
from faceextract.paths import insightface_root

logger = logging.getLogger(__name__)


class InsightFaceSCRFD:
    """Face detection backend using InsightFace SCRFD.

    Args:
        model_name: Model pack name (default: "buffalo_l").
        det_size: Detection input size (width, height).
        det_thresh: Detection confidence threshold.
        models_dir: Directory for downloaded model packs. Resolved by
            :func:`faceextract.paths.insightface_root`.

    Example:
        >>> backend = InsightFaceSCRFD()
        >>> backend.initialize("cpu")
        >>> faces = backend.detect(image)
        >>> backend.cleanup()
    """

    def __init__(
        self,
        model_name: str = "buffalo_l",
        det_size: tuple[int, int] = (640, 640),
        det_thresh: float = 0.5,
        models_dir: Optional[Union[str, Path]] = None,
    ):
        self._model_name = model_name
        self._det_size = det_size
        self._det_thresh = det_thresh
        self._models_dir = models_dir
        self._app: Optional[object] = None
        self._initialized = False
        self._actual_provider = "unknown"

    def initialize(self, device: str = "cpu") -> None:
        """Initialize InsightFace app with the SCRFD detector only."""
        if self._initialized:
            return

        try:
            from insightface.app import FaceAnalysis
            import onnxruntime as ort
        except ImportError:
            raise ImportError(
                "insightface is required for InsightFaceSCRFD backend. "
                "Install with: pip install faceextract[ml]"
            )

        ort.set_default_logger_severity(3)

        available_providers = ort.get_available_providers()
        logger.debug(f"Available ONNX providers: {available_providers}")

        # insightface uses ctx_id: 0 for GPU, -1 for CPU
        if device.startswith("cuda"):
            ctx_id = int(device.split(":")[-1]) if ":" in device else 0
            if "CUDAExecutionProvider" in available_providers:
                providers = ["CUDAExecutionProvider", "CPUExecutionProvider"]
                self._actual_provider = "CUDA"
            else:
                providers = ["CPUExecutionProvider"]
                self._actual_provider = "CPU (CUDA unavailable)"
                logger.warning("CUDAExecutionProvider not available, falling back to CPU")
        else:
            ctx_id = -1
            providers = ["CPUExecutionProvider"]
            self._actual_provider = "CPU"

        try:
            # FaceAnalysis prints model discovery chatter to stdout
            with contextlib.redirect_stdout(io.StringIO()):
                self._app = FaceAnalysis(
                    name=self._model_name,
                    root=str(insightface_root(self._models_dir)),
                    allowed_modules=["detection"],
                    providers=providers,
                )
                self._app.prepare(ctx_id=ctx_id, det_size=self._det_size)
        except Exception as e:
            logger.error(f"Failed to initialize InsightFace: {e}")
            raise

        self._initialized = True
        logger.info(f"InsightFace SCRFD initialized (provider={self._actual_provider})")

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces using SCRFD.

        Args:
            image: BGR image as numpy array (H, W, 3).

        Returns:
            Detected faces with pixel bounding boxes.
        """
        if not self._initialized or self._app is None:
            raise RuntimeError("Backend not initialized. Call initialize() first.")

        results = []
        for face in self._app.get(image):
            if face.det_score < self._det_thresh:
                continue

            # Snap outward so the box never loses a partial pixel
            x1, y1 = np.floor(face.bbox[:2]).astype(int)
            x2, y2 = np.ceil(face.bbox[2:4]).astype(int)
            x, y = int(x1), int(y1)
            w, h = int(x2 - x1), int(y2 - y1)

            results.append(DetectedFace(bbox=(x, y, w, h), confidence=float(face.det_score)))

        return results

    def cleanup(self) -> None:
        """Release model resources."""
        self._app = None
        self._initialized = False
        logger.info("InsightFace SCRFD cleaned up")


__all__ = ["InsightFaceSCRFD"]
