"""Tests for faceextract.detector.FaceDetector and box normalization."""

import os
import subprocess
import sys
import textwrap
import threading
from pathlib import Path

import numpy as np
import pytest

from faceextract.backends.base import DetectedFace
from faceextract.detector import FaceDetector, normalize_detections
from faceextract.errors import DetectionError
from faceextract.geometry import to_pixel_rect
from faceextract.types import DecodedImage


class MockBackend:
    """Mock backend returning a fixed detection list."""

    def __init__(self, faces=None, error=None, gate=None):
        self._faces = faces
        self._error = error
        self._gate = gate
        self.initialize_calls = 0
        self.cleanup_calls = 0
        self.device = None
        self.seen_shapes = []
        self.detect_calls = 0

    def initialize(self, device: str = "cpu") -> None:
        self.initialize_calls += 1
        self.device = device

    def detect(self, image):
        self.detect_calls += 1
        if self._gate is not None:
            self._gate.wait(5)
        self.seen_shapes.append(image.shape)
        if self._error is not None:
            raise self._error
        return self._faces

    def cleanup(self) -> None:
        self.cleanup_calls += 1


def _image(w=200, h=100):
    return DecodedImage(pixels=np.zeros((h, w, 3), dtype=np.uint8))


class TestNormalizeDetections:
    def test_bottom_left_origin(self):
        faces = [DetectedFace(bbox=(50, 25, 50, 25), confidence=0.9)]
        (box,) = normalize_detections(faces, 200, 100)

        assert box.x == pytest.approx(0.25)
        assert box.y == pytest.approx(0.5)
        assert box.width == pytest.approx(0.25)
        assert box.height == pytest.approx(0.25)
        assert box.confidence == pytest.approx(0.9)

    def test_maps_back_to_same_pixels(self):
        faces = [DetectedFace(bbox=(30, 10, 40, 60), confidence=0.8)]
        (box,) = normalize_detections(faces, 160, 90)
        assert to_pixel_rect(box, 160, 90) == pytest.approx((30, 10, 40, 60))

    def test_none_is_no_faces(self):
        assert normalize_detections(None, 100, 100) == []

    def test_clips_to_image(self):
        faces = [DetectedFace(bbox=(-10, -10, 30, 30), confidence=0.5)]
        (box,) = normalize_detections(faces, 100, 100)

        assert box.x == pytest.approx(0.0)
        assert box.y == pytest.approx(0.8)
        assert box.width == pytest.approx(0.2)
        assert box.height == pytest.approx(0.2)

    def test_boxes_stay_in_unit_square(self):
        faces = [DetectedFace(bbox=(90, 90, 50, 50), confidence=0.5)]
        (box,) = normalize_detections(faces, 100, 100)
        assert 0 <= box.x and box.x + box.width <= 1 + 1e-9
        assert 0 <= box.y and box.y + box.height <= 1 + 1e-9

    def test_drops_empty_boxes(self):
        faces = [
            DetectedFace(bbox=(120, 10, 10, 10), confidence=0.5),
            DetectedFace(bbox=(10, 10, 0, 10), confidence=0.5),
            DetectedFace(bbox=(10, 10, 10, 10), confidence=0.5),
        ]
        assert len(normalize_detections(faces, 100, 100)) == 1


class TestFaceDetector:
    def test_detect_returns_normalized_boxes(self):
        backend = MockBackend(faces=[DetectedFace(bbox=(0, 0, 200, 100), confidence=1.0)])
        detector = FaceDetector(backend)

        boxes = detector.detect(_image())

        assert len(boxes) == 1
        assert (boxes[0].x, boxes[0].y) == pytest.approx((0, 0))
        assert backend.seen_shapes == [(100, 200, 3)]

    def test_none_result_is_zero_faces(self):
        detector = FaceDetector(MockBackend(faces=None))
        assert detector.detect(_image()) == []

    def test_backend_error_becomes_detection_error(self):
        detector = FaceDetector(MockBackend(error=RuntimeError("model exploded")))
        with pytest.raises(DetectionError, match="model exploded"):
            detector.detect(_image())

    def test_initialize_is_lazy_and_once(self):
        backend = MockBackend(faces=[])
        detector = FaceDetector(backend, device="cuda:1")
        assert backend.initialize_calls == 0

        detector.detect(_image())
        detector.detect(_image())

        assert backend.initialize_calls == 1
        assert backend.device == "cuda:1"

    def test_context_manager_lifecycle(self):
        backend = MockBackend(faces=[])
        with FaceDetector(backend) as detector:
            assert backend.initialize_calls == 1
            detector.detect(_image())
        assert backend.cleanup_calls == 1

    def test_cleanup_without_initialize_is_noop(self):
        backend = MockBackend(faces=[])
        FaceDetector(backend).cleanup()
        assert backend.cleanup_calls == 0

    def test_timeout_raises_detection_error(self):
        gate = threading.Event()
        detector = FaceDetector(MockBackend(faces=[], gate=gate), timeout=0.05)
        try:
            with pytest.raises(DetectionError, match="timed out"):
                detector.detect(_image())
        finally:
            gate.set()
            detector.cleanup()

    def test_timeout_not_hit_returns_result(self):
        backend = MockBackend(faces=[DetectedFace(bbox=(10, 10, 20, 20), confidence=0.7)])
        with FaceDetector(backend, timeout=5.0) as detector:
            assert len(detector.detect(_image())) == 1

    def test_recovers_after_timeout(self):
        gate = threading.Event()
        backend = MockBackend(faces=[], gate=gate)
        detector = FaceDetector(backend, timeout=0.5)
        try:
            with pytest.raises(DetectionError):
                detector.detect(_image())
            assert detector.stalled

            gate.set()
            assert detector.detect(_image()) == []
            assert not detector.stalled
            assert backend.detect_calls == 2
        finally:
            gate.set()
            detector.cleanup()

    def test_stalled_call_fails_later_calls_without_reentering_backend(self):
        gate = threading.Event()
        backend = MockBackend(faces=[], gate=gate)
        detector = FaceDetector(backend, timeout=0.05)
        try:
            with pytest.raises(DetectionError, match="timed out"):
                detector.detect(_image())
            with pytest.raises(DetectionError, match="still busy"):
                detector.detect(_image())
            with pytest.raises(DetectionError, match="still busy"):
                detector.detect(_image())

            assert backend.detect_calls == 1
        finally:
            gate.set()
            detector.cleanup()

    def test_backend_error_with_timeout_becomes_detection_error(self):
        detector = FaceDetector(MockBackend(error=ValueError("bad tensor")), timeout=5.0)
        with pytest.raises(DetectionError, match="bad tensor"):
            detector.detect(_image())
        assert not detector.stalled

    def test_cleanup_with_stalled_call_still_cleans_backend(self):
        gate = threading.Event()
        backend = MockBackend(faces=[], gate=gate)
        detector = FaceDetector(backend, timeout=0.05)
        try:
            with pytest.raises(DetectionError):
                detector.detect(_image())
            detector.cleanup()
            assert backend.cleanup_calls == 1
        finally:
            gate.set()


SRC_DIR = Path(__file__).resolve().parents[1] / "src"

HANGING_BACKEND_SCRIPT = textwrap.dedent(
    """
    import time

    import numpy as np

    from faceextract.detector import FaceDetector
    from faceextract.errors import DetectionError
    from faceextract.types import DecodedImage


    class HangingBackend:
        def initialize(self, device="cpu"):
            pass

        def detect(self, image):
            time.sleep(60)
            return []

        def cleanup(self):
            pass


    detector = FaceDetector(HangingBackend(), timeout=0.1)
    image = DecodedImage(pixels=np.zeros((8, 8, 3), dtype=np.uint8))
    for _ in range(2):
        try:
            detector.detect(image)
        except DetectionError as e:
            print(e)
    detector.cleanup()
    """
)


class TestHangingBackendExit:
    """A backend call that never returns must not keep the process alive."""

    def test_process_exits_after_timeout(self):
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (str(SRC_DIR), env.get("PYTHONPATH", "")) if p
        )

        completed = subprocess.run(
            [sys.executable, "-c", HANGING_BACKEND_SCRIPT],
            capture_output=True,
            text=True,
            env=env,
            timeout=30,
        )

        assert completed.returncode == 0, completed.stderr
        assert "timed out after 0.1s" in completed.stdout
        assert "still busy" in completed.stdout
