"""Face detection backends."""

from faceextract.backends.base import DetectedFace, FaceDetectionBackend

__all__ = ["DetectedFace", "FaceDetectionBackend"]
