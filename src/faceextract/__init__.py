"""faceextract - Crop every face in a folder of photos to its own JPEG.

Example:
    >>> from faceextract import FaceDetector, FaceExtractionPipeline, PipelineConfig
    >>> config = PipelineConfig.create("photos", detect_all_faces=False)
    >>> with FaceDetector() as detector:
    ...     result = FaceExtractionPipeline(config, detector).run()
    >>> print(result.faces_written)
"""

from faceextract.config import PipelineConfig
from faceextract.cropper import crop_face
from faceextract.decode import decode_image
from faceextract.detector import FaceDetector, normalize_detections
from faceextract.errors import (
    DecodeError,
    DegenerateCropError,
    DetectionError,
    DirectoryCreateError,
    EmptyInputError,
    FaceExtractError,
    FatalError,
    NotFoundError,
    WriteError,
)
from faceextract.geometry import clamp_rect, expand_rect, map_face_box, to_pixel_rect
from faceextract.pipeline import FaceExtractionPipeline, PipelineState, RunResult
from faceextract.reporting import ConsoleReporter, Reporter
from faceextract.source import list_images
from faceextract.types import (
    DecodedImage,
    FaceCrop,
    ImageRecord,
    NormalizedFaceBox,
    PixelRect,
)
from faceextract.writer import OutputWriter

__all__ = [
    "PipelineConfig",
    "crop_face",
    "decode_image",
    "FaceDetector",
    "normalize_detections",
    "FaceExtractError",
    "FatalError",
    "NotFoundError",
    "EmptyInputError",
    "DirectoryCreateError",
    "DecodeError",
    "DetectionError",
    "DegenerateCropError",
    "WriteError",
    "to_pixel_rect",
    "expand_rect",
    "clamp_rect",
    "map_face_box",
    "FaceExtractionPipeline",
    "PipelineState",
    "RunResult",
    "ConsoleReporter",
    "Reporter",
    "list_images",
    "ImageRecord",
    "DecodedImage",
    "NormalizedFaceBox",
    "PixelRect",
    "FaceCrop",
    "OutputWriter",
]
