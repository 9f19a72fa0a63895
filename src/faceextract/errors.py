"""Exception hierarchy for face extraction.

Errors are grouped by blast radius:

- ``FatalError``: the run cannot proceed (no input, no output directory).
- Image-scoped: one source image is skipped (``DecodeError``,
  ``DetectionError``).
- Face-scoped: one face is skipped, its siblings still proceed
  (``DegenerateCropError``, ``WriteError``).
"""


class FaceExtractError(Exception):
    """Base class for all face extraction errors."""


class FatalError(FaceExtractError):
    """Error that aborts the whole run."""


class NotFoundError(FatalError):
    """Input directory is missing or cannot be listed."""


class EmptyInputError(FatalError):
    """Input directory contains no eligible image files."""


class DirectoryCreateError(FatalError):
    """Output directory could not be created."""


class DecodeError(FaceExtractError):
    """Image file could not be read or decoded."""


class DetectionError(FaceExtractError):
    """Face detector reported an error or did not complete in time."""


class DegenerateCropError(FaceExtractError):
    """Crop rectangle is empty after clamping to the image bounds."""


class WriteError(FaceExtractError, OSError):
    """Cropped face could not be encoded or written."""


__all__ = [
    "FaceExtractError",
    "FatalError",
    "NotFoundError",
    "EmptyInputError",
    "DirectoryCreateError",
    "DecodeError",
    "DetectionError",
    "DegenerateCropError",
    "WriteError",
]
