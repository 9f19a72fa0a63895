"""Run configuration."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

DEFAULT_MARGIN_FACTOR = 0.6
DEFAULT_JPEG_QUALITY = 95
DEFAULT_OUTPUT_SUBDIR = "faces"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable settings for one extraction run.

    Attributes:
        input_dir: Directory scanned for images.
        output_dir: Directory receiving ``<identifier>.jpg`` crops.
        detect_all_faces: When False, images with more than one face are
            skipped entirely.
        margin_factor: Fraction of the face size added on every side.
        jpeg_quality: JPEG encoder quality (0-100).
        detect_timeout: Seconds to wait for one detection call, or None to
            wait indefinitely.
    """

    input_dir: Path
    output_dir: Path
    detect_all_faces: bool = True
    margin_factor: float = DEFAULT_MARGIN_FACTOR
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    detect_timeout: Optional[float] = None

    def __post_init__(self):
        if self.margin_factor < 0:
            raise ValueError(f"margin_factor must be >= 0, got {self.margin_factor}")
        if not 0 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in [0, 100], got {self.jpeg_quality}")
        if self.detect_timeout is not None and self.detect_timeout <= 0:
            raise ValueError(f"detect_timeout must be > 0, got {self.detect_timeout}")

    @classmethod
    def create(
        cls,
        input_dir: Union[str, Path],
        output_dir: Optional[Union[str, Path]] = None,
        **kwargs,
    ) -> "PipelineConfig":
        """Build a config, defaulting ``output_dir`` to ``{input_dir}/faces``."""
        input_dir = Path(input_dir)
        if output_dir is None:
            output_dir = input_dir / DEFAULT_OUTPUT_SUBDIR
        return cls(input_dir=input_dir, output_dir=Path(output_dir), **kwargs)
