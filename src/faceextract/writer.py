"""OutputWriter - Encode face crops to JPEG files."""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from faceextract.config import DEFAULT_JPEG_QUALITY
from faceextract.errors import DirectoryCreateError, WriteError

logger = logging.getLogger(__name__)


class OutputWriter:
    """Write face crops as ``<identifier>.jpg`` into one directory.

    The directory (with parents) is created once, on :meth:`prepare` or on
    the first :meth:`write`, whichever comes first.

    Args:
        output_dir: Destination directory.
        jpeg_quality: JPEG encoder quality (0-100).
    """

    def __init__(self, output_dir: Union[str, Path], jpeg_quality: int = DEFAULT_JPEG_QUALITY):
        self._output_dir = Path(output_dir)
        self._jpeg_quality = jpeg_quality
        self._prepared = False

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def prepare(self) -> None:
        """Create the output directory.

        Raises:
            DirectoryCreateError: If the directory cannot be created.
        """
        if self._prepared:
            return
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(
                f"Cannot create output directory {self._output_dir}: {e}"
            ) from e
        self._prepared = True
        logger.debug("Output directory ready: %s", self._output_dir)

    def write(self, pixels: np.ndarray, identifier: str) -> Path:
        """Encode ``pixels`` as JPEG and write ``<identifier>.jpg``.

        Returns:
            Path of the written file.

        Raises:
            WriteError: If encoding or writing fails.
        """
        self.prepare()
        path = self._output_dir / f"{identifier}.jpg"

        try:
            ok, jpeg_data = cv2.imencode(
                ".jpg", pixels,
                [cv2.IMWRITE_JPEG_QUALITY, self._jpeg_quality],
            )
        except cv2.error as e:
            raise WriteError(f"Cannot encode {path.name}: {e}") from e
        if not ok:
            raise WriteError(f"Cannot encode {path.name}")

        try:
            path.write_bytes(jpeg_data.tobytes())
        except OSError as e:
            raise WriteError(f"Cannot write {path}: {e}") from e

        logger.debug("Wrote %s", path)
        return path


__all__ = ["OutputWriter"]
