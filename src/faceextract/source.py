"""Input directory scanning."""

import logging
import os
from pathlib import Path
from typing import List, Union

from faceextract.errors import EmptyInputError, NotFoundError
from faceextract.types import ImageRecord

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


def is_image_file(name: str) -> bool:
    """Return True if ``name`` ends in an accepted image extension (any case)."""
    return name.lower().endswith(IMAGE_EXTENSIONS)


def list_images(input_dir: Union[str, Path]) -> List[ImageRecord]:
    """List eligible image files in ``input_dir``.

    Only regular files whose name ends in ``.png``, ``.jpg`` or ``.jpeg``
    are returned, in directory-enumeration order. Subdirectories are not
    descended into.

    Raises:
        NotFoundError: If the directory cannot be listed.
        EmptyInputError: If no eligible files are found.
    """
    input_dir = Path(input_dir)
    try:
        with os.scandir(input_dir) as it:
            names = [
                entry.name
                for entry in it
                if is_image_file(entry.name) and entry.is_file()
            ]
    except OSError as e:
        raise NotFoundError(f"Cannot list input directory {input_dir}: {e}") from e

    if not names:
        raise EmptyInputError(f"No images found in {input_dir}")

    logger.debug("Found %d image(s) in %s", len(names), input_dir)
    return [
        ImageRecord(path=input_dir / name, index=i)
        for i, name in enumerate(names, start=1)
    ]


__all__ = ["IMAGE_EXTENSIONS", "is_image_file", "list_images"]
