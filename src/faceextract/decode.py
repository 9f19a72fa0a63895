"""Image decoding via OpenCV."""

import logging

import cv2
import numpy as np

from faceextract.errors import DecodeError
from faceextract.types import DecodedImage, ImageRecord

logger = logging.getLogger(__name__)


def decode_image(record: ImageRecord) -> DecodedImage:
    """Decode an image file into BGR pixels.

    The file is read as bytes and passed to ``cv2.imdecode`` so that
    non-ASCII paths work on every platform.

    Raises:
        DecodeError: If the file cannot be read or is not a valid image.
    """
    try:
        data = record.path.read_bytes()
    except OSError as e:
        raise DecodeError(f"Cannot read {record.path}: {e}") from e

    buf = np.frombuffer(data, np.uint8)
    try:
        img = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
    except cv2.error as e:
        raise DecodeError(f"Cannot decode {record.path}: {e}") from e

    if img is None:
        raise DecodeError(f"Cannot decode {record.path}")

    logger.debug("Decoded %s (%dx%d)", record.path, img.shape[1], img.shape[0])
    return DecodedImage(pixels=img, path=record.path)
