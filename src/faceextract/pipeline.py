"""FaceExtractionPipeline - scan, detect, crop and write faces.

Processes one image at a time:

    INIT -> SCANNING -> (DECODING -> DETECTING
                         -> (MAPPING -> CROPPING -> WRITING)*)* -> DONE

Fatal errors (no input, no output directory) propagate to the caller.
Image-scoped and face-scoped errors are reported and the run continues.

Example:
    >>> config = PipelineConfig.create("photos")
    >>> with FaceDetector() as detector:
    ...     result = FaceExtractionPipeline(config, detector).run()
    >>> print(result.faces_written)
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from faceextract.config import PipelineConfig
from faceextract.cropper import crop_face
from faceextract.decode import decode_image
from faceextract.errors import (
    DecodeError,
    DegenerateCropError,
    DetectionError,
    WriteError,
)
from faceextract.geometry import map_face_box
from faceextract.reporting import ConsoleReporter, Reporter
from faceextract.source import list_images
from faceextract.types import (
    DecodedImage,
    FaceCrop,
    ImageRecord,
    NormalizedFaceBox,
)
from faceextract.writer import OutputWriter

logger = logging.getLogger(__name__)

Decoder = Callable[[ImageRecord], DecodedImage]
IdFactory = Callable[[], str]


class Detector(Protocol):
    def detect(self, image: DecodedImage) -> List[NormalizedFaceBox]:
        ...


class PipelineState(Enum):
    INIT = "init"
    SCANNING = "scanning"
    DECODING = "decoding"
    DETECTING = "detecting"
    MAPPING = "mapping"
    CROPPING = "cropping"
    WRITING = "writing"
    DONE = "done"


@dataclass
class RunResult:
    """Summary of a pipeline run.

    Attributes:
        images_total: Eligible images found.
        images_processed: Images decoded and detected without error.
        images_failed: Images dropped by a decode or detection error.
        images_skipped: Images skipped by the single-face policy.
        faces_written: Crops written to disk.
        faces_failed: Faces dropped by a crop or write error.
        outputs: Paths of the written crops.
    """

    images_total: int = 0
    images_processed: int = 0
    images_failed: int = 0
    images_skipped: int = 0
    faces_written: int = 0
    faces_failed: int = 0
    outputs: List[Path] = field(default_factory=list)


def new_identifier() -> str:
    return uuid.uuid4().hex


class FaceExtractionPipeline:
    """Extract every accepted face of every image in a directory.

    Args:
        config: Run configuration.
        detector: Object with ``detect(DecodedImage) -> List[NormalizedFaceBox]``,
            typically a :class:`faceextract.detector.FaceDetector`.
        writer: Output writer (default: ``OutputWriter(config.output_dir)``).
        reporter: Console reporter (default: :class:`ConsoleReporter`).
        decoder: Image decoder (default: :func:`decode_image`).
        id_factory: Produces a run-unique identifier per face.
    """

    def __init__(
        self,
        config: PipelineConfig,
        detector: Detector,
        *,
        writer: Optional[OutputWriter] = None,
        reporter: Optional[Reporter] = None,
        decoder: Decoder = decode_image,
        id_factory: IdFactory = new_identifier,
    ):
        self._config = config
        self._detector = detector
        self._writer = writer or OutputWriter(config.output_dir, jpeg_quality=config.jpeg_quality)
        self._reporter = reporter or ConsoleReporter()
        self._decoder = decoder
        self._id_factory = id_factory
        self.state = PipelineState.INIT

    def run(self) -> RunResult:
        """Process all eligible images.

        Raises:
            DirectoryCreateError: If the output directory cannot be created.
            NotFoundError: If the input directory cannot be listed.
            EmptyInputError: If the input directory has no images.
        """
        self.state = PipelineState.INIT
        self._writer.prepare()

        self.state = PipelineState.SCANNING
        records = list_images(self._config.input_dir)
        total = len(records)
        result = RunResult(images_total=total)
        logger.info("Processing %d image(s) from %s", total, self._config.input_dir)

        for record in records:
            self._process_image(record, result)
            self._reporter.progress(record.index, total, str(record.path))

        self.state = PipelineState.DONE
        logger.info(
            "Done: %d face(s) written, %d image(s) failed, %d skipped",
            result.faces_written, result.images_failed, result.images_skipped,
        )
        return result

    def _process_image(self, record: ImageRecord, result: RunResult) -> None:
        try:
            self.state = PipelineState.DECODING
            image = self._decoder(record)

            self.state = PipelineState.DETECTING
            boxes = self._detector.detect(image) or []
        except DecodeError as e:
            self._fail_image(record, result, str(e))
            return
        except DetectionError as e:
            self._fail_image(record, result, f"{record.path}: {e}")
            return

        result.images_processed += 1

        if not self._config.detect_all_faces and len(boxes) > 1:
            result.images_skipped += 1
            self._reporter.info(
                f"Skipping {record.path}: {len(boxes)} faces found in single-face mode"
            )
            return

        for box in boxes:
            crop = self._extract_face(image, box, record)
            if crop is None:
                result.faces_failed += 1
                continue
            self._write_face(crop, result)

    def _fail_image(self, record: ImageRecord, result: RunResult, message: str) -> None:
        result.images_failed += 1
        logger.debug("Image %s failed", record.path, exc_info=True)
        self._reporter.error(message)

    def _extract_face(
        self,
        image: DecodedImage,
        box: NormalizedFaceBox,
        record: ImageRecord,
    ) -> Optional[FaceCrop]:
        try:
            self.state = PipelineState.MAPPING
            rect = map_face_box(box, image.width, image.height, self._config.margin_factor)

            self.state = PipelineState.CROPPING
            pixels = crop_face(image, rect)
        except DegenerateCropError as e:
            logger.debug("Face %s in %s not croppable: %s", box, record.path, e)
            self._reporter.error(f"Face in {record.path} cannot be cropped: {e}")
            return None

        return FaceCrop(
            pixels=pixels,
            source_index=record.index,
            identifier=self._id_factory(),
            rect=rect,
        )

    def _write_face(self, crop: FaceCrop, result: RunResult) -> None:
        self.state = PipelineState.WRITING
        try:
            path = self._writer.write(crop.pixels, crop.identifier)
        except WriteError as e:
            result.faces_failed += 1
            self._reporter.error(str(e))
            return
        result.faces_written += 1
        result.outputs.append(path)


__all__ = ["FaceExtractionPipeline", "PipelineState", "RunResult", "new_identifier"]
