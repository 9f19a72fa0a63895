"""Command-line interface for faceextract.

Usage::

    faceextract INPUT_DIR [OUTPUT_DIR] [-one]
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from faceextract.config import DEFAULT_JPEG_QUALITY, DEFAULT_MARGIN_FACTOR, PipelineConfig
from faceextract.errors import FatalError
from faceextract.reporting import ConsoleReporter

logger = logging.getLogger(__name__)

SINGLE_FACE_FLAG = "-one"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faceextract",
        description="Detect faces in a folder of photos and save each face as a JPEG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  faceextract ./photos                   # crops go to ./photos/faces
  faceextract ./photos ./crops           # explicit output directory
  faceextract ./photos ./crops {SINGLE_FACE_FLAG}      # skip photos with several faces

A third argument other than {SINGLE_FACE_FLAG} is accepted and ignored.
""",
    )
    parser.add_argument("input_dir", help="Folder with images (.png, .jpg, .jpeg)")
    parser.add_argument(
        "output_dir", nargs="?", default=None,
        help="Folder for face crops (default: INPUT_DIR/faces)",
    )
    parser.add_argument(
        "mode", nargs="?", default=None,
        help=f"'{SINGLE_FACE_FLAG}' to only extract from photos with exactly one face",
    )
    parser.add_argument(
        SINGLE_FACE_FLAG, "--one",
        dest="single_face",
        action="store_true",
        help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--margin", type=float, default=DEFAULT_MARGIN_FACTOR,
        help=f"Margin around each face as a fraction of its size (default: {DEFAULT_MARGIN_FACTOR})",
    )
    parser.add_argument(
        "--quality", type=int, default=DEFAULT_JPEG_QUALITY,
        help=f"JPEG quality 0-100 (default: {DEFAULT_JPEG_QUALITY})",
    )
    parser.add_argument("--device", default="cpu", help="Device for detection (default: cpu)")
    parser.add_argument(
        "--det-thresh", type=float, default=0.5,
        help="Face detection confidence threshold (default: 0.5)",
    )
    parser.add_argument(
        "--models-dir", default=None, metavar="DIR",
        help="Where detector models are downloaded (default: $FACEEXTRACT_MODELS_DIR"
             " or ~/.faceextract/models)",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, metavar="SECONDS",
        help="Give up on an image if detection takes longer than this",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging",
    )
    return parser


def _parse_args(parser: argparse.ArgumentParser, argv: Optional[List[str]]) -> argparse.Namespace:
    """Parse ``argv``, letting an unknown dash token stand in as the mode."""
    args, extras = parser.parse_known_args(argv)
    if extras:
        # e.g. "faceextract in out -all": argparse sees "-all" as an option
        if len(extras) > 1 or args.mode is not None or args.output_dir is None:
            parser.error(f"unrecognized arguments: {' '.join(extras)}")
        args.mode = extras[0]
    args.single_face = args.single_face or args.mode == SINGLE_FACE_FLAG
    return args


def _suppress_thirdparty_noise() -> None:
    """Keep OpenCV and ONNX Runtime chatter off the console."""
    os.environ.setdefault("OPENCV_LOG_LEVEL", "ERROR")
    os.environ.setdefault("ORT_LOGGING_LEVEL", "3")


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        _suppress_thirdparty_noise()
        logging.basicConfig(level=logging.WARNING)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``faceextract`` CLI.

    Returns:
        0 on success, 1 if the input or output directory is unusable or
        the face detector cannot be started.
    """
    parser = _build_parser()
    args = _parse_args(parser, argv)
    _configure_logging(args.verbose)

    from faceextract.backends.insightface import InsightFaceSCRFD
    from faceextract.detector import FaceDetector
    from faceextract.pipeline import FaceExtractionPipeline

    reporter = ConsoleReporter()

    try:
        config = PipelineConfig.create(
            args.input_dir,
            args.output_dir,
            detect_all_faces=not args.single_face,
            margin_factor=args.margin,
            jpeg_quality=args.quality,
            detect_timeout=args.timeout,
        )
    except ValueError as e:
        parser.error(str(e))

    detector = FaceDetector(
        InsightFaceSCRFD(det_thresh=args.det_thresh, models_dir=args.models_dir),
        device=args.device,
        timeout=config.detect_timeout,
    )
    pipeline = FaceExtractionPipeline(config, detector, reporter=reporter)

    try:
        try:
            detector.initialize()
        except Exception as e:
            logger.debug("Detector initialization failed", exc_info=True)
            reporter.fail(f"Cannot start face detector: {e}")
            return 1

        try:
            result = pipeline.run()
        except FatalError as e:
            reporter.fail(str(e))
            return 1
    finally:
        detector.cleanup()

    reporter.info(
        f"Done: {result.faces_written} face(s) from {result.images_total} image(s)"
        f" saved to {config.output_dir}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
