"""Where the InsightFace detector keeps its downloaded model packs.

InsightFace expects a root directory and stores each pack under
``<root>/models/<pack name>``. Our root is ``<models dir>/insightface``.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

MODELS_DIR_ENV = "FACEEXTRACT_MODELS_DIR"
DEFAULT_MODELS_DIR = Path("~/.faceextract/models")


def resolve_models_dir(models_dir: Optional[Union[str, Path]] = None) -> Path:
    """Pick the models directory without touching the filesystem.

    An explicit ``models_dir`` wins, then ``FACEEXTRACT_MODELS_DIR``, then
    ``~/.faceextract/models``. Relative paths are taken from the CWD.
    """
    if models_dir is None:
        models_dir = os.environ.get(MODELS_DIR_ENV) or DEFAULT_MODELS_DIR
    path = Path(models_dir).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def insightface_root(models_dir: Optional[Union[str, Path]] = None) -> Path:
    """Return the InsightFace root for ``models_dir``, creating only that root."""
    root = resolve_models_dir(models_dir) / "insightface"
    root.mkdir(parents=True, exist_ok=True)
    logger.debug("InsightFace model root: %s", root)
    return root


__all__ = ["MODELS_DIR_ENV", "insightface_root", "resolve_models_dir"]
