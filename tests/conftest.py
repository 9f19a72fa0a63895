"""Shared test fixtures and helpers for faceextract tests."""

import importlib.util
import sys
from pathlib import Path

import pytest

# Load helpers module from the tests directory using importlib so test
# modules can ``from helpers import ...`` regardless of rootdir.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from helpers import RecordingReporter  # noqa: E402


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def input_dir(tmp_path):
    d = tmp_path / "photos"
    d.mkdir()
    return d
