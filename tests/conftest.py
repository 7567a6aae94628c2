"""Shared fixtures for the prompt viewer tests."""

import sys
from pathlib import Path

# Add the parent directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from sdprompt_viewer.main import create_app
from sdprompt_viewer.settings import Settings
from png_helpers import build_png, text_chunk

A1111_TEXT = (
    "a photo of a cat, masterpiece\n"
    "Negative prompt: blurry, lowres\n"
    "Steps: 20, Sampler: Euler a, CFG scale: 7, Seed: 1234, Size: 512x768, "
    "Model hash: abc123, Model: mymodel_v1, Version: v1.6.0"
)


@pytest.fixture
def image_dir(tmp_path):
    """Directory with one image carrying parameters and one without."""
    (tmp_path / "with_params.png").write_bytes(
        build_png(before=[text_chunk("parameters", A1111_TEXT)]))
    (tmp_path / "plain.png").write_bytes(build_png())
    (tmp_path / "notes.txt").write_text("not an image", encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(image_dir):
    return Settings(dir=image_dir, pattern="*.png")


@pytest.fixture
def client(settings):
    """Create a test client."""
    app = create_app(settings)
    return TestClient(app)
