#!/usr/bin/env python3
"""Tests for the parameters API routes."""

import pytest
from fastapi.testclient import TestClient

from sdprompt_viewer.exceptions import ExtractionError
from sdprompt_viewer.main import create_app
from sdprompt_viewer.services.files import discover_images, resolve_image_path
from sdprompt_viewer.settings import Settings
from sdprompt_viewer.utils.formatting import NO_IMAGE_MESSAGE, NO_PARAMETERS_MESSAGE
from conftest import A1111_TEXT


def test_list_files(client, image_dir):
    response = client.get("/api/files")
    assert response.status_code == 200
    data = response.json()
    assert data["dir"] == str(image_dir.resolve())
    assert data["files"] == ["plain.png", "with_params.png"]


def test_get_parameters(client):
    response = client.get("/api/parameters/with_params.png")
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["parameters"]["prompt"] == "a photo of a cat, masterpiece"
    assert data["parameters"]["sampler"] == "Euler a"
    assert data["parameters"]["model"]["hash"] == "abc123"
    assert data["parameters"]["height"] == "768"


def test_get_parameters_without_metadata(client):
    response = client.get("/api/parameters/plain.png")
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is False
    assert data["message"] == NO_PARAMETERS_MESSAGE


def test_get_parameters_missing_file(client):
    response = client.get("/api/parameters/nope.png")
    assert response.status_code == 404


def test_get_parameters_without_name(client):
    response = client.get("/api/parameters/")
    assert response.status_code == 400
    assert response.json()["detail"] == NO_IMAGE_MESSAGE


def test_get_parameters_hidden_unknowns(image_dir):
    client = TestClient(create_app(Settings(dir=image_dir, show_unknown_params=False)))
    data = client.get("/api/parameters/with_params.png").json()
    assert "unknowns" not in data["parameters"]


def test_get_parameters_extraction_error(client, image_dir, monkeypatch):
    def failing(path, settings=None):
        raise ExtractionError(path, "Permission denied")

    monkeypatch.setattr("sdprompt_viewer.routers.parameters.describe_image_parameters", failing)
    response = client.get("/api/parameters/with_params.png")
    assert response.status_code == 500
    assert "Permission denied" in response.json()["detail"]


def test_get_raw_parameters(client):
    response = client.get("/api/parameters/with_params.png/raw")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == A1111_TEXT


def test_get_raw_parameters_without_metadata(client):
    response = client.get("/api/parameters/plain.png/raw")
    assert response.status_code == 404
    assert response.json()["detail"] == NO_PARAMETERS_MESSAGE


class TestFiles:
    """Tests for the file discovery helpers."""

    def test_pattern_union(self, image_dir):
        names = [p.name for p in discover_images(image_dir, "*.png|*.txt")]
        assert names == ["notes.txt", "plain.png", "with_params.png"]

    def test_missing_directory(self, tmp_path):
        assert discover_images(tmp_path / "missing", "*.png") == []

    def test_resolve_inside_directory(self, image_dir):
        assert resolve_image_path(image_dir, "plain.png") == (image_dir / "plain.png").resolve()

    @pytest.mark.parametrize("name", ["../outside.png", "sub/../../outside.png", "/etc/passwd"])
    def test_resolve_rejects_escaping_paths(self, image_dir, name):
        with pytest.raises(ValueError, match="forbidden_path"):
            resolve_image_path(image_dir, name)
