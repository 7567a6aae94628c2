"""Parameters router for listing images and reading their generation data."""

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from ..exceptions import ExtractionError
from ..state import get_state
from ..services.files import discover_images, resolve_image_path
from ..services.metadata import describe_image_parameters, load_image_parameters
from ..utils.formatting import NO_IMAGE_MESSAGE, NO_PARAMETERS_MESSAGE


router = APIRouter(prefix="/api")


def _image_path(name: str) -> Path:
    state = get_state()
    if not name.strip("/"):
        raise HTTPException(400, NO_IMAGE_MESSAGE)
    try:
        path = resolve_image_path(state.image_dir, name)
    except ValueError:
        raise HTTPException(403, "forbidden_path")
    if not path.is_file():
        raise HTTPException(404, f"File not found: {name}")
    return path


@router.get("/files")
def list_files():
    """List the images of the current directory."""
    state = get_state()
    files = discover_images(state.image_dir, state.file_pattern)
    return {"dir": str(state.image_dir), "files": [p.name for p in files]}


@router.get("/parameters/{name:path}/raw", response_class=PlainTextResponse)
def get_raw_parameters(name: str):
    """Raw embedded parameters text, as copied by the viewer's copy button."""
    state = get_state()
    path = _image_path(name)
    try:
        loaded = load_image_parameters(path, state.settings)
    except ExtractionError as e:
        state.logger.error(f"RAW failed file={name}: {e}")
        raise HTTPException(500, f"Extraction failed: {e.reason}")
    if loaded is None:
        raise HTTPException(404, NO_PARAMETERS_MESSAGE)
    return loaded.raw_text


@router.get("/parameters/{name:path}")
def get_parameters(name: str):
    """
    Structured generation parameters of one image.
    Images without metadata answer 200 with {"found": false}.
    """
    state = get_state()
    path = _image_path(name)
    try:
        return describe_image_parameters(path, state.settings)
    except ExtractionError as e:
        state.logger.error(f"PARAMETERS failed file={name}: {e}")
        raise HTTPException(500, f"Extraction failed: {e.reason}")
