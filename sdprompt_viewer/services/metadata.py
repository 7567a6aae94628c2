"""Generation parameters extraction service."""

import logging
from pathlib import Path
from typing import Dict, Optional, Any

from PIL import Image

from ..models.generation_params import ImageParameters
from ..settings import Settings
from ..state import get_state
from ..utils.formatting import NO_PARAMETERS_MESSAGE, format_unknowns, hires_summary
from ..utils.parameter_parser import ParameterParser
from ..utils.png_chunks import read_png_parameters_text

logger = logging.getLogger(__name__)


def load_image_parameters(file_path: Path, settings: Optional[Settings] = None) -> Optional[ImageParameters]:
    """
    Read and parse the generation parameters embedded in an image.

    Returns None when the image carries no parameters text. Raises
    ExtractionError when the file cannot be opened.
    """
    settings = settings or get_state().settings

    raw_text = read_png_parameters_text(file_path, settings.parameters_key)
    if not raw_text:
        logger.debug(f"No '{settings.parameters_key}' text in {file_path.name}")
        return None

    parser = ParameterParser(max_input_size=settings.max_input_size,
                             max_unknowns=settings.max_unknowns)
    parameters = parser.parse(raw_text)
    logger.info(f"PARAMETERS loaded file={file_path.name} unknowns={len(parameters.unknowns)}")
    return ImageParameters(path=file_path, raw_text=raw_text, parameters=parameters)


def extract_image_info(file_path: Path) -> Optional[Dict[str, Any]]:
    """Pixel dimensions and mode of an image, None if Pillow cannot identify it."""
    try:
        with Image.open(file_path) as img:
            return {
                "width": img.width,
                "height": img.height,
                "color_mode": img.mode,
                "has_alpha": img.mode in ("RGBA", "LA"),
            }
    except OSError as e:
        logger.warning(f"Cannot identify image {file_path.name}: {e}")
        return None


def describe_image_parameters(file_path: Path, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """JSON-ready description of an image's generation parameters."""
    settings = settings or get_state().settings
    loaded = load_image_parameters(file_path, settings)
    image = extract_image_info(file_path)

    if loaded is None or loaded.parameters.is_empty():
        return {"name": file_path.name, "found": False, "image": image,
                "message": NO_PARAMETERS_MESSAGE}

    parameters = loaded.parameters.to_dict()
    result = {
        "name": file_path.name,
        "found": True,
        "image": image,
        "raw_text": loaded.raw_text,
        "parameters": parameters,
        "hires_display": hires_summary(loaded.parameters.hires),
    }
    if settings.show_unknown_params:
        result["unknowns_text"] = format_unknowns(loaded.parameters.unknowns)
    else:
        parameters.pop("unknowns", None)
    return result
