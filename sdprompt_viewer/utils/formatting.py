"""Display helpers for generation parameters."""

from typing import Dict, List, Optional, Tuple

from ..models.generation_params import HiresInfo

NO_PARAMETERS_MESSAGE = "No Stable Diffusion parameters found in the image."
NO_IMAGE_MESSAGE = "No image selected."


def text_or_float(text: Optional[str], value: float, decimals: int) -> Optional[str]:
    """Explicit text when present, else the derived value when it is positive."""
    if text:
        return text
    if value > 0:
        return f"{value:.{decimals}f}"
    return None


def hires_summary(hires: HiresInfo) -> Dict[str, Optional[str]]:
    """Hires fix dimensions as shown to the user, falling back to derived values."""
    return {
        "width": text_or_float(hires.width, hires.calc_width, 0),
        "height": text_or_float(hires.height, hires.calc_height, 0),
        "upscale": text_or_float(hires.upscale, hires.calc_upscale, 2),
    }


def format_unknowns(unknowns: List[Tuple[str, str]]) -> str:
    """One ``key: value`` line per unknown parameter."""
    return "".join(f"{key}: {value}\n" for key, value in unknowns)
