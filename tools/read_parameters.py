#!/usr/bin/env python3
"""
Stable Diffusion parameters reader

Prints the generation parameters embedded in a PNG image without running the
web server.

Usage:
    python read_parameters.py image.png
    python read_parameters.py image.png --raw
    python read_parameters.py image.png --format text --key parameters
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

# Set up path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sdprompt_viewer.exceptions import ExtractionError
from sdprompt_viewer.logging_setup import setup_logging
from sdprompt_viewer.models.generation_params import GenerationParameters
from sdprompt_viewer.services.metadata import load_image_parameters
from sdprompt_viewer.settings import Settings
from sdprompt_viewer.utils.formatting import NO_PARAMETERS_MESSAGE, format_unknowns, hires_summary

EXIT_NOT_FOUND = 1
EXIT_EXTRACTION_FAILED = 2


def format_text(parameters: GenerationParameters) -> str:
    """Human readable listing, one field per line."""
    hires = hires_summary(parameters.hires)
    rows = [
        ("Prompt", parameters.prompt),
        ("Negative prompt", parameters.negative_prompt),
        ("Wildcard prompt", parameters.wildcard_prompt),
        ("Model", parameters.model.name),
        ("Model hash", parameters.model.hash),
        ("Sampler", parameters.sampler),
        ("Steps", parameters.steps),
        ("CFG scale", parameters.cfg_scale),
        ("Seed", parameters.seed),
        ("Width", parameters.width),
        ("Height", parameters.height),
        ("Denoising strength", parameters.denoising),
        ("Hires upscaler", parameters.hires.upscaler),
        ("Hires steps", parameters.hires.steps),
        ("Hires denoising", parameters.hires.denoising),
        ("Hires width", hires["width"]),
        ("Hires height", hires["height"]),
        ("Hires upscale", hires["upscale"]),
        ("Inpaint denoising", parameters.inpaint.denoising),
        ("Mask blur", parameters.inpaint.mask_blur),
        ("Eta", parameters.settings.eta),
        ("ENSD", parameters.settings.ensd),
        ("Clip skip", parameters.settings.clip_skip),
    ]
    text = "".join(f"{label}: {value}\n" for label, value in rows if value)
    if parameters.unknowns:
        text += "\n" + format_unknowns(parameters.unknowns)
    return text


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the parameters reader."""
    parser = argparse.ArgumentParser(
        description="Print the Stable Diffusion parameters embedded in a PNG image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python read_parameters.py image.png
  python read_parameters.py image.png --raw
  python read_parameters.py image.png --format text
        """
    )

    parser.add_argument("image", type=Path, help="PNG image to read")
    parser.add_argument("--key", help="Keyword of the PNG text chunk (default: from config)")
    parser.add_argument("--raw", action="store_true", help="Print the raw embedded text")
    parser.add_argument("--format", choices=["json", "text"], default="json", help="Output format")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)
    logger = setup_logging("DEBUG" if args.verbose else "WARNING")

    settings = Settings.load_from_yaml()
    if args.key:
        settings = Settings(**{**settings.model_dump(), "parameters_key": args.key})

    try:
        loaded = load_image_parameters(args.image, settings)
    except ExtractionError as e:
        logger.error(f"Extraction failed: {e}")
        return EXIT_EXTRACTION_FAILED

    if loaded is None:
        print(NO_PARAMETERS_MESSAGE, file=sys.stderr)
        return EXIT_NOT_FOUND

    if args.raw:
        print(loaded.raw_text)
    elif args.format == "json":
        print(json.dumps(loaded.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_text(loaded.parameters), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
