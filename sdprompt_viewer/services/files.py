"""File discovery service for images in the viewer directory."""

import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def discover_images(directory: Path, pattern: str) -> List[Path]:
    """List files in ``directory`` matching any of the ``|`` separated glob patterns."""
    if not directory.is_dir():
        logger.warning(f"Image directory does not exist: {directory}")
        return []

    found = set()
    for part in pattern.split("|"):
        part = part.strip()
        if not part:
            continue
        found.update(p for p in directory.glob(part) if p.is_file())

    files = sorted(found, key=lambda p: p.name.lower())
    logger.debug(f"Discovered {len(files)} images in {directory} pattern={pattern}")
    return files


def resolve_image_path(directory: Path, name: str) -> Path:
    """Resolve ``name`` inside ``directory``; ValueError if it escapes it."""
    base = directory.resolve()
    path = (base / name).resolve()
    try:
        path.relative_to(base)
    except ValueError:
        raise ValueError(f"forbidden_path: {name}")
    return path
