"""Global application state management."""

import logging
from pathlib import Path
from typing import Optional

from .settings import Settings
from .logging_setup import LOGGER_NAME


class ApplicationState:
    """Manages in-memory application state."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.image_dir: Path = settings.dir
        self.file_pattern: str = settings.pattern
        self.logger: logging.Logger = logging.getLogger(LOGGER_NAME)
        self.logger.info(f"Viewer state initialized. dir={self.image_dir} pattern={self.file_pattern}")


# Global state instance - will be initialized in main.py
app_state: Optional[ApplicationState] = None


def get_state() -> ApplicationState:
    """Get the global application state."""
    if app_state is None:
        raise RuntimeError("Application state not initialized")
    return app_state


def init_state(settings: Settings) -> ApplicationState:
    """Initialize the global application state."""
    global app_state
    app_state = ApplicationState(settings)
    return app_state
