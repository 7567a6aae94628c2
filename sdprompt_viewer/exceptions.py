"""Custom exceptions."""


class ExtractionError(Exception):
    """The image could not be opened or read before its signature was checked."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")
