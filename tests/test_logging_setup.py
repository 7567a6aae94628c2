#!/usr/bin/env python3
"""Tests for logging setup."""

import logging

from sdprompt_viewer.logging_setup import LOGGER_NAME, setup_logging


def test_stream_handler_only():
    logger = setup_logging("WARNING")
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1


def test_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "viewer.log"
    logger = setup_logging("INFO", log_file)
    logging.getLogger(f"{LOGGER_NAME}.services.metadata").info("PARAMETERS loaded file=x.png")
    for handler in logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "| INFO  | Logger initialized" in text
    assert "PARAMETERS loaded file=x.png" in text
    setup_logging("INFO")


def test_repeated_setup_replaces_handlers():
    setup_logging("INFO")
    logger = setup_logging("DEBUG")
    assert len(logger.handlers) == 1


def test_replaced_file_handler_is_closed(tmp_path):
    logger = setup_logging("INFO", tmp_path / "viewer.log")
    file_handler = next(h for h in logger.handlers if isinstance(h, logging.FileHandler))
    setup_logging("INFO")
    assert file_handler.stream is None
    assert file_handler not in logger.handlers
