#!/usr/bin/env python3
"""Tests for the display helpers."""

from sdprompt_viewer.models import HiresInfo
from sdprompt_viewer.utils.formatting import format_unknowns, hires_summary, text_or_float


def test_text_wins_over_value():
    assert text_or_float("1024", 2048.0, 0) == "1024"


def test_value_used_when_text_missing():
    assert text_or_float(None, 1024.0, 0) == "1024"
    assert text_or_float("", 1.5, 2) == "1.50"


def test_nothing_when_value_not_positive():
    assert text_or_float(None, 0.0, 2) is None
    assert text_or_float(None, -1.0, 2) is None


def test_hires_summary_uses_derived_values():
    hires = HiresInfo(upscale="2", calc_width=1024.0, calc_height=1536.0)
    assert hires_summary(hires) == {"width": "1024", "height": "1536", "upscale": "2"}


def test_hires_summary_derived_upscale():
    hires = HiresInfo(width="1024", height="1536", calc_upscale=2.0)
    assert hires_summary(hires) == {"width": "1024", "height": "1536", "upscale": "2.00"}


def test_format_unknowns():
    assert format_unknowns([("Version", "v1.6.0"), ("Lora hashes", "a: 1")]) == (
        "Version: v1.6.0\nLora hashes: a: 1\n")
    assert format_unknowns([]) == ""
