"""Data models package."""

from .generation_params import (
    GenerationParameters,
    HiresInfo,
    ImageParameters,
    InpaintInfo,
    ModelInfo,
    OverrideSettings,
)

__all__ = [
    'GenerationParameters',
    'HiresInfo',
    'ImageParameters',
    'InpaintInfo',
    'ModelInfo',
    'OverrideSettings',
]
