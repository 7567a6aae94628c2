"""Stable Diffusion Prompt Viewer

Reads the generation parameters that Stable Diffusion front-ends embed in
PNG images and serves them as structured data.
"""

from .main import create_app

__all__ = ["create_app"]
