#!/usr/bin/env python3
"""
Entry point for the Stable Diffusion Prompt Viewer.

This script provides a simple way to run the application:
    python run.py

All configuration and command-line argument handling is delegated to sdprompt_viewer.main.cli_main().
"""

from sdprompt_viewer.main import cli_main

if __name__ == "__main__":
    cli_main()
