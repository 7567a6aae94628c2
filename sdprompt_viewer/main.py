"""Main application factory and CLI interface."""

import argparse
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .logging_setup import setup_logging
from .settings import Settings
from .state import init_state
from .routers import parameters


def create_app(settings: Settings) -> FastAPI:
    """Create and configure the FastAPI application."""

    # Initialize global state
    init_state(settings)

    app = FastAPI(title="Stable Diffusion Prompt Viewer")
    app.include_router(parameters.router)
    return app


def cli_main():
    """Command line interface entry point."""

    # Load settings from config file first
    try:
        settings = Settings.load_from_yaml()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        sys.exit(1)

    # Parse command line arguments to override settings
    parser = argparse.ArgumentParser(description="Stable Diffusion Prompt Viewer")
    parser.add_argument("--dir", type=Path, help="Directory with images")
    parser.add_argument("--port", type=int, help="Port to serve")
    parser.add_argument("--host", help="Host to bind")
    parser.add_argument("--pattern", help="Glob pattern, union with | (e.g., *.png|*.PNG)")
    parser.add_argument("--key", help="Keyword of the PNG text chunk holding the parameters")
    parser.add_argument("--show-unknown-params", action="store_true", help="Include unrecognized parameters")
    parser.add_argument("--hide-unknown-params", action="store_true", help="Omit unrecognized parameters")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file")

    args = parser.parse_args()

    # Override settings with command line arguments
    overrides = {}
    if args.dir is not None:
        overrides['dir'] = args.dir
    if args.port is not None:
        overrides['port'] = args.port
    if args.host is not None:
        overrides['host'] = args.host
    if args.pattern is not None:
        overrides['pattern'] = args.pattern
    if args.key is not None:
        overrides['parameters_key'] = args.key
    if args.show_unknown_params:
        overrides['show_unknown_params'] = True
    if args.hide_unknown_params:
        overrides['show_unknown_params'] = False
    if args.log_level is not None:
        overrides['log_level'] = args.log_level
    if args.log_file is not None:
        overrides['log_file'] = args.log_file

    try:
        config_data = settings.model_dump()
        config_data.update(overrides)
        settings = Settings(**config_data)
    except Exception as e:
        print(f"Error with settings: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.log_level, settings.log_file)

    # Create and run the app
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
