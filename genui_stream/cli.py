"""Command line interface of the generative UI server."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass

import uvicorn

from .app import create_app
from .settings import LOG_LEVELS, Settings, load_settings

__all__ = ['Args', 'parse_args', 'main']


@dataclass
class Args:
    """Custom namespace for command line arguments."""

    host: str
    port: int
    model: str
    stream: bool
    log_level: str

    def apply(self, settings: Settings) -> Settings:
        settings.host = self.host
        settings.port = self.port
        settings.model = self.model
        settings.stream = self.stream
        settings.log_level = self.log_level
        return settings


def parse_args(argv: Sequence[str] | None = None, defaults: Settings | None = None) -> Args:
    """Parse command line arguments, using the settings as defaults.

    Returns:
        Args: A dataclass containing the parsed command line arguments.
    """
    defaults = defaults or Settings()
    parser = argparse.ArgumentParser(prog='genui-stream', description='Generative UI streaming server')
    parser.add_argument('--host', default=defaults.host, help=f'Host to bind to (default: {defaults.host})')
    parser.add_argument(
        '--port',
        '-p',
        type=int,
        default=defaults.port,
        help=f'Port to run the server on (default: {defaults.port})',
    )
    parser.add_argument('--model', '-m', default=defaults.model, help=f'Model to use (default: {defaults.model})')
    parser.add_argument(
        '--stream',
        action='store_true',
        default=defaults.stream,
        help='Forward model deltas as they arrive on the fixed-catalog endpoint',
    )
    parser.add_argument('--no-stream', dest='stream', action='store_false', help='Send complete model responses')
    parser.add_argument(
        '--log-level',
        choices=LOG_LEVELS,
        default=defaults.log_level,
        help=f'Log level (default: {defaults.log_level})',
    )

    return Args(**vars(parser.parse_args(argv)))


def main(argv: Sequence[str] | None = None) -> None:
    """Run the server with uvicorn."""
    settings = load_settings()
    settings = parse_args(argv, settings).apply(settings)

    logging.basicConfig(level=settings.log_level.upper(), format='%(levelname)s:%(name)s: %(message)s')
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level)
