"""Logging for the scraper service: one stdout handler shared by the app, uvicorn and the browser driver."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "scraper-service"

# uvicorn installs its own handlers; these are rerouted onto ours
_SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

# Minimum level for noisy libraries, regardless of the service level
_LEVEL_FLOORS = {
    "playwright": logging.WARNING,
    "asyncio": logging.WARNING,
}

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def build_formatter(json_output: bool = True) -> logging.Formatter:
    """Return the formatter for service logs.

    JSON records carry ``timestamp``, ``level``, ``logger`` and ``service`` plus any
    ``extra=`` fields passed at the call site (url, timings, counts).
    """
    if not json_output:
        return logging.Formatter(_TEXT_FORMAT)
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        static_fields={"service": SERVICE_NAME},
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> logging.Handler:
    """Install a single stdout handler on the root logger and reroute uvicorn onto it."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(json_output))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.addHandler(handler)
        server_logger.propagate = False

    for name, floor in _LEVEL_FLOORS.items():
        logging.getLogger(name).setLevel(max(level, floor))

    return handler
