"""Logging setup shared by the API and the sandbox supervisor."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure the root logger once.

    Args:
        log_level: Level name such as ``"DEBUG"`` or ``"INFO"``.
        log_file: Optional path of an additional file handler.
    """
    global _configured  # noqa: PLW0603

    root = logging.getLogger()
    root.setLevel(log_level.upper())

    if _configured:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
