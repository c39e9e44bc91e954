"""jobtail - Render growing job logs the way a terminal would show them."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .errors import FollowError, JobtailError
from .file.follower import INITIAL_TAIL_BYTES, LogFollower
from .linebuffer import LineBuffer
from .merged import MergedBuffer
from .renderer import ACTIVE_WINDOW, RENDER_LINE_LIMIT, ParserState, TailRenderer
from .session import DEFAULT_LOG_DIR, JobLogSession, SessionSnapshot, job_log_paths
from .stream import StreamChunk, StreamLabel

__version__ = "0.1.0"
__all__ = [
    "ACTIVE_WINDOW",
    "DEFAULT_LOG_DIR",
    "FollowError",
    "INITIAL_TAIL_BYTES",
    "JobLogSession",
    "JobtailError",
    "LineBuffer",
    "LogFollower",
    "MergedBuffer",
    "ParserState",
    "RENDER_LINE_LIMIT",
    "SessionSnapshot",
    "StreamChunk",
    "StreamLabel",
    "TailRenderer",
    "configure_logging",
    "job_log_paths",
]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level=logging.INFO, log_file: Optional[Union[Path, str]] = None):
    """
    Configure logging for jobtail.

    Args:
        level: Level for the ``jobtail`` logger
        log_file: Also write log records to this file when given
    """
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode="a"))

    logger = logging.getLogger("jobtail")
    logger.setLevel(level)
    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
