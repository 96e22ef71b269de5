"""Logging configuration for the interpreter."""
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger for a CLI or REPL run.

    Args:
        level: Name of a logging level; unknown names fall back to WARNING.
        log_file: Optional path to a log file, created along with its directory.
                  Without one, records go to stderr because stdout carries the
                  program's own output.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    config = {'level': numeric_level, 'format': LOG_FORMAT, 'force': True}

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        config['filename'] = log_file
    else:
        config['stream'] = sys.stderr

    logging.basicConfig(**config)
    logging.getLogger(__name__).info("Logging initialized at %s level", logging.getLevelName(numeric_level))

