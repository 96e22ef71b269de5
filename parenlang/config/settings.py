"""
Interpreter settings read from the environment.
Command-line flags override these values (see parenlang.main).
"""
import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, PositiveInt

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_FALSE_STRINGS = {"0", "false", "no", "off"}


class InterpreterSettings(BaseModel):
    """Settings shared by the CLI and the REPL."""
    log_level: LogLevel = "WARNING"
    log_file: Optional[str] = None
    color: bool = Field(True, description="Color the offending source fragment in error reports when stdout is a terminal.")
    recursion_limit: Optional[PositiveInt] = Field(None, description="Overrides sys.setrecursionlimit for deeply recursive programs.")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InterpreterSettings":
        """
        Builds settings from PARENLANG_LOG_LEVEL, PARENLANG_LOG_FILE,
        PARENLANG_COLOR and PARENLANG_RECURSION_LIMIT.
        """
        environ = os.environ if environ is None else environ
        values = {}
        if environ.get("PARENLANG_LOG_LEVEL"):
            values["log_level"] = environ["PARENLANG_LOG_LEVEL"].upper()
        if environ.get("PARENLANG_LOG_FILE"):
            values["log_file"] = environ["PARENLANG_LOG_FILE"]
        if environ.get("PARENLANG_COLOR"):
            values["color"] = environ["PARENLANG_COLOR"].strip().lower() not in _FALSE_STRINGS
        if environ.get("PARENLANG_RECURSION_LIMIT"):
            values["recursion_limit"] = environ["PARENLANG_RECURSION_LIMIT"]
        logger.debug(f"Settings from environment: {values}")
        return cls(**values)
