"""
Command-line entry point.

Runs a source file and prints the rendered result, or the error report when
parsing or evaluation fails. Without a file (or with --repl) starts the REPL.
"""
import argparse
import logging
import sys
from typing import List, Optional

from parenlang.config.logging_config import setup_logging
from parenlang.config.settings import InterpreterSettings
from parenlang.repl.repl import Repl
from parenlang.sexp_evaluator.sexp_environment import Environment
from parenlang.sexp_evaluator.sexp_evaluator import SexpEvaluator
from parenlang.system.errors import LangError, ParseError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROGRAM_ERROR = 1
EXIT_USAGE_ERROR = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments."""
    parser = argparse.ArgumentParser(prog="parenlang", description="Run programs written in the parenthesized expression language.")
    parser.add_argument("file", nargs="?", help="Path to the source file to run. Omit to start the REPL.")
    parser.add_argument("--repl", action="store_true", help="Start the interactive REPL (after running FILE, if given).")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Set the logging level (default: WARNING, or PARENLANG_LOG_LEVEL).")
    parser.add_argument("--log-file", help="Write logs to this file instead of stderr.")
    parser.add_argument("--no-color", action="store_true", help="Do not color error reports.")
    parser.add_argument("--recursion-limit", type=int, help="Raise the interpreter recursion limit for deeply nested programs.")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: Optional[InterpreterSettings] = None) -> InterpreterSettings:
    """Environment settings with the command-line flags applied on top."""
    settings = base if base is not None else InterpreterSettings.from_env()
    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_file:
        overrides["log_file"] = args.log_file
    if args.no_color:
        overrides["color"] = False
    if args.recursion_limit:
        overrides["recursion_limit"] = args.recursion_limit
    return settings.model_copy(update=overrides)


def run_file(path: str, evaluator: SexpEvaluator, env: Optional[Environment] = None, color: bool = False) -> int:
    """
    Runs one source file, printing the result or the error report.
    Bindings made by the file stay in env when one is given.

    Returns:
        The process exit code.
    """
    try:
        with open(path, encoding="utf-8") as f:
            source = f.read()
    except OSError as e:
        logger.error(f"Cannot read source file {path}: {e}")
        print(f"Error: cannot read '{path}': {e.strerror or e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        result = evaluator.evaluate_string(source, env)
    except (ParseError, LangError) as e:
        sys.stdout.flush()
        print(e.describe(color=color))
        return EXIT_PROGRAM_ERROR

    print(result.render())
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    settings = build_settings(args)
    setup_logging(settings.log_level, settings.log_file)

    if settings.recursion_limit:
        logger.info(f"Setting recursion limit to {settings.recursion_limit}")
        sys.setrecursionlimit(settings.recursion_limit)

    color = settings.color and sys.stdout.isatty()
    evaluator = SexpEvaluator()
    env = Environment()

    exit_code = EXIT_OK
    if args.file:
        exit_code = run_file(args.file, evaluator, env=env, color=color)
    if args.repl or not args.file:
        Repl(evaluator=evaluator, env=env, color=color).start()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
