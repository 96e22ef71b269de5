"""REPL interface for interactive sessions."""
import logging
import sys
from typing import Callable, Dict, List, Optional

from parenlang.sexp_evaluator.console_io import ConsoleIO
from parenlang.sexp_evaluator.sexp_environment import Environment
from parenlang.sexp_evaluator.sexp_evaluator import SexpEvaluator
from parenlang.system.errors import LangError, ParseError

logger = logging.getLogger(__name__)


def open_paren_depth(text: str) -> int:
    """Parenthesis depth left open at the end of text, ignoring string literals."""
    depth = 0
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
    return depth


class Repl:
    """Interactive REPL (Read-Eval-Print Loop) interface.

    Every input is evaluated in one long-lived Environment, so variables,
    functions and enums defined on one line are visible on the next. Input
    with unclosed parentheses continues on the following line.
    """

    def __init__(
        self,
        evaluator: Optional[SexpEvaluator] = None,
        output_stream=None,
        env: Optional[Environment] = None,
        color: bool = False,
    ):
        """Initialize the REPL interface.

        Args:
            evaluator: Optional evaluator (defaults to one printing to output_stream)
            output_stream: Optional output stream (defaults to sys.stdout)
            env: Optional environment to continue from, e.g. one a source
                 file was just run in (defaults to an empty one)
            color: Color the source fragment in error reports
        """
        self.output = output_stream or sys.stdout
        self.evaluator = evaluator or SexpEvaluator(io=ConsoleIO(output_stream=output_stream))
        self.env = env if env is not None else Environment()
        self.verbose = False  # Echo parsed trees
        self.color = color
        self._pending: List[str] = []
        self.commands: Dict[str, Callable[[str], None]] = {
            "/help": self._cmd_help,
            "/exit": self._cmd_exit,
            "/reset": self._cmd_reset,
            "/env": self._cmd_env,
            "/verbose": self._cmd_verbose,
        }

    def start(self) -> None:
        """Start the REPL interface.

        Reads lines until /exit, end of input or Ctrl-C.
        """
        print("parenlang REPL", file=self.output)
        print("Type expressions or commands (/help for help)", file=self.output)

        while True:
            try:
                prompt = "... " if self._pending else "> "
                user_input = input(prompt)
                self._process_input(user_input)
            except (KeyboardInterrupt, EOFError):
                print("\nExiting...", file=self.output)
                break

    def _process_input(self, user_input: str) -> None:
        """Process one line of user input.

        Args:
            user_input: Input from the user
        """
        if not self._pending:
            stripped = user_input.strip()
            if not stripped:
                return
            if stripped.startswith("/"):
                self._handle_command(stripped)
                return

        self._pending.append(user_input)
        source = "\n".join(self._pending)
        if open_paren_depth(source) > 0:
            return
        self._pending = []
        self._handle_source(source)

    def _handle_command(self, command: str) -> None:
        """Handle a command input.

        Args:
            command: Command from the user
        """
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        if cmd in self.commands:
            self.commands[cmd](args)
        else:
            print(f"Unknown command: {cmd}", file=self.output)
            print("Type /help for available commands", file=self.output)

    def _handle_source(self, source: str) -> None:
        """Evaluate a complete input and print its result or error report."""
        try:
            if self.verbose:
                print(f"Tree: {self.evaluator.parser.parse_string(source)!r}", file=self.output)
            result = self.evaluator.evaluate_string(source, self.env)
        except (ParseError, LangError) as e:
            print(e.describe(color=self.color), file=self.output)
            return
        self.output.flush()
        rendered = result.render()
        if rendered:
            print(rendered, file=self.output)

    def _cmd_help(self, args: str) -> None:
        """Handle the help command.

        Args:
            args: Command arguments
        """
        print("Available commands:", file=self.output)
        print("  /help - Show this help", file=self.output)
        print("  /env - List variables, functions and enums", file=self.output)
        print("  /reset - Discard all bindings, functions and enums", file=self.output)
        print("  /verbose [on|off] - Toggle echoing of parsed trees", file=self.output)
        print("  /exit - Exit the REPL", file=self.output)

    def _cmd_reset(self, args: str) -> None:
        """Handle the reset command.

        Args:
            args: Command arguments
        """
        self.env = Environment()
        self._pending = []
        print("Environment reset", file=self.output)

    def _cmd_env(self, args: str) -> None:
        bindings = self.env.get_bindings()
        functions = self.env.get_functions()
        enums = self.env.get_enums()
        if not (bindings or functions or enums):
            print("Environment is empty", file=self.output)
            return
        for name, value in bindings.items():
            print(f"  {name} = {value.render()!r} ({value.value_type()})", file=self.output)
        for function in functions.values():
            print(f"  def {function.name}({', '.join(function.params)})", file=self.output)
        for name, members in enums.items():
            print(f"  enum {name}: {', '.join(members)}", file=self.output)

    def _cmd_verbose(self, args: str) -> None:
        """Handle the verbose command.

        Args:
            args: Command arguments
        """
        if not args:
            self.verbose = not self.verbose
        elif args.lower() in ["on", "true", "yes", "1"]:
            self.verbose = True
        elif args.lower() in ["off", "false", "no", "0"]:
            self.verbose = False
        else:
            print(f"Invalid option: {args}", file=self.output)
            print("Usage: /verbose [on|off]", file=self.output)
            return

        print(f"Verbose mode: {'on' if self.verbose else 'off'}", file=self.output)

    def _cmd_exit(self, args: str) -> None:
        """Handle the exit command.

        Args:
            args: Command arguments
        """
        print("Exiting...", file=self.output)
        sys.exit(0)
