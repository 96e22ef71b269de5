"""Console I/O capability used by the `print` and `input` forms."""
import sys
from typing import Optional, TextIO


class ConsoleIO:
    """
    Wraps the streams the evaluator reads from and writes to.

    Streams are resolved when used, so a ConsoleIO created without arguments
    follows later replacements of sys.stdin/sys.stdout.
    """

    def __init__(self, input_stream: Optional[TextIO] = None, output_stream: Optional[TextIO] = None):
        self._input = input_stream
        self._output = output_stream

    @property
    def input_stream(self) -> TextIO:
        return self._input if self._input is not None else sys.stdin

    @property
    def output_stream(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    def write(self, text: str) -> None:
        self.output_stream.write(text)

    def flush(self) -> None:
        self.output_stream.flush()

    def read_line(self) -> str:
        """Blocks for one line. Returns '' at end of input."""
        return self.input_stream.readline()
