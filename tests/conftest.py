import pytest
from io import StringIO

from parenlang.sexp_evaluator.console_io import ConsoleIO
from parenlang.sexp_evaluator.sexp_environment import Environment
from parenlang.sexp_evaluator.sexp_evaluator import SexpEvaluator


# --- Console and Evaluator Fixtures ---

@pytest.fixture
def console():
    """Provides a ConsoleIO backed by in-memory streams (empty input)."""
    return ConsoleIO(input_stream=StringIO(""), output_stream=StringIO())


@pytest.fixture
def evaluator(console):
    """Provides a SexpEvaluator writing to the in-memory console."""
    return SexpEvaluator(io=console)


@pytest.fixture
def env():
    """Provides a fresh Environment that tests can inspect after evaluation."""
    return Environment()


@pytest.fixture
def run_program(evaluator, env):
    """Parses and evaluates source in the shared `env` fixture."""
    def _run(source: str):
        return evaluator.evaluate_string(source, env)
    return _run


@pytest.fixture
def printed(console):
    """Returns everything written to the in-memory console so far."""
    return lambda: console.output_stream.getvalue()
