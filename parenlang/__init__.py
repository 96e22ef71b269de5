"""Parser and tree-walking evaluator for a small parenthesized expression language."""
from parenlang.sexp_evaluator.sexp_evaluator import SexpEvaluator, execute, run
from parenlang.sexp_parser.sexp_parser import token_tree

__version__ = "0.1.0"

__all__ = ["SexpEvaluator", "execute", "run", "token_tree"]
