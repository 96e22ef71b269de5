"""Evaluator package: environment, function table, console I/O and form processors."""
