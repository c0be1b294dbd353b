"""Idempotent machine bootstrap tasks, configuration loading and sequential execution."""

__version__ = "0.1.0"