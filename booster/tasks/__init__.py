"""Idempotent bootstrap tasks, their argument parsers and conditional wrapping."""