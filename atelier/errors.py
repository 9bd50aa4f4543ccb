"""Closed error taxonomy for the store layer.

Every failure that leaves this package is an :class:`AtelierError` whose
``kind`` tells callers which stage failed. Not-found is never an error:
readers return ``None``.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    SCHEMA = "schema"
    WRITE = "write"
    READ = "read"
    REMINDER = "reminder"
    VALIDATION = "validation"


class AtelierError(Exception):
    kind: ErrorKind = ErrorKind.WRITE

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}" if self.message else self.kind.value


class SchemaError(AtelierError):
    kind = ErrorKind.SCHEMA


class WriteError(AtelierError):
    kind = ErrorKind.WRITE


class ReadError(AtelierError):
    kind = ErrorKind.READ


class ReminderError(AtelierError):
    kind = ErrorKind.REMINDER


class ValidationError(AtelierError):
    kind = ErrorKind.VALIDATION
