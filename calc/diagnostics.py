"""Error counter and message sink shared by one evaluation session."""
import enum
import logging
from dataclasses import dataclass

from calc.utils import PrintableEnum

logger = logging.getLogger("calc")


class ErrorKind(PrintableEnum):
    SYNTAX = enum.auto()
    UNDEFINED_SYMBOL = enum.auto()
    INVALID_NODE = enum.auto()
    INVALID_OPERATOR = enum.auto()
    DIVISION_BY_ZERO = enum.auto()
    ASSIGNMENT_FAILED = enum.auto()


@dataclass(frozen=True)
class Diagnostic:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"[{self.kind}] {self.message}"


class Diagnostics:
    """Counts errors raised since the last ``reset``.

    ``log`` messages are emitted only when their level does not exceed the
    configured verbosity: 0 is always shown, 1 traces tree traversal and 2
    traces every node visit.
    """

    def __init__(self, verbosity: int = 0) -> None:
        self.verbosity = verbosity
        self._records: list[Diagnostic] = []

    @property
    def records(self) -> tuple[Diagnostic, ...]:
        return tuple(self._records)

    def error(self, kind: ErrorKind, message: str) -> None:
        diagnostic = Diagnostic(kind=kind, message=message)
        self._records.append(diagnostic)
        logger.error("%s", diagnostic)

    def count(self) -> int:
        return len(self._records)

    def reset(self) -> None:
        self._records.clear()

    def log(self, level: int, message: str) -> None:
        if level <= 0:
            logger.info("%s", message)
        elif self.verbosity >= level:
            logger.debug("%s", message)
