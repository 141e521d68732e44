"""One interactive session: a variable store and a diagnostics channel that
live as long as the session, fed one input line at a time."""
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from calc.config import Settings
from calc.diagnostics import Diagnostic, Diagnostics, ErrorKind
from calc.parser import ParserError, parse
from calc.runtime import SENTINEL, Context, evaluate
from calc.symbols import SymbolTable
from calc.tokenizer import TokenizerError, tokenize
from calc.tree import Node, assignment_targets

logger = logging.getLogger("calc")


@dataclass
class LineResult:
    trees: list[Node] = field(default_factory=list)
    values: list[float] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return len(self.diagnostics)


class Session:
    def __init__(self, settings: Optional[Settings] = None, printer: Optional[Callable[[float], None]] = None):
        self.settings = settings if settings is not None else Settings()
        self.context = Context(diagnostics=Diagnostics(verbosity=self.settings.verbosity), printer=printer)

    @property
    def symbols(self) -> SymbolTable:
        return self.context.symbols

    def declare(self, tree: Node) -> None:
        """Declare every assignment target in ``tree`` that the store does not know yet."""
        for name in assignment_targets(tree):
            if name not in self.symbols:
                logger.debug("Declare symbol %r", name)
                self.symbols.declare(name)

    def _parse(self, code: str) -> list[Node]:
        try:
            return parse(tokenize(code))
        except (TokenizerError, ParserError) as e:
            self.context.diagnostics.error(ErrorKind.SYNTAX, str(e))
        except RecursionError:
            self.context.diagnostics.error(ErrorKind.SYNTAX, "expression is nested too deeply")
        return []

    def _finish(self, result: LineResult) -> LineResult:
        diagnostics = self.context.diagnostics
        result.diagnostics = list(diagnostics.records)
        diagnostics.reset()
        return result

    def inspect(self, code: str) -> LineResult:
        """Parse ``code`` without evaluating it or touching the store."""
        return self._finish(LineResult(trees=self._parse(code)))

    def evaluate(self, tree: Node) -> float:
        """Declare the targets of ``tree`` and evaluate it.

        Nothing is declared while an error is pending, so a skipped statement
        leaves the store as it was.
        """
        diagnostics = self.context.diagnostics
        try:
            if diagnostics.count() == 0:
                self.declare(tree)
            return evaluate(tree, self.context)
        except RecursionError:
            diagnostics.error(ErrorKind.INVALID_NODE, "expression is nested too deeply")
            return SENTINEL

    def run(self, code: str) -> LineResult:
        """Parse and evaluate one input line.

        Evaluation of every statement on the line is skipped once an error is
        pending, so a syntax error leaves the store untouched. Errors are
        cleared before returning; the store keeps its bindings.
        """
        result = LineResult(trees=self._parse(code))
        for tree in result.trees:
            result.values.append(self.evaluate(tree))
        return self._finish(result)
