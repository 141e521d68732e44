"""Variable store: one flat namespace mapping names to float values.

A name has to be declared before it can be assigned. Reading a declared name
that was never assigned yields ``0.0``; use ``is_assigned`` to tell the two
states apart.
"""
from dataclasses import dataclass

from calc.utils import format_number


@dataclass
class SymbolError(Exception):
    name: str

    def __str__(self) -> str:
        return f"symbol {self.name!r}"


class SymbolExistsError(SymbolError):
    def __str__(self) -> str:
        return f"symbol {self.name!r} is already declared"


class SymbolNotFoundError(SymbolError):
    def __str__(self) -> str:
        return f"symbol {self.name!r} is not defined"


class SymbolNotAssignedError(SymbolError):
    def __str__(self) -> str:
        return f"symbol {self.name!r} is declared but not assigned"


@dataclass
class Symbol:
    name: str
    value: float = 0.0
    is_assigned: bool = False


class SymbolTable:
    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def _find(self, name: str) -> Symbol:
        try:
            return self._symbols[name]
        except KeyError:
            raise SymbolNotFoundError(name) from None

    def declare(self, name: str) -> None:
        if name in self._symbols:
            raise SymbolExistsError(name)
        self._symbols[name] = Symbol(name=name)

    def assign(self, name: str, value: float) -> None:
        symbol = self._find(name)
        symbol.value = value
        symbol.is_assigned = True

    def lookup(self, name: str) -> float:
        return self._find(name).value

    def is_assigned(self, name: str) -> bool:
        return self._find(name).is_assigned

    def require_assigned(self, name: str) -> float:
        symbol = self._find(name)
        if not symbol.is_assigned:
            raise SymbolNotAssignedError(name)
        return symbol.value

    def names(self) -> list[str]:
        return sorted(self._symbols)

    def dump(self) -> list[str]:
        lines = []
        for name in self.names():
            symbol = self._symbols[name]
            value = format_number(symbol.value) if symbol.is_assigned else "not assigned"
            lines.append(f"name: {name} value = {value}")
        return lines

    def clear(self) -> None:
        self._symbols.clear()
