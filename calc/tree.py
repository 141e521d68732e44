"""Expression tree built by the parser and consumed by the runtime.

Nodes are frozen dataclasses, so a tree never changes after construction and
every child belongs to exactly one parent. Evaluation lives in
``calc.runtime``; this module only knows how to build and inspect trees.
"""
import enum
import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from calc.symbols import SymbolNotAssignedError, SymbolNotFoundError, SymbolTable
from calc.utils import PrintableEnum, format_number

logger = logging.getLogger("calc")

_node_numbers = itertools.count()


def _next_node_number() -> int:
    return next(_node_numbers)


class Operator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    MOD = enum.auto()
    ABS = enum.auto()
    NEG = enum.auto()
    ASSIGN = enum.auto()
    PRINT = enum.auto()

    @property
    def symbol(self) -> str:
        return _OPERATOR_SYMBOLS[self]


_OPERATOR_SYMBOLS = {
    Operator.ADD: "+",
    Operator.SUB: "-",
    Operator.MUL: "*",
    Operator.DIV: "/",
    Operator.MOD: "%",
    Operator.ABS: "+",
    Operator.NEG: "-",
    Operator.ASSIGN: "=",
    Operator.PRINT: "print",
}


@dataclass(frozen=True)
class Literal:
    value: float
    node_number: int = field(default_factory=_next_node_number, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True)
class Variable:
    name: str
    node_number: int = field(default_factory=_next_node_number, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True)
class Unary:
    operator: Operator
    operand: "Node"
    node_number: int = field(default_factory=_next_node_number, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True)
class Binary:
    operator: Operator
    left: "Node"
    right: "Node"
    node_number: int = field(default_factory=_next_node_number, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True)
class Assign:
    target: Variable
    value: "Node"
    operator: Operator = field(default=Operator.ASSIGN, kw_only=True)
    node_number: int = field(default_factory=_next_node_number, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True)
class Print:
    operand: "Node"
    operator: Operator = field(default=Operator.PRINT, kw_only=True)
    node_number: int = field(default_factory=_next_node_number, compare=False, repr=False, kw_only=True)


Node = Literal | Variable | Unary | Binary | Assign | Print


def literal(value: float) -> Literal:
    logger.debug("Create a literal AST node")
    return Literal(float(value))


def variable(name: str) -> Variable:
    logger.debug("Create a variable AST node")
    return Variable(str(name))


def unary(operator: Operator, operand: Node) -> Unary:
    logger.debug("Create a unary AST node")
    return Unary(operator, operand)


def binary(operator: Operator, left: Node, right: Node) -> Binary:
    logger.debug("Create a binary AST node")
    return Binary(operator, left, right)


def assign(name: str, value: Node) -> Assign:
    logger.debug("Create an assign AST node")
    return Assign(variable(name), value)


def print_(operand: Node) -> Print:
    logger.debug("Create a print AST node")
    return Print(operand)


def children(node: Node) -> tuple[Node, ...]:
    if isinstance(node, (Unary, Print)):
        candidates: tuple[Optional[Node], ...] = (node.operand,)
    elif isinstance(node, Binary):
        candidates = (node.left, node.right)
    elif isinstance(node, Assign):
        candidates = (node.target, node.value)
    else:
        candidates = ()
    return tuple(c for c in candidates if c is not None)


def walk(root: Node) -> Iterator[Node]:
    """Post-order traversal: left subtree, right subtree, then the node itself."""
    for child in children(root):
        yield from walk(child)
    yield root


def assignment_targets(root: Node) -> Iterator[str]:
    for node in walk(root):
        if isinstance(node, Assign) and isinstance(node.target, Variable):
            yield node.target.name


def _describe_variable(node: Variable, symbols: Optional[SymbolTable]) -> str:
    if symbols is None:
        return f"variable name: {node.name}"
    try:
        value = format_number(symbols.require_assigned(node.name))
    except SymbolNotAssignedError:
        value = "not assigned"
    except SymbolNotFoundError:
        value = "not defined"
    return f"variable name: {node.name}, value: {value}"


def describe(node: Node, symbols: Optional[SymbolTable] = None) -> str:
    if isinstance(node, Literal):
        return f"literal value: {format_number(node.value)}"
    elif isinstance(node, Variable):
        return _describe_variable(node, symbols)
    elif isinstance(node, Unary):
        return f"unary node op: {node.operator}"
    elif isinstance(node, Binary):
        return f"binary node op: {node.operator}"
    elif isinstance(node, Assign):
        return "assign node"
    elif isinstance(node, Print):
        return "print node"
    else:
        raise TypeError(f"Unexpected node type: {type(node).__name__}")


def dump_ast(root: Node, symbols: Optional[SymbolTable] = None) -> list[str]:
    """One line per node, children before parents.

    When ``symbols`` is given, variable lines show the value currently bound
    in the store.
    """
    logger.debug("Dump the AST")
    return [describe(node, symbols) for node in walk(root)]


def _dot_label(node: Node) -> str:
    if isinstance(node, Literal):
        return format_number(node.value)
    elif isinstance(node, Variable):
        return node.name
    else:
        return node.operator.symbol


def to_dot(root: Node, graph_name: str = "ast") -> str:
    lines = [f"digraph {graph_name} {{"]
    for node in walk(root):
        label = _dot_label(node).replace('"', '\\"')
        lines.append(f'    n{node.node_number} [label="{label}"];')
        for child in children(node):
            lines.append(f"    n{node.node_number} -> n{child.node_number};")
    lines.append("}")
    return "\n".join(lines)
