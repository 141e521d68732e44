import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from calc.diagnostics import Diagnostics, ErrorKind
from calc.symbols import SymbolNotFoundError, SymbolTable
from calc.tree import Assign, Binary, Literal, Node, Operator, Print, Unary, Variable

# Every failed evaluation returns this value. NaN never compares equal to
# itself, so test results with is_sentinel().
SENTINEL = math.nan


def is_sentinel(value: float) -> bool:
    return math.isnan(value)


@dataclass
class Context:
    symbols: SymbolTable = field(default_factory=SymbolTable)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    printer: Optional[Callable[[float], None]] = None


def evaluate(root: Node, context: Context) -> float:
    """Evaluate a whole tree.

    Nothing is visited when errors are already pending on the context (for
    example a parse error on the same line); the sentinel is returned instead.
    Errors raised during the visit are counted on ``context.diagnostics`` and
    never interrupt the traversal.
    """
    context.diagnostics.log(1, "Traverse the AST")
    errors = context.diagnostics.count()
    if errors:
        context.diagnostics.log(0, f"Errors: {errors}")
        return SENTINEL
    return evaluate_node(root, context)


def evaluate_node(node: Node, context: Context) -> float:
    diagnostics = context.diagnostics
    if isinstance(node, Literal):
        diagnostics.log(2, "Visit LITERAL AST node")
        return node.value
    elif isinstance(node, Variable):
        diagnostics.log(2, "Visit VARIABLE AST node")
        return _visit_variable(node, context)
    elif isinstance(node, Unary):
        diagnostics.log(2, "Visit UNARY AST node")
        return _visit_unary(node, context)
    elif isinstance(node, Binary):
        diagnostics.log(2, "Visit BINARY AST node")
        return _visit_binary(node, context)
    elif isinstance(node, Assign):
        diagnostics.log(2, "Visit ASSIGN AST node")
        return _visit_assign(node, context)
    elif isinstance(node, Print):
        diagnostics.log(2, "Visit PRINT AST node")
        return _visit_print(node, context)
    else:
        diagnostics.error(ErrorKind.INVALID_NODE, f"unexpected node type: {type(node).__name__}")
        return SENTINEL


def _visit_variable(node: Variable, context: Context) -> float:
    try:
        return context.symbols.lookup(node.name)
    except SymbolNotFoundError:
        context.diagnostics.error(ErrorKind.UNDEFINED_SYMBOL, f'symbol "{node.name}" is not defined')
        return SENTINEL


def _visit_unary(node: Unary, context: Context) -> float:
    if node.operand is None:
        context.diagnostics.error(ErrorKind.INVALID_NODE, "invalid unary child node")
        return SENTINEL
    operand = evaluate_node(node.operand, context)
    impl = unary_impls.get(node.operator)
    if impl is None:
        context.diagnostics.error(ErrorKind.INVALID_OPERATOR, f"invalid unary node type: {node.operator}")
        return SENTINEL
    return impl(operand)


def _visit_binary(node: Binary, context: Context) -> float:
    if node.left is None:
        context.diagnostics.error(ErrorKind.INVALID_NODE, "invalid left binary child node")
        return SENTINEL
    left = evaluate_node(node.left, context)

    if node.right is None:
        context.diagnostics.error(ErrorKind.INVALID_NODE, "invalid right binary child node")
        return SENTINEL
    right = evaluate_node(node.right, context)

    return eval_binary_operation(node.operator, left, right, context.diagnostics)


def _visit_assign(node: Assign, context: Context) -> float:
    target = node.target
    if not isinstance(target, Variable):
        context.diagnostics.error(ErrorKind.INVALID_NODE, "invalid left assign child node")
        return SENTINEL
    if target.name not in context.symbols:
        context.diagnostics.error(ErrorKind.UNDEFINED_SYMBOL, f'symbol "{target.name}" is not defined')
        return SENTINEL

    if node.value is None:
        context.diagnostics.error(ErrorKind.INVALID_NODE, "invalid right assign child node")
        return SENTINEL
    value = evaluate_node(node.value, context)

    if node.operator is not Operator.ASSIGN:
        context.diagnostics.error(ErrorKind.INVALID_OPERATOR, f"invalid assign node type: {node.operator}")
        return SENTINEL
    try:
        context.symbols.assign(target.name, value)
    except SymbolNotFoundError:
        context.diagnostics.error(ErrorKind.ASSIGNMENT_FAILED, f'symbol "{target.name}" is not found')
        return SENTINEL
    return value


def _visit_print(node: Print, context: Context) -> float:
    if node.operand is None:
        context.diagnostics.error(ErrorKind.INVALID_NODE, "invalid print child node")
        return SENTINEL
    value = evaluate_node(node.operand, context)

    if node.operator is not Operator.PRINT:
        context.diagnostics.error(ErrorKind.INVALID_OPERATOR, f"invalid print node type: {node.operator}")
        return SENTINEL
    if context.printer is not None:
        context.printer(value)
    return value


UnaryOperationImpl = Callable[[float], float]
BinaryOperationImpl = Callable[[float, float], float]


def _remainder(a: float, b: float) -> float:
    # C fmod() yields NaN here, math.fmod() raises instead
    if math.isinf(a):
        return math.nan
    return math.fmod(a, b)


unary_impls: dict[Operator, UnaryOperationImpl] = {
    Operator.ABS: abs,
    Operator.NEG: lambda a: -a,
}

binary_impls: dict[Operator, BinaryOperationImpl] = {
    Operator.ADD: lambda a, b: a + b,
    Operator.SUB: lambda a, b: a - b,
    Operator.MUL: lambda a, b: a * b,
    Operator.DIV: lambda a, b: a / b,
    Operator.MOD: _remainder,
}

DIVISION_OPERATORS = frozenset({Operator.DIV, Operator.MOD})


def eval_binary_operation(operator: Operator, a: float, b: float, diagnostics: Diagnostics) -> float:
    impl = binary_impls.get(operator)
    if impl is None:
        diagnostics.error(ErrorKind.INVALID_OPERATOR, f"invalid binary node type: {operator}")
        return SENTINEL
    if operator in DIVISION_OPERATORS and b == 0.0:
        diagnostics.error(ErrorKind.DIVISION_BY_ZERO, "divide by zero")
        return SENTINEL
    return impl(a, b)
