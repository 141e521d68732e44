import math

import pytest

from calc.diagnostics import ErrorKind
from calc.runtime import SENTINEL, Context, evaluate, evaluate_node, is_sentinel
from calc.symbols import SymbolNotFoundError, SymbolTable
from calc.tree import Assign, Binary, Operator, Print, Unary, assign, binary, literal, print_, unary, variable


def error_kinds(context: Context) -> list[ErrorKind]:
    return [d.kind for d in context.diagnostics.records]


@pytest.mark.parametrize("value", [0.0, -0.0, 1.0, -2.5, 1e300, -1e-300, math.inf])
def test_literal(value: float) -> None:
    context = Context()
    assert evaluate(literal(value), context) == value
    assert context.diagnostics.count() == 0


@pytest.mark.parametrize("x", [0.0, 3.0, -3.0, 2.25, -1e10])
def test_unary(x: float) -> None:
    context = Context()
    assert evaluate(unary(Operator.NEG, literal(x)), context) == -x
    assert evaluate(unary(Operator.ABS, literal(x)), context) == abs(x)
    assert context.diagnostics.count() == 0


@pytest.mark.parametrize(
    "operator, x, y, expected",
    [
        pytest.param(Operator.ADD, 2.0, 3.0, 5.0),
        pytest.param(Operator.SUB, 2.0, 3.0, -1.0),
        pytest.param(Operator.MUL, 2.0, 3.0, 6.0),
        pytest.param(Operator.DIV, 3.0, 2.0, 1.5),
        pytest.param(Operator.DIV, -1.0, 4.0, -0.25),
        pytest.param(Operator.MOD, 5.5, 2.0, 1.5),
        pytest.param(Operator.MOD, -5.5, 2.0, -1.5),
        pytest.param(Operator.MOD, 5.5, -2.0, 1.5),
        pytest.param(Operator.MOD, 3.0, math.inf, 3.0),
    ],
)
def test_binary(operator: Operator, x: float, y: float, expected: float) -> None:
    context = Context()
    assert evaluate(binary(operator, literal(x), literal(y)), context) == expected
    assert context.diagnostics.count() == 0


@pytest.mark.parametrize("operator", [Operator.DIV, Operator.MOD])
@pytest.mark.parametrize("zero", [0.0, -0.0])
def test_division_by_zero(operator: Operator, zero: float) -> None:
    context = Context()
    result = evaluate(binary(operator, literal(5.0), literal(zero)), context)
    assert is_sentinel(result)
    assert error_kinds(context) == [ErrorKind.DIVISION_BY_ZERO]


def test_infinite_dividend_remainder_is_nan_without_error() -> None:
    context = Context()
    assert is_sentinel(evaluate(binary(Operator.MOD, literal(math.inf), literal(2.0)), context))
    assert context.diagnostics.count() == 0


def test_variable_lookup() -> None:
    context = Context()
    context.symbols.declare("x")
    assert evaluate(variable("x"), context) == 0.0
    context.symbols.assign("x", 4.0)
    assert evaluate(variable("x"), context) == 4.0
    assert context.diagnostics.count() == 0


def test_undefined_variable() -> None:
    context = Context()
    assert is_sentinel(evaluate(variable("y"), context))
    assert error_kinds(context) == [ErrorKind.UNDEFINED_SYMBOL]
    assert context.diagnostics.records[0].message == 'symbol "y" is not defined'


def test_assign() -> None:
    context = Context()
    context.symbols.declare("x")
    assert evaluate(assign("x", literal(3.0)), context) == 3.0
    assert context.symbols.lookup("x") == 3.0
    assert context.symbols.is_assigned("x")


def test_assign_to_undeclared_name() -> None:
    context = Context()
    assert is_sentinel(evaluate(assign("x", literal(3.0)), context))
    assert error_kinds(context) == [ErrorKind.UNDEFINED_SYMBOL]
    assert "x" not in context.symbols


def test_assign_failure_in_store() -> None:
    class VanishingSymbolTable(SymbolTable):
        def assign(self, name: str, value: float) -> None:
            raise SymbolNotFoundError(name)

    context = Context(symbols=VanishingSymbolTable())
    context.symbols.declare("x")
    assert is_sentinel(evaluate(assign("x", literal(1.0)), context))
    assert error_kinds(context) == [ErrorKind.ASSIGNMENT_FAILED]


def test_print_returns_value_and_calls_printer() -> None:
    printed: list[float] = []
    context = Context(printer=printed.append)
    context.symbols.declare("x")
    tree = print_(assign("x", binary(Operator.DIV, literal(10.0), literal(2.0))))
    assert evaluate(tree, context) == 5.0
    assert context.symbols.lookup("x") == 5.0
    assert printed == [5.0]


def test_print_without_printer() -> None:
    assert evaluate(print_(literal(7.0)), Context()) == 7.0


def test_end_to_end_trees() -> None:
    context = Context()
    # 2 + 3 * 4
    tree = binary(Operator.ADD, literal(2), binary(Operator.MUL, literal(3), literal(4)))
    assert evaluate(tree, context) == 14.0
    # (2 + 3) * 4
    tree = binary(Operator.MUL, binary(Operator.ADD, literal(2), literal(3)), literal(4))
    assert evaluate(tree, context) == 20.0


def test_evaluation_is_gated_on_pending_errors() -> None:
    context = Context()
    context.diagnostics.error(ErrorKind.SYNTAX, "unexpected token")
    context.symbols.declare("x")
    assert is_sentinel(evaluate(assign("x", literal(1.0)), context))
    assert context.diagnostics.count() == 1
    assert not context.symbols.is_assigned("x")


def test_errors_do_not_stop_sibling_evaluation() -> None:
    context = Context()
    tree = binary(Operator.ADD, variable("a"), variable("b"))
    assert is_sentinel(evaluate(tree, context))
    assert error_kinds(context) == [ErrorKind.UNDEFINED_SYMBOL, ErrorKind.UNDEFINED_SYMBOL]


def test_sentinel_poisons_arithmetic_without_extra_errors() -> None:
    context = Context()
    tree = unary(Operator.NEG, binary(Operator.MUL, binary(Operator.DIV, literal(1), literal(0)), literal(2)))
    assert is_sentinel(evaluate(tree, context))
    assert error_kinds(context) == [ErrorKind.DIVISION_BY_ZERO]


def test_poisoned_value_is_assigned() -> None:
    context = Context()
    context.symbols.declare("x")
    assert is_sentinel(evaluate(assign("x", variable("y")), context))
    assert error_kinds(context) == [ErrorKind.UNDEFINED_SYMBOL]
    assert is_sentinel(context.symbols.lookup("x"))


def test_nan_divisor_is_not_a_division_by_zero() -> None:
    context = Context()
    assert is_sentinel(evaluate(binary(Operator.DIV, literal(1), literal(SENTINEL)), context))
    assert context.diagnostics.count() == 0


@pytest.mark.parametrize(
    "tree",
    [
        pytest.param(Unary(Operator.NEG, None), id="unary"),  # type: ignore
        pytest.param(Binary(Operator.ADD, None, literal(1)), id="binary-left"),  # type: ignore
        pytest.param(Binary(Operator.ADD, literal(1), None), id="binary-right"),  # type: ignore
        pytest.param(Assign(literal(1), literal(2)), id="assign-target"),  # type: ignore
        pytest.param(Print(None), id="print"),  # type: ignore
        pytest.param(object(), id="foreign-object"),
    ],
)
def test_invalid_node(tree) -> None:
    context = Context()
    assert is_sentinel(evaluate_node(tree, context))
    assert error_kinds(context) == [ErrorKind.INVALID_NODE]


@pytest.mark.parametrize(
    "tree",
    [
        pytest.param(unary(Operator.ADD, literal(1)), id="unary"),
        pytest.param(binary(Operator.NEG, literal(1), literal(2)), id="binary"),
        pytest.param(Assign(variable("x"), literal(1), operator=Operator.SUB), id="assign"),
        pytest.param(Print(literal(1), operator=Operator.ABS), id="print"),
    ],
)
def test_invalid_operator(tree) -> None:
    context = Context()
    context.symbols.declare("x")
    assert is_sentinel(evaluate(tree, context))
    assert error_kinds(context) == [ErrorKind.INVALID_OPERATOR]
    assert not context.symbols.is_assigned("x")


def test_reevaluation() -> None:
    context = Context()
    context.symbols.declare("x")
    context.symbols.assign("x", 2.0)
    tree = binary(Operator.MUL, variable("x"), literal(3))
    assert evaluate(tree, context) == evaluate(tree, context) == 6.0

    increment = assign("x", binary(Operator.ADD, variable("x"), literal(1)))
    assert evaluate(increment, context) == 3.0
    assert evaluate(increment, context) == 4.0
