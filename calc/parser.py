from dataclasses import dataclass
from typing import Optional

from calc.tokenizer import Token, TokenType, untokenize
from calc.tree import Node, Operator, Variable, assign, binary, literal, print_, unary, variable


@dataclass
class ParserError(Exception):
    errmsg: str
    tokens: list[Token]
    error_token_idx: int

    def __str__(self) -> str:
        parsed_tokens = self.tokens[: self.error_token_idx]
        filler_whitespace = " " * len(untokenize(parsed_tokens)) + " "
        return "\n".join([f"Parser error: {self.errmsg}", untokenize(self.tokens), filler_whitespace + "^"])


BINARY_OPERATORS = {
    TokenType.PLUS: Operator.ADD,
    TokenType.MINUS: Operator.SUB,
    TokenType.STAR: Operator.MUL,
    TokenType.SLASH: Operator.DIV,
    TokenType.PERCENT: Operator.MOD,
    TokenType.EQUAL: Operator.ASSIGN,
}

UNARY_OPERATORS = {
    TokenType.PLUS: Operator.ABS,
    TokenType.MINUS: Operator.NEG,
    TokenType.PRINT: Operator.PRINT,
}

OPERATOR_PRECEDENCE = {
    Operator.PRINT: 0,
    Operator.ASSIGN: 1,
    Operator.ADD: 2,
    Operator.SUB: 2,
    Operator.MUL: 3,
    Operator.DIV: 3,
    Operator.MOD: 3,
    Operator.ABS: 4,
    Operator.NEG: 4,
}


def parse(tokens: list[Token]) -> list[Node]:
    result: list[Node] = []
    i = 0
    while i < len(tokens):
        expr, i = _consume_expression(tokens, i, prev_operator=None)
        if i >= len(tokens) or tokens[i].type is not TokenType.EXPR_END:
            raise ParserError("Internal error", tokens=tokens, error_token_idx=i)
        i += 1  # skipping expr end
        result.append(expr)
    return result


def is_rtl_op(op: Operator) -> bool:
    return op is Operator.ASSIGN


def _build_binary(operator: Operator, left: Node, right: Node, tokens: list[Token], i: int) -> Node:
    if operator is Operator.ASSIGN:
        if not isinstance(left, Variable):
            raise ParserError("Assignment target must be a variable", tokens=tokens, error_token_idx=i)
        return assign(left.name, right)
    return binary(operator, left, right)


def _build_unary(operator: Operator, operand: Node) -> Node:
    if operator is Operator.PRINT:
        return print_(operand)
    return unary(operator, operand)


def _consume_expression(tokens: list[Token], i: int, prev_operator: Optional[Operator]) -> tuple[Node, int]:
    result: Optional[Node] = None
    while True:
        if result is not None:
            left: Optional[Node] = result
        else:
            left, i = _consume_operand(tokens, i)

        if i >= len(tokens):
            raise ParserError("Unterminated expression", tokens=tokens, error_token_idx=len(tokens))

        if left is not None:
            if tokens[i].type is TokenType.EXPR_END:
                result = left
                break

            operator_token_idx = i
            operator = BINARY_OPERATORS.get(tokens[i].type)
            if operator is None:
                raise ParserError(
                    f"Binary operator expected, found {tokens[i].type}",
                    tokens=tokens,
                    error_token_idx=i,
                )
            if prev_operator is not None:
                curr_precedence = OPERATOR_PRECEDENCE[operator]
                prev_precedence = OPERATOR_PRECEDENCE[prev_operator]
                if curr_precedence < prev_precedence or (
                    curr_precedence == prev_precedence and not is_rtl_op(operator)
                ):
                    result = left
                    break

            right, i = _consume_expression(tokens, i + 1, prev_operator=operator)
            result = _build_binary(operator, left, right, tokens, operator_token_idx)
        else:
            unary_operator = UNARY_OPERATORS.get(tokens[i].type)
            if unary_operator is None:
                raise ParserError(f"Operand expected, found {tokens[i].type}", tokens=tokens, error_token_idx=i)
            operand, i = _consume_expression(tokens, i + 1, prev_operator=unary_operator)
            result = _build_unary(unary_operator, operand)

    return result, i


def _consume_operand(tokens: list[Token], i: int) -> tuple[Optional[Node], int]:
    if i >= len(tokens):
        return None, i
    first = tokens[i]
    if first.type is TokenType.NUMBER:
        try:
            value = float(first.lexeme)
        except ValueError:
            raise ParserError(f"Invalid number literal {first.lexeme!r}", tokens=tokens, error_token_idx=i) from None
        return literal(value), i + 1
    elif first.type is TokenType.IDENTIFIER:
        return variable(first.lexeme), i + 1
    elif first.type is TokenType.BRACKET_OPEN:
        bracket_count = 1
        j = i + 1
        while j < len(tokens) and bracket_count > 0:
            if tokens[j].type is TokenType.BRACKET_OPEN:
                bracket_count += 1
            elif tokens[j].type is TokenType.BRACKET_CLOSE:
                bracket_count -= 1
            j += 1
        if bracket_count:
            raise ParserError("Unclosed bracket", tokens=tokens, error_token_idx=i)
        bracketed_tokens = tokens[i + 1 : j - 1]
        if not bracketed_tokens:
            raise ParserError("Empty parenthesis", tokens=tokens, error_token_idx=i + 1)
        inner = parse(bracketed_tokens + [Token(type=TokenType.EXPR_END, lexeme="")])
        if len(inner) != 1:
            raise ParserError("Single expression expected in parenthesis", tokens=tokens, error_token_idx=i + 1)
        return inner[0], j
    else:
        return None, i
