"""Precedence-climbing parser turning a token list into one expression tree."""

from __future__ import annotations

from typing import List, Optional

from fractexpr.expr.errors import ExprError
from fractexpr.expr.lexer import Token, TokenKind, tokenize
from fractexpr.expr.nodes import BinOp, Binary, Expr, Imag, Real, Var

_BINOPS = {
    TokenKind.ADD: BinOp.ADD,
    TokenKind.SUB: BinOp.SUB,
    TokenKind.MUL: BinOp.MUL,
    TokenKind.DIV: BinOp.DIV,
}

# nested parentheses recurse, three frames per level
MAX_DEPTH = 150

class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.idx = 0
        # position of the most recently consumed token, 1 before any
        self.last_position = 1
        self.depth = 0

    def error(self, message: str) -> ExprError:
        return ExprError(message, self.last_position)

    def peek(self) -> Optional[Token]:
        if self.idx >= len(self.tokens):
            return None
        return self.tokens[self.idx]

    def next(self) -> Optional[Token]:
        token = self.peek()
        if token is None:
            return None
        self.last_position = token.position
        self.idx += 1
        return token

    def expect_token(self) -> Token:
        token = self.next()
        if token is None:
            raise self.error("Expected a token")
        return token

    def parse_primary(self, token: Token) -> Expr:
        kind = token.kind

        if kind is TokenKind.LPAREN:
            expr = self.parse_expression(1)
            closing = self.next()
            if closing is None or closing.kind is not TokenKind.RPAREN:
                raise self.error("Unclosed (")
            return expr

        if kind is TokenKind.SUB:
            minuses = [token]
            operand = self.expect_token()
            while operand.kind is TokenKind.SUB:
                minuses.append(operand)
                operand = self.expect_token()

            expr = self.parse_primary(operand)
            for minus in reversed(minuses):
                zero = Real(0.0, position=minus.position)
                expr = Binary(BinOp.SUB, zero, expr, position=minus.position)
            return expr

        if kind is TokenKind.REAL:
            return Real(token.value, position=token.position)
        if kind is TokenKind.IMAG:
            return Imag(token.value, position=token.position)
        if kind is TokenKind.IDENT:
            return Var(token.value, position=token.position)

        raise self.error("Unexpected token")

    def parse_expression(self, min_precedence: int) -> Expr:
        if self.depth >= MAX_DEPTH:
            raise self.error("Expression too deep")
        self.depth += 1
        try:
            return self._parse_operators(min_precedence)
        finally:
            self.depth -= 1

    def _parse_operators(self, min_precedence: int) -> Expr:
        expr = self.parse_primary(self.expect_token())

        while True:
            token = self.peek()
            op = _BINOPS.get(token.kind) if token is not None else None
            if op is None or op.precedence < min_precedence:
                return expr

            self.next()
            right = self.parse_expression(op.precedence + 1)
            expr = Binary(op, expr, right, position=self.last_position)

def parse(tokens: List[Token]) -> Expr:
    parser = Parser(tokens)
    expr = parser.parse_expression(1)

    extra = parser.next()
    if extra is not None:
        raise ExprError("Extra token", extra.position)

    return expr

def parse_source(text: str) -> Expr:
    return parse(tokenize(text))
