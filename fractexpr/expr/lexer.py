from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Union

from fractexpr.expr.errors import ExprError
from fractexpr.expr.nodes import Slot

class TokenKind(enum.Enum):
    LPAREN = "("
    RPAREN = ")"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    IDENT = "ident"
    REAL = "real"
    IMAG = "imag"

_SINGLE = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "+": TokenKind.ADD,
    "-": TokenKind.SUB,
    "*": TokenKind.MUL,
    "/": TokenKind.DIV,
}

_DIGITS = "0123456789"

@dataclass(frozen=True)
class Token:
    kind: TokenKind
    position: int
    value: Optional[Union[float, Slot]] = None

def _lex_number(text: str, start: int):
    """Scan a numeric literal at ``start``; returns (token, next index)."""
    i = start
    dot = False
    imaginary = False
    while i < len(text):
        ch = text[i]
        if ch in _DIGITS:
            i += 1
        elif ch == "." and not dot:
            dot = True
            i += 1
        elif ch == "i":
            imaginary = True
            break
        else:
            break

    digits = text[start:i]
    try:
        number = float(digits)
    except ValueError:
        raise ExprError("Invalid floating point literal", start + 1) from None

    if imaginary:
        return Token(TokenKind.IMAG, start + 1, number), i + 1
    return Token(TokenKind.REAL, start + 1, number), i

def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    i = 0
    while i < len(text):
        ch = text[i]
        position = i + 1

        if ch in (" ", "\t"):
            i += 1
            continue

        kind = _SINGLE.get(ch)
        if kind is not None:
            tokens.append(Token(kind, position))
            i += 1
            continue

        if ch in _DIGITS:
            token, i = _lex_number(text, i)
            tokens.append(token)
            continue

        if ch == "i":
            tokens.append(Token(TokenKind.IMAG, position, 1.0))
            i += 1
            continue

        slot = Slot.from_letter(ch)
        if slot is None:
            raise ExprError("Unexpected character", position)
        tokens.append(Token(TokenKind.IDENT, position, slot))
        i += 1

    return tokens
