"""
Lexicon tables for the RIM language.

RIM is a tiny imperative language: assignments, one-operation arithmetic,
parenthesized sub-expressions and `if/then/else` conditionals over identifiers
and Roman-numeral constants.

Exports:
    - TokenKind: closed enumeration of lexical categories.
    - KEYWORDS: keyword spelling → kind.
    - SYMBOLS: punctuation/operator spelling → kind (longest match wins).
    - ROMAN_DIGITS, ROMAN_VALUES: upper-case Roman digits and their weights.
"""

from enum import Enum


class TokenKind(Enum):
    """Lexical category of a RIM token."""

    IDENTIFIER = "IDENTIFIER"
    CONSTANT = "CONSTANT"
    ASSIGN_SIGN = "ASSIGN_SIGN"
    COMPARISON_SIGN = "COMPARISON_SIGN"
    OPERATORS_SIGN = "OPERATORS_SIGN"
    CONDITIONAL_OPERATOR = "CONDITIONAL_OPERATOR"
    DELIMITER = "DELIMITER"
    PARENTHESIS_OPEN = "PARENTHESIS_OPEN"
    PARENTHESIS_CLOSE = "PARENTHESIS_CLOSE"

    def __str__(self) -> str:
        return self.value


IF = "if"
THEN = "then"
ELSE = "else"
OPEN_PAREN = "("
CLOSE_PAREN = ")"
DELIMITER = ";"

KEYWORDS: dict[str, TokenKind] = {
    IF: TokenKind.CONDITIONAL_OPERATOR,
    THEN: TokenKind.CONDITIONAL_OPERATOR,
    ELSE: TokenKind.CONDITIONAL_OPERATOR,
}

ARITHMETIC_OPERATORS = frozenset({"+", "-", "*", "/"})
COMPARISON_OPERATORS = frozenset({"<", ">", "=", "<=", ">=", "<>"})

SYMBOLS: dict[str, TokenKind] = {
    ":=": TokenKind.ASSIGN_SIGN,
    DELIMITER: TokenKind.DELIMITER,
    OPEN_PAREN: TokenKind.PARENTHESIS_OPEN,
    CLOSE_PAREN: TokenKind.PARENTHESIS_CLOSE,
    **{op: TokenKind.OPERATORS_SIGN for op in ARITHMETIC_OPERATORS},
    **{op: TokenKind.COMPARISON_SIGN for op in COMPARISON_OPERATORS},
}

ROMAN_VALUES: dict[str, int] = {
    "I": 1,
    "V": 5,
    "X": 10,
    "L": 50,
    "C": 100,
    "D": 500,
    "M": 1000,
}
ROMAN_DIGITS = frozenset(ROMAN_VALUES)

__all__ = [
    "ARITHMETIC_OPERATORS",
    "CLOSE_PAREN",
    "COMPARISON_OPERATORS",
    "DELIMITER",
    "ELSE",
    "IF",
    "KEYWORDS",
    "OPEN_PAREN",
    "ROMAN_DIGITS",
    "ROMAN_VALUES",
    "SYMBOLS",
    "THEN",
    "TokenKind",
]
