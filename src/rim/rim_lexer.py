"""
Lexical analyzer for the RIM language.

This module converts raw source text into the flat list of lexical results the
syntax analyzer consumes.

Classes:
    CharacterStream: Stream abstraction for reading characters with offset/line/column tracking.
    Token: An immutable classified lexeme with its source position.
    LexError: A lexical defect with its source position (stands in a result list in place of a token).
    Lexer: Converts a CharacterStream into a list of `Token | LexError` results.

Features:
    - Skips whitespace and single-line comments (`#`)
    - Longest-match recognition of `:=`, `<=`, `>=`, `<>`
    - Recognizes:
        * Identifiers and the `if` / `then` / `else` keywords
        * Roman-numeral constants (words made only of `I V X L C D M`)
        * Assignment, comparison and arithmetic signs, parentheses, `;`
    - Collects every lexical error instead of stopping at the first one

Example:
    >>> results = tokenize("a := III;")
    >>> [r.text for r in results]
    ['a', ':=', 'III', ';']

Exports:
    - CharacterStream
    - Token
    - LexError
    - LexResult
    - Lexer
    - tokenize
    - roman_to_int
"""

from typing import Any, Union

from rim.rim_constants import KEYWORDS, ROMAN_DIGITS, ROMAN_VALUES, SYMBOLS, TokenKind


class CharacterStream:
    """
    Reads characters from a source string, tracking absolute offset, line and column.

    Attributes:
        source (str): The input source string.
        position (int): Current absolute index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """A single classified lexeme of the RIM language.

    Tokens are immutable once produced. `position` is the absolute character
    offset of the first character and is `None` only for synthetic tokens.

    Attributes:
        kind (TokenKind): The lexical category.
        text (str): The literal source text.
        position (int | None): Absolute offset into the source.
        line (int): 1-based line number (0 when unknown).
        col (int): 1-based column number (0 when unknown).
    """

    __slots__ = ("kind", "text", "position", "line", "col")

    def __init__(
        self,
        kind: TokenKind,
        text: str,
        position: int | None = None,
        line: int = 0,
        col: int = 0,
    ):
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable, cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Token is immutable, cannot delete {name!r}")

    def location(self) -> str:
        """Human-readable location, or an empty string for synthetic tokens."""
        if self.position is None:
            return ""
        return f"line {self.line}, col {self.col}"

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.text == other.text
            and self.position == other.position
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.text, self.position))


class LexError:
    """A lexical defect found while scanning.

    Attributes:
        position (int): Absolute offset of the offending character.
        line (int): 1-based line number.
        col (int): 1-based column number.
        message (str): Description of the defect.
    """

    def __init__(self, position: int, message: str, line: int = 0, col: int = 0):
        self.position = position
        self.message = message
        self.line = line
        self.col = col

    def __str__(self) -> str:
        return f"line {self.line}, col {self.col}: {self.message}"

    def __repr__(self) -> str:
        return f"LexError({self.position}, {self.message!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, LexError)
            and self.position == other.position
            and self.message == other.message
        )

    def __hash__(self) -> int:
        return hash((self.position, self.message))


LexResult = Union[Token, LexError]
"""One entry of the tokenizer's output."""


def roman_to_int(text: str) -> int:
    """Converts a sequence of Roman digits to an integer.

    Uses the additive/subtractive reading (a smaller digit before a larger one is
    subtracted). Non-canonical spellings such as `VVV` or `IIII` are accepted and
    simply summed.

    Raises:
        ValueError: If `text` is empty or contains a non-Roman character.
    """
    if not text or any(ch not in ROMAN_DIGITS for ch in text):
        raise ValueError(f"Not a Roman numeral: {text!r}")
    total = 0
    for index, ch in enumerate(text):
        value = ROMAN_VALUES[ch]
        if index + 1 < len(text) and value < ROMAN_VALUES[text[index + 1]]:
            total -= value
        else:
            total += value
    return total


class Lexer:
    """Lexical analyzer for the RIM language.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek().isspace():
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def match_symbol(self) -> Token | None:
        """Attempts to match the longest symbol from the current position."""
        position, line, col = self.stream.position, self.stream.line, self.stream.column
        candidate = ""
        best: str | None = None
        for i in range(2):
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in SYMBOLS:
                best = candidate

        if best is None:
            return None
        for _ in range(len(best)):
            self.advance()
        return Token(SYMBOLS[best], best, position, line, col)

    def next_token(self) -> LexResult | None:
        """Consumes and returns the next lexical result, or None at end of input."""
        self.skip_whitespace()
        if self.stream.end_of_file():
            return None

        ch = self.peek()
        position, line, col = self.stream.position, self.stream.line, self.stream.column

        # 1. Word: keyword, Roman constant or identifier
        if ch.isalpha() or ch == "_":
            word = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() == "_"
            ):
                word += self.advance()
            if word in KEYWORDS:
                return Token(KEYWORDS[word], word, position, line, col)
            if all(c in ROMAN_DIGITS for c in word):
                return Token(TokenKind.CONSTANT, word, position, line, col)
            return Token(TokenKind.IDENTIFIER, word, position, line, col)

        # 2. Decimal numbers are not part of the language
        if ch.isdigit():
            digits = ""
            while not self.stream.end_of_file() and self.peek().isalnum():
                digits += self.advance()
            return LexError(
                position,
                f"decimal constant {digits!r} is not allowed, use Roman numerals",
                line,
                col,
            )

        # 3. Operators and punctuation
        token = self.match_symbol()
        if token:
            return token

        # 4. Unknown character
        bad = self.advance()
        return LexError(position, f"unexpected character {bad!r}", line, col)

    def analyze(self) -> list[LexResult]:
        """Scans the whole stream and returns every token and lexical error in source order."""
        results: list[LexResult] = []
        while True:
            result = self.next_token()
            if result is None:
                return results
            results.append(result)


def tokenize(source: str) -> list[LexResult]:
    """Tokenizes `source` in one call."""
    return Lexer(CharacterStream(source)).analyze()


__all__ = [
    "CharacterStream",
    "LexError",
    "LexResult",
    "Lexer",
    "Token",
    "roman_to_int",
    "tokenize",
]
