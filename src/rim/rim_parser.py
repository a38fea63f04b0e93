"""
RIM Syntax Analyzer

Builds a concrete syntax tree (`SyntaxNode`) from the lexical results of the RIM
tokenizer, failing on the first structural defect with its source position.

Supported Constructs
--------------------
- Assignment:            `a := III;`, `a := b + c;`, `a := (b * c);`
- Operator expression:   `operand <+|-|*|/> value` (one operation per production;
                         longer chains recurse through the right-hand operand)
- Bracketed expression:  `( value )`, optionally followed by an operator
- Conditional:           `if x > y then <statements> [else <statements>]`
- Bare expression:       `a + b;`, `III;`

Parser Behavior
---------------
Statements are recognized by a lookahead heuristic (`classify`) over the tokens
of the next statement. Conditionals and bracketed statements may span past the
first `;`, so their extent is found by the block locators before the matching
production is invoked. Nested statement sequences (conditional branches) are
parsed by recursing into the same driver.

Lexical correctness is a precondition: if the input contains any `LexError`,
`analyze()` raises `LexicalError` listing all of them and parses nothing.
Syntactic errors are fail-fast: the first one raises `RimSyntaxError`.

Entry Points
------------
- `SyntacticalAnalyzer.analyze()`: tree for a full list of lexical results.
- `analyze()`: module-level shortcut with the default configuration.
- `parse_source()`: tokenize and analyze raw source text.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from rim.rim_constants import (
    ARITHMETIC_OPERATORS,
    CLOSE_PAREN,
    ELSE,
    IF,
    OPEN_PAREN,
    THEN,
    TokenKind,
)
from rim.rim_lexer import LexError, LexResult, Token, tokenize
from rim.rim_tree import SyntaxNode, branch, leaf, operand_slot

DEFAULT_MAX_DEPTH = 64

OPERAND_KINDS = (TokenKind.IDENTIFIER, TokenKind.CONSTANT)


class RimError(Exception):
    """Base class for every failure reported by the RIM toolchain."""


class RimSyntaxError(RimError, SyntaxError):
    """A structural defect in the token stream.

    Attributes:
        description (str): What was expected or what went wrong.
        token (Token | None): The offending token, when one is known.
    """

    def __init__(self, description: str, token: Token | None = None):
        self.description = description
        self.token = token
        where = token.location() if token is not None else ""
        super().__init__(f"{where}: {description}" if where else description)


class LexicalError(RimError):
    """Raised before parsing when the tokenizer reported any errors.

    Attributes:
        errors (list[LexError]): Every lexical error, in source order.
    """

    def __init__(self, errors: list[LexError]):
        self.errors = errors
        lines = "\n".join(str(e) for e in errors)
        super().__init__(f"Lexical analysis found {len(errors)} error(s):\n{lines}")


class NodeClass(Enum):
    """Which production the next statement belongs to."""

    ASSIGN = "ASSIGN"
    PARENTHESIS = "PARENTHESIS"
    OPERATOR = "OPERATOR"
    CONDITIONAL = "CONDITIONAL"
    ATOM = "ATOM"
    UNCLASSIFIABLE = "UNCLASSIFIABLE"


def classify(window: Sequence[Token]) -> NodeClass:
    """Predicts the production for a statement window.

    `window` holds the statement's tokens without its terminating `;`. Rules are
    checked in a fixed order and the first match wins, so `(a + b)` is a
    PARENTHESIS even though it contains an operator.
    """
    if not window:
        return NodeClass.UNCLASSIFIABLE
    first = window[0]
    if first.text == OPEN_PAREN:
        return NodeClass.PARENTHESIS
    if (
        first.kind is TokenKind.IDENTIFIER
        and len(window) > 1
        and window[1].kind is TokenKind.ASSIGN_SIGN
    ):
        return NodeClass.ASSIGN
    if first.kind is TokenKind.CONDITIONAL_OPERATOR:
        return NodeClass.CONDITIONAL
    if any(token.text in ARITHMETIC_OPERATORS for token in window):
        return NodeClass.OPERATOR
    if len(window) == 1 and first.kind in OPERAND_KINDS:
        return NodeClass.ATOM
    return NodeClass.UNCLASSIFIABLE


def find_delimiter(tokens: Sequence[Token], start: int = 0) -> int | None:
    """Index of the first `;` at or after `start`, or None."""
    for index in range(start, len(tokens)):
        if tokens[index].kind is TokenKind.DELIMITER:
            return index
    return None


def _locate_block(tokens: Sequence[Token], anchor_text: str) -> int:
    anchor = next(
        (token for token in reversed(tokens) if token.text == anchor_text), None
    )
    if anchor is not None and anchor.position is not None:
        for index, token in enumerate(tokens):
            if (
                token.kind is TokenKind.DELIMITER
                and token.position is not None
                and token.position > anchor.position
            ):
                return index + 1
        return len(tokens)
    delimiter = find_delimiter(tokens)
    return len(tokens) if delimiter is None else delimiter + 1


def locate_conditional_block(tokens: Sequence[Token]) -> int:
    """Index one past the `;` that closes the conditional starting `tokens`.

    Anchors on the last `else` of the stream: the block ends at the first `;`
    after it. Without an `else` the block ends at the first `;`. When no `;`
    follows, the block runs to the end of the stream.
    """
    return _locate_block(tokens, ELSE)


def locate_parenthesis_block(tokens: Sequence[Token]) -> int:
    """Index one past the `;` that closes the bracketed statement starting `tokens`.

    Same rule as `locate_conditional_block`, anchored on the last `)`.
    """
    return _locate_block(tokens, CLOSE_PAREN)


def _strip_delimiter(tokens: Sequence[Token]) -> Sequence[Token]:
    if tokens and tokens[-1].kind is TokenKind.DELIMITER:
        return tokens[:-1]
    return tokens


def _matching_close(tokens: Sequence[Token]) -> int:
    """Index of the `)` closing the `(` at `tokens[0]`; brackets never span a `;`."""
    depth = 0
    for index, token in enumerate(tokens):
        if token.kind is TokenKind.DELIMITER:
            break
        if token.text == OPEN_PAREN:
            depth += 1
        elif token.text == CLOSE_PAREN:
            depth -= 1
            if depth == 0:
                return index
    raise RimSyntaxError(f"missing {CLOSE_PAREN!r} for this {OPEN_PAREN!r}", tokens[0])


class SyntacticalAnalyzer:
    """
    Recursive-descent syntax analyzer for RIM.

    Each production parser receives exactly the token window it is responsible
    for, validates its local shape and returns a `SyntaxNode`. Windows handed to
    productions may end with the statement's `;`, which is not part of the tree.

    Attributes
    ----------
    max_depth : int
        Maximum nesting of statement sequences and sub-expressions.

    Raises
    ------
    RimSyntaxError
        On the first structural defect, or when nesting exceeds `max_depth`.
    LexicalError
        When the input contains lexical errors.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        self.max_depth = max_depth

    def analyze(self, source: Sequence[LexResult]) -> SyntaxNode:
        """Parses a full list of lexical results into a rooted tree."""
        errors = [r for r in source if isinstance(r, LexError)]
        if errors:
            raise LexicalError(errors)
        tokens = [r for r in source if isinstance(r, Token)]
        if not tokens:
            raise RimSyntaxError("source contains no statements")
        try:
            return self.parse_sequence(tokens, SyntaxNode())
        except RecursionError:
            # max_depth set above what the interpreter stack can hold
            raise RimSyntaxError(
                f"expression too deeply nested (limit is {self.max_depth})", tokens[0]
            ) from None

    def _enter(self, depth: int, token: Token | None) -> None:
        if depth > self.max_depth:
            raise RimSyntaxError(
                f"expression too deeply nested (limit is {self.max_depth})", token
            )

    def parse_sequence(
        self, tokens: Sequence[Token], parent: SyntaxNode, depth: int = 0
    ) -> SyntaxNode:
        """Parses consecutive statements, attaching each one to `parent`."""
        self._enter(depth, tokens[0] if tokens else None)
        remaining = tokens
        while remaining:
            delimiter = find_delimiter(remaining)
            statement = remaining if delimiter is None else remaining[:delimiter]
            if not statement:
                raise RimSyntaxError(
                    "empty statement, expected an expression before ';'", remaining[0]
                )
            node_class = classify(statement)
            # A trailing bare expression may omit its terminator
            if delimiter is None and node_class not in (
                NodeClass.OPERATOR,
                NodeClass.PARENTHESIS,
            ):
                raise RimSyntaxError(
                    "statement is not terminated by the delimiter ';'", remaining[0]
                )
            node, consumed = self._dispatch(node_class, remaining, delimiter, depth)
            if consumed < 1:
                raise RimSyntaxError("statement consumed no tokens", remaining[0])
            parent.add_node(node)
            remaining = remaining[consumed:]
        return parent

    def _dispatch(
        self,
        node_class: NodeClass,
        remaining: Sequence[Token],
        delimiter: int | None,
        depth: int,
    ) -> tuple[SyntaxNode, int]:
        """Runs the production for `node_class`; returns the node and tokens consumed."""
        end = len(remaining) if delimiter is None else delimiter + 1
        match node_class:
            case NodeClass.ASSIGN:
                return self.parse_assign(remaining[:end], depth), end
            case NodeClass.OPERATOR:
                return self.parse_operator_expr(remaining[:end], depth), end
            case NodeClass.ATOM:
                return operand_slot(remaining[0]), end
            case NodeClass.CONDITIONAL:
                block_end = locate_conditional_block(remaining)
                return self.parse_conditional(remaining[:block_end], depth), block_end
            case NodeClass.PARENTHESIS:
                block_end = locate_parenthesis_block(remaining)
                return self._parse_bracketed(remaining[:block_end], depth)
            case NodeClass.UNCLASSIFIABLE:
                raise RimSyntaxError(
                    "unrecognized statement, expected an assignment, a conditional, "
                    "or a bracketed or operator expression",
                    remaining[0],
                )
        raise AssertionError(f"Unhandled node class {node_class}")  # pragma: no cover

    def _parse_bracketed(
        self, block: Sequence[Token], depth: int
    ) -> tuple[SyntaxNode, int]:
        """Parses the leading bracket group of `block` and whatever operator follows it."""
        after = _matching_close(block) + 1
        if after < len(block) and block[after].kind is TokenKind.OPERATORS_SIGN:
            delimiter = find_delimiter(block, after)
            end = len(block) if delimiter is None else delimiter + 1
            return self.parse_operator_expr(block[:end], depth), end
        node = self.parse_parenthesis(block[:after], depth)
        if after == len(block):
            return node, after
        if block[after].kind is TokenKind.DELIMITER:
            return node, after + 1
        raise RimSyntaxError(
            f"unexpected {block[after].text!r} after {CLOSE_PAREN!r}, "
            "expected ';' or an arithmetic operator",
            block[after],
        )

    def _parse_value(self, tokens: Sequence[Token], depth: int, expected: str) -> SyntaxNode:
        """Parses an operand position: an atom, an operator or a bracketed expression."""
        self._enter(depth, tokens[0])
        match classify(tokens):
            case NodeClass.ATOM:
                return operand_slot(tokens[0])
            case NodeClass.OPERATOR:
                return self.parse_operator_expr(tokens, depth)
            case NodeClass.PARENTHESIS:
                node, _ = self._parse_bracketed(tokens, depth)
                return node
            case _:
                raise RimSyntaxError(expected, tokens[0])

    def parse_assign(self, tokens: Sequence[Token], depth: int = 0) -> SyntaxNode:
        """`identifier := value` → `[slot(identifier), :=, value]`."""
        body = _strip_delimiter(tokens)
        if not body or body[0].kind is not TokenKind.IDENTIFIER:
            raise RimSyntaxError(
                "assignment must start with an identifier",
                body[0] if body else (tokens[0] if tokens else None),
            )
        if len(body) < 2 or body[1].kind is not TokenKind.ASSIGN_SIGN:
            found = body[1] if len(body) > 1 else body[0]
            raise RimSyntaxError(f"expected ':=' instead of {found.text!r}", found)
        value = body[2:]
        if not value:
            missing = tokens[2] if len(tokens) > 2 else body[1]
            raise RimSyntaxError("missing value after ':='", missing)
        return branch(
            operand_slot(body[0]),
            leaf(body[1]),
            self._parse_value(
                value,
                depth + 1,
                "only a variable, a constant, or a bracketed or operator "
                "expression may be assigned",
            ),
        )

    def parse_comparison(
        self, tokens: Sequence[Token], anchor: Token | None = None
    ) -> SyntaxNode:
        """`operand <sign> operand` → `[slot(left), sign, slot(right)]`.

        Chained or compound comparisons are rejected. `anchor` locates the
        error when `tokens` is empty.
        """
        if len(tokens) != 3:
            raise RimSyntaxError(
                "comparison must have the form <operand> <comparison sign> <operand>",
                tokens[0] if tokens else anchor,
            )
        left, sign, right = tokens
        for operand in (left, right):
            if operand.kind not in OPERAND_KINDS:
                raise RimSyntaxError(
                    f"only identifiers or constants can be compared, got {operand.text!r}",
                    operand,
                )
        if sign.kind is not TokenKind.COMPARISON_SIGN:
            raise RimSyntaxError(
                f"expected a comparison sign instead of {sign.text!r}", sign
            )
        return branch(operand_slot(left), leaf(sign), operand_slot(right))

    def parse_operator_expr(self, tokens: Sequence[Token], depth: int = 0) -> SyntaxNode:
        """`operand <op> value` → `[left, op, value]`, one operation per call."""
        body = _strip_delimiter(tokens)
        if not body:
            raise RimSyntaxError(
                "empty operator expression", tokens[0] if tokens else None
            )
        first = body[0]
        if first.kind is TokenKind.PARENTHESIS_OPEN:
            op_index = _matching_close(body) + 1
            left = self.parse_parenthesis(body[:op_index], depth + 1)
        elif first.kind in OPERAND_KINDS:
            op_index = 1
            left = operand_slot(first)
        else:
            raise RimSyntaxError(
                "operator expression must start with an identifier, a constant "
                f"or {OPEN_PAREN!r}, got {first.text!r}",
                first,
            )
        if op_index >= len(body):
            raise RimSyntaxError(
                "expected an arithmetic operator after the operand", body[-1]
            )
        sign = body[op_index]
        if sign.kind is not TokenKind.OPERATORS_SIGN:
            raise RimSyntaxError(
                f"expected an arithmetic operator instead of {sign.text!r}", sign
            )
        right = body[op_index + 1 :]
        if not right:
            missing = tokens[op_index + 1] if len(tokens) > op_index + 1 else sign
            raise RimSyntaxError(f"missing right operand after {sign.text!r}", missing)
        return branch(
            left,
            leaf(sign),
            self._parse_value(
                right,
                depth + 1,
                "right operand must be a variable, a constant, or a bracketed "
                "or operator expression",
            ),
        )

    def parse_parenthesis(self, tokens: Sequence[Token], depth: int = 0) -> SyntaxNode:
        """`( value )` → `[(, value, )]`."""
        body = _strip_delimiter(tokens)
        if not body or body[0].text != OPEN_PAREN:
            raise RimSyntaxError(
                f"bracketed expression must start with {OPEN_PAREN!r}",
                body[0] if body else None,
            )
        close = _matching_close(body)
        if close != len(body) - 1:
            extra = body[close + 1]
            raise RimSyntaxError(
                f"unexpected {extra.text!r} after {CLOSE_PAREN!r}", extra
            )
        inner = body[1:close]
        if not inner:
            raise RimSyntaxError("empty brackets, expected an expression", body[close])
        return branch(
            leaf(body[0]),
            self._parse_value(
                inner,
                depth + 1,
                "brackets may only hold a variable, a constant, or a bracketed "
                "or operator expression",
            ),
            leaf(body[close]),
        )

    def parse_conditional(self, tokens: Sequence[Token], depth: int = 0) -> SyntaxNode:
        """`if <comparison> then <statements> [else <statements>]`.

        Result: `[if, comparison, then, *then-statements]`, followed by
        `[else, *else-statements]` when an `else` is present.
        """
        if not tokens or tokens[0].text != IF:
            raise RimSyntaxError(
                f"conditional must start with {IF!r}", tokens[0] if tokens else None
            )
        if_token = tokens[0]
        then_index = next((i for i, t in enumerate(tokens) if t.text == THEN), None)
        if then_index is None:
            raise RimSyntaxError(
                f"the predicate must be followed by the keyword {THEN!r}", if_token
            )

        node = SyntaxNode()
        node.add_node(leaf(if_token))
        node.add_node(self.parse_comparison(tokens[1:then_index], tokens[then_index]))
        node.add_node(leaf(tokens[then_index]))

        else_index = next(
            (
                i
                for i in range(len(tokens) - 1, then_index, -1)
                if tokens[i].text == ELSE
            ),
            None,
        )
        then_end = len(tokens) if else_index is None else else_index
        then_branch = tokens[then_index + 1 : then_end]
        if not then_branch:
            raise RimSyntaxError(f"empty {THEN!r} branch", tokens[then_index])
        self.parse_sequence(then_branch, node, depth + 1)

        if else_index is not None:
            node.add_node(leaf(tokens[else_index]))
            else_branch = tokens[else_index + 1 :]
            if not else_branch:
                raise RimSyntaxError(f"empty {ELSE!r} branch", tokens[else_index])
            self.parse_sequence(else_branch, node, depth + 1)
        return node


def analyze(source: Sequence[LexResult], max_depth: int = DEFAULT_MAX_DEPTH) -> SyntaxNode:
    """Parses lexical results into a tree with a fresh analyzer."""
    return SyntacticalAnalyzer(max_depth).analyze(source)


def parse_source(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> SyntaxNode:
    """Tokenizes and parses RIM source text."""
    return analyze(tokenize(source), max_depth)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "LexicalError",
    "NodeClass",
    "RimError",
    "RimSyntaxError",
    "SyntacticalAnalyzer",
    "analyze",
    "classify",
    "find_delimiter",
    "locate_conditional_block",
    "locate_parenthesis_block",
    "parse_source",
]
