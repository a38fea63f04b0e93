"""
Defines the concrete syntax tree node used by the RIM syntax analyzer.

Classes:
    SyntaxNode:
        An ordered tree node that optionally carries a token and optionally
        carries children. Leaves and branches are distinguished structurally:
        a node with children is a branch, a childless node with a token is a leaf.

    NodeDict:
        TypedDict representation for serializing SyntaxNode instances to plain
        Python dictionaries, suitable for JSON output or debugging.

Constructors:
    leaf(token):         an atomic slot (operator sign, assignment sign, keyword, bracket)
    operand_slot(token): an operand position, a one-child branch around the token's leaf
    branch(children):    a composite node labeled by nothing

Functions:
    render_tree(node): indented text outline of a tree.

A node with neither token nor children only exists as an empty accumulator
(e.g. a fresh root before the first statement is attached) and is never
returned by the analyzer.
"""

from collections.abc import Iterator
from typing import Any, TypedDict

from rim.rim_constants import TokenKind
from rim.rim_lexer import Token, roman_to_int


class TokenDict(TypedDict):
    kind: str
    text: str
    position: int | None
    line: int
    col: int


class NodeDict(TypedDict):
    token: TokenDict | None
    children: list["NodeDict"]


class SyntaxNode:
    """
    A node of the RIM concrete syntax tree.

    Args:
        token (Token, optional): The token labeling this node.
        children (list[SyntaxNode], optional): Ordered child nodes.

    Attributes:
        token (Token | None): Label token; for a leaf, the source token it stands for.
        children (list[SyntaxNode]): Ordered children, appended to during parsing only.
    """

    def __init__(
        self, token: Token | None = None, children: list["SyntaxNode"] | None = None
    ):
        self.token = token
        self.children: list["SyntaxNode"] = children or []

    def add_node(self, node: "SyntaxNode") -> "SyntaxNode":
        """Appends `node` as the last child and returns it."""
        self.children.append(node)
        return node

    @property
    def is_leaf(self) -> bool:
        return not self.children and self.token is not None

    @property
    def is_branch(self) -> bool:
        return bool(self.children)

    def walk(self, depth: int = 0) -> Iterator[tuple[int, "SyntaxNode"]]:
        """Yields `(depth, node)` pairs in pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)

    def leaves(self) -> list[Token]:
        """The tokens of all leaves, left to right."""
        return [node.token for _, node in self.walk() if node.is_leaf]  # type: ignore[misc]

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"leaf({self.token.text!r})"  # type: ignore[union-attr]
        label = f"{self.token.text!r}, " if self.token is not None else ""
        return f"SyntaxNode({label}[{', '.join(repr(c) for c in self.children)}])"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SyntaxNode):
            return False
        return self.token == other.token and self.children == other.children

    def to_dict(self) -> NodeDict:
        tok: TokenDict | None = None
        if self.token is not None:
            tok = {
                "kind": self.token.kind.value,
                "text": self.token.text,
                "position": self.token.position,
                "line": self.token.line,
                "col": self.token.col,
            }
        return {"token": tok, "children": [c.to_dict() for c in self.children]}


def leaf(token: Token) -> SyntaxNode:
    """A childless node standing for exactly one atomic token."""
    return SyntaxNode(token=token)


def operand_slot(token: Token) -> SyntaxNode:
    """An operand position: a one-child branch wrapping the token's leaf."""
    return SyntaxNode(children=[leaf(token)])


def branch(*children: SyntaxNode) -> SyntaxNode:
    """An unlabeled composite node over `children`."""
    return SyntaxNode(children=list(children))


def _label(node: SyntaxNode) -> str:
    if node.token is None:
        return "E"
    if node.token.kind is TokenKind.CONSTANT:
        try:
            return f"{node.token.text} ({roman_to_int(node.token.text)})"
        except ValueError:
            return node.token.text
    return node.token.text


def render_tree(node: SyntaxNode, indent: str = "  ") -> str:
    """Renders `node` as an indented outline, one node per line.

    Unlabeled branches print as `E`; Roman constants are annotated with their
    integer value; constants that are not Roman numerals print as plain text.
    """
    return "\n".join(f"{indent * depth}{_label(n)}" for depth, n in node.walk())


__all__ = [
    "NodeDict",
    "SyntaxNode",
    "TokenDict",
    "branch",
    "leaf",
    "operand_slot",
    "render_tree",
]
