import pytest
from hypothesis import given
from hypothesis import strategies as st

from rim.rim_constants import TokenKind
from rim.rim_lexer import CharacterStream, LexError, Lexer, Token, roman_to_int, tokenize


def kinds(source: str) -> list[TokenKind]:
    return [r.kind for r in tokenize(source) if isinstance(r, Token)]


def test_symbol_tokens() -> None:
    code = ":= < > = <= >= <> + - * / ( ) ;"
    expected = [
        TokenKind.ASSIGN_SIGN,
        *[TokenKind.COMPARISON_SIGN] * 6,
        *[TokenKind.OPERATORS_SIGN] * 4,
        TokenKind.PARENTHESIS_OPEN,
        TokenKind.PARENTHESIS_CLOSE,
        TokenKind.DELIMITER,
    ]
    assert kinds(code) == expected


def test_longest_match_without_spaces() -> None:
    results = tokenize("a:=b<=c")
    assert [r.text for r in results] == ["a", ":=", "b", "<=", "c"]


def test_keywords_are_conditional_operators() -> None:
    results = tokenize("if then else")
    assert all(r.kind is TokenKind.CONDITIONAL_OPERATOR for r in results)  # type: ignore[union-attr]


def test_keywords_are_case_sensitive() -> None:
    assert kinds("If") == [TokenKind.IDENTIFIER]


def test_roman_constants() -> None:
    for word in ["I", "III", "XIV", "MCMXC", "VVV"]:
        assert kinds(word) == [TokenKind.CONSTANT]


def test_mixed_words_are_identifiers() -> None:
    for word in ["a", "x1", "Iv", "_tmp", "VIa"]:
        assert kinds(word) == [TokenKind.IDENTIFIER]


def test_positions_and_locations() -> None:
    results = tokenize("a := III;\nb := a;")
    a, assign, const, delim, b = results[:5]
    assert (a.position, a.line, a.col) == (0, 1, 1)
    assert (assign.position, assign.col) == (2, 3)
    assert (const.position, const.col) == (5, 6)
    assert delim.position == 8
    assert (b.position, b.line, b.col) == (10, 2, 1)
    assert b.location() == "line 2, col 1"


def test_comments_and_whitespace_skipped() -> None:
    results = tokenize("  # a comment\n\ta := b; # trailing\n")
    assert [r.text for r in results] == ["a", ":=", "b", ";"]


def test_unknown_character_is_lex_error() -> None:
    results = tokenize("a := b ~ c;")
    errors = [r for r in results if isinstance(r, LexError)]
    assert len(errors) == 1
    assert errors[0].position == 7
    assert "'~'" in errors[0].message
    assert str(errors[0]).startswith("line 1, col 8:")


def test_lone_colon_is_lex_error() -> None:
    results = tokenize("a : b;")
    assert isinstance(results[1], LexError)
    assert "':'" in results[1].message


def test_decimal_constant_is_single_lex_error() -> None:
    results = tokenize("a := 123;")
    assert isinstance(results[2], LexError)
    assert "123" in results[2].message
    assert isinstance(results[3], Token)


def test_all_errors_collected() -> None:
    results = tokenize("$ a := 1; @")
    assert sum(isinstance(r, LexError) for r in results) == 3


def test_token_is_immutable() -> None:
    tok = Token(TokenKind.IDENTIFIER, "a", 0, 1, 1)
    with pytest.raises(AttributeError):
        tok.text = "b"  # type: ignore[misc]
    with pytest.raises(AttributeError):
        del tok.kind


def test_token_repr_eq_hash() -> None:
    t1 = Token(TokenKind.CONSTANT, "V", 3, 1, 4)
    t2 = Token(TokenKind.CONSTANT, "V", 3, 1, 4)
    t3 = Token(TokenKind.CONSTANT, "V")

    assert repr(t1) == "Token(CONSTANT, V)"
    assert t1 == t2
    assert t1 != t3
    assert len({t1, t2, t3}) == 2


def test_synthetic_token_has_no_location() -> None:
    assert Token(TokenKind.DELIMITER, ";").location() == ""


def test_empty_source() -> None:
    assert tokenize("") == []
    assert Lexer(CharacterStream("   ")).next_token() is None


def test_character_stream_methods() -> None:
    stream = CharacterStream("a\nb")
    assert stream.peek() == "a"
    assert stream.next() == "a"
    assert stream.next() == "\n"
    assert (stream.line, stream.column) == (2, 1)
    assert stream.peek(5) == ""
    stream.next()
    assert stream.end_of_file()
    with pytest.raises(Exception, match="CharacterStreamError"):
        stream.next()


@pytest.mark.parametrize(
    "numeral,value",
    [("I", 1), ("IV", 4), ("IX", 9), ("XIV", 14), ("MCMXC", 1990), ("VVV", 15)],
)  # type: ignore[misc]
def test_roman_to_int(numeral: str, value: int) -> None:
    assert roman_to_int(numeral) == value


def test_roman_to_int_rejects_non_roman() -> None:
    with pytest.raises(ValueError):
        roman_to_int("")
    with pytest.raises(ValueError):
        roman_to_int("IIa")


@given(st.text(alphabet=st.characters(blacklist_categories=["Cs"]), max_size=80))  # type: ignore[misc]
def test_lexer_never_raises(text: str) -> None:
    results = tokenize(text)
    positions = [r.position for r in results]
    assert positions == sorted(positions)
    assert all(isinstance(r, (Token, LexError)) for r in results)
