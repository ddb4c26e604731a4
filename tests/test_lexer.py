import pytest

from vizalg.errors import LexError
from vizalg.lexer import Lexer, tokenize


def types(source):
    return [tok.type for tok in tokenize(source)]


def test_keywords_are_case_insensitive():
    toks = tokenize("ALGORITMO Inicio FimAlgoritmo")
    assert [t.type for t in toks] == ["ALGORITMO", "INICIO", "FIMALGORITMO", "EOF"]
    assert toks[1].value == "inicio"


def test_identifiers_are_lowercased():
    toks = tokenize("valorUm _tmp x1")
    assert [(t.type, t.value) for t in toks[:-1]] == [
        ("IDENT", "valorum"),
        ("IDENT", "_tmp"),
        ("IDENT", "x1"),
    ]


def test_boolean_literals():
    toks = tokenize("verdadeiro FALSO")
    assert [(t.type, t.value) for t in toks[:-1]] == [("BOOL", True), ("BOOL", False)]


def test_numbers():
    toks = tokenize("42 3.14")
    assert toks[0].value == 42 and isinstance(toks[0].value, int)
    assert toks[1].value == 3.14 and isinstance(toks[1].value, float)


def test_trailing_dot_is_not_part_of_number():
    # "1." has no digit after the dot, so the number ends at "1"
    with pytest.raises(LexError) as exc:
        tokenize("1.")
    assert exc.value.message == "unexpected character '.'"
    assert tokenize("1")[0].value == 1


def test_two_char_operators_before_single():
    assert types("<- <= >= <> < > =") == [
        "ASSIGN", "LTE", "GTE", "NOTEQ", "LT", "GT", "EQ", "EOF",
    ]


def test_single_char_operators():
    assert types("+ - * / ( ) : ,") == [
        "PLUS", "MINUS", "STAR", "SLASH", "LPAREN", "RPAREN", "COLON", "COMMA", "EOF",
    ]


def test_word_operators():
    assert types("e ou nao div mod") == ["AND", "OR", "NOT", "DIV", "MOD", "EOF"]


def test_line_comment_and_block_comment():
    source = "a // ignored <- \"\nb { spans\nlines } c"
    toks = tokenize(source)
    assert [t.value for t in toks[:-1]] == ["a", "b", "c"]
    assert toks[2].line == 3


def test_unclosed_block_comment_runs_to_end():
    assert types("a { never closed") == ["IDENT", "EOF"]


def test_line_and_column_tracking():
    toks = tokenize("x <- 1\n  y")
    assert (toks[0].line, toks[0].column) == (1, 1)
    assert (toks[1].line, toks[1].column) == (1, 3)
    assert (toks[3].line, toks[3].column) == (2, 3)


def test_string_literal_keeps_case():
    tok = tokenize('"Ola Mundo"')[0]
    assert tok.type == "STRING"
    assert tok.value == "Ola Mundo"


def test_unterminated_string_at_newline():
    with pytest.raises(LexError) as exc:
        tokenize('escreva("abc\n")')
    assert exc.value.message == "unterminated string"
    assert exc.value.line == 1


def test_unterminated_string_at_end_of_input():
    with pytest.raises(LexError) as exc:
        tokenize('"abc')
    assert exc.value.message == "unterminated string"
    assert str(exc.value) == "Lex error: unterminated string at line 1, col 1"


def test_unexpected_character_position():
    with pytest.raises(LexError) as exc:
        tokenize("x <- 1\n  y # 2")
    assert exc.value.message == "unexpected character '#'"
    assert (exc.value.line, exc.value.column) == (2, 5)


def test_single_eof_at_end():
    toks = Lexer("").tokenize()
    assert len(toks) == 1
    assert toks[0].type == "EOF"


def test_integer_literal_must_fit_64_bits():
    assert tokenize("9223372036854775807")[0].value == 2 ** 63 - 1
    with pytest.raises(LexError) as exc:
        tokenize("x <- 9223372036854775808")
    assert exc.value.message == "integer literal too large"
    assert exc.value.column == 6
    with pytest.raises(LexError):
        tokenize("1" * 5000)
