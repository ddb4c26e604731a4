import pytest

from vizalg.ast_nodes import (
    Assign, BinaryOp, Call, For, Function, If, Identifier, NumberLiteral,
    Procedure, Read, Repeat, Return, UnaryOp, VarDeclaration, While, Write,
)
from vizalg.cli import ast_to_dict
from vizalg.errors import ParseError
from vizalg.lexer import tokenize
from vizalg.parser import Parser, parse


def parse_code(source):
    return parse(tokenize(source))


def parse_body(body, decls=""):
    return parse_code(f'algoritmo "t"\n{decls}\ninicio\n{body}\nfimalgoritmo\n').body


def parse_expr(text):
    (stmt,) = parse_body(f"x <- {text}", "var x: inteiro")
    return stmt.value


def test_minimal_program():
    program = parse_code('algoritmo "vazio"\ninicio\nfimalgoritmo')
    assert program.name == "vazio"
    assert program.declarations == []
    assert program.body == []


def test_var_block_multi_name():
    program = parse_code('algoritmo "t"\nvar a, b: inteiro\n  nome: caractere\ninicio\nfimalgoritmo')
    first, second = program.declarations
    assert isinstance(first, VarDeclaration)
    assert first.names == ["a", "b"]
    assert first.var_type == "inteiro"
    assert second.names == ["nome"]
    assert second.var_type == "caractere"
    assert second.line == 3


def test_statements_carry_lines():
    body = parse_body("x <- 1\nescreval(x)\nleia(x)", "var x: inteiro")
    assert [type(s) for s in body] == [Assign, Write, Read]
    assert [s.line for s in body] == [4, 5, 6]
    assert body[1].newline is True


def test_escreva_without_newline():
    (stmt,) = parse_body('escreva("a", 1)')
    assert stmt.newline is False
    assert len(stmt.args) == 2


def test_precedence():
    expr = parse_expr("1 + 2 * 3")
    assert isinstance(expr, BinaryOp) and expr.op == "+"
    assert isinstance(expr.right, BinaryOp) and expr.right.op == "*"


def test_left_associative():
    expr = parse_expr("10 - 4 - 3")
    assert expr.op == "-"
    assert isinstance(expr.left, BinaryOp)
    assert expr.right.value == 3


def test_logical_precedence():
    expr = parse_expr("a ou b e c = d")
    assert expr.op == "ou"
    assert expr.right.op == "e"
    assert expr.right.right.op == "="


def test_unary_stacks():
    expr = parse_expr("nao nao x")
    assert isinstance(expr, UnaryOp) and expr.op == "nao"
    assert isinstance(expr.operand, UnaryOp)
    assert isinstance(expr.operand.operand, Identifier)


def test_div_and_mod_are_multiplicative():
    expr = parse_expr("7 + 8 div 2 mod 3")
    assert expr.op == "+"
    assert expr.right.op == "mod"
    assert expr.right.left.op == "div"


def test_parenthesized_and_call():
    expr = parse_expr("(1 + 2) * quad(3)")
    assert expr.op == "*"
    assert expr.left.op == "+"
    assert isinstance(expr.right, Call)
    assert expr.right.name == "quad"


def test_conversion_calls_named_like_types():
    expr = parse_expr('inteiro("12") + real(3)')
    assert expr.left.name == "inteiro"
    assert expr.right.name == "real"


def test_if_else():
    (stmt,) = parse_body("se x > 1 entao\n x <- 1\nsenao\n x <- 2\n x <- 3\nfimse", "var x: inteiro")
    assert isinstance(stmt, If)
    assert len(stmt.then_body) == 1
    assert len(stmt.else_body) == 2


def test_for_with_step():
    (stmt,) = parse_body("para i de 10 ate 1 passo -2 faca\nfimpara", "var i: inteiro")
    assert isinstance(stmt, For)
    assert stmt.var_name == "i"
    assert isinstance(stmt.step, UnaryOp)
    assert isinstance(stmt.start, NumberLiteral)


def test_for_without_step():
    (stmt,) = parse_body("para i de 1 ate 3 faca\nfimpara", "var i: inteiro")
    assert stmt.step is None


def test_passo_is_still_a_variable_name():
    (stmt,) = parse_body("passo <- 2", "var passo: inteiro")
    assert isinstance(stmt, Assign)
    assert stmt.name == "passo"


def test_while_and_repeat():
    body = parse_body("enquanto x < 3 faca\n x <- x + 1\nfimenquanto\nrepita\n x <- x - 1\nate x = 0", "var x: inteiro")
    assert isinstance(body[0], While)
    assert isinstance(body[1], Repeat)
    assert body[1].condition.op == "="


def test_procedure_and_function():
    program = parse_code(
        'algoritmo "t"\n'
        "procedimento ola\n"
        "inicio\n"
        ' escreval("ola")\n'
        "fimprocedimento\n"
        "funcao soma(a, b: inteiro, c: real): real\n"
        "var r: real\n"
        "inicio\n"
        " retorne a + b + c\n"
        "fimfuncao\n"
        "inicio\n"
        " ola()\n"
        "fimalgoritmo\n"
    )
    proc, func = program.declarations
    assert isinstance(proc, Procedure)
    assert proc.params == []
    assert isinstance(func, Function)
    assert [p.names for p in func.params] == [["a", "b"], ["c"]]
    assert func.return_type == "real"
    assert func.local_vars[0].names == ["r"]
    assert isinstance(func.body[0], Return)
    assert isinstance(program.body[0], Call)


def test_subprograms_after_fimalgoritmo():
    program = parse_code(
        'algoritmo "t"\ninicio\nfimalgoritmo\n'
        "funcao um: inteiro\ninicio\nretorne 1\nfimfuncao\n"
    )
    assert program.declarations[0].name == "um"


def test_top_level_retorne_is_rejected():
    with pytest.raises(ParseError) as exc:
        parse_body("retorne 1")
    assert "retorne" in exc.value.message


def test_missing_fimalgoritmo():
    with pytest.raises(ParseError) as exc:
        parse_code('algoritmo "t"\ninicio\nescreval(1)\n')
    assert exc.value.message == "expected 'fimalgoritmo', got 'end of input'"


def test_missing_entao_reports_position():
    with pytest.raises(ParseError) as exc:
        parse_body("se 1 > 0\nfimse")
    assert exc.value.message.startswith("expected 'entao'")
    assert exc.value.line == 5
    assert exc.value.column == 1


def test_invalid_type():
    with pytest.raises(ParseError) as exc:
        parse_code('algoritmo "t"\nvar x: texto\ninicio\nfimalgoritmo')
    assert "invalid type 'texto'" in exc.value.message


def test_garbage_after_fimalgoritmo():
    with pytest.raises(ParseError):
        parse_code('algoritmo "t"\ninicio\nfimalgoritmo\nx <- 1')


def test_parser_requires_eof():
    with pytest.raises(ValueError):
        Parser(tokenize("x")[:-1])


def test_parse_is_deterministic():
    source = (
        'algoritmo "t"\nvar i, s: inteiro\ninicio\n'
        "para i de 1 ate 3 faca\n s <- s + i * 2\nfimpara\n"
        "se s > 3 e nao (s = 4) entao\n escreval(s)\nfimse\nfimalgoritmo\n"
    )
    assert ast_to_dict(parse_code(source)) == ast_to_dict(parse_code(source))
