from vizalg.ast_nodes import (
    Program, VarDeclaration, Assign, BinaryOp, UnaryOp, Identifier,
    NumberLiteral, StringLiteral, BooleanLiteral,
    Write, Read, If, For, While, Repeat,
    Procedure, Function, Return, Call,
)
from vizalg.errors import ParseError
from vizalg.lexer import KEYWORDS, TYPE_TOKENS, Token


# How token types are named in "expected ..." messages.
TOKEN_NAMES = {kind: f"'{word}'" for word, kind in KEYWORDS.items()}
TOKEN_NAMES.update({
    "IDENT": "identifier",
    "NUMBER": "number",
    "STRING": "string",
    "BOOL": "logical literal",
    "ASSIGN": "'<-'",
    "LPAREN": "'('",
    "RPAREN": "')'",
    "COLON": "':'",
    "COMMA": "','",
    "EOF": "end of input",
})

STATEMENT_STARTS = (
    "IDENT", "ESCREVA", "ESCREVAL", "LEIA", "SE", "PARA", "ENQUANTO", "REPITA", "RETORNE",
)


class Parser:
    def __init__(self, tokens: list[Token]):
        if not tokens or tokens[-1].type != "EOF":
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.pos = 0
        self.subprogram_depth = 0

    @property
    def current_token(self) -> Token:
        return self.tokens[self.pos]

    @property
    def next_token(self) -> Token:
        return self.tokens[min(self.pos + 1, len(self.tokens) - 1)]

    # move to next token, but only if it matches what we expect
    def eat(self, token_type, what=None):
        tok = self.current_token
        if tok.type != token_type:
            expected = what or TOKEN_NAMES.get(token_type, token_type)
            self.error_here(f"expected {expected}, got '{tok.text()}'")
        if tok.type != "EOF":
            self.pos += 1
        return tok

    def error_here(self, message):
        tok = self.current_token
        raise ParseError(message, tok.line, tok.column)

    def at(self, *token_types):
        return self.current_token.type in token_types

    def at_ident_value(self, expected_value):
        return self.current_token.type == "IDENT" and self.current_token.value == expected_value

    # ---------- TOP LEVEL ----------
    def parse(self):
        self.eat("ALGORITMO")
        name = self.eat("STRING", "algorithm name in double quotes").value

        declarations = []
        while self.at("VAR", "PROCEDIMENTO", "FUNCAO"):
            if self.at("VAR"):
                declarations.extend(self.var_block())
            else:
                declarations.append(self.subprogram())

        self.eat("INICIO")
        body = self.statements("FIMALGORITMO")
        self.eat("FIMALGORITMO")

        # subprograms may also be written after fimalgoritmo
        while self.at("PROCEDIMENTO", "FUNCAO"):
            declarations.append(self.subprogram())

        if not self.at("EOF"):
            self.error_here(f"unexpected '{self.current_token.text()}' after 'fimalgoritmo'")

        return Program(name, declarations, body)

    # ---------- DECLARATIONS ----------
    def var_block(self):
        self.eat("VAR")
        declarations = []
        while self.at("IDENT"):
            declarations.append(self.var_declaration())
        return declarations

    def var_declaration(self):
        tok = self.current_token
        names = [self.eat("IDENT", "variable name").value]
        while self.at("COMMA"):
            self.eat("COMMA")
            names.append(self.eat("IDENT", "variable name").value)

        self.eat("COLON", "':' after variable name(s)")
        node = VarDeclaration(names, self.type_name())
        node.line = tok.line
        return node

    def type_name(self):
        tok = self.current_token
        var_type = TYPE_TOKENS.get(tok.type)
        if var_type is None:
            self.error_here(f"invalid type '{tok.text()}', expected inteiro, real, caractere or logico")
        self.eat(tok.type)
        return var_type

    # ---------- SUBPROGRAMS ----------
    def subprogram(self):
        if self.at("PROCEDIMENTO"):
            return self.procedure()
        return self.function()

    def procedure(self):
        tok = self.eat("PROCEDIMENTO")
        name = self.eat("IDENT", "procedure name").value
        params = self.params()
        local_vars = self.var_block() if self.at("VAR") else []

        self.eat("INICIO")
        self.subprogram_depth += 1
        body = self.statements("FIMPROCEDIMENTO")
        self.subprogram_depth -= 1
        self.eat("FIMPROCEDIMENTO")

        node = Procedure(name, params, local_vars, body)
        node.line = tok.line
        return node

    def function(self):
        tok = self.eat("FUNCAO")
        name = self.eat("IDENT", "function name").value
        params = self.params()
        self.eat("COLON", "':' before the return type")
        return_type = self.type_name()
        local_vars = self.var_block() if self.at("VAR") else []

        self.eat("INICIO")
        self.subprogram_depth += 1
        body = self.statements("FIMFUNCAO")
        self.subprogram_depth -= 1
        self.eat("FIMFUNCAO")

        node = Function(name, params, local_vars, return_type, body)
        node.line = tok.line
        return node

    def params(self):
        # parentheses are optional for subprograms without parameters
        if not self.at("LPAREN"):
            return []
        self.eat("LPAREN")
        params = []
        if not self.at("RPAREN"):
            params.append(self.var_declaration())
            while self.at("COMMA"):
                self.eat("COMMA")
                params.append(self.var_declaration())
        self.eat("RPAREN", "')' after parameters")
        return params

    # ---------- STATEMENTS ----------
    def statements(self, *stop_at):
        statements = []
        while not self.at(*stop_at, "EOF"):
            statements.append(self.statement())
        return statements

    def statement(self):
        tok = self.current_token

        if tok.type == "IDENT":
            return self.assign_or_call()
        if tok.type in ("ESCREVA", "ESCREVAL"):
            return self.write_statement()
        if tok.type == "LEIA":
            return self.read_statement()
        if tok.type == "SE":
            return self.if_statement()
        if tok.type == "PARA":
            return self.for_statement()
        if tok.type == "ENQUANTO":
            return self.while_statement()
        if tok.type == "REPITA":
            return self.repeat_statement()
        if tok.type == "RETORNE":
            if self.subprogram_depth == 0:
                self.error_here("'retorne' used outside of a procedure or function")
            return self.return_statement()

        self.error_here(f"unexpected '{tok.text()}', expected a command")

    def assign_or_call(self):
        name_token = self.eat("IDENT")

        # procedure call: name(args)
        if self.at("LPAREN"):
            node = Call(name_token.value, self.call_args())
            node.line = name_token.line
            return node

        self.eat("ASSIGN", f"'<-' after '{name_token.value}'")
        node = Assign(name_token.value, self.expr())
        node.line = name_token.line
        return node

    def call_args(self):
        self.eat("LPAREN")
        args = []
        if not self.at("RPAREN"):
            args.append(self.expr())
            while self.at("COMMA"):
                self.eat("COMMA")
                args.append(self.expr())
        self.eat("RPAREN", "')' after arguments")
        return args

    def write_statement(self):
        tok = self.current_token
        self.eat(tok.type)
        if not self.at("LPAREN"):
            self.error_here(f"expected '(' after '{tok.value}'")
        node = Write(self.call_args(), newline=(tok.type == "ESCREVAL"))
        node.line = tok.line
        return node

    def read_statement(self):
        tok = self.eat("LEIA")
        self.eat("LPAREN", "'(' after 'leia'")
        name = self.eat("IDENT", "variable name").value
        self.eat("RPAREN")
        node = Read(name)
        node.line = tok.line
        return node

    def if_statement(self):
        # se <expr> entao ... [senao ...] fimse
        tok = self.eat("SE")
        condition = self.expr()
        self.eat("ENTAO", "'entao' after the condition")
        then_body = self.statements("SENAO", "FIMSE")

        else_body = []
        if self.at("SENAO"):
            self.eat("SENAO")
            else_body = self.statements("FIMSE")

        self.eat("FIMSE")
        node = If(condition, then_body, else_body)
        node.line = tok.line
        return node

    def for_statement(self):
        # para <var> de <expr> ate <expr> [passo <expr>] faca ... fimpara
        tok = self.eat("PARA")
        var_name = self.eat("IDENT", "loop variable name").value
        self.eat("DE", "'de' after the loop variable")
        start = self.expr()
        self.eat("ATE", "'ate' after the initial value")
        end = self.expr()

        # passo is a soft keyword: it only means something here
        step = None
        if self.at_ident_value("passo"):
            self.eat("IDENT")
            step = self.expr()

        self.eat("FACA")
        body = self.statements("FIMPARA")
        self.eat("FIMPARA")

        node = For(var_name, start, end, step, body)
        node.line = tok.line
        return node

    def while_statement(self):
        tok = self.eat("ENQUANTO")
        condition = self.expr()
        self.eat("FACA", "'faca' after the condition")
        body = self.statements("FIMENQUANTO")
        self.eat("FIMENQUANTO")
        node = While(condition, body)
        node.line = tok.line
        return node

    def repeat_statement(self):
        tok = self.eat("REPITA")
        body = self.statements("ATE")
        self.eat("ATE", "'ate' closing 'repita'")
        node = Repeat(body, self.expr())
        node.line = tok.line
        return node

    def return_statement(self):
        tok = self.eat("RETORNE")
        node = Return(self.expr())
        node.line = tok.line
        return node

    # ---------- EXPRESSIONS ----------
    # expr -> or_expr
    def expr(self):
        return self.or_expr()

    # or_expr -> and_expr (ou and_expr)*
    def or_expr(self):
        return self.binary_level(self.and_expr, "OR")

    # and_expr -> equality (e equality)*
    def and_expr(self):
        return self.binary_level(self.equality, "AND")

    # equality -> comparison ((= | <>) comparison)*
    def equality(self):
        return self.binary_level(self.comparison, "EQ", "NOTEQ")

    # comparison -> term ((< | > | <= | >=) term)*
    def comparison(self):
        return self.binary_level(self.term, "LT", "GT", "LTE", "GTE")

    # term -> factor ((+ | -) factor)*
    def term(self):
        return self.binary_level(self.factor, "PLUS", "MINUS")

    # factor -> unary ((* | / | div | mod) unary)*
    def factor(self):
        return self.binary_level(self.unary, "STAR", "SLASH", "DIV", "MOD")

    def binary_level(self, operand, *op_types):
        node = operand()
        while self.at(*op_types):
            op_token = self.eat(self.current_token.type)
            right = operand()
            node = BinaryOp(op_token.value, node, right)
            node.line = op_token.line
        return node

    # unary -> (nao | -) unary | primary
    def unary(self):
        if self.at("NOT", "MINUS"):
            tok = self.eat(self.current_token.type)
            node = UnaryOp(tok.value, self.unary())
            node.line = tok.line
            return node
        return self.primary()

    # primary -> NUMBER | STRING | BOOL | IDENT | IDENT(args) | (expr)
    def primary(self):
        tok = self.current_token

        if tok.type == "NUMBER":
            self.eat("NUMBER")
            node = NumberLiteral(tok.value)
            node.line = tok.line
            return node

        if tok.type == "STRING":
            self.eat("STRING")
            node = StringLiteral(tok.value)
            node.line = tok.line
            return node

        if tok.type == "BOOL":
            self.eat("BOOL")
            node = BooleanLiteral(tok.value)
            node.line = tok.line
            return node

        if tok.type == "IDENT":
            self.eat("IDENT")
            if self.at("LPAREN"):
                node = Call(tok.value, self.call_args())
                node.line = tok.line
                return node
            node = Identifier(tok.value)
            node.line = tok.line
            return node

        # inteiro(x) / real(x) are conversion calls, not type names
        if tok.type in ("TYPE_INTEIRO", "TYPE_REAL") and self.next_token.type == "LPAREN":
            self.eat(tok.type)
            node = Call(tok.value, self.call_args())
            node.line = tok.line
            return node

        if tok.type == "LPAREN":
            self.eat("LPAREN")
            node = self.expr()
            self.eat("RPAREN", "')' to close the expression")
            return node

        self.error_here(f"invalid expression: unexpected '{tok.text()}'")


def parse(tokens: list[Token]) -> Program:
    return Parser(tokens).parse()
