from dataclasses import dataclass

from vizalg.errors import LexError
from vizalg.values import INT_MAX


# VisuAlg keywords (case-insensitive, matched after lowercasing)
KEYWORDS = {
    "algoritmo": "ALGORITMO",
    "fimalgoritmo": "FIMALGORITMO",
    "var": "VAR",
    "inicio": "INICIO",
    "inteiro": "TYPE_INTEIRO",
    "real": "TYPE_REAL",
    "caractere": "TYPE_CARACTERE",
    "logico": "TYPE_LOGICO",
    "escreva": "ESCREVA",
    "escreval": "ESCREVAL",
    "leia": "LEIA",
    "se": "SE",
    "entao": "ENTAO",
    "senao": "SENAO",
    "fimse": "FIMSE",
    "para": "PARA",
    "de": "DE",
    "ate": "ATE",
    "faca": "FACA",
    "fimpara": "FIMPARA",
    "enquanto": "ENQUANTO",
    "fimenquanto": "FIMENQUANTO",
    "repita": "REPITA",
    "e": "AND",
    "ou": "OR",
    "nao": "NOT",
    "div": "DIV",
    "mod": "MOD",
    "procedimento": "PROCEDIMENTO",
    "fimprocedimento": "FIMPROCEDIMENTO",
    "funcao": "FUNCAO",
    "fimfuncao": "FIMFUNCAO",
    "retorne": "RETORNE",
}

TYPE_TOKENS = {
    "TYPE_INTEIRO": "inteiro",
    "TYPE_REAL": "real",
    "TYPE_CARACTERE": "caractere",
    "TYPE_LOGICO": "logico",
}

SINGLE_CHAR_TOKENS = {
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "/": "SLASH",
    "(": "LPAREN",
    ")": "RPAREN",
    ":": "COLON",
    ",": "COMMA",
    "=": "EQ",
}


@dataclass(frozen=True)
class Token:
    type: str
    value: object = None
    line: int = 1
    column: int = 1

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value!r})"
        return f"{self.type}"

    def text(self) -> str:
        # Source-like rendering for error messages.
        if self.type == "EOF":
            return "end of input"
        if self.type == "STRING":
            return f'"{self.value}"'
        if self.type == "BOOL":
            return "verdadeiro" if self.value else "falso"
        return str(self.value)


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def tokenize(self) -> list[Token]:
        tokens = []
        while True:
            tok = self.get_next_token()
            tokens.append(tok)
            if tok.type == "EOF":
                return tokens

    # newlines are plain whitespace here: statements end at keywords, not lines
    def skip_whitespace(self):
        while self.current_char is not None and self.current_char in " \t\r\n":
            self.advance()

    def skip_line_comment(self):
        while self.current_char is not None and self.current_char != "\n":
            self.advance()

    def skip_block_comment(self):
        # { ... } may span lines and does not nest; an unclosed one runs to the end
        self.advance()
        while self.current_char is not None and self.current_char != "}":
            self.advance()
        if self.current_char == "}":
            self.advance()

    def read_identifier(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and (self.current_char.isascii() and self.current_char.isalnum() or self.current_char == "_"):
            result += self.current_char
            self.advance()

        word = result.lower()
        if word == "verdadeiro":
            return Token("BOOL", True, line=start_line, column=start_col)
        if word == "falso":
            return Token("BOOL", False, line=start_line, column=start_col)

        kind = KEYWORDS.get(word)
        if kind is not None:
            return Token(kind, word, line=start_line, column=start_col)
        return Token("IDENT", word, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and self.current_char.isdigit():
            result += self.current_char
            self.advance()

        # "3.14" is real; a "." with no digit after it is left for the next token
        nxt = self.peek()
        if self.current_char == "." and nxt is not None and nxt.isdigit():
            result += "."
            self.advance()
            while self.current_char is not None and self.current_char.isdigit():
                result += self.current_char
                self.advance()
            return Token("NUMBER", float(result), line=start_line, column=start_col)

        # inteiro literals must fit in 64 bits
        if len(result.lstrip("0")) > 19 or int(result) > INT_MAX:
            raise LexError("integer literal too large", start_line, start_col)
        return Token("NUMBER", int(result), line=start_line, column=start_col)

    def read_string(self):
        start_line, start_col = self.line, self.column
        self.advance()  # skip opening quote
        result = ""

        while self.current_char is not None and self.current_char != '"':
            if self.current_char == "\n":
                raise LexError("unterminated string", self.line, self.column)
            result += self.current_char
            self.advance()

        if self.current_char is None:
            raise LexError("unterminated string", start_line, start_col)

        self.advance()  # skip closing quote
        return Token("STRING", result, line=start_line, column=start_col)

    def get_next_token(self):
        while self.current_char is not None:

            if self.current_char in " \t\r\n":
                self.skip_whitespace()
                continue

            # comments
            if self.current_char == "/" and self.peek() == "/":
                self.skip_line_comment()
                continue
            if self.current_char == "{":
                self.skip_block_comment()
                continue

            # identifiers / keywords
            if self.current_char.isascii() and self.current_char.isalpha() or self.current_char == "_":
                return self.read_identifier()

            # numbers
            if self.current_char.isascii() and self.current_char.isdigit():
                return self.read_number()

            if self.current_char == '"':
                return self.read_string()

            start_line, start_col = self.line, self.column

            # <-, <=, <>, <
            if self.current_char == "<":
                nxt = self.peek()
                if nxt == "-":
                    self.advance()
                    self.advance()
                    return Token("ASSIGN", "<-", line=start_line, column=start_col)
                if nxt == "=":
                    self.advance()
                    self.advance()
                    return Token("LTE", "<=", line=start_line, column=start_col)
                if nxt == ">":
                    self.advance()
                    self.advance()
                    return Token("NOTEQ", "<>", line=start_line, column=start_col)
                self.advance()
                return Token("LT", "<", line=start_line, column=start_col)

            # >=, >
            if self.current_char == ">":
                if self.peek() == "=":
                    self.advance()
                    self.advance()
                    return Token("GTE", ">=", line=start_line, column=start_col)
                self.advance()
                return Token("GT", ">", line=start_line, column=start_col)

            kind = SINGLE_CHAR_TOKENS.get(self.current_char)
            if kind is not None:
                ch = self.current_char
                self.advance()
                return Token(kind, ch, line=start_line, column=start_col)

            raise LexError(f"unexpected character '{self.current_char}'", self.line, self.column)

        return Token("EOF", line=self.line, column=self.column)


def tokenize(source: str) -> list[Token]:
    return Lexer(source).tokenize()
