class VizError(Exception):
    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line

    kind = "Error"

    def location(self) -> str:
        if self.line is None:
            return ""
        return f" at line {self.line}"

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}{self.location()}"


class LexError(VizError):
    kind = "Lex error"

    def __init__(self, message: str, line: int, column: int):
        super().__init__(message, line)
        self.column = column

    def location(self) -> str:
        return f" at line {self.line}, col {self.column}"


class ParseError(VizError):
    kind = "Parse error"

    def __init__(self, message: str, line: int, column: int):
        super().__init__(message, line)
        self.column = column

    def location(self) -> str:
        return f" at line {self.line}, col {self.column}"


class VizRuntimeError(VizError):
    kind = "Runtime error"
