class ASTNode:
    # Source line (1-based) of the node's leading token. Parser sets this.
    line: int | None = None


class Program(ASTNode):
    def __init__(self, name, declarations, body):
        self.name = name                  # algorithm title (string literal)
        self.declarations = declarations  # VarDeclaration | Procedure | Function, in source order
        self.body = body                  # list of statements


class VarDeclaration(ASTNode):
    def __init__(self, names, var_type):
        self.names = names        # a, b, c: inteiro -> ["a", "b", "c"]
        self.var_type = var_type  # inteiro, real, caractere, logico


class Assign(ASTNode):
    def __init__(self, name, value):
        self.name = name
        self.value = value


class BinaryOp(ASTNode):
    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right


class UnaryOp(ASTNode):
    def __init__(self, op, operand):
        self.op = op  # "nao" or "-"
        self.operand = operand


class Identifier(ASTNode):
    def __init__(self, name):
        self.name = name


class NumberLiteral(ASTNode):
    def __init__(self, value):
        self.value = value  # int or float


class StringLiteral(ASTNode):
    def __init__(self, value):
        self.value = value


class BooleanLiteral(ASTNode):
    def __init__(self, value):
        self.value = value


class Write(ASTNode):
    def __init__(self, args, newline):
        self.args = args
        self.newline = newline  # escreval -> True, escreva -> False


class Read(ASTNode):
    def __init__(self, name):
        self.name = name


class If(ASTNode):
    def __init__(self, condition, then_body, else_body=None):
        self.condition = condition
        self.then_body = then_body
        self.else_body = else_body or []


class For(ASTNode):
    def __init__(self, var_name, start, end, step, body):
        self.var_name = var_name
        self.start = start
        self.end = end
        self.step = step  # expr | None (defaults to 1)
        self.body = body


class While(ASTNode):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class Repeat(ASTNode):
    def __init__(self, body, condition):
        self.body = body
        self.condition = condition  # loop ends once this is true


class Procedure(ASTNode):
    def __init__(self, name, params, local_vars, body):
        self.name = name
        self.params = params          # list[VarDeclaration]
        self.local_vars = local_vars  # list[VarDeclaration]
        self.body = body


class Function(ASTNode):
    def __init__(self, name, params, local_vars, return_type, body):
        self.name = name
        self.params = params
        self.local_vars = local_vars
        self.return_type = return_type
        self.body = body


class Return(ASTNode):
    def __init__(self, value):
        self.value = value


class Call(ASTNode):
    def __init__(self, name, args):
        self.name = name
        self.args = args
