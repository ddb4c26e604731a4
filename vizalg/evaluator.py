import logging
import math
import operator
import random
import sys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Generator, Mapping

from vizalg.ast_nodes import (
    Program, VarDeclaration, Procedure, Function,
    NumberLiteral, StringLiteral, BooleanLiteral, Identifier,
)
from vizalg.environment import Environment, VarSnapshot
from vizalg.errors import VizRuntimeError
from vizalg.natives import NATIVES, call_native, is_native
from vizalg.values import check_integer, coerce, is_number, parse_input, stringify, truthy, type_name

logger = logging.getLogger(__name__)

RELATIONAL = {
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}


class CancellationToken:
    """Set by the host to stop a run; the evaluator only reads it."""

    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ExecutionCancelled(Exception):
    pass


@dataclass(frozen=True)
class InputRequest:
    line: int
    name: str
    type: str


@dataclass(frozen=True)
class StepEvent:
    line: int
    variables: tuple[VarSnapshot, ...]


class ReturnSignal:
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value


@dataclass(frozen=True)
class ProgramContext:
    procedures: Mapping[str, Procedure]
    functions: Mapping[str, Function]
    globals: Environment

    @classmethod
    def from_program(cls, program: Program):
        procedures = {}
        functions = {}
        for decl in program.declarations:
            if isinstance(decl, (Procedure, Function)):
                if decl.name in procedures or decl.name in functions:
                    raise VizRuntimeError(f"subprogram '{decl.name}' already defined", decl.line)
                if isinstance(decl, Procedure):
                    procedures[decl.name] = decl
                else:
                    functions[decl.name] = decl

        globals_env = Environment()
        declare_vars((d for d in program.declarations if isinstance(d, VarDeclaration)), globals_env)
        return cls(MappingProxyType(procedures), MappingProxyType(functions), globals_env)


def declare_vars(declarations, env: Environment):
    for decl in declarations:
        for name in decl.names:
            if name in env.store:
                raise VizRuntimeError(f"variable '{name}' already declared", decl.line)
            env.declare(name, decl.var_type)


def _default_output(text):
    sys.stdout.write(text)
    sys.stdout.flush()


def stdin_line():
    try:
        return input()
    except EOFError:
        raise VizRuntimeError("no more input available") from None


class Evaluator:
    MAX_CALL_DEPTH = 1000

    def __init__(
        self,
        on_output: Callable[[str], None] | None = None,
        on_input: Callable[[], str] | None = None,
        on_step: Callable[[int, tuple[VarSnapshot, ...]], None] | None = None,
        cancel_token: CancellationToken | None = None,
        rng: random.Random | None = None,
        max_call_depth: int | None = None,
        max_steps: int | None = None,
    ):
        self.on_output = on_output or _default_output
        self.on_input = on_input or stdin_line
        self.on_step = on_step
        self.cancel_token = cancel_token or CancellationToken()
        self.rng = rng or random.Random()
        self.max_call_depth = max_call_depth or self.MAX_CALL_DEPTH
        self.max_steps = max_steps  # set to an int to guard against infinite loops

        self.breakpoints: frozenset[int] = frozenset()
        self.stepping = False
        self.call_depth = 0
        self.steps = 0
        self.current_line = None

    def set_breakpoints(self, lines):
        self.breakpoints = frozenset(int(n) for n in lines)

    # ---------- DRIVERS ----------
    def run(self, program: Program):
        """Run to completion, answering suspensions with the callbacks."""
        events = self.execute(program, stepping=self.on_step is not None)
        reply = None
        try:
            while True:
                event = events.send(reply)
                if isinstance(event, InputRequest):
                    reply = self.on_input()
                else:
                    self.on_step(event.line, event.variables)
                    reply = None
        except StopIteration:
            pass

    def execute(self, program: Program, stepping=False) -> Generator[InputRequest | StepEvent, str | None, None]:
        """Run as a generator.

        Yields an InputRequest at every ``leia`` (send back the typed line) and,
        when ``stepping`` is on, a StepEvent before every statement (send None).
        """
        self.stepping = stepping
        self.call_depth = 0
        self.steps = 0
        self.current_line = None

        ctx = ProgramContext.from_program(program)
        logger.debug(
            "running '%s': %d procedure(s), %d function(s), %d global(s)",
            program.name, len(ctx.procedures), len(ctx.functions), len(ctx.globals.store),
        )

        try:
            # a ReturnSignal cannot reach this level: the parser rejects top-level retorne
            yield from self.exec_block(program.body, ctx.globals, ctx)
        except ExecutionCancelled:
            logger.info("run of '%s' cancelled at line %s", program.name, self.current_line)
            return
        except RecursionError:
            raise VizRuntimeError("maximum call depth exceeded", self.current_line) from None

        logger.debug("run of '%s' finished after %d statement(s)", program.name, self.steps)

    # ---------- CHECKPOINTS ----------
    def check_cancelled(self):
        if self.cancel_token.cancelled:
            raise ExecutionCancelled()

    def count_step(self, line):
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise VizRuntimeError("step limit exceeded (possible infinite loop)", line)

    def loop_checkpoint(self, line):
        # an empty loop body runs no statements, so iterations count as steps too
        self.check_cancelled()
        self.count_step(line)

    # ---------- STATEMENTS ----------
    def exec_block(self, statements, env, ctx):
        for stmt in statements:
            self.check_cancelled()
            result = yield from self.exec_statement(stmt, env, ctx)
            if result is not None:
                return result
        return None

    def exec_statement(self, node, env, ctx):
        self.check_cancelled()

        if node.line is not None:
            self.current_line = node.line
            self.count_step(node.line)
            if self.stepping:
                yield StepEvent(node.line, env.snapshot())
                self.check_cancelled()

        method = getattr(self, f"exec_{node.__class__.__name__}", None)
        if method is None:
            raise VizRuntimeError(f"unknown statement: {node.__class__.__name__}", node.line)
        return (yield from method(node, env, ctx))

    def exec_Assign(self, node, env, ctx):
        value = yield from self.eval_expr(node.value, env, ctx)
        env.set(node.name, value, node.line)

    def exec_Write(self, node, env, ctx):
        parts = []
        for arg in node.args:
            value = yield from self.eval_expr(arg, env, ctx)
            parts.append(stringify(value))
        text = "".join(parts)
        if node.newline:
            text += "\n"
        self.on_output(text)

    def exec_Read(self, node, env, ctx):
        variable = env.get(node.name, node.line)

        raw = yield InputRequest(node.line, node.name, variable.type)
        self.check_cancelled()
        if not isinstance(raw, str):
            raise VizRuntimeError(f"no input available for '{node.name}'", node.line)

        env.set(node.name, parse_input(raw, variable.type, node.line), node.line)

    def exec_If(self, node, env, ctx):
        condition = yield from self.eval_expr(node.condition, env, ctx)
        if not isinstance(condition, bool):
            raise VizRuntimeError("condition must be logical", node.line)
        branch = node.then_body if condition else node.else_body
        return (yield from self.exec_block(branch, env, ctx))

    def exec_For(self, node, env, ctx):
        variable = env.get(node.var_name, node.line)
        if variable.type not in ("inteiro", "real"):
            raise VizRuntimeError(f"loop variable '{node.var_name}' must be numeric", node.line)

        start = yield from self.eval_expr(node.start, env, ctx)
        end = yield from self.eval_expr(node.end, env, ctx)
        step = 1
        if node.step is not None:
            step = yield from self.eval_expr(node.step, env, ctx)
        if not (is_number(start) and is_number(end) and is_number(step)):
            raise VizRuntimeError("for loop bounds must be numeric", node.line)
        if step == 0:
            raise VizRuntimeError("for step must not be zero", node.line)

        # the loop variable lives in the enclosing scope and keeps its last value
        env.set(node.var_name, start, node.line)
        while True:
            self.loop_checkpoint(node.line)
            current = env.get(node.var_name, node.line).value
            if step > 0 and current > end:
                break
            if step < 0 and current < end:
                break

            result = yield from self.exec_block(node.body, env, ctx)
            if result is not None:
                return result

            # re-read: the body may have changed the loop variable
            current = env.get(node.var_name, node.line).value
            env.set(node.var_name, current + step, node.line)
        return None

    def exec_While(self, node, env, ctx):
        while True:
            self.loop_checkpoint(node.line)
            condition = yield from self.eval_expr(node.condition, env, ctx)
            if not truthy(condition):
                break
            result = yield from self.exec_block(node.body, env, ctx)
            if result is not None:
                return result
        return None

    def exec_Repeat(self, node, env, ctx):
        while True:
            self.loop_checkpoint(node.line)
            result = yield from self.exec_block(node.body, env, ctx)
            if result is not None:
                return result
            self.check_cancelled()
            condition = yield from self.eval_expr(node.condition, env, ctx)
            if truthy(condition):
                break
        return None

    def exec_Return(self, node, env, ctx):
        value = yield from self.eval_expr(node.value, env, ctx)
        return ReturnSignal(value)

    def exec_Call(self, node, env, ctx):
        proc = ctx.procedures.get(node.name)
        if proc is None:
            raise VizRuntimeError(f"procedure '{node.name}' not found", node.line)
        yield from self.invoke(proc, node, env, ctx)

    # ---------- CALLS ----------
    def invoke(self, sub, call, caller_env, ctx):
        if self.call_depth >= self.max_call_depth:
            raise VizRuntimeError("maximum call depth exceeded", call.line)

        # callees see globals plus their own scope, never the caller's locals
        local_env = Environment(parent=ctx.globals)
        yield from self.bind_params(sub, call, local_env, caller_env, ctx)
        declare_vars(sub.local_vars, local_env)

        self.call_depth += 1
        logger.debug("call %s (line %s, depth %d)", sub.name, call.line, self.call_depth)
        try:
            return (yield from self.exec_block(sub.body, local_env, ctx))
        finally:
            self.call_depth -= 1

    def bind_params(self, sub, call, local_env, caller_env, ctx):
        flat = [(name, decl.var_type) for decl in sub.params for name in decl.names]
        if len(flat) != len(call.args):
            raise VizRuntimeError(f"expected {len(flat)} argument(s), got {len(call.args)}", call.line)

        for (name, var_type), arg in zip(flat, call.args):
            value = yield from self.eval_expr(arg, caller_env, ctx)
            local_env.declare(name, var_type, value, call.line)

    # ---------- EXPRESSIONS ----------
    def eval_expr(self, node, env, ctx):
        if isinstance(node, (NumberLiteral, StringLiteral, BooleanLiteral)):
            return node.value
        if isinstance(node, Identifier):
            return self.eval_identifier(node, env)

        method = getattr(self, f"eval_{node.__class__.__name__}", None)
        if method is None:
            raise VizRuntimeError(f"invalid expression: {node.__class__.__name__}", node.line)
        return (yield from method(node, env, ctx))

    def eval_identifier(self, node, env):
        variable = env.lookup(node.name)
        if variable is not None:
            return variable.value
        # pi and rand may be written without parentheses
        if is_native(node.name) and NATIVES[node.name].arity == 0:
            return call_native(node.name, [], self.rng, node.line)
        raise VizRuntimeError(f"variable '{node.name}' not declared", node.line)

    def eval_BinaryOp(self, node, env, ctx):
        left = yield from self.eval_expr(node.left, env, ctx)
        right = yield from self.eval_expr(node.right, env, ctx)
        try:
            result = self.binary(node.op, left, right, node.line)
        except OverflowError:
            raise VizRuntimeError("numeric overflow", node.line) from None
        return check_integer(result, node.line)

    def eval_UnaryOp(self, node, env, ctx):
        operand = yield from self.eval_expr(node.operand, env, ctx)
        if node.op == "-":
            if not is_number(operand):
                raise VizRuntimeError(f"invalid operand for '-': {type_name(operand)}", node.line)
            return check_integer(-operand, node.line)
        if node.op == "nao":
            return not truthy(operand)
        raise VizRuntimeError(f"unknown unary operator '{node.op}'", node.line)

    def eval_Call(self, node, env, ctx):
        if is_native(node.name):
            args = []
            for arg in node.args:
                args.append((yield from self.eval_expr(arg, env, ctx)))
            return call_native(node.name, args, self.rng, node.line)

        func = ctx.functions.get(node.name)
        if func is None:
            raise VizRuntimeError(f"function '{node.name}' not found", node.line)

        result = yield from self.invoke(func, node, env, ctx)
        if result is None:
            raise VizRuntimeError(f"function '{node.name}' did not return a value", node.line)
        return coerce(result.value, func.return_type, node.line)

    # ---------- OPERATORS ----------
    def require_numbers(self, op, left, right, line):
        if not (is_number(left) and is_number(right)):
            raise VizRuntimeError(
                f"invalid operands for '{op}': {type_name(left)} and {type_name(right)}", line
            )

    def binary(self, op, left, right, line):
        if op == "+":
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            self.require_numbers(op, left, right, line)
            return left + right

        if op == "-":
            self.require_numbers(op, left, right, line)
            return left - right

        if op == "*":
            self.require_numbers(op, left, right, line)
            return left * right

        if op == "/":
            self.require_numbers(op, left, right, line)
            if right == 0:
                raise VizRuntimeError("division by zero", line)
            return left / right

        if op == "div":
            self.require_numbers(op, left, right, line)
            if right == 0:
                raise VizRuntimeError("integer division by zero", line)
            if isinstance(left, int) and isinstance(right, int):
                q = abs(left) // abs(right)
                return q if (left >= 0) == (right > 0) else -q
            return math.trunc(left / right)

        if op == "mod":
            self.require_numbers(op, left, right, line)
            if right == 0:
                raise VizRuntimeError("modulo by zero", line)
            # remainder keeps the sign of the dividend
            if isinstance(left, int) and isinstance(right, int):
                r = abs(left) % abs(right)
                return r if left >= 0 else -r
            return math.fmod(left, right)

        if op == "=":
            return self.values_equal(left, right)
        if op == "<>":
            return not self.values_equal(left, right)

        if op in RELATIONAL:
            if (is_number(left) and is_number(right)) or (isinstance(left, str) and isinstance(right, str)):
                return RELATIONAL[op](left, right)
            raise VizRuntimeError(
                f"cannot compare {type_name(left)} and {type_name(right)} with '{op}'", line
            )

        # both operands are always evaluated
        if op == "e":
            return truthy(left) and truthy(right)
        if op == "ou":
            return truthy(left) or truthy(right)

        raise VizRuntimeError(f"unknown operator '{op}'", line)

    def values_equal(self, left, right):
        if is_number(left) and is_number(right):
            return left == right
        if type(left) is type(right):
            return left == right
        return False
