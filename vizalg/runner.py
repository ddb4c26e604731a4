import logging
from dataclasses import dataclass

from vizalg.errors import VizError, VizRuntimeError
from vizalg.evaluator import Evaluator
from vizalg.lexer import Lexer
from vizalg.parser import Parser

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    output: str
    error: VizError | None = None

    @property
    def ok(self):
        return self.error is None


def parse_source(code: str):
    tokens = Lexer(code).tokenize()
    return Parser(tokens).parse()


def replay_input(lines, fallback=None):
    """Input callback that hands out ``lines`` in order, then asks ``fallback``."""
    pending = list(lines)

    def read():
        if pending:
            return pending.pop(0)
        if fallback is not None:
            return fallback()
        raise VizRuntimeError("no more input available")

    return read


def run_source(code: str, inputs=(), on_input=None, **evaluator_options) -> RunResult:
    """Lex, parse and run ``code``, collecting its output.

    Errors of any stage are returned in the result instead of raised.
    """
    output = []
    evaluator = None
    try:
        program = parse_source(code)
        evaluator = Evaluator(
            on_output=output.append,
            on_input=replay_input(inputs, on_input),
            **evaluator_options,
        )
        evaluator.run(program)
    except VizError as e:
        # input failures surface in the driver, outside any statement
        if e.line is None and evaluator is not None:
            e.line = evaluator.current_line
        logger.debug("run failed: %s", e)
        return RunResult("".join(output), e)

    return RunResult("".join(output))
