import logging

from vizalg.debugger import DebugSession, DebugState
from vizalg.errors import LexError, ParseError, VizError, VizRuntimeError
from vizalg.evaluator import CancellationToken, Evaluator
from vizalg.runner import RunResult, parse_source, run_source

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CancellationToken",
    "DebugSession",
    "DebugState",
    "Evaluator",
    "LexError",
    "ParseError",
    "RunResult",
    "VizError",
    "VizRuntimeError",
    "parse_source",
    "run_source",
]
