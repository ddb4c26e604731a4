import enum
import logging

from vizalg.ast_nodes import Program
from vizalg.errors import VizError
from vizalg.evaluator import CancellationToken, Evaluator, InputRequest, StepEvent

logger = logging.getLogger(__name__)


class DebugState(enum.Enum):
    IDLE = "idle"
    PAUSED = "paused"
    WAITING_INPUT = "waiting_input"
    FINISHED = "finished"
    CANCELLED = "cancelled"
    FAILED = "failed"


class DebugSession:
    """Step-by-step control over one run of a program.

    The session drives ``Evaluator.execute`` and stops at statement
    boundaries: after every statement in step mode, or only on breakpoint
    lines in continue mode. It also stops whenever the program reads input;
    ``send_input`` resumes in whichever mode was active.

        session = DebugSession(program, breakpoints=[7])
        session.start()        # paused on the first statement
        session.continue_()    # paused on line 7
        session.step()         # one more statement
    """

    def __init__(self, program: Program, on_output=None, breakpoints=(), evaluator: Evaluator | None = None):
        self.program = program
        self.cancel_token = CancellationToken()
        self.evaluator = evaluator or Evaluator(on_output=self._emit)
        self.evaluator.cancel_token = self.cancel_token
        self.evaluator.on_output = self._emit
        self.evaluator.set_breakpoints(breakpoints)
        self.on_output = on_output

        self.state = DebugState.IDLE
        self.current_line = None
        self.variables = ()
        self.output = []
        self.error = None
        self.input_request = None

        self._events = None
        self._continue_mode = False

    @property
    def breakpoints(self):
        return self.evaluator.breakpoints

    def set_breakpoints(self, lines):
        self.evaluator.set_breakpoints(lines)

    def toggle_breakpoint(self, line):
        lines = set(self.evaluator.breakpoints)
        lines.symmetric_difference_update({line})
        self.evaluator.set_breakpoints(lines)

    @property
    def finished(self):
        return self.state in (DebugState.FINISHED, DebugState.CANCELLED, DebugState.FAILED)

    def output_text(self):
        return "".join(self.output)

    def _emit(self, text):
        self.output.append(text)
        if self.on_output is not None:
            self.on_output(text)

    # ---------- CONTROL ----------
    def start(self, stop_on_entry=True):
        if self.state is not DebugState.IDLE:
            raise RuntimeError("debug session already started")
        self._events = self.evaluator.execute(self.program, stepping=True)
        self._continue_mode = not stop_on_entry
        logger.debug("debug session started (stop_on_entry=%s)", stop_on_entry)
        return self._resume(None)

    def step(self):
        self._require(DebugState.PAUSED)
        self._continue_mode = False
        return self._resume(None)

    def continue_(self):
        self._require(DebugState.PAUSED)
        self._continue_mode = True
        return self._resume(None)

    def send_input(self, text):
        self._require(DebugState.WAITING_INPUT)
        self.input_request = None
        return self._resume(text)

    def stop(self):
        if self.finished or self.state is DebugState.IDLE:
            if self.state is DebugState.IDLE:
                self.state = DebugState.CANCELLED
            return self.state
        self.cancel_token.cancel()
        # let the evaluator observe the token at its next checkpoint and unwind
        reply = "" if self.state is DebugState.WAITING_INPUT else None
        return self._resume(reply)

    def _require(self, state):
        if self.state is not state:
            raise RuntimeError(f"debug session is {self.state.value}, expected {state.value}")

    def _resume(self, reply):
        try:
            while True:
                event = self._events.send(reply)
                reply = None

                if isinstance(event, InputRequest):
                    self.state = DebugState.WAITING_INPUT
                    self.input_request = event
                    self.current_line = event.line
                    logger.debug("waiting for input for '%s' at line %d", event.name, event.line)
                    return self.state

                if isinstance(event, StepEvent):
                    self.current_line = event.line
                    self.variables = event.variables
                    if self._continue_mode and event.line not in self.evaluator.breakpoints:
                        continue
                    self._continue_mode = False
                    self.state = DebugState.PAUSED
                    logger.debug("paused at line %d", event.line)
                    return self.state
        except StopIteration:
            self.state = DebugState.CANCELLED if self.cancel_token.cancelled else DebugState.FINISHED
            logger.debug("debug session %s", self.state.value)
        except VizError as e:
            self.error = e
            self.state = DebugState.FAILED
            logger.debug("debug session failed: %s", e)
        return self.state
