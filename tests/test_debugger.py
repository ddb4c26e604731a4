import pytest

from vizalg.debugger import DebugSession, DebugState
from vizalg.runner import parse_source

PROGRAM = """algoritmo "dbg"
var a, b, c: inteiro
inicio
  a <- 1
  b <- a + 1
  c <- b * 10
  escreval(a, b, c)
fimalgoritmo
"""

READER = """algoritmo "leitura"
var n: inteiro
inicio
  leia(n)
  n <- n * 2
  escreval(n)
fimalgoritmo
"""


def values(session):
    return {v.name: v.value for v in session.variables}


def test_start_pauses_on_first_statement():
    session = DebugSession(parse_source(PROGRAM))
    assert session.start() is DebugState.PAUSED
    assert session.current_line == 4
    assert values(session) == {"a": "0", "b": "0", "c": "0"}


def test_breakpoint_then_step():
    session = DebugSession(parse_source(PROGRAM), breakpoints=[6])
    session.start()

    assert session.continue_() is DebugState.PAUSED
    assert session.current_line == 6
    # snapshot taken before line 6 runs
    assert values(session) == {"a": "1", "b": "2", "c": "0"}

    assert session.step() is DebugState.PAUSED
    assert session.current_line == 7
    assert values(session)["c"] == "20"
    assert session.output_text() == ""

    assert session.continue_() is DebugState.FINISHED
    assert session.output_text() == "1220\n"
    assert session.finished


def test_run_to_breakpoint_without_stop_on_entry():
    session = DebugSession(parse_source(PROGRAM), breakpoints=[5])
    assert session.start(stop_on_entry=False) is DebugState.PAUSED
    assert session.current_line == 5


def test_continue_without_breakpoints_runs_to_end():
    out = []
    session = DebugSession(parse_source(PROGRAM), on_output=out.append)
    session.start()
    assert session.continue_() is DebugState.FINISHED
    assert out == ["1220\n"]


def test_toggle_breakpoint_during_run():
    session = DebugSession(parse_source(PROGRAM))
    session.start()
    session.toggle_breakpoint(7)
    assert session.breakpoints == frozenset({7})
    session.continue_()
    assert session.current_line == 7

    session.toggle_breakpoint(7)
    assert session.breakpoints == frozenset()


def test_input_suspends_session():
    session = DebugSession(parse_source(READER))
    session.start()
    assert session.current_line == 4

    assert session.step() is DebugState.WAITING_INPUT
    assert session.input_request.name == "n"
    assert session.input_request.type == "inteiro"

    # resumes in step mode: pauses on the next statement
    assert session.send_input("21") is DebugState.PAUSED
    assert session.current_line == 5
    assert values(session) == {"n": "21"}

    assert session.continue_() is DebugState.FINISHED
    assert session.output_text() == "42\n"


def test_stop_while_paused():
    session = DebugSession(parse_source(PROGRAM), breakpoints=[6])
    session.start()
    session.continue_()
    assert session.stop() is DebugState.CANCELLED
    assert session.output_text() == ""


def test_stop_while_waiting_for_input():
    session = DebugSession(parse_source(READER))
    session.start(stop_on_entry=False)
    assert session.state is DebugState.WAITING_INPUT
    assert session.stop() is DebugState.CANCELLED
    assert session.output_text() == ""


def test_runtime_error_fails_session():
    source = 'algoritmo "t"\nvar x: inteiro\ninicio\n  x <- 5 div 0\nfimalgoritmo\n'
    session = DebugSession(parse_source(source))
    session.start()
    assert session.continue_() is DebugState.FAILED
    assert session.error.message == "integer division by zero"
    assert session.error.line == 4


def test_commands_require_the_right_state():
    session = DebugSession(parse_source(PROGRAM))
    with pytest.raises(RuntimeError):
        session.step()
    session.start()
    with pytest.raises(RuntimeError):
        session.start()
    with pytest.raises(RuntimeError):
        session.send_input("1")
