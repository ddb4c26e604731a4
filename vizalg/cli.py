import logging
import random
import sys
import traceback

from colorama import Fore, Style, just_fix_windows_console

from vizalg.ast_nodes import ASTNode
from vizalg.debugger import DebugSession, DebugState
from vizalg.errors import VizError
from vizalg.evaluator import Evaluator, stdin_line
from vizalg.explain import explain_error
from vizalg.lexer import Lexer
from vizalg.runner import parse_source, replay_input

USAGE = """Usage:
  vizalg tokens <file.alg>
  vizalg parse <file.alg>
  vizalg run <file.alg> [--input LINE]... [--trace] [--max-steps N] [--seed N]
  vizalg debug <file.alg> [--break LINE]...
  (optional) --traceback to show Python traceback, --verbose for debug logging"""


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_dict(n) for n in node]
    if not isinstance(node, ASTNode):
        return node

    d = {"type": node.__class__.__name__}
    if node.line is not None:
        d["line"] = node.line
    for key, value in vars(node).items():
        if key == "line":
            continue
        d[key] = ast_to_dict(value)
    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)) and v:
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def read_source(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def print_error(e, debug: bool = False):
    if debug:
        traceback.print_exc()
        return
    text = str(e)
    if sys.stdout.isatty():
        text = f"{Fore.RED}{text}{Style.RESET_ALL}"
    print(text)
    hint = explain_error(e.message) if isinstance(e, VizError) else None
    if hint:
        print(f"  hint: {hint}")


def cmd_tokens(path, debug: bool = False):
    try:
        tokens = Lexer(read_source(path)).tokenize()
    except (OSError, VizError) as e:
        print_error(e, debug)
        sys.exit(1)

    for tok in tokens:
        print(f"{tok.line:4d}:{tok.column:<3d} {tok!r}")


def cmd_parse(path, debug: bool = False):
    try:
        program = parse_source(read_source(path))
    except (OSError, VizError) as e:
        print_error(e, debug)
        sys.exit(1)

    print(pretty(ast_to_dict(program)))


def format_trace(line, variables):
    parts = [f"TRACE line={line}"]
    for var in variables:
        parts.append(f"{var.name}={var.value}")
    return " ".join(parts)


def cmd_run(path, debug: bool = False, inputs=(), trace=False, max_steps=None, seed=None):
    evaluator = None
    try:
        program = parse_source(read_source(path))

        on_step = None
        if trace:
            def on_step(line, variables):
                print(format_trace(line, variables), flush=True)

        rng = random.Random(seed) if seed is not None else None

        evaluator = Evaluator(
            on_input=replay_input(inputs, stdin_line),
            on_step=on_step,
            rng=rng,
            max_steps=max_steps,
        )
        evaluator.run(program)
    except (OSError, VizError) as e:
        if isinstance(e, VizError) and e.line is None and evaluator is not None:
            e.line = evaluator.current_line
        print_error(e, debug)
        sys.exit(1)
    except KeyboardInterrupt:
        print()
        sys.exit(130)


def show_variables(session):
    if not session.variables:
        print("  (no variables)")
    for var in session.variables:
        print(f"  {var.name}: {var.type} = {var.value}")


def cmd_debug(path, debug: bool = False, breakpoints=()):
    try:
        source = read_source(path)
        program = parse_source(source)
    except (OSError, VizError) as e:
        print_error(e, debug)
        sys.exit(1)

    source_lines = source.splitlines()

    def emit(text):
        sys.stdout.write(text)
        sys.stdout.flush()

    session = DebugSession(program, on_output=emit, breakpoints=breakpoints)
    session.start()
    print("vizalg debugger. s=step, c=continue, v=variables, b N=toggle breakpoint, q=quit")

    while not session.finished:
        try:
            if session.state is DebugState.WAITING_INPUT:
                req = session.input_request
                session.send_input(input(f"leia({req.name}: {req.type})> "))
                continue

            line = session.current_line
            text = source_lines[line - 1].strip() if 0 < line <= len(source_lines) else ""
            cmd = input(f"[{line}] {text}\n(debug)> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            session.stop()
            break

        if cmd in ("s", "step", ""):
            session.step()
        elif cmd in ("c", "continue"):
            session.continue_()
        elif cmd in ("v", "vars"):
            show_variables(session)
        elif cmd.startswith("b"):
            arg = cmd[1:].strip()
            if not arg.isdigit():
                print("  usage: b <line>")
                continue
            session.toggle_breakpoint(int(arg))
            print(f"  breakpoints: {sorted(session.breakpoints) or 'none'}")
        elif cmd in ("q", "quit"):
            session.stop()
        else:
            print(f"  unknown command: {cmd}")

    if session.state is DebugState.FAILED:
        print_error(session.error, debug=False)
        sys.exit(1)
    print(f"\nprogram {session.state.value}")


# ---------- ARGUMENTS ----------
def take_flag(args, flag):
    if flag in args:
        args.remove(flag)
        return True
    return False


def take_values(args, option):
    values = []
    while option in args:
        i = args.index(option)
        if i + 1 >= len(args):
            print(f"{option} expects a value")
            sys.exit(1)
        values.append(args[i + 1])
        del args[i:i + 2]
    return values


def take_int(args, option):
    values = take_values(args, option)
    if not values:
        return None
    try:
        return int(values[-1])
    except ValueError:
        print(f"{option} expects an integer, got {values[-1]}")
        sys.exit(1)


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    debug = take_flag(args, "--traceback")
    verbose = take_flag(args, "--verbose")

    just_fix_windows_console()
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    if len(args) < 2:
        print(USAGE)
        sys.exit(1)

    cmd, path, extra = args[0], args[1], args[2:]

    if cmd in ("tokens", "parse"):
        if extra:
            print(f"{cmd} does not accept extra arguments.")
            sys.exit(1)
        if cmd == "tokens":
            cmd_tokens(path, debug=debug)
        else:
            cmd_parse(path, debug=debug)
    elif cmd == "run":
        inputs = take_values(extra, "--input")
        trace = take_flag(extra, "--trace")
        max_steps = take_int(extra, "--max-steps")
        seed = take_int(extra, "--seed")
        if extra:
            print(f"Unknown arguments: {' '.join(extra)}")
            sys.exit(1)
        cmd_run(path, debug=debug, inputs=inputs, trace=trace, max_steps=max_steps, seed=seed)
    elif cmd == "debug":
        breaks = []
        for value in take_values(extra, "--break"):
            if not value.isdigit():
                print(f"--break expects a line number, got {value}")
                sys.exit(1)
            breaks.append(int(value))
        if extra:
            print(f"Unknown arguments: {' '.join(extra)}")
            sys.exit(1)
        cmd_debug(path, debug=debug, breakpoints=breaks)
    else:
        print(f"Unknown command: {cmd}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
