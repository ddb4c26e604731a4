import math
from dataclasses import dataclass
from typing import Callable

from vizalg.errors import VizRuntimeError
from vizalg.values import INT_MAX, INT_MIN, parse_input, stringify


@dataclass(frozen=True)
class NativeFunction:
    name: str
    arity: int
    impl: Callable


def _copia(text, start, count):
    begin = max(int(start) - 1, 0)
    return text[begin:begin + max(int(count), 0)]


def _power(base, e):
    if isinstance(base, int) and isinstance(e, int) and e >= 0:
        # refuse before computing: a huge exponent would build an enormous int
        if abs(base) > 1 and e * math.log2(abs(base)) > 64:
            raise OverflowError("inteiro power out of range")
        return base ** e
    # math.pow raises ValueError where ** would return a complex
    return math.pow(base, e)


def _pos(sub, text):
    return text.index(sub) + 1 if sub in text else 0


def _text(value):
    if not isinstance(value, str):
        raise TypeError("text expected")
    return value


def _build_table():
    entries = [
        # arithmetic
        ("abs", 1, lambda rng, x: abs(x)),
        ("int", 1, lambda rng, x: math.trunc(x)),
        ("sqrt", 1, lambda rng, x: math.sqrt(x)),
        ("raizq", 1, lambda rng, x: math.sqrt(x)),
        ("quad", 1, lambda rng, x: x * x),
        ("exp", 2, lambda rng, base, e: _power(base, e)),
        ("log", 1, lambda rng, x: math.log(x)),
        ("logn", 1, lambda rng, x: math.log10(x)),
        ("sen", 1, lambda rng, x: math.sin(x)),
        ("cos", 1, lambda rng, x: math.cos(x)),
        ("tan", 1, lambda rng, x: math.tan(x)),
        ("pi", 0, lambda rng: math.pi),
        ("rand", 0, lambda rng: rng.random()),
        ("randi", 1, lambda rng, n: math.floor(rng.random() * n)),
        # text
        ("compr", 1, lambda rng, s: len(_text(s))),
        ("copia", 3, lambda rng, s, start, count: _copia(_text(s), start, count)),
        ("maiusc", 1, lambda rng, s: _text(s).upper()),
        ("minusc", 1, lambda rng, s: _text(s).lower()),
        ("pos", 2, lambda rng, sub, s: _pos(_text(sub), _text(s))),
        # conversion
        ("caracpnum", 1, lambda rng, v: parse_input(stringify(v), "real")),
        ("real", 1, lambda rng, v: parse_input(stringify(v), "real")),
        ("inteiro", 1, lambda rng, v: parse_input(stringify(v), "inteiro")),
        ("numcarac", 1, lambda rng, v: stringify(v)),
        ("numpcarac", 1, lambda rng, v: stringify(v)),
    ]
    return {name: NativeFunction(name, arity, impl) for name, arity, impl in entries}


NATIVES = _build_table()


def is_native(name: str) -> bool:
    return name in NATIVES


def call_native(name, args, rng, line=None):
    fn = NATIVES[name]
    if len(args) != fn.arity:
        raise VizRuntimeError(f"'{name}' expects {fn.arity} argument(s), got {len(args)}", line)

    for value in args:
        # logico values never take part in arithmetic or text natives
        if isinstance(value, bool) and name not in ("numcarac", "numpcarac"):
            raise VizRuntimeError(f"invalid argument for '{name}'", line)

    try:
        result = fn.impl(rng, *args)
    except VizRuntimeError as e:
        e.line = line
        raise
    except (ArithmeticError, ValueError, TypeError) as e:
        raise VizRuntimeError(f"invalid argument for '{name}'", line) from e

    if isinstance(result, int) and not INT_MIN <= result <= INT_MAX:
        raise VizRuntimeError(f"invalid argument for '{name}'", line)
    return result
