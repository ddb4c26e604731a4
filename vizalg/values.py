"""Runtime values of the language.

A value is a plain Python ``int``, ``float``, ``str`` or ``bool`` (``VizValue``).
The declared types ``inteiro``, ``real``, ``caractere`` and ``logico`` fix how a
value is converted when it is stored; the helpers here implement those
conversions, the canonical text rendering and the parsing of ``leia`` input.
"""

import math
import re

from vizalg.errors import VizRuntimeError

VizValue = int | float | str | bool

TRUE_WORD = "VERDADEIRO"
FALSE_WORD = "FALSO"

# inteiro is a signed 64-bit integer
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

DEFAULTS = {
    "inteiro": 0,
    "real": 0.0,
    "caractere": "",
    "logico": False,
}

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_REAL_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def default_for(var_type: str) -> VizValue:
    return DEFAULTS[var_type]


def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_integer(value, line=None):
    """Pass ``value`` through, failing if it is an inteiro outside the 64-bit range."""
    if isinstance(value, int) and not isinstance(value, bool) and not INT_MIN <= value <= INT_MAX:
        raise VizRuntimeError("numeric overflow", line)
    return value


def type_name(value) -> str:
    if isinstance(value, bool):
        return "logico"
    if isinstance(value, int):
        return "inteiro"
    if isinstance(value, float):
        return "real"
    return "caractere"


def stringify(value: VizValue) -> str:
    if isinstance(value, bool):
        return TRUE_WORD if value else FALSE_WORD
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def truthy(value: VizValue) -> bool:
    return bool(value)


def _text_to_number(text: str, var_type: str, line):
    s = text.strip()
    try:
        return int(s) if var_type == "inteiro" else float(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        raise VizRuntimeError(f"cannot convert '{text}' to {var_type}", line)


def coerce(value: VizValue, var_type: str, line=None) -> VizValue:
    if var_type == "inteiro":
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, str):
            value = _text_to_number(value, var_type, line)
        if isinstance(value, float) and not math.isfinite(value):
            raise VizRuntimeError(f"cannot convert {stringify(value)} to inteiro", line)
        return check_integer(math.trunc(value), line)

    if var_type == "real":
        if isinstance(value, str):
            value = _text_to_number(value, var_type, line)
        try:
            return float(value)
        except (OverflowError, ValueError):
            raise VizRuntimeError("numeric overflow", line) from None

    if var_type == "caractere":
        return stringify(value)

    if var_type == "logico":
        if isinstance(value, bool):
            return value
        return truthy(value)

    raise VizRuntimeError(f"unknown type '{var_type}'", line)


def parse_input(raw: str, var_type: str, line=None) -> VizValue:
    """Convert a line typed by the user into a value of ``var_type``."""
    if var_type == "inteiro":
        m = _INT_PREFIX.match(raw)
        if m is None:
            raise VizRuntimeError(f"invalid value for inteiro: '{raw}'", line)
        digits = m.group(1).lstrip("+-").lstrip("0")
        # int() refuses very long digit strings; anything past 19 digits is out of range anyway
        value = int(m.group(1)) if len(digits) <= 19 else INT_MAX + 1
        if not INT_MIN <= value <= INT_MAX:
            raise VizRuntimeError(f"invalid value for inteiro: '{raw}'", line)
        return value

    if var_type == "real":
        m = _REAL_PREFIX.match(raw.replace(",", ".", 1))
        if m is None:
            raise VizRuntimeError(f"invalid value for real: '{raw}'", line)
        return float(m.group(1))

    if var_type == "logico":
        return raw.strip().lower() == TRUE_WORD.lower()

    return raw
