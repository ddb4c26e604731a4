import re

# (pattern over the bare error message, explanation template)
EXPLANATIONS = [
    (r"^unterminated string$",
     'A string was opened with " but not closed on the same line.'),
    (r"^unexpected character '(.+)'$",
     "The character '{0}' is not valid here. Check for a mistyped symbol."),
    (r"^variable '(.+)' not declared$",
     "The variable '{0}' is used but was not declared in a var section."),
    (r"^integer division by zero$",
     "div cannot take zero as divisor. Check the variable's value before dividing."),
    (r"^modulo by zero$",
     "mod cannot take zero as divisor. Check the variable's value before using mod."),
    (r"^division by zero$",
     "A number cannot be divided by zero. Check the variable's value before dividing."),
    (r"^invalid value for inteiro: '(.*)'$",
     "'{0}' is not a valid whole number. Type digits only."),
    (r"^invalid value for real: '(.*)'$",
     "'{0}' is not a valid real number. Use a point or a comma as decimal separator."),
    (r"^expected (\d+) argument\(s\), got (\d+)$",
     "The procedure or function expects {0} argument(s) but received {1}."),
    (r"^function '(.+)' not found$",
     "There is no function named '{0}'. Check the name and its declaration."),
    (r"^procedure '(.+)' not found$",
     "There is no procedure named '{0}'. Check the name and its declaration."),
    (r"^function '(.+)' did not return a value$",
     "The function '{0}' was called but some path through it has no retorne."),
    (r"^condition must be logical$",
     "The condition of se must be verdadeiro or falso, not a number or text."),
    (r"^expected 'fimalgoritmo'",
     "The algorithm is not closed properly. Check that fimalgoritmo is at the end."),
    (r"^expected '(.+?)'",
     "Expected '{0}' at this point. Check the structure of the algorithm."),
]

_COMPILED = [(re.compile(pattern), template) for pattern, template in EXPLANATIONS]


def explain_error(message: str) -> str | None:
    """Friendly explanation for an error message, or None if there is none."""
    for pattern, template in _COMPILED:
        m = pattern.search(message)
        if m:
            return template.format(*m.groups())
    return None
