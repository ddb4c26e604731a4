from dataclasses import dataclass

from vizalg.errors import VizRuntimeError
from vizalg.values import coerce, default_for, stringify


@dataclass
class Variable:
    type: str
    value: object


@dataclass(frozen=True)
class VarSnapshot:
    name: str
    type: str
    value: str  # already rendered for display


class Environment:
    """A scope: the global one, or the local scope of a single call.

    Call scopes always have the global scope as parent, so a chain is never
    more than two levels deep.
    """

    def __init__(self, parent=None):
        self.store: dict[str, Variable] = {}
        self.parent = parent

    def declare(self, name, var_type, value=None, line=None):
        if value is None:
            value = default_for(var_type)
        else:
            value = coerce(value, var_type, line)
        self.store[name] = Variable(var_type, value)

    def lookup(self, name):
        if name in self.store:
            return self.store[name]
        if self.parent is not None:
            return self.parent.lookup(name)
        return None

    def get(self, name, line=None) -> Variable:
        variable = self.lookup(name)
        if variable is None:
            raise VizRuntimeError(f"variable '{name}' not declared", line)
        return variable

    def set(self, name, value, line=None):
        variable = self.get(name, line)
        variable.value = coerce(value, variable.type, line)

    def snapshot(self) -> tuple[VarSnapshot, ...]:
        # innermost scope first; a local hides a global of the same name
        seen = set()
        result = []
        env = self
        while env is not None:
            for name, variable in env.store.items():
                if name in seen:
                    continue
                seen.add(name)
                result.append(VarSnapshot(name, variable.type, stringify(variable.value)))
            env = env.parent
        return tuple(result)
