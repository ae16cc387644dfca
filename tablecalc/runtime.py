import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable

from tablecalc.grammar import Action


@dataclass
class InternalError(Exception):
    errmsg: str

    def __str__(self) -> str:
        return f"[Internal error] {self.errmsg}"


@dataclass
class ValueStack:
    items: list[float] = field(default_factory=list)

    def push(self, value: float) -> None:
        self.items.append(value)

    def pop(self) -> float:
        if not self.items:
            raise InternalError("Value stack underflow")
        return self.items.pop()

    def clear(self) -> None:
        self.items.clear()

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return " ".join(format_value(v) for v in reversed(self.items))


def divide(a: float, b: float) -> float:
    """IEEE-754 division: a non-zero value over zero is a signed infinity, 0/0 is nan."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


UnaryActionImpl = Callable[[float], float]
BinaryActionImpl = Callable[[float, float], float]

unary_impls: dict[Action, UnaryActionImpl] = {
    Action.NEGATE: lambda a: -a,
}

binary_impls: dict[Action, BinaryActionImpl] = {
    Action.ADD: lambda a, b: a + b,
    Action.SUBTRACT: lambda a, b: a - b,
    Action.MULTIPLY: lambda a, b: a * b,
    Action.DIVIDE: divide,
}


def execute_action(action: Action, values: ValueStack, operand: float) -> float | None:
    """Runs `action` against the value stack.

    `operand` is the value of the most recently matched NUMBER. Returns the
    popped value for PRINT_RESULT, None for every other action.
    """
    if action in unary_impls:
        a = values.pop()
        values.push(unary_impls[action](a))
    elif action in binary_impls:
        b = values.pop()
        a = values.pop()
        values.push(binary_impls[action](a, b))
    elif action is Action.PUSH_OPERAND:
        values.push(operand)
    elif action is Action.PRINT_RESULT:
        return values.pop()
    else:
        raise InternalError(f"Unexpected action: {action}")
    return None


def format_value(value: float) -> str:
    """Shortest round-trip decimal form, never in exponent notation.

    Integral values drop the fractional part: 11.0 -> "11", -0.0 -> "-0", 1e20 -> "100000000000000000000".
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{Decimal(repr(value)).normalize():f}"
