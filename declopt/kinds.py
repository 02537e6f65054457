"""
Value kinds and numeric targets.

Kind is the closed set of value kinds an option can carry. Its member order is
also the order in which the parser offers a token to its option sets: switches
first, then integers, decimals and finally text.

Bounds describe the representable range of a numeric target:
- integers are declared by bit width and signedness (8/16/32/64 bits);
- decimals are declared by IEEE precision ("single" or "double").
"""
import functools
import sys
from enum import Enum
from typing import NamedTuple


class Kind(Enum):
    """
    closed tagged variant over the value kinds.

    attributes
    - marker: one-letter tag appended to spellings in help/usage ("" for switches).
    - label: word used in user-facing messages.
    - takes_value: whether tokens carry a value after the spelling.
    """
    BOOL = ("", "switch")
    INT = ("I", "integer")
    DECIMAL = ("D", "decimal")
    TEXT = ("T", "text")

    def __init__(self, marker, label):
        self.marker = marker
        self.label = label

    @property
    def takes_value(self):
        return self is not Kind.BOOL

    @property
    def python_type(self):
        return {
            Kind.BOOL: bool,
            Kind.INT: int,
            Kind.DECIMAL: float,
            Kind.TEXT: str,
        }[self]

    def __repr__(self):
        return f"Kind.{self.name}"


class Bounds(NamedTuple):
    low: int | float
    high: int | float
    # smallest non-zero magnitude, decimals only
    tiny: float = 0.0

    def __contains__(self, value):
        return self.low <= value <= self.high

    def __str__(self):
        return f"between {self.low} and {self.high}"


INTEGER_WIDTHS = (8, 16, 32, 64)
DECIMAL_PRECISIONS = ("single", "double")


@functools.cache
def integer_bounds(bits, signed):
    """
    Return the Bounds of an integer target.

    >>> integer_bounds(8, False)
    Bounds(low=0, high=255, tiny=0.0)
    >>> integer_bounds(16, True)
    Bounds(low=-32768, high=32767, tiny=0.0)
    """
    if bits not in INTEGER_WIDTHS:
        raise ValueError(f"integer width must be one of {', '.join(map(str, INTEGER_WIDTHS))}")
    if signed:
        return Bounds(-(1 << (bits - 1)), (1 << (bits - 1)) - 1)
    return Bounds(0, (1 << bits) - 1)


@functools.cache
def decimal_bounds(precision):
    """
    Return the Bounds of a decimal target (max finite magnitude and smallest subnormal).
    """
    match precision:
        case "single":
            return Bounds(-3.4028234663852886e+38, 3.4028234663852886e+38, 1.401298464324817e-45)
        case "double":
            return Bounds(-sys.float_info.max, sys.float_info.max, 5e-324)
        case _:
            raise ValueError(f"decimal precision must be one of {', '.join(map(repr, DECIMAL_PRECISIONS))}")


__all__ = (
    "Kind",
    "Bounds",
    "integer_bounds",
    "decimal_bounds",
    "INTEGER_WIDTHS",
    "DECIMAL_PRECISIONS",
)
