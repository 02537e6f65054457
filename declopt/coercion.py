"""
Value coercion: raw value substring → typed value.

Rules
- switches consume nothing; presence alone yields their const (True unless
  declared otherwise).
- integers: the whole substring must be an optionally signed run of decimal
  digits (no whitespace, no radix prefix, nothing trailing). A leading '-' on an
  unsigned target is a range error, not a format error.
- decimals: the whole substring must follow the decimal/exponential grammar.
  Range is checked on the exact decimal value, so both overflow and underflow
  to zero are reported instead of silently becoming inf or 0.0.
- text: the substring verbatim, or whatever the option's converter returns.
  A converter signals rejection with ValueError or TypeError.

Every failure is a CoercionError subclass carrying the option name, the raw
value and the original token; range errors also carry the bounds.
"""
import re
from decimal import Decimal

from .faults import InvalidValueError, MissingValueError, NotANumberError, OutOfRangeError
from .kinds import Kind

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INFINITY = re.compile(r"[+-]?inf(?:inity)?", re.IGNORECASE)
_NONZERO = re.compile(r"[1-9]")


def _not_a_number(option, raw, token):
    return NotANumberError(
        "option %r: %r is not %s %s: %s" % (
            option.name, raw, "an" if option.kind is Kind.INT else "a", option.kind.label, token
        ),
        name=option.name,
        token=token,
        value=raw,
        hint="write the value as a plain %s right after the spelling (for example: %s%s)" % (
            option.kind.label, option.spellings[0], "42" if option.kind is Kind.INT else "0.5"
        ),
    )


def _out_of_range(option, raw, token):
    bounds = option.bounds
    return OutOfRangeError(
        "option %r: out of range %s %r (must be %s): %s" % (option.name, option.kind.label, raw, bounds, token),
        name=option.name,
        token=token,
        value=raw,
        bounds=(bounds.low, bounds.high),
        hint=f"pick a value {bounds}",
    )


def _integer(option, raw, token):
    if not _INTEGER.fullmatch(raw):
        raise _not_a_number(option, raw, token)
    if raw.startswith("-") and not option.signed:
        raise _out_of_range(option, raw, token)
    # int() caps digit runs at 4300, leading zeros included
    digits = raw.lstrip("+-").lstrip("0") or "0"
    if len(digits) > len(str(max(-option.bounds.low, option.bounds.high))):
        raise _out_of_range(option, raw, token)
    if (value := int(digits) * (-1 if raw.startswith("-") else 1)) not in option.bounds:
        raise _out_of_range(option, raw, token)
    return value


def _decimal(option, raw, token):
    if _INFINITY.fullmatch(raw):
        raise _out_of_range(option, raw, token)
    if not _DECIMAL.fullmatch(raw):
        raise _not_a_number(option, raw, token)
    if not _NONZERO.search(re.split(r"[eE]", raw)[0]):
        return float(raw)
    try:
        # copy_abs() is exact and ignores the decimal context traps
        magnitude = Decimal(raw).copy_abs()
    except ArithmeticError:
        # exponent too wide even for Decimal
        raise _out_of_range(option, raw, token) from None
    if magnitude > Decimal(option.bounds.high) or magnitude < Decimal(option.bounds.tiny):
        raise _out_of_range(option, raw, token)
    return float(raw)


def coerce(option, raw, token):
    """
    convert the value substring of a token for the given option.

    parameters
    - option: the Option the token was matched to (kind, name and bounds are read).
    - raw: the token with the matched spelling stripped ("" for switches).
    - token: the original token, for messages.

    returns
    - bool | int | float | str according to option.kind, the switch const, or
      the converter result.

    raises
    - MissingValueError: empty substring on a value-bearing kind.
    - NotANumberError: malformed integer or decimal.
    - OutOfRangeError: magnitude outside the option's bounds.
    - InvalidValueError: the converter rejected the text.
    """
    if option.kind is Kind.BOOL:
        return option.const

    if not raw:
        raise MissingValueError(
            "option %r: missing %s value: %s" % (option.name, option.kind.label, token),
            name=option.name,
            token=token,
            value=raw,
            hint="attach the value directly to the spelling (for example: %s%s)" % (
                token, option.marker
            ),
        )

    match option.kind:
        case Kind.INT:
            return _integer(option, raw, token)
        case Kind.DECIMAL:
            return _decimal(option, raw, token)
        case Kind.TEXT if option.convert is None:
            return raw
        case Kind.TEXT:
            try:
                return option.convert(raw)
            except (ValueError, TypeError) as error:
                raise InvalidValueError(
                    "option %r: cannot convert %r: %s" % (option.name, raw, token),
                    name=option.name,
                    token=token,
                    value=raw,
                    hint=str(error) or None,
                ) from error


__all__ = (
    "coerce",
)
