r"""
Ballast typed value coercion.

Overview
- Every parsed argument keeps its values as the raw strings the user typed.
  Reading a value back goes through coerce(kind, text, name), so the same parsed
  state can be reinterpreted as different kinds without parsing again.
- A Kind is a small named tuple: a family (boolean, character, integral,
  floating, string) plus the inclusive bounds of its width. One coercer per
  family is registered in _COERCERS; the kind only contributes its bounds.

Kinds
- BOOL, CHAR, STR
- INT (unbounded Python int), INT8, INT16, INT32, INT64
- UINT8, UINT16, UINT32, UINT64
- FLOAT16, FLOAT32, FLOAT64
- resolve() also accepts the builtins bool/str/int/float and kind names
  ("uint32", "float", ...).

Numeric reading
- Integral: like C strtoll/strtoull, leading whitespace is skipped and the
  longest leading decimal integer is read ("-9.5" -> -9, "12abc" -> 12).
  Unsigned kinds refuse a leading '-' before conversion, so "-5" is a range
  fault instead of silently wrapping into a huge positive value.
  Bounded kinds reject digit strings longer than their bounds before
  converting, so oversized input is a range fault rather than a conversion
  error. Only ASCII digits and whitespace are recognised.
- Floating: the longest leading decimal float (or inf/infinity/nan) is read as
  an extended-precision decimal.Decimal, range-checked against the width and
  returned as float. Infinities are range-checked like any other value and
  fail every width; NaN passes through.

Faults
- Coercers raise InvalidValueError subclasses built without a program name;
  the parser re-targets them with its own name before surfacing them.
"""
import decimal
import re
from enum import Enum
from typing import NamedTuple

from .faults import *


class Family(Enum):
    BOOLEAN = "boolean"
    CHARACTER = "character"
    INTEGRAL = "integral"
    FLOATING = "floating"
    STRING = "string"


class Kind(NamedTuple):
    """
    A target kind for coercion: its family and, for numeric families, its
    inclusive bounds (None means unbounded).
    """
    name: str
    family: Family
    lowest: int | float | None = None
    highest: int | float | None = None

    def __repr__(self):
        return "Kind(%s)" % self.name


def _signed(bits):
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def _unsigned(bits):
    return 0, (1 << bits) - 1


BOOL = Kind("bool", Family.BOOLEAN)
CHAR = Kind("char", Family.CHARACTER)
STR = Kind("str", Family.STRING)

INT = Kind("int", Family.INTEGRAL)
INT8 = Kind("int8", Family.INTEGRAL, *_signed(8))
INT16 = Kind("int16", Family.INTEGRAL, *_signed(16))
INT32 = Kind("int32", Family.INTEGRAL, *_signed(32))
INT64 = Kind("int64", Family.INTEGRAL, *_signed(64))
UINT8 = Kind("uint8", Family.INTEGRAL, *_unsigned(8))
UINT16 = Kind("uint16", Family.INTEGRAL, *_unsigned(16))
UINT32 = Kind("uint32", Family.INTEGRAL, *_unsigned(32))
UINT64 = Kind("uint64", Family.INTEGRAL, *_unsigned(64))

FLOAT16 = Kind("float16", Family.FLOATING, -65504.0, 65504.0)
FLOAT32 = Kind("float32", Family.FLOATING, -3.4028234663852886e+38, 3.4028234663852886e+38)
FLOAT64 = Kind("float64", Family.FLOATING, -1.7976931348623157e+308, 1.7976931348623157e+308)

_KINDS = {
    kind.name: kind
    for kind in (
        BOOL, CHAR, STR,
        INT, INT8, INT16, INT32, INT64,
        UINT8, UINT16, UINT32, UINT64,
        FLOAT16, FLOAT32, FLOAT64,
    )
}
_KINDS["float"] = FLOAT64

_BUILTINS = {
    bool: BOOL,
    str: STR,
    int: INT,
    float: FLOAT64,
}

_STRICT_BOOLEANS = {"true": True, "false": False}
_EXTENDED_BOOLEANS = _STRICT_BOOLEANS | {"yes": True, "no": False, "on": True, "off": False}

_INTEGRAL_PREFIX = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_FLOATING_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE | re.ASCII,
)


def resolve(kind, /):
    """
    Turn a kind designator into a Kind.

    Accepts a Kind, one of the builtins bool/str/int/float, or a kind name.
    Anything else is a programmer mistake and raises UnsupportedKindError.
    """
    if isinstance(kind, Kind):
        return kind
    if isinstance(kind, str):
        try:
            return _KINDS[kind.strip().lower()]
        except KeyError:
            raise UnsupportedKindError("unsupported kind %r" % kind) from None
    try:
        return _BUILTINS[kind]
    except (KeyError, TypeError):
        raise UnsupportedKindError("unsupported kind %r" % (kind,)) from None


def _bounds(kind):
    if kind.family is Family.FLOATING:
        return "[%g,%g]" % (kind.lowest, kind.highest)
    return "[%d,%d]" % (kind.lowest, kind.highest)


def _out_of_range(kind, name, text):
    return OutOfRangeError(
        "'%s' must be in range %s" % (name, _bounds(kind)),
        code=FaultCode.OUT_OF_RANGE,
        input=text,
        argument=name,
        kind=kind,
    )


def _coerce_boolean(kind, text, name, extended):
    literals = _EXTENDED_BOOLEANS if extended else _STRICT_BOOLEANS
    try:
        return literals[text]
    except KeyError:
        pass
    if extended:
        message = "'%s' must be one of: %s" % (name, ", ".join(map(repr, literals)))
    else:
        message = "'%s' must be either 'true' or 'false'" % name
    raise InvalidBooleanError(message, code=FaultCode.INVALID_BOOLEAN, input=text, argument=name, kind=kind)


def _coerce_character(kind, text, name, extended):
    if len(text) != 1:
        raise InvalidCharacterError(
            "'%s' must be a single character" % name,
            code=FaultCode.INVALID_CHARACTER,
            input=text,
            argument=name,
            kind=kind,
        )
    return text


def _coerce_integral(kind, text, name, extended):
    # unsigned widths refuse the sign up front; converting first would wrap
    if kind.lowest is not None and kind.lowest >= 0 and text.lstrip().startswith("-"):
        raise _out_of_range(kind, name, text)

    if not (match := _INTEGRAL_PREFIX.match(text)):
        raise InvalidIntegralError(
            "'%s' must be of integral type" % name,
            code=FaultCode.INVALID_INTEGRAL,
            input=text,
            argument=name,
            kind=kind,
        )

    sign = "-" if match[1].startswith("-") else ""
    digits = match[1].lstrip("+-").lstrip("0") or "0"
    if kind.lowest is not None:
        # longer than the widest bound is out of range without converting
        if len(digits) > len(str(max(-kind.lowest, kind.highest))):
            raise _out_of_range(kind, name, text)

    try:
        value = int(sign + digits)
    except ValueError:
        raise InvalidIntegralError(
            "'%s' has too many digits (%d) to be read as an integer" % (name, len(digits)),
            code=FaultCode.INVALID_INTEGRAL,
            input=text,
            argument=name,
            kind=kind,
        ) from None

    if kind.lowest is not None and not kind.lowest <= value <= kind.highest:
        raise _out_of_range(kind, name, text)
    return value


def _coerce_floating(kind, text, name, extended):
    if not (match := _FLOATING_PREFIX.match(text)):
        raise InvalidFloatingError(
            "'%s' must be of floating-point type" % name,
            code=FaultCode.INVALID_FLOATING,
            input=text,
            argument=name,
            kind=kind,
        )

    with decimal.localcontext(Emax=decimal.MAX_EMAX, Emin=decimal.MIN_EMIN) as context:
        context.traps[decimal.Overflow] = context.traps[decimal.Underflow] = False
        try:
            value = decimal.Decimal(match[1])
            if value.is_nan():
                return float(value)
            if not decimal.Decimal(kind.lowest) <= value <= decimal.Decimal(kind.highest):
                raise _out_of_range(kind, name, text)
        except decimal.InvalidOperation:
            # exponent beyond what decimal can represent at all
            raise _out_of_range(kind, name, text) from None
    return float(value)


def _coerce_string(kind, text, name, extended):
    return text


_COERCERS = {
    Family.BOOLEAN: _coerce_boolean,
    Family.CHARACTER: _coerce_character,
    Family.INTEGRAL: _coerce_integral,
    Family.FLOATING: _coerce_floating,
    Family.STRING: _coerce_string,
}


def coerce(kind, text, name, /, *, extended=False):
    """
    Convert one stored value into the requested kind.

    Parameters
    - kind: anything resolve() accepts.
    - text: the raw string recorded during matching.
    - name: argument name, quoted in fault messages.
    - extended: accept yes/no/on/off in addition to true/false for booleans.

    Raises
    - InvalidValueError subclasses (user-input faults, no program name yet).
    - UnsupportedKindError for an unknown kind designator.
    """
    kind = resolve(kind)
    if not isinstance(text, str):
        raise TypeError("coerce() 'text' must be a string")
    return _COERCERS[kind.family](kind, text, name, extended)


__all__ = (
    "Family",
    "Kind",
    "BOOL",
    "CHAR",
    "STR",
    "INT",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "FLOAT16",
    "FLOAT32",
    "FLOAT64",
    "resolve",
    "coerce",
)
