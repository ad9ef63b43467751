"""
Argvector typed values: the closed set of scalar kinds and their textual conversions.

Overview
- Kind: string enumeration of every convertible scalar kind. Members are spelled
  after their C-family names ("int", "unsigned long", "long double", ...) so a kind
  may be given either as a member or as its spelling.
- TypedValue: immutable (kind, value) pair; the tag never changes once produced.
- convert(kind, text): pure textual → typed conversion, raising ConversionError faults.
- converter(kind): the bound conversion rule for a kind (used by Argument.validate()).
- accepts(kind, value): strict membership check used for declared defaults.

Conversion rules
- text: identity.
- integers: optional leading ASCII whitespace, optional sign, decimal digits; anything
  trailing is malformed. Values outside the kind's width are out of range, and
  unsigned kinds do not wrap negative numerals.
- floating point: optional leading ASCII whitespace, decimal/exponent numerals or
  inf/infinity/nan (any case). Finite numerals that overflow, and nonzero
  numerals that underflow to zero, are out of range.
  "float" rounds to single precision; "long double" is carried as a Decimal.
- boolean: case-sensitive true/yes/on/1 and false/no/off/0.
"""
import collections
import decimal
import math
import re
import struct
from enum import StrEnum

from .faults import FaultCode, MalformedValueError, OutOfRangeError, UnsupportedTypeError


class Kind(StrEnum):
    TEXT = "string"
    INT32 = "int"
    INT64 = "long"
    UINT64 = "unsigned long"
    WIDE_INT64 = "long long"
    WIDE_UINT64 = "unsigned long long"
    FLOAT32 = "float"
    FLOAT64 = "double"
    FLOAT128 = "long double"
    BOOLEAN = "bool"


TypedValue = collections.namedtuple("TypedValue", ("kind", "value"))

_RANGES = {
    Kind.INT32: (-2 ** 31, 2 ** 31 - 1),
    Kind.INT64: (-2 ** 63, 2 ** 63 - 1),
    Kind.UINT64: (0, 2 ** 64 - 1),
    Kind.WIDE_INT64: (-2 ** 63, 2 ** 63 - 1),
    Kind.WIDE_UINT64: (0, 2 ** 64 - 1),
}

# Largest decimal exponent of an x87 extended-precision long double.
_FLOAT128_EXPONENT = 4932

_TRUTHY = frozenset({"true", "yes", "on", "1"})
_FALSY = frozenset({"false", "no", "off", "0"})

# Leading blanks skipped by strtol/strtod: ASCII whitespace only.
_BLANKS = " \t\n\v\f\r"
# Widest range (unsigned 64-bit) has 20 decimal digits.
_MAX_DIGITS = 20

_INTEGER = re.compile(r"[ \t\n\v\f\r]*[+-]?[0-9]+")
_FLOATING = re.compile(
    r"[ \t\n\v\f\r]*[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE
)
_INFINITE = re.compile(r"inf", re.IGNORECASE)
_NONZERO = re.compile(r"[1-9]")


def _malformed(kind, text, cause):
    return MalformedValueError(
        "cannot convert %r to %s: %s" % (text, kind.value, cause),
        title="malformed value",
        code=FaultCode.MALFORMED_VALUE,
        input=text,
        kind=kind,
        cause=cause,
        hint="pass a valid %s value" % kind.value
    )


def _out_of_range(kind, text, cause):
    return OutOfRangeError(
        "cannot convert %r to %s: %s" % (text, kind.value, cause),
        title="value out of range",
        code=FaultCode.VALUE_OUT_OF_RANGE,
        input=text,
        kind=kind,
        cause=cause,
        hint="pass a smaller %s value" % kind.value
    )


def _text(kind, text):
    return text


def _integer(kind, text):
    if not _INTEGER.fullmatch(text):
        raise _malformed(kind, text, "invalid integer literal")
    lower, upper = _RANGES[kind]
    literal = text.lstrip(_BLANKS)
    sign = literal[0] if literal[0] in "+-" else ""
    digits = literal[len(sign):].lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        raise _out_of_range(kind, text, "expected a value between %d and %d" % (lower, upper))
    number = int(sign + digits)
    if not lower <= number <= upper:
        raise _out_of_range(kind, text, "expected a value between %d and %d" % (lower, upper))
    return number


def _single(number):
    # "=f" raises OverflowError where the native "f" format saturates to inf.
    return struct.unpack("=f", struct.pack("=f", number))[0]


def _floating(kind, text):
    if not _FLOATING.fullmatch(text):
        raise _malformed(kind, text, "invalid floating point literal")
    literal = text.lstrip(_BLANKS)
    nonzero = _NONZERO.search(literal.lower().partition("e")[0]) is not None

    if kind is Kind.FLOAT128:
        try:
            number = decimal.Decimal(literal)
        except decimal.InvalidOperation:
            raise _out_of_range(kind, text, "exponent exceeds %d" % _FLOAT128_EXPONENT) from None
        if number.is_finite() and number and abs(number.adjusted()) > _FLOAT128_EXPONENT:
            raise _out_of_range(kind, text, "exponent exceeds %d" % _FLOAT128_EXPONENT)
        return number

    number = float(literal)
    if kind is Kind.FLOAT32 and math.isfinite(number):
        try:
            number = _single(number)
        except OverflowError:
            raise _out_of_range(kind, text, "overflows a %s" % kind.value) from None
    if math.isinf(number) and not _INFINITE.search(literal):
        raise _out_of_range(kind, text, "overflows a %s" % kind.value)
    if number == 0 and nonzero:
        raise _out_of_range(kind, text, "underflows a %s" % kind.value)
    return number


def _boolean(kind, text):
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise _malformed(kind, text, "invalid boolean value %r" % text)


_CONVERTERS = {
    Kind.TEXT: _text,
    Kind.INT32: _integer,
    Kind.INT64: _integer,
    Kind.UINT64: _integer,
    Kind.WIDE_INT64: _integer,
    Kind.WIDE_UINT64: _integer,
    Kind.FLOAT32: _floating,
    Kind.FLOAT64: _floating,
    Kind.FLOAT128: _floating,
    Kind.BOOLEAN: _boolean,
}


def resolve(kind, /):
    """
    Return the Kind member for a member or its spelling; None when unknown.
    """
    try:
        return Kind(kind)
    except (TypeError, ValueError):
        return None


def converter(kind, /):
    """
    Bind the conversion rule of a kind.

    Returns a callable text -> TypedValue. Unknown kinds raise UnsupportedTypeError.
    """
    if (resolved := resolve(kind)) is None:
        raise UnsupportedTypeError(
            "unsupported type %r" % (kind,),
            title="unsupported type",
            code=FaultCode.UNSUPPORTED_TYPE,
            kind=kind,
            hint="use one of: %s" % ", ".join(repr(member.value) for member in Kind)
        )
    rule = _CONVERTERS[resolved]

    def convert(text, /):
        if not isinstance(text, str):
            raise TypeError("convert() argument must be a string")
        return TypedValue(resolved, rule(resolved, text))

    return convert


def convert(kind, text, /):
    """
    Convert a textual token into a TypedValue of the given kind.

    Raises
    - UnsupportedTypeError: unknown kind.
    - MalformedValueError: the text is not a literal of the kind.
    - OutOfRangeError: the literal does not fit the kind.
    """
    return converter(kind)(text)


def accepts(kind, value, /):
    """
    Tell whether value is a legitimate payload of kind (no coercion).

    A TypedValue must carry exactly this kind; plain values must have the kind's
    payload type (bool is not an integer here) and fit its range.
    """
    if (kind := resolve(kind)) is None:
        return False
    if isinstance(value, TypedValue):
        return value.kind is kind and accepts(kind, value.value)

    match kind:
        case Kind.TEXT:
            return isinstance(value, str)
        case Kind.BOOLEAN:
            return isinstance(value, bool)
        case Kind.FLOAT32 | Kind.FLOAT64:
            if not isinstance(value, float):
                return False
            if kind is Kind.FLOAT32 and math.isfinite(value):
                try:
                    return not (value and not _single(value))
                except OverflowError:
                    return False
            return True
        case Kind.FLOAT128:
            if not isinstance(value, decimal.Decimal):
                return False
            return not (value.is_finite() and value and abs(value.adjusted()) > _FLOAT128_EXPONENT)
        case _:
            lower, upper = _RANGES[kind]
            return isinstance(value, int) and not isinstance(value, bool) and lower <= value <= upper


def normalize(kind, value, /):
    """
    Store an accepted payload the way convert() would produce it.

    "float" payloads are rounded to single precision; every other payload is
    returned unchanged. Call accepts() first.
    """
    if isinstance(value, TypedValue):
        value = value.value
    if resolve(kind) is Kind.FLOAT32 and math.isfinite(value):
        return _single(value)
    return value


__all__ = (
    "Kind",
    "TypedValue",
    "resolve",
    "converter",
    "convert",
    "accepts",
    "normalize",
)
