"""
Argbind type coercion table.

What this module provides
- resolve(hint, field=...): map a field's declared type to a Coercion, the
  strategy turning textual values into typed field values.
- Coercion: parse(text), apply(target, name, text) for flags and
  load(target, name, text, separator) for environment variables.
- Scalar marker types for integer widths that Python does not distinguish
  natively: int64, uint and uint64 (typing.NewType over int).

Supported kinds
- bool                  1 t T TRUE true True / 0 f F FALSE false False
- str                   taken verbatim
- int, int64            signed 64-bit; decimal, 0x/0o/0b, legacy 0-octal, '_' separators
- uint, uint64          unsigned 64-bit; same syntax without sign
- float                 decimal, exponent, inf/nan, hexadecimal (0x1p-2)
- datetime.timedelta    duration strings such as "300ms", "1h30m", "-1.5s"
- text codecs           any class offering to_text() and from_text()
- list[T]               repeatable: each occurrence appends one T
- subclasses of str/int/float/timedelta coerce through their base kind and are
  rebuilt with their own constructor (IntEnum, str-based identifiers, ...).

Text codecs
- to_text(self) -> str renders the value.
- from_text parses it, in one of two forms:
  • value form: a classmethod/staticmethod returning a new value,
  • in-place form: an instance method filling self. The table always builds a
    fresh instance with cls() before calling it, so two coerced values never
    share storage.
- The codec check comes first: a str subclass with the pair is a codec.
- from_text reports bad text by raising ValueError.

Failures
- Unsupported declared types raise TypeError (a developer mistake, reported
  with the field name and the type).
- Malformed text raises ValueError with a short reason; the parser wraps it
  into the fault matching where the text came from.
"""
import inspect
import math
import re
import typing
from datetime import timedelta
from fractions import Fraction

from .utils import *

int64 = typing.NewType("int64", int)
uint = typing.NewType("uint", int)
uint64 = typing.NewType("uint64", int)

_BOOLEANS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}

# Units accepted in duration strings, in nanoseconds.
_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek small letter mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 60 * 60 * 1_000_000_000,
}

_COMPONENT = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<fraction>[0-9]*))?(?P<unit>[^0-9.]*)")


def _parse_bool(text, /):
    try:
        return _BOOLEANS[text]
    except KeyError:
        raise ValueError("invalid syntax") from None


def _parse_integer(text, /, *, signed):
    """
    parse a 64-bit integer literal (signed or unsigned).

    accepted forms mirror source-code literals: decimal, 0x/0o/0b prefixes,
    a leading zero meaning octal, and '_' between digits. unsigned kinds
    reject any sign, including '+'.
    """
    body = text
    negative = False
    if signed and body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]

    if not body or not body.isascii() or body != body.strip() or body[0] in "+-":
        raise ValueError("invalid syntax")

    try:
        if re.fullmatch(r"0(_?[0-7])+", body):
            value = int(body[1:].lstrip("_"), 8)
        else:
            value = int(body, 0)
    except ValueError:
        raise ValueError("invalid syntax") from None

    value = -value if negative else value
    if signed and not -(1 << 63) <= value < (1 << 63):
        raise ValueError("value out of range")
    if not signed and not 0 <= value < (1 << 64):
        raise ValueError("value out of range")
    return value


def _parse_float(text, /):
    """
    parse a float literal.

    besides decimal, exponent and inf/nan forms, hexadecimal mantissas are
    accepted but need a 'p' exponent (0x1p-2); '_' separators are only
    allowed together with a base prefix.
    """
    if not text or not text.isascii() or text != text.strip():
        raise ValueError("invalid syntax")
    body = text[1:] if text[0] in "+-" else text
    hexadecimal = body[:2].lower() == "0x"
    if "_" in body and not hexadecimal:
        raise ValueError("invalid syntax")
    if hexadecimal and "p" not in body.lower():
        raise ValueError("invalid syntax")
    try:
        if hexadecimal:
            value = float.fromhex(text.replace("_", ""))
        else:
            value = float(text)
    except (ValueError, OverflowError):
        raise ValueError("invalid syntax") from None
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError("value out of range")
    return value


def _parse_duration(text, /):
    """
    parse a duration string into a timedelta.

    grammar: optional sign, then one or more <number><unit> components where
    number is decimal with an optional fraction ("1", "1.5", ".5", "1.") and
    unit is one of ns, us, µs, μs, ms, s, m, h. "0" alone needs no unit.
    the magnitude is bounded to the signed 64-bit nanosecond range and the
    result is truncated to microseconds (timedelta resolution).
    """
    body = text
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError("invalid duration")

    total = Fraction(0)
    position = 0
    while position < len(body):
        match = _COMPONENT.match(body, position)
        whole, fraction, unit = match["whole"], match["fraction"], match["unit"]
        if not whole and not fraction:
            raise ValueError("invalid duration")
        if not unit:
            raise ValueError("missing unit in duration")
        try:
            scale = _UNITS[unit]
        except KeyError:
            raise ValueError("unknown unit %r in duration" % unit) from None
        number = Fraction(int(whole or "0"))
        if fraction:
            number += Fraction(int(fraction), 10 ** len(fraction))
        total += number * scale
        position = match.end()

    if total > ((1 << 63) if negative else (1 << 63) - 1):
        raise ValueError("invalid duration")
    return timedelta(microseconds=int((-total if negative else total) / 1000))


# Scalar kinds, keyed by the exact declared type. NewTypes are distinct keys.
_SCALARS = {
    bool: ("bool", _parse_bool),
    str: ("str", str),
    int: ("int", lambda text: _parse_integer(text, signed=True)),
    int64: ("int64", lambda text: _parse_integer(text, signed=True)),
    uint: ("uint", lambda text: _parse_integer(text, signed=False)),
    uint64: ("uint64", lambda text: _parse_integer(text, signed=False)),
    float: ("float", _parse_float),
    timedelta: ("duration", _parse_duration),
}


def _codec(hint, /):
    """
    return a converter for text-codec classes, or None.

    the value form (from_text bound to the class) is preferred; the in-place
    form (from_text bound to instances) always fills a fresh cls() instance.
    """
    if not isinstance(hint, type):
        return None
    render = inspect.getattr_static(hint, "to_text", None)
    parse = inspect.getattr_static(hint, "from_text", None)
    if render is None or parse is None or not callable(getattr(hint, "to_text")):
        return None

    if isinstance(parse, classmethod | staticmethod):
        @rename("from_text")
        def convert(text, /):
            return hint.from_text(text)
        return convert

    if callable(parse):
        @rename("from_text")
        def convert(text, /):
            value = hint()
            value.from_text(text)
            return value
        return convert

    return None


def _subclass(hint, /):
    """
    return a converter for subclasses of the scalar kinds, or None.
    """
    if not isinstance(hint, type):
        return None
    for base in (str, int, float, timedelta):
        if hint is not base and issubclass(hint, base):
            kind, parse = _SCALARS[base]

            @rename(kind)
            def convert(text, /):
                return hint(parse(text))
            return convert
    return None


class Coercion:
    """
    Strategy reading textual values into one field.

    A Coercion is resolved once per field for one parse call and never changes
    during it. Repeatable coercions wrap an element coercion and append; all
    others assign.
    """
    __slots__ = ("_hint", "_kind", "_convert", "_element")

    hint = mirror("hint")
    kind = mirror("kind")

    def __init__(self, hint, kind, convert=None, /, element=None):
        self._hint = hint
        self._kind = kind
        self._convert = convert
        self._element = element

    @property
    def element(self):
        return self._element

    @property
    def boolean(self):
        """
        Whether the flag is presence-only (-b means true, values go inline).
        """
        return self._kind == "bool"

    @property
    def repeatable(self):
        return self._element is not None

    def parse(self, text, /):
        """
        Convert one textual value (one element for repeatable coercions).
        """
        if self._element is not None:
            return self._element.parse(text)
        return self._convert(text)

    def apply(self, target, name, text, /):
        """
        Store a flag value: assign scalars, append to repeatable fields.

        Appending always builds a new list so that a default shared at class
        level (or between instances) is never mutated.
        """
        value = self.parse(text)
        if self._element is not None:
            value = [*(getattr(target, name, None) or ()), value]
        setattr(target, name, value)

    def load(self, target, name, text, separator=",", /):
        """
        Store an environment value: repeatable fields are split on the
        separator and replaced as a whole.
        """
        if self._element is not None:
            setattr(target, name, [self._element.parse(part) for part in text.split(separator)])
        else:
            setattr(target, name, self.parse(text))

    def __repr__(self):
        return f"coercion({typename(self._hint)})"


def resolve(hint, /, *, field):
    """
    Resolve the coercion strategy of a declared field type.

    order of checks
    1. text codec (to_text + from_text), on the type itself,
    2. exact scalar kinds (bool, str, int, int64, uint, uint64, float, timedelta),
    3. list[T] with T resolved by these same rules (but not itself a list),
    4. subclasses of str/int/float/timedelta.

    Raises
    - TypeError naming the field and the type when nothing applies.
    """
    if (convert := _codec(hint)) is not None:
        return Coercion(hint, "codec", convert)

    try:
        kind, convert = _SCALARS[hint]
    except (KeyError, TypeError):
        pass
    else:
        return Coercion(hint, kind, convert)

    if typing.get_origin(hint) is list:
        arguments = typing.get_args(hint)
        if len(arguments) == 1:
            try:
                element = resolve(arguments[0], field=field)
            except TypeError:
                element = None
            if element is not None and not element.repeatable:
                return Coercion(hint, "list", element=element)

    if (convert := _subclass(hint)) is not None:
        return Coercion(hint, convert.__name__, convert)

    raise TypeError(f"unsupported field type {typename(hint)} for field {field!r}")


__all__ = (
    "int64",
    "uint",
    "uint64",
    "Coercion",
    "resolve",
)
