"""
Configuration value module.

Defines the tagged value stored in the shared container for every cached
configuration key, and the conversion rules used by the typed getters.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List

from configcache.config.core.exceptions import TypeMismatchError


class ValueKind(Enum):
    """Kinds of value a configuration key can be cached as."""
    ANY = 'any'
    STRING = 'string'
    BOOL = 'bool'
    INT = 'int'
    INT32 = 'int32'
    INT64 = 'int64'
    FLOAT64 = 'float64'
    DURATION = 'duration'
    STRING_SLICE = 'string_slice'


# Raw values cached untyped still satisfy a typed read when they already
# have the native type of the requested kind.
_NATIVE_TYPES = {
    ValueKind.STRING: (str,),
    ValueKind.BOOL: (bool,),
    ValueKind.INT: (int,),
    ValueKind.FLOAT64: (float,),
}


@dataclass(frozen=True)
class ConfigValue:
    """A converted configuration value tagged with the kind it was read as."""
    kind: ValueKind
    value: Any

    def as_kind(self, kind: ValueKind, key: str) -> Any:
        """
        Return the stored value for a read of the given kind.

        Args:
            kind: Kind requested by the caller
            key: Dotted key, used in the error message

        Returns:
            The stored value

        Raises:
            TypeMismatchError: If the value was cached as a different kind
        """
        if kind is ValueKind.ANY or kind is self.kind:
            return self.value

        if self.kind is ValueKind.ANY:
            native = _NATIVE_TYPES.get(kind)
            if native and isinstance(self.value, native):
                # bool is an int subclass, it never passes as an int
                if not (kind is ValueKind.INT and isinstance(self.value, bool)):
                    return self.value

        raise TypeMismatchError(key, self.kind, kind)


_BOOL_STRINGS = {
    '1': True, 't': True, 'T': True, 'TRUE': True, 'true': True, 'True': True,
    '0': False, 'f': False, 'F': False, 'FALSE': False, 'false': False, 'False': False,
}

_OCTAL_RE = re.compile(r'^[+-]?0[0-7_]+$')

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

_DURATION_UNITS = {
    'ns': NANOSECOND,
    'us': MICROSECOND,
    'µs': MICROSECOND,  # micro sign
    'μs': MICROSECOND,  # greek mu
    'ms': MILLISECOND,
    's': SECOND,
    'm': MINUTE,
    'h': HOUR,
}

_DURATION_PART_RE = re.compile(r'(\d*\.?\d*)([a-zµμ]+)')


def _wrap(value: int, bits: int) -> int:
    """Wrap an integer to a signed integer of the given width."""
    span = 2 ** bits
    half = 2 ** (bits - 1)
    return ((value + half) % span) - half


def _trim_zero_decimal(text: str) -> str:
    """Strip an all-zero decimal part ("8.00" -> "8")."""
    found_zero = False
    for i in range(len(text), 0, -1):
        char = text[i - 1]
        if char == '.':
            if found_zero:
                return text[:i - 1]
        elif char == '0':
            found_zero = True
        else:
            return text
    return text


def _parse_int(text: str) -> int:
    """Parse an integer literal with an optional base prefix, 0 on failure."""
    text = _trim_zero_decimal(text)
    if not text or text != text.strip():
        return 0
    try:
        if _OCTAL_RE.match(text):
            parsed = int(text, 8)
        else:
            parsed = int(text, 0)
    except ValueError:
        return 0
    if parsed < _INT64_MIN or parsed > _INT64_MAX:
        return 0
    return parsed


def parse_duration(text: str) -> int:
    """
    Parse a duration string such as "300ms", "1.5h" or "2h45m".

    Args:
        text: Signed sequence of decimal numbers, each with a unit suffix

    Returns:
        Duration in nanoseconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    original = text
    negative = False
    if text[:1] in ('-', '+'):
        negative = text[0] == '-'
        text = text[1:]

    if text == '0':
        return 0
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(text):
        match = _DURATION_PART_RE.match(text, pos)
        if not match:
            raise ValueError(f"invalid duration {original!r}")
        number, unit = match.groups()
        if number in ('', '.'):
            raise ValueError(f"invalid duration {original!r}")
        if unit not in _DURATION_UNITS:
            raise ValueError(f"unknown unit {unit!r} in duration {original!r}")
        total += Decimal(number) * _DURATION_UNITS[unit]
        pos = match.end()

    nanoseconds = int(total)
    if nanoseconds > _INT64_MAX:
        raise ValueError(f"invalid duration {original!r}")
    return -nanoseconds if negative else nanoseconds


def _nanoseconds_to_timedelta(nanoseconds: int) -> timedelta:
    """Convert nanoseconds to a timedelta, truncating toward zero."""
    if nanoseconds < 0:
        return -timedelta(microseconds=(-nanoseconds) // MICROSECOND)
    return timedelta(microseconds=nanoseconds // MICROSECOND)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return '+Inf' if value > 0 else '-Inf'
    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def to_string(value: Any) -> str:
    """Convert a raw value to a string; unsupported values give ""."""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return ''


def to_bool(value: Any) -> bool:
    """Convert a raw value to a bool; unrecognised strings give False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return _BOOL_STRINGS.get(value, False)
    return False


def to_int64(value: Any) -> int:
    """Convert a raw value to a 64-bit integer; unparseable values give 0."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int):
        return _wrap(value, 64)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return _wrap(int(value), 64)
    if isinstance(value, str):
        return _parse_int(value)
    return 0


def to_int(value: Any) -> int:
    return to_int64(value)


def to_int32(value: Any) -> int:
    return _wrap(to_int64(value), 32)


def to_float64(value: Any) -> float:
    """Convert a raw value to a float; unparseable values give 0.0."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def to_duration(value: Any) -> timedelta:
    """
    Convert a raw value to a timedelta.

    Numbers are read as nanoseconds. Strings are parsed as duration strings;
    a string with no unit letters is read as nanoseconds.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool) or value is None:
        return timedelta(0)
    if isinstance(value, (int, float)):
        return _nanoseconds_to_timedelta(to_int64(value))
    if isinstance(value, str):
        text = value
        if not any(char in text for char in 'nsuµmh'):
            text += 'ns'
        try:
            return _nanoseconds_to_timedelta(parse_duration(text))
        except (ValueError, InvalidOperation):
            return timedelta(0)
    return timedelta(0)


def to_string_slice(value: Any) -> List[str]:
    """Convert a raw value to a list of strings; strings split on whitespace."""
    if isinstance(value, (list, tuple)):
        return [to_string(item) for item in value]
    if isinstance(value, str):
        return value.split()
    return []


def to_any(value: Any) -> Any:
    return value


CONVERTERS: Dict[ValueKind, Callable[[Any], Any]] = {
    ValueKind.ANY: to_any,
    ValueKind.STRING: to_string,
    ValueKind.BOOL: to_bool,
    ValueKind.INT: to_int,
    ValueKind.INT32: to_int32,
    ValueKind.INT64: to_int64,
    ValueKind.FLOAT64: to_float64,
    ValueKind.DURATION: to_duration,
    ValueKind.STRING_SLICE: to_string_slice,
}
