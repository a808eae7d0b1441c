"""Input validation and normalization utilities shared by the calculators."""

from __future__ import annotations

import re
import sys
from dataclasses import is_dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Type, TypeVar

from eventcarbon.utils.errors import EnumerationError, RangeError, ShapeError

E = TypeVar('E', bound=Enum)

_MISSING = object()

# Largest magnitude that still reports back as a finite JSON number.
MAX_NUMBER = Decimal(sys.float_info.max)


def require_entries(value: Any, name: str) -> List[Any]:
    """Return ``value`` as a list, or raise if it is not a non-empty sequence."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ShapeError(f'{name} must be a non-empty list', field=name, value=value)
    if len(value) == 0:
        raise ShapeError(f'{name} must be a non-empty list', field=name, value=value)
    return list(value)


def require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ShapeError(f'{name} must be an object', field=name, value=value)
    return value


def require_record(value: Any, index: Optional[int] = None) -> Any:
    """Entries must be mappings or dataclass instances."""
    if isinstance(value, Mapping) or (is_dataclass(value) and not isinstance(value, type)):
        return value
    raise ShapeError('entry must be an object', index=index, value=value)


def get_field(container: Any, name: str) -> Any:
    """Read ``name`` (snake_case) from a mapping or an object.

    Mappings are looked up by the camelCase key first, then the snake_case one,
    so both JSON payloads and Python keyword-style dicts are accepted.
    """
    if isinstance(container, Mapping):
        value = container.get(_camel(name), _MISSING)
        if value is _MISSING:
            value = container.get(name, None)
        return value
    return getattr(container, name, None)


def parse_enum(enum_cls: Type[E], value: Any, field: str,
               index: Optional[int] = None, label: Optional[str] = None) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            pass
    valid = ', '.join(member.value for member in enum_cls)
    raise EnumerationError(
        f'unknown {label or field} "{value}". Valid values: {valid}',
        index=index, field=field, value=value,
    )


def optional_number(container: Any, field: str, index: Optional[int] = None,
                    allow_zero: bool = True) -> Optional[Decimal]:
    """Read a non-negative (or positive) finite number, or None when absent."""
    value = get_field(container, field)
    if value is None:
        return None
    return check_number(value, field, index, allow_zero)


def require_number(container: Any, field: str, index: Optional[int] = None,
                   allow_zero: bool = True) -> Decimal:
    value = get_field(container, field)
    if value is None:
        raise RangeError(f'{_camel(field)} is required', index=index, field=field, value=None)
    return check_number(value, field, index, allow_zero)


def check_number(value: Any, field: str, index: Optional[int] = None,
                 allow_zero: bool = True) -> Decimal:
    name = _camel(field)
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise RangeError(f'{name} must be a number, got {value!r}',
                         index=index, field=field, value=value)
    number = _to_decimal(value)
    if not number.is_finite():
        raise RangeError(f'{name} must be a finite number, got {value}',
                         index=index, field=field, value=value)
    if abs(number) > MAX_NUMBER:
        raise RangeError(f'{name} is out of range, got {number:.3e}',
                         index=index, field=field, value=str(number))
    if number < 0 or (not allow_zero and number == 0):
        bound = '>= 0' if allow_zero else '> 0'
        raise RangeError(f'{name} must be {bound}, got {value}',
                         index=index, field=field, value=value)
    return number


def require_positive_int(value: Any, field: str, index: Optional[int] = None) -> int:
    """Positive whole number; integral floats and Decimals such as 150.0 are accepted."""
    name = _camel(field)
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise RangeError(f'{name} must be a positive integer, got {value!r}',
                         index=index, field=field, value=value)
    number = check_number(value, field, index, allow_zero=False)
    if number != number.to_integral_value():
        raise RangeError(f'{name} must be a positive integer, got {value!r}',
                         index=index, field=field, value=value)
    return int(number)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def _camel(name: str) -> str:
    return re.sub(r'_([a-z0-9])', lambda m: m.group(1).upper(), name)
