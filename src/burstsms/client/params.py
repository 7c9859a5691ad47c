"""Query-parameter serialization for Burst SMS requests.

Every API argument is a ``(name, value)`` pair whose value may be absent.
The rules implemented here are:

* ``None`` -- the parameter is omitted entirely.
* Scalars -- rendered in a locale-independent canonical form: ``true`` /
  ``false`` for booleans, the wire token for enumerations, ``repr`` for
  floats, UTC ``YYYY-MM-DD HH:MM:SS`` for datetimes.
* Lists and tuples -- each element rendered as a scalar, then comma-joined
  in the original order. An empty list is sent as an empty string.

Custom list fields use the provider's dual addressing: keys of one or two
decimal digits become ``field_<key>``, anything else ``field.<key>``.

URL-encoding is left to :mod:`httpx`.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

Scalar = Union[str, int, float, bool, enum.Enum, datetime]
ParamValue = Union[Scalar, list, tuple, None]
Param = tuple[str, ParamValue]

_NUMBERED_FIELD = re.compile(r"[0-9]{1,2}")
_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_wire(value: Scalar) -> str:
    """Return the canonical textual form of a single scalar.

    Raises:
        TypeError: If *value* is not a supported scalar type.
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime(_DATETIME_FORMAT)
    raise TypeError(f"Cannot serialize {type(value).__name__} as a query parameter")


def serialize(name: str, value: ParamValue) -> Optional[tuple[str, str]]:
    """Serialize one parameter, returning ``None`` when it should be omitted."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return name, ",".join(to_wire(item) for item in value)
    return name, to_wire(value)


def build_query(params: Iterable[Param]) -> list[tuple[str, str]]:
    """Serialize *params* in order, dropping absent values."""
    query: list[tuple[str, str]] = []
    for name, value in params:
        entry = serialize(name, value)
        if entry is not None:
            query.append(entry)
    return query


def field_param_name(key: Union[str, int]) -> str:
    """Map a custom field key to its query parameter name.

    Example::

        field_param_name("3")         # "field_3"
        field_param_name("birthday")  # "field.birthday"
    """
    key = str(key)
    if _NUMBERED_FIELD.fullmatch(key):
        return f"field_{key}"
    return f"field.{key}"


def custom_field_params(fields: Optional[Mapping[Union[str, int], Any]]) -> list[Param]:
    """Expand a custom field mapping into ordered ``field_N`` / ``field.name`` params."""
    if not fields:
        return []
    return [(field_param_name(key), value) for key, value in fields.items()]


def list_field_params(names: Optional[Iterable[str]]) -> list[Param]:
    """Name the custom fields of a new list positionally as ``field_1`` .. ``field_N``."""
    if names is None:
        return []
    return [(f"field_{index}", name) for index, name in enumerate(names, start=1)]
