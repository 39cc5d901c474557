# =============================================================================
# gymtrack_core/models/base.py
# Record Base Class and Field-Name Conversion
# =============================================================================
"""
Base class for plain domain records.

Records are dataclasses with snake_case attributes. Their serialized form
(local cache, document store) uses camelCase keys:

    >>> SetEntry(id="s1", set_number=1).to_dict()["setNumber"]
    1

`from_dict` walks the type hints of the dataclass so nested records,
lists of records and enums are rebuilt from plain JSON values.
"""

from __future__ import annotations
import dataclasses
import re
import sys
import typing
from enum import Enum
from typing import Any, Dict, Type, TypeVar, Union

R = TypeVar("R", bound="Record")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_camel(name: str) -> str:
    """snake_case -> camelCase"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name: str) -> str:
    """camelCase -> snake_case"""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def _encode(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    return value


def _decode(hint: Any, value: Any) -> Any:
    if value is None:
        return None

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin is Union:
        inner = [a for a in args if a is not type(None)]
        return _decode(inner[0], value) if len(inner) == 1 else value

    if origin in (list, typing.List):
        item_hint = args[0] if args else Any
        return [_decode(item_hint, v) for v in value]

    if origin in (dict, typing.Dict):
        return dict(value)

    if isinstance(hint, type):
        if issubclass(hint, Enum):
            return hint(value)
        if issubclass(hint, Record):
            return hint.from_dict(value)
        if hint is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)

    return value


class Record:
    """Mixin for dataclass records with camelCase (de)serialization."""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready dict with camelCase keys"""
        return {
            to_camel(f.name): _encode(getattr(self, f.name))
            for f in dataclasses.fields(self)
        }

    @classmethod
    def from_dict(cls: Type[R], data: Dict[str, Any]) -> R:
        """
        Build a record from a camelCase (or snake_case) dict.

        Unknown keys are ignored; missing keys fall back to field defaults.
        """
        hints = typing.get_type_hints(cls, vars(sys.modules[cls.__module__]))
        kwargs = {}

        for f in dataclasses.fields(cls):
            camel = to_camel(f.name)
            if camel in data:
                raw = data[camel]
            elif f.name in data:
                raw = data[f.name]
            else:
                continue
            kwargs[f.name] = _decode(hints[f.name], raw)

        return cls(**kwargs)

    def replace(self: R, **changes: Any) -> R:
        """Return a copy with the given attributes changed"""
        return dataclasses.replace(self, **changes)
