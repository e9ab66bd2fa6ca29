"""
JSON Codec

Serializes cached values to JSON text and back using pydantic TypeAdapters,
so any type pydantic understands (models, dataclasses, TypedDicts, builtin
containers) can be cached without per-type plumbing.
"""

import dataclasses
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from ...core.config import get_settings
from ...infrastructure.redis.exceptions import CacheSerializationException

T = TypeVar("T")

_ANY_ADAPTER: TypeAdapter = TypeAdapter(Any)


@lru_cache(maxsize=256)
def _cached_adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def get_type_adapter(tp: Any) -> TypeAdapter:
    """Return a TypeAdapter for ``tp``, reusing one per hashable type."""
    try:
        hash(tp)
    except TypeError:
        return TypeAdapter(tp)
    return _cached_adapter(tp)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _required_field_names(value: Any) -> Optional[frozenset]:
    """Names of the fields of a model or dataclass instance without a default."""
    if isinstance(value, BaseModel):
        return frozenset(
            name
            for name, field in type(value).model_fields.items()
            if field.is_required()
        )
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return frozenset(
            f.name
            for f in dataclasses.fields(value)
            if f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        )
    return None


def _omit_nulls(value: Any, dumped: Any) -> Any:
    """
    Drop None entries from ``dumped``, the python-mode dump of ``value``.

    A required model or dataclass field keeps its None, since leaving it out
    would fail validation on read. Every other None entry is dropped.
    """
    if isinstance(dumped, dict):
        required = _required_field_names(value)
        if required is not None:
            return {
                name: _omit_nulls(getattr(value, name, None), item)
                for name, item in dumped.items()
                if item is not None or name in required
            }
        source = value if isinstance(value, Mapping) else {}
        return {
            k: _omit_nulls(source.get(k), item)
            for k, item in dumped.items()
            if item is not None
        }
    if isinstance(dumped, (list, tuple)) and isinstance(value, (list, tuple)):
        return type(dumped)(_omit_nulls(v, d) for v, d in zip(value, dumped))
    return dumped


class JsonCodec:
    """
    Encode values to JSON text and decode text into a requested type.

    With ``omit_null_fields`` enabled, None values are left out of the written
    document wherever absence reads back the same: mapping entries, and model
    or dataclass fields that declare a default. A required field holding None
    is written as ``null`` so the document still validates on read.
    """

    def __init__(self, omit_null_fields: Optional[bool] = None):
        if omit_null_fields is None:
            omit_null_fields = get_settings().CACHE_OMIT_NULL_FIELDS
        self.omit_null_fields = omit_null_fields

    def encode(self, value: Any, key: Optional[str] = None) -> str:
        """Serialize ``value`` to JSON text."""
        try:
            adapter = get_type_adapter(type(value))
            if self.omit_null_fields:
                dumped = adapter.dump_python(value)
                raw = _ANY_ADAPTER.dump_json(_omit_nulls(value, dumped))
            else:
                raw = adapter.dump_json(value)
        except (
            PydanticUserError,
            PydanticSerializationError,
            ValueError,
            TypeError,
        ) as e:
            raise CacheSerializationException(
                operation="encode",
                target_type=_type_name(type(value)),
                key=key,
                original_error=e,
            ) from e
        return raw.decode("utf-8")

    def decode(self, text: str, model: Type[T], key: Optional[str] = None) -> T:
        """Deserialize JSON ``text`` into an instance of ``model``."""
        try:
            adapter = get_type_adapter(model)
            return adapter.validate_json(text)
        except (PydanticUserError, ValidationError) as e:
            raise CacheSerializationException(
                operation="decode",
                target_type=_type_name(model),
                key=key,
                original_error=e,
            ) from e
