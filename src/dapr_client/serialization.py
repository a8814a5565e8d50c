"""Envelope codec: converts application payloads to boxed wire values and back.

Payloads are serialized to JSON with pydantic, so models, dataclasses,
``TypedDict`` values and plain containers all work. Decoding validates the
JSON against a target type; an empty boxed value decodes to ``None``.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Any, TypeVar, overload

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from dapr_client.config import SerializationOptions
from dapr_client.errors import SerializationError
from dapr_client.transport.contracts import BoxedValue

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _adapter_for(target: Any) -> TypeAdapter[Any]:
    try:
        hash(target)
    except TypeError:
        # Unhashable type expressions skip the cache.
        return TypeAdapter(target)
    return _adapter(target)


def _non_finite_path(value: Any, path: str = "$") -> str | None:
    """Locate a NaN or infinite float, which JSON cannot carry."""
    if isinstance(value, float):
        return None if math.isfinite(value) else path
    if isinstance(value, dict):
        items: Any = ((f"{path}.{key}", item) for key, item in value.items())
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = ((f"{path}[{index}]", item) for index, item in enumerate(value))
    else:
        return None
    for item_path, item in items:
        found = _non_finite_path(item, item_path)
        if found is not None:
            return found
    return None


class EnvelopeCodec:
    """Stateless JSON codec for boxed payloads."""

    def __init__(self, options: SerializationOptions | None = None) -> None:
        self._options = options or SerializationOptions()

    @property
    def options(self) -> SerializationOptions:
        return self._options

    def encode(self, payload: object | None) -> BoxedValue:
        """Serialize *payload* into a boxed value.

        ``None`` yields the empty marker, never a serialized ``null``. NaN and
        infinite floats are rejected rather than written as ``null``.
        """
        if payload is None:
            return BoxedValue.empty()
        type_name = type(payload).__name__
        try:
            adapter = _adapter_for(type(payload))
            dump_options = {
                "by_alias": self._options.by_alias,
                "exclude_none": self._options.exclude_none,
            }
            # Python mode keeps floats as-is, so non-finite values are still visible.
            bad_path = _non_finite_path(adapter.dump_python(payload, **dump_options))
            raw = adapter.dump_json(payload, **dump_options)
        except (PydanticSchemaGenerationError, PydanticSerializationError, ValidationError) as exc:
            msg = f"Cannot serialize payload of type {type_name}: {exc}"
            raise SerializationError(msg) from exc
        if bad_path is not None:
            msg = f"Cannot serialize payload of type {type_name}: non-finite float at {bad_path}"
            raise SerializationError(msg)
        return BoxedValue(type_url=self._options.content_type, value=raw)

    @overload
    def decode(self, boxed: BoxedValue | None) -> Any: ...

    @overload
    def decode(self, boxed: BoxedValue | None, target: type[T]) -> T | None: ...

    def decode(self, boxed: BoxedValue | None, target: Any = Any) -> Any:
        """Deserialize *boxed* into *target*; empty payloads yield ``None``."""
        if boxed is None or boxed.is_empty:
            return None
        try:
            return _adapter_for(target).validate_json(boxed.value, strict=self._options.strict)
        except (PydanticSchemaGenerationError, ValidationError) as exc:
            msg = f"Cannot deserialize payload into {getattr(target, '__name__', target)}: {exc}"
            raise SerializationError(msg) from exc


_default_codec = EnvelopeCodec()


def encode(payload: object | None) -> BoxedValue:
    """Encode with default options."""
    return _default_codec.encode(payload)


def decode(boxed: BoxedValue | None, target: Any = Any) -> Any:
    """Decode with default options."""
    return _default_codec.decode(boxed, target)


__all__ = ["EnvelopeCodec", "decode", "encode"]
