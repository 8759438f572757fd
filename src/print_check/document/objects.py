"""Null-safe accessors for the PDF object graph.

pypdf exposes the document as a graph of dictionaries, arrays, names, numbers
and strings whose edges may be indirect references. Every helper here is total:
it accepts ``None``, PDF null, indirect references or a value of the wrong type
and returns ``None`` (or an empty iteration) instead of raising.

Keys may be given with or without the leading slash (``"Font"`` or ``"/Font"``).
Names are returned without the slash.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Tuple

from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    ByteStringObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
)


def _key(key: str) -> str:
    return key if key.startswith("/") else f"/{key}"


def safe_resolve(obj: Any) -> Optional[Any]:
    """Follow indirect references; return None for missing or null objects."""
    if obj is None:
        return None
    if isinstance(obj, IndirectObject):
        obj = obj.get_object()
    if obj is None or isinstance(obj, NullObject):
        return None
    return obj


def safe_dict(obj: Any) -> Optional[DictionaryObject]:
    """Return obj as a dictionary (streams included), or None."""
    obj = safe_resolve(obj)
    return obj if isinstance(obj, DictionaryObject) else None


def safe_array(obj: Any) -> Optional[ArrayObject]:
    """Return obj as an array, or None."""
    obj = safe_resolve(obj)
    return obj if isinstance(obj, ArrayObject) else None


def safe_get(obj: Any, key: str) -> Optional[Any]:
    """Get ``key`` from a dictionary without resolving the value."""
    d = safe_dict(obj)
    if d is None:
        return None
    value = d.get(_key(key))
    if value is None or isinstance(value, NullObject):
        return None
    return value


def safe_get_resolved(obj: Any, key: str) -> Optional[Any]:
    """Get ``key`` from a dictionary and resolve the value."""
    return safe_resolve(safe_get(obj, key))


def safe_name(obj: Any) -> Optional[str]:
    """Return a name object's value without the leading slash."""
    obj = safe_resolve(obj)
    if isinstance(obj, NameObject):
        return str(obj)[1:]
    return None


def safe_number(obj: Any) -> Optional[float]:
    """Return a numeric object as float."""
    obj = safe_resolve(obj)
    if isinstance(obj, (bool, BooleanObject)):
        return None
    if isinstance(obj, (int, float)):
        return float(obj)
    return None


def safe_bool(obj: Any) -> Optional[bool]:
    obj = safe_resolve(obj)
    if isinstance(obj, BooleanObject):
        return bool(obj.value)
    if isinstance(obj, bool):
        return obj
    return None


def safe_string(obj: Any) -> Optional[str]:
    """Return a text or byte string object as ``str``.

    Names are not strings and yield None.
    """
    obj = safe_resolve(obj)
    if isinstance(obj, NameObject):
        return None
    if isinstance(obj, ByteStringObject):
        return bytes(obj).decode("latin-1")
    if isinstance(obj, str):
        return str(obj)
    return None


def safe_items(obj: Any) -> Iterator[Tuple[str, Any]]:
    """Iterate ``(key, raw_value)`` pairs of a dictionary, keys without slash."""
    d = safe_dict(obj)
    if d is None:
        return
    for key in list(d.keys()):
        value = d.get(key)
        if value is None or isinstance(value, NullObject):
            continue
        yield str(key).lstrip("/"), value


def object_id(obj: Any) -> Optional[Tuple[int, int]]:
    """Return ``(number, generation)`` of an indirect object, if known."""
    if isinstance(obj, IndirectObject):
        return obj.idnum, obj.generation
    ref = getattr(obj, "indirect_reference", None)
    if isinstance(ref, IndirectObject):
        return ref.idnum, ref.generation
    return None


__all__ = [
    "safe_resolve",
    "safe_dict",
    "safe_array",
    "safe_get",
    "safe_get_resolved",
    "safe_name",
    "safe_number",
    "safe_bool",
    "safe_string",
    "safe_items",
    "object_id",
]
