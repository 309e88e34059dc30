"""Equality helpers for maps, slices, metadata, secret references and tags."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ackcore.resources import SecretKeyReference, to_dict


def is_nil(value: Any) -> bool:
    """Return True if ``value`` is absent."""
    return value is None


def has_nil_difference(a: Any, b: Any) -> bool:
    """Return True if exactly one of ``a`` and ``b`` is absent."""
    return is_nil(a) != is_nil(b)


def map_string_string_equal(
    a: Mapping[str, str] | None, b: Mapping[str, str] | None
) -> bool:
    """Return True if the two maps hold the same keys and values."""
    a = a or {}
    b = b or {}
    if len(a) != len(b):
        return False
    return all(key in b and b[key] == value for key, value in a.items())


def slice_string_equal(a: Sequence[str] | None, b: Sequence[str] | None) -> bool:
    """Return True if the two sequences hold the same strings in any order."""
    a = a or []
    b = b or []
    if len(a) != len(b):
        return False
    return sorted(a) == sorted(b)


def _serialise(obj: Any) -> str:
    data = obj if isinstance(obj, Mapping) else to_dict(obj)
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def meta_object_equal(a: Any, b: Any) -> bool:
    """Return True if two metadata objects serialise identically.

    Raises TypeError if either object cannot be serialised.
    """
    if is_nil(a) and is_nil(b):
        return True
    if has_nil_difference(a, b):
        return False
    return _serialise(a) == _serialise(b)


def secret_key_reference_equal(
    a: SecretKeyReference | None, b: SecretKeyReference | None
) -> bool:
    """Return True if the two secret key references are equal."""
    if has_nil_difference(a, b):
        return False
    if a is None or b is None:
        return True
    return a.name == b.name and a.namespace == b.namespace and a.key == b.key


def _missing_from(
    items: Iterable[SecretKeyReference | None],
    others: list[SecretKeyReference | None],
) -> list[SecretKeyReference | None]:
    return [
        item
        for item in items
        if not any(secret_key_reference_equal(item, other) for other in others)
    ]


def _unique(
    refs: list[SecretKeyReference | None],
) -> list[SecretKeyReference | None]:
    # Keep the last of each run of equal references.
    return [
        ref
        for i, ref in enumerate(refs)
        if not any(secret_key_reference_equal(ref, later) for later in refs[i + 1 :])
    ]


def compare_secret_key_references(
    a: Sequence[SecretKeyReference | None] | None,
    b: Sequence[SecretKeyReference | None] | None,
) -> tuple[bool, list[SecretKeyReference | None], list[SecretKeyReference | None]]:
    """Compare two collections of secret key references regardless of order.

    Returns whether they are equal, the unique references only in ``b``
    (added) and the unique references only in ``a`` (removed).
    """
    a_list = list(a or [])
    b_list = list(b or [])
    removed = _missing_from(a_list, b_list)
    added = _missing_from(b_list, a_list)
    equal = not added and not removed
    return equal, _unique(added), _unique(removed)


def slice_secret_key_reference_equal(
    a: Sequence[SecretKeyReference | None] | None,
    b: Sequence[SecretKeyReference | None] | None,
) -> bool:
    """Return True if both collections hold the same secret key references."""
    equal, _, _ = compare_secret_key_references(a, b)
    return equal


def get_tags_difference(
    from_tags: Mapping[str, str] | None, to_tags: Mapping[str, str] | None
) -> tuple[dict[str, str], dict[str, str], dict[str, str]]:
    """Split tags into added, unchanged and removed between two tag sets.

    A tag whose value changed is both removed (old value) and added (new value).
    """
    from_pairs = list((from_tags or {}).items())
    to_pairs = list((to_tags or {}).items())
    from_set = set(from_pairs)
    to_set = set(to_pairs)
    removed = {key: value for key, value in from_pairs if (key, value) not in to_set}
    added = {key: value for key, value in to_pairs if (key, value) not in from_set}
    unchanged = {key: value for key, value in from_pairs if (key, value) in to_set}
    return added, unchanged, removed