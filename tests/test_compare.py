from datetime import datetime, timezone

import pytest

from ackcore.compare import (
    compare_secret_key_references,
    get_tags_difference,
    has_nil_difference,
    is_nil,
    map_string_string_equal,
    meta_object_equal,
    secret_key_reference_equal,
    slice_secret_key_reference_equal,
    slice_string_equal,
)
from ackcore.resources import ListMeta, ObjectMeta, OwnerReference, SecretKeyReference


# --- nil ---------------------------------------------------------------------


def test_is_nil():
    assert is_nil(None) is True
    assert is_nil("") is False
    assert is_nil({}) is False


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (None, None, False),
        ("a", "b", False),
        (None, "b", True),
        ("a", None, True),
        (None, {}, True),
        (None, [], True),
        ({}, {}, False),
    ],
)
def test_has_nil_difference(a, b, expected):
    assert has_nil_difference(a, b) is expected


# --- maps --------------------------------------------------------------------

EMPTY = {}
MA = {"a": "a"}
MAC = {"a": "a"}
MB = {"b": "b"}
MAB = {"a": "a", "b": "b"}
MABC = {"a": "a", "b": "b"}
MBA = {"b": "b", "a": "a"}


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (MA, EMPTY, False),
        (EMPTY, MA, False),
        (MA, None, False),
        (None, MA, False),
        (None, None, True),
        (MA, MB, False),
        (MB, MA, False),
        (MA, MAC, True),
        (MAB, MBA, True),
        (MAB, MABC, True),
    ],
)
def test_map_string_string_equal(a, b, expected):
    assert map_string_string_equal(a, b) is expected


def test_map_same_keys_different_values():
    assert map_string_string_equal({"a": "1"}, {"a": "2"}) is False


# --- slices ------------------------------------------------------------------


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (["a"], [], False),
        ([], ["a"], False),
        (["a"], ["b"], False),
        (["b"], ["a"], False),
        (["a"], ["a"], True),
        (["a", "b"], ["b", "a"], True),
        (["a", "b"], ["a", "b"], True),
        (["a", "a", "b"], ["a", "b", "a"], True),
        (["a", "a", "b"], ["b", "b", "a"], False),
    ],
)
def test_slice_string_equal(a, b, expected):
    assert slice_string_equal(a, b) is expected


def test_slice_string_equal_does_not_reorder_inputs():
    a = ["b", "a"]
    assert slice_string_equal(a, ["a", "b"]) is True
    assert a == ["b", "a"]


# --- metadata ----------------------------------------------------------------


def test_meta_nil():
    assert meta_object_equal(None, None) is True
    assert meta_object_equal(ObjectMeta(), None) is False
    assert meta_object_equal(None, ObjectMeta()) is False


def test_meta_annotations():
    ob1 = ObjectMeta(annotations={})
    ob2 = ObjectMeta(annotations={})
    assert meta_object_equal(ob1, ob2) is True
    ob2.annotations["some"] = "Annotations"
    assert meta_object_equal(ob1, ob2) is False
    ob1.annotations["some"] = "Annotations"
    assert meta_object_equal(ob1, ob2) is True


def test_meta_remaining_item_count():
    ob1 = ListMeta(remaining_item_count=10)
    ob2 = ListMeta()
    assert meta_object_equal(ob1, ob2) is False
    ob2.remaining_item_count = 10
    assert meta_object_equal(ob1, ob2) is True


def _at(seconds):
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def test_meta_creation_timestamp():
    ob1 = ObjectMeta(creation_timestamp=_at(5))
    ob2 = ObjectMeta(creation_timestamp=_at(5))
    assert meta_object_equal(ob1, ob2) is True
    ob2.creation_timestamp = _at(10)
    assert meta_object_equal(ob1, ob2) is False


def test_meta_deletion_grace_period_seconds():
    ob1 = ObjectMeta()
    ob2 = ObjectMeta()
    assert meta_object_equal(ob1, ob2) is True
    ob1.deletion_grace_period_seconds = 5
    assert meta_object_equal(ob1, ob2) is False
    ob2.deletion_grace_period_seconds = 5
    assert meta_object_equal(ob1, ob2) is True
    ob2.deletion_grace_period_seconds = 6
    assert meta_object_equal(ob1, ob2) is False


def test_meta_deletion_timestamp():
    ob1 = ObjectMeta()
    ob2 = ObjectMeta()
    assert meta_object_equal(ob1, ob2) is True
    ob1.deletion_timestamp = _at(5)
    assert meta_object_equal(ob1, ob2) is False
    ob2.deletion_timestamp = _at(5)
    assert meta_object_equal(ob1, ob2) is True
    ob2.deletion_timestamp = _at(10)
    assert meta_object_equal(ob1, ob2) is False


def test_meta_finalizers():
    ob1 = ObjectMeta()
    ob2 = ObjectMeta()
    assert meta_object_equal(ob1, ob2) is True
    ob1.finalizers = ["a"]
    assert meta_object_equal(ob1, ob2) is False
    ob2.finalizers = ["a"]
    assert meta_object_equal(ob1, ob2) is True
    ob2.finalizers = ["b"]
    assert meta_object_equal(ob1, ob2) is False


@pytest.mark.parametrize(
    "attr",
    ["generate_name", "name", "namespace", "resource_version", "self_link", "uid"],
)
def test_meta_string_fields(attr):
    ob1 = ObjectMeta()
    ob2 = ObjectMeta()
    assert meta_object_equal(ob1, ob2) is True
    setattr(ob1, attr, "a")
    assert meta_object_equal(ob1, ob2) is False
    setattr(ob2, attr, "a")
    assert meta_object_equal(ob1, ob2) is True
    setattr(ob2, attr, "b")
    assert meta_object_equal(ob1, ob2) is False


def test_meta_labels():
    ob1 = ObjectMeta(labels={})
    ob2 = ObjectMeta(labels={})
    assert meta_object_equal(ob1, ob2) is True
    ob2.labels["some"] = "Labels"
    assert meta_object_equal(ob1, ob2) is False


def test_meta_managed_fields():
    ob1 = ObjectMeta()
    ob2 = ObjectMeta()
    assert meta_object_equal(ob1, ob2) is True
    ob1.managed_fields = [{"manager": "manager"}]
    ob2.managed_fields = [{"manager": "manager"}]
    assert meta_object_equal(ob1, ob2) is True
    ob2.managed_fields = [{"manager": "manager2"}]
    assert meta_object_equal(ob1, ob2) is False


def test_meta_owner_references():
    ob1 = ObjectMeta()
    ob2 = ObjectMeta()
    assert meta_object_equal(ob1, ob2) is True
    ob1.owner_references = [OwnerReference(name="name1")]
    ob2.owner_references = [OwnerReference(name="name1")]
    assert meta_object_equal(ob1, ob2) is True
    ob2.owner_references = [OwnerReference(name="name2")]
    assert meta_object_equal(ob1, ob2) is False


def test_meta_unserialisable_raises():
    with pytest.raises(TypeError):
        meta_object_equal(object(), object())


# --- secret references -------------------------------------------------------


def ref(name):
    return SecretKeyReference(namespace="default", name=name, key="password")


def test_secret_key_reference_equal():
    assert secret_key_reference_equal(ref("s1"), ref("s1")) is True
    assert secret_key_reference_equal(ref("s1"), ref("s2")) is False
    assert secret_key_reference_equal(ref("s1"), None) is False
    assert secret_key_reference_equal(None, ref("s1")) is False


@pytest.mark.parametrize(
    "a, b, want_equal, want_added, want_removed",
    [
        (None, None, True, [], []),
        (None, [], True, [], []),
        ([], [], True, [], []),
        ([], [ref("secret1"), ref("secret2")], False,
         [ref("secret1"), ref("secret2")], []),
        ([ref("secret1"), ref("secret2")], [], False,
         [], [ref("secret1"), ref("secret2")]),
        ([ref("secret1")], [ref("secret2")], False,
         [ref("secret2")], [ref("secret1")]),
        (
            [ref("secret1"), ref("secret1"), ref("secret1"), ref("secret2")],
            [ref("secret2"), ref("secret2"), ref("secret2"), ref("secret1")],
            True, [], [],
        ),
        (
            [ref("secret1"), ref("secret2"), ref("secret2"), ref("secret3")],
            [ref("secret3"), ref("secret4"), ref("secret4")],
            False, [ref("secret4")], [ref("secret1"), ref("secret2")],
        ),
    ],
    ids=[
        "empty slices",
        "only one non empty container",
        "two empty lists",
        "added secrets",
        "removed secrets",
        "added and removed secrets",
        "equal with duplicates",
        "added and removed with duplicates",
    ],
)
def test_compare_secret_key_references(a, b, want_equal, want_added, want_removed):
    equal, added, removed = compare_secret_key_references(a, b)
    assert equal is want_equal
    assert added == want_added
    assert removed == want_removed
    assert slice_secret_key_reference_equal(a, b) is want_equal


# --- tags --------------------------------------------------------------------


def test_tags_difference():
    a = {"tag1": "value1", "tag2": "value2"}
    b = {"tag2": "value2", "tag3": "value3", "tag4": "value4"}

    added, unchanged, removed = get_tags_difference(a, b)
    assert len(added) == 2
    assert len(unchanged) == 1
    assert len(removed) == 1
    assert "tag3" in added
    assert "tag4" in added
    assert "tag2" in unchanged
    assert "tag1" in removed

    a["tag2"] = "oldvalue"
    b["tag2"] = "newvalue"
    added, unchanged, removed = get_tags_difference(a, b)
    assert len(added) == 3
    assert len(unchanged) == 0
    assert len(removed) == 2
    assert added["tag2"] == "newvalue"
    assert removed["tag2"] == "oldvalue"


def test_tags_difference_none_inputs():
    assert get_tags_difference(None, None) == ({}, {}, {})
    assert get_tags_difference(None, {"k": "v"}) == ({"k": "v"}, {}, {})