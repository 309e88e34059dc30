import pytest

from ackcore.flags import (
    parse_feature_gates,
    parse_reconcile_flag_argument,
    parse_watch_namespace_string,
    validate_namespace_name,
)

DNS1123_ERROR = (
    "a lowercase RFC 1123 label must consist of lower case alphanumeric "
    "characters or '-', and must start and end with an alphanumeric character"
)


@pytest.mark.parametrize(
    "argument, key, value",
    [
        ("key=1", "key", 1),
        ("key=123456", "key", 123456),
        ("key=600", "key", 600),
        ("k=1", "k", 1),
        ("ke_y=123456", "ke_y", 123456),
    ],
)
def test_parse_reconcile_flag_argument_valid(argument, key, value):
    assert parse_reconcile_flag_argument(argument) == (key, value)


@pytest.mark.parametrize(
    "argument, message",
    [
        ("key", "invalid flag argument format: expected key=value"),
        ("key=", "missing value in flag argument"),
        ("=value", "missing key in flag argument"),
        ("key=value1=value2", "invalid flag argument format: expected key=value"),
        ("key=-1", "invalid value in flag argument: value must be greater than 0"),
        (
            "key=-123456",
            "invalid value in flag argument: value must be greater than 0",
        ),
    ],
)
def test_parse_reconcile_flag_argument_invalid(argument, message):
    with pytest.raises(ValueError) as excinfo:
        parse_reconcile_flag_argument(argument)
    assert str(excinfo.value) == message


@pytest.mark.parametrize("argument, text", [("key=a", "a"), ("key=1.1", "1.1")])
def test_parse_reconcile_flag_argument_not_integer(argument, text):
    with pytest.raises(ValueError) as excinfo:
        parse_reconcile_flag_argument(argument)
    message = str(excinfo.value)
    assert message.startswith("invalid value in flag argument: ")
    assert message.endswith(f'parsing "{text}": invalid syntax')


@pytest.mark.parametrize(
    "value, expected",
    [
        ("", None),
        ("default", ["default"]),
        ("default,foo", ["default", "foo"]),
        ("default,foo,bar", ["default", "foo", "bar"]),
    ],
)
def test_parse_watch_namespace_string_valid(value, expected):
    assert parse_watch_namespace_string(value) == expected


@pytest.mark.parametrize(
    "value, message",
    [
        (",,,,,", "invalid namespace: empty namespace"),
        ("foo,bar,bar", "duplicate namespace 'bar'"),
        ("default,foo,", "invalid namespace: empty namespace"),
        ("default,foo,---", DNS1123_ERROR),
        ("foo.bar", "must not contain dots"),
        ("foo_bar", DNS1123_ERROR),
    ],
)
def test_parse_watch_namespace_string_invalid(value, message):
    with pytest.raises(ValueError) as excinfo:
        parse_watch_namespace_string(value)
    assert message in str(excinfo.value)


def test_validate_namespace_name_accepts_label():
    assert validate_namespace_name("my-namespace-1") == []


def test_validate_namespace_name_rejects_long_name():
    errors = validate_namespace_name("a" * 64)
    assert errors == ["must be no more than 63 characters"]


def test_validate_namespace_name_rejects_uppercase():
    errors = validate_namespace_name("Default")
    assert len(errors) == 1
    assert errors[0].startswith(DNS1123_ERROR)
    assert "'my-name',  or '123-abc'" in errors[0]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", None),
        ("Feature1=true", {"Feature1": True}),
        ("Feature1=false", {"Feature1": False}),
        (
            "Feature1=true,Feature2=false,Feature3=true",
            {"Feature1": True, "Feature2": False, "Feature3": True},
        ),
        (" Feature1 = true , Feature2 = false ", {"Feature1": True, "Feature2": False}),
    ],
)
def test_parse_feature_gates_valid(raw, expected):
    assert parse_feature_gates(raw) == expected


@pytest.mark.parametrize("raw", ["Feature1:true", "Feature1=yes", "Feature1=", "=true"])
def test_parse_feature_gates_invalid(raw):
    with pytest.raises(ValueError):
        parse_feature_gates(raw)


def test_parse_feature_gates_invalid_value_message():
    with pytest.raises(ValueError) as excinfo:
        parse_feature_gates("Feature1=yes")
    assert str(excinfo.value) == "invalid feature gate value for Feature1: yes"