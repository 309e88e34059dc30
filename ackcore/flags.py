"""Parsers and validators for the controller's command-line flag values."""

from __future__ import annotations

import re

DNS1123_LABEL_MAX_LENGTH = 63

_DNS1123_LABEL_FMT = "[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS1123_SUBDOMAIN_FMT = _DNS1123_LABEL_FMT + r"(\." + _DNS1123_LABEL_FMT + ")*"
_DNS1123_LABEL_RE = re.compile(_DNS1123_LABEL_FMT)
_DNS1123_SUBDOMAIN_RE = re.compile(_DNS1123_SUBDOMAIN_FMT)
_DNS1123_LABEL_ERR_MSG = (
    "a lowercase RFC 1123 label must consist of lower case alphanumeric "
    "characters or '-', and must start and end with an alphanumeric character"
)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _atoi(text: str) -> int:
    """Parse a signed decimal integer that fits in 64 bits."""
    if not _INT_RE.fullmatch(text):
        raise ValueError(f'parsing "{text}": invalid syntax')
    value = int(text)
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError(f'parsing "{text}": value out of range')
    return value


def _parse_bool(text: str) -> bool:
    """Parse a boolean word such as ``true``, ``F`` or ``1``."""
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f'parsing "{text}": invalid syntax')


def _regex_error(message: str, fmt: str, *examples: str) -> str:
    if not examples:
        return f"{message} (regex used for validation is '{fmt}')"
    shown = " or ".join(f"'{example}', " for example in examples)
    return f"{message} (e.g. {shown}regex used for validation is '{fmt}')"


def validate_namespace_name(name: str) -> list[str]:
    """Return the reasons ``name`` is not a valid namespace name, if any."""
    errors: list[str] = []
    if len(name) > DNS1123_LABEL_MAX_LENGTH:
        errors.append(f"must be no more than {DNS1123_LABEL_MAX_LENGTH} characters")
    if not _DNS1123_LABEL_RE.fullmatch(name):
        if _DNS1123_SUBDOMAIN_RE.fullmatch(name):
            errors.append("must not contain dots")
        else:
            errors.append(
                _regex_error(
                    _DNS1123_LABEL_ERR_MSG, _DNS1123_LABEL_FMT, "my-name", "123-abc"
                )
            )
    return errors


def parse_reconcile_flag_argument(flag_argument: str) -> tuple[str, int]:
    """Split a ``key=value`` argument into its key and positive integer value.

    Raises ValueError if the argument is malformed or the value is not a
    positive integer.
    """
    elements = flag_argument.split("=")
    if len(elements) != 2:
        raise ValueError("invalid flag argument format: expected key=value")
    key, raw_value = elements
    if not key:
        raise ValueError("missing key in flag argument")
    if not raw_value:
        raise ValueError("missing value in flag argument")
    try:
        value = _atoi(raw_value)
    except ValueError as exc:
        raise ValueError(f"invalid value in flag argument: {exc}") from None
    if value <= 0:
        raise ValueError(
            "invalid value in flag argument: value must be greater than 0"
        )
    return key, value


def parse_watch_namespace_string(namespace: str) -> list[str] | None:
    """Return the namespaces named in a comma-separated list.

    An empty string gives None, meaning every namespace. Raises ValueError
    for empty, duplicate or invalid namespace names.
    """
    if namespace == "":
        return None
    namespaces = namespace.split(",")
    seen: set[str] = set()
    for name in namespaces:
        if name == "":
            raise ValueError("invalid namespace: empty namespace")
        if name in seen:
            raise ValueError(f"duplicate namespace '{name}'")
        errors = validate_namespace_name(name)
        if errors:
            raise ValueError(f"invalid namespace '{name}': [{' '.join(errors)}]")
        seen.add(name)
    return namespaces


def parse_feature_gates(raw: str) -> dict[str, bool] | None:
    """Parse ``Name=bool,Other=bool`` into a mapping of feature overrides.

    Blank input gives None. Raises ValueError for malformed entries.
    """
    raw = raw.strip()
    if raw == "":
        return None
    gates: dict[str, bool] = {}
    for entry in raw.split(","):
        name_value = entry.split("=", 1)
        if len(name_value) != 2:
            raise ValueError(f"invalid feature gate format: {entry}")
        name = name_value[0].strip()
        if name == "":
            raise ValueError(f"invalid feature gate name: {entry}")
        value = name_value[1].strip()
        try:
            gates[name] = _parse_bool(value)
        except ValueError:
            raise ValueError(
                f"invalid feature gate value for {name}: {value}"
            ) from None
    return gates