"""Deletion policy controlling what happens to AWS resources on delete."""

from __future__ import annotations

from enum import Enum


class DeletionPolicy(str, Enum):
    """Whether the backend AWS resource is deleted or kept."""

    DELETE = "delete"
    RETAIN = "retain"

    def __str__(self) -> str:
        return self.value

    @property
    def type_name(self) -> str:
        """Name of the value type, as shown in command-line help."""
        return "DeletionPolicy"


def parse_deletion_policy(value: str) -> DeletionPolicy:
    """Return the policy named by ``value``; raise ValueError if unknown."""
    try:
        return DeletionPolicy(value)
    except ValueError:
        raise ValueError(f"invalid DeletionPolicy value: {value}") from None