"""Condition types and the condition record shared by all ACK resources."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ConditionType(str, Enum):
    """Category of a condition in a resource's status."""

    ADOPTED = "ACK.Adopted"
    RESOURCE_SYNCED = "ACK.ResourceSynced"
    TERMINAL = "ACK.Terminal"
    RECOVERABLE = "ACK.Recoverable"
    ADVISORY = "ACK.Advisory"
    LATE_INITIALIZED = "ACK.LateInitialized"
    REFERENCES_RESOLVED = "ACK.ReferencesResolved"

    def __str__(self) -> str:
        return self.value


class ConditionStatus(str, Enum):
    """Status of a condition: True, False or Unknown."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class Condition:
    """A single status condition of a custom resource."""

    type: ConditionType
    status: ConditionStatus
    last_transition_time: datetime | None = None
    reason: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the serialised form, leaving out unset optional fields."""
        data: dict[str, Any] = {
            "type": self.type.value,
            "status": self.status.value,
        }
        if self.last_transition_time is not None:
            data["lastTransitionTime"] = _format_time(self.last_transition_time)
        if self.reason is not None:
            data["reason"] = self.reason
        if self.message is not None:
            data["message"] = self.message
        return data