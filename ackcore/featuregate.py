"""Feature gates for ACK controllers, with defaults and overrides."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping

READ_ONLY_RESOURCES = "ReadOnlyResources"
TEAM_LEVEL_CARM = "TeamLevelCARM"
SERVICE_LEVEL_CARM = "ServiceLevelCARM"


class FeatureStage(str, Enum):
    """Development stage of a feature."""

    ALPHA = "alpha"
    BETA = "beta"
    GA = "ga"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Feature:
    """A single feature gate."""

    stage: FeatureStage
    enabled: bool


class FeatureGates(dict):
    """Mapping of feature names to feature gates."""

    def is_enabled(self, name: str) -> bool:
        """Return True if the named feature exists and is enabled."""
        feature = self.get(name)
        return feature is not None and feature.enabled

    def get_feature(self, name: str) -> Feature | None:
        """Return the named feature, or None if there is none."""
        return self.get(name)

    def feature_names(self) -> list[str]:
        """Return the names of all features."""
        return list(self)


_DEFAULT_FEATURE_GATES: Mapping[str, Feature] = {
    READ_ONLY_RESOURCES: Feature(FeatureStage.ALPHA, False),
    TEAM_LEVEL_CARM: Feature(FeatureStage.ALPHA, False),
    SERVICE_LEVEL_CARM: Feature(FeatureStage.ALPHA, False),
}


def get_default_feature_gates() -> FeatureGates:
    """Return a fresh copy of the default feature gates."""
    return FeatureGates(_DEFAULT_FEATURE_GATES)


def get_feature_gates_with_overrides(overrides: Mapping[str, bool] | None) -> FeatureGates:
    """Return the default gates with ``overrides`` applied.

    Raises ValueError if an override names an unknown feature.
    """
    gates = get_default_feature_gates()
    for name, enabled in (overrides or {}).items():
        if name not in gates:
            raise ValueError(f"unknown feature gate: {name}")
        gates[name] = replace(gates[name], enabled=enabled)
    return gates