"""Field paths and the set of differences found between two resources."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Path:
    """A dotted route to a field inside a compared structure."""

    parts: list[str] = field(default_factory=list)

    def push(self, part: str) -> None:
        """Append ``part`` to the path."""
        self.parts.append(part)

    def pop(self) -> None:
        """Remove the last part of the path, if there is one."""
        if self.parts:
            self.parts.pop()

    def contains(self, subject: str) -> bool:
        """Return True if the dotted ``subject`` is a prefix of this path.

        For a path ``A.B``: ``A`` and ``A.B`` match; ``A.B.C``, ``B`` and
        ``A.C`` do not.
        """
        subject_parts = subject.split(".")
        if len(subject_parts) > len(self.parts):
            return False
        return all(
            mine == theirs for mine, theirs in zip(self.parts, subject_parts)
        )

    def to_json(self) -> str:
        """Return the JSON encoding of the path."""
        return json.dumps({"Parts": self.parts}, separators=(",", ":"))

    def __str__(self) -> str:
        return ".".join(self.parts)


def new_path(dotted: str) -> Path:
    """Return a path built from dotted notation such as ``Author.Name``."""
    return Path(dotted.split("."))


@dataclass
class Difference:
    """The two differing values found at a field path."""

    path: Path
    a: Any
    b: Any


@dataclass
class Delta:
    """Differences between two resources of the same kind."""

    differences: list[Difference] = field(default_factory=list)

    def different_at(self, subject: str) -> bool:
        """Return True if there is a difference at the dotted ``subject``."""
        return any(diff.path.contains(subject) for diff in self.differences)

    def different_except(self, *except_paths: str) -> bool:
        """Return True if there are differences other than at ``except_paths``."""
        num_diffs = len(self.differences)
        if num_diffs == 0:
            return False
        if num_diffs > len(except_paths):
            return True
        found_excepts = sum(
            1
            for diff in self.differences
            for except_path in except_paths
            if diff.path.contains(except_path)
        )
        return found_excepts != num_diffs

    def add(self, path: str, a: Any, b: Any) -> None:
        """Record a difference between ``a`` and ``b`` at the dotted ``path``."""
        self.differences.append(Difference(new_path(path), a, b))