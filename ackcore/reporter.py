"""Collects the field paths at which a structural comparison found differences."""

from __future__ import annotations

import json
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DiffItem:
    """A single reported difference, identified by its field path."""

    path: str

    def __str__(self) -> str:
        return json.dumps(self.path, ensure_ascii=False) + "\n"


@dataclass
class Reporter:
    """Tracks the current path during a comparison and records unequal nodes."""

    differences: list[DiffItem] = field(default_factory=list)
    _path: list[str] = field(default_factory=list, repr=False)

    @property
    def path(self) -> str:
        """The dotted path to the node currently being compared."""
        return ".".join(step for step in self._path if step)

    def push_step(self, step: str) -> None:
        """Descend into ``step``."""
        self._path.append(str(step))

    def pop_step(self) -> None:
        """Return to the parent of the current node.

        Raises IndexError if there is no step to leave.
        """
        self._path.pop()

    def report(self, equal: bool) -> None:
        """Record the current path if the compared values were not equal."""
        if not equal:
            self.differences.append(DiffItem(self.path))

    def __str__(self) -> str:
        return "\n".join(str(diff) for diff in self.differences)