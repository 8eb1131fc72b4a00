from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from podsync.local_nodes import Triple


@dataclass
class ChangeLog:
    """Net additions and deletions relative to the triples a dataset was last synced with.

    ``additions`` and ``deletions`` are insertion-ordered sets (dict keys).
    A triple is never in both.
    """

    baseline: frozenset[Triple] = frozenset()
    additions: dict[Triple, None] = field(default_factory=dict)
    deletions: dict[Triple, None] = field(default_factory=dict)

    def record_add(self, triple: Triple) -> None:
        self.deletions.pop(triple, None)
        if triple not in self.baseline:
            self.additions[triple] = None

    def record_remove(self, triple: Triple) -> None:
        self.additions.pop(triple, None)
        if triple in self.baseline:
            self.deletions[triple] = None

    def is_empty(self) -> bool:
        return not self.additions and not self.deletions

    def copy(self) -> ChangeLog:
        return ChangeLog(
            baseline=self.baseline,
            additions=dict(self.additions),
            deletions=dict(self.deletions),
        )


def begin_tracking(triples: Iterable[Triple]) -> ChangeLog:
    return ChangeLog(baseline=frozenset(triples))
