from __future__ import annotations

from typing import Iterable, Iterator

from rdflib import URIRef

from podsync.changelog import ChangeLog, begin_tracking
from podsync.local_nodes import (
    LocalNode,
    Object,
    Subject,
    Triple,
    create_local_node,
    resource_url_of,
)
from podsync.resource_info import ResourceInfo


class SolidDataset:
    """An in-memory graph, optionally tied to the location it was fetched from.

    ``resource_info`` is set once the dataset has been fetched or stored, and
    ``change_log`` once mutations are being tracked. Mutating methods change this
    instance; the sync operations never do and return a new dataset instead.
    """

    def __init__(
        self,
        triples: Iterable[Triple] = (),
        *,
        resource_info: ResourceInfo | None = None,
        change_log: ChangeLog | None = None,
    ) -> None:
        self._triples: dict[Triple, None] = dict.fromkeys(triples)
        self._local_names: set[str] = {
            term.name for s, _, o in self._triples for term in (s, o) if isinstance(term, LocalNode)
        }
        self.resource_info = resource_info
        self.change_log = change_log

    def __iter__(self) -> Iterator[Triple]:
        return iter(list(self._triples))

    def __len__(self) -> int:
        return len(self._triples)

    def __contains__(self, triple: object) -> bool:
        return triple in self._triples

    def __repr__(self) -> str:
        where = self.source_url or "no URL yet"
        return f"<SolidDataset {where}: {len(self)} triple(s)>"

    @property
    def source_url(self) -> str | None:
        return self.resource_info.source_url if self.resource_info is not None else None

    def has_resource_info(self) -> bool:
        return self.resource_info is not None

    def has_change_log(self) -> bool:
        return self.change_log is not None

    def track_changes(self) -> ChangeLog:
        if self.change_log is None:
            self.change_log = begin_tracking(self._triples)
        return self.change_log

    def add(self, triple: Triple) -> None:
        if triple in self._triples:
            return
        self._triples[triple] = None
        self._note_local_names(triple)
        if self.change_log is not None:
            self.change_log.record_add(triple)

    def remove(self, triple: Triple) -> None:
        if triple not in self._triples:
            return
        del self._triples[triple]
        if self.change_log is not None:
            self.change_log.record_remove(triple)

    def triples(
        self,
        subject: Subject | None = None,
        predicate: URIRef | None = None,
        obj: Object | None = None,
    ) -> list[Triple]:
        return [
            (s, p, o)
            for s, p, o in self._triples
            if (subject is None or s == subject)
            and (predicate is None or p == predicate)
            and (obj is None or o == obj)
        ]

    def remove_all(self, subject: Subject, predicate: URIRef | None = None) -> None:
        for triple in self.triples(subject, predicate):
            self.remove(triple)

    def set_value(self, subject: Subject, predicate: URIRef, value: Object) -> None:
        self.remove_all(subject, predicate)
        self.add((subject, predicate, value))

    def subjects(self) -> list[Subject]:
        return list(dict.fromkeys(s for s, _, _ in self._triples))

    def objects(self, subject: Subject, predicate: URIRef) -> list[Object]:
        return [o for _, _, o in self.triples(subject, predicate)]

    def create_local_node(self, name_hint: str | None = None) -> LocalNode:
        taken = set(self._local_names)
        if self.source_url is not None:
            # Names whose resolved IRI already exists would merge two entities on save.
            prefix = f"{resource_url_of(self.source_url)}#"
            for s, _, o in self._triples:
                for term in (s, o):
                    if isinstance(term, URIRef) and term.startswith(prefix):
                        taken.add(term[len(prefix):])
        node = create_local_node(name_hint, taken=taken)
        self._local_names.add(node.name)
        return node

    def copy(self) -> SolidDataset:
        clone = SolidDataset(
            self._triples,
            resource_info=self.resource_info,
            change_log=self.change_log.copy() if self.change_log is not None else None,
        )
        clone._local_names |= self._local_names
        return clone

    def _note_local_names(self, triple: Triple) -> None:
        subject, _, obj = triple
        for term in (subject, obj):
            if isinstance(term, LocalNode):
                self._local_names.add(term.name)


def create_dataset() -> SolidDataset:
    return SolidDataset()
