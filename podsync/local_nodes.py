"""Identities for entities that do not have a permanent location yet.

A ``LocalNode`` only exists for the lifetime of an in-memory dataset. Once the
dataset is stored at a concrete URL, every local node ``name`` becomes
``<url>#name``. The engine does that exactly once, right after a successful
write; nothing else should call :func:`resolve_local_nodes` on stored data.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Union
from urllib.parse import urldefrag
from uuid import uuid4

from rdflib import BNode, Literal, URIRef


@dataclass(frozen=True)
class LocalNode:
    name: str

    def n3(self) -> str:
        return f"<#{self.name}>"

    def __str__(self) -> str:
        return f"#{self.name}"


Subject = Union[URIRef, BNode, LocalNode]
Object = Union[URIRef, BNode, Literal, LocalNode]
Term = Union[URIRef, BNode, Literal, LocalNode]
Triple = tuple[Subject, URIRef, Object]


def is_local_node(term: object) -> bool:
    return isinstance(term, LocalNode)


def safe_local_name(name_hint: str | None) -> str:
    value = re.sub(r"[^A-Za-z0-9._~-]+", "-", name_hint or "")
    value = value.strip("-.")
    return value or uuid4().hex


def create_local_node(name_hint: str | None = None, *, taken: Iterable[str] = ()) -> LocalNode:
    base = safe_local_name(name_hint)
    taken = set(taken)
    name = base
    suffix = 2
    while name in taken:
        name = f"{base}-{suffix}"
        suffix += 1
    return LocalNode(name)


def resource_url_of(url: str) -> str:
    return urldefrag(str(url))[0]


def resolve_local_node(node: LocalNode, resource_url: str) -> URIRef:
    return URIRef(f"{resource_url_of(resource_url)}#{node.name}")


def resolve_term(term: Term, resource_url: str) -> Term:
    if isinstance(term, LocalNode):
        return resolve_local_node(term, resource_url)
    return term


def resolve_triple(triple: Triple, resource_url: str) -> Triple:
    subject, predicate, obj = triple
    return (resolve_term(subject, resource_url), predicate, resolve_term(obj, resource_url))


def resolve_local_nodes(triples: Iterable[Triple], resource_url: str) -> list[Triple]:
    return [resolve_triple(triple, resource_url) for triple in triples]


def contains_local_nodes(triples: Iterable[Triple]) -> bool:
    return any(is_local_node(s) or is_local_node(o) for s, _, o in triples)
