from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, Iterator

import rdflib
from rdflib import Graph

from podsync.local_nodes import Triple, contains_local_nodes


@contextmanager
def _lexical_literals() -> Iterator[None]:
    # Literals stay in the lexical form the store wrote ("01", "...Z").
    previous = rdflib.NORMALIZE_LITERALS
    rdflib.NORMALIZE_LITERALS = False
    try:
        yield
    finally:
        rdflib.NORMALIZE_LITERALS = previous


def turtle_to_triples(text: str, base_url: str) -> list[Triple]:
    if not text.strip():
        return []
    g = Graph()
    with _lexical_literals():
        g.parse(data=text, format="turtle", publicID=base_url)
    return list(g)


def triples_to_turtle(triples: Iterable[Triple]) -> str:
    triples = list(triples)
    if contains_local_nodes(triples):
        raise ValueError("Local nodes must be resolved before serializing to Turtle")
    g = Graph()
    for triple in triples:
        g.add(triple)
    return g.serialize(format="turtle")


def triples_to_ntriples(triples: Iterable[Triple]) -> str:
    """One statement per line, in the given order, lexical forms untouched.

    Valid inside SPARQL ``DATA`` blocks and as a Turtle document. Unresolved
    local nodes are written as ``<#name>`` so the store resolves them against
    whatever location it assigns.
    """
    return "\n".join(f"{s.n3()} {p.n3()} {o.n3()} ." for s, p, o in triples)
