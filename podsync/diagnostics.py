"""Human-readable renderings of datasets and their local changes.

Meant for error messages and debugging. The exact format may change at any
time and should not be parsed.
"""

from __future__ import annotations

from rdflib import BNode, Literal, URIRef
from rdflib.namespace import XSD

from podsync.dataset import SolidDataset
from podsync.local_nodes import Object, Subject, resolve_term


def readable_value(value: Object) -> str:
    if isinstance(value, Literal):
        lexical = str(value)
        if value.language:
            return f'"{lexical}" ({value.language})'
        if value.datatype is None or value.datatype == XSD.string:
            return f'"{lexical}"'
        datatype = str(value.datatype)
        if datatype.startswith(str(XSD)):
            return f"{lexical} ({datatype[len(str(XSD)):]})"
        return f"{lexical} (<{datatype}>)"
    if isinstance(value, BNode):
        return f"_:{value}"
    return f"<{value}>"


def _thing_name(subject: Subject) -> str:
    if isinstance(subject, BNode):
        return f"_:{subject}"
    return str(subject)


def thing_as_markdown(dataset: SolidDataset, subject: Subject) -> str:
    out = f"## Thing: {_thing_name(subject)}\n"
    by_property: dict[URIRef, list[Object]] = {}
    for _, predicate, obj in dataset.triples(subject):
        by_property.setdefault(predicate, []).append(obj)
    if not by_property:
        return out + "\n<empty>\n"
    for predicate, values in by_property.items():
        out += f"\nProperty: {predicate}\n"
        for value in values:
            out += f"- {readable_value(value)}\n"
    return out


def _change_summary(dataset: SolidDataset, subject: Subject) -> str:
    change_log = dataset.change_log
    added = sum(1 for s, _, _ in change_log.additions if s == subject)
    removed = sum(1 for s, _, _ in change_log.deletions if s == subject)
    added_text = "1 new value added" if added == 1 else f"{added} new values added"
    removed_text = "1 value removed" if removed == 1 else f"{removed} values removed"
    return f"({added_text} / {removed_text})"


def dataset_as_markdown(dataset: SolidDataset) -> str:
    if dataset.has_resource_info():
        out = f"# SolidDataset: {dataset.source_url}\n"
    else:
        out = "# SolidDataset (no URL yet)\n"

    subjects = dataset.subjects()
    if not subjects:
        return out + "\n<empty>\n"
    for subject in subjects:
        out += "\n" + thing_as_markdown(dataset, subject)
        if dataset.has_change_log():
            out += "\n" + _change_summary(dataset, subject) + "\n"
    return out


def change_log_as_markdown(dataset: SolidDataset) -> str:
    if not dataset.has_resource_info():
        return "This is a newly initialized SolidDataset, so there is no source to compare it to."
    source_url = dataset.source_url
    if not dataset.has_change_log() or dataset.change_log.is_empty():
        return (
            f"## Changes compared to {source_url}\n\n"
            f"This SolidDataset has not been modified since it was fetched from {source_url}.\n"
        )

    grouped: dict[str, dict[str, dict[str, list[Object]]]] = {}
    for kind, triples in (("deleted", dataset.change_log.deletions), ("added", dataset.change_log.additions)):
        for subject, predicate, obj in triples:
            thing = _thing_name(resolve_term(subject, source_url))
            entry = grouped.setdefault(thing, {}).setdefault(str(predicate), {"deleted": [], "added": []})
            entry[kind].append(obj)

    out = f"## Changes compared to {source_url}\n"
    for thing, properties in grouped.items():
        out += f"\n### Thing: {thing}\n"
        for predicate, changes in properties.items():
            out += f"\nProperty: {predicate}\n"
            if changes["deleted"]:
                out += "- Removed:\n"
                out += "".join(f"  - {readable_value(value)}\n" for value in changes["deleted"])
            if changes["added"]:
                out += "- Added:\n"
                out += "".join(f"  - {readable_value(value)}\n" for value in changes["added"])
    return out
