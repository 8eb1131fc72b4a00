"""Fetch, save and delete datasets against a Solid-style HTTP store.

Saving picks the cheapest correct request. A dataset that was fetched from the
target URL and carries a change log is sent as a SPARQL ``PATCH`` containing
exactly the recorded deletions and additions. Anything else is sent as a full
``PUT``. The deletions are what we believe the store currently holds, so a
store that refuses a deletion it cannot match reports a conflict instead of
silently diverging. Whether a store refuses is up to the store.

Every operation takes the request mechanism explicitly as ``fetch``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from urllib.parse import urljoin

from rdflib import URIRef

from podsync.changelog import begin_tracking
from podsync.dataset import SolidDataset
from podsync.diagnostics import change_log_as_markdown, dataset_as_markdown
from podsync.errors import ContainerExistsError, FetchError, MissingLocationError, NotAContainerError
from podsync.fetcher import Fetch, Response, is_unsuccessful
from podsync.local_nodes import resolve_local_nodes
from podsync.resource import get_resource_info, get_source_url, is_container
from podsync.resource_info import ResourceInfo, parse_resource_info
from podsync.turtle import triples_to_ntriples, turtle_to_triples
from podsync.vocab import (
    LDP,
    NSS_CREATE_CONTAINER_ERROR,
    SPARQL_UPDATE_MEDIA_TYPE,
    TURTLE_MEDIA_TYPE,
)


logger = logging.getLogger(__name__)

RESOURCE_TYPE_LINK = f'<{LDP.Resource}>; rel="type"'
CONTAINER_TYPE_LINK = f'<{LDP.BasicContainer}>; rel="type"'


def _status(response: Response) -> str:
    return f"[{response.status_code}] [{response.reason_phrase}]"


def _stored_resource_info(response: Response, url: str) -> ResourceInfo:
    return replace(parse_resource_info(response, url), source_url=url, is_raw_data=False)


def _stored_dataset(dataset: SolidDataset, url: str, info: ResourceInfo) -> SolidDataset:
    """A new dataset holding ``dataset``'s triples as now stored at ``url``."""
    triples = resolve_local_nodes(dataset, url)
    return SolidDataset(triples, resource_info=info, change_log=begin_tracking(triples))


def _empty_container(info: ResourceInfo) -> SolidDataset:
    return SolidDataset(resource_info=info, change_log=begin_tracking(()))


async def get_dataset(url: str, *, fetch: Fetch) -> SolidDataset:
    """Fetch the Turtle resource at ``url`` and start tracking changes against it."""
    url = str(url)
    response = await fetch(url, headers={"Accept": TURTLE_MEDIA_TYPE})
    if is_unsuccessful(response):
        raise FetchError(f"Fetching the Resource at [{url}] failed: {_status(response)}.", response)

    info = parse_resource_info(response, url)
    triples = turtle_to_triples(response.text, info.source_url)
    return SolidDataset(triples, resource_info=info, change_log=begin_tracking(triples))


def is_update(dataset: SolidDataset, url: str) -> bool:
    return (
        dataset.has_change_log()
        and dataset.has_resource_info()
        and dataset.source_url == url
    )


def sparql_update_body(dataset: SolidDataset, url: str) -> str:
    change_log = dataset.change_log
    statements = []
    if change_log.deletions:
        deletions = triples_to_ntriples(resolve_local_nodes(change_log.deletions, url))
        statements.append(f"DELETE DATA {{\n{deletions}\n}};")
    if change_log.additions:
        additions = triples_to_ntriples(resolve_local_nodes(change_log.additions, url))
        statements.append(f"INSERT DATA {{\n{additions}\n}};")
    return "\n".join(statements)


async def save_dataset_at(url: str, dataset: SolidDataset, *, fetch: Fetch) -> SolidDataset:
    """Store ``dataset`` at ``url`` and return the stored version.

    The given dataset is left untouched. The returned one points at ``url``,
    has an empty change log and has its local nodes resolved to ``url#name``.
    """
    url = str(url)
    updating = is_update(dataset, url)

    if updating:
        response = await fetch(
            url,
            method="PATCH",
            headers={"Content-Type": SPARQL_UPDATE_MEDIA_TYPE},
            content=sparql_update_body(dataset, url),
        )
    else:
        headers = {"Content-Type": TURTLE_MEDIA_TYPE, "Link": RESOURCE_TYPE_LINK}
        if not dataset.has_resource_info():
            headers["If-None-Match"] = "*"
        response = await fetch(
            url,
            method="PUT",
            headers=headers,
            content=triples_to_ntriples(resolve_local_nodes(dataset, url)),
        )

    if is_unsuccessful(response):
        if updating:
            diagnostics = (
                "The changes that were sent to the Pod are listed below.\n\n"
                + change_log_as_markdown(dataset)
            )
        else:
            diagnostics = (
                "The SolidDataset that was sent to the Pod is listed below.\n\n"
                + dataset_as_markdown(dataset)
            )
        raise FetchError(
            f"Storing the Resource at [{url}] failed: {_status(response)}.\n\n{diagnostics}",
            response,
        )

    logger.info(f"Stored {url} ({'patch' if updating else 'replace'})")
    return _stored_dataset(dataset, url, _stored_resource_info(response, url))


async def create_container_at(url: str, *, fetch: Fetch) -> SolidDataset:
    """Create an empty container at ``url``; fails if something already exists there."""
    url = str(url)
    if not url.endswith("/"):
        url += "/"

    response = await fetch(
        url,
        method="PUT",
        headers={
            "Accept": TURTLE_MEDIA_TYPE,
            "Content-Type": TURTLE_MEDIA_TYPE,
            "If-None-Match": "*",
            "Link": CONTAINER_TYPE_LINK,
        },
    )

    if is_unsuccessful(response):
        if response.status_code == 409 and response.text.strip() == NSS_CREATE_CONTAINER_ERROR:
            logger.warning(f"Store refused container PUT at {url}; creating it through a placeholder child")
            return await _create_container_through_child(url, fetch=fetch)
        raise FetchError(
            f"Creating the empty Container at [{url}] failed: {_status(response)}.",
            response,
        )

    return _empty_container(_stored_resource_info(response, url))


async def _create_container_through_child(url: str, *, fetch: Fetch) -> SolidDataset:
    # Writing a child makes the store create its parent container on the fly.
    try:
        await get_resource_info(url, fetch=fetch)
    except FetchError as exc:
        if exc.status_code != 404:
            raise
    else:
        raise ContainerExistsError(
            f"The Container at [{url}] already exists, and therefore cannot be created again."
        )

    placeholder_url = url + ".dummy"
    create_response = await fetch(
        placeholder_url,
        method="PUT",
        headers={"Accept": TURTLE_MEDIA_TYPE, "Content-Type": TURTLE_MEDIA_TYPE},
    )
    if is_unsuccessful(create_response):
        raise FetchError(
            f"Creating the empty Container at [{url}] failed: {_status(create_response)}.",
            create_response,
        )

    delete_response = await fetch(placeholder_url, method="DELETE")
    if is_unsuccessful(delete_response):
        raise FetchError(
            f"Removing the placeholder Resource at [{placeholder_url}] failed: {_status(delete_response)}.",
            delete_response,
        )

    info = await get_resource_info(url, fetch=fetch)
    return _empty_container(replace(info, is_raw_data=False))


def _location_of(response: Response, container_url: str, what: str) -> str:
    location = response.headers.get("location")
    if location is None:
        raise MissingLocationError(f"Could not determine the location of the newly {what}.")
    return urljoin(container_url, location)


async def save_dataset_in_container(
    container_url: str,
    dataset: SolidDataset,
    *,
    fetch: Fetch,
    slug_suggestion: str | None = None,
) -> SolidDataset:
    """Store ``dataset`` as a new resource inside an existing container.

    The store picks the final URL (``slug_suggestion`` is only a hint). This only
    needs Append access to the container.
    """
    container_url = str(container_url)
    headers = {"Content-Type": TURTLE_MEDIA_TYPE, "Link": RESOURCE_TYPE_LINK}
    if slug_suggestion:
        headers["Slug"] = slug_suggestion

    response = await fetch(
        container_url,
        method="POST",
        headers=headers,
        content=triples_to_ntriples(dataset),
    )
    if is_unsuccessful(response):
        raise FetchError(
            f"Storing the Resource in the Container at [{container_url}] failed: {_status(response)}.\n\n"
            "The SolidDataset that was sent to the Pod is listed below.\n\n"
            + dataset_as_markdown(dataset),
            response,
        )

    resource_url = _location_of(response, container_url, "saved SolidDataset")
    logger.info(f"Stored new resource {resource_url} in {container_url}")
    info = ResourceInfo(source_url=resource_url, is_raw_data=False, content_type=TURTLE_MEDIA_TYPE)
    return _stored_dataset(dataset, resource_url, info)


async def create_container_in_container(
    container_url: str,
    *,
    fetch: Fetch,
    slug_suggestion: str | None = None,
) -> SolidDataset:
    container_url = str(container_url)
    headers = {"Content-Type": TURTLE_MEDIA_TYPE, "Link": CONTAINER_TYPE_LINK}
    if slug_suggestion:
        headers["Slug"] = slug_suggestion

    response = await fetch(container_url, method="POST", headers=headers)
    if is_unsuccessful(response):
        raise FetchError(
            f"Creating an empty Container in the Container at [{container_url}] failed: {_status(response)}.",
            response,
        )

    resource_url = _location_of(response, container_url, "created Container")
    return _empty_container(ResourceInfo(source_url=resource_url, is_raw_data=False))


def _target_url(resource: str | SolidDataset | ResourceInfo) -> str:
    if isinstance(resource, str):
        return resource
    url = get_source_url(resource)
    if url is None:
        raise ValueError("Cannot delete a SolidDataset that has not been stored yet.")
    return url


async def delete_dataset(dataset: str | SolidDataset | ResourceInfo, *, fetch: Fetch) -> None:
    url = _target_url(dataset)
    response = await fetch(url, method="DELETE")
    if is_unsuccessful(response):
        raise FetchError(f"Deleting the SolidDataset at [{url}] failed: {_status(response)}.", response)


async def delete_container(container: str | SolidDataset | ResourceInfo, *, fetch: Fetch) -> None:
    url = _target_url(container)
    if not is_container(url):
        raise NotAContainerError(
            f"You're trying to delete the Container at [{url}], but Container URLs should end in a `/`. "
            "Are you sure this is a Container?"
        )
    response = await fetch(url, method="DELETE")
    if is_unsuccessful(response):
        raise FetchError(f"Deleting the Container at [{url}] failed: {_status(response)}.", response)


def get_contained_resource_urls(container: SolidDataset) -> list[str]:
    """URLs of everything the container lists through ``ldp:contains``."""
    url = container.source_url
    if url is None:
        return []
    return [str(obj) for obj in container.objects(URIRef(url), LDP.contains)]
