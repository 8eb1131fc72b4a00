import asyncio

import pytest
from rdflib import Literal, URIRef

from podsync.dataset import create_dataset
from podsync.errors import ContainerExistsError, FetchError
from podsync.fetcher import client_fetch
from podsync.resource import get_pod_owner, get_resource_info
from podsync.sync import (
    create_container_at,
    create_container_in_container,
    delete_container,
    delete_dataset,
    get_contained_resource_urls,
    get_dataset,
    save_dataset_at,
    save_dataset_in_container,
)

POD = "https://pod.test"
NAME = URIRef("http://xmlns.com/foaf/0.1/name")
KNOWS = URIRef("http://xmlns.com/foaf/0.1/knows")


def test_create_edit_and_refetch(pod_client):
    async def scenario():
        async with pod_client() as client:
            fetch = client_fetch(client)

            draft = create_dataset()
            me = draft.create_local_node("me")
            draft.add((me, NAME, Literal("Ada")))
            created = await save_dataset_at(f"{POD}/people/ada", draft, fetch=fetch)

            fetched = await get_dataset(f"{POD}/people/ada", fetch=fetch)
            subject = URIRef(f"{POD}/people/ada#me")
            fetched.set_value(subject, NAME, Literal("Ada Lovelace", lang="en"))
            friend = fetched.create_local_node("friend")
            fetched.add((subject, KNOWS, friend))
            fetched.add((friend, NAME, Literal("Charles")))
            await save_dataset_at(f"{POD}/people/ada", fetched, fetch=fetch)

            return created, await get_dataset(f"{POD}/people/ada", fetch=fetch)

    created, refetched = asyncio.run(scenario())

    subject = URIRef(f"{POD}/people/ada#me")
    friend = URIRef(f"{POD}/people/ada#friend")
    assert list(created) == [(subject, NAME, Literal("Ada"))]
    assert set(refetched) == {
        (subject, NAME, Literal("Ada Lovelace", lang="en")),
        (subject, KNOWS, friend),
        (friend, NAME, Literal("Charles")),
    }
    assert refetched.resource_info.permissions.user.write
    assert refetched.resource_info.acl_url == f"{POD}/people/ada.acl"


def test_creating_twice_is_refused(pod_client):
    async def scenario():
        async with pod_client() as client:
            fetch = client_fetch(client)
            await save_dataset_at(f"{POD}/doc", create_dataset(), fetch=fetch)
            await save_dataset_at(f"{POD}/doc", create_dataset(), fetch=fetch)

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status_code == 412


def test_containers_list_what_they_contain(pod_client):
    async def scenario():
        async with pod_client() as client:
            fetch = client_fetch(client)
            await create_container_at(f"{POD}/notes", fetch=fetch)
            note = create_dataset()
            note.add((note.create_local_node("it"), NAME, Literal("first")))
            saved = await save_dataset_in_container(f"{POD}/notes/", note, fetch=fetch, slug_suggestion="first")
            sub = await create_container_in_container(f"{POD}/notes/", fetch=fetch, slug_suggestion="archive")
            container = await get_dataset(f"{POD}/notes/", fetch=fetch)
            return saved, sub, container

    saved, sub, container = asyncio.run(scenario())

    assert saved.source_url == f"{POD}/notes/first"
    assert list(saved) == [(URIRef(f"{POD}/notes/first#it"), NAME, Literal("first"))]
    assert sub.source_url == f"{POD}/notes/archive/"
    assert sorted(get_contained_resource_urls(container)) == [f"{POD}/notes/archive/", f"{POD}/notes/first"]


def test_container_fallback_against_quirky_store(pod_client, devpod, monkeypatch):
    monkeypatch.setattr(devpod, "NSS_CONTAINER_QUIRK", True)

    async def scenario():
        async with pod_client() as client:
            fetch = client_fetch(client)
            container = await create_container_at(f"{POD}/photos/", fetch=fetch)
            listing = await get_dataset(f"{POD}/photos/", fetch=fetch)
            return container, listing

    container, listing = asyncio.run(scenario())

    assert container.source_url == f"{POD}/photos/"
    assert get_contained_resource_urls(listing) == []


def test_container_fallback_refuses_existing_container(pod_client, devpod, monkeypatch):
    monkeypatch.setattr(devpod, "NSS_CONTAINER_QUIRK", True)

    async def scenario():
        async with pod_client() as client:
            fetch = client_fetch(client)
            await save_dataset_at(f"{POD}/photos/cat", create_dataset(), fetch=fetch)
            await create_container_at(f"{POD}/photos/", fetch=fetch)

    with pytest.raises(ContainerExistsError):
        asyncio.run(scenario())


def test_deleting_containers(pod_client):
    async def scenario():
        async with pod_client() as client:
            fetch = client_fetch(client)
            await save_dataset_at(f"{POD}/box/item", create_dataset(), fetch=fetch)
            with pytest.raises(FetchError) as excinfo:
                await delete_container(f"{POD}/box/", fetch=fetch)
            await delete_dataset(f"{POD}/box/item", fetch=fetch)
            await delete_container(f"{POD}/box/", fetch=fetch)
            with pytest.raises(FetchError) as missing:
                await get_resource_info(f"{POD}/box/", fetch=fetch)
            return excinfo.value, missing.value

    not_empty, missing = asyncio.run(scenario())

    assert not_empty.status_code == 409
    assert missing.status_code == 404


def test_pod_owner_is_exposed(pod_client, devpod, monkeypatch):
    monkeypatch.setattr(devpod, "POD_OWNER", f"{POD}/profile/card#me")

    async def scenario():
        async with pod_client() as client:
            return await get_resource_info(f"{POD}/", fetch=client_fetch(client))

    info = asyncio.run(scenario())

    assert get_pod_owner(info) == f"{POD}/profile/card#me"
    assert info.linked("type") == ("http://www.w3.org/ns/ldp#BasicContainer",)
