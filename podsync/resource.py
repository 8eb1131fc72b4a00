from __future__ import annotations

from podsync.dataset import SolidDataset
from podsync.errors import FetchError
from podsync.fetcher import Fetch, is_unsuccessful
from podsync.resource_info import LinkRelation, ResourceInfo, parse_resource_info


async def get_resource_info(url: str, *, fetch: Fetch) -> ResourceInfo:
    """Retrieve a resource's metadata (location, links, permissions) without its body."""
    url = str(url)
    response = await fetch(url, method="HEAD")
    if is_unsuccessful(response):
        raise FetchError(
            f"Fetching the metadata of the Resource at [{url}] failed: "
            f"[{response.status_code}] [{response.reason_phrase}].",
            response,
        )
    return parse_resource_info(response, url)


def _info_of(resource: SolidDataset | ResourceInfo) -> ResourceInfo | None:
    if isinstance(resource, ResourceInfo):
        return resource
    return resource.resource_info


def get_source_url(resource: SolidDataset | ResourceInfo) -> str | None:
    info = _info_of(resource)
    return info.source_url if info is not None else None


def is_container(resource: str | SolidDataset | ResourceInfo) -> bool:
    url = resource if isinstance(resource, str) else get_source_url(resource)
    return url is not None and url.endswith("/")


def is_raw_data(resource: SolidDataset | ResourceInfo) -> bool:
    info = _info_of(resource)
    return info is not None and info.is_raw_data


def get_content_type(resource: SolidDataset | ResourceInfo) -> str | None:
    info = _info_of(resource)
    return info.content_type if info is not None else None


def get_pod_owner(resource: SolidDataset | ResourceInfo) -> str | None:
    """The WebID of the pod owner, if the server exposes exactly one to the current user."""
    info = _info_of(resource)
    if info is None:
        return None
    owners = info.linked(LinkRelation.POD_OWNER)
    return owners[0] if len(owners) == 1 else None


def is_pod_owner(web_id: str, resource: SolidDataset | ResourceInfo) -> bool | None:
    owner = get_pod_owner(resource)
    if owner is None:
        return None
    return owner == web_id
