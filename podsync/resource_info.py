"""Turn an HTTP response into the metadata attached to a fetched or stored resource."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping
from urllib.parse import urljoin

from podsync.fetcher import Response, response_url
from podsync.vocab import ACP, SOLID, TURTLE_MEDIA_TYPE


class LinkRelation(str, Enum):
    ACL = "acl"
    ACCESS_CONTROL = str(ACP.accessControl)
    POD_OWNER = str(SOLID.podOwner)
    TYPE = "type"
    DESCRIBED_BY = "describedby"
    NEXT = "next"
    PREV = "prev"


@dataclass(frozen=True)
class AccessModes:
    read: bool = False
    append: bool = False
    write: bool = False
    control: bool = False


@dataclass(frozen=True)
class Permissions:
    user: AccessModes = field(default_factory=AccessModes)
    public: AccessModes = field(default_factory=AccessModes)


@dataclass(frozen=True)
class ResourceInfo:
    source_url: str
    is_raw_data: bool
    content_type: str | None = None
    linked_resources: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    permissions: Permissions | None = None

    def linked(self, relation: LinkRelation | str) -> tuple[str, ...]:
        key = relation.value if isinstance(relation, LinkRelation) else relation
        return self.linked_resources.get(key, ())

    @property
    def acl_url(self) -> str | None:
        urls = self.linked(LinkRelation.ACL)
        return urls[0] if urls else None

    @property
    def access_control_url(self) -> str | None:
        urls = self.linked(LinkRelation.ACCESS_CONTROL)
        return urls[0] if urls else None


_LINK_VALUE_RE = re.compile(r"<([^>]*)>((?:\s*;\s*(?:\"[^\"]*\"|[^;,<\"])+)*)")
_LINK_PARAM_RE = re.compile(r";\s*([A-Za-z*-]+)\s*=\s*(\"[^\"]*\"|[^;,\s]+)")
_WAC_GROUP_RE = re.compile(r"([A-Za-z]+)\s*=\s*\"([^\"]*)\"")


def parse_link_header(value: str | None, base_url: str) -> dict[str, list[str]]:
    """Map every relation in a ``Link`` header to the absolute URLs it points at."""
    links: dict[str, list[str]] = {}
    if not value:
        return links
    for match in _LINK_VALUE_RE.finditer(value):
        target = urljoin(base_url, match.group(1).strip())
        for name, raw in _LINK_PARAM_RE.findall(match.group(2)):
            if name.lower() != "rel":
                continue
            for relation in raw.strip('"').split():
                links.setdefault(relation, []).append(target)
    return links


def _access_modes(raw: str | None) -> AccessModes:
    if raw is None:
        return AccessModes()
    modes = set(raw.split())
    return AccessModes(
        read="read" in modes,
        append="append" in modes,
        write="write" in modes,
        control="control" in modes,
    )


def parse_wac_allow_header(value: str) -> Permissions:
    # Hints are advisory: anything that does not parse simply grants nothing.
    groups = {name.lower(): modes for name, modes in _WAC_GROUP_RE.findall(value)}
    return Permissions(
        user=_access_modes(groups.get("user")),
        public=_access_modes(groups.get("public")),
    )


def _media_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def parse_resource_info(response: Response, request_url: str = "") -> ResourceInfo:
    source_url = response_url(response, request_url)
    content_type = response.headers.get("content-type")
    linked = parse_link_header(response.headers.get("link"), source_url)
    wac_allow = response.headers.get("wac-allow")

    return ResourceInfo(
        source_url=source_url,
        is_raw_data=_media_type(content_type) != TURTLE_MEDIA_TYPE,
        content_type=content_type,
        linked_resources={relation: tuple(urls) for relation, urls in linked.items()},
        permissions=parse_wac_allow_header(wac_allow) if wac_allow is not None else None,
    )
