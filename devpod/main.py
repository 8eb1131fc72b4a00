from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from threading import Lock
from typing import Any
from urllib.parse import urlsplit
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import Response
from pyoxigraph import DefaultGraph, RdfFormat, Store
from rdflib import BNode, Graph, Literal as RdfLiteral, URIRef
from rdflib.namespace import RDF, XSD

from podsync.vocab import LDP, NSS_CREATE_CONTAINER_ERROR, SPARQL_UPDATE_MEDIA_TYPE, TURTLE_MEDIA_TYPE


NSS_CONTAINER_QUIRK = os.getenv("DEVPOD_NSS_CONTAINER_QUIRK", "false").strip().lower() in {"1", "true", "yes", "on"}
POD_OWNER = os.getenv("DEVPOD_POD_OWNER", "").strip()
WAC_ALLOW = 'user="read write append control",public="read"'

_RESOURCES: dict[str, Store] = {}
_RESOURCES_LOCK = Lock()

logger = logging.getLogger(__name__)


@dataclass
class APIError(Exception):
    status_code: int
    code: str
    message: str
    details: dict[str, Any] | None = None


def reset_store() -> None:
    with _RESOURCES_LOCK:
        _RESOURCES.clear()


def _request_url(request: Request) -> str:
    return str(request.url).split("?", 1)[0]


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";", 1)[0].strip().lower()


def _is_container_url(url: str) -> bool:
    return url.endswith("/")


def _is_root(url: str) -> bool:
    return urlsplit(url).path in {"", "/"}


def _parent_url(url: str) -> str | None:
    if _is_root(url):
        return None
    head = url[:-1] if url.endswith("/") else url
    return head.rsplit("/", 1)[0] + "/"


def _exists(url: str) -> bool:
    return url in _RESOURCES or _is_root(url)


def _children(container_url: str) -> list[str]:
    return sorted(url for url in _RESOURCES if not _is_root(url) and _parent_url(url) == container_url)


def _ensure_parents(url: str) -> None:
    parent = _parent_url(url)
    while parent is not None and parent not in _RESOURCES:
        _RESOURCES[parent] = Store()
        parent = _parent_url(parent)


def _term_to_rdflib(term: Any) -> Any:
    cls_name = term.__class__.__name__
    if cls_name == "NamedNode":
        return URIRef(term.value)
    if cls_name == "BlankNode":
        return BNode(term.value)
    if cls_name == "Literal":
        language = getattr(term, "language", None)
        dt_value = term.datatype.value if term.datatype else None
        if language:
            return RdfLiteral(term.value, lang=language)
        if dt_value and dt_value != str(XSD.string):
            return RdfLiteral(term.value, datatype=URIRef(dt_value))
        return RdfLiteral(term.value)
    return URIRef(str(term).strip("<>"))


def _resource_graph(url: str) -> Graph:
    g = Graph()
    g.bind("ldp", LDP, override=True)
    store = _RESOURCES.get(url)
    if store is not None:
        for quad in store.quads_for_pattern(None, None, None, DefaultGraph()):
            g.add((_term_to_rdflib(quad.subject), _term_to_rdflib(quad.predicate), _term_to_rdflib(quad.object)))
    if _is_container_url(url):
        subject = URIRef(url)
        g.add((subject, RDF.type, LDP.BasicContainer))
        g.add((subject, RDF.type, LDP.Container))
        for child in _children(url):
            g.add((subject, LDP.contains, URIRef(child)))
    return g


def _load_turtle(body: bytes, base_iri: str) -> Store:
    store = Store()
    if body.strip():
        try:
            store.load(body, format=RdfFormat.TURTLE, base_iri=base_iri)
        except SyntaxError as exc:
            raise APIError(400, "invalid_turtle", "Request body is not valid Turtle", {"cause": str(exc)})
    return store


def _require_media_type(request: Request, expected: str) -> None:
    if _media_type(request) != expected:
        raise APIError(
            415,
            "unsupported_media_type",
            f"Expected `{expected}`",
            {"content_type": request.headers.get("content-type")},
        )


def _linked_type(request: Request) -> str | None:
    match = re.search(r"<([^>]*)>\s*;\s*rel=\"?type\"?", request.headers.get("link", ""))
    return match.group(1) if match else None


def _resource_headers(url: str) -> dict[str, str]:
    resource_type = LDP.BasicContainer if _is_container_url(url) else LDP.Resource
    links = [f'<{url}.acl>; rel="acl"', f'<{resource_type}>; rel="type"']
    if POD_OWNER:
        links.append(f'<{POD_OWNER}>; rel="http://www.w3.org/ns/solid/terms#podOwner"')
    return {"Link": ", ".join(links), "WAC-Allow": WAC_ALLOW}


def _pretty_json_response(content: Any, status_code: int = 200, media_type: str = "application/json") -> Response:
    return Response(
        content=json.dumps(content, indent=2, ensure_ascii=False),
        status_code=status_code,
        media_type=f"{media_type}; charset=utf-8",
    )


def _slug_name(slug: str | None) -> str:
    value = re.sub(r"[^A-Za-z0-9._-]+", "-", slug or "").strip("-.")
    return value or uuid4().hex


app = FastAPI(title="Development pod", version="0.1.0")


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return _pretty_json_response(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message, "details": exc.details or {}}},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return _pretty_json_response(
        status_code=500,
        content={"error": {"code": "internal_server_error", "message": "Unexpected server error", "details": {"cause": str(exc)}}},
    )


def _read(url: str, *, with_body: bool) -> Response:
    with _RESOURCES_LOCK:
        if not _exists(url):
            raise APIError(404, "resource_not_found", f"No resource at `{url}`")
        body = _resource_graph(url).serialize(format="turtle") if with_body else ""
    return Response(content=body, media_type=f"{TURTLE_MEDIA_TYPE}; charset=utf-8", headers=_resource_headers(url))


def _put(url: str, request: Request, body: bytes) -> Response:
    _require_media_type(request, TURTLE_MEDIA_TYPE)
    create_only = request.headers.get("if-none-match", "").strip() == "*"

    if _is_container_url(url):
        if NSS_CONTAINER_QUIRK:
            return Response(content=NSS_CREATE_CONTAINER_ERROR, status_code=409, media_type="text/plain")
        with _RESOURCES_LOCK:
            if _exists(url):
                status = 412 if create_only else 409
                raise APIError(status, "container_exists", f"A container already exists at `{url}`")
            _ensure_parents(url)
            _RESOURCES[url] = _load_turtle(body, url)
        logger.debug(f"Created container {url}")
        return Response(status_code=201, headers=_resource_headers(url))

    store = _load_turtle(body, url)
    with _RESOURCES_LOCK:
        existed = url in _RESOURCES
        if existed and create_only:
            raise APIError(412, "resource_exists", f"A resource already exists at `{url}`")
        _ensure_parents(url)
        _RESOURCES[url] = store
    logger.debug(f"Replaced {url}" if existed else f"Created {url}")
    return Response(status_code=204 if existed else 201, headers=_resource_headers(url))


def _patch(url: str, request: Request, body: bytes) -> Response:
    _require_media_type(request, SPARQL_UPDATE_MEDIA_TYPE)
    with _RESOURCES_LOCK:
        existed = url in _RESOURCES
        store = _RESOURCES[url] if existed else Store()
        try:
            store.update(body.decode("utf-8"), base_iri=url)
        except SyntaxError as exc:
            raise APIError(400, "invalid_sparql_update", "Request body is not a valid SPARQL update", {"cause": str(exc)})
        if not existed:
            _ensure_parents(url)
            _RESOURCES[url] = store
    logger.debug(f"Patched {url}")
    return Response(status_code=204 if existed else 201, headers=_resource_headers(url))


def _post(url: str, request: Request, body: bytes) -> Response:
    if not _is_container_url(url):
        raise APIError(405, "not_a_container", f"Can only POST to a container, not `{url}`")
    create_container = _linked_type(request) == str(LDP.BasicContainer)
    if not create_container:
        _require_media_type(request, TURTLE_MEDIA_TYPE)

    name = _slug_name(request.headers.get("slug"))
    with _RESOURCES_LOCK:
        if not _exists(url):
            raise APIError(404, "container_not_found", f"No container at `{url}`")
        suffix = "/" if create_container else ""
        target = f"{url}{name}{suffix}"
        if target in _RESOURCES:
            target = f"{url}{name}-{uuid4().hex[:8]}{suffix}"
        _RESOURCES[target] = Store() if create_container else _load_turtle(body, target)
    logger.debug(f"Created {target} in {url}")
    headers = {**_resource_headers(target), "Location": urlsplit(target).path}
    return Response(status_code=201, headers=headers)


def _delete(url: str) -> Response:
    with _RESOURCES_LOCK:
        if _is_root(url):
            raise APIError(405, "root_container", "The root container cannot be deleted")
        if url not in _RESOURCES:
            raise APIError(404, "resource_not_found", f"No resource at `{url}`")
        if _is_container_url(url) and _children(url):
            raise APIError(409, "container_not_empty", f"Container `{url}` is not empty", {"contains": _children(url)})
        del _RESOURCES[url]
    logger.debug(f"Deleted {url}")
    return Response(status_code=204)


@app.api_route("/{path:path}", methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"])
async def handle_resource(path: str, request: Request):
    url = _request_url(request)
    if request.method in {"GET", "HEAD"}:
        return _read(url, with_body=request.method == "GET")
    body = await request.body()
    if request.method == "PUT":
        return _put(url, request, body)
    if request.method == "PATCH":
        return _patch(url, request, body)
    if request.method == "POST":
        return _post(url, request, body)
    return _delete(url)
