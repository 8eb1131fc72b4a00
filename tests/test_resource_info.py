import httpx

from podsync.resource_info import (
    AccessModes,
    LinkRelation,
    parse_link_header,
    parse_resource_info,
    parse_wac_allow_header,
)


def _response(headers, url="https://pod.test/doc"):
    return httpx.Response(200, headers=headers, request=httpx.Request("GET", url))


def test_link_header_resolves_relative_targets_and_splits_relations():
    links = parse_link_header(
        '<doc.acl>; rel="acl", </profile#me>; rel="http://www.w3.org/ns/solid/terms#podOwner", '
        '<http://www.w3.org/ns/ldp#Resource>; rel="type describedby"',
        "https://pod.test/folder/doc",
    )

    assert links["acl"] == ["https://pod.test/folder/doc.acl"]
    assert links[LinkRelation.POD_OWNER.value] == ["https://pod.test/profile#me"]
    assert links["type"] == ["http://www.w3.org/ns/ldp#Resource"]
    assert links["describedby"] == ["http://www.w3.org/ns/ldp#Resource"]


def test_link_header_missing_is_empty():
    assert parse_link_header(None, "https://pod.test/") == {}
    assert parse_link_header("", "https://pod.test/") == {}


def test_wac_allow_header():
    permissions = parse_wac_allow_header('user="read write append control",public="read"')

    assert permissions.user == AccessModes(read=True, append=True, write=True, control=True)
    assert permissions.public == AccessModes(read=True)


def test_wac_allow_header_malformed_grants_nothing():
    permissions = parse_wac_allow_header("user=read, public")

    assert permissions.user == AccessModes()
    assert permissions.public == AccessModes()


def test_wac_allow_header_missing_group_defaults_to_false():
    permissions = parse_wac_allow_header('public="append"')

    assert permissions.user == AccessModes()
    assert permissions.public.append
    assert not permissions.public.read


def test_resource_info_from_turtle_response():
    info = parse_resource_info(
        _response(
            {
                "Content-Type": "text/turtle; charset=utf-8",
                "Link": '<https://pod.test/doc.acl>; rel="acl", '
                '<https://pod.test/doc.acr>; rel="http://www.w3.org/ns/solid/acp#accessControl"',
                "WAC-Allow": 'user="read"',
            }
        )
    )

    assert info.source_url == "https://pod.test/doc"
    assert not info.is_raw_data
    assert info.content_type == "text/turtle; charset=utf-8"
    assert info.acl_url == "https://pod.test/doc.acl"
    assert info.access_control_url == "https://pod.test/doc.acr"
    assert info.permissions.user.read


def test_resource_info_without_headers():
    info = parse_resource_info(_response({}))

    assert info.is_raw_data
    assert info.content_type is None
    assert info.linked_resources == {}
    assert info.permissions is None
    assert info.acl_url is None


def test_resource_info_uses_final_location_after_redirect():
    info = parse_resource_info(_response({"Content-Type": "text/turtle"}, url="https://pod.test/moved"), "https://pod.test/doc")

    assert info.source_url == "https://pod.test/moved"


def test_link_header_quoted_commas_do_not_split_links():
    links = parse_link_header('<a>; title="x, y"; rel="acl", <b>; rel="type"', "https://p/")

    assert links == {"acl": ["https://p/a"], "type": ["https://p/b"]}
