from podsync.resource_info import AccessModes, Permissions, ResourceInfo
from scripts.inspect_resource import describe_info, describe_modes, safe_filename


def test_safe_filename():
    assert safe_filename("https://pod.test/notes/first#it") == "pod.test_notes_first"
    assert safe_filename("https://pod.test/notes/") == "pod.test_notes"
    assert safe_filename("") == "resource"


def test_describe_modes():
    assert describe_modes(AccessModes(read=True, write=True)) == "read write"
    assert describe_modes(AccessModes()) == "-"


def test_describe_info():
    info = ResourceInfo(
        source_url="https://pod.test/doc",
        is_raw_data=False,
        content_type="text/turtle",
        linked_resources={"acl": ("https://pod.test/doc.acl",)},
        permissions=Permissions(user=AccessModes(read=True)),
    )

    assert describe_info(info) == [
        "Location: https://pod.test/doc",
        "Content-Type: text/turtle",
        "Link (acl): https://pod.test/doc.acl",
        "Access (user): read",
        "Access (public): -",
    ]
