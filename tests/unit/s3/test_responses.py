"""Unit tests for s3/responses.py — ListBucketResult rendering."""

from xml.etree.ElementTree import fromstring

from s3_sharepoint.graph.models import CanonicalItem, FileFacet, FolderFacet
from s3_sharepoint.s3.filters import NameFilter
from s3_sharepoint.s3.responses import render_list_bucket_result

NS = "{http://s3.amazonaws.com/doc/2006-03-01/}"

DOCS = CanonicalItem(id="f1", name="docs", web_url="u", created_at="c", kind=FolderFacet(3))
A_TXT = CanonicalItem(
    id="a1",
    name="a.txt",
    web_url="u",
    created_at="c",
    last_modified_at="2024-05-01T10:00:00Z",
    e_tag='"{ABC},1"',
    size=10,
    kind=FileFacet("text/plain"),
)
BARE_PDF = CanonicalItem(id="b1", name="b.pdf", web_url="u", created_at="c", kind=FileFacet("x"))

ROOT_LISTING = b"""<?xml version="1.0" encoding="UTF-8"?>
<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">
  <Name>site-1</Name>
  <Prefix></Prefix>
  <IsTruncated>false</IsTruncated>
  <MaxKeys>1000</MaxKeys>
  <Marker></Marker>
  <CommonPrefixes>
    <Prefix>docs/</Prefix>
  </CommonPrefixes>
  <Contents>
    <Key>a.txt</Key>
    <Size>10</Size>
    <LastModified>2024-05-01T10:00:00Z</LastModified>
    <ETag>"{ABC},1"</ETag>
    <StorageClass>STANDARD</StorageClass>
  </Contents>
</ListBucketResult>"""


def _render(prefix: str, items: list, pattern: str = "", common: bool = True) -> bytes:
    return render_list_bucket_result(
        container_id="site-1",
        prefix=prefix,
        items=items,
        name_filter=NameFilter(pattern),
        include_common_prefixes=common,
    )


def _parse(document: bytes):
    return fromstring(document)


def _keys(document: bytes) -> list[str]:
    root = _parse(document)
    return [c.findtext(f"{NS}Key") for c in root.findall(f"{NS}Contents")]


def _common_prefixes(document: bytes) -> list[str]:
    root = _parse(document)
    return [c.findtext(f"{NS}Prefix") for c in root.findall(f"{NS}CommonPrefixes")]


class TestRootListing:
    def test_exact_document(self) -> None:
        assert _render("/", [DOCS, A_TXT]) == ROOT_LISTING

    def test_empty_prefix_same_as_slash(self) -> None:
        assert _render("", [DOCS, A_TXT]) == _render("/", [DOCS, A_TXT])

    def test_header_element_order(self) -> None:
        root = _parse(_render("/", [DOCS, A_TXT]))
        tags = [child.tag.replace(NS, "") for child in root]
        assert tags == [
            "Name",
            "Prefix",
            "IsTruncated",
            "MaxKeys",
            "Marker",
            "CommonPrefixes",
            "Contents",
        ]

    def test_repeated_render_is_byte_identical(self) -> None:
        assert _render("/", [DOCS, A_TXT]) == _render("/", [DOCS, A_TXT])


class TestPrefixedListing:
    def test_keys_and_prefixes_carry_trimmed_prefix(self) -> None:
        document = _render("/projects/2024/", [DOCS, A_TXT])
        root = _parse(document)
        assert root.findtext(f"{NS}Prefix") == "projects/2024/"
        assert _common_prefixes(document) == ["projects/2024/docs/"]
        assert _keys(document) == ["projects/2024/", "projects/2024/a.txt"]

    def test_folder_marker_comes_after_common_prefixes(self) -> None:
        root = _parse(_render("projects", [DOCS, A_TXT]))
        tags = [child.tag.replace(NS, "") for child in root][5:]
        assert tags == ["CommonPrefixes", "Contents", "Contents"]

    def test_folder_marker_has_zero_size(self) -> None:
        root = _parse(_render("projects", []))
        marker = root.find(f"{NS}Contents")
        assert marker is not None
        assert marker.findtext(f"{NS}Key") == "projects/"
        assert marker.findtext(f"{NS}Size") == "0"


class TestContents:
    def test_missing_fields_render_as_defaults(self) -> None:
        document = _render("/", [BARE_PDF])
        contents = _parse(document).find(f"{NS}Contents")
        assert contents is not None
        assert [child.tag.replace(NS, "") for child in contents] == [
            "Key",
            "Size",
            "LastModified",
            "ETag",
            "StorageClass",
        ]
        assert contents.findtext(f"{NS}Size") == "0"
        assert contents.findtext(f"{NS}LastModified") == ""
        assert contents.findtext(f"{NS}ETag") == ""
        assert contents.findtext(f"{NS}StorageClass") == "STANDARD"
        assert b"<LastModified></LastModified>" in document
        assert b"<ETag></ETag>" in document

    def test_folders_never_rendered_as_contents(self) -> None:
        assert _keys(_render("/", [DOCS])) == []

    def test_filter_prunes_files(self) -> None:
        document = _render("/", [DOCS, A_TXT, BARE_PDF], pattern=r"\.pdf$")
        assert _keys(document) == ["b.pdf"]
        assert _common_prefixes(document) == ["docs/"]

    def test_items_without_kind_are_skipped(self) -> None:
        unknown = CanonicalItem(id="n", name="notebook", web_url="u", created_at="c")
        document = _render("/", [unknown])
        assert _keys(document) == []
        assert _common_prefixes(document) == []

    def test_order_follows_catalog(self) -> None:
        document = _render("/", [BARE_PDF, A_TXT])
        assert _keys(document) == ["b.pdf", "a.txt"]

    def test_names_are_xml_escaped(self) -> None:
        item = CanonicalItem(id="x", name="R&D <draft>.txt", web_url="u", created_at="c",
                             kind=FileFacet("text/plain"))
        document = _render("/", [item])
        assert b"<Key>R&amp;D &lt;draft&gt;.txt</Key>" in document
        assert _keys(document) == ["R&D <draft>.txt"]


class TestCommonPrefixesFlag:
    def test_disabled_omits_common_prefixes(self) -> None:
        document = _render("/", [DOCS, A_TXT], common=False)
        assert _common_prefixes(document) == []
        assert _keys(document) == ["a.txt"]
