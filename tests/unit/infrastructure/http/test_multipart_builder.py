import pytest

from layerx.domain.interfaces.serializable import Serializable
from layerx.domain.models.bodies import FormBody
from layerx.domain.models.files import FileRef
from layerx.infrastructure.http.multipart import MultipartBuilder, MultipartPayload, format_scalar


class DocumentBody(Serializable):
    """Body with one scalar field, one nested field and an attachment list."""

    def __init__(self, title, attachments, cover=None):
        self.title = title
        self.attachments = attachments
        self.cover = cover

    def to_json(self):
        return {"title": self.title, "published": False, "meta": {"pages": 3}, "tags": ["a"]}

    def files(self):
        return {
            "attachments": lambda: self.attachments,
            "cover": lambda: self.cover,
        }


def pdf(name: str) -> FileRef:
    return FileRef(content=f"%PDF {name}".encode(), filename=name)


def test_file_list_is_sent_as_indexed_parts_in_order():
    body = DocumentBody("Report", [pdf("a.pdf"), pdf("b.pdf")])

    payload = MultipartBuilder().build(body)

    assert [name for name, _ in payload.files] == ["attachments[0]", "attachments[1]"]
    assert payload.files[0][1] == ("a.pdf", b"%PDF a.pdf", "application/pdf")
    assert payload.files[1][1][0] == "b.pdf"


def test_empty_file_field_produces_no_part():
    body = DocumentBody("Report", [pdf("a.pdf")], cover=None)

    payload = MultipartBuilder().build(body)

    assert "cover" not in payload.part_names


def test_single_file_is_sent_under_its_own_name():
    body = DocumentBody("Report", [], cover=FileRef(content=b"img", filename="cover.png"))

    payload = MultipartBuilder().build(body)

    assert [name for name, _ in payload.files] == ["cover"]
    assert payload.files[0][1][2] == "image/png"


def test_only_scalar_fields_become_form_fields():
    payload = MultipartBuilder().build(DocumentBody("Report", []))

    assert payload.fields == {"title": "Report", "published": "false"}


@pytest.mark.parametrize(
    "value, expected",
    [(True, "true"), (False, "false"), (3, "3"), (2.5, "2.5"), ("x", "x")],
)
def test_format_scalar(value, expected):
    assert format_scalar(value) == expected


def test_extractor_yielding_something_else_is_rejected():
    body = DocumentBody("Report", attachments="not-a-file")

    with pytest.raises(TypeError, match="attachments"):
        MultipartBuilder().build(body)


def test_list_with_a_non_file_entry_is_rejected():
    body = DocumentBody("Report", [pdf("a.pdf"), "b.pdf"])

    with pytest.raises(TypeError, match=r"attachments\[1\]"):
        MultipartBuilder().build(body)


def test_form_body_groups_files_by_count():
    one = FormBody(files={"doc": [pdf("a.pdf")]})
    many = FormBody(files={"doc": [pdf("a.pdf"), pdf("b.pdf")]})
    empty = FormBody(files={"doc": []})

    assert [name for name, _ in MultipartBuilder().build(one).files] == ["doc"]
    assert [name for name, _ in MultipartBuilder().build(many).files] == ["doc[0]", "doc[1]"]
    assert MultipartBuilder().build(empty).files == []


def test_files_on_disk_are_read_when_building(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")

    payload = MultipartBuilder().build(FormBody(files={"notes": [FileRef.from_path(path)]}))

    assert payload.files == [("notes", ("notes.txt", b"hello", "text/plain"))]


def test_content_type_carries_the_boundary():
    payload = MultipartPayload(boundary="abc123")

    assert payload.content_type == "multipart/form-data; boundary=abc123"


def test_closing_delimiter():
    assert MultipartPayload(boundary="abc123").closing_delimiter == b"--abc123--\r\n"
