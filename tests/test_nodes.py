"""Tests for the document tree."""

import pytest
from md2doc.nodes import (
    Blockquote,
    Cell,
    Diagram,
    Document,
    Heading,
    Image,
    Link,
    List,
    ListItem,
    Paragraph,
    PayloadAlreadySetError,
    Row,
    Table,
    Text,
    attach_payload,
    has_payload,
    iter_nodes,
    plain_text,
)


class TestIterNodes:
    """Tests for iter_nodes()."""

    def test__nested_tree__yields_depth_first_in_order(self) -> None:
        """Visit blocks, list items and inlines in document order."""
        first_image = Image(src="a.png")
        second_image = Image(src="b.png")
        diagram = Diagram(source="graph TD")
        document = Document(
            children=[
                Heading(level=1, children=[Text("Title")]),
                List(
                    ordered=False,
                    items=[ListItem(children=[Paragraph(children=[first_image])])],
                ),
                Blockquote(children=[diagram]),
                Paragraph(children=[Link(url="x", children=[second_image])]),
            ]
        )

        found = [node for node in iter_nodes(document) if isinstance(node, (Image, Diagram))]

        assert found == [first_image, diagram, second_image]
        assert found[0] is first_image

    def test__table__yields_header_and_body_cells(self) -> None:
        """Visit header cells before body cells."""
        table = Table(
            header=Row(cells=[Cell(children=[Text("h")])]),
            rows=[Row(cells=[Cell(children=[Text("b")])])],
        )

        texts = [node.value for node in iter_nodes(Document(children=[table])) if isinstance(node, Text)]

        assert texts == ["h", "b"]

    def test__empty_document__yields_nothing(self) -> None:
        """Yield nothing for an empty document."""
        assert list(iter_nodes(Document())) == []


class TestPlainText:
    """Tests for plain_text()."""

    def test__mixed_inlines__flattened(self) -> None:
        """Flatten text, link labels and image alt text."""
        inlines = [
            Text("See "),
            Link(url="https://example.com", children=[Text("docs", bold=True)]),
            Text(" and "),
            Image(src="a.png", alt="chart"),
        ]

        assert plain_text(inlines) == "See docs and chart"


class TestAttachPayload:
    """Tests for attach_payload()."""

    def test__absent_payload__attached(self) -> None:
        """Attach bytes to a node without a payload."""
        image = Image(src="a.png")

        attach_payload(image, b"data")

        assert image.payload == b"data"
        assert has_payload(image)

    def test__present_payload__raises_error(self) -> None:
        """Refuse to overwrite an existing payload."""
        diagram = Diagram(source="graph TD", payload=b"first")

        with pytest.raises(PayloadAlreadySetError):
            attach_payload(diagram, b"second")

        assert diagram.payload == b"first"

    def test__bytearray__stored_as_bytes(self) -> None:
        """Store payloads as immutable bytes."""
        image = Image(src="a.png")

        attach_payload(image, bytearray(b"xy"))

        assert image.payload == b"xy"
        assert isinstance(image.payload, bytes)
