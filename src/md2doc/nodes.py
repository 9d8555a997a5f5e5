"""Document tree produced by the Markdown parser.

Block and inline nodes form closed unions (``Block`` and ``Inline``) so that
renderers can dispatch on node type alone. Image and diagram payloads start
absent and are filled in once by the enrichment pass via ``attach_payload``.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TypeAlias


class PayloadAlreadySetError(ValueError):
    """Raised when a payload is attached to a node that already has one."""


@dataclass
class Text:
    """Literal text with independent formatting flags."""

    value: str
    bold: bool = False
    italic: bool = False
    code: bool = False
    strikethrough: bool = False


@dataclass
class Link:
    """Hyperlink wrapping inline content."""

    url: str
    children: list["Inline"] = field(default_factory=list)
    title: str | None = None


@dataclass
class Image:
    """Image reference; ``payload`` holds resolved bytes after enrichment."""

    src: str
    alt: str = ""
    title: str | None = None
    payload: bytes | None = None


Inline: TypeAlias = Text | Link | Image


@dataclass
class Heading:
    level: int
    children: list[Inline] = field(default_factory=list)


@dataclass
class Paragraph:
    children: list[Inline] = field(default_factory=list)


@dataclass
class ListItem:
    """List entry; ``checked`` is set only for task list items."""

    children: list["Block"] = field(default_factory=list)
    checked: bool | None = None


@dataclass
class List:
    ordered: bool
    items: list[ListItem] = field(default_factory=list)
    start: int | None = None


@dataclass
class Cell:
    children: list[Inline] = field(default_factory=list)


@dataclass
class Row:
    cells: list[Cell] = field(default_factory=list)


@dataclass
class Table:
    """Table with one header row; rows may differ in cell count."""

    header: Row
    rows: list[Row] = field(default_factory=list)
    align: list[str | None] = field(default_factory=list)


@dataclass
class CodeBlock:
    language: str
    code: str


@dataclass
class Diagram:
    """Mermaid diagram source; ``payload`` holds the rendered image."""

    source: str
    payload: bytes | None = None


@dataclass
class Blockquote:
    children: list["Block"] = field(default_factory=list)


@dataclass
class HorizontalRule:
    pass


Block: TypeAlias = (
    Heading | Paragraph | List | Table | CodeBlock | Diagram | Blockquote | HorizontalRule
)

Node: TypeAlias = Block | ListItem | Row | Cell | Inline


@dataclass
class Document:
    """Root of the tree. Children are in document order."""

    children: list[Block] = field(default_factory=list)


def iter_nodes(document: Document) -> Iterator[Node]:
    """Yield every node of the tree depth-first in document order.

    Args:
        document: Parsed document

    Yields:
        Blocks, list items, table rows and cells, and inline nodes
    """
    for block in document.children:
        yield from _iter_block(block)


def _iter_block(block: Block | ListItem) -> Iterator[Node]:
    yield block
    match block:
        case Heading(children=inlines) | Paragraph(children=inlines):
            for inline in inlines:
                yield from _iter_inline(inline)
        case List(items=items):
            for item in items:
                yield from _iter_block(item)
        case ListItem(children=children) | Blockquote(children=children):
            for child in children:
                yield from _iter_block(child)
        case Table(header=header, rows=rows):
            for row in [header, *rows]:
                yield row
                for cell in row.cells:
                    yield cell
                    for inline in cell.children:
                        yield from _iter_inline(inline)
        case CodeBlock() | Diagram() | HorizontalRule():
            pass


def _iter_inline(inline: Inline) -> Iterator[Node]:
    yield inline
    if isinstance(inline, Link):
        for child in inline.children:
            yield from _iter_inline(child)


def plain_text(inlines: list[Inline]) -> str:
    """Flatten inline nodes to plain text.

    Links contribute their label, images their alt text.
    """
    parts: list[str] = []
    for inline in inlines:
        match inline:
            case Text(value=value):
                parts.append(value)
            case Link(children=children):
                parts.append(plain_text(children))
            case Image(alt=alt):
                parts.append(alt)
    return "".join(parts)


def has_payload(node: Image | Diagram) -> bool:
    return node.payload is not None


def attach_payload(node: Image | Diagram, data: bytes) -> None:
    """Attach resolved bytes to an image or diagram node.

    Payloads are write-once: a node that already carries a payload is never
    overwritten.

    Args:
        node: Image or Diagram node
        data: Resolved image bytes

    Raises:
        PayloadAlreadySetError: If the node already has a payload
    """
    if node.payload is not None:
        raise PayloadAlreadySetError(f"{type(node).__name__} payload is already set")
    node.payload = bytes(data)
