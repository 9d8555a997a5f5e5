"""Word-processor flow model renderer.

Maps a Document onto a flat sequence of styled paragraphs, the shape a
word processor stores. Spacing and indents are twentieths of a point,
run sizes are half-points.

Known limitations of the flow model:

* list items keep only their first paragraph;
* tables are flattened to one text paragraph;
* link labels are flattened to a single run;
* images are written as ``[Image: alt]`` placeholders.
"""

from dataclasses import dataclass, field, replace
from typing import assert_never

from md2doc.nodes import (
    Block,
    Blockquote,
    CodeBlock,
    Diagram,
    Document,
    Heading,
    HorizontalRule,
    Image,
    Inline,
    Link,
    List,
    Paragraph,
    Table,
    Text,
    plain_text,
)
from md2doc.themes import Theme

HEADING_SPACING_BEFORE = 240
HEADING_SPACING_AFTER = 120
BLOCK_SPACING = 120
CODE_FONT_SIZE = 20
BLOCKQUOTE_INDENT = 720
HYPERLINK_STYLE = "Hyperlink"


@dataclass(frozen=True)
class Border:
    """Paragraph border edge; ``size`` in eighths of a point."""

    color: str = "CCCCCC"
    size: int = 6
    space: int = 1
    style: str = "single"


@dataclass
class FlowRun:
    text: str
    bold: bool = False
    italic: bool = False
    strike: bool = False
    font: str | None = None
    size: int | None = None
    color: str | None = None
    style: str | None = None


@dataclass
class FlowHyperlink:
    url: str
    runs: list[FlowRun] = field(default_factory=list)


FlowInline = FlowRun | FlowHyperlink


@dataclass
class FlowParagraph:
    """One paragraph of the flow model.

    ``list_style`` is ``"bullet"`` or ``"number"`` for list items;
    ``list_start`` is only set on the first item of a list with an explicit
    start index. ``shading`` is a hex color without ``#``.
    """

    children: list[FlowInline] = field(default_factory=list)
    heading_level: int | None = None
    spacing_before: int | None = None
    spacing_after: int | None = None
    list_style: str | None = None
    list_start: int | None = None
    checked: bool | None = None
    shading: str | None = None
    indent_left: int | None = None
    border_left: Border | None = None
    border_bottom: Border | None = None


@dataclass
class FlowDocument:
    paragraphs: list[FlowParagraph] = field(default_factory=list)
    default_font: str = ""
    line_spacing: float = 1.0
    text_color: str = ""
    background_color: str = ""


def render_flow(document: Document, theme: Theme) -> FlowDocument:
    """Render a document to the flow model.

    Args:
        document: Parsed (optionally enriched) document
        theme: Resolved theme

    Returns:
        FlowDocument with one paragraph per rendered block
    """
    paragraphs: list[FlowParagraph] = []
    for block in document.children:
        paragraphs.extend(_render_block(block, theme))

    return FlowDocument(
        paragraphs=paragraphs,
        default_font=theme.fonts.body,
        line_spacing=theme.spacing.line_height,
        text_color=_hex(theme.colors.text),
        background_color=_hex(theme.colors.background),
    )


def _render_block(block: Block, theme: Theme) -> list[FlowParagraph]:
    match block:
        case Heading(level=level, children=children):
            runs = _render_inlines(children, theme, text_font=theme.fonts.heading)
            for run in _iter_runs(runs):
                run.color = _hex(theme.colors.primary)
            return [
                FlowParagraph(
                    children=runs,
                    heading_level=level,
                    spacing_before=HEADING_SPACING_BEFORE,
                    spacing_after=HEADING_SPACING_AFTER,
                )
            ]
        case Paragraph(children=children):
            return [
                FlowParagraph(
                    children=_render_inlines(children, theme),
                    spacing_after=_paragraph_spacing(theme),
                )
            ]
        case List():
            return _render_list(block, theme)
        case CodeBlock(code=code):
            return [_code_paragraph(code, theme)]
        case Diagram(source=source):
            return [_code_paragraph(source, theme)]
        case Blockquote(children=children):
            quoted: list[FlowParagraph] = []
            for child in children:
                quoted.extend(_render_block(child, theme))
            return [
                replace(paragraph, indent_left=BLOCKQUOTE_INDENT, border_left=Border())
                for paragraph in quoted
            ]
        case Table():
            return [_table_paragraph(block, theme)]
        case HorizontalRule():
            return [
                FlowParagraph(
                    spacing_before=BLOCK_SPACING,
                    spacing_after=BLOCK_SPACING,
                    border_bottom=Border(),
                )
            ]
        case _:
            assert_never(block)


def _render_list(block: List, theme: Theme) -> list[FlowParagraph]:
    style = "number" if block.ordered else "bullet"
    paragraphs: list[FlowParagraph] = []

    for index, item in enumerate(block.items):
        first = next((child for child in item.children if isinstance(child, Paragraph)), None)
        children = _render_inlines(first.children, theme) if first is not None else []
        start = block.start if block.ordered and index == 0 else None
        paragraphs.append(
            FlowParagraph(
                children=children,
                spacing_after=_paragraph_spacing(theme),
                list_style=style,
                list_start=start,
                checked=item.checked,
            )
        )

    return paragraphs


def _code_paragraph(code: str, theme: Theme) -> FlowParagraph:
    return FlowParagraph(
        children=[FlowRun(text=code, font=theme.fonts.code, size=CODE_FONT_SIZE)],
        spacing_before=BLOCK_SPACING,
        spacing_after=BLOCK_SPACING,
        shading=_hex(theme.colors.code_background),
    )


def _table_paragraph(table: Table, theme: Theme) -> FlowParagraph:
    lines = [
        " | ".join(plain_text(cell.children) for cell in row.cells)
        for row in [table.header, *table.rows]
    ]
    return FlowParagraph(
        children=[FlowRun(text="\n".join(lines), font=theme.fonts.body)],
        spacing_before=BLOCK_SPACING,
        spacing_after=BLOCK_SPACING,
    )


def _render_inlines(
    inlines: list[Inline], theme: Theme, text_font: str | None = None
) -> list[FlowInline]:
    return [_render_inline(inline, theme, text_font or theme.fonts.body) for inline in inlines]


def _render_inline(inline: Inline, theme: Theme, text_font: str) -> FlowInline:
    """Map one inline; code spans keep the code font whatever ``text_font`` is."""
    match inline:
        case Text():
            return FlowRun(
                text=inline.value,
                bold=inline.bold,
                italic=inline.italic,
                strike=inline.strikethrough,
                font=theme.fonts.code if inline.code else text_font,
            )
        case Link(url=url, children=children):
            label = FlowRun(text=plain_text(children), font=text_font, style=HYPERLINK_STYLE)
            return FlowHyperlink(url=url, runs=[label])
        case Image(alt=alt):
            return FlowRun(text=f"[Image: {alt}]", font=text_font)
        case _:
            assert_never(inline)


def _iter_runs(children: list[FlowInline]) -> list[FlowRun]:
    runs: list[FlowRun] = []
    for child in children:
        if isinstance(child, FlowHyperlink):
            runs.extend(child.runs)
        else:
            runs.append(child)
    return runs


def _paragraph_spacing(theme: Theme) -> int:
    return round(theme.spacing.paragraph_spacing * 20)


def _hex(color: str) -> str:
    """Strip the leading ``#`` of a theme color."""
    return color.lstrip("#")
