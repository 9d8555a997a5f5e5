"""HTML renderer for paginated output.

Produces a self-contained HTML5 document: block markup, a stylesheet derived
from the theme and the page settings, and every resolved image inlined as a
``data:`` URI. The result is the hand-off artifact for a pagination engine.
"""

import html
from dataclasses import dataclass, field
from typing import assert_never

from md2doc.images import detect_mime_type, to_data_uri
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
    ListItem,
    Paragraph,
    Table,
    Text,
)
from md2doc.themes import Theme

PAGE_SIZES = ("A4", "Letter")


@dataclass(frozen=True)
class PageSettings:
    """Printed page size and uniform margin (any CSS length)."""

    size: str = "A4"
    margin: str = "2cm"


@dataclass(frozen=True)
class EmbeddedAsset:
    asset_id: str
    mime_type: str
    data: bytes


@dataclass
class MarkupResult:
    """Rendered HTML.

    Attributes:
        markup: Complete HTML5 document
        body: Block markup without the document wrapper
        stylesheet: CSS generated from the theme and page settings
        embedded_assets: Images inlined into the markup, in document order
    """

    markup: str
    body: str
    stylesheet: str
    embedded_assets: list[EmbeddedAsset] = field(default_factory=list)


def escape(value: str) -> str:
    """Escape text and attribute values, quotes included."""
    return html.escape(value, quote=True)


def render_markup(
    document: Document,
    theme: Theme,
    page: PageSettings | None = None,
    title: str = "",
) -> MarkupResult:
    """Render a document to HTML.

    Args:
        document: Parsed (optionally enriched) document
        theme: Resolved theme
        page: Page size and margin for the ``@page`` rule, omitted when None
        title: Document title for the ``<title>`` element

    Returns:
        MarkupResult with the full document, body, stylesheet and assets
    """
    renderer = _MarkupRenderer()
    body = "\n".join(renderer.block(block) for block in document.children)
    stylesheet = build_stylesheet(theme, page)
    markup = (
        "<!DOCTYPE html>\n"
        '<html>\n<head>\n<meta charset="utf-8">\n'
        f"<title>{escape(title)}</title>\n"
        f"<style>\n{stylesheet}</style>\n"
        "</head>\n<body>\n"
        f"{body}\n"
        "</body>\n</html>\n"
    )
    return MarkupResult(
        markup=markup,
        body=body,
        stylesheet=stylesheet,
        embedded_assets=renderer.assets,
    )


class _MarkupRenderer:
    """Block and inline HTML generation; collects embedded assets."""

    def __init__(self) -> None:
        self.assets: list[EmbeddedAsset] = []

    def block(self, block: Block) -> str:
        match block:
            case Heading(level=level, children=children):
                return f"<h{level}>{self.inlines(children)}</h{level}>"
            case Paragraph(children=children):
                return f"<p>{self.inlines(children)}</p>"
            case List():
                return self.list_block(block)
            case Table():
                return self.table(block)
            case CodeBlock(language=language, code=code):
                css_class = f' class="language-{escape(language)}"' if language else ""
                return f"<pre><code{css_class}>{escape(code)}</code></pre>"
            case Diagram():
                return self.diagram(block)
            case Blockquote(children=children):
                inner = "\n".join(self.block(child) for child in children)
                return f"<blockquote>\n{inner}\n</blockquote>"
            case HorizontalRule():
                return "<hr>"
            case _:
                assert_never(block)

    def list_block(self, block: List) -> str:
        items = "\n".join(self.list_item(item) for item in block.items)
        if not block.ordered:
            return f"<ul>\n{items}\n</ul>"
        start = f' start="{block.start}"' if block.start is not None else ""
        return f"<ol{start}>\n{items}\n</ol>"

    def list_item(self, item: ListItem) -> str:
        prefix = ""
        if item.checked is not None:
            checked = " checked" if item.checked else ""
            prefix = f'<input type="checkbox" disabled{checked}> '

        # A single paragraph is written inline, like a tight Markdown list
        if len(item.children) == 1 and isinstance(item.children[0], Paragraph):
            return f"<li>{prefix}{self.inlines(item.children[0].children)}</li>"

        inner = "\n".join(self.block(child) for child in item.children)
        return f"<li>{prefix}{inner}</li>"

    def table(self, table: Table) -> str:
        lines = ["<table>", "<thead>", "<tr>"]
        for index, cell in enumerate(table.header.cells):
            lines.append(f"<th{self._align(table, index)}>{self.inlines(cell.children)}</th>")
        lines.extend(["</tr>", "</thead>", "<tbody>"])
        for row in table.rows:
            lines.append("<tr>")
            for index, cell in enumerate(row.cells):
                lines.append(f"<td{self._align(table, index)}>{self.inlines(cell.children)}</td>")
            lines.append("</tr>")
        lines.extend(["</tbody>", "</table>"])
        return "\n".join(lines)

    def _align(self, table: Table, index: int) -> str:
        align = table.align[index] if index < len(table.align) else None
        if align is None:
            return ""
        return f' style="text-align: {align}"'

    def diagram(self, diagram: Diagram) -> str:
        if diagram.payload is None:
            return (
                '<pre class="diagram-source">'
                f'<code class="language-mermaid">{escape(diagram.source)}</code></pre>'
            )
        src = self._embed(diagram.payload)
        return f'<figure class="diagram"><img src="{src}" alt="diagram"></figure>'

    def inlines(self, inlines: list[Inline]) -> str:
        return "".join(self.inline(inline) for inline in inlines)

    def inline(self, inline: Inline) -> str:
        match inline:
            case Text():
                return self.text(inline)
            case Link(url=url, children=children, title=title):
                title_attr = f' title="{escape(title)}"' if title else ""
                return f'<a href="{escape(url)}"{title_attr}>{self.inlines(children)}</a>'
            case Image(src=src, alt=alt, title=title, payload=payload):
                source = self._embed(payload) if payload is not None else escape(src)
                title_attr = f' title="{escape(title)}"' if title else ""
                return f'<img src="{source}" alt="{escape(alt)}"{title_attr}>'
            case _:
                assert_never(inline)

    def text(self, text: Text) -> str:
        if text.value == "\n":
            return "<br>\n"
        value = escape(text.value)
        if text.bold:
            value = f"<strong>{value}</strong>"
        if text.italic:
            value = f"<em>{value}</em>"
        if text.code:
            value = f"<code>{value}</code>"
        if text.strikethrough:
            value = f"<del>{value}</del>"
        return value

    def _embed(self, data: bytes) -> str:
        mime_type = detect_mime_type(data)
        self.assets.append(
            EmbeddedAsset(asset_id=f"asset-{len(self.assets) + 1}", mime_type=mime_type, data=data)
        )
        return to_data_uri(data, mime_type)


def build_stylesheet(theme: Theme, page: PageSettings | None = None) -> str:
    """Generate CSS from the theme.

    ``theme.custom_css`` is appended last so it can override any generated
    rule.
    """
    fonts = theme.fonts
    colors = theme.colors
    spacing = theme.spacing

    rules: list[str] = []
    if page is not None:
        rules.append(f"@page {{\n  size: {page.size};\n  margin: {page.margin};\n}}")

    rules.extend(
        [
            "body {\n"
            f"  font-family: {_font_stack(fonts.body)};\n"
            f"  color: {colors.text};\n"
            f"  background-color: {colors.background};\n"
            f"  line-height: {spacing.line_height};\n"
            "}",
            "h1, h2, h3, h4, h5, h6 {\n"
            f"  font-family: {_font_stack(fonts.heading)};\n"
            f"  color: {colors.primary};\n"
            "}",
            f"p, ul, ol, table, blockquote, pre, figure {{\n  margin: 0 0 {spacing.paragraph_spacing}pt 0;\n}}",
            "code, pre {\n"
            f"  font-family: {_font_stack(fonts.code)};\n"
            f"  background-color: {colors.code_background};\n"
            "}",
            "pre {\n  padding: 8pt;\n  white-space: pre-wrap;\n}",
            f"blockquote {{\n  margin-left: 0;\n  padding-left: 12pt;\n  border-left: 3pt solid {colors.primary};\n}}",
            "table {\n  border-collapse: collapse;\n}",
            "th, td {\n  border: 1px solid #cccccc;\n  padding: 4pt 8pt;\n}",
            f"a {{\n  color: {colors.primary};\n}}",
            "figure.diagram img, img {\n  max-width: 100%;\n}",
        ]
    )

    stylesheet = "\n".join(rules) + "\n"
    if theme.custom_css:
        stylesheet += theme.custom_css.rstrip("\n") + "\n"
    return stylesheet


def _font_stack(font: str) -> str:
    return f'"{font}"' if " " in font else font
