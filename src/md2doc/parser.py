"""Markdown to document tree parser.

Tokenizes Markdown with mistune (GitHub-flavored block rules) and maps the
token stream onto the node types in ``md2doc.nodes``. Parsing is total:
token kinds without a node type are skipped with a logged warning.
"""

import logging
from typing import Any

import mistune

from md2doc.nodes import (
    Block,
    Blockquote,
    Cell,
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
    Row,
    Table,
    Text,
)
from md2doc.tables import ragged_table

logger = logging.getLogger(__name__)

DIAGRAM_LANGUAGE = "mermaid"

# Inline marks collapsed onto the flags of a single Text node
_MARK_FLAGS = {
    "strong": "bold",
    "emphasis": "italic",
    "strikethrough": "strikethrough",
    "codespan": "code",
}

Token = dict[str, Any]


class MarkdownParser:
    """Parse Markdown text into a Document."""

    def __init__(self) -> None:
        """Initialize the parser with GFM plugins."""
        self._markdown = mistune.create_markdown(
            renderer=None,
            plugins=["strikethrough", "task_lists", ragged_table],
        )

    def parse(self, markdown_text: str) -> Document:
        """Parse Markdown text.

        Args:
            markdown_text: Markdown source text

        Returns:
            Document holding the top-level blocks in source order
        """
        logger.debug(f"Parsing {len(markdown_text)} characters of markdown")
        tokens, _state = self._markdown.parse(markdown_text)
        children = self._process_tokens(tokens)
        logger.debug(f"Parsed {len(children)} top-level blocks")
        return Document(children=children)

    def _process_tokens(self, tokens: list[Token]) -> list[Block]:
        blocks: list[Block] = []
        for token in tokens:
            block = self._process_token(token)
            if block is not None:
                blocks.append(block)
        return blocks

    def _process_token(self, token: Token) -> Block | None:
        token_type = token.get("type", "")
        children = token.get("children", [])
        attrs = token.get("attrs") or {}

        if token_type == "heading":
            level = attrs.get("level", 1)
            return Heading(level=min(max(level, 1), 6), children=self._process_inlines(children))
        if token_type in ("paragraph", "block_text"):
            return Paragraph(children=self._process_inlines(children))
        if token_type == "list":
            return self._process_list(token)
        if token_type == "block_code":
            return self._process_code(token)
        if token_type == "block_quote":
            return Blockquote(children=self._process_tokens(children))
        if token_type == "table":
            return self._process_table(token)
        if token_type == "thematic_break":
            return HorizontalRule()
        if token_type == "blank_line":
            return None

        logger.warning(f"Skipping unsupported block token: {token_type}")
        return None

    def _process_list(self, token: Token) -> List:
        attrs = token.get("attrs") or {}
        ordered = bool(attrs.get("ordered", False))
        start = attrs.get("start") if ordered else None

        items: list[ListItem] = []
        for item in token.get("children", []):
            item_type = item.get("type")
            if item_type not in ("list_item", "task_list_item"):
                logger.warning(f"Skipping unsupported list token: {item_type}")
                continue
            checked = (item.get("attrs") or {}).get("checked") if item_type == "task_list_item" else None
            items.append(
                ListItem(children=self._process_tokens(item.get("children", [])), checked=checked)
            )

        return List(ordered=ordered, items=items, start=start)

    def _process_code(self, token: Token) -> CodeBlock | Diagram:
        code = token.get("raw", "")
        if code.endswith("\n"):
            code = code[:-1]

        info = ((token.get("attrs") or {}).get("info") or "").strip()
        language = info.split(maxsplit=1)[0] if info else ""

        if language == DIAGRAM_LANGUAGE:
            return Diagram(source=code)
        return CodeBlock(language=language, code=code)

    def _process_table(self, token: Token) -> Table:
        header = Row()
        rows: list[Row] = []
        align: list[str | None] = []

        for part in token.get("children", []):
            part_type = part.get("type")
            if part_type == "table_head":
                cells = part.get("children", [])
                header = Row(cells=[self._process_cell(cell) for cell in cells])
                align = [(cell.get("attrs") or {}).get("align") for cell in cells]
            elif part_type == "table_body":
                for row in part.get("children", []):
                    rows.append(Row(cells=[self._process_cell(cell) for cell in row.get("children", [])]))

        return Table(header=header, rows=rows, align=align)

    def _process_cell(self, token: Token) -> Cell:
        return Cell(children=self._process_inlines(token.get("children", [])))

    def _process_inlines(self, tokens: list[Token]) -> list[Inline]:
        inlines: list[Inline] = []
        for token in tokens:
            inline = self._process_inline(token)
            if inline is not None:
                inlines.append(inline)
        return inlines

    def _process_inline(self, token: Token) -> Inline | None:
        token_type = token.get("type", "")
        attrs = token.get("attrs") or {}

        if token_type == "text":
            return Text(value=token.get("raw", ""))
        if token_type in _MARK_FLAGS:
            return self._process_mark(token)
        if token_type == "link":
            return Link(
                url=attrs.get("url", ""),
                children=self._process_inlines(token.get("children", [])),
                title=attrs.get("title") or None,
            )
        if token_type == "image":
            return Image(
                src=attrs.get("url", ""),
                alt=_flatten(token.get("children", [])),
                title=attrs.get("title") or None,
            )
        if token_type == "softbreak":
            return Text(value=" ")
        if token_type == "linebreak":
            return Text(value="\n")

        logger.warning(f"Skipping unsupported inline token: {token_type}")
        return None

    def _process_mark(self, token: Token) -> Text:
        """Collapse a formatting mark and everything nested in it onto one Text."""
        flags: set[str] = set()
        _collect_marks(token, flags)
        return Text(value=_flatten([token]), **{flag: True for flag in flags})


def _collect_marks(token: Token, flags: set[str]) -> None:
    flag = _MARK_FLAGS.get(token.get("type", ""))
    if flag is not None:
        flags.add(flag)
    for child in token.get("children", []):
        _collect_marks(child, flags)


def _flatten(tokens: list[Token]) -> str:
    """Extract the plain text of inline tokens."""
    parts: list[str] = []
    for token in tokens:
        if "children" in token:
            parts.append(_flatten(token["children"]))
        elif token.get("type") == "softbreak":
            parts.append(" ")
        elif token.get("type") == "linebreak":
            parts.append("\n")
        else:
            parts.append(token.get("raw", ""))
    return "".join(parts)


_default_parser: MarkdownParser | None = None


def parse(markdown_text: str) -> Document:
    """Parse Markdown text with a shared parser instance."""
    global _default_parser
    if _default_parser is None:
        _default_parser = MarkdownParser()
    return _default_parser.parse(markdown_text)
