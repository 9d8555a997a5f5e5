"""Pipe table block rule for mistune.

mistune's bundled table plugin drops a whole table when a body row has a
different number of cells than the header. This rule keeps such tables and
passes every row through with the cells it was written with. Only the
delimiter row has to match the header.
"""

import re
from typing import Any

import mistune

TABLE_PATTERN = (
    r"^ {0,3}(?P<ragged_table_head>[^\n]*\|[^\n]*)\n"
    r" {0,3}(?P<ragged_table_align>\|? *:?-+:? *(?:\| *:?-+:? *)*\|?)[ \t]*\n"
    r"(?P<ragged_table_body>(?: {0,3}[^\n]*\|[^\n]*(?:\n|$))*)\n*"
)

CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")


def split_cells(line: str) -> list[str]:
    """Split a table row into stripped cell texts.

    Leading and trailing pipes are optional. Escaped pipes stay inside the
    cell as literal ``|``.
    """
    line = line.strip()
    if line.startswith("|"):
        line = line[1:]
    if line.endswith("|") and not line.endswith("\\|"):
        line = line[:-1]
    return [cell.strip().replace("\\|", "|") for cell in CELL_SPLIT_RE.split(line)]


def parse_alignment(cell: str) -> str | None:
    cell = cell.strip()
    if cell.startswith(":") and cell.endswith(":"):
        return "center"
    if cell.endswith(":"):
        return "right"
    if cell.startswith(":"):
        return "left"
    return None


def parse_ragged_table(block: Any, m: re.Match[str], state: Any) -> int | None:
    """Turn a matched table into a mistune ``table`` token.

    The token has the same shape as the one produced by mistune's own table
    plugin: a ``table_head`` of cells followed by a ``table_body`` of rows.
    Cell text is inline-parsed by mistune when the tokens are rendered.

    Returns:
        End position of the table, or None to let mistune treat the lines
        as a paragraph
    """
    header = split_cells(m.group("ragged_table_head"))
    aligns = [parse_alignment(cell) for cell in split_cells(m.group("ragged_table_align"))]
    if len(aligns) != len(header):
        return None

    head = {
        "type": "table_head",
        "children": [_cell_token(text, aligns[i], head=True) for i, text in enumerate(header)],
    }

    rows = []
    for line in m.group("ragged_table_body").splitlines():
        if not line.strip():
            continue
        cells = [
            _cell_token(text, aligns[i] if i < len(aligns) else None, head=False)
            for i, text in enumerate(split_cells(line))
        ]
        rows.append({"type": "table_row", "children": cells})

    state.append_token(
        {
            "type": "table",
            "children": [head, {"type": "table_body", "children": rows}],
        }
    )
    return m.end()


def _cell_token(text: str, align: str | None, *, head: bool) -> dict[str, Any]:
    return {"type": "table_cell", "text": text, "attrs": {"align": align, "head": head}}


def ragged_table(md: mistune.Markdown) -> None:
    """mistune plugin registering the lenient table rule.

    The rule applies at the top level and inside block quotes and list
    items.
    """
    md.block.register("ragged_table", TABLE_PATTERN, parse_ragged_table, before="paragraph")
    md.block.insert_rule(md.block.block_quote_rules, "ragged_table", before="paragraph")
    md.block.insert_rule(md.block.list_rules, "ragged_table", before="paragraph")
