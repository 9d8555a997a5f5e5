"""Tests for the Word document writer."""

from pathlib import Path

import docx
from docx.oxml.ns import qn
from docx.shared import Twips
from md2doc.parser import parse
from md2doc.renderers.flow import render_flow
from md2doc.themes import Theme, resolve_theme
from md2doc.writers.docx import build_docx, write_docx

SAMPLE = """\
# Report

Intro with **bold** and [a link](https://example.com).

1. first
2. second

> quoted

```python
print("hi")
```

---
"""


class TestWriteDocx:
    """Tests for write_docx()."""

    def test__write__file_readable(self, tmp_path: Path, theme: Theme) -> None:
        """Write a document python-docx can read back."""
        path = write_docx(render_flow(parse(SAMPLE), theme), tmp_path / "out" / "report.docx")

        reopened = docx.Document(str(path))
        texts = [p.text for p in reopened.paragraphs]

        assert path.exists()
        assert texts[0] == "Report"
        assert reopened.paragraphs[0].style.name == "Heading 1"
        assert "1. first" in texts
        assert "2. second" in texts
        assert 'print("hi")' in texts


class TestBuildDocx:
    """Tests for build_docx()."""

    def test__heading_and_spacing__applied(self, theme: Theme) -> None:
        """Apply heading style and spacing."""
        doc = build_docx(render_flow(parse("## Section"), theme))

        paragraph = doc.paragraphs[0]
        assert paragraph.style.name == "Heading 2"
        assert paragraph.paragraph_format.space_before == Twips(240)
        assert paragraph.paragraph_format.space_after == Twips(120)

    def test__inline_formatting__runs(self, theme: Theme) -> None:
        """Map run formatting."""
        doc = build_docx(render_flow(parse("**b** *i* ~~s~~"), theme))

        runs = {run.text: run for run in doc.paragraphs[0].runs}
        assert runs["b"].bold is True
        assert runs["i"].italic is True
        assert runs["s"].font.strike is True

    def test__code_block__shading_and_font(self, theme: Theme) -> None:
        """Shade code paragraphs and use the code font."""
        doc = build_docx(render_flow(parse("```\ncode\n```"), theme))

        paragraph = doc.paragraphs[0]
        shading = paragraph._element.pPr.find(qn("w:shd"))
        assert shading is not None
        assert shading.get(qn("w:fill")) == "f5f5f5"
        assert paragraph.runs[0].font.name == "Courier New"

    def test__blockquote__left_border_and_indent(self, theme: Theme) -> None:
        """Indent quotes and draw a left border."""
        doc = build_docx(render_flow(parse("> quoted"), theme))

        paragraph = doc.paragraphs[0]
        borders = paragraph._element.pPr.find(qn("w:pBdr"))
        assert borders is not None
        assert borders.find(qn("w:left")) is not None
        assert paragraph.paragraph_format.left_indent == Twips(720)

    def test__hyperlink__relationship_added(self, theme: Theme) -> None:
        """Write links as external hyperlinks."""
        doc = build_docx(render_flow(parse("[docs](https://example.com/docs)"), theme))

        hyperlinks = doc.paragraphs[0]._element.findall(qn("w:hyperlink"))
        assert len(hyperlinks) == 1
        r_id = hyperlinks[0].get(qn("r:id"))
        assert doc.part.rels[r_id].target_ref == "https://example.com/docs"

    def test__hyperlink_special_characters__escaped(self, theme: Theme) -> None:
        """Keep markup characters in link text as literal text."""
        doc = build_docx(render_flow(parse('[a < b & "c"](https://example.com)'), theme))

        hyperlink = doc.paragraphs[0]._element.find(qn("w:hyperlink"))
        assert "".join(node.text for node in hyperlink.iter(qn("w:t"))) == 'a < b & "c"'

    def test__ordered_list_start__numbering(self, theme: Theme) -> None:
        """Number ordered lists from their start index."""
        doc = build_docx(render_flow(parse("7. a\n8. b\n\nbreak\n\n1. c"), theme))

        texts = [p.text for p in doc.paragraphs]
        assert texts == ["7. a", "8. b", "break", "1. c"]

    def test__task_list__checkbox_prefix(self, theme: Theme) -> None:
        """Prefix task items with a checkbox glyph."""
        doc = build_docx(render_flow(parse("- [x] done\n- [ ] todo"), theme))

        assert [p.text for p in doc.paragraphs] == ["☒ done", "☐ todo"]
        assert doc.paragraphs[0].style.name == "List Bullet"

    def test__dark_theme__page_background(self) -> None:
        """Set the page background for non-white themes."""
        doc = build_docx(render_flow(parse("text"), resolve_theme("dark")))

        background = doc.element.find(qn("w:background"))
        assert background is not None
        assert background.get(qn("w:color")) == "1f2937"

    def test__default_font__normal_style(self, theme: Theme) -> None:
        """Use the theme's body font for the Normal style."""
        doc = build_docx(render_flow(parse("text"), theme))

        assert doc.styles["Normal"].font.name == "Arial"
