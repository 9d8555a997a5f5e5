"""Serialize the flow model to a Word document with python-docx."""

import logging
from pathlib import Path
from xml.sax.saxutils import escape

import docx
from docx.document import Document as DocxDocument
from docx.opc.constants import RELATIONSHIP_TYPE
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.shared import Pt, RGBColor, Twips
from docx.text.paragraph import Paragraph as DocxParagraph

from md2doc.renderers.flow import Border, FlowDocument, FlowHyperlink, FlowParagraph, FlowRun

logger = logging.getLogger(__name__)

BULLET_STYLE = "List Bullet"
NUMBER_STYLE = "List Paragraph"
CHECKBOX = {True: "☒ ", False: "☐ "}


def build_docx(flow: FlowDocument) -> DocxDocument:
    """Build a python-docx document from the flow model."""
    doc = docx.Document()
    _apply_defaults(doc, flow)

    counter = 0
    previous_style: str | None = None
    for paragraph in flow.paragraphs:
        if paragraph.list_style == "number":
            if paragraph.list_start is not None:
                counter = paragraph.list_start
            elif previous_style != "number":
                counter = 1
            else:
                counter += 1
        previous_style = paragraph.list_style
        _add_paragraph(doc, paragraph, counter)

    return doc


def write_docx(flow: FlowDocument, path: Path) -> Path:
    """Write the flow model to a .docx file.

    Args:
        flow: Rendered flow document
        path: Destination file path

    Returns:
        The written path
    """
    doc = build_docx(flow)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(path))
    logger.info(f"Wrote {path} ({len(flow.paragraphs)} paragraphs)")
    return path


def _apply_defaults(doc: DocxDocument, flow: FlowDocument) -> None:
    normal = doc.styles["Normal"]
    if flow.default_font:
        normal.font.name = flow.default_font
    if flow.text_color:
        normal.font.color.rgb = RGBColor.from_string(flow.text_color.upper())
    normal.paragraph_format.line_spacing = flow.line_spacing

    if flow.background_color and flow.background_color.upper() != "FFFFFF":
        background = parse_xml(f'<w:background {nsdecls("w")} w:color="{flow.background_color}"/>')
        doc.element.insert(0, background)
        display = parse_xml(f'<w:displayBackgroundShape {nsdecls("w")}/>')
        settings = doc.settings.element
        zoom = settings.find(qn("w:zoom"))
        if zoom is not None:
            zoom.addnext(display)
        else:
            settings.insert(0, display)


def _add_paragraph(doc: DocxDocument, flow_paragraph: FlowParagraph, counter: int) -> None:
    if flow_paragraph.heading_level is not None:
        paragraph = doc.add_paragraph(style=f"Heading {flow_paragraph.heading_level}")
    elif flow_paragraph.list_style == "bullet":
        paragraph = doc.add_paragraph(style=BULLET_STYLE)
    elif flow_paragraph.list_style == "number":
        paragraph = doc.add_paragraph(style=NUMBER_STYLE)
        paragraph.add_run(f"{counter}. ")
    else:
        paragraph = doc.add_paragraph()

    if flow_paragraph.checked is not None:
        paragraph.add_run(CHECKBOX[flow_paragraph.checked])

    # Border and shading go in before spacing so pPr children stay in schema order
    p_pr = paragraph._element.get_or_add_pPr()
    if flow_paragraph.border_left is not None or flow_paragraph.border_bottom is not None:
        p_pr.append(_paragraph_borders(flow_paragraph.border_left, flow_paragraph.border_bottom))
    if flow_paragraph.shading:
        p_pr.append(
            parse_xml(f'<w:shd {nsdecls("w")} w:fill="{flow_paragraph.shading}" w:val="clear"/>')
        )

    paragraph_format = paragraph.paragraph_format
    if flow_paragraph.spacing_before is not None:
        paragraph_format.space_before = Twips(flow_paragraph.spacing_before)
    if flow_paragraph.spacing_after is not None:
        paragraph_format.space_after = Twips(flow_paragraph.spacing_after)
    if flow_paragraph.indent_left is not None:
        paragraph_format.left_indent = Twips(flow_paragraph.indent_left)

    for child in flow_paragraph.children:
        if isinstance(child, FlowHyperlink):
            _add_hyperlink(paragraph, child)
        else:
            _add_run(paragraph, child)


def _paragraph_borders(left: Border | None, bottom: Border | None):
    edges = ""
    if left is not None:
        edges += _border_edge("left", left)
    if bottom is not None:
        edges += _border_edge("bottom", bottom)
    return parse_xml(f'<w:pBdr {nsdecls("w")}>{edges}</w:pBdr>')


def _border_edge(edge: str, border: Border) -> str:
    return (
        f'<w:{edge} w:val="{border.style}" w:sz="{border.size}" '
        f'w:space="{border.space}" w:color="{border.color}"/>'
    )


def _add_run(paragraph: DocxParagraph, flow_run: FlowRun) -> None:
    run = paragraph.add_run(flow_run.text)
    if flow_run.style:
        try:
            run.style = flow_run.style
        except KeyError:
            logger.debug(f"Character style not in template: {flow_run.style}")
    run.bold = flow_run.bold or None
    run.italic = flow_run.italic or None
    if flow_run.strike:
        run.font.strike = True
    if flow_run.font:
        run.font.name = flow_run.font
    if flow_run.size is not None:
        run.font.size = Pt(flow_run.size / 2)
    if flow_run.color:
        run.font.color.rgb = RGBColor.from_string(flow_run.color.upper())


def _add_hyperlink(paragraph: DocxParagraph, hyperlink: FlowHyperlink) -> None:
    """Insert a clickable external hyperlink into a paragraph."""
    r_id = paragraph.part.relate_to(hyperlink.url, RELATIONSHIP_TYPE.HYPERLINK, is_external=True)
    runs = "".join(_hyperlink_run(run) for run in hyperlink.runs)
    element = parse_xml(
        f'<w:hyperlink {nsdecls("w", "r")} r:id="{r_id}">{runs}</w:hyperlink>'
    )
    paragraph._element.append(element)


def _hyperlink_run(flow_run: FlowRun) -> str:
    # rPr children must keep schema order: rStyle, rFonts, color, u
    properties = ""
    if flow_run.style:
        properties += f'<w:rStyle w:val="{flow_run.style}"/>'
    if flow_run.font:
        font = _escape_xml(flow_run.font)
        properties += f'<w:rFonts w:ascii="{font}" w:hAnsi="{font}"/>'
    properties += '<w:color w:val="0563C1"/><w:u w:val="single"/>'
    return (
        f"<w:r><w:rPr>{properties}</w:rPr>"
        f'<w:t xml:space="preserve">{_escape_xml(flow_run.text)}</w:t></w:r>'
    )


def _escape_xml(text: str) -> str:
    return escape(text, {'"': "&quot;"})
