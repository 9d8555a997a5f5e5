"""md2doc - Markdown to Word and print-ready HTML."""

from md2doc.config import Config
from md2doc.converter import ConversionResult, ConvertedDocument, Converter
from md2doc.enrichment import enrich
from md2doc.nodes import Document, attach_payload, iter_nodes
from md2doc.parser import MarkdownParser, parse
from md2doc.renderers.flow import FlowDocument, render_flow
from md2doc.renderers.markup import MarkupResult, PageSettings, render_markup
from md2doc.themes import Theme, list_preset_names, resolve_theme

__all__ = [
    "Config",
    "ConversionResult",
    "ConvertedDocument",
    "Converter",
    "Document",
    "FlowDocument",
    "MarkdownParser",
    "MarkupResult",
    "PageSettings",
    "Theme",
    "attach_payload",
    "enrich",
    "iter_nodes",
    "list_preset_names",
    "parse",
    "render_flow",
    "render_markup",
    "resolve_theme",
]
