"""Conversion pipeline.

Reads a Markdown file, parses it, enriches images and diagrams, renders the
flow and markup outputs, and writes the requested files.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from md2doc.cache import DiagramCache
from md2doc.config import Config
from md2doc.enrichment import DiagramRenderer, ImageResolver, enrich
from md2doc.images import ImageFetcher
from md2doc.kroki import KrokiClient
from md2doc.nodes import Document, Heading, plain_text
from md2doc.parser import MarkdownParser
from md2doc.renderers.flow import FlowDocument, render_flow
from md2doc.renderers.markup import MarkupResult, render_markup
from md2doc.themes import Theme
from md2doc.writers.docx import write_docx

logger = logging.getLogger(__name__)


@dataclass
class ConvertedDocument:
    """In-memory result of one conversion."""

    document: Document
    theme: Theme
    flow: FlowDocument
    markup: MarkupResult


@dataclass
class ConversionResult:
    """Files written for one source document."""

    source_path: Path
    outputs: list[Path] = field(default_factory=list)
    document: Document | None = None


class Converter:
    """Convert Markdown files to Word and HTML documents."""

    def __init__(
        self,
        options: Config,
        *,
        image_resolver: ImageResolver | None = None,
        diagram_renderer: DiagramRenderer | None = None,
    ) -> None:
        """Initialize the converter.

        Args:
            options: Conversion configuration
            image_resolver: Image resolver to use instead of one built from
                the configuration
            diagram_renderer: Diagram renderer to use instead of one built
                from the configuration
        """
        self.options = options
        self._image_resolver = image_resolver
        self._diagram_renderer = diagram_renderer
        self._parser = MarkdownParser()

    async def convert_text(self, text: str, base_context: str = "") -> ConvertedDocument:
        """Convert Markdown text without touching the output directory.

        Args:
            text: Markdown source text
            base_context: Path of the source document, used to resolve
                relative image references

        Returns:
            ConvertedDocument with the enriched tree and both renderings
        """
        document = self._parser.parse(text)

        async with httpx.AsyncClient() as client:
            await enrich(
                document,
                image_resolver=self._build_image_resolver(client),
                diagram_renderer=self._build_diagram_renderer(client),
                base_context=base_context,
                concurrency=self.options.enrichment.concurrency,
            )

        theme = self.options.theme
        title = _document_title(document)
        return ConvertedDocument(
            document=document,
            theme=theme,
            flow=render_flow(document, theme),
            markup=render_markup(document, theme, self.options.page, title=title),
        )

    async def convert_file(self, input_path: Path) -> ConversionResult:
        """Convert one Markdown file and write the configured outputs.

        Args:
            input_path: Path to the Markdown source

        Returns:
            ConversionResult listing the written files

        Raises:
            FileNotFoundError: If the source file doesn't exist
            FileExistsError: If an output exists and overwrite is disabled
            OSError: If the source can't be read or an output can't be written
            UnicodeDecodeError: If the source isn't valid UTF-8
        """
        if not input_path.is_file():
            raise FileNotFoundError(f"Markdown file not found: {input_path}")

        targets = self._output_paths(input_path)
        if not self.options.output.overwrite:
            for target in targets.values():
                if target.exists():
                    raise FileExistsError(f"Output already exists: {target} (use --overwrite)")

        logger.info(f"Converting file: {input_path}")
        text = input_path.read_text(encoding="utf-8")
        converted = await self.convert_text(text, base_context=str(input_path))

        outputs: list[Path] = []
        for output_format, target in targets.items():
            if output_format == "docx":
                outputs.append(write_docx(converted.flow, target))
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(converted.markup.markup, encoding="utf-8")
                logger.info(f"Wrote {target}")
                outputs.append(target)

        return ConversionResult(source_path=input_path, outputs=outputs, document=converted.document)

    def _output_paths(self, input_path: Path) -> dict[str, Path]:
        directory = self.options.output.directory or input_path.parent
        return {
            output_format: directory / f"{input_path.stem}.{output_format}"
            for output_format in self.options.output.formats
        }

    def _build_image_resolver(self, client: httpx.AsyncClient) -> ImageResolver:
        if self._image_resolver is not None:
            return self._image_resolver
        images = self.options.images
        return ImageFetcher(client, embed_local=images.embed_local, timeout=images.timeout)

    def _build_diagram_renderer(self, client: httpx.AsyncClient) -> DiagramRenderer | None:
        if self._diagram_renderer is not None:
            return self._diagram_renderer

        diagrams = self.options.diagrams
        if not diagrams.kroki_url:
            logger.debug("No kroki_url configured, diagrams stay as source")
            return None

        cache = DiagramCache(diagrams.cache_dir) if diagrams.cache_dir is not None else None
        return KrokiClient(
            diagrams.kroki_url,
            output_format=diagrams.format,
            cache=cache,
            client=client,
        )


def _document_title(document: Document) -> str:
    """Return the text of the first level-1 heading, if any."""
    for block in document.children:
        if isinstance(block, Heading) and block.level == 1:
            return plain_text(block.children)
    return ""
