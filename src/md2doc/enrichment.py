"""Async enrichment pass.

Resolves image references and renders diagram sources in one concurrent
pass over a parsed document. Every Image and Diagram without a payload is
an independent task; results are attached with ``attach_payload`` as each
task completes. Failures leave the payload absent and never stop the pass.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Protocol

from md2doc.nodes import Diagram, Document, Image, attach_payload, iter_nodes

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8


class ImageResolver(Protocol):
    def __call__(self, reference: str, base_context: str) -> Awaitable[bytes | None]: ...


class DiagramRenderer(Protocol):
    def __call__(self, source: str) -> Awaitable[bytes]: ...


async def enrich(
    document: Document,
    *,
    image_resolver: ImageResolver | None = None,
    diagram_renderer: DiagramRenderer | None = None,
    base_context: str = "",
    concurrency: int = DEFAULT_CONCURRENCY,
) -> Document:
    """Attach image and diagram payloads to a document.

    Nodes that already carry a payload are left alone, so running the pass
    again only retries what failed before.

    Args:
        document: Parsed document, enriched in place
        image_resolver: Awaitable ``(reference, base_context) -> bytes | None``;
            images are left untouched when omitted
        diagram_renderer: Awaitable ``(source) -> bytes``; diagrams are left
            untouched when omitted
        base_context: Location of the source document, passed to the resolver
        concurrency: Maximum number of resolver/renderer calls in flight

    Returns:
        The same document object

    Raises:
        ValueError: If concurrency is less than 1
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    semaphore = asyncio.Semaphore(concurrency)
    tasks: list[Awaitable[None]] = []

    for node in iter_nodes(document):
        if isinstance(node, Image) and node.payload is None and image_resolver is not None:
            tasks.append(_resolve_image(node, image_resolver, base_context, semaphore))
        elif isinstance(node, Diagram) and node.payload is None and diagram_renderer is not None:
            tasks.append(_render_diagram(node, diagram_renderer, semaphore))

    if not tasks:
        return document

    logger.debug(f"Enriching {len(tasks)} nodes with concurrency {concurrency}")
    await asyncio.gather(*tasks)
    return document


async def _resolve_image(
    image: Image,
    resolver: ImageResolver,
    base_context: str,
    semaphore: asyncio.Semaphore,
) -> None:
    async with semaphore:
        try:
            data = await resolver(image.src, base_context)
        except Exception as e:
            logger.warning(f"Failed to resolve image {image.src}: {e}")
            return

    if not data:
        logger.warning(f"Image not resolved, keeping reference: {image.src}")
        return
    if image.payload is None:
        attach_payload(image, data)


async def _render_diagram(
    diagram: Diagram,
    renderer: DiagramRenderer,
    semaphore: asyncio.Semaphore,
) -> None:
    async with semaphore:
        try:
            data = await renderer(diagram.source)
        except Exception as e:
            logger.warning(f"Failed to render diagram: {e}")
            return

    if not data:
        logger.warning("Diagram renderer returned no data, keeping source")
        return
    if diagram.payload is None:
        attach_payload(diagram, data)
