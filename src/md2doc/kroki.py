"""Kroki diagram rendering client.

Renders Mermaid and other diagrams to images using the Kroki service.
"""

import base64
import logging
import zlib

import httpx

from md2doc.cache import DiagramCache, compute_diagram_hash

logger = logging.getLogger(__name__)

DEFAULT_KROKI_URL = "https://kroki.io"


class KrokiClient:
    """Client for rendering diagrams via Kroki service.

    Instances are awaitable diagram renderers for the enrichment pass:
    ``await client(source)`` renders Mermaid source in the configured format.
    """

    def __init__(
        self,
        server_url: str = DEFAULT_KROKI_URL,
        *,
        output_format: str = "svg",
        cache: DiagramCache | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize Kroki client.

        Args:
            server_url: Kroki server URL
            output_format: Format used by ``render`` (svg or png)
            cache: Optional cache for rendered diagrams
            client: Shared HTTP client; a short-lived one is created per
                request when omitted
            timeout: Request timeout in seconds
        """
        self.server_url = server_url.rstrip("/")
        self.output_format = output_format
        self.timeout = timeout
        self._cache = cache
        self._client = client

    def _encode_diagram(self, source: str) -> str:
        """Encode diagram source for Kroki URL.

        Uses zlib compression and base64 encoding as expected by Kroki.

        Args:
            source: Diagram source code

        Returns:
            URL-safe encoded string
        """
        compressed = zlib.compress(source.encode("utf-8"), level=9)
        encoded = base64.urlsafe_b64encode(compressed).decode("ascii")
        return encoded

    async def render_diagram(
        self,
        diagram_type: str,
        source: str,
        output_format: str = "png",
    ) -> bytes:
        """Render a diagram to image bytes.

        Args:
            diagram_type: Type of diagram (mermaid, plantuml, etc.)
            source: Diagram source code
            output_format: Output format (png, svg, etc.)

        Returns:
            Image data as bytes

        Raises:
            httpx.HTTPError: If request fails
        """
        content_hash = compute_diagram_hash(source, diagram_type, output_format)
        if self._cache is not None:
            cached = self._cache.get(content_hash, output_format)
            if cached is not None:
                logger.debug(f"Diagram cache hit: {content_hash[:12]}")
                return cached

        encoded = self._encode_diagram(source)
        url = f"{self.server_url}/{diagram_type}/{output_format}/{encoded}"

        logger.info(f"Rendering {diagram_type} diagram via Kroki")
        logger.debug(f"Kroki URL: {url}")

        if self._client is not None:
            response = await self._client.get(url, timeout=self.timeout)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, timeout=self.timeout)

        if response.status_code >= 400:
            logger.error(f"Kroki error: {response.text}")
        response.raise_for_status()

        logger.info(f"Rendered diagram: {len(response.content)} bytes")
        if self._cache is not None:
            try:
                self._cache.set(content_hash, output_format, response.content)
            except OSError as e:
                logger.warning(f"Failed to cache diagram {content_hash[:12]}: {e}")
        return response.content

    async def render(self, source: str) -> bytes:
        """Render Mermaid source in the configured output format."""
        return await self.render_diagram("mermaid", source, self.output_format)

    async def __call__(self, source: str) -> bytes:
        return await self.render(source)
