"""Image resolution for the enrichment pass.

``ImageFetcher`` turns an image reference from the document into bytes:
remote references are downloaded with httpx, everything else is read from
disk relative to the source document. Failures resolve to None so the image
keeps its original reference.
"""

import asyncio
import base64
import logging
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http://", "https://")


def is_remote(reference: str) -> bool:
    return reference.lower().startswith(REMOTE_SCHEMES)


def detect_mime_type(data: bytes) -> str:
    """Guess an image MIME type from its leading bytes.

    Recognizes PNG, JPEG, GIF, WebP and SVG; anything else is reported as
    PNG.
    """
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"

    head = data[:512].lstrip().lower()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return "image/svg+xml"
    return "image/png"


def to_data_uri(data: bytes, mime_type: str | None = None) -> str:
    """Encode image bytes as a base64 ``data:`` URI."""
    if mime_type is None:
        mime_type = detect_mime_type(data)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class ImageFetcher:
    """Resolve image references to bytes.

    Instances are awaitable image resolvers for the enrichment pass:
    ``await fetcher(reference, base_context)``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        embed_local: bool = True,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Shared HTTP client; a short-lived one is created per
                request when omitted
            embed_local: Read references that point at local files
            timeout: Request timeout in seconds
        """
        self._client = client
        self.embed_local = embed_local
        self.timeout = timeout

    async def __call__(self, reference: str, base_context: str = "") -> bytes | None:
        return await self.fetch(reference, base_context)

    async def fetch(self, reference: str, base_context: str = "") -> bytes | None:
        """Resolve one image reference.

        Args:
            reference: Image reference as written in the document
            base_context: Path of the source document; local references
                resolve relative to its directory

        Returns:
            Image bytes, or None if the image could not be resolved
        """
        if not reference:
            return None
        if is_remote(reference):
            return await self._fetch_remote(reference)
        if reference.startswith("data:"):
            return None
        if not self.embed_local:
            logger.debug(f"Local image embedding disabled, keeping reference: {reference}")
            return None
        return await asyncio.to_thread(self._read_local, reference, base_context)

    async def _fetch_remote(self, url: str) -> bytes | None:
        logger.debug(f"Fetching remote image: {url}")
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self.timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, timeout=self.timeout, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch image {url}: {e}")
            return None

        if response.status_code >= 400:
            logger.warning(f"Failed to fetch image {url}: HTTP {response.status_code}")
            return None
        return response.content

    def _read_local(self, reference: str, base_context: str) -> bytes | None:
        path = resolve_local_path(reference, base_context)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning(f"Failed to read image {path}: {e}")
            return None
        logger.debug(f"Read local image {path}: {len(data)} bytes")
        return data


def resolve_local_path(reference: str, base_context: str) -> Path:
    """Resolve a local image reference against the source document path."""
    if reference.startswith("file://"):
        reference = reference[len("file://"):]
    path = Path(reference)
    if path.is_absolute() or not base_context:
        return path
    return Path(base_context).parent / path
