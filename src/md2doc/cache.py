"""File-based cache for rendered diagrams.

Cache structure:
    .cache/
    ├── .gitignore
    └── diagrams/
        ├── <content_hash>.svg
        └── <content_hash>.png
"""

import hashlib
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def compute_diagram_hash(source: str, endpoint: str, fmt: str) -> str:
    """Compute a content hash for diagram caching.

    Args:
        source: Diagram source code
        endpoint: Kroki endpoint (e.g., "mermaid")
        fmt: Output format ("svg" or "png")

    Returns:
        SHA-256 hash of the combined inputs
    """
    content = f"{endpoint}:{fmt}:{source}"
    return hashlib.sha256(content.encode()).hexdigest()


class DiagramCache:
    """Content-addressed store for rendered diagram images."""

    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(self, cache_dir: Path) -> None:
        """Initialize cache with directory path.

        Args:
            cache_dir: Root directory for cache files (e.g., .cache/)
        """
        self._cache_dir = cache_dir
        self._diagrams_dir = cache_dir / "diagrams"

    @property
    def cache_dir(self) -> Path:
        """Root cache directory."""
        return self._cache_dir

    def _ensure_cache_dir(self) -> None:
        """Create cache directory with .gitignore if it doesn't exist."""
        if not self._cache_dir.exists():
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            gitignore_path = self._cache_dir / ".gitignore"
            gitignore_path.write_text(self._GITIGNORE_CONTENT, encoding="utf-8")

    def get(self, content_hash: str, fmt: str) -> bytes | None:
        """Retrieve cached diagram by content hash.

        Args:
            content_hash: SHA-256 hash of diagram content
            fmt: Output format ("svg" or "png")

        Returns:
            Cached image bytes, or None if not cached
        """
        diagram_path = self._diagrams_dir / f"{content_hash}.{fmt}"
        if not diagram_path.exists():
            return None

        try:
            return diagram_path.read_bytes()
        except OSError as e:
            logger.debug(f"Failed to read cached diagram {diagram_path}: {e}")
            return None

    def set(self, content_hash: str, fmt: str, data: bytes) -> None:
        """Store rendered diagram in cache.

        Args:
            content_hash: SHA-256 hash of diagram content
            fmt: Output format ("svg" or "png")
            data: Rendered image bytes
        """
        self._ensure_cache_dir()
        self._diagrams_dir.mkdir(parents=True, exist_ok=True)
        diagram_path = self._diagrams_dir / f"{content_hash}.{fmt}"
        diagram_path.write_bytes(data)

    def clear(self) -> None:
        """Remove all cached diagrams."""
        import shutil

        if self._diagrams_dir.exists():
            shutil.rmtree(self._diagrams_dir)
