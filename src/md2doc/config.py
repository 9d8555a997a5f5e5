"""Configuration management for md2doc.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from md2doc.enrichment import DEFAULT_CONCURRENCY
from md2doc.kroki import DEFAULT_KROKI_URL
from md2doc.renderers.markup import PAGE_SIZES, PageSettings
from md2doc.themes import Theme, resolve_theme

CONFIG_FILENAME = "md2doc.toml"

OUTPUT_FORMATS = ("docx", "html", "both")
DIAGRAM_FORMATS = ("svg", "png")


@dataclass
class OutputConfig:
    """Output configuration."""

    format: str = "docx"
    directory: Path | None = None
    overwrite: bool = False

    @property
    def formats(self) -> list[str]:
        """Concrete file formats to write."""
        if self.format == "both":
            return ["docx", "html"]
        return [self.format]


@dataclass
class DiagramsConfig:
    """Diagram rendering configuration."""

    kroki_url: str | None = None
    format: str = "svg"
    cache_dir: Path | None = None


@dataclass
class ImagesConfig:
    """Image embedding configuration."""

    embed_local: bool = True
    timeout: float = 30.0


@dataclass
class EnrichmentConfig:
    """Enrichment pass configuration."""

    concurrency: int = DEFAULT_CONCURRENCY


@dataclass
class Config:
    """Application configuration."""

    theme: Theme = field(default_factory=resolve_theme)
    output: OutputConfig = field(default_factory=OutputConfig)
    page: PageSettings = field(default_factory=PageSettings)
    diagrams: DiagramsConfig = field(default_factory=DiagramsConfig)
    images: ImagesConfig = field(default_factory=ImagesConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for md2doc.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            theme=cls._parse_theme(data.get("theme")),
            output=cls._parse_output(data.get("output"), config_dir),
            page=cls._parse_page(data.get("page")),
            diagrams=cls._parse_diagrams(data.get("diagrams"), config_dir),
            images=cls._parse_images(data.get("images")),
            enrichment=cls._parse_enrichment(data.get("enrichment")),
            config_path=path,
        )

    @classmethod
    def _parse_theme(cls, data: object) -> Theme:
        """Parse the theme entry: a preset name or an override table."""
        if data is None or isinstance(data, (str, dict)):
            return resolve_theme(data)
        raise ValueError("theme must be a preset name or a table")

    @classmethod
    def _parse_output(cls, data: object, config_dir: Path) -> OutputConfig:
        """Parse output configuration section.

        Args:
            data: Raw output section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            OutputConfig instance
        """
        if data is None:
            return OutputConfig()

        if not isinstance(data, dict):
            raise ValueError("output section must be a dictionary")

        output_format = data.get("format", "docx")
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output.format must be one of {', '.join(OUTPUT_FORMATS)}")

        directory = data.get("directory")
        if directory is not None and not isinstance(directory, str):
            raise ValueError("output.directory must be a string")

        overwrite = data.get("overwrite", False)
        if not isinstance(overwrite, bool):
            raise ValueError("output.overwrite must be a boolean")

        return OutputConfig(
            format=output_format,
            directory=config_dir / directory if directory is not None else None,
            overwrite=overwrite,
        )

    @classmethod
    def _parse_page(cls, data: object) -> PageSettings:
        if data is None:
            return PageSettings()

        if not isinstance(data, dict):
            raise ValueError("page section must be a dictionary")

        size = data.get("size", "A4")
        if size not in PAGE_SIZES:
            raise ValueError(f"page.size must be one of {', '.join(PAGE_SIZES)}")

        margin = data.get("margin", "2cm")
        if not isinstance(margin, str) or not margin.strip():
            raise ValueError("page.margin must be a non-empty string")

        return PageSettings(size=size, margin=margin)

    @classmethod
    def _parse_diagrams(cls, data: object, config_dir: Path) -> DiagramsConfig:
        """Parse diagrams configuration section.

        Args:
            data: Raw diagrams section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            DiagramsConfig instance
        """
        if data is None:
            return DiagramsConfig()

        if not isinstance(data, dict):
            raise ValueError("diagrams section must be a dictionary")

        kroki_url = data.get("kroki_url")
        if kroki_url is not None and not isinstance(kroki_url, str):
            raise ValueError("diagrams.kroki_url must be a string")

        diagram_format = data.get("format", "svg")
        if diagram_format not in DIAGRAM_FORMATS:
            raise ValueError(f"diagrams.format must be one of {', '.join(DIAGRAM_FORMATS)}")

        cache_dir = data.get("cache_dir")
        if cache_dir is not None and not isinstance(cache_dir, str):
            raise ValueError("diagrams.cache_dir must be a string")

        return DiagramsConfig(
            kroki_url=kroki_url,
            format=diagram_format,
            cache_dir=config_dir / cache_dir if cache_dir is not None else None,
        )

    @classmethod
    def _parse_images(cls, data: object) -> ImagesConfig:
        if data is None:
            return ImagesConfig()

        if not isinstance(data, dict):
            raise ValueError("images section must be a dictionary")

        embed_local = data.get("embed_local", True)
        if not isinstance(embed_local, bool):
            raise ValueError("images.embed_local must be a boolean")

        timeout = data.get("timeout", 30.0)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError("images.timeout must be a positive number")

        return ImagesConfig(embed_local=embed_local, timeout=float(timeout))

    @classmethod
    def _parse_enrichment(cls, data: object) -> EnrichmentConfig:
        if data is None:
            return EnrichmentConfig()

        if not isinstance(data, dict):
            raise ValueError("enrichment section must be a dictionary")

        concurrency = data.get("concurrency", DEFAULT_CONCURRENCY)
        if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
            raise ValueError("enrichment.concurrency must be a positive integer")

        return EnrichmentConfig(concurrency=concurrency)

    def with_overrides(
        self,
        *,
        theme: str | None = None,
        output_format: str | None = None,
        output_dir: Path | None = None,
        kroki_url: str | None = None,
        overwrite: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            theme: Override the theme with a preset name
            output_format: Override output.format
            output_dir: Override output.directory
            kroki_url: Override diagrams.kroki_url
            overwrite: Override output.overwrite

        Returns:
            New Config instance with overrides applied

        Raises:
            ValueError: If output_format is not a known format
        """
        resolved_theme = self.theme
        if theme is not None:
            resolved_theme = resolve_theme(theme)

        output = self.output
        if output_format is not None or output_dir is not None or overwrite is not None:
            if output_format is not None and output_format not in OUTPUT_FORMATS:
                raise ValueError(f"output format must be one of {', '.join(OUTPUT_FORMATS)}")
            output = replace(
                self.output,
                format=output_format if output_format is not None else self.output.format,
                directory=output_dir if output_dir is not None else self.output.directory,
                overwrite=overwrite if overwrite is not None else self.output.overwrite,
            )

        diagrams = self.diagrams
        if kroki_url is not None:
            diagrams = replace(self.diagrams, kroki_url=kroki_url)

        return replace(self, theme=resolved_theme, output=output, diagrams=diagrams)


def default_config_text() -> str:
    """Return a commented template configuration file."""
    return f"""\
# md2doc configuration

# Preset name (default, modern, academic, minimal, dark) or a [theme] table:
#
# [theme]
# name = "Corporate"
# custom_css = "h1 {{ text-transform: uppercase; }}"
# [theme.fonts]
# heading = "Georgia"
# [theme.colors]
# primary = "#0b5394"
theme = "default"

[output]
# docx, html or both
format = "docx"
# Output directory relative to this file; defaults to the source directory
# directory = "out"
overwrite = false

[page]
# A4 or Letter
size = "A4"
margin = "2cm"

[diagrams]
# Mermaid diagrams stay as source text when kroki_url is not set
# kroki_url = "{DEFAULT_KROKI_URL}"
format = "svg"
# cache_dir = ".cache"

[images]
embed_local = true
timeout = 30.0

[enrichment]
concurrency = {DEFAULT_CONCURRENCY}
"""
