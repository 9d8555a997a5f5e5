"""Tests for the conversion pipeline."""

from dataclasses import replace
from pathlib import Path

import docx
import pytest
from md2doc.config import Config, OutputConfig
from md2doc.converter import Converter
from md2doc.nodes import Diagram, Image, iter_nodes

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8

SOURCE = """\
# Guide

![logo](logo.png)

```mermaid
graph TD
A-->B
```
"""


async def fake_renderer(source: str) -> bytes:
    return b"<svg>" + source.encode() + b"</svg>"


class TestConvertText:
    """Tests for Converter.convert_text()."""

    @pytest.mark.asyncio
    async def test__collaborators__payloads_in_markup(self) -> None:
        """Embed resolved images and diagrams in the markup."""

        async def resolver(reference: str, base_context: str) -> bytes:
            return PNG_BYTES

        converter = Converter(Config(), image_resolver=resolver, diagram_renderer=fake_renderer)

        converted = await converter.convert_text(SOURCE)

        assert converted.theme is Config().theme
        assert len(converted.markup.embedded_assets) == 2
        assert '<figure class="diagram">' in converted.markup.body
        assert "<title>Guide</title>" in converted.markup.markup
        texts = [run.text for p in converted.flow.paragraphs for run in p.children]
        assert "[Image: logo]" in texts

    @pytest.mark.asyncio
    async def test__no_kroki_url__diagram_stays_source(self, tmp_path: Path) -> None:
        """Keep diagram source when no renderer is configured."""
        converter = Converter(Config())

        converted = await converter.convert_text(SOURCE, base_context=str(tmp_path / "doc.md"))

        diagram = next(n for n in iter_nodes(converted.document) if isinstance(n, Diagram))
        image = next(n for n in iter_nodes(converted.document) if isinstance(n, Image))
        assert diagram.payload is None
        assert image.payload is None
        assert '<pre class="diagram-source">' in converted.markup.body

    @pytest.mark.asyncio
    async def test__local_image__embedded_by_default(self, tmp_path: Path) -> None:
        """Resolve local images relative to the source file."""
        (tmp_path / "logo.png").write_bytes(PNG_BYTES)
        converter = Converter(Config())

        converted = await converter.convert_text(SOURCE, base_context=str(tmp_path / "doc.md"))

        image = next(n for n in iter_nodes(converted.document) if isinstance(n, Image))
        assert image.payload == PNG_BYTES
        assert "data:image/png;base64," in converted.markup.body


class TestConvertFile:
    """Tests for Converter.convert_file()."""

    @pytest.mark.asyncio
    async def test__both_formats__files_written(self, tmp_path: Path, test_config: Config) -> None:
        """Write DOCX and HTML files into the output directory."""
        source = tmp_path / "guide.md"
        source.write_text(SOURCE, encoding="utf-8")
        converter = Converter(test_config, diagram_renderer=fake_renderer)

        result = await converter.convert_file(source)

        out_dir = tmp_path / "out"
        assert result.source_path == source
        assert result.outputs == [out_dir / "guide.docx", out_dir / "guide.html"]
        assert docx.Document(str(out_dir / "guide.docx")).paragraphs[0].text == "Guide"
        assert "<h1>Guide</h1>" in (out_dir / "guide.html").read_text(encoding="utf-8")
        assert result.document is not None

    @pytest.mark.asyncio
    async def test__default_directory__next_to_source(self, tmp_path: Path) -> None:
        """Write outputs next to the source by default."""
        source = tmp_path / "notes.md"
        source.write_text("# Notes", encoding="utf-8")
        converter = Converter(Config(output=OutputConfig(format="html")))

        result = await converter.convert_file(source)

        assert result.outputs == [tmp_path / "notes.html"]

    @pytest.mark.asyncio
    async def test__existing_output__raises_error(self, tmp_path: Path, test_config: Config) -> None:
        """Refuse to overwrite existing outputs."""
        source = tmp_path / "guide.md"
        source.write_text("# Guide", encoding="utf-8")
        (tmp_path / "out").mkdir()
        existing = tmp_path / "out" / "guide.html"
        existing.write_text("keep me", encoding="utf-8")
        converter = Converter(test_config)

        with pytest.raises(FileExistsError, match="guide.html"):
            await converter.convert_file(source)

        assert existing.read_text(encoding="utf-8") == "keep me"
        assert not (tmp_path / "out" / "guide.docx").exists()

    @pytest.mark.asyncio
    async def test__overwrite__replaces_output(self, tmp_path: Path, test_config: Config) -> None:
        """Replace existing outputs when overwrite is enabled."""
        source = tmp_path / "guide.md"
        source.write_text("# Guide", encoding="utf-8")
        (tmp_path / "out").mkdir()
        (tmp_path / "out" / "guide.html").write_text("old", encoding="utf-8")
        config = replace(test_config, output=replace(test_config.output, overwrite=True))

        await Converter(config).convert_file(source)

        assert "<h1>Guide</h1>" in (tmp_path / "out" / "guide.html").read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test__missing_source__raises_error(self, tmp_path: Path) -> None:
        """Raise FileNotFoundError for a missing source."""
        with pytest.raises(FileNotFoundError, match="Markdown file not found"):
            await Converter(Config()).convert_file(tmp_path / "missing.md")

    @pytest.mark.asyncio
    async def test__invalid_utf8__raises_error(self, tmp_path: Path) -> None:
        """Raise UnicodeDecodeError for undecodable sources."""
        source = tmp_path / "bad.md"
        source.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(UnicodeDecodeError):
            await Converter(Config(output=OutputConfig(directory=tmp_path / "out"))).convert_file(source)
