"""CLI interface for md2doc.

Command-line tool for converting Markdown to Word and print-ready HTML.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from md2doc.config import CONFIG_FILENAME, OUTPUT_FORMATS, Config, default_config_text
from md2doc.converter import Converter
from md2doc.themes import describe_preset, list_preset_names


@click.group()
def cli() -> None:
    """md2doc - Markdown to Word and print-ready HTML."""


@cli.command()
@click.argument(
    "markdown_files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=f"Path to configuration file (default: auto-discover {CONFIG_FILENAME})",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (overrides config, default: docx)",
)
@click.option(
    "--theme",
    "-t",
    default=None,
    help="Theme preset name (overrides config)",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config, default: next to each source)",
)
@click.option(
    "--kroki-url",
    default=None,
    help="Kroki server URL for diagram rendering (overrides config)",
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Replace existing output files",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def convert(
    markdown_files: tuple[Path, ...],
    config_path: Path | None,
    output_format: str | None,
    theme: str | None,
    output_dir: Path | None,
    kroki_url: str | None,
    overwrite: bool,
    verbose: bool,
) -> None:
    """Convert Markdown files to Word and/or HTML documents."""
    _configure_logging(verbose)

    try:
        config = Config.load(config_path).with_overrides(
            theme=theme,
            output_format=output_format,
            output_dir=output_dir,
            kroki_url=kroki_url,
            overwrite=overwrite or None,
        )
        converter = Converter(config)

        for markdown_file in markdown_files:
            click.echo(f"Converting {markdown_file}...")
            result = asyncio.run(converter.convert_file(markdown_file))
            for output in result.outputs:
                click.echo(f"  Wrote {output}")
    except (OSError, UnicodeDecodeError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
def themes() -> None:
    """List built-in themes."""
    for name in list_preset_names():
        click.echo(name)


@cli.command()
@click.argument("name")
def theme(name: str) -> None:
    """Show the settings of a built-in theme."""
    preset = describe_preset(name)
    if preset is None:
        click.echo(click.style(f"Error: Unknown theme: {name}", fg="red"), err=True)
        click.echo(f"Available themes: {', '.join(list_preset_names())}", err=True)
        sys.exit(1)

    click.echo(f"Name: {preset.name}")
    click.echo("\nFonts:")
    click.echo(f"  Heading: {preset.fonts.heading}")
    click.echo(f"  Body: {preset.fonts.body}")
    click.echo(f"  Code: {preset.fonts.code}")
    click.echo("\nColors:")
    click.echo(f"  Primary: {preset.colors.primary}")
    click.echo(f"  Text: {preset.colors.text}")
    click.echo(f"  Background: {preset.colors.background}")
    click.echo(f"  Code background: {preset.colors.code_background}")
    click.echo("\nSpacing:")
    click.echo(f"  Paragraph: {preset.spacing.paragraph_spacing}pt")
    click.echo(f"  Line height: {preset.spacing.line_height}")


@cli.command()
@click.argument(
    "path",
    type=click.Path(path_type=Path),
    default=Path(CONFIG_FILENAME),
)
def init(path: Path) -> None:
    """Write a template configuration file."""
    if path.exists():
        click.echo(click.style(f"Error: {path} already exists", fg="red"), err=True)
        sys.exit(1)

    path.write_text(default_config_text(), encoding="utf-8")
    click.echo(f"Created {path}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    cli()
