"""Document themes.

A theme bundles the typography, colors and spacing applied by both
renderers. Themes are frozen; one is resolved per conversion and shared by
reference.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import TypeVar

logger = logging.getLogger(__name__)

DEFAULT_THEME = "default"

COLOR_RE = re.compile(r"#[0-9A-Fa-f]{6}")
FONT_FORBIDDEN_CHARS = frozenset("\"<;")

G = TypeVar("G", "ThemeFonts", "ThemeColors", "ThemeSpacing")


@dataclass(frozen=True)
class ThemeFonts:
    """Font families for headings, body text and code."""

    heading: str
    body: str
    code: str


@dataclass(frozen=True)
class ThemeColors:
    """Colors as ``#RRGGBB`` strings."""

    primary: str
    text: str
    background: str
    code_background: str


@dataclass(frozen=True)
class ThemeSpacing:
    """Paragraph spacing in points and line height as a multiplier."""

    paragraph_spacing: float
    line_height: float


@dataclass(frozen=True)
class Theme:
    """Resolved theme shared by the flow and markup renderers."""

    name: str
    fonts: ThemeFonts
    colors: ThemeColors
    spacing: ThemeSpacing
    custom_css: str | None = None


PRESETS: dict[str, Theme] = {
    "default": Theme(
        name="Default",
        fonts=ThemeFonts(heading="Arial", body="Arial", code="Courier New"),
        colors=ThemeColors(
            primary="#333333", text="#000000", background="#FFFFFF", code_background="#f5f5f5"
        ),
        spacing=ThemeSpacing(paragraph_spacing=10, line_height=1.5),
    ),
    "modern": Theme(
        name="Modern",
        fonts=ThemeFonts(heading="Calibri", body="Calibri", code="Consolas"),
        colors=ThemeColors(
            primary="#2563eb", text="#1f2937", background="#FFFFFF", code_background="#f3f4f6"
        ),
        spacing=ThemeSpacing(paragraph_spacing=12, line_height=1.6),
    ),
    "academic": Theme(
        name="Academic",
        fonts=ThemeFonts(heading="Times New Roman", body="Times New Roman", code="Courier New"),
        colors=ThemeColors(
            primary="#000000", text="#000000", background="#FFFFFF", code_background="#f8f8f8"
        ),
        spacing=ThemeSpacing(paragraph_spacing=8, line_height=2.0),
    ),
    "minimal": Theme(
        name="Minimal",
        fonts=ThemeFonts(heading="Helvetica", body="Helvetica", code="Monaco"),
        colors=ThemeColors(
            primary="#111827", text="#374151", background="#FFFFFF", code_background="#f9fafb"
        ),
        spacing=ThemeSpacing(paragraph_spacing=14, line_height=1.7),
    ),
    "dark": Theme(
        name="Dark",
        fonts=ThemeFonts(heading="Arial", body="Arial", code="Courier New"),
        colors=ThemeColors(
            primary="#e5e7eb", text="#d1d5db", background="#1f2937", code_background="#374151"
        ),
        spacing=ThemeSpacing(paragraph_spacing=10, line_height=1.6),
    ),
}


def list_preset_names() -> list[str]:
    """Return the names of the built-in themes."""
    return list(PRESETS)


def describe_preset(name: str) -> Theme | None:
    """Return a built-in theme by name, or None if there is no such preset."""
    return PRESETS.get(name)


def resolve_theme(theme: str | Mapping[str, object] | None = None) -> Theme:
    """Resolve a preset name or a partial override into a Theme.

    Unknown preset names fall back to the default theme. Overrides are merged
    group by group over the default preset, so omitted fonts, colors or
    spacing values keep their defaults.

    Args:
        theme: Preset name, override mapping, or None for the default theme

    Returns:
        Resolved Theme

    Raises:
        ValueError: If an override mapping contains invalid values
    """
    if theme is None:
        return PRESETS[DEFAULT_THEME]

    if isinstance(theme, str):
        preset = PRESETS.get(theme)
        if preset is None:
            logger.warning(f'Theme "{theme}" not found, using default theme')
            return PRESETS[DEFAULT_THEME]
        return preset

    return _merge_override(PRESETS[DEFAULT_THEME], theme)


def _merge_override(base: Theme, override: Mapping[str, object]) -> Theme:
    """Deep-merge an override mapping over a base theme."""
    if not isinstance(override, Mapping):
        raise ValueError("theme override must be a mapping")

    name = override.get("name", "Custom")
    if not isinstance(name, str) or not name:
        raise ValueError("theme.name must be a non-empty string")

    custom_css = override.get("custom_css")
    if custom_css is not None and not isinstance(custom_css, str):
        raise ValueError("theme.custom_css must be a string")

    return Theme(
        name=name,
        fonts=_merge_group("fonts", base.fonts, override.get("fonts"), str),
        colors=_merge_group("colors", base.colors, override.get("colors"), str),
        spacing=_merge_group("spacing", base.spacing, override.get("spacing"), (int, float)),
        custom_css=custom_css,
    )


def _merge_group(group: str, base: G, data: object, value_type: type | tuple[type, ...]) -> G:
    if data is None:
        return base
    if not isinstance(data, Mapping):
        raise ValueError(f"theme.{group} must be a dictionary")

    allowed = {f.name for f in fields(base)}  # type: ignore[arg-type]
    changes: dict[str, object] = {}
    for key, value in data.items():
        if key not in allowed:
            raise ValueError(f"Unknown theme.{group} key: {key}")
        if isinstance(value, bool) or not isinstance(value, value_type):
            raise ValueError(f"theme.{group}.{key} has an invalid value: {value!r}")
        if isinstance(value, str) and not value.strip():
            raise ValueError(f"theme.{group}.{key} must not be empty")
        if group == "colors" and not COLOR_RE.fullmatch(value):  # type: ignore[arg-type]
            raise ValueError(f"theme.colors.{key} must be a #RRGGBB color: {value!r}")
        if group == "fonts" and FONT_FORBIDDEN_CHARS.intersection(value):  # type: ignore[arg-type]
            raise ValueError(f"theme.fonts.{key} must not contain quotes, '<' or ';': {value!r}")
        changes[key] = value

    return replace(base, **changes)  # type: ignore[type-var]
