"""Tests for themes."""

import logging
from dataclasses import fields

import pytest
from md2doc.themes import COLOR_RE, PRESETS, describe_preset, list_preset_names, resolve_theme


class TestResolveTheme:
    """Tests for resolve_theme()."""

    def test__none__returns_default(self) -> None:
        """Resolve None to the default preset."""
        assert resolve_theme(None) is PRESETS["default"]

    def test__known_name__returns_preset(self) -> None:
        """Resolve a preset name to that preset."""
        theme = resolve_theme("modern")

        assert theme is PRESETS["modern"]
        assert theme.fonts.body == "Calibri"
        assert theme.colors.primary == "#2563eb"

    @pytest.mark.parametrize("name", list_preset_names())
    def test__every_preset__all_fields_filled(self, name: str) -> None:
        """Resolve every built-in name to a theme with no empty field."""
        theme = resolve_theme(name)

        assert theme.name
        for group in (theme.fonts, theme.colors):
            for field in fields(group):
                assert getattr(group, field.name).strip(), f"{name}: {field.name}"
        for field in fields(theme.spacing):
            assert getattr(theme.spacing, field.name) > 0, f"{name}: {field.name}"
        assert COLOR_RE.fullmatch(theme.colors.primary)
        assert COLOR_RE.fullmatch(theme.colors.background)

    def test__unknown_name__returns_default_with_warning(
        self,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Fall back to the default preset and log a diagnostic."""
        with caplog.at_level(logging.WARNING, logger="md2doc.themes"):
            theme = resolve_theme("nonexistent")

        assert theme is PRESETS["default"]
        assert 'Theme "nonexistent" not found' in caplog.text

    def test__partial_override__merges_over_default(self) -> None:
        """Keep default values for keys the override omits."""
        theme = resolve_theme({"fonts": {"heading": "Georgia"}, "colors": {"primary": "#ff0000"}})

        assert theme.name == "Custom"
        assert theme.fonts.heading == "Georgia"
        assert theme.fonts.body == "Arial"
        assert theme.fonts.code == "Courier New"
        assert theme.colors.primary == "#ff0000"
        assert theme.colors.code_background == "#f5f5f5"
        assert theme.spacing == PRESETS["default"].spacing

    def test__override_name_and_css__kept(self) -> None:
        """Take name and custom CSS from the override."""
        theme = resolve_theme({"name": "Corporate", "custom_css": "h1 { color: red; }"})

        assert theme.name == "Corporate"
        assert theme.custom_css == "h1 { color: red; }"

    def test__override_spacing_int__accepted(self) -> None:
        """Accept integer spacing values."""
        theme = resolve_theme({"spacing": {"paragraph_spacing": 6}})

        assert theme.spacing.paragraph_spacing == 6
        assert theme.spacing.line_height == 1.5

    def test__unknown_group_key__raises_error(self) -> None:
        """Reject keys that a theme group doesn't have."""
        with pytest.raises(ValueError, match="Unknown theme.fonts key: title"):
            resolve_theme({"fonts": {"title": "Georgia"}})

    def test__wrong_value_type__raises_error(self) -> None:
        """Reject values of the wrong type."""
        with pytest.raises(ValueError, match="theme.spacing.line_height"):
            resolve_theme({"spacing": {"line_height": "double"}})

    def test__bool_spacing__raises_error(self) -> None:
        """Reject booleans where numbers are expected."""
        with pytest.raises(ValueError):
            resolve_theme({"spacing": {"line_height": True}})

    @pytest.mark.parametrize("color", ["navy", "#fff", "#12345g", "#1234567", "rgb(0, 0, 0)"])
    def test__color_not_hex__raises_error(self, color: str) -> None:
        """Reject colors that aren't #RRGGBB."""
        with pytest.raises(ValueError, match="theme.colors.text must be a #RRGGBB color"):
            resolve_theme({"colors": {"text": color}})

    def test__hex_color_any_case__accepted(self) -> None:
        """Accept upper and lower case hex digits."""
        theme = resolve_theme({"colors": {"text": "#0B5394", "background": "#fafafa"}})

        assert theme.colors.text == "#0B5394"
        assert theme.colors.background == "#fafafa"

    @pytest.mark.parametrize("font", ['Evil"Font', "Arial</style>", "Arial; color: red"])
    def test__font_with_css_syntax__raises_error(self, font: str) -> None:
        """Reject font names that would break out of a CSS declaration."""
        with pytest.raises(ValueError, match="theme.fonts.body must not contain"):
            resolve_theme({"fonts": {"body": font}})

    def test__group_not_mapping__raises_error(self) -> None:
        """Reject a group that isn't a table."""
        with pytest.raises(ValueError, match="theme.colors must be a dictionary"):
            resolve_theme({"colors": "red"})

    def test__override__does_not_mutate_presets(self) -> None:
        """Leave the preset untouched after merging."""
        resolve_theme({"fonts": {"body": "Georgia"}})

        assert PRESETS["default"].fonts.body == "Arial"


class TestPresetListing:
    """Tests for list_preset_names() and describe_preset()."""

    def test__list__returns_all_presets(self) -> None:
        """List the five built-in presets."""
        assert list_preset_names() == ["default", "modern", "academic", "minimal", "dark"]

    def test__describe_known__returns_theme(self) -> None:
        """Describe a known preset."""
        theme = describe_preset("academic")

        assert theme is not None
        assert theme.fonts.heading == "Times New Roman"
        assert theme.spacing.line_height == 2.0

    def test__describe_unknown__returns_none(self) -> None:
        """Return None for an unknown preset."""
        assert describe_preset("nonexistent") is None
