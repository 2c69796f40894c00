"""Tests for renderer configuration merging."""
import pydantic
import pytest

from artifact_server.generators.base import merge_config
from artifact_server.generators.models import ExcelConfig, SlideConfig, WordConfig
from artifact_server.utils.exceptions import ValidationError


def test_defaults_are_not_mutated():
    defaults = SlideConfig()
    merged = merge_config(defaults, {"titleFontSize": 50, "showFooter": True})
    assert merged.title_font_size == 50
    assert merged.show_footer is True
    assert defaults.title_font_size == 44
    assert defaults.show_footer is False


def test_unset_values_keep_defaults():
    merged = merge_config(
        SlideConfig(),
        {"bodyFontSize": 0, "fontFamily": "", "textColor": None, "showTableBorder": False},
    )
    assert merged.body_font_size == 22
    assert merged.font_family == "Calibri"
    assert merged.text_color == "#000000"
    # False is a real value, not "unset"
    assert merged.show_table_border is False


def test_unknown_keys_are_ignored():
    merged = merge_config(WordConfig(), {"somethingElse": 1})
    assert merged == WordConfig()


def test_snake_case_and_legacy_keys():
    merged = merge_config(ExcelConfig(), {"font_size": 14, "titleFontSize": 18})
    assert merged.font_size == 14
    assert merged.table_title_font_size == 18


def test_none_border_style():
    assert merge_config(ExcelConfig(), {"borderStyle": "none"}).border_style is None
    assert merge_config(ExcelConfig(), {"borderStyle": "thick"}).border_style == "thick"


def test_numeric_line_height_is_accepted():
    assert merge_config(WordConfig(), {"lineHeight": 1.5}).line_height == "1.5"
    assert merge_config(WordConfig(), {"lineHeight": "2"}).line_height == "2"


def test_invalid_value_raises_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        merge_config(WordConfig(), {"margins": "huge"})
    assert exc_info.value.message.startswith("[Validation Error] Invalid configuration 'margins'")


def test_configs_are_frozen():
    config = SlideConfig()
    with pytest.raises(pydantic.ValidationError):
        config.title_font_size = 10


def test_excel_blank_values_are_real_overrides():
    merged = merge_config(ExcelConfig(), {"fontFamily": "", "fontSize": 0, "headerFontSize": None})
    assert merged.font_family == ""
    assert merged.font_size == 0
    assert merged.header_font_size == 11


@pytest.mark.parametrize("color", ["red", "#FFF", "12345G", "#0000001"])
def test_slide_colors_must_be_hex(color):
    with pytest.raises(ValidationError) as exc_info:
        merge_config(SlideConfig(), {"backgroundColor": color})
    assert "Invalid configuration" in exc_info.value.message


def test_slide_colors_accept_optional_hash():
    merged = merge_config(SlideConfig(), {"textColor": "1f4e79", "tableBorderColor": "#A0A0A0"})
    assert merged.text_color == "1f4e79"
    assert merged.table_border_color == "#A0A0A0"
