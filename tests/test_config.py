"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from widgetmap.config import Settings, load_settings, settings_from_mapping
from widgetmap.docs import DocsMode
from widgetmap.errors import ConfigurationError
from widgetmap.hierarchy import DuplicatePolicy, UnresolvedParentPolicy
from widgetmap.properties import UnknownFinalityPolicy


def test_defaults_without_config_files(tmp_path):
    assert load_settings(tmp_path) == Settings()
    assert Settings().root_type == "Widget"
    assert Settings().output == Path("widgets.json")


def test_reads_widgetmap_toml(tmp_path):
    (tmp_path / ".widgetmap.toml").write_text(
        "[widgetmap]\n"
        'root-type = "Component"\n'
        'docs = "summary"\n'
        'output = "out/widgets.json"\n'
        'duplicates = "keep-last"\n'
        'unresolved-parent = "raise"\n'
        'unknown-finality = "assume-mutable"\n'
        "include-private = true\n"
        'exclude = ["tests/*"]\n'
    )
    settings = load_settings(tmp_path)
    assert settings.root_type == "Component"
    assert settings.docs is DocsMode.SUMMARY
    assert settings.output == Path("out/widgets.json")
    assert settings.duplicates is DuplicatePolicy.KEEP_LAST
    assert settings.unresolved_parent is UnresolvedParentPolicy.RAISE
    assert settings.unknown_finality is UnknownFinalityPolicy.ASSUME_MUTABLE
    assert settings.include_private is True
    assert settings.exclude == ["tests/*"]


def test_reads_pyproject_tool_table(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "ui"\n\n[tool.widgetmap]\nroot_type = "Control"\nanalyzer = "python"\n'
    )
    settings = load_settings(tmp_path)
    assert settings.root_type == "Control"
    assert settings.analyzer == "python"


def test_widgetmap_toml_wins_over_pyproject(tmp_path):
    (tmp_path / ".widgetmap.toml").write_text('[widgetmap]\nroot-type = "A"\n')
    (tmp_path / "pyproject.toml").write_text('[tool.widgetmap]\nroot-type = "B"\n')
    assert load_settings(tmp_path).root_type == "A"


def test_pyproject_without_tool_table_gives_defaults(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "ui"\n')
    assert load_settings(tmp_path) == Settings()


def test_unreadable_toml_falls_back_to_defaults(tmp_path, caplog):
    (tmp_path / ".widgetmap.toml").write_text("[widgetmap\n")
    assert load_settings(tmp_path) == Settings()
    assert "Could not read" in caplog.text


def test_unknown_key_is_rejected():
    with pytest.raises(ConfigurationError, match="unknown setting 'colour'"):
        settings_from_mapping({"colour": "blue"})


@pytest.mark.parametrize(
    "data",
    [
        {"docs": "everything"},
        {"duplicates": "keep-both"},
        {"analyzer": "dart"},
        {"include-private": "yes"},
        {"output": 3},
        {"exclude": "tests/*"},
        {"root-type": ""},
    ],
)
def test_invalid_values_are_rejected(data):
    with pytest.raises(ConfigurationError):
        settings_from_mapping(data)
