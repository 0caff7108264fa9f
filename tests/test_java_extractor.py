"""Tests for the javalang-based Java class extractor."""

from __future__ import annotations

from pathlib import Path

import pytest

from widgetmap.docs import normalize_documentation
from widgetmap.extractors.java import (
    JavaSourceClassExtractor,
    find_source_roots,
    is_java_project,
)
from widgetmap.model import AnalysisResult, Severity

pytest.importorskip("javalang")

WIDGET_JAVA = """\
package com.example.ui;

/**
 * Base class of all widgets.
 */
public abstract class Widget {
    /** Identifies this widget. */
    private final String key;

    public Widget(String key) {
        this.key = key;
    }
}
"""

LABEL_JAVA = """\
package com.example.ui;

public class Label extends Widget {
    /** The displayed text. */
    private String text;

    public Label(@NonNull String key, String text, int[] widths) {
        super(key);
        this.text = text;
    }
}
"""


@pytest.fixture
def java_project(tmp_path: Path) -> Path:
    project = tmp_path / "toolkit"
    source = project / "src" / "main" / "java" / "com" / "example" / "ui"
    source.mkdir(parents=True)
    (project / "pom.xml").write_text("<project/>\n")
    (source / "Widget.java").write_text(WIDGET_JAVA)
    (source / "Label.java").write_text(LABEL_JAVA)
    (source / "package-info.java").write_text("package com.example.ui;\n")
    return project


@pytest.fixture
def result(java_project) -> AnalysisResult:
    result = AnalysisResult()
    JavaSourceClassExtractor().extract(java_project, result)
    return result


def test_detects_project(java_project):
    assert is_java_project(java_project)
    assert find_source_roots(java_project) == [java_project / "src" / "main" / "java"]


def test_packages_are_main_libraries(result):
    assert result.source_count == 2
    assert result.main_libraries == ["com.example.ui"]
    names = [c.name for c in result.libraries["com.example.ui"].classes]
    assert sorted(names) == ["Label", "Widget"]
    assert result.diagnostics == []


def test_class_facts(result):
    classes = {c.name: c for c in result.libraries["com.example.ui"].classes}
    widget = classes["Widget"]
    assert widget.is_abstract is True
    assert widget.supertype_name is None
    assert normalize_documentation(widget.documentation) == "Base class of all widgets."

    label = classes["Label"]
    assert label.is_abstract is False
    assert label.supertype_name == "Widget"


def test_constructor_members(result):
    classes = {c.name: c for c in result.libraries["com.example.ui"].classes}
    (key,) = classes["Widget"].members
    assert key.name == "key"
    assert key.type_name == "String"
    assert key.is_final is True
    assert key.is_required is True
    assert key.is_named is False
    assert normalize_documentation(key.documentation) == "Identifies this widget."

    key, text, widths = classes["Label"].members
    assert key.is_final is None
    assert key.has_required_marker is True
    assert text.is_final is False
    assert normalize_documentation(text.documentation) == "The displayed text."
    assert widths.type_name == "int[]"
    assert widths.is_final is None


def test_parse_errors_become_diagnostics(java_project):
    broken = java_project / "src" / "main" / "java" / "com" / "example" / "ui" / "Broken.java"
    broken.write_text("package com.example.ui;\npublic class Broken {\n")
    result = AnalysisResult()
    JavaSourceClassExtractor().extract(java_project, result)

    assert len(result.issues) == 1
    assert result.issues[0].severity is Severity.ERROR
    assert result.issues[0].source == str(broken)


def test_gradle_subprojects_add_source_roots(tmp_path):
    project = tmp_path / "multi"
    for sub in ("core", "widgets/material"):
        (project / sub / "src" / "main" / "java").mkdir(parents=True)
    (project / "build.gradle").write_text("")
    (project / "settings.gradle").write_text(
        "rootProject.name = 'multi'\n"
        "include 'core', ':widgets:material'\n"
        "includeBuild('tooling')\n"
    )
    assert find_source_roots(project) == [
        project / "core" / "src" / "main" / "java",
        project / "widgets" / "material" / "src" / "main" / "java",
    ]

    (project / "core" / "src" / "main" / "java" / "Box.java").write_text(
        "package kit;\npublic class Box {}\n"
    )
    result = AnalysisResult()
    JavaSourceClassExtractor().extract(project, result)
    assert [c.name for c in result.libraries["kit"].classes] == ["Box"]


def test_explicit_source_dir(java_project):
    root = Path("src") / "main" / "java"
    assert find_source_roots(java_project, root) == [java_project / root]
    assert find_source_roots(java_project, Path("missing")) == []
