"""
Pytest configuration and fixtures for widgetmap tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from widgetmap.hierarchy import HierarchyBuilder
from widgetmap.model import (
    ClassDescription,
    HierarchyGraph,
    MemberDescription,
)


def make_class(
    name: str,
    supertype: str | None = None,
    *,
    package: str = "widgets",
    abstract: bool = False,
    docs: str | None = None,
    members: list[MemberDescription] | None = None,
) -> ClassDescription:
    return ClassDescription(
        name=name,
        package_name=package,
        supertype_name=supertype,
        is_abstract=abstract,
        documentation=docs,
        members=list(members or []),
    )


def build(classes: list[ClassDescription], **policies) -> HierarchyGraph:
    """Build a graph with every class attributed to its own package."""
    return HierarchyBuilder(**policies).build((c.package_name, c) for c in classes)


@pytest.fixture
def framework_classes() -> list[ClassDescription]:
    """Object <- Widget <- {StatelessWidget, _InternalWidget <- LeakedWidget}."""
    return [
        make_class("Object"),
        make_class(
            "Widget",
            "Object",
            abstract=True,
            docs="/// Describes part of a user interface.\n///\n/// Widgets are immutable.",
            members=[
                MemberDescription(
                    name="key",
                    type_name="Key",
                    is_final=True,
                    is_named=True,
                    documentation="/// Controls how one widget replaces another.",
                )
            ],
        ),
        make_class("StatelessWidget", "Widget", abstract=True),
        make_class("_InternalWidget", "Widget"),
        make_class("LeakedWidget", "_InternalWidget"),
    ]


@pytest.fixture
def framework_graph(framework_classes) -> HierarchyGraph:
    return build(framework_classes)


@pytest.fixture
def python_project(tmp_path: Path) -> Path:
    """A small src-layout Python widget library with a re-exporting main module."""
    project = tmp_path / "proj"
    pkg = project / "src" / "ui"
    impl = pkg / "src"
    impl.mkdir(parents=True)

    (project / "pyproject.toml").write_text('[project]\nname = "ui"\n')
    (pkg / "__init__.py").write_text('"""UI toolkit."""\n')
    (impl / "__init__.py").write_text("")
    (pkg / "widgets.py").write_text(
        '"""The widgets library."""\n'
        "\n"
        "from .src.framework import *\n"
        "from .src.basic import Padding, Text\n"
    )
    (impl / "framework.py").write_text(
        '"""Core widget classes."""\n'
        "\n"
        "from abc import ABC, abstractmethod\n"
        "from typing import Final\n"
        "\n"
        "\n"
        "class Key:\n"
        '    """Identifies a widget."""\n'
        "\n"
        "\n"
        "class Widget(ABC):\n"
        '    """Describes part of a user interface.\n'
        "\n"
        "    Widgets are immutable.\n"
        '    """\n'
        "\n"
        "    key: Final[Key | None]\n"
        '    """Controls how one widget replaces another."""\n'
        "\n"
        "    def __init__(self, key: Key | None = None) -> None:\n"
        "        self.key = key\n"
        "\n"
        "\n"
        "class StatelessWidget(Widget):\n"
        "    @abstractmethod\n"
        "    def build(self): ...\n"
        "\n"
        "\n"
        "class _InternalWidget(Widget):\n"
        "    pass\n"
        "\n"
        "\n"
        "class LeakedWidget(_InternalWidget):\n"
        "    pass\n"
    )
    (impl / "basic.py").write_text(
        "from dataclasses import KW_ONLY, dataclass\n"
        "from typing import ClassVar\n"
        "\n"
        "from .framework import Widget\n"
        "\n"
        "\n"
        "class Text(Widget):\n"
        '    """Displays a string."""\n'
        "\n"
        "    def __init__(self, data: str, *, key=None, max_lines: int | None = None) -> None:\n"
        "        super().__init__(key)\n"
        "        self.data = data\n"
        '        """The text to display."""\n'
        "        self.max_lines = max_lines\n"
        "\n"
        "\n"
        "@dataclass(frozen=True)\n"
        "class Padding(Widget):\n"
        '    """Insets its child."""\n'
        "\n"
        "    padding: float\n"
        '    """Empty space to surround the child."""\n'
        '    child: "Widget | None" = None\n'
        "    _: KW_ONLY\n"
        "    visible: bool = True\n"
        "    instances: ClassVar[int] = 0\n"
    )
    return project
