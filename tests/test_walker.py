"""Tests for descendant walking and widget selection."""

from __future__ import annotations

import pytest

from widgetmap.errors import RootNotFoundError
from widgetmap.walker import (
    all_descendants,
    descendants,
    public_descendants,
    select_widgets,
)

from conftest import build, make_class


def names(nodes):
    return [n.name for n in nodes]


@pytest.fixture
def tree_graph():
    return build(
        [
            make_class("R"),
            make_class("A", "R"),
            make_class("B", "R"),
            make_class("A1", "A"),
            make_class("A2", "A"),
            make_class("A1x", "A1"),
            make_class("B1", "B"),
        ]
    )


def test_children_are_emitted_before_they_are_expanded(tree_graph):
    root = tree_graph.find("R")
    assert names(descendants(tree_graph, root)) == ["A", "B", "A1", "A2", "A1x", "B1"]


def test_public_descendants_exclude_private_subtrees(framework_graph):
    widget = framework_graph.find("Widget")
    assert names(public_descendants(framework_graph, widget)) == ["StatelessWidget"]


def test_unfiltered_walk_includes_private_subtrees(framework_graph):
    widget = framework_graph.find("Widget")
    assert names(all_descendants(framework_graph, widget)) == [
        "StatelessWidget",
        "_InternalWidget",
        "LeakedWidget",
    ]


def test_private_root_still_reports_public_children(framework_graph):
    internal = framework_graph.find("_InternalWidget")
    assert names(public_descendants(framework_graph, internal)) == ["LeakedWidget"]


def test_leaf_has_no_descendants(framework_graph):
    leaf = framework_graph.find("StatelessWidget")
    assert descendants(framework_graph, leaf) == []


def test_walk_terminates_on_cycles():
    graph = build([make_class("A", "B"), make_class("B", "A")])
    assert names(descendants(graph, graph.find("A"))) == ["B"]


class TestSelectWidgets:
    def test_includes_root_and_sorts_by_name(self, framework_graph):
        widgets = select_widgets(framework_graph, "Widget")
        assert names(widgets) == ["StatelessWidget", "Widget"]

    def test_sort_key_is_name_not_insertion_order(self):
        graph = build([make_class("Widget"), make_class("StatelessWidget", "Widget")])
        assert names(select_widgets(graph, "Widget")) == ["StatelessWidget", "Widget"]

    def test_without_root(self, framework_graph):
        widgets = select_widgets(framework_graph, "Widget", include_root=False)
        assert names(widgets) == ["StatelessWidget"]

    def test_with_private(self, framework_graph):
        widgets = select_widgets(framework_graph, "Widget", public_only=False)
        assert names(widgets) == [
            "LeakedWidget",
            "StatelessWidget",
            "Widget",
            "_InternalWidget",
        ]

    def test_unknown_root_is_fatal(self, framework_graph):
        with pytest.raises(RootNotFoundError) as excinfo:
            select_widgets(framework_graph, "Component")
        assert excinfo.value.root_name == "Component"
        assert excinfo.value.exit_code == 3
