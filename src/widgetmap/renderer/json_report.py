"""Serialize a list of type nodes to the widgets JSON document."""

from __future__ import annotations

import json
from pathlib import Path

from widgetmap.docs import DocsMode, render_documentation
from widgetmap.model import HierarchyGraph, Property, TypeNode


def property_to_dict(prop: Property, *, docs: DocsMode = DocsMode.FULL) -> dict:
    d: dict = {"name": prop.name, "type": prop.declared_type}
    if prop.mutable:
        d["mutable"] = True
    if prop.is_named:
        d["named"] = True
    if prop.is_required:
        d["required"] = True
    text = render_documentation(prop.documentation, docs)
    if text is not None:
        d["docs"] = text
    return d


def type_to_dict(
    node: TypeNode, graph: HierarchyGraph, *, docs: DocsMode = DocsMode.FULL
) -> dict:
    d: dict = {"name": node.name, "package": node.package}
    parent = graph.parent_of(node)
    if parent is not None:
        d["parent"] = parent.name
    if node.abstract:
        d["abstract"] = True
    text = render_documentation(node.documentation, docs)
    if text is not None:
        d["docs"] = text
    if node.properties:
        d["properties"] = [property_to_dict(p, docs=docs) for p in node.properties]
    return d


def graph_to_data(
    nodes: list[TypeNode], graph: HierarchyGraph, *, docs: DocsMode = DocsMode.FULL
) -> dict:
    """Map each node's name to its record, in the order of *nodes*."""
    return {node.name: type_to_dict(node, graph, docs=docs) for node in nodes}


def render_json(
    nodes: list[TypeNode], graph: HierarchyGraph, *, docs: DocsMode = DocsMode.FULL
) -> str:
    data = graph_to_data(nodes, graph, docs=docs)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json(
    nodes: list[TypeNode],
    graph: HierarchyGraph,
    output_path: Path,
    *,
    docs: DocsMode = DocsMode.FULL,
) -> None:
    """Write the widgets document for *nodes* to *output_path*."""
    text = render_json(nodes, graph, docs=docs)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8", newline="\n")
