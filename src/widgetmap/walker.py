"""Walk the descendants of a type in the hierarchy graph."""

from __future__ import annotations

from widgetmap.errors import RootNotFoundError
from widgetmap.model import HierarchyGraph, TypeNode


def descendants(
    graph: HierarchyGraph, root: TypeNode, *, public_only: bool = True
) -> list[TypeNode]:
    """Return every type reachable from *root* through child links.

    Each node contributes its (filtered) children as a group before any of
    those children are expanded, so direct children precede grandchildren
    along every branch.  With *public_only*, a private type is neither
    returned nor walked through: its descendants are only reached if some
    other public path leads to them.
    """
    result: list[TypeNode] = []
    seen: set[int] = {root.index}
    stack: list[TypeNode] = [root]

    while stack:
        node = stack.pop()
        kids = [
            child
            for child in graph.children_of(node)
            if child.index not in seen and not (public_only and child.private)
        ]
        seen.update(child.index for child in kids)
        result.extend(kids)
        stack.extend(reversed(kids))

    return result


def public_descendants(graph: HierarchyGraph, root: TypeNode) -> list[TypeNode]:
    return descendants(graph, root, public_only=True)


def all_descendants(graph: HierarchyGraph, root: TypeNode) -> list[TypeNode]:
    return descendants(graph, root, public_only=False)


def select_widgets(
    graph: HierarchyGraph,
    root_name: str,
    *,
    public_only: bool = True,
    include_root: bool = True,
) -> list[TypeNode]:
    """Return the root type and its descendants, sorted by name."""
    root = graph.find(root_name)
    if root is None:
        raise RootNotFoundError(root_name)

    widgets = descendants(graph, root, public_only=public_only)
    if include_root:
        widgets.append(root)
    return sorted(widgets, key=lambda node: node.name)
