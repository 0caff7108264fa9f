"""Build the parent/child type graph from analyzed class descriptions."""

from __future__ import annotations

import enum
import logging
from typing import Iterable

from widgetmap.docs import normalize_documentation
from widgetmap.errors import UnresolvedSupertypeError
from widgetmap.model import (
    NO_PARENT,
    AnalysisResult,
    ClassDescription,
    HierarchyGraph,
    TypeNode,
)
from widgetmap.properties import UnknownFinalityPolicy, extract_properties

logger = logging.getLogger(__name__)


class DuplicatePolicy(str, enum.Enum):
    """Which registration wins when two classes share a name."""

    KEEP_FIRST = "keep-first"
    KEEP_LAST = "keep-last"


class UnresolvedParentPolicy(str, enum.Enum):
    """What to do with a supertype name that names no registered type."""

    OMIT = "omit"
    RAISE = "raise"


def collect_classes(result: AnalysisResult) -> list[tuple[str, ClassDescription]]:
    """Return ``(package, class)`` pairs for every main library.

    A main library contributes its own classes plus every class it
    re-exports, directly or through a chain of exports.  Re-exported
    classes are attributed to the main library, not the declaring one.
    """
    entries: list[tuple[str, ClassDescription]] = []

    for main_name in result.main_libraries:
        main = result.libraries.get(main_name)
        if main is None:
            logger.debug("Main library %s has no description; skipping", main_name)
            continue

        for cls in main.classes:
            entries.append((main.name, cls))

        # (library, names allowed through so far); None lets everything through
        pending: list[tuple[str, frozenset[str] | None]] = [
            (exp.library, exp.show) for exp in main.exports
        ]
        # library -> names already admitted from it; None admits everything
        admitted: dict[str, frozenset[str] | None] = {main.name: None}
        while pending:
            lib_name, show = pending.pop(0)
            exported = result.libraries.get(lib_name)
            if exported is None:
                logger.debug("%s re-exports unknown library %s", main.name, lib_name)
                continue

            before = admitted.get(lib_name, frozenset())
            if before is None or (show is not None and show <= before):
                continue
            admitted[lib_name] = None if show is None else before | show

            for cls in exported.classes:
                if cls.name in before:
                    continue
                if show is None or cls.name in show:
                    entries.append((main.name, cls))
            for exp in exported.exports:
                if show is None:
                    narrowed = exp.show
                elif exp.show is None:
                    narrowed = show
                else:
                    narrowed = show & exp.show
                pending.append((exp.library, narrowed))

    return entries


class HierarchyBuilder:
    """Two-pass builder: register every class, then link parents and children."""

    def __init__(
        self,
        *,
        duplicates: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST,
        unresolved_parent: UnresolvedParentPolicy = UnresolvedParentPolicy.OMIT,
        unknown_finality: UnknownFinalityPolicy = UnknownFinalityPolicy.ASSUME_IMMUTABLE,
    ) -> None:
        self.duplicates = duplicates
        self.unresolved_parent = unresolved_parent
        self.unknown_finality = unknown_finality

    def build(self, entries: Iterable[tuple[str, ClassDescription]]) -> HierarchyGraph:
        entries = list(entries)
        graph = HierarchyGraph()
        batch_names = {cls.name for _, cls in entries}
        # supertype name -> subtype names (dict as an insertion-ordered set)
        subtypes: dict[str, dict[str, None]] = {}

        for package, cls in entries:
            registered, replaced = self._register(graph, package, cls)
            if replaced is not None and replaced.supertype_name in subtypes:
                subtypes[replaced.supertype_name].pop(replaced.name, None)
            parent = cls.supertype_name
            if (
                registered
                and parent is not None
                and parent != cls.name
                and parent in batch_names
            ):
                subtypes.setdefault(parent, {})[cls.name] = None

        for node in graph.nodes:
            node.parent = self._resolve_parent(graph, node)
            for child_name in subtypes.get(node.name, ()):
                child = graph.find(child_name)
                if child is not None:
                    node.children.append(child.index)

        logger.debug(
            "Built hierarchy: %d types, %d with a parent",
            len(graph),
            sum(1 for n in graph if n.has_parent),
        )
        return graph

    def _register(
        self, graph: HierarchyGraph, package: str, cls: ClassDescription
    ) -> tuple[bool, TypeNode | None]:
        """Add a node for *cls*; return (registered, node it replaced)."""
        existing = graph.nodes_by_name.get(cls.name)
        if existing is not None and self.duplicates is DuplicatePolicy.KEEP_FIRST:
            logger.debug(
                "%s already registered from %s; ignoring %s.%s",
                cls.name,
                graph.nodes[existing].package,
                package,
                cls.name,
            )
            return False, None

        index = len(graph.nodes) if existing is None else existing
        node = TypeNode(
            index=index,
            name=cls.name,
            package=package,
            abstract=cls.is_abstract,
            documentation=normalize_documentation(cls.documentation),
            properties=extract_properties(cls, unknown_finality=self.unknown_finality),
            supertype_name=cls.supertype_name,
        )
        if existing is None:
            graph.nodes.append(node)
            graph.nodes_by_name[cls.name] = index
            return True, None

        logger.debug("Replacing %s with the registration from %s", cls.name, package)
        replaced = graph.nodes[index]
        graph.nodes[index] = node
        return True, replaced

    def _resolve_parent(self, graph: HierarchyGraph, node: TypeNode):
        name = node.supertype_name
        if name is None:
            return NO_PARENT
        parent = graph.find(name)
        if parent is None or parent.index == node.index:
            if self.unresolved_parent is UnresolvedParentPolicy.RAISE:
                raise UnresolvedSupertypeError(node.name, name)
            return NO_PARENT
        return parent.index


def build_hierarchy(
    result: AnalysisResult,
    *,
    duplicates: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST,
    unresolved_parent: UnresolvedParentPolicy = UnresolvedParentPolicy.OMIT,
    unknown_finality: UnknownFinalityPolicy = UnknownFinalityPolicy.ASSUME_IMMUTABLE,
) -> HierarchyGraph:
    builder = HierarchyBuilder(
        duplicates=duplicates,
        unresolved_parent=unresolved_parent,
        unknown_finality=unknown_finality,
    )
    return builder.build(collect_classes(result))
