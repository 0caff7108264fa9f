"""Data model for analyzed class metadata and the type hierarchy built from it."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Literal


@dataclass(frozen=True)
class MemberDescription:
    """A field or constructor parameter as reported by an extractor."""

    name: str
    type_name: str
    is_final: bool | None = None  # None: no backing field, finality unknown
    is_named: bool = False
    is_required: bool = False
    has_required_marker: bool = False
    documentation: str | None = None
    from_parameter: bool = True


@dataclass
class ClassDescription:
    """One resolved class declaration."""

    name: str
    package_name: str
    supertype_name: str | None = None
    is_abstract: bool = False
    documentation: str | None = None
    members: list[MemberDescription] = field(default_factory=list)


@dataclass(frozen=True)
class Export:
    """A re-export of another library's types (``show=None`` exports all)."""

    library: str
    show: frozenset[str] | None = None


@dataclass
class LibraryDescription:
    """A unit of declarations: a module, a Java package, a snapshot library."""

    name: str
    classes: list[ClassDescription] = field(default_factory=list)
    exports: list[Export] = field(default_factory=list)


class Severity(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True)
class Diagnostic:
    """A problem reported while analyzing the sources."""

    severity: Severity
    message: str
    source: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        where = self.source or "<unknown>"
        if self.line is not None:
            where = f"{where}:{self.line}"
        return f"{where}: {self.severity.name.lower()}: {self.message}"


@dataclass
class AnalysisResult:
    """Everything the extractors produced for one run."""

    libraries: dict[str, LibraryDescription] = field(default_factory=dict)
    main_libraries: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    source_count: int = 0

    @property
    def issues(self) -> list[Diagnostic]:
        """Diagnostics of warning severity or worse."""
        return [d for d in self.diagnostics if d.severity >= Severity.WARNING]

    def add_library(self, library: LibraryDescription, *, main: bool = False) -> None:
        self.libraries[library.name] = library
        if main and library.name not in self.main_libraries:
            self.main_libraries.append(library.name)


@dataclass(frozen=True)
class Property:
    """A normalized field or constructor parameter of a type."""

    name: str
    declared_type: str
    mutable: bool = False
    is_named: bool = False
    is_required: bool = False
    documentation: str | None = None


class _Sentinel(enum.Enum):
    NO_PARENT = "no-parent"


NO_PARENT: Literal[_Sentinel.NO_PARENT] = _Sentinel.NO_PARENT


@dataclass
class TypeNode:
    """A class in the hierarchy graph.

    ``parent`` and ``children`` hold arena indices into
    :attr:`HierarchyGraph.nodes`, never node objects.
    """

    index: int
    name: str
    package: str
    abstract: bool = False
    documentation: str | None = None
    properties: list[Property] = field(default_factory=list)
    supertype_name: str | None = None
    parent: int | Literal[_Sentinel.NO_PARENT] = NO_PARENT
    children: list[int] = field(default_factory=list)

    @property
    def private(self) -> bool:
        return self.name.startswith("_")

    @property
    def has_parent(self) -> bool:
        return self.parent is not NO_PARENT

    def __str__(self) -> str:
        return self.name


@dataclass
class HierarchyGraph:
    """Arena of type nodes plus a name index."""

    nodes: list[TypeNode] = field(default_factory=list)
    nodes_by_name: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[TypeNode]:
        return iter(self.nodes)

    def find(self, name: str | None) -> TypeNode | None:
        if name is None:
            return None
        index = self.nodes_by_name.get(name)
        return None if index is None else self.nodes[index]

    def parent_of(self, node: TypeNode) -> TypeNode | None:
        if node.parent is NO_PARENT:
            return None
        return self.nodes[node.parent]

    def children_of(self, node: TypeNode) -> list[TypeNode]:
        return [self.nodes[i] for i in node.children]
