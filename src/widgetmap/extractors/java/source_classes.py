"""Extract class declarations and constructor properties from Java source via javalang."""

from __future__ import annotations

import fnmatch
import logging
from collections import defaultdict
from pathlib import Path

from widgetmap.errors import ConfigurationError
from widgetmap.model import (
    AnalysisResult,
    ClassDescription,
    Diagnostic,
    LibraryDescription,
    MemberDescription,
    Severity,
)

logger = logging.getLogger(__name__)

# Files to skip when walking Java sources.
_SKIP_FILES = {"package-info.java", "module-info.java"}

# Parameter annotations that mark a constructor argument as required.
_REQUIRED_ANNOTATIONS = {"Required", "NonNull", "Nonnull", "NotNull"}


class JavaSourceClassExtractor:
    """Populate the analysis result with the classes of a Java source tree."""

    def __init__(
        self, source_dir: Path | None = None, exclude: list[str] | None = None
    ) -> None:
        self.source_dir = source_dir
        self.exclude = exclude or []

    def can_handle(self, project_dir: Path) -> bool:
        from widgetmap.extractors.java import is_java_project

        return self.source_dir is not None or is_java_project(project_dir)

    def extract(self, project_dir: Path, result: AnalysisResult) -> None:
        try:
            import javalang  # noqa: F401
        except ImportError:
            raise ConfigurationError(
                "javalang is not installed; it is required to analyze Java sources. "
                "Install with: pip install widgetmap[java]"
            ) from None

        from widgetmap.extractors.java import find_source_roots

        source_roots = find_source_roots(project_dir, self.source_dir)
        if not source_roots:
            raise ConfigurationError(
                f"No Java source root found under {project_dir} (expected src/main/java/)"
            )

        java_files = [
            (source_root, f)
            for source_root in source_roots
            for f in sorted(source_root.rglob("*.java"))
            if f.name not in _SKIP_FILES
            and not any(
                fnmatch.fnmatch(f.relative_to(source_root).as_posix(), pattern)
                for pattern in self.exclude
            )
        ]
        logger.info("Found %d source files.", len(java_files))
        result.source_count += len(java_files)

        classes_by_package: dict[str, list[ClassDescription]] = defaultdict(list)
        for source_root, java_file in java_files:
            logger.debug("  parsing %s…", java_file.relative_to(source_root))
            parsed = _parse_file(java_file, source_root, result)
            if parsed is None:
                continue
            package, classes = parsed
            classes_by_package[package].extend(classes)

        # Java has no re-exports: every package is a main library.
        for package_name in sorted(classes_by_package):
            result.add_library(
                LibraryDescription(
                    name=package_name, classes=classes_by_package[package_name]
                ),
                main=True,
            )

        logger.debug(
            "Java source: %d packages, %d classes",
            len(classes_by_package),
            sum(len(c) for c in classes_by_package.values()),
        )


def _parse_file(
    java_file: Path, source_root: Path, result: AnalysisResult
) -> tuple[str, list[ClassDescription]] | None:
    """Parse one Java file into ``(package, classes)``, recording failures."""
    import javalang

    try:
        source = java_file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        result.diagnostics.append(
            Diagnostic(Severity.ERROR, f"could not read file: {e}", str(java_file))
        )
        return None

    try:
        tree = javalang.parse.parse(source)
    except javalang.parser.JavaSyntaxError as e:
        position = getattr(e.at, "position", None)
        line = position[0] if position else None
        result.diagnostics.append(
            Diagnostic(Severity.ERROR, e.description or "syntax error", str(java_file), line)
        )
        return None
    except Exception as e:
        # javalang raises assorted errors on syntax it does not support
        result.diagnostics.append(
            Diagnostic(Severity.ERROR, f"could not parse: {e!r}", str(java_file))
        )
        return None

    if tree.package is not None:
        package = tree.package.name
    else:
        # Derive from directory structure
        rel = java_file.relative_to(source_root).parent
        package = ".".join(rel.parts) if rel.parts else "(default)"

    classes = [
        _class_description(type_decl, package)
        for type_decl in tree.types
        if isinstance(type_decl, javalang.tree.ClassDeclaration)
    ]
    return package, classes


def _format_type(type_node) -> str:
    """Format a javalang type to a simple name (generic arguments dropped)."""
    if type_node is None:
        return "?"
    name = type_node.name
    if type_node.dimensions:
        name += "[]" * len(type_node.dimensions)
    return name


def _class_description(class_node, package: str) -> ClassDescription:
    import javalang

    supertype = class_node.extends.name if class_node.extends is not None else None

    body = class_node.body or []
    fields: dict[str, tuple[bool, str | None]] = {}
    for member in body:
        if isinstance(member, javalang.tree.FieldDeclaration):
            is_final = "final" in (member.modifiers or set())
            for declarator in member.declarators:
                fields[declarator.name] = (is_final, member.documentation)

    ctor = next(
        (m for m in body if isinstance(m, javalang.tree.ConstructorDeclaration)), None
    )
    members = _constructor_members(ctor, fields) if ctor is not None else []

    return ClassDescription(
        name=class_node.name,
        package_name=package,
        supertype_name=supertype,
        is_abstract="abstract" in (class_node.modifiers or set()),
        documentation=class_node.documentation,
        members=members,
    )


def _field_assignments(ctor) -> dict[str, str]:
    """Map parameter name -> field name for ``this.field = param`` statements."""
    import javalang

    assigned: dict[str, str] = {}
    for statement in ctor.body or []:
        if not isinstance(statement, javalang.tree.StatementExpression):
            continue
        expr = statement.expression
        if not isinstance(expr, javalang.tree.Assignment) or expr.type != "=":
            continue
        target, value = expr.expressionl, expr.value
        if not isinstance(target, javalang.tree.This) or not target.selectors:
            continue
        selector = target.selectors[0]
        if not isinstance(selector, javalang.tree.MemberReference):
            continue
        if isinstance(value, javalang.tree.MemberReference) and not value.qualifier:
            assigned.setdefault(value.member, selector.member)
    return assigned


def _constructor_members(
    ctor, fields: dict[str, tuple[bool, str | None]]
) -> list[MemberDescription]:
    assigned = _field_assignments(ctor)
    members: list[MemberDescription] = []

    for param in ctor.parameters or []:
        is_final: bool | None = None
        docs = None
        field_name = assigned.get(param.name)
        if field_name is not None and field_name in fields:
            is_final, docs = fields[field_name]

        annotations = {a.name.rsplit(".", 1)[-1] for a in param.annotations or []}
        type_name = _format_type(param.type)
        if param.varargs:
            type_name += "..."

        members.append(
            MemberDescription(
                name=param.name,
                type_name=type_name,
                is_final=is_final,
                is_named=False,
                # Java parameters are positional and always passed
                is_required=True,
                has_required_marker=bool(annotations & _REQUIRED_ANNOTATIONS),
                documentation=docs,
            )
        )
    return members
