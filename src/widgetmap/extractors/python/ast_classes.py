"""Extract class declarations and constructor properties from Python source via AST."""

from __future__ import annotations

import ast
import fnmatch
import logging
import warnings
from dataclasses import dataclass
from pathlib import Path

from widgetmap.errors import ConfigurationError
from widgetmap.extractors.python import find_source_dir, is_python_project
from widgetmap.model import (
    AnalysisResult,
    ClassDescription,
    Diagnostic,
    Export,
    LibraryDescription,
    MemberDescription,
    Severity,
)

logger = logging.getLogger(__name__)

# Bases that never count as the supertype of a class.
_MARKER_BASES = {"object", "ABC", "Generic", "Protocol"}

_ABSTRACT_DECORATORS = {"abstractmethod", "abstractproperty"}

# Annotation wrappers that qualify a type rather than name it.
_QUALIFIERS = {"Final", "ClassVar", "Required", "NotRequired", "Annotated", "InitVar"}


class AstClassExtractor:
    """Populate the analysis result with the classes of a Python package."""

    def __init__(
        self, source_dir: Path | None = None, exclude: list[str] | None = None
    ) -> None:
        self.source_dir = source_dir
        self.exclude = exclude or []

    def can_handle(self, project_dir: Path) -> bool:
        return self.source_dir is not None or is_python_project(project_dir)

    def extract(self, project_dir: Path, result: AnalysisResult) -> None:
        src_dir = find_source_dir(project_dir, self.source_dir)
        if src_dir is None:
            raise ConfigurationError(f"No Python package found under {project_dir}")

        py_files = [
            p for p in sorted(src_dir.rglob("*.py")) if not self._is_excluded(p, src_dir)
        ]
        logger.info("Found %d source files.", len(py_files))
        result.source_count += len(py_files)

        parsed: list[tuple[Path, str, ast.Module]] = []
        for py_file in py_files:
            logger.debug("  parsing %s…", py_file.relative_to(src_dir.parent))
            tree = _parse(py_file, result)
            if tree is not None:
                parsed.append((py_file, _module_name(py_file, src_dir), tree))

        # star imports are resolved against the target module's __all__
        module_all = {name: _dunder_all(tree) for _, name, tree in parsed}

        for py_file, module_name, tree in parsed:
            library = _library_from_tree(
                tree,
                module_name,
                is_package=py_file.name == "__init__.py",
                root_package=src_dir.name,
                module_all=module_all,
            )
            result.add_library(library, main=py_file.parent == src_dir)

    def _is_excluded(self, path: Path, src_dir: Path) -> bool:
        relative = path.relative_to(src_dir).as_posix()
        return any(fnmatch.fnmatch(relative, pattern) for pattern in self.exclude)


def _module_name(py_file: Path, src_dir: Path) -> str:
    parts = list(py_file.relative_to(src_dir.parent).with_suffix("").parts)
    if parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


def _parse(py_file: Path, result: AnalysisResult) -> ast.Module | None:
    """Parse *py_file*, recording read and syntax problems as diagnostics."""
    try:
        source = py_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        result.diagnostics.append(
            Diagnostic(Severity.ERROR, f"could not read file: {e}", str(py_file))
        )
        return None

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", SyntaxWarning)
        try:
            tree = ast.parse(source, filename=str(py_file))
        except SyntaxError as e:
            result.diagnostics.append(
                Diagnostic(Severity.ERROR, e.msg, str(py_file), e.lineno)
            )
            return None

    for w in caught:
        if issubclass(w.category, SyntaxWarning):
            result.diagnostics.append(
                Diagnostic(Severity.WARNING, str(w.message), str(py_file), w.lineno)
            )
    return tree


def _library_from_tree(
    tree: ast.Module,
    module_name: str,
    *,
    is_package: bool,
    root_package: str,
    module_all: dict[str, set[str] | None],
) -> LibraryDescription:
    classes = [
        _class_description(node, module_name)
        for node in tree.body
        if isinstance(node, ast.ClassDef)
    ]
    return LibraryDescription(
        name=module_name,
        classes=classes,
        exports=_exports(tree, module_name, is_package, root_package, module_all),
    )


# ---------------------------------------------------------------------------
# Re-exports
# ---------------------------------------------------------------------------


def _dunder_all(tree: ast.Module) -> set[str] | None:
    """Return the names listed in ``__all__``, or None if it is not defined."""
    names: set[str] | None = None
    for node in tree.body:
        if isinstance(node, ast.Assign):
            targets = node.targets
        elif isinstance(node, (ast.AugAssign, ast.AnnAssign)):
            targets = [node.target]
        else:
            continue
        if not any(isinstance(t, ast.Name) and t.id == "__all__" for t in targets):
            continue
        if not isinstance(node.value, (ast.List, ast.Tuple)):
            continue
        if names is None or not isinstance(node, ast.AugAssign):
            names = set()
        for elt in node.value.elts:
            if isinstance(elt, ast.Constant) and isinstance(elt.value, str):
                names.add(elt.value)
    return names


def _resolve_import(node: ast.ImportFrom, module_name: str, is_package: bool) -> str | None:
    if node.level == 0:
        return node.module
    parts = module_name.split(".")
    if not is_package:
        parts = parts[:-1]
    # each level past the first climbs one package; climbing past the top fails
    if node.level - 1 >= len(parts):
        return None
    if node.level > 1:
        parts = parts[: len(parts) - (node.level - 1)]
    base = ".".join(parts)
    return f"{base}.{node.module}" if node.module else base


def _exports(
    tree: ast.Module,
    module_name: str,
    is_package: bool,
    root_package: str,
    module_all: dict[str, set[str] | None],
) -> list[Export]:
    all_names = _dunder_all(tree)
    shown: dict[str, set[str] | None] = {}

    for node in tree.body:
        if not isinstance(node, ast.ImportFrom) or node.module is None:
            continue
        target = _resolve_import(node, module_name, is_package)
        if target is None or not (
            target == root_package or target.startswith(root_package + ".")
        ):
            continue

        names: set[str] | None
        if any(alias.name == "*" for alias in node.names):
            target_all = module_all.get(target)
            names = None if target_all is None else set(target_all)
            if all_names is not None:
                names = set(all_names) if names is None else names & all_names
        else:
            names = {
                alias.name
                for alias in node.names
                if _is_reexported(alias.asname or alias.name, all_names)
            }
        if names is not None and not names:
            continue

        if target not in shown:
            shown[target] = names
        elif shown[target] is not None:
            shown[target] = None if names is None else shown[target] | names

    return [
        Export(library, None if names is None else frozenset(names))
        for library, names in shown.items()
    ]


def _is_reexported(name: str, all_names: set[str] | None) -> bool:
    if all_names is not None:
        return name in all_names
    return not name.startswith("_")


# ---------------------------------------------------------------------------
# Classes
# ---------------------------------------------------------------------------


@dataclass
class _Field:
    """A class-level annotated attribute."""

    name: str
    type_name: str
    final: bool = False
    class_var: bool = False
    init_var: bool = False
    kw_only_marker: bool = False
    required_marker: bool = False
    value: ast.expr | None = None
    docs: str | None = None


def _base_name(expr: ast.expr) -> str | None:
    if isinstance(expr, ast.Subscript):
        expr = expr.value
    if isinstance(expr, ast.Call):
        expr = expr.func
    if isinstance(expr, ast.Name):
        return expr.id
    if isinstance(expr, ast.Attribute):
        return expr.attr
    return None


def _supertype(node: ast.ClassDef) -> str | None:
    for base in node.bases:
        name = _base_name(base)
        if name and name not in _MARKER_BASES:
            return name
    return None


def _is_abstract(node: ast.ClassDef) -> bool:
    if any(_base_name(base) == "ABC" for base in node.bases):
        return True
    for kw in node.keywords:
        if kw.arg == "metaclass" and _base_name(kw.value) == "ABCMeta":
            return True
    for item in node.body:
        if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
            if any(_base_name(d) in _ABSTRACT_DECORATORS for d in item.decorator_list):
                return True
    return False


def _dataclass_options(node: ast.ClassDef) -> dict[str, bool] | None:
    """Return the literal keyword options of a ``@dataclass`` decorator, if any."""
    for dec in node.decorator_list:
        if _base_name(dec) != "dataclass":
            continue
        options: dict[str, bool] = {}
        if isinstance(dec, ast.Call):
            for kw in dec.keywords:
                if (
                    kw.arg
                    and isinstance(kw.value, ast.Constant)
                    and isinstance(kw.value.value, bool)
                ):
                    options[kw.arg] = kw.value.value
        return options
    return None


def _annotation_info(annotation: ast.expr | None) -> tuple[str, set[str]]:
    """Return ``(type name, qualifiers)`` with Final/ClassVar/Required stripped."""
    qualifiers: set[str] = set()
    while annotation is not None:
        head = _base_name(annotation)
        if head not in _QUALIFIERS:
            break
        qualifiers.add(head)
        if not isinstance(annotation, ast.Subscript):
            annotation = None
            break
        inner = annotation.slice
        if isinstance(inner, ast.Tuple) and inner.elts:
            inner = inner.elts[0]  # Annotated[T, ...]
        annotation = inner

    if annotation is None:
        return "Any", qualifiers
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        return annotation.value, qualifiers
    return ast.unparse(annotation), qualifiers


def _docstring_after(body: list[ast.stmt], index: int) -> str | None:
    """Return the attribute docstring following ``body[index]``, if present."""
    if index + 1 >= len(body):
        return None
    nxt = body[index + 1]
    if (
        isinstance(nxt, ast.Expr)
        and isinstance(nxt.value, ast.Constant)
        and isinstance(nxt.value.value, str)
    ):
        return nxt.value.value
    return None


def _class_fields(node: ast.ClassDef) -> dict[str, _Field]:
    fields: dict[str, _Field] = {}
    for i, item in enumerate(node.body):
        if not (isinstance(item, ast.AnnAssign) and isinstance(item.target, ast.Name)):
            continue
        type_name, qualifiers = _annotation_info(item.annotation)
        fields[item.target.id] = _Field(
            name=item.target.id,
            type_name=type_name,
            final="Final" in qualifiers,
            class_var="ClassVar" in qualifiers,
            init_var="InitVar" in qualifiers,
            kw_only_marker=type_name == "KW_ONLY" or type_name.endswith(".KW_ONLY"),
            required_marker="Required" in qualifiers,
            value=item.value,
            docs=_docstring_after(node.body, i),
        )
    return fields


def _class_description(node: ast.ClassDef, module_name: str) -> ClassDescription:
    fields = _class_fields(node)
    init = next(
        (
            item
            for item in node.body
            if isinstance(item, ast.FunctionDef) and item.name == "__init__"
        ),
        None,
    )
    options = _dataclass_options(node)

    if init is not None:
        members = _init_members(init, fields)
    elif options is not None:
        members = _dataclass_members(fields, options)
    else:
        members = []

    return ClassDescription(
        name=node.name,
        package_name=module_name,
        supertype_name=_supertype(node),
        is_abstract=_is_abstract(node),
        documentation=ast.get_docstring(node),
        members=members,
    )


def _self_assignments(init: ast.FunctionDef) -> dict[str, tuple[str, bool, str | None]]:
    """Map parameter name -> (attribute, declared Final, docstring) for ``self.x = x``."""
    assigned: dict[str, tuple[str, bool, str | None]] = {}
    for i, stmt in enumerate(init.body):
        if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1:
            target, value, annotation = stmt.targets[0], stmt.value, None
        elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
            target, value, annotation = stmt.target, stmt.value, stmt.annotation
        else:
            continue
        if not (
            isinstance(target, ast.Attribute)
            and isinstance(target.value, ast.Name)
            and target.value.id == "self"
            and isinstance(value, ast.Name)
        ):
            continue
        _, qualifiers = _annotation_info(annotation)
        assigned.setdefault(
            value.id,
            (target.attr, "Final" in qualifiers, _docstring_after(init.body, i)),
        )
    return assigned


def _init_members(init: ast.FunctionDef, fields: dict[str, _Field]) -> list[MemberDescription]:
    args = init.args
    positional = [*args.posonlyargs, *args.args]
    first_default = len(positional) - len(args.defaults)
    backing = _self_assignments(init)

    params: list[tuple[ast.arg, bool, bool]] = []  # (arg, named, has_default)
    for i, arg in enumerate(positional):
        if i == 0:
            continue  # self
        params.append((arg, False, i >= first_default))
    for arg, default in zip(args.kwonlyargs, args.kw_defaults):
        params.append((arg, True, default is not None))

    members: list[MemberDescription] = []
    for arg, named, has_default in params:
        type_name, qualifiers = _annotation_info(arg.annotation)
        is_final: bool | None = None
        docs = None
        if arg.arg in backing:
            attr, declared_final, docs = backing[arg.arg]
            field_info = fields.get(attr)
            is_final = declared_final or (field_info is not None and field_info.final)
            if field_info is not None:
                docs = docs or field_info.docs
                if arg.annotation is None:
                    type_name = field_info.type_name
        members.append(
            MemberDescription(
                name=arg.arg,
                type_name=type_name,
                is_final=is_final,
                is_named=named,
                is_required=not has_default,
                has_required_marker="Required" in qualifiers,
                documentation=docs,
            )
        )
    return members


def _field_call_options(value: ast.expr | None) -> dict[str, ast.expr] | None:
    """Return the keywords of a ``field(...)`` default, or None for a plain default."""
    if isinstance(value, ast.Call) and _base_name(value.func) == "field":
        return {kw.arg: kw.value for kw in value.keywords if kw.arg}
    return None


def _literal_bool(expr: ast.expr | None) -> bool | None:
    if isinstance(expr, ast.Constant) and isinstance(expr.value, bool):
        return expr.value
    return None


def _dataclass_members(
    fields: dict[str, _Field], options: dict[str, bool]
) -> list[MemberDescription]:
    frozen = options.get("frozen", False)
    kw_only = options.get("kw_only", False)
    members: list[MemberDescription] = []

    for f in fields.values():
        if f.kw_only_marker:
            kw_only = True
            continue
        if f.class_var:
            continue

        field_opts = _field_call_options(f.value)
        if field_opts is None:
            has_default = f.value is not None
            named = kw_only
        else:
            if _literal_bool(field_opts.get("init")) is False:
                continue
            has_default = "default" in field_opts or "default_factory" in field_opts
            field_kw_only = _literal_bool(field_opts.get("kw_only"))
            named = kw_only if field_kw_only is None else field_kw_only

        members.append(
            MemberDescription(
                name=f.name,
                type_name=f.type_name,
                # InitVar pseudo-fields are parameters with no backing field
                is_final=None if f.init_var else (frozen or f.final),
                is_named=named,
                is_required=not has_default,
                has_required_marker=f.required_marker,
                documentation=f.docs,
            )
        )
    return members
