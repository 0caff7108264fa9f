"""Load already-resolved class metadata from a JSON or YAML snapshot file.

A snapshot is what an external analyzer hands over when widgetmap should not
read sources itself::

    main_libraries: [widgets]
    libraries:
      - name: widgets
        exports: [framework]          # or {library: framework, show: [Widget]}
      - name: framework
        classes:
          - name: Widget
            supertype: Object
            abstract: true
            docs: /// Describes part of a user interface.
            members:
              - {name: key, type: Key, final: true, named: true}
    diagnostics:
      - {severity: warning, message: unused import, source: framework.dart, line: 3}

``main_libraries`` defaults to every library.  A member without ``final``
has unknown finality.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from widgetmap.errors import ConfigurationError
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

SNAPSHOT_NAMES = (
    "widgetmap.snapshot.json",
    "widgetmap.snapshot.yaml",
    "widgetmap.snapshot.yml",
)


def find_snapshot(project_dir: Path) -> Path | None:
    for name in SNAPSHOT_NAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None


class SnapshotExtractor:
    """Populate the analysis result from a snapshot file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path

    def can_handle(self, project_dir: Path) -> bool:
        return self._snapshot_path(project_dir) is not None

    def extract(self, project_dir: Path, result: AnalysisResult) -> None:
        path = self._snapshot_path(project_dir)
        if path is None:
            raise ConfigurationError(f"No snapshot file found in {project_dir}")

        data = _load(path)
        loaded = parse_snapshot(data, origin=str(path))
        logger.info("Loaded %d libraries from %s.", len(loaded.libraries), path)

        result.source_count += 1
        for name in loaded.main_libraries:
            result.add_library(loaded.libraries[name], main=True)
        for library in loaded.libraries.values():
            if library.name not in result.libraries:
                result.add_library(library)
        result.diagnostics.extend(loaded.diagnostics)

    def _snapshot_path(self, project_dir: Path) -> Path | None:
        if self.path is not None:
            path = self.path if self.path.is_absolute() else project_dir / self.path
            return path if path.is_file() else None
        return find_snapshot(project_dir)


def _load(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read snapshot {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not parse snapshot {path}: {e}") from e


def _expect(value: Any, kind: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(value, kind):
        names = kind.__name__ if isinstance(kind, type) else "/".join(k.__name__ for k in kind)
        raise ConfigurationError(f"{where}: expected {names}, got {type(value).__name__}")
    return value


def _optional_str(entry: dict, key: str, where: str) -> str | None:
    value = entry.get(key)
    if value is None:
        return None
    return _expect(value, str, f"{where}.{key}")


def _flag(entry: dict, key: str, where: str) -> bool:
    return _expect(entry.get(key, False), bool, f"{where}.{key}")


def _parse_member(entry: Any, where: str) -> MemberDescription:
    entry = _expect(entry, dict, where)
    final = entry.get("final")
    if final is not None:
        _expect(final, bool, f"{where}.final")
    return MemberDescription(
        name=_expect(entry.get("name"), str, f"{where}.name"),
        type_name=_optional_str(entry, "type", where) or "dynamic",
        is_final=final,
        is_named=_flag(entry, "named", where),
        is_required=_flag(entry, "required", where),
        has_required_marker=_flag(entry, "required_marker", where),
        documentation=_optional_str(entry, "docs", where),
        from_parameter=_expect(entry.get("parameter", True), bool, f"{where}.parameter"),
    )


def _parse_class(entry: Any, library: str, where: str) -> ClassDescription:
    entry = _expect(entry, dict, where)
    members = _expect(entry.get("members", []), list, f"{where}.members")
    return ClassDescription(
        name=_expect(entry.get("name"), str, f"{where}.name"),
        package_name=_optional_str(entry, "package", where) or library,
        supertype_name=_optional_str(entry, "supertype", where),
        is_abstract=_flag(entry, "abstract", where),
        documentation=_optional_str(entry, "docs", where),
        members=[_parse_member(m, f"{where}.members[{i}]") for i, m in enumerate(members)],
    )


def _parse_export(entry: Any, where: str) -> Export:
    if isinstance(entry, str):
        return Export(entry)
    entry = _expect(entry, dict, where)
    library = _expect(entry.get("library"), str, f"{where}.library")
    show = entry.get("show")
    if show is None:
        return Export(library)
    show = _expect(show, list, f"{where}.show")
    return Export(library, frozenset(_expect(s, str, f"{where}.show") for s in show))


def _parse_library(entry: Any, where: str) -> LibraryDescription:
    entry = _expect(entry, dict, where)
    name = _expect(entry.get("name"), str, f"{where}.name")
    classes = _expect(entry.get("classes", []), list, f"{where}.classes")
    exports = _expect(entry.get("exports", []), list, f"{where}.exports")
    return LibraryDescription(
        name=name,
        classes=[_parse_class(c, name, f"{where}.classes[{i}]") for i, c in enumerate(classes)],
        exports=[_parse_export(e, f"{where}.exports[{i}]") for i, e in enumerate(exports)],
    )


def _parse_diagnostic(entry: Any, where: str) -> Diagnostic:
    entry = _expect(entry, dict, where)
    severity_name = _expect(entry.get("severity", "error"), str, f"{where}.severity")
    try:
        severity = Severity[severity_name.upper()]
    except KeyError:
        raise ConfigurationError(f"{where}.severity: unknown severity {severity_name!r}") from None
    line = entry.get("line")
    if line is not None:
        _expect(line, int, f"{where}.line")
    return Diagnostic(
        severity=severity,
        message=_expect(entry.get("message", ""), str, f"{where}.message"),
        source=_optional_str(entry, "source", where),
        line=line,
    )


def parse_snapshot(data: Any, *, origin: str = "snapshot") -> AnalysisResult:
    """Validate snapshot *data* and return it as an analysis result."""
    data = _expect(data, dict, origin)
    libraries = _expect(data.get("libraries", []), list, f"{origin}.libraries")
    diagnostics = _expect(data.get("diagnostics", []), list, f"{origin}.diagnostics")

    parsed = AnalysisResult()
    for i, entry in enumerate(libraries):
        parsed.add_library(_parse_library(entry, f"{origin}.libraries[{i}]"))

    main = data.get("main_libraries")
    if main is None:
        parsed.main_libraries = list(parsed.libraries)
    else:
        for name in _expect(main, list, f"{origin}.main_libraries"):
            if name not in parsed.libraries:
                raise ConfigurationError(f"{origin}.main_libraries: unknown library {name!r}")
            parsed.main_libraries.append(name)

    parsed.diagnostics = [
        _parse_diagnostic(d, f"{origin}.diagnostics[{i}]") for i, d in enumerate(diagnostics)
    ]
    return parsed
