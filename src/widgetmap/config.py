"""Run settings, read from .widgetmap.toml or [tool.widgetmap] in pyproject.toml."""

from __future__ import annotations

import dataclasses
import enum
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from widgetmap.docs import DocsMode
from widgetmap.errors import ConfigurationError
from widgetmap.hierarchy import DuplicatePolicy, UnresolvedParentPolicy
from widgetmap.properties import UnknownFinalityPolicy

logger = logging.getLogger(__name__)

ANALYZERS = ("python", "java", "snapshot")


@dataclass
class Settings:
    root_type: str = "Widget"
    output: Path = Path("widgets.json")
    docs: DocsMode = DocsMode.FULL
    include_private: bool = False
    include_root: bool = True
    duplicates: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST
    unresolved_parent: UnresolvedParentPolicy = UnresolvedParentPolicy.OMIT
    unknown_finality: UnknownFinalityPolicy = UnknownFinalityPolicy.ASSUME_IMMUTABLE
    analyzer: str | None = None
    source_dir: Path | None = None
    snapshot: Path | None = None
    exclude: list[str] = field(default_factory=list)


_ENUM_FIELDS: dict[str, type[enum.Enum]] = {
    "docs": DocsMode,
    "duplicates": DuplicatePolicy,
    "unresolved_parent": UnresolvedParentPolicy,
    "unknown_finality": UnknownFinalityPolicy,
}
_PATH_FIELDS = {"output", "source_dir", "snapshot"}
_BOOL_FIELDS = {"include_private", "include_root"}


def settings_from_mapping(data: dict[str, Any], *, origin: str = "settings") -> Settings:
    """Build :class:`Settings` from a TOML table, validating keys and values."""
    known = {f.name for f in dataclasses.fields(Settings)}
    values: dict[str, Any] = {}

    for raw_key, value in data.items():
        key = raw_key.replace("-", "_")
        if key not in known:
            raise ConfigurationError(f"{origin}: unknown setting {raw_key!r}")

        if key in _ENUM_FIELDS:
            enum_type = _ENUM_FIELDS[key]
            try:
                value = enum_type(value)
            except ValueError:
                choices = ", ".join(m.value for m in enum_type)
                raise ConfigurationError(
                    f"{origin}: {raw_key} must be one of {choices}, not {value!r}"
                ) from None
        elif key in _PATH_FIELDS:
            if not isinstance(value, str):
                raise ConfigurationError(f"{origin}: {raw_key} must be a path string")
            value = Path(value)
        elif key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ConfigurationError(f"{origin}: {raw_key} must be true or false")
        elif key == "exclude":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"{origin}: exclude must be a list of patterns")
        elif key == "analyzer":
            if value not in ANALYZERS:
                raise ConfigurationError(
                    f"{origin}: analyzer must be one of {', '.join(ANALYZERS)}, not {value!r}"
                )
        elif key == "root_type":
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"{origin}: root_type must be a type name")

        values[key] = value

    return Settings(**values)


def _read_table(path: Path, keys: tuple[str, ...]) -> dict[str, Any] | None:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None

    for key in keys:
        data = data.get(key)
        if not isinstance(data, dict):
            return None
    return data


def load_settings(project_dir: Path) -> Settings:
    """Read settings for *project_dir*, falling back to defaults."""
    # Try .widgetmap.toml first
    widgetmap_toml = project_dir / ".widgetmap.toml"
    if widgetmap_toml.exists():
        table = _read_table(widgetmap_toml, ("widgetmap",))
        if table is not None:
            return settings_from_mapping(table, origin=str(widgetmap_toml))

    # Fall back to [tool.widgetmap] in pyproject.toml
    pyproject = project_dir / "pyproject.toml"
    if pyproject.exists():
        table = _read_table(pyproject, ("tool", "widgetmap"))
        if table is not None:
            return settings_from_mapping(table, origin=str(pyproject))

    return Settings()
