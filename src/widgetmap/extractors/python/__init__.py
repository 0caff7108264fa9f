"""Python source front end: project detection and shared helpers."""

from __future__ import annotations

from pathlib import Path

_SKIP = {
    ".git",
    ".github",
    ".tox",
    ".venv",
    ".eggs",
    ".mypy_cache",
    ".pytest_cache",
    "__pycache__",
    "node_modules",
    "build",
    "dist",
    "docs",
    "doc",
    "tests",
    "test",
    "scripts",
    "bin",
    "examples",
}


def is_python_project(project_dir: Path) -> bool:
    """Return True if *project_dir* contains a Python project indicator."""
    return any(
        (project_dir / name).exists()
        for name in ("pixi.toml", "pyproject.toml", "setup.py")
    )


def find_source_dir(project_dir: Path, source_dir: Path | None = None) -> Path | None:
    """Return the package directory to analyze.

    An explicit *source_dir* (relative to *project_dir*) wins.  Otherwise
    look for a directory holding an ``__init__.py`` under ``src/``
    (src-layout) or directly under the project root (flat layout).
    """
    if source_dir is not None:
        candidate = project_dir / source_dir
        return candidate if candidate.is_dir() else None

    for parent in (project_dir / "src", project_dir):
        if not parent.is_dir():
            continue
        for child in sorted(parent.iterdir()):
            if (
                child.is_dir()
                and child.name not in _SKIP
                and (child / "__init__.py").exists()
            ):
                return child

    return None
