"""Java extractors for Maven and Gradle projects."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from widgetmap.extractors.java.source_classes import JavaSourceClassExtractor

logger = logging.getLogger(__name__)

__all__ = [
    "JavaSourceClassExtractor",
    "find_source_roots",
    "is_java_project",
]

_BUILD_FILES = ("pom.xml", "build.gradle.kts", "build.gradle")


def is_java_project(project_dir: Path) -> bool:
    """Return True if *project_dir* has a Maven or Gradle build file."""
    return any((project_dir / name).exists() for name in _BUILD_FILES)


def _discover_maven_modules(project_dir: Path) -> list[str]:
    """Parse <modules> from root pom.xml."""
    pom_path = project_dir / "pom.xml"
    if not pom_path.exists():
        return []
    try:
        from jgo.maven import POM

        pom = POM(pom_path)
        return pom.values("modules/module")
    except ImportError:
        logger.debug("jgo not installed; cannot discover Maven modules")
        return []
    except (OSError, ValueError, KeyError) as e:
        logger.debug("Could not parse pom.xml for modules: %s", e)
        return []


def _discover_gradle_subprojects(project_dir: Path) -> list[str]:
    """Parse include() from settings.gradle(.kts)."""
    for name in ("settings.gradle.kts", "settings.gradle"):
        settings_path = project_dir / name
        if not settings_path.exists():
            continue
        try:
            text = settings_path.read_text()
        except OSError as e:
            logger.debug("Could not read %s: %s", name, e)
            return []
        # include("a", ":b") or include 'a'
        subprojects = []
        for args in re.findall(r"\binclude\b\s*\(?([^)\n]*)\)?", text):
            subprojects.extend(
                m.lstrip(":").replace(":", "/")
                for m in re.findall(r"""["']([^"']+)["']""", args)
            )
        return subprojects
    return []


def find_source_roots(project_dir: Path, source_dir: Path | None = None) -> list[Path]:
    """Find the Java source roots of *project_dir*.

    An explicit *source_dir* is used as-is.  Otherwise the project's own
    ``src/main/java`` is followed by those of its Maven modules and Gradle
    subprojects, in declaration order.
    """
    if source_dir is not None:
        candidate = project_dir / source_dir
        return [candidate] if candidate.is_dir() else []

    modules = [""]
    modules += _discover_maven_modules(project_dir)
    modules += _discover_gradle_subprojects(project_dir)

    roots: list[Path] = []
    for module in modules:
        candidate = project_dir / module / "src" / "main" / "java"
        if candidate.is_dir() and candidate not in roots:
            roots.append(candidate)
    return roots
