"""Auto-detect project type and return appropriate extractors."""

from __future__ import annotations

from pathlib import Path

from widgetmap.config import Settings
from widgetmap.extractors.base import Extractor
from widgetmap.extractors.java import JavaSourceClassExtractor, is_java_project
from widgetmap.extractors.python import is_python_project
from widgetmap.extractors.python.ast_classes import AstClassExtractor
from widgetmap.extractors.snapshot import SnapshotExtractor, find_snapshot


def detect_extractors(project_dir: Path, settings: Settings) -> list[Extractor]:
    """Return the extractors applicable to *project_dir*.

    An explicit ``analyzer`` setting wins.  Otherwise a snapshot file takes
    precedence over sources, then Python, then Java.
    """
    analyzer = settings.analyzer
    if analyzer is None:
        if settings.snapshot is not None or find_snapshot(project_dir) is not None:
            analyzer = "snapshot"
        elif is_python_project(project_dir):
            analyzer = "python"
        elif is_java_project(project_dir):
            analyzer = "java"
        else:
            return []

    if analyzer == "snapshot":
        return [SnapshotExtractor(settings.snapshot)]
    if analyzer == "python":
        return [AstClassExtractor(settings.source_dir, exclude=settings.exclude)]
    return [JavaSourceClassExtractor(settings.source_dir, exclude=settings.exclude)]
