"""Orchestrator: detect, extract, build, walk and write."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from widgetmap.config import Settings, load_settings
from widgetmap.detect import detect_extractors
from widgetmap.errors import ConfigurationError
from widgetmap.hierarchy import HierarchyBuilder, collect_classes
from widgetmap.model import AnalysisResult
from widgetmap.renderer.json_report import write_json
from widgetmap.walker import select_widgets

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Outcome of a completed run."""

    output: Path
    source_count: int
    widget_count: int
    issue_count: int
    elapsed: float

    @property
    def exit_code(self) -> int:
        return 1 if self.issue_count else 0


def analyze(project_dir: Path, settings: Settings) -> AnalysisResult:
    """Run every applicable extractor over *project_dir*."""
    extractors = detect_extractors(project_dir, settings)
    if not extractors:
        raise ConfigurationError(f"Could not detect project type of {project_dir}.")

    logger.debug("Extractors: %s", [type(e).__name__ for e in extractors])

    result = AnalysisResult()
    handled = False
    for ext in extractors:
        if ext.can_handle(project_dir):
            ext.extract(project_dir, result)
            handled = True
    if not handled:
        raise ConfigurationError(f"No extractor can handle {project_dir}.")
    logger.info(
        "Analyzed %d source files into %d libraries.",
        result.source_count,
        len(result.libraries),
    )

    issues = result.issues
    if issues:
        logger.warning("Encountered %d analysis issues.", len(issues))
        for diagnostic in issues:
            logger.debug("  %s", diagnostic)
    return result


def run(project_dir: Path, *, settings: Settings | None = None) -> RunReport:
    """Run the full widgetmap pipeline and return a report of what was written."""
    started = time.perf_counter()
    project_dir = project_dir.resolve()
    if not project_dir.is_dir():
        raise ConfigurationError(f"Project directory {project_dir} does not exist.")

    if settings is None:
        settings = load_settings(project_dir)
    logger.debug("Project: %s, root type: %s", project_dir, settings.root_type)

    result = analyze(project_dir, settings)

    builder = HierarchyBuilder(
        duplicates=settings.duplicates,
        unresolved_parent=settings.unresolved_parent,
        unknown_finality=settings.unknown_finality,
    )
    graph = builder.build(collect_classes(result))

    widgets = select_widgets(
        graph,
        settings.root_type,
        public_only=not settings.include_private,
        include_root=settings.include_root,
    )

    write_json(widgets, graph, settings.output, docs=settings.docs)
    logger.info("Wrote data for %d widgets to %s.", len(widgets), settings.output)

    elapsed = time.perf_counter() - started
    logger.info("Finished in %.2fs.", elapsed)

    return RunReport(
        output=settings.output,
        source_count=result.source_count,
        widget_count=len(widgets),
        issue_count=len(result.issues),
        elapsed=elapsed,
    )
