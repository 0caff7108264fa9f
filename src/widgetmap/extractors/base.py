"""Extractor protocol shared by all source front ends."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from widgetmap.model import AnalysisResult


class Extractor(Protocol):
    """Protocol for class-metadata extractors."""

    def can_handle(self, project_dir: Path) -> bool:
        """Return True if this extractor applies to the given project."""
        ...

    def extract(self, project_dir: Path, result: AnalysisResult) -> None:
        """Populate *result* with libraries and diagnostics from *project_dir*."""
        ...
