"""Diagnostic Collector: turns raw compiler output into classified diagnostics."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from diaglens.collector.compiler import DiagnosticSource, RawDiagnostic, TscRunner
from diaglens.collector.rules import RuleContext, classify, map_severity
from diaglens.core.config import AnalysisOptions, DiaglensConfig, load_config
from diaglens.core.errors import DiagnosticConversionError
from diaglens.core.models import DesignatedSubsystem, Diagnostic
from diaglens.core.report import export_report
from diaglens.core.sources import SourceTree

logger = logging.getLogger(__name__)

ENGINE_NAME = "DiagnosticCollector"
DEPENDENCY_DIR = "node_modules"

_DECLARATION_RE = re.compile(r"\b(?:interface|type|class)\s+[A-Za-z_$][\w$]*")


@dataclass
class CollectionReport:
    """Collector output. Counts make every excluded record auditable."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    total_raw: int = 0
    truncated_count: int = 0
    skipped_count: int = 0
    excluded_dependency_count: int = 0
    domain_feature_health: dict[str, bool] = field(default_factory=dict)
    unreadable_files: list[str] = field(default_factory=list)
    source_file_count: int = 0
    project_root: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_root": self.project_root,
            "summary": {
                "total_raw": self.total_raw,
                "returned": len(self.diagnostics),
                "truncated_count": self.truncated_count,
                "skipped_count": self.skipped_count,
                "excluded_dependency_count": self.excluded_dependency_count,
                "source_file_count": self.source_file_count,
                "unreadable_count": len(self.unreadable_files),
            },
            "domain_feature_health": dict(self.domain_feature_health),
            "unreadable_files": list(self.unreadable_files),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def export(self, output_path: Path, timestamp: datetime | None = None) -> Path:
        return export_report(self.to_dict(), ENGINE_NAME, output_path, timestamp)


class DiagnosticCollector:
    """Runs the compiler against a project root and normalizes its diagnostics."""

    def __init__(
        self,
        project_path: Path | None = None,
        config: DiaglensConfig | None = None,
        source: DiagnosticSource | None = None,
        options: AnalysisOptions | None = None,
        tree: SourceTree | None = None,
    ):
        self.project_path = (project_path or Path.cwd()).resolve()
        self.config = config or load_config(self.project_path)
        self.options = options or self.config.analysis
        self.source = source or TscRunner(self.config.compiler)
        self.tree = tree or SourceTree(
            self.project_path,
            self.config.quality.source_extensions,
            self.config.exclude,
        )

    @property
    def subsystems(self) -> list[DesignatedSubsystem]:
        return self.options.designated_subsystems

    def collect(self) -> CollectionReport:
        """Collect, convert, filter and truncate diagnostics.

        Raises ConfigurationError (no compiler configuration) and
        CompilerError before any report is built.
        """
        raw_diagnostics = self.source.collect(self.project_path)

        converted: list[Diagnostic] = []
        skipped = 0
        excluded = 0
        for raw in raw_diagnostics:
            try:
                diagnostic = self.convert(raw)
            except DiagnosticConversionError as exc:
                skipped += 1
                logger.debug("Skipping diagnostic: %s", exc)
                continue
            if not self.options.include_dependencies and self._is_dependency(diagnostic.file):
                excluded += 1
                continue
            converted.append(diagnostic)

        if skipped:
            logger.info("Skipped %d malformed diagnostics", skipped)

        limit = self.options.max_diagnostics
        kept = converted[:limit]
        truncated = len(converted) - len(kept)
        if truncated:
            logger.warning(
                "Diagnostic output truncated to %d records (%d dropped)", limit, truncated
            )

        unreadable: list[str] = []
        feature_health = self.domain_feature_health(unreadable)

        return CollectionReport(
            diagnostics=kept,
            total_raw=len(raw_diagnostics),
            truncated_count=truncated,
            skipped_count=skipped,
            excluded_dependency_count=excluded,
            domain_feature_health=feature_health,
            unreadable_files=unreadable,
            source_file_count=len(self.tree.files),
            project_root=str(self.project_path),
        )

    def convert(self, raw: RawDiagnostic) -> Diagnostic:
        """Validate and classify one raw diagnostic."""
        if not raw.file:
            raise DiagnosticConversionError(f"diagnostic has no file: {raw.message!r}")
        if raw.line is None or raw.column is None:
            raise DiagnosticConversionError(f"diagnostic has no position: {raw.file}")
        if raw.code is None:
            raise DiagnosticConversionError(f"diagnostic has no code: {raw.file}:{raw.line}")

        file = self._relative_file(raw.file)
        ctx = RuleContext(
            code=raw.code,
            message=raw.message,
            file=file,
            profile=self.config.compiler,
            subsystems=self.subsystems,
        )
        return Diagnostic(
            code=raw.code,
            message=raw.message,
            file=file,
            line=raw.line,
            column=raw.column,
            severity=map_severity(raw.severity),
            category=classify(ctx),
        )

    def domain_feature_health(self, unreadable: list[str] | None = None) -> dict[str, bool]:
        """Whether each subsystem's files declare at least one type.

        Unreadable files are left out of the decision and, when given,
        appended once each to ``unreadable``. Subsystems with no readable
        matching files are reported healthy.
        """
        declares: dict[Path, bool | None] = {}
        health: dict[str, bool] = {}
        for subsystem in self.subsystems:
            results = []
            for path in self.tree.files_for(subsystem):
                if path not in declares:
                    declares[path] = self._declares_types(path)
                    if declares[path] is None and unreadable is not None:
                        unreadable.append(self.tree.relative(path))
                if declares[path] is not None:
                    results.append(declares[path])
            health[subsystem.name] = any(results) if results else True
        return health

    def _declares_types(self, path: Path) -> bool | None:
        try:
            content = self.tree.read(path)
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read %s for feature detection", path)
            return None
        return _DECLARATION_RE.search(content) is not None

    def _relative_file(self, file: str) -> str:
        path = Path(file)
        if path.is_absolute():
            try:
                return path.resolve().relative_to(self.project_path).as_posix()
            except ValueError:
                return path.as_posix()
        return file.replace("\\", "/")

    @staticmethod
    def _is_dependency(file: str) -> bool:
        return DEPENDENCY_DIR in file.split("/")
