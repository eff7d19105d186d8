"""End-to-end analysis: collect, recognize, recommend, score."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from diaglens.collector.compiler import DiagnosticSource
from diaglens.collector.engine import CollectionReport, DiagnosticCollector
from diaglens.core.config import AnalysisOptions, DiaglensConfig, load_config
from diaglens.core.report import utcnow
from diaglens.core.sources import SourceTree
from diaglens.fix.engine import FixRecommender, FixReport
from diaglens.patterns.engine import PatternRecognizer, PatternReport
from diaglens.quality.monitor import HistoryStore, QualityMonitor, QualityReport

logger = logging.getLogger(__name__)

REPORT_FILES = {
    "collection": "diagnostics.json",
    "patterns": "patterns.json",
    "fixes": "fix-recommendations.json",
    "quality": "quality.json",
}


@dataclass
class PipelineResult:
    collection: CollectionReport
    patterns: PatternReport
    fixes: FixReport
    quality: QualityReport
    observed_at: datetime

    def export(self, output_dir: Path) -> list[Path]:
        """Write one JSON report per stage into ``output_dir``."""
        return [
            self.collection.export(output_dir / REPORT_FILES["collection"], self.observed_at),
            self.patterns.export(output_dir / REPORT_FILES["patterns"]),
            self.fixes.export(output_dir / REPORT_FILES["fixes"]),
            self.quality.export(output_dir / REPORT_FILES["quality"]),
        ]


class AnalysisPipeline:
    """Runs the four stages in order. Data only flows downstream."""

    def __init__(
        self,
        project_path: Path | None = None,
        config: DiaglensConfig | None = None,
        source: DiagnosticSource | None = None,
        options: AnalysisOptions | None = None,
        history: HistoryStore | None = None,
        observed_at: datetime | None = None,
    ):
        self.project_path = (project_path or Path.cwd()).resolve()
        self.config = config or load_config(self.project_path)
        self.options = options or self.config.analysis
        self.source = source
        self.history = history
        self.observed_at = observed_at
        self.tree = SourceTree(
            self.project_path,
            self.config.quality.source_extensions,
            self.config.exclude,
        )

    @property
    def subsystems(self):
        return self.options.designated_subsystems

    def run(self, include_components: bool = False) -> PipelineResult:
        """Run every stage.

        ConfigurationError and CompilerError propagate before any report
        exists.
        """
        observed_at = self.observed_at or utcnow()

        collection = self.collect()
        diagnostics = collection.diagnostics

        patterns = PatternRecognizer(self.subsystems, observed_at).analyze(diagnostics)
        fixes = FixRecommender(
            self.config.compiler, self.subsystems, observed_at
        ).recommend(diagnostics)
        quality = self.quality_monitor(observed_at).analyze(
            diagnostics, patterns.patterns, include_components=include_components
        )

        logger.info(
            "Analysis complete: %d diagnostics, %d patterns, %d suggestions",
            len(diagnostics),
            len(patterns.patterns),
            len(fixes.suggestions),
        )
        return PipelineResult(
            collection=collection,
            patterns=patterns,
            fixes=fixes,
            quality=quality,
            observed_at=observed_at,
        )

    def collect(self) -> CollectionReport:
        collector = DiagnosticCollector(
            self.project_path,
            config=self.config,
            source=self.source,
            options=self.options,
            tree=self.tree,
        )
        return collector.collect()

    def quality_monitor(self, observed_at: datetime | None = None) -> QualityMonitor:
        return QualityMonitor(
            self.tree,
            config=self.config.quality,
            profile=self.config.compiler,
            subsystems=self.subsystems,
            history=self.history,
            observed_at=observed_at or self.observed_at,
        )
