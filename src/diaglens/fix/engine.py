"""Fix Recommender: suggested remediations that are never applied.

Every suggestion carries ``manual_approval_required = True``. diaglens has no
code path that edits source files; the only write it performs is exporting
the JSON report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from diaglens.core.config import CompilerProfile
from diaglens.core.models import (
    BatchFixPlan,
    DesignatedSubsystem,
    Diagnostic,
    DiagnosticCategory,
    FixSuggestion,
    Level,
)
from diaglens.core.report import export_report, utcnow
from diaglens.fix.batch import BatchPlanner
from diaglens.fix.safety import SafetyAnalyzer
from diaglens.fix.templates import SuggestionTemplates

logger = logging.getLogger(__name__)

ENGINE_NAME = "FixRecommendationEngine"


@dataclass
class FixReport:
    suggestions: list[FixSuggestion] = field(default_factory=list)
    plans: list[BatchFixPlan] = field(default_factory=list)
    observed_at: datetime = field(default_factory=utcnow)

    def by_priority(self) -> dict[str, int]:
        return {
            level.value: sum(1 for s in self.suggestions if s.priority is level)
            for level in (Level.HIGH, Level.MEDIUM, Level.LOW)
        }

    def by_category(self) -> dict[str, int]:
        return {
            category.value: sum(1 for s in self.suggestions if s.category is category)
            for category in DiagnosticCategory
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "total_suggestions": len(self.suggestions),
                "by_priority": self.by_priority(),
                "by_category": self.by_category(),
                "batch_plans": len(self.plans),
            },
            "suggestions": [s.to_dict() for s in self.suggestions],
            "batch_plans": [p.to_dict() for p in self.plans],
        }

    def export(self, output_path: Path) -> Path:
        path = export_report(self.to_dict(), ENGINE_NAME, output_path, self.observed_at)
        logger.info("All %d suggested fixes require manual review", len(self.suggestions))
        return path


class FixRecommender:
    """Builds suggestions and batch plans from classified diagnostics."""

    def __init__(
        self,
        profile: CompilerProfile | None = None,
        subsystems: list[DesignatedSubsystem] | None = None,
        observed_at: datetime | None = None,
    ):
        self.profile = profile or CompilerProfile()
        self.subsystems = subsystems or []
        self.observed_at = observed_at
        self.templates = SuggestionTemplates(self.profile, self.subsystems)
        self.safety = SafetyAnalyzer(self.profile, self.subsystems)
        self.planner = BatchPlanner(self.subsystems)

    def recommend(self, diagnostics: list[Diagnostic]) -> FixReport:
        suggestions = [self.suggest(d) for d in diagnostics]
        report = FixReport(
            suggestions=self.sort_by_priority(suggestions),
            plans=self.planner.plan(suggestions),
            observed_at=self.observed_at or utcnow(),
        )
        logger.info(
            "Generated %d suggestions and %d batch plans",
            len(report.suggestions),
            len(report.plans),
        )
        return report

    def suggest(self, diagnostic: Diagnostic) -> FixSuggestion:
        template = self.templates.template_for(diagnostic)
        return FixSuggestion(
            id=f"fix_{diagnostic.diagnostic_id}",
            diagnostic_id=diagnostic.diagnostic_id,
            title=template.title,
            description=template.description,
            category=diagnostic.category,
            priority=template.priority,
            complexity=template.complexity,
            steps=template.steps,
            safety_analysis=self.safety.analyze_safety(diagnostic),
            domain_impact=self.safety.analyze_domain_impact(diagnostic),
            subsystem=template.subsystem,
        )

    def generate_suggestions(self, diagnostics: list[Diagnostic]) -> list[FixSuggestion]:
        """One suggestion per diagnostic, highest priority first."""
        return self.sort_by_priority([self.suggest(d) for d in diagnostics])

    def create_batch_plans(self, diagnostics: list[Diagnostic]) -> list[BatchFixPlan]:
        return self.planner.plan([self.suggest(d) for d in diagnostics])

    @staticmethod
    def sort_by_priority(suggestions: list[FixSuggestion]) -> list[FixSuggestion]:
        return sorted(suggestions, key=lambda s: -s.priority.rank)
