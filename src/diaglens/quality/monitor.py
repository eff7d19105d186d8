"""Quality Monitor: folds diagnostics and patterns into one explainable score."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from diaglens.core.config import CompilerProfile, QualityConfig
from diaglens.core.models import (
    CodeHealth,
    DesignatedSubsystem,
    Diagnostic,
    DiagnosticCategory,
    DomainHealth,
    ErrorPattern,
    Level,
    OverallScore,
    QualityMetrics,
    QualityRecommendation,
    QualityTrend,
    SecurityAssessment,
)
from diaglens.core.report import export_report, utcnow
from diaglens.core.sources import SourceTree
from diaglens.core.text import count_marker_hits
from diaglens.quality.components import ComponentScan, ComponentScanner
from diaglens.quality.scoring import clamp, estimate_complexity, grade_for, mean

logger = logging.getLogger(__name__)

ENGINE_NAME = "SafeQualityMonitor"

# Recommendation thresholds
TYPE_SAFETY_FLOOR = 80
ERROR_DENSITY_CEILING = 20
DOMAIN_AGGREGATE_FLOOR = 80
SECURITY_FLOOR = 70
PERMISSIVE_USAGE_LIMIT = 10


class HistoryStore(Protocol):
    """Source of the previous run's overall score, for trend detection."""

    def previous_overall_score(self) -> float | None: ...


@dataclass
class QualityReport:
    metrics: QualityMetrics
    components: ComponentScan | None = None
    observed_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        data = self.metrics.to_dict()
        if self.components is not None:
            data["component_health"] = [c.to_dict() for c in self.components.components]
            data["unreadable_components"] = list(self.components.unreadable)
        return data

    def export(self, output_path: Path) -> Path:
        return export_report(self.to_dict(), ENGINE_NAME, output_path, self.observed_at)


class QualityMonitor:
    """Computes :class:`QualityMetrics` for one analysis run."""

    def __init__(
        self,
        tree: SourceTree,
        config: QualityConfig | None = None,
        profile: CompilerProfile | None = None,
        subsystems: list[DesignatedSubsystem] | None = None,
        history: HistoryStore | None = None,
        observed_at: datetime | None = None,
    ):
        self.tree = tree
        self.config = config or QualityConfig()
        self.profile = profile or CompilerProfile()
        self.subsystems = subsystems or []
        self.history = history
        self.observed_at = observed_at

    @property
    def weights(self):
        return self.config.weights

    def analyze(
        self,
        diagnostics: list[Diagnostic],
        patterns: list[ErrorPattern] | None = None,
        include_components: bool = False,
    ) -> QualityReport:
        metrics = self.measure(diagnostics, patterns or [])
        components = self.analyze_component_health() if include_components else None
        return QualityReport(
            metrics=metrics,
            components=components,
            observed_at=self.observed_at or utcnow(),
        )

    def measure(
        self, diagnostics: list[Diagnostic], patterns: list[ErrorPattern]
    ) -> QualityMetrics:
        code = self.code_health(diagnostics)
        domain = self.domain_health(diagnostics)
        security = self.security_assessment(diagnostics, patterns)
        overall = self.overall_score(code, domain, security)
        metrics = QualityMetrics(
            code_health=code,
            domain_health=domain,
            security_assessment=security,
            overall=overall,
            recommendations=self.recommendations(code, domain, security),
        )
        logger.info("Overall quality %.1f (%s)", overall.score, overall.grade)
        return metrics

    def code_health(self, diagnostics: list[Diagnostic]) -> CodeHealth:
        type_errors = sum(1 for d in diagnostics if d.category == DiagnosticCategory.TYPE)
        type_safety = max(0.0, 100 - self.weights.type_error_penalty * type_errors)

        total_files = len(self.tree.files)
        error_files = {d.file for d in diagnostics}
        error_density = clamp(100 * len(error_files) / total_files) if total_files else 0.0

        unreadable: list[str] = []
        complexity = self.config.complexity_score
        if complexity is None:
            complexity = estimate_complexity(self.tree, unreadable)

        return CodeHealth(
            type_safety=type_safety,
            error_density=error_density,
            complexity_score=complexity,
            maintainability_index=mean([type_safety, 100 - error_density, complexity]),
            unreadable_files=unreadable,
        )

    def domain_health(self, diagnostics: list[Diagnostic]) -> DomainHealth:
        health = DomainHealth()
        for subsystem in self.subsystems:
            files = self.tree.files_for(subsystem)
            if not files:
                logger.info("No source files matched subsystem %s", subsystem.name)
                health.subsystems[subsystem.name] = self.weights.neutral_subsystem_score
                health.unmatched.append(subsystem.name)
                continue
            errors = sum(1 for d in diagnostics if subsystem.matches(d.message, d.file))
            penalty = self.weights.subsystem_error_penalty * errors / len(files)
            health.subsystems[subsystem.name] = max(0.0, 100 - penalty)

        health.aggregate = mean(list(health.subsystems.values()))
        return health

    def security_assessment(
        self, diagnostics: list[Diagnostic], patterns: list[ErrorPattern]
    ) -> SecurityAssessment:
        security_errors = sum(
            1 for d in diagnostics if d.category == DiagnosticCategory.SECURITY
        )
        permissive = count_marker_hits(
            (d.message for d in diagnostics), self.profile.permissive_markers
        )
        vulnerabilities = security_errors + permissive
        score = max(0.0, 100 - self.weights.vulnerability_penalty * vulnerabilities)

        critical: list[str] = []
        if permissive > PERMISSIVE_USAGE_LIMIT:
            critical.append(
                f"High permissive type usage ({permissive} instances) reduces type safety"
            )
        security_patterns = [p for p in patterns if p.category == DiagnosticCategory.SECURITY]
        if security_patterns:
            critical.append(f"{len(security_patterns)} recurring security-related patterns")

        return SecurityAssessment(
            type_security_score=score,
            vulnerability_count=vulnerabilities,
            security_grade=grade_for(score),
            critical_issues=critical,
        )

    def overall_score(
        self, code: CodeHealth, domain: DomainHealth, security: SecurityAssessment
    ) -> OverallScore:
        w = self.weights
        score = (
            w.code * code.composite
            + w.domain * domain.aggregate
            + w.security * security.type_security_score
        )
        return OverallScore(score=score, grade=grade_for(score), trend=self.trend(score))

    def trend(self, score: float) -> QualityTrend:
        if self.history is None:
            return QualityTrend.STABLE
        previous = self.history.previous_overall_score()
        if previous is None:
            return QualityTrend.STABLE
        if score > previous + self.weights.trend_tolerance:
            return QualityTrend.IMPROVING
        if score < previous - self.weights.trend_tolerance:
            return QualityTrend.DECLINING
        return QualityTrend.STABLE

    def recommendations(
        self, code: CodeHealth, domain: DomainHealth, security: SecurityAssessment
    ) -> list[QualityRecommendation]:
        recs: list[QualityRecommendation] = []

        if code.type_safety < TYPE_SAFETY_FLOOR:
            recs.append(QualityRecommendation(
                priority=Level.HIGH,
                category="code",
                description="Improve type safety by fixing type errors",
                impact="Better code reliability and developer experience",
            ))
        if code.error_density > ERROR_DENSITY_CEILING:
            recs.append(QualityRecommendation(
                priority=Level.MEDIUM,
                category="code",
                description="Reduce error density across project files",
                impact="Improved code quality and maintainability",
            ))

        for subsystem in self.subsystems:
            if subsystem.name in domain.unmatched:
                continue
            if domain.subsystems[subsystem.name] < subsystem.health_threshold:
                recs.append(QualityRecommendation(
                    priority=Level.HIGH,
                    category="domain",
                    description=subsystem.recommendation
                    or f"Address {subsystem.name} type issues to keep the subsystem stable",
                    impact=f"Preserve reliable {subsystem.name} behavior for users",
                ))
        if domain.unmatched:
            recs.append(QualityRecommendation(
                priority=Level.LOW,
                category="domain",
                description="Check subsystem globs, no source files matched: "
                + ", ".join(domain.unmatched),
                impact="Subsystem health is scored neutral until files are matched",
            ))
        if domain.aggregate < DOMAIN_AGGREGATE_FLOOR:
            recs.append(QualityRecommendation(
                priority=Level.HIGH,
                category="domain",
                description="Comprehensive designated subsystem type review needed",
                impact="Keep the platform's core features dependable",
            ))

        if security.type_security_score < SECURITY_FLOOR:
            recs.append(QualityRecommendation(
                priority=Level.HIGH,
                category="security",
                description="Enhance type security by reducing permissive type usage",
                impact="Improved application security and type safety",
            ))
        if security.critical_issues:
            recs.append(QualityRecommendation(
                priority=Level.HIGH,
                category="security",
                description="Address critical security issues identified in analysis",
                impact="Enhanced security posture and reduced vulnerability risk",
            ))

        return sorted(recs, key=lambda r: -r.priority.rank)

    def analyze_component_health(self) -> ComponentScan:
        scan = ComponentScanner(self.tree, self.subsystems, self.profile).scan()
        if scan.unreadable_count:
            logger.warning("%d component files could not be read", scan.unreadable_count)
        return scan
