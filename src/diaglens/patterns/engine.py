"""Pattern Recognizer: surfaces diagnostics that recur across the codebase.

Two diagnostics belong to the same pattern when their messages normalize to
the same text (see :func:`diaglens.core.text.normalize_message`). Only
messages seen at least twice become patterns. A separate pass aggregates every
diagnostic touching a designated subsystem, so that subsystem regressions
surface even when their messages differ.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from diaglens.core.models import (
    DesignatedSubsystem,
    Diagnostic,
    DiagnosticCategory,
    DomainImpact,
    ErrorPattern,
    Level,
    Trend,
)
from diaglens.core.report import export_report, utcnow
from diaglens.core.text import normalize_message, slugify

logger = logging.getLogger(__name__)

ENGINE_NAME = "PatternRecognitionEngine"
SUBSYSTEM_PATTERN_ID = "designated_subsystem_errors"

# Frequency thresholds
HIGH_FREQUENCY = 10
MEDIUM_FREQUENCY = 5

CATEGORY_NAMES = {
    DiagnosticCategory.IMPORT: "Import Issue",
    DiagnosticCategory.TYPE: "Type Error",
    DiagnosticCategory.SYNTAX: "Syntax Problem",
    DiagnosticCategory.DOMAIN: "Designated Subsystem Issue",
    DiagnosticCategory.SECURITY: "Security Concern",
}

FIX_TEMPLATES = {
    DiagnosticCategory.IMPORT: "Check import paths and ensure dependencies are installed",
    DiagnosticCategory.TYPE: "Review type definitions and ensure proper typing",
    DiagnosticCategory.SYNTAX: "Fix the syntax error reported by the compiler",
    DiagnosticCategory.DOMAIN: "Verify the subsystem's type definitions and imports",
    DiagnosticCategory.SECURITY: "Improve type safety and remove permissive type usage",
}


@dataclass
class PatternTrend:
    pattern: str
    occurrences: int
    first_seen: datetime
    trend: Trend

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern,
            "occurrences": self.occurrences,
            "first_seen": self.first_seen.isoformat(),
            "trend": self.trend.value,
        }


@dataclass
class SubsystemPatternHealth:
    counts: dict[str, int] = field(default_factory=dict)
    critical_issues: list[str] = field(default_factory=list)
    # names of subsystems over their critical threshold
    critical_subsystems: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "counts": dict(self.counts),
            "critical_issues": list(self.critical_issues),
            "critical_subsystems": list(self.critical_subsystems),
        }


@dataclass
class PatternReport:
    patterns: list[ErrorPattern] = field(default_factory=list)
    pattern_trends: list[PatternTrend] = field(default_factory=list)
    subsystem_pattern_health: SubsystemPatternHealth = field(
        default_factory=SubsystemPatternHealth
    )
    recommendations: list[str] = field(default_factory=list)
    diagnostic_count: int = 0
    observed_at: datetime = field(default_factory=utcnow)

    def by_category(self, category: DiagnosticCategory) -> list[ErrorPattern]:
        return [p for p in self.patterns if p.category == category]

    def to_dict(self) -> dict[str, Any]:
        return {
            "diagnostic_count": self.diagnostic_count,
            "discovered_patterns": [p.to_dict() for p in self.patterns],
            "pattern_trends": [t.to_dict() for t in self.pattern_trends],
            "subsystem_pattern_health": self.subsystem_pattern_health.to_dict(),
            "recommendations": list(self.recommendations),
        }

    def export(self, output_path: Path) -> Path:
        return export_report(self.to_dict(), ENGINE_NAME, output_path, self.observed_at)


def unique_id(base: str, seen: dict[str, int]) -> str:
    """Return ``base``, or ``base_2``, ``base_3``... if already taken."""
    count = seen.get(base, 0) + 1
    seen[base] = count
    if count == 1:
        return base
    candidate = f"{base}_{count}"
    while candidate in seen:
        count += 1
        candidate = f"{base}_{count}"
    seen[base] = count
    seen[candidate] = 1
    return candidate


class PatternRecognizer:
    """Groups diagnostics into recurring :class:`ErrorPattern` objects."""

    def __init__(
        self,
        subsystems: list[DesignatedSubsystem] | None = None,
        observed_at: datetime | None = None,
    ):
        self.subsystems = subsystems or []
        self.observed_at = observed_at

    def analyze(self, diagnostics: list[Diagnostic]) -> PatternReport:
        observed_at = self.observed_at or utcnow()
        patterns = self.find_patterns(diagnostics)
        health = self.subsystem_health(diagnostics)
        report = PatternReport(
            patterns=patterns,
            pattern_trends=self.analyze_trends(patterns, observed_at),
            subsystem_pattern_health=health,
            recommendations=self.recommendations(patterns, health),
            diagnostic_count=len(diagnostics),
            observed_at=observed_at,
        )
        logger.info(
            "Found %d patterns in %d diagnostics", len(patterns), len(diagnostics)
        )
        return report

    def find_patterns(self, diagnostics: list[Diagnostic]) -> list[ErrorPattern]:
        patterns: list[ErrorPattern] = []
        seen_ids: dict[str, int] = {SUBSYSTEM_PATTERN_ID: 1}
        for normalized, bucket in self.group_by_message(diagnostics).items():
            if len(bucket) < 2:
                continue
            pattern = self._pattern_from_bucket(normalized, bucket)
            pattern.id = unique_id(pattern.id, seen_ids)
            patterns.append(pattern)

        subsystem_pattern = self._subsystem_pattern(diagnostics)
        if subsystem_pattern is not None:
            patterns.append(subsystem_pattern)

        return sorted(patterns, key=lambda p: -p.frequency)

    @staticmethod
    def group_by_message(diagnostics: list[Diagnostic]) -> dict[str, list[Diagnostic]]:
        groups: dict[str, list[Diagnostic]] = {}
        for diagnostic in diagnostics:
            groups.setdefault(normalize_message(diagnostic.message), []).append(diagnostic)
        return groups

    def _pattern_from_bucket(self, normalized: str, bucket: list[Diagnostic]) -> ErrorPattern:
        affected_files = sorted({d.basename for d in bucket})
        category = self._pattern_category(normalized, bucket)
        impact = self.assess_domain_impact(sorted({d.file for d in bucket}))
        return ErrorPattern(
            id=slugify(normalized),
            name=CATEGORY_NAMES.get(category, "General Error"),
            description=f"Pattern occurring {len(bucket)} times: {normalized}",
            matcher=normalized,
            category=category,
            frequency=len(bucket),
            severity=self.determine_severity(len(bucket), impact),
            affected_files=affected_files,
            suggested_fix=FIX_TEMPLATES.get(
                category, "Review the error message and apply an appropriate fix"
            ),
            domain_impact=impact,
        )

    def _pattern_category(self, normalized: str, bucket: list[Diagnostic]) -> DiagnosticCategory:
        # keywords inside quoted names do not survive normalization
        texts = [normalized, *(d.message for d in bucket)]
        if any(s.matches_text(t) for s in self.subsystems for t in texts):
            return DiagnosticCategory.DOMAIN
        return bucket[0].category

    def _subsystem_pattern(self, diagnostics: list[Diagnostic]) -> ErrorPattern | None:
        if not self.subsystems:
            return None
        matched = [
            d for d in diagnostics
            if any(s.matches(d.message, d.file) for s in self.subsystems)
        ]
        if not matched:
            return None

        keywords = [kw for s in self.subsystems for kw in s.keywords]
        return ErrorPattern(
            id=SUBSYSTEM_PATTERN_ID,
            name="Designated Subsystem Type Issues",
            description=f"{len(matched)} errors affecting designated subsystems",
            matcher="|".join(keywords),
            category=DiagnosticCategory.DOMAIN,
            frequency=len(matched),
            severity=Level.HIGH,
            affected_files=sorted({d.basename for d in matched}),
            suggested_fix="Review subsystem type definitions and imports",
            domain_impact=DomainImpact.HIGH if len(matched) > 5 else DomainImpact.MEDIUM,
            keywords=keywords,
        )

    def assess_domain_impact(self, affected_files: list[str]) -> DomainImpact:
        hits = [
            f for f in affected_files
            if any(s.matches_text(f) or s.matches_path(f) for s in self.subsystems)
        ]
        if len(hits) > 3:
            return DomainImpact.HIGH
        if len(hits) > 1:
            return DomainImpact.MEDIUM
        if hits:
            return DomainImpact.LOW
        return DomainImpact.NONE

    @staticmethod
    def determine_severity(frequency: int, impact: DomainImpact) -> Level:
        if frequency > HIGH_FREQUENCY or impact is DomainImpact.HIGH:
            return Level.HIGH
        if frequency >= MEDIUM_FREQUENCY:
            return Level.MEDIUM
        return Level.LOW

    @staticmethod
    def analyze_trends(patterns: list[ErrorPattern], observed_at: datetime) -> list[PatternTrend]:
        trends = []
        for pattern in patterns:
            if pattern.frequency > HIGH_FREQUENCY:
                trend = Trend.INCREASING
            elif pattern.frequency > MEDIUM_FREQUENCY:
                trend = Trend.STABLE
            else:
                trend = Trend.DECREASING
            trends.append(PatternTrend(
                pattern=pattern.name,
                occurrences=pattern.frequency,
                first_seen=observed_at,
                trend=trend,
            ))
        return trends

    def subsystem_health(self, diagnostics: list[Diagnostic]) -> SubsystemPatternHealth:
        health = SubsystemPatternHealth()
        for subsystem in self.subsystems:
            count = sum(1 for d in diagnostics if subsystem.matches(d.message, d.file))
            health.counts[subsystem.name] = count
            if count > subsystem.critical_threshold:
                health.critical_subsystems.append(subsystem.name)
                health.critical_issues.append(
                    f"{count} errors in the {subsystem.name} subsystem "
                    f"(threshold {subsystem.critical_threshold})"
                )
        return health

    @staticmethod
    def recommendations(
        patterns: list[ErrorPattern], health: SubsystemPatternHealth
    ) -> list[str]:
        recs: list[str] = []

        widespread = [
            p for p in patterns
            if p.frequency > HIGH_FREQUENCY and len(p.affected_files) > 1
        ]
        if widespread:
            recs.append(
                f"Address {len(widespread)} high-frequency error patterns affecting multiple files"
            )

        if health.critical_subsystems:
            recs.append(
                "Critical designated-subsystem issues detected - prioritize fixes in "
                + ", ".join(health.critical_subsystems)
            )

        imports = [p for p in patterns if p.category == DiagnosticCategory.IMPORT]
        if imports:
            recs.append(f"Resolve {len(imports)} import patterns to improve module resolution")

        security = [p for p in patterns if p.category == DiagnosticCategory.SECURITY]
        if security:
            recs.append(
                f"Review {len(security)} security-related patterns for type safety improvements"
            )

        return recs
