"""Shared data models used across diaglens stages."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import PurePosixPath
from typing import Any

from diaglens.core.text import normalize_message


class Severity(enum.Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticCategory(enum.Enum):
    SYNTAX = "syntax"
    TYPE = "type"
    IMPORT = "import"
    SECURITY = "security"
    DOMAIN = "domain"
    OTHER = "other"


class Level(enum.Enum):
    """Three-step scale shared by pattern severity, fix priority and risk."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {"low": 1, "medium": 2, "high": 3}[self.value]


class DomainImpact(enum.Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Complexity(enum.Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class ImpactLevel(enum.Enum):
    NONE = "none"
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"

    @property
    def rank(self) -> int:
        return ["none", "minimal", "moderate", "significant"].index(self.value)


class Trend(enum.Enum):
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class QualityTrend(enum.Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class SubsystemTier(enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


def _posix(path: str) -> str:
    return path.replace("\\", "/")


@dataclass(frozen=True)
class Diagnostic:
    """A single compiler-reported issue, normalized by the collector."""

    code: int
    message: str
    file: str
    line: int
    column: int
    severity: Severity = Severity.ERROR
    category: DiagnosticCategory = DiagnosticCategory.OTHER

    @property
    def key(self) -> tuple[int, str, int, int]:
        return (self.code, self.file, self.line, self.column)

    @property
    def basename(self) -> str:
        return PurePosixPath(_posix(self.file)).name

    @property
    def diagnostic_id(self) -> str:
        return f"{self.code}_{_posix(self.file)}_{self.line}_{self.column}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "severity": self.severity.value,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Diagnostic:
        return cls(
            code=int(data["code"]),
            message=data["message"],
            file=data["file"],
            line=int(data["line"]),
            column=int(data["column"]),
            severity=Severity(data.get("severity", "error")),
            category=DiagnosticCategory(data.get("category", "other")),
        )


@dataclass
class DesignatedSubsystem:
    """A named area of the codebase scored and remediated with higher priority.

    ``keywords`` are case-sensitive substrings looked up in diagnostic
    messages and file paths. ``globs`` select the subsystem's files relative
    to the project root. When omitted, both default to the subsystem name.
    """

    name: str
    keywords: list[str] = field(default_factory=list)
    globs: list[str] = field(default_factory=list)
    tier: SubsystemTier = SubsystemTier.SECONDARY
    health_threshold: float = 90.0
    critical_threshold: int = 5
    recommendation: str = ""
    validation_steps: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.keywords:
            self.keywords = [self.name]
        if not self.globs:
            self.globs = [f"**/*{self.name}*"]
        if isinstance(self.tier, str):
            self.tier = SubsystemTier(self.tier)

    def matches_text(self, text: str) -> bool:
        return any(kw in text for kw in self.keywords)

    def matches_path(self, path: str) -> bool:
        posix = _posix(path)
        for pattern in self.globs:
            if fnmatch(posix, pattern):
                return True
            if pattern.startswith("**/") and fnmatch(posix, pattern[3:]):
                return True
        return False

    def matches(self, message: str, file: str) -> bool:
        return (
            self.matches_text(message)
            or self.matches_text(file)
            or self.matches_path(file)
        )

    @property
    def attribute_name(self) -> str:
        """CamelCase form used for ``affects<Subsystem>`` report keys."""
        parts = re.split(r"[^A-Za-z0-9]+", self.name)
        return "".join(p[:1].upper() + p[1:] for p in parts if p)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "keywords": list(self.keywords),
            "globs": list(self.globs),
            "tier": self.tier.value,
            "health_threshold": self.health_threshold,
            "critical_threshold": self.critical_threshold,
        }


@dataclass
class ErrorPattern:
    """A recurring normalized diagnostic message."""

    id: str
    name: str
    description: str
    matcher: str
    category: DiagnosticCategory
    frequency: int
    severity: Level
    affected_files: list[str] = field(default_factory=list)
    suggested_fix: str = ""
    domain_impact: DomainImpact = DomainImpact.NONE
    # keyword patterns match by substring instead of normalized message
    keywords: list[str] = field(default_factory=list)

    def matches(self, message: str) -> bool:
        if self.keywords:
            return any(kw in message for kw in self.keywords)
        return normalize_message(message) == self.matcher

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "matcher": self.matcher,
            "category": self.category.value,
            "frequency": self.frequency,
            "severity": self.severity.value,
            "affected_files": list(self.affected_files),
            "suggested_fix": self.suggested_fix,
            "domain_impact": self.domain_impact.value,
        }


@dataclass
class SafetyAnalysis:
    risk_level: Level
    potential_issues: list[str] = field(default_factory=list)
    dependency_impact: list[str] = field(default_factory=list)
    rollback_plan: list[str] = field(default_factory=list)
    validation_steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_level": self.risk_level.value,
            "potential_issues": list(self.potential_issues),
            "dependency_impact": list(self.dependency_impact),
            "rollback_plan": list(self.rollback_plan),
            "validation_steps": list(self.validation_steps),
        }


@dataclass
class DomainImpactAnalysis:
    affects: dict[str, bool] = field(default_factory=dict)
    impact_level: ImpactLevel = ImpactLevel.NONE
    mitigation_steps: list[str] = field(default_factory=list)
    # subsystem name -> camelCase attribute, for the affects<Subsystem> keys
    attribute_names: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"affects": dict(self.affects)}
        for name, affected in self.affects.items():
            attr = self.attribute_names.get(name, name)
            data[f"affects{attr}"] = affected
        data["impact_level"] = self.impact_level.value
        data["mitigation_steps"] = list(self.mitigation_steps)
        return data


@dataclass
class FixSuggestion:
    """A proposed, human-reviewable remediation for one diagnostic."""

    id: str
    diagnostic_id: str
    title: str
    description: str
    category: DiagnosticCategory
    priority: Level
    complexity: Complexity
    steps: list[str]
    safety_analysis: SafetyAnalysis
    domain_impact: DomainImpactAnalysis
    subsystem: str | None = None

    @property
    def manual_approval_required(self) -> bool:
        # Suggestions are never applied by diaglens.
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "diagnostic_id": self.diagnostic_id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "complexity": self.complexity.value,
            "steps": list(self.steps),
            "safety_analysis": self.safety_analysis.to_dict(),
            "domain_impact": self.domain_impact.to_dict(),
            "subsystem": self.subsystem,
            "manual_approval_required": self.manual_approval_required,
        }


@dataclass
class BatchFixPlan:
    """An ordered group of related suggestions with aggregate risk."""

    plan_id: str
    title: str
    description: str
    fixes: list[FixSuggestion]
    execution_order: list[str]
    estimated_time_minutes: int
    overall_risk: Level
    subsystem_protection: list[str] = field(default_factory=list)
    validation_checkpoints: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "title": self.title,
            "description": self.description,
            "fixes": [f.id for f in self.fixes],
            "execution_order": list(self.execution_order),
            "estimated_time_minutes": self.estimated_time_minutes,
            "overall_risk": self.overall_risk.value,
            "subsystem_protection": list(self.subsystem_protection),
            "validation_checkpoints": list(self.validation_checkpoints),
        }


@dataclass
class CodeHealth:
    type_safety: float
    error_density: float
    complexity_score: float
    maintainability_index: float
    # files the complexity estimate could not read
    unreadable_files: list[str] = field(default_factory=list)

    @property
    def composite(self) -> float:
        return (self.type_safety + self.maintainability_index) / 2


@dataclass
class DomainHealth:
    subsystems: dict[str, float] = field(default_factory=dict)
    aggregate: float = 100.0
    # subsystems with no matching files, scored neutral instead of penalized
    unmatched: list[str] = field(default_factory=list)


@dataclass
class SecurityAssessment:
    type_security_score: float
    vulnerability_count: int
    security_grade: str
    critical_issues: list[str] = field(default_factory=list)


@dataclass
class OverallScore:
    score: float
    grade: str
    trend: QualityTrend = QualityTrend.STABLE


@dataclass
class QualityRecommendation:
    priority: Level
    category: str  # "code", "domain", "security"
    description: str
    impact: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority.value,
            "category": self.category,
            "description": self.description,
            "impact": self.impact,
        }


@dataclass
class QualityMetrics:
    """Weighted quality rollup for a single analysis run."""

    code_health: CodeHealth
    domain_health: DomainHealth
    security_assessment: SecurityAssessment
    overall: OverallScore
    recommendations: list[QualityRecommendation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": {
                "score": self.overall.score,
                "grade": self.overall.grade,
                "trend": self.overall.trend.value,
            },
            "code_health": {
                "type_safety": self.code_health.type_safety,
                "error_density": self.code_health.error_density,
                "complexity_score": self.code_health.complexity_score,
                "maintainability_index": self.code_health.maintainability_index,
                "unreadable_files": list(self.code_health.unreadable_files),
            },
            "domain_health": {
                "subsystems": dict(self.domain_health.subsystems),
                "aggregate": self.domain_health.aggregate,
                "unmatched_subsystems": list(self.domain_health.unmatched),
            },
            "security_assessment": {
                "type_security_score": self.security_assessment.type_security_score,
                "vulnerability_count": self.security_assessment.vulnerability_count,
                "security_grade": self.security_assessment.security_grade,
                "critical_issues": list(self.security_assessment.critical_issues),
            },
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass
class ComponentHealth:
    """Advisory health score for one subsystem file."""

    name: str
    path: str
    health_score: int
    issues: list[str] = field(default_factory=list)
    domain_alignment: int = 100
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "health_score": self.health_score,
            "issues": list(self.issues),
            "domain_alignment": self.domain_alignment,
            "recommendations": list(self.recommendations),
        }
