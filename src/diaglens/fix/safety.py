"""Risk and subsystem-impact assessment for suggested fixes."""

from __future__ import annotations

from diaglens.core.config import CompilerProfile
from diaglens.core.models import (
    DesignatedSubsystem,
    Diagnostic,
    DiagnosticCategory,
    DomainImpactAnalysis,
    ImpactLevel,
    Level,
    SafetyAnalysis,
    SubsystemTier,
)

_HIGH_RISK_CATEGORIES = (DiagnosticCategory.DOMAIN, DiagnosticCategory.SECURITY)

_TIER_IMPACT = {
    SubsystemTier.PRIMARY: ImpactLevel.SIGNIFICANT,
    SubsystemTier.SECONDARY: ImpactLevel.MODERATE,
}


class SafetyAnalyzer:
    def __init__(
        self,
        profile: CompilerProfile | None = None,
        subsystems: list[DesignatedSubsystem] | None = None,
    ):
        self.profile = profile or CompilerProfile()
        self.subsystems = subsystems or []

    def is_infrastructure_path(self, file: str) -> bool:
        return any(marker in file for marker in self.profile.infrastructure_markers)

    def risk_level(self, diagnostic: Diagnostic) -> Level:
        if diagnostic.category in _HIGH_RISK_CATEGORIES:
            return Level.HIGH
        if self.is_infrastructure_path(diagnostic.file):
            return Level.MEDIUM
        return Level.LOW

    def analyze_safety(self, diagnostic: Diagnostic) -> SafetyAnalysis:
        potential_issues: list[str] = []
        dependency_impact: list[str] = []

        if diagnostic.category == DiagnosticCategory.DOMAIN:
            potential_issues.append("May affect designated subsystem functionality")
            dependency_impact.append("Could impact modules that depend on the subsystem")

        if self.is_infrastructure_path(diagnostic.file):
            potential_issues.append(
                "Server or authentication code changes require careful testing"
            )
            dependency_impact.append("May affect authentication flow or server behavior")

        return SafetyAnalysis(
            risk_level=self.risk_level(diagnostic),
            potential_issues=potential_issues,
            dependency_impact=dependency_impact,
            rollback_plan=[
                "Commit or back up the current file before changing it",
                "Record the original diagnostic output",
                "Revert the change if new diagnostics appear",
            ],
            validation_steps=[
                "Re-run the compiler and compare diagnostic counts",
                "Run the test suite for the affected module",
                "Check dependent modules for breaking changes",
            ],
        )

    def analyze_domain_impact(self, diagnostic: Diagnostic) -> DomainImpactAnalysis:
        """Map the diagnostic onto the designated subsystems it touches.

        The impact level is the highest tier among matching subsystems. A
        domain-category diagnostic that matches no subsystem is minimal.
        """
        affects: dict[str, bool] = {}
        level = ImpactLevel.NONE
        for subsystem in self.subsystems:
            hit = subsystem.matches(diagnostic.message, diagnostic.file)
            affects[subsystem.name] = hit
            if hit:
                tier_level = _TIER_IMPACT[subsystem.tier]
                if tier_level.rank > level.rank:
                    level = tier_level

        if level is ImpactLevel.NONE and diagnostic.category == DiagnosticCategory.DOMAIN:
            level = ImpactLevel.MINIMAL

        mitigation: list[str] = []
        if level is not ImpactLevel.NONE:
            mitigation = [
                "Re-test the affected subsystem features after the fix",
                "Verify data stays consistent across features that share these types",
                "Validate user-facing behavior of the affected features",
            ]

        return DomainImpactAnalysis(
            affects=affects,
            impact_level=level,
            mitigation_steps=mitigation,
            attribute_names={s.name: s.attribute_name for s in self.subsystems},
        )
