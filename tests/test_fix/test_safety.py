"""Tests for fix risk and subsystem impact analysis."""

from __future__ import annotations

from diaglens.core.config import CompilerProfile
from diaglens.core.models import (
    DesignatedSubsystem,
    Diagnostic,
    DiagnosticCategory,
    ImpactLevel,
    Level,
    SubsystemTier,
)
from diaglens.fix.safety import SafetyAnalyzer

BILLING = DesignatedSubsystem(name="Billing", keywords=["Invoice"], tier=SubsystemTier.PRIMARY)
SEARCH = DesignatedSubsystem(name="Search", keywords=["Query"], tier=SubsystemTier.SECONDARY)


def _diag(message: str = "m", file: str = "src/app.ts",
          category: DiagnosticCategory = DiagnosticCategory.TYPE) -> Diagnostic:
    return Diagnostic(code=2322, message=message, file=file, line=1, column=1, category=category)


class TestRiskLevel:
    def test_domain_and_security_are_high(self):
        analyzer = SafetyAnalyzer()

        assert analyzer.risk_level(_diag(category=DiagnosticCategory.DOMAIN)) == Level.HIGH
        assert analyzer.risk_level(_diag(category=DiagnosticCategory.SECURITY)) == Level.HIGH

    def test_infrastructure_path_is_medium(self):
        analyzer = SafetyAnalyzer()

        assert analyzer.risk_level(_diag(file="src/server/routes.ts")) == Level.MEDIUM
        assert analyzer.risk_level(_diag(file="src/authService.ts")) == Level.MEDIUM

    def test_plain_path_is_low(self):
        assert SafetyAnalyzer().risk_level(_diag()) == Level.LOW

    def test_custom_infrastructure_markers(self):
        analyzer = SafetyAnalyzer(CompilerProfile(infrastructure_markers=["gateway"]))

        assert analyzer.risk_level(_diag(file="src/gateway/index.ts")) == Level.MEDIUM
        assert analyzer.risk_level(_diag(file="src/server/index.ts")) == Level.LOW


class TestSafetyAnalysis:
    def test_domain_warns_about_subsystem(self):
        analysis = SafetyAnalyzer().analyze_safety(_diag(category=DiagnosticCategory.DOMAIN))

        assert any("subsystem" in issue for issue in analysis.potential_issues)

    def test_infra_warns_about_auth(self):
        analysis = SafetyAnalyzer().analyze_safety(_diag(file="src/auth/login.ts"))

        assert any("authentication" in issue for issue in analysis.potential_issues)

    def test_rollback_and_validation_always_present(self):
        analysis = SafetyAnalyzer().analyze_safety(_diag())

        assert analysis.potential_issues == []
        assert analysis.rollback_plan
        assert analysis.validation_steps


class TestDomainImpact:
    def test_primary_is_significant(self):
        impact = SafetyAnalyzer(subsystems=[BILLING, SEARCH]).analyze_domain_impact(
            _diag("Type 'Invoice' is missing")
        )

        assert impact.affects == {"Billing": True, "Search": False}
        assert impact.impact_level == ImpactLevel.SIGNIFICANT
        assert len(impact.mitigation_steps) >= 3

    def test_secondary_is_moderate(self):
        impact = SafetyAnalyzer(subsystems=[BILLING, SEARCH]).analyze_domain_impact(
            _diag("Type 'Query' is missing")
        )

        assert impact.impact_level == ImpactLevel.MODERATE

    def test_max_over_matches(self):
        impact = SafetyAnalyzer(subsystems=[SEARCH, BILLING]).analyze_domain_impact(
            _diag("Query returned Invoice")
        )

        assert impact.impact_level == ImpactLevel.SIGNIFICANT

    def test_domain_without_match_is_minimal(self):
        impact = SafetyAnalyzer(subsystems=[BILLING]).analyze_domain_impact(
            _diag(category=DiagnosticCategory.DOMAIN)
        )

        assert impact.impact_level == ImpactLevel.MINIMAL
        assert len(impact.mitigation_steps) >= 3

    def test_no_match_is_none(self):
        impact = SafetyAnalyzer(subsystems=[BILLING]).analyze_domain_impact(_diag())

        assert impact.impact_level == ImpactLevel.NONE
        assert impact.mitigation_steps == []

    def test_impact_is_independent_of_risk(self):
        analyzer = SafetyAnalyzer(subsystems=[BILLING])
        diagnostic = _diag("Type 'Invoice' is missing", category=DiagnosticCategory.TYPE)

        assert analyzer.risk_level(diagnostic) == Level.LOW
        assert analyzer.analyze_domain_impact(diagnostic).impact_level == ImpactLevel.SIGNIFICANT
