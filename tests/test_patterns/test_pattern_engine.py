"""Tests for the PatternRecognizer."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from diaglens.core.models import (
    DesignatedSubsystem,
    Diagnostic,
    DiagnosticCategory,
    DomainImpact,
    Level,
    Trend,
)
from diaglens.patterns.engine import PatternRecognizer

OBSERVED = datetime(2026, 3, 1, tzinfo=timezone.utc)

DISTINCT_MESSAGES = [
    "';' expected.",
    "Unexpected token.",
    "Declaration or statement expected.",
    "Object is possibly undefined.",
    "Cannot redeclare block-scoped variable.",
    "An import path cannot end with an extension.",
    "Unreachable code detected.",
]


def _diag(message: str, file: str, line: int = 1, code: int = 2322,
          category: DiagnosticCategory = DiagnosticCategory.TYPE) -> Diagnostic:
    return Diagnostic(code=code, message=message, file=file, line=line, column=1, category=category)


def _missing_module(n: int) -> Diagnostic:
    return _diag(
        f"Cannot find module './mod{n}'.", f"src/file{n}.ts",
        code=2307, category=DiagnosticCategory.IMPORT,
    )


class TestFindPatterns:
    def test_recurring_import_pattern(self):
        diagnostics = [_missing_module(n) for n in range(5)]
        diagnostics += [_diag(m, f"src/other{i}.ts") for i, m in enumerate(DISTINCT_MESSAGES)]
        assert len(diagnostics) == 12

        patterns = PatternRecognizer().find_patterns(diagnostics)

        assert len(patterns) == 1
        pattern = patterns[0]
        assert pattern.frequency == 5
        assert pattern.category == DiagnosticCategory.IMPORT
        assert pattern.severity == Level.MEDIUM
        assert pattern.name == "Import Issue"
        assert len(pattern.affected_files) == 5

    def test_singletons_never_become_patterns(self):
        diagnostics = [_diag(m, "src/a.ts", line=i) for i, m in enumerate(DISTINCT_MESSAGES)]

        assert PatternRecognizer().find_patterns(diagnostics) == []

    def test_pair_is_low_severity(self):
        diagnostics = [_missing_module(1), _missing_module(2)]

        assert PatternRecognizer().find_patterns(diagnostics)[0].severity == Level.LOW

    def test_high_frequency_is_high_severity(self):
        diagnostics = [_diag("Object is possibly 'null'.", "src/a.ts", line=i) for i in range(11)]

        pattern = PatternRecognizer().find_patterns(diagnostics)[0]

        assert pattern.frequency == 11
        assert pattern.severity == Level.HIGH

    def test_sorted_by_frequency(self):
        diagnostics = [_missing_module(n) for n in range(2)]
        diagnostics += [_diag("Object is possibly 'null'.", "src/a.ts", line=i) for i in range(4)]

        patterns = PatternRecognizer().find_patterns(diagnostics)

        assert [p.frequency for p in patterns] == [4, 2]

    def test_pattern_matches_its_members(self):
        pattern = PatternRecognizer().find_patterns([_missing_module(1), _missing_module(2)])[0]

        assert pattern.matches("Cannot find module './elsewhere'.")
        assert not pattern.matches("Cannot find name 'x'.")

    def test_id_is_slug_of_normalized_message(self):
        pattern = PatternRecognizer().find_patterns([_missing_module(1), _missing_module(2)])[0]

        assert pattern.id == "cannot_find_module__string__"

    def test_messages_sharing_a_long_prefix_get_distinct_ids(self):
        short = "Property 'x' does not exist on type 'Foo'."
        longer = short + " Did you mean 'y'?"
        diagnostics = [
            _diag(short, "src/a.ts"), _diag(short, "src/b.ts"),
            _diag(longer, "src/c.ts"), _diag(longer, "src/d.ts"),
        ]

        patterns = PatternRecognizer().find_patterns(diagnostics)

        ids = [p.id for p in patterns]
        assert len(set(ids)) == 2
        assert ids[1] == ids[0] + "_2"


class TestSubsystemPatterns:
    def setup_method(self):
        self.billing = DesignatedSubsystem(name="Billing", keywords=["Invoice"], globs=["src/billing/**"])

    def test_keyword_in_message_makes_domain_pattern(self):
        diagnostics = [
            _diag("Property 'x' does not exist on type 'Invoice'.", f"src/ui/view{i}.ts")
            for i in range(2)
        ]

        patterns = PatternRecognizer([self.billing]).find_patterns(diagnostics)
        grouped = [p for p in patterns if p.id != "designated_subsystem_errors"]

        assert grouped[0].category == DiagnosticCategory.DOMAIN
        assert grouped[0].name == "Designated Subsystem Issue"

    def test_aggregate_pattern(self):
        diagnostics = [_diag(m, f"src/billing/f{i}.ts") for i, m in enumerate(DISTINCT_MESSAGES)]

        patterns = PatternRecognizer([self.billing]).find_patterns(diagnostics)

        assert len(patterns) == 1
        aggregate = patterns[0]
        assert aggregate.id == "designated_subsystem_errors"
        assert aggregate.frequency == 7
        assert aggregate.severity == Level.HIGH
        assert aggregate.domain_impact == DomainImpact.HIGH
        assert aggregate.matches("Cannot assign to 'Invoice'")

    def test_no_aggregate_without_matches(self):
        diagnostics = [_missing_module(1)]

        assert PatternRecognizer([self.billing]).find_patterns(diagnostics) == []

    def test_domain_impact_from_affected_files(self):
        diagnostics = [_diag("Object is possibly 'null'.", f"src/billing/f{i}.ts") for i in range(4)]

        patterns = PatternRecognizer([self.billing]).find_patterns(diagnostics)
        grouped = next(p for p in patterns if p.id != "designated_subsystem_errors")

        assert grouped.domain_impact == DomainImpact.HIGH
        assert grouped.severity == Level.HIGH
        assert grouped.affected_files == ["f0.ts", "f1.ts", "f2.ts", "f3.ts"]

    def test_two_subsystem_files_is_medium_impact(self):
        diagnostics = [
            _diag("Object is possibly 'null'.", "src/billing/a.ts"),
            _diag("Object is possibly 'null'.", "src/billing/b.ts"),
            _diag("Object is possibly 'null'.", "src/search/c.ts"),
        ]

        patterns = PatternRecognizer([self.billing]).find_patterns(diagnostics)
        grouped = next(p for p in patterns if p.id != "designated_subsystem_errors")

        assert grouped.domain_impact == DomainImpact.MEDIUM
        assert grouped.severity == Level.LOW


class TestAnalyze:
    def test_trends(self):
        diagnostics = [_diag("Object is possibly 'null'.", "src/a.ts", line=i) for i in range(12)]
        diagnostics += [_missing_module(n) for n in range(2)]

        report = PatternRecognizer(observed_at=OBSERVED).analyze(diagnostics)
        trends = {t.occurrences: t for t in report.pattern_trends}

        assert trends[12].trend == Trend.INCREASING
        assert trends[2].trend == Trend.DECREASING
        assert trends[12].first_seen == OBSERVED

    def test_subsystem_critical_issue(self):
        billing = DesignatedSubsystem(name="Billing", critical_threshold=2)
        diagnostics = [_diag(m, f"src/Billing{i}.ts") for i, m in enumerate(DISTINCT_MESSAGES[:3])]

        report = PatternRecognizer([billing]).analyze(diagnostics)

        assert report.subsystem_pattern_health.counts == {"Billing": 3}
        assert len(report.subsystem_pattern_health.critical_issues) == 1
        assert any("Billing" in r for r in report.recommendations)
        assert report.subsystem_pattern_health.critical_subsystems == ["Billing"]

    def test_recommendation_names_only_flagged_subsystems(self):
        billing = DesignatedSubsystem(name="Billing", critical_threshold=2)
        search = DesignatedSubsystem(name="Search", critical_threshold=5)
        diagnostics = [_diag(m, f"src/Billing{i}.ts") for i, m in enumerate(DISTINCT_MESSAGES[:3])]
        diagnostics.append(_diag("Unexpected token.", "src/Search.ts"))

        report = PatternRecognizer([billing, search]).analyze(diagnostics)

        critical = [r for r in report.recommendations if "prioritize fixes" in r]
        assert critical == [
            "Critical designated-subsystem issues detected - prioritize fixes in Billing"
        ]

    def test_widespread_pattern_recommendation(self):
        diagnostics = [_diag("Object is possibly 'null'.", f"src/f{i}.ts") for i in range(11)]

        report = PatternRecognizer().analyze(diagnostics)

        assert any("high-frequency" in r for r in report.recommendations)

    def test_import_recommendation(self):
        report = PatternRecognizer().analyze([_missing_module(1), _missing_module(2)])

        assert any("import patterns" in r for r in report.recommendations)

    def test_empty_input(self):
        report = PatternRecognizer().analyze([])

        assert report.patterns == []
        assert report.recommendations == []

    def test_deterministic_export(self, tmp_path: Path):
        diagnostics = [_missing_module(n) for n in range(3)]
        first = PatternRecognizer(observed_at=OBSERVED).analyze(diagnostics)
        second = PatternRecognizer(observed_at=OBSERVED).analyze(list(diagnostics))

        a = first.export(tmp_path / "a.json").read_text()
        b = second.export(tmp_path / "b.json").read_text()

        assert a == b
        assert json.loads(a)["metadata"]["engineName"] == "PatternRecognitionEngine"
