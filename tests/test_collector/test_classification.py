"""Tests for the ordered classification rules."""

from __future__ import annotations

from diaglens.collector.rules import (
    CLASSIFICATION_RULES,
    ClassificationRule,
    RuleContext,
    classify,
    map_severity,
)
from diaglens.core.models import DesignatedSubsystem, DiagnosticCategory, Severity

BILLING = DesignatedSubsystem(name="Billing", keywords=["Invoice"], globs=["src/billing/**"])


def _ctx(code: int, message: str, file: str = "src/app.ts", subsystems=()) -> RuleContext:
    return RuleContext(code=code, message=message, file=file, subsystems=subsystems)


class TestClassify:
    def test_module_not_found_is_import(self):
        assert classify(_ctx(2307, "Cannot find module './x'.")) == DiagnosticCategory.IMPORT

    def test_module_resolution_code_is_import(self):
        assert classify(_ctx(2792, "Some resolution message.")) == DiagnosticCategory.IMPORT

    def test_type_range(self):
        assert classify(_ctx(2322, "Type 'a' is not assignable to type 'b'.")) == DiagnosticCategory.TYPE

    def test_parse_range(self):
        assert classify(_ctx(1005, "';' expected.")) == DiagnosticCategory.SYNTAX

    def test_permissive_marker_outside_ranges_is_security(self):
        msg = "Parameter 'x' implicitly has an 'any' type."

        assert classify(_ctx(7006, msg)) == DiagnosticCategory.SECURITY

    def test_dynamic_eval_is_security(self):
        assert classify(_ctx(9999, "Use of eval detected")) == DiagnosticCategory.SECURITY

    def test_unmatched_is_other(self):
        assert classify(_ctx(6133, "'x' is declared but its value is never read.")) == DiagnosticCategory.OTHER

    def test_domain_wins_over_import(self):
        ctx = _ctx(2307, "Cannot find module './Invoice'.", subsystems=(BILLING,))

        assert classify(ctx) == DiagnosticCategory.DOMAIN

    def test_domain_by_file_glob(self):
        ctx = _ctx(2322, "Type mismatch", file="src/billing/tax.ts", subsystems=(BILLING,))

        assert classify(ctx) == DiagnosticCategory.DOMAIN

    def test_import_wins_over_type(self):
        # 2304 sits in the type range and the module-resolution range
        assert classify(_ctx(2304, "Cannot find name 'foo'.")) == DiagnosticCategory.IMPORT

    def test_custom_rule_table(self):
        rules = (ClassificationRule(DiagnosticCategory.SYNTAX, lambda ctx: True),)

        assert classify(_ctx(2322, "m"), rules) == DiagnosticCategory.SYNTAX

    def test_default_rule_order(self):
        assert [r.label for r in CLASSIFICATION_RULES] == [
            DiagnosticCategory.DOMAIN,
            DiagnosticCategory.IMPORT,
            DiagnosticCategory.TYPE,
            DiagnosticCategory.SYNTAX,
            DiagnosticCategory.SECURITY,
        ]


class TestSeverity:
    def test_known_values(self):
        assert map_severity("error") is Severity.ERROR
        assert map_severity("warning") is Severity.WARNING
        assert map_severity("suggestion") is Severity.INFO

    def test_unknown_defaults_to_error(self):
        assert map_severity("fatal") is Severity.ERROR
