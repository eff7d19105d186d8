"""Ordered classification rules: the first matching rule assigns the category."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from diaglens.core.config import CompilerProfile
from diaglens.core.models import DesignatedSubsystem, DiagnosticCategory, Severity
from diaglens.core.text import contains_any_marker

MODULE_MESSAGES = ("Cannot find module", "Cannot find name")


@dataclass(frozen=True)
class RuleContext:
    code: int
    message: str
    file: str
    profile: CompilerProfile = field(default_factory=CompilerProfile)
    subsystems: Sequence[DesignatedSubsystem] = ()


@dataclass(frozen=True)
class ClassificationRule:
    label: DiagnosticCategory
    predicate: Callable[[RuleContext], bool]
    description: str = ""

    def applies(self, ctx: RuleContext) -> bool:
        return self.predicate(ctx)


def _is_domain(ctx: RuleContext) -> bool:
    return any(s.matches(ctx.message, ctx.file) for s in ctx.subsystems)


def _is_import(ctx: RuleContext) -> bool:
    if any(m in ctx.message for m in MODULE_MESSAGES):
        return True
    return ctx.profile.is_module_resolution_code(ctx.code)


def _is_type(ctx: RuleContext) -> bool:
    return ctx.profile.is_type_code(ctx.code)


def _is_syntax(ctx: RuleContext) -> bool:
    return ctx.profile.is_parse_code(ctx.code)


def _is_security(ctx: RuleContext) -> bool:
    return contains_any_marker(ctx.message, ctx.profile.permissive_markers) or (
        contains_any_marker(ctx.message, ctx.profile.dynamic_eval_markers)
    )


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(DiagnosticCategory.DOMAIN, _is_domain, "designated subsystem"),
    ClassificationRule(DiagnosticCategory.IMPORT, _is_import, "module resolution"),
    ClassificationRule(DiagnosticCategory.TYPE, _is_type, "type-checking code range"),
    ClassificationRule(DiagnosticCategory.SYNTAX, _is_syntax, "parse-error code range"),
    ClassificationRule(DiagnosticCategory.SECURITY, _is_security, "permissive or dynamic typing"),
)


def classify(
    ctx: RuleContext,
    rules: Sequence[ClassificationRule] = CLASSIFICATION_RULES,
) -> DiagnosticCategory:
    for rule in rules:
        if rule.applies(ctx):
            return rule.label
    return DiagnosticCategory.OTHER


SEVERITY_MAP = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "message": Severity.INFO,
    "suggestion": Severity.INFO,
    "info": Severity.INFO,
}


def map_severity(value: str) -> Severity:
    return SEVERITY_MAP.get(value.lower(), Severity.ERROR)
