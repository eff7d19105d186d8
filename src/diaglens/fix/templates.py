"""Table-driven suggestion templates, one handler per diagnostic category."""

from __future__ import annotations

from dataclasses import dataclass, field

from diaglens.core.config import CompilerProfile
from diaglens.core.models import (
    Complexity,
    DesignatedSubsystem,
    Diagnostic,
    DiagnosticCategory,
    Level,
)
from diaglens.core.text import contains_any_marker


@dataclass
class SuggestionTemplate:
    """Category-specific portion of a :class:`FixSuggestion`."""

    title: str
    description: str
    priority: Level
    complexity: Complexity
    steps: list[str] = field(default_factory=list)
    subsystem: str | None = None


class SuggestionTemplates:
    """Picks the remediation template for a diagnostic."""

    def __init__(
        self,
        profile: CompilerProfile | None = None,
        subsystems: list[DesignatedSubsystem] | None = None,
    ):
        self.profile = profile or CompilerProfile()
        self.subsystems = subsystems or []

    def template_for(self, diagnostic: Diagnostic) -> SuggestionTemplate:
        handler = self._get_handler(diagnostic.category)
        return handler(diagnostic)

    def _get_handler(self, category: DiagnosticCategory):
        handlers = {
            DiagnosticCategory.IMPORT: self._import_template,
            DiagnosticCategory.TYPE: self._type_template,
            DiagnosticCategory.SYNTAX: self._syntax_template,
            DiagnosticCategory.DOMAIN: self._domain_template,
            DiagnosticCategory.SECURITY: self._security_template,
        }
        return handlers.get(category, self._generic_template)

    def implicated_subsystem(self, diagnostic: Diagnostic) -> DesignatedSubsystem | None:
        """First configured subsystem matching the diagnostic, in priority order."""
        for subsystem in self.subsystems:
            if subsystem.matches(diagnostic.message, diagnostic.file):
                return subsystem
        return None

    def _import_template(self, diagnostic: Diagnostic) -> SuggestionTemplate:
        if "Cannot find module" in diagnostic.message:
            return SuggestionTemplate(
                title="Fix Missing Module Import",
                description="Module cannot be found - it may need installation or a path correction",
                priority=Level.MEDIUM,
                complexity=Complexity.SIMPLE,
                steps=[
                    "Verify the module is declared in package.json",
                    "Check the import path spelling and case sensitivity",
                    "Ensure the module is installed",
                    "Add type definitions for the module if needed",
                ],
            )
        if "Cannot find name" in diagnostic.message:
            return SuggestionTemplate(
                title="Fix Missing Name Import",
                description="Named import or variable not found",
                priority=Level.MEDIUM,
                complexity=Complexity.SIMPLE,
                steps=[
                    "Check that the name is exported from its module",
                    "Verify the import statement syntax",
                    "Use a default import if the module has no named export",
                    "Check the imported name for typos",
                ],
            )
        return SuggestionTemplate(
            title="Fix Import Issue",
            description="Import problem requiring investigation",
            priority=Level.MEDIUM,
            complexity=Complexity.MODERATE,
            steps=["Review the import statement and module availability"],
        )

    def _type_template(self, diagnostic: Diagnostic) -> SuggestionTemplate:
        if contains_any_marker(diagnostic.message, self.profile.permissive_markers):
            return SuggestionTemplate(
                title="Replace Permissive Type Usage",
                description="Improve type safety by replacing permissive types with specific ones",
                priority=Level.MEDIUM,
                complexity=Complexity.MODERATE,
                steps=[
                    "Identify the expected type for this value",
                    "Create a specific interface or type definition",
                    "Replace the permissive type with the specific type",
                    "Add explicit type annotations",
                ],
            )
        if "not assignable" in diagnostic.message:
            return SuggestionTemplate(
                title="Fix Type Assignment Error",
                description="Types are not compatible and need alignment",
                priority=Level.MEDIUM,
                complexity=Complexity.MODERATE,
                steps=[
                    "Review the source and target types",
                    "Add a type assertion only where it is provably safe",
                    "Adjust the type definitions if needed",
                    "Consider a union type for values with several shapes",
                ],
            )
        return SuggestionTemplate(
            title="Resolve Type Error",
            description="Type issue requiring analysis of definitions and usage",
            priority=Level.MEDIUM,
            complexity=Complexity.MODERATE,
            steps=["Analyze the type definitions and their usage context"],
        )

    def _syntax_template(self, diagnostic: Diagnostic) -> SuggestionTemplate:
        return SuggestionTemplate(
            title="Fix Syntax Error",
            description="Syntax issue requiring correction",
            priority=Level.HIGH,
            complexity=Complexity.SIMPLE,
            steps=[
                "Review the syntax error message",
                "Check for missing semicolons, brackets or quotes",
                "Recompile to confirm the error is gone",
            ],
        )

    def _domain_template(self, diagnostic: Diagnostic) -> SuggestionTemplate:
        subsystem = self.implicated_subsystem(diagnostic)
        name = subsystem.name if subsystem else "Designated Subsystem"
        steps = [
            f"Review the {name} type definitions",
            f"Ensure the {name} modules are imported correctly",
            f"Validate data types flowing through {name}",
            f"Test {name} functionality after the fix",
        ]
        if subsystem:
            steps.extend(subsystem.validation_steps)
        return SuggestionTemplate(
            title=f"Fix {name} Type Issue",
            description=f"Type error affecting the {name} subsystem",
            priority=Level.HIGH,
            complexity=Complexity.MODERATE,
            steps=steps,
            subsystem=subsystem.name if subsystem else None,
        )

    def _security_template(self, diagnostic: Diagnostic) -> SuggestionTemplate:
        return SuggestionTemplate(
            title="Enhance Type Security",
            description="Security-related type issue requiring attention",
            priority=Level.HIGH,
            complexity=Complexity.MODERATE,
            steps=[
                "Replace permissive and dynamic typing with specific types",
                "Add runtime validation for external inputs",
                "Review the surrounding code for injection risks",
                "Ensure input sanitization where needed",
            ],
        )

    def _generic_template(self, diagnostic: Diagnostic) -> SuggestionTemplate:
        return SuggestionTemplate(
            title="Review Compiler Diagnostic",
            description=f"Unclassified diagnostic TS{diagnostic.code}",
            priority=Level.LOW,
            complexity=Complexity.MODERATE,
            steps=["Review the diagnostic message and the code at the reported position"],
        )
