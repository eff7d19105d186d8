"""Batch fix plans for clusters of same-category suggestions."""

from __future__ import annotations

from diaglens.core.models import (
    BatchFixPlan,
    DesignatedSubsystem,
    DiagnosticCategory,
    FixSuggestion,
    Level,
    SubsystemTier,
)

MIN_BATCH_SIZE = 3
MINUTES_PER_FIX = 10
MINUTES_PER_DOMAIN_FIX = 15
DOMAIN_PLAN_ID = "batch_domain_subsystems"


def batch_risk(fixes: list[FixSuggestion]) -> Level:
    """High when over 30% of fixes are high risk, medium when over half are medium."""
    if not fixes:
        return Level.LOW
    high = sum(1 for f in fixes if f.safety_analysis.risk_level is Level.HIGH)
    if high > len(fixes) * 0.3:
        return Level.HIGH
    medium = sum(1 for f in fixes if f.safety_analysis.risk_level is Level.MEDIUM)
    if medium > len(fixes) * 0.5:
        return Level.MEDIUM
    return Level.LOW


def group_by_category(
    suggestions: list[FixSuggestion],
) -> dict[DiagnosticCategory, list[FixSuggestion]]:
    groups: dict[DiagnosticCategory, list[FixSuggestion]] = {}
    for suggestion in suggestions:
        groups.setdefault(suggestion.category, []).append(suggestion)
    return groups


class BatchPlanner:
    def __init__(self, subsystems: list[DesignatedSubsystem] | None = None):
        self.subsystems = subsystems or []

    def plan(self, suggestions: list[FixSuggestion]) -> list[BatchFixPlan]:
        """Build plans from suggestions given in diagnostic order."""
        plans = [
            self.category_plan(category, fixes)
            for category, fixes in group_by_category(suggestions).items()
            if len(fixes) >= MIN_BATCH_SIZE
        ]

        domain_fixes = [s for s in suggestions if s.category == DiagnosticCategory.DOMAIN]
        if domain_fixes:
            plans.append(self.domain_plan(domain_fixes))
        return plans

    def category_plan(
        self, category: DiagnosticCategory, fixes: list[FixSuggestion]
    ) -> BatchFixPlan:
        label = category.value
        return BatchFixPlan(
            plan_id=f"batch_{label}",
            title=f"Batch Fix for {label.capitalize()} Errors",
            description=f"Systematic resolution of {len(fixes)} {label} errors",
            fixes=list(fixes),
            execution_order=[f.id for f in fixes],
            estimated_time_minutes=MINUTES_PER_FIX * len(fixes),
            overall_risk=batch_risk(fixes),
            subsystem_protection=[
                "Verify designated subsystem behavior before starting",
                "Re-run the compiler between fixes",
                "Validate designated subsystems after completion",
            ],
            validation_checkpoints=[
                f"After every {MIN_BATCH_SIZE} {label} fixes",
                "Before proceeding to the next category",
                "Final compiler run with no new diagnostics",
            ],
        )

    def domain_plan(self, fixes: list[FixSuggestion]) -> BatchFixPlan:
        ordered = sorted(fixes, key=self._subsystem_rank)
        names = [s.name for s in self.subsystems]
        return BatchFixPlan(
            plan_id=DOMAIN_PLAN_ID,
            title="Designated Subsystem Protection Plan",
            description=f"Careful resolution of {len(fixes)} designated subsystem errors",
            fixes=ordered,
            execution_order=[f.id for f in ordered],
            estimated_time_minutes=MINUTES_PER_DOMAIN_FIX * len(fixes),
            overall_risk=Level.HIGH,
            subsystem_protection=[
                "Back up all designated subsystem files",
                *[f"Exercise {name} features before starting" for name in names],
            ],
            validation_checkpoints=[
                "After each subsystem fix",
                "Full test suite for every designated subsystem",
                "User-facing validation of subsystem features",
            ],
        )

    def _subsystem_rank(self, fix: FixSuggestion) -> tuple[int, int]:
        # primary tier first, then configuration order; unmatched fixes last
        for index, subsystem in enumerate(self.subsystems):
            if fix.subsystem == subsystem.name:
                return (0 if subsystem.tier is SubsystemTier.PRIMARY else 1, index)
        return (2, len(self.subsystems))
