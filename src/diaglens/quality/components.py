"""Advisory per-file health scan for designated subsystem files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from diaglens.core.config import CompilerProfile
from diaglens.core.models import ComponentHealth, DesignatedSubsystem
from diaglens.core.sources import SourceTree

logger = logging.getLogger(__name__)

NO_DECLARATIONS_PENALTY = 20
PERMISSIVE_USAGE_PENALTY = 5
TODO_PENALTY = 10
ALIGNMENT_PENALTY = 30
ALIGNMENT_KEYWORDS = 3

_DECLARATION_RE = re.compile(r"\b(?:interface|type|class)\b")


def permissive_annotation_re(markers: list[str]) -> re.Pattern[str]:
    """Match type annotations such as ``: any`` for each permissive marker."""
    alternatives = "|".join(re.escape(m) for m in markers)
    return re.compile(rf":\s?(?:{alternatives})(?!\w)")


@dataclass
class ComponentScan:
    components: list[ComponentHealth] = field(default_factory=list)
    unreadable: list[str] = field(default_factory=list)

    @property
    def unreadable_count(self) -> int:
        return len(self.unreadable)


class ComponentScanner:
    """Scores every source file that belongs to a designated subsystem."""

    def __init__(
        self,
        tree: SourceTree,
        subsystems: list[DesignatedSubsystem],
        profile: CompilerProfile | None = None,
    ):
        self.tree = tree
        self.subsystems = subsystems
        self.profile = profile or CompilerProfile()
        self._permissive_re = (
            permissive_annotation_re(self.profile.permissive_markers)
            if self.profile.permissive_markers
            else None
        )

    def scan(self) -> ComponentScan:
        result = ComponentScan()
        seen: set[Path] = set()
        for subsystem in self.subsystems:
            for path in self.tree.files_for(subsystem):
                if path in seen:
                    continue
                seen.add(path)
                try:
                    content = self.tree.read(path)
                except (OSError, UnicodeDecodeError) as exc:
                    logger.warning("Excluding unreadable component %s: %s", path, exc)
                    result.unreadable.append(self.tree.relative(path))
                    continue
                result.components.append(self.assess(path, content, subsystem))

        result.components.sort(key=lambda c: -c.health_score)
        return result

    def assess(self, path: Path, content: str, subsystem: DesignatedSubsystem) -> ComponentHealth:
        issues: list[str] = []
        score = 100

        if not _DECLARATION_RE.search(content):
            issues.append("No type definitions found")
            score -= NO_DECLARATIONS_PENALTY

        permissive = len(self._permissive_re.findall(content)) if self._permissive_re else 0
        if permissive:
            issues.append(f"{permissive} permissive type annotations found")
            score -= permissive * PERMISSIVE_USAGE_PENALTY

        if "TODO" in content or "FIXME" in content:
            issues.append("Contains TODO/FIXME comments")
            score -= TODO_PENALTY

        alignment = self.alignment(content, subsystem)

        recommendations: list[str] = []
        if score < 80:
            recommendations.append("Review and improve type definitions")
        if alignment < 80:
            recommendations.append(f"Make the {subsystem.name} concepts explicit in this file")

        return ComponentHealth(
            name=path.stem,
            path=self.tree.relative(path),
            health_score=max(0, score),
            issues=issues,
            domain_alignment=alignment,
            recommendations=recommendations,
        )

    @staticmethod
    def alignment(content: str, subsystem: DesignatedSubsystem) -> int:
        """100, less 30 when too few subsystem terms appear in the file.

        Terms are the subsystem name and keywords, matched case-insensitively.
        A subsystem with fewer than three terms must have all of them present.
        """
        terms = {t.lower() for t in [subsystem.name, *subsystem.keywords]}
        lowered = content.lower()
        found = sum(1 for t in terms if t in lowered)
        if found < min(ALIGNMENT_KEYWORDS, len(terms)):
            return 100 - ALIGNMENT_PENALTY
        return 100
