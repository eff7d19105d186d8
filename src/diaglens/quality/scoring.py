"""Score helpers shared by the quality monitor."""

from __future__ import annotations

import logging
import re

from diaglens.core.sources import SourceTree

logger = logging.getLogger(__name__)

# Lower bound of each letter grade
GRADES = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)

# Decision points per 100 lines tolerated before the score drops
BRANCH_DENSITY_ALLOWANCE = 10
BRANCH_DENSITY_PENALTY = 2.5

_DECISION_RE = re.compile(r"\b(?:if|for|while|case|catch)\b|&&|\|\|")


def grade_for(score: float) -> str:
    for floor, grade in GRADES:
        if score >= floor:
            return grade
    return "F"


def clamp(score: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, score))


def mean(values: list[float], default: float = 100.0) -> float:
    if not values:
        return default
    return sum(values) / len(values)


def estimate_complexity(tree: SourceTree, unreadable: list[str] | None = None) -> float:
    """Approximate complexity score from branch density over the source tree.

    Counts decision points per 100 lines. Up to 10 is scored 100; each point
    above that costs 2.5. Unreadable files are skipped and, when given,
    appended to ``unreadable`` as project-relative paths.
    """
    decisions = 0
    lines = 0
    for path in tree.files:
        try:
            content = tree.read(path)
        except (OSError, UnicodeDecodeError):
            logger.warning("Skipping unreadable file for complexity estimate: %s", path)
            if unreadable is not None:
                unreadable.append(tree.relative(path))
            continue
        decisions += len(_DECISION_RE.findall(content))
        lines += content.count("\n") + 1

    if lines == 0:
        return 100.0
    density = decisions * 100 / lines
    return clamp(100 - max(0.0, density - BRANCH_DENSITY_ALLOWANCE) * BRANCH_DENSITY_PENALTY)
