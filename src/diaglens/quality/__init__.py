"""Quality Monitor stage."""

from diaglens.quality.components import ComponentScan, ComponentScanner
from diaglens.quality.monitor import HistoryStore, QualityMonitor, QualityReport
from diaglens.quality.scoring import estimate_complexity, grade_for

__all__ = [
    "ComponentScan",
    "ComponentScanner",
    "HistoryStore",
    "QualityMonitor",
    "QualityReport",
    "estimate_complexity",
    "grade_for",
]
