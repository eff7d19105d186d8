"""Pattern Recognizer stage."""

from diaglens.patterns.engine import (
    PatternRecognizer,
    PatternReport,
    PatternTrend,
    SubsystemPatternHealth,
)

__all__ = ["PatternRecognizer", "PatternReport", "PatternTrend", "SubsystemPatternHealth"]
