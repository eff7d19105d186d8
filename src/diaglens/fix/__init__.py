"""Fix Recommender stage."""

from diaglens.fix.batch import BatchPlanner, batch_risk
from diaglens.fix.engine import FixRecommender, FixReport
from diaglens.fix.safety import SafetyAnalyzer
from diaglens.fix.templates import SuggestionTemplate, SuggestionTemplates

__all__ = [
    "BatchPlanner",
    "FixRecommender",
    "FixReport",
    "SafetyAnalyzer",
    "SuggestionTemplate",
    "SuggestionTemplates",
    "batch_risk",
]
