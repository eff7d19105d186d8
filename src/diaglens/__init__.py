"""diaglens: compiler diagnostic analysis and fix-recommendation pipeline."""

from diaglens._version import __version__
from diaglens.core.config import AnalysisOptions, DiaglensConfig, load_config
from diaglens.core.models import DesignatedSubsystem, Diagnostic
from diaglens.pipeline import AnalysisPipeline, PipelineResult

__all__ = [
    "__version__",
    "AnalysisOptions",
    "AnalysisPipeline",
    "DesignatedSubsystem",
    "DiaglensConfig",
    "Diagnostic",
    "PipelineResult",
    "load_config",
]
