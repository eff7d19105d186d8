"""Diagnostic Collector stage."""

from diaglens.collector.compiler import (
    DiagnosticSource,
    InMemorySource,
    JsonDiagnosticSource,
    RawDiagnostic,
    TscRunner,
    parse_tsc_output,
)
from diaglens.collector.engine import CollectionReport, DiagnosticCollector
from diaglens.collector.rules import CLASSIFICATION_RULES, ClassificationRule, RuleContext, classify

__all__ = [
    "CLASSIFICATION_RULES",
    "ClassificationRule",
    "CollectionReport",
    "DiagnosticCollector",
    "DiagnosticSource",
    "InMemorySource",
    "JsonDiagnosticSource",
    "RawDiagnostic",
    "RuleContext",
    "TscRunner",
    "classify",
    "parse_tsc_output",
]
