"""Exception hierarchy for diaglens."""

from __future__ import annotations


class DiaglensError(Exception):
    """Base class for all diaglens errors."""


class ConfigurationError(DiaglensError):
    """Raised when the project cannot be analyzed as configured.

    Fatal: the run aborts before any stage produces a report.
    """


class CompilerError(DiaglensError):
    """Raised when the compiler could not be launched or produced no output."""


class DiagnosticConversionError(DiaglensError):
    """Raised for a single raw diagnostic that lacks a file or position.

    The collector catches this per record and counts the skip.
    """
