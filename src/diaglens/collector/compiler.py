"""Compiler adapters: run the type-checker and return raw diagnostic records."""

from __future__ import annotations

import json
import logging
import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from diaglens.core.config import CompilerProfile
from diaglens.core.errors import CompilerError, ConfigurationError

logger = logging.getLogger(__name__)

_LOCATED_RE = re.compile(
    r"^(?P<file>.+?)\((?P<line>\d+),(?P<column>\d+)\): "
    r"(?P<severity>error|warning|message|suggestion) TS(?P<code>\d+): (?P<message>.*)$"
)
_GLOBAL_RE = re.compile(
    r"^(?P<severity>error|warning|message|suggestion) TS(?P<code>\d+): (?P<message>.*)$"
)


@dataclass
class RawDiagnostic:
    """A diagnostic as the compiler reported it, before validation."""

    message: str
    code: int | None = None
    file: str | None = None
    line: int | None = None
    column: int | None = None
    severity: str = "error"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawDiagnostic:
        def _int(key: str) -> int | None:
            try:
                return int(data[key])
            except (KeyError, TypeError, ValueError):
                return None

        return cls(
            message=str(data.get("message", "")),
            code=_int("code"),
            file=data.get("file"),
            line=_int("line"),
            column=_int("column"),
            severity=str(data.get("severity", "error")),
        )


def parse_tsc_output(output: str) -> list[RawDiagnostic]:
    """Parse ``tsc --pretty false`` output.

    Indented lines continue the previous diagnostic's message chain.
    Diagnostics without a location (``error TS5083: ...``) are kept with
    ``file=None`` so the collector can count them as unconvertible.
    """
    diagnostics: list[RawDiagnostic] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        if line[0].isspace():
            if diagnostics:
                diagnostics[-1].message += "\n" + line.strip()
            continue

        match = _LOCATED_RE.match(line)
        if match:
            diagnostics.append(RawDiagnostic(
                file=match.group("file"),
                line=int(match.group("line")),
                column=int(match.group("column")),
                code=int(match.group("code")),
                message=match.group("message"),
                severity=match.group("severity"),
            ))
            continue

        match = _GLOBAL_RE.match(line)
        if match:
            diagnostics.append(RawDiagnostic(
                code=int(match.group("code")),
                message=match.group("message"),
                severity=match.group("severity"),
            ))
            continue

        logger.debug("Ignoring unrecognised compiler output line: %s", line)
    return diagnostics


class DiagnosticSource(ABC):
    """Something that yields raw diagnostics for a project root."""

    @abstractmethod
    def collect(self, project_root: Path) -> list[RawDiagnostic]:
        """Return raw diagnostics in the compiler's stable order."""
        ...


class TscRunner(DiagnosticSource):
    """Runs the TypeScript compiler in no-emit mode."""

    def __init__(self, profile: CompilerProfile | None = None):
        self.profile = profile or CompilerProfile()

    def collect(self, project_root: Path) -> list[RawDiagnostic]:
        tsconfig = project_root / self.profile.tsconfig
        if not tsconfig.is_file():
            raise ConfigurationError(
                f"No compiler configuration found: {tsconfig} does not exist"
            )

        cmd = [
            *self.profile.command,
            "--noEmit",
            "--pretty",
            "false",
            "-p",
            str(tsconfig),
        ]
        logger.info("Running compiler: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=project_root,
                capture_output=True,
                text=True,
                timeout=self.profile.timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise CompilerError(f"Compiler not found: {self.profile.command[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CompilerError(
                f"Compiler did not finish within {self.profile.timeout_seconds}s"
            ) from exc

        diagnostics = parse_tsc_output(result.stdout)
        if result.returncode != 0 and not diagnostics and result.stderr.strip():
            raise CompilerError(
                f"Compiler exited with status {result.returncode}: {result.stderr.strip()}"
            )
        return diagnostics


class JsonDiagnosticSource(DiagnosticSource):
    """Reads diagnostics collected elsewhere (e.g. by a CI job) from JSON.

    The file holds a list of objects with ``file``, ``line``, ``column``,
    ``code``, ``message`` and optional ``severity`` keys.
    """

    def __init__(self, path: Path):
        self.path = path

    def collect(self, project_root: Path) -> list[RawDiagnostic]:
        if not self.path.is_file():
            raise ConfigurationError(f"Diagnostics file not found: {self.path}")
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Diagnostics file is not valid JSON: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("diagnostics", [])
        if not isinstance(data, list):
            raise ConfigurationError("Diagnostics file must contain a list of records")
        return [
            RawDiagnostic.from_dict(d) if isinstance(d, dict) else RawDiagnostic(message=str(d))
            for d in data
        ]


class InMemorySource(DiagnosticSource):
    """Serves a fixed list of raw diagnostics."""

    def __init__(self, diagnostics: list[RawDiagnostic]):
        self.diagnostics = list(diagnostics)

    def collect(self, project_root: Path) -> list[RawDiagnostic]:
        return list(self.diagnostics)
