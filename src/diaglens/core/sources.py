"""Source file discovery for the analyzed project (read-only)."""

from __future__ import annotations

import logging
from pathlib import Path

from diaglens.core.models import DesignatedSubsystem

logger = logging.getLogger(__name__)


class SourceTree:
    """Enumerates the project's source files, excluding configured patterns."""

    def __init__(
        self,
        root: Path,
        extensions: list[str] | None = None,
        exclude: list[str] | None = None,
    ):
        self.root = root.resolve()
        self.extensions = tuple(extensions or [".ts", ".tsx"])
        self.exclude = exclude or []
        self._files: list[Path] | None = None

    @property
    def files(self) -> list[Path]:
        if self._files is None:
            self._files = self._collect()
        return self._files

    def relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def files_for(self, subsystem: DesignatedSubsystem) -> list[Path]:
        return [f for f in self.files if subsystem.matches_path(self.relative(f))]

    def read(self, path: Path) -> str:
        """Read a source file. Raises OSError / UnicodeDecodeError to the caller."""
        return path.read_text(encoding="utf-8")

    def _collect(self) -> list[Path]:
        if self.root.is_file():
            return [self.root] if self.root.suffix in self.extensions else []

        files: list[Path] = []
        for path in self.root.rglob("*"):
            if not path.is_file() or path.suffix not in self.extensions:
                continue
            # .d.ts declarations are not analyzed source
            if path.name.endswith(".d.ts"):
                continue
            rel = self.relative(path)
            if any(excl.rstrip("/") in rel.split("/") for excl in self.exclude):
                continue
            files.append(path)

        logger.debug("Collected %d source files under %s", len(files), self.root)
        return sorted(files)
