"""Tests for source file discovery."""

from __future__ import annotations

from pathlib import Path

from diaglens.core.models import DesignatedSubsystem
from diaglens.core.sources import SourceTree


def _touch(root: Path, rel: str, content: str = "") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestSourceTree:
    def test_collects_matching_extensions_sorted(self, tmp_path: Path):
        _touch(tmp_path, "src/b.ts")
        _touch(tmp_path, "src/a.tsx")
        _touch(tmp_path, "README.md")

        tree = SourceTree(tmp_path)

        assert [tree.relative(f) for f in tree.files] == ["src/a.tsx", "src/b.ts"]

    def test_skips_declaration_files(self, tmp_path: Path):
        _touch(tmp_path, "types/globals.d.ts")
        _touch(tmp_path, "index.ts")

        assert [f.name for f in SourceTree(tmp_path).files] == ["index.ts"]

    def test_excludes_directories(self, tmp_path: Path):
        _touch(tmp_path, "node_modules/pkg/index.ts")
        _touch(tmp_path, "dist/out.ts")
        _touch(tmp_path, "src/app.ts")

        tree = SourceTree(tmp_path, exclude=["node_modules/", "dist/"])

        assert [tree.relative(f) for f in tree.files] == ["src/app.ts"]

    def test_files_for_subsystem(self, tmp_path: Path):
        _touch(tmp_path, "src/billing/invoice.ts")
        _touch(tmp_path, "src/search/index.ts")
        subsystem = DesignatedSubsystem(name="Billing", globs=["src/billing/**"])

        tree = SourceTree(tmp_path)

        assert [tree.relative(f) for f in tree.files_for(subsystem)] == ["src/billing/invoice.ts"]
