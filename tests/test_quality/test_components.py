"""Tests for the advisory component health scan."""

from __future__ import annotations

from pathlib import Path

from diaglens.core.config import CompilerProfile
from diaglens.core.models import DesignatedSubsystem
from diaglens.core.sources import SourceTree
from diaglens.quality.components import ComponentScanner

BILLING = DesignatedSubsystem(
    name="Billing", keywords=["Invoice", "Payment", "Refund"], globs=["src/billing/**"]
)

HEALTHY = """\
export interface Invoice { id: string; total: number }
export type Payment = { invoice: Invoice };
export class Refund { constructor(readonly payment: Payment) {} }
"""


def _write(root: Path, rel: str, content: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


class TestComponentScanner:
    def test_healthy_component(self, tmp_path: Path):
        _write(tmp_path, "src/billing/invoice.ts", HEALTHY)

        scan = ComponentScanner(SourceTree(tmp_path), [BILLING]).scan()

        component = scan.components[0]
        assert component.name == "invoice"
        assert component.health_score == 100
        assert component.domain_alignment == 100
        assert component.issues == []

    def test_penalties(self, tmp_path: Path):
        content = "// TODO: tidy\nexport const f = (a: any, b: any) => a + b;\n"
        _write(tmp_path, "src/billing/util.ts", content)

        component = ComponentScanner(SourceTree(tmp_path), [BILLING]).scan().components[0]

        # -20 no declarations, -10 for two `: any`, -10 TODO
        assert component.health_score == 60
        assert component.domain_alignment == 70
        assert len(component.issues) == 3
        assert component.recommendations

    def test_permissive_markers_come_from_profile(self, tmp_path: Path):
        content = "export interface Invoice { meta: object; raw: any }\n"
        _write(tmp_path, "src/billing/invoice.ts", content)
        profile = CompilerProfile(permissive_markers=["object"])

        component = ComponentScanner(SourceTree(tmp_path), [BILLING], profile).scan().components[0]

        assert component.health_score == 95
        assert component.issues == ["1 permissive type annotations found"]

    def test_score_floors_at_zero(self, tmp_path: Path):
        content = "let x: any;\n" * 30
        _write(tmp_path, "src/billing/bad.ts", content)

        component = ComponentScanner(SourceTree(tmp_path), [BILLING]).scan().components[0]

        assert component.health_score == 0

    def test_sorted_by_health(self, tmp_path: Path):
        _write(tmp_path, "src/billing/a.ts", "export const a = 1;\n")
        _write(tmp_path, "src/billing/b.ts", HEALTHY)

        scan = ComponentScanner(SourceTree(tmp_path), [BILLING]).scan()

        assert [c.name for c in scan.components] == ["b", "a"]

    def test_unreadable_file_is_excluded_and_counted(self, tmp_path: Path):
        _write(tmp_path, "src/billing/good.ts", HEALTHY)
        (tmp_path / "src" / "billing" / "binary.ts").write_bytes(b"\xff\xfe\x00\x80")

        scan = ComponentScanner(SourceTree(tmp_path), [BILLING]).scan()

        assert [c.name for c in scan.components] == ["good"]
        assert scan.unreadable == ["src/billing/binary.ts"]
        assert scan.unreadable_count == 1

    def test_file_in_two_subsystems_scanned_once(self, tmp_path: Path):
        _write(tmp_path, "src/billing/invoice.ts", HEALTHY)
        ledger = DesignatedSubsystem(name="Ledger", globs=["src/billing/**"])

        scan = ComponentScanner(SourceTree(tmp_path), [BILLING, ledger]).scan()

        assert len(scan.components) == 1

    def test_small_vocabulary_needs_every_term(self, tmp_path: Path):
        search = DesignatedSubsystem(name="Search", globs=["src/search/**"])
        _write(tmp_path, "src/search/index.ts", "export interface SearchResult {}\n")
        _write(tmp_path, "src/search/other.ts", "export interface Result {}\n")

        scan = ComponentScanner(SourceTree(tmp_path), [search]).scan()
        alignment = {c.name: c.domain_alignment for c in scan.components}

        assert alignment == {"index": 100, "other": 70}
