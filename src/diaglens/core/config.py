"""Configuration management for diaglens (diaglens.toml parsing + defaults)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from diaglens.core.errors import ConfigurationError
from diaglens.core.models import DesignatedSubsystem, SubsystemTier

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


CONFIG_FILENAME = "diaglens.toml"


@dataclass
class AnalysisOptions:
    include_dependencies: bool = False
    max_diagnostics: int = 100
    designated_subsystems: list[DesignatedSubsystem] = field(default_factory=list)


@dataclass
class CompilerProfile:
    """How to run the compiler and how to read its diagnostic codes.

    Defaults describe ``tsc``: 1xxx are parse errors, 2xxx type-checking
    errors, and a handful of 23xx/27xx codes report module resolution.
    """

    command: list[str] = field(default_factory=lambda: ["npx", "--no-install", "tsc"])
    tsconfig: str = "tsconfig.json"
    timeout_seconds: int = 600
    parse_range: tuple[int, int] = (1000, 1999)
    type_range: tuple[int, int] = (2000, 2999)
    module_resolution_codes: list[tuple[int, int]] = field(
        default_factory=lambda: [(2304, 2307), (2792, 2792)]
    )
    permissive_markers: list[str] = field(default_factory=lambda: ["any", "unknown"])
    dynamic_eval_markers: list[str] = field(default_factory=lambda: ["eval", "Function("])
    infrastructure_markers: list[str] = field(default_factory=lambda: ["auth", "server"])

    def is_parse_code(self, code: int) -> bool:
        return self.parse_range[0] <= code <= self.parse_range[1]

    def is_type_code(self, code: int) -> bool:
        return self.type_range[0] <= code <= self.type_range[1]

    def is_module_resolution_code(self, code: int) -> bool:
        return any(lo <= code <= hi for lo, hi in self.module_resolution_codes)


@dataclass
class ScoringWeights:
    """Weights and penalties of the quality score.

    Report consumers depend on this scale; change with care.
    """

    code: float = 0.3
    domain: float = 0.5
    security: float = 0.2
    type_error_penalty: float = 2.0
    subsystem_error_penalty: float = 20.0
    vulnerability_penalty: float = 3.0
    neutral_subsystem_score: float = 50.0
    trend_tolerance: float = 2.0


@dataclass
class QualityConfig:
    # None means estimate from the source tree
    complexity_score: float | None = None
    source_extensions: list[str] = field(default_factory=lambda: [".ts", ".tsx"])
    weights: ScoringWeights = field(default_factory=ScoringWeights)


@dataclass
class DiaglensConfig:
    """Complete diaglens configuration."""

    exclude: list[str] = field(
        default_factory=lambda: [
            "node_modules/",
            "dist/",
            "build/",
            ".git/",
            "coverage/",
        ]
    )
    analysis: AnalysisOptions = field(default_factory=AnalysisOptions)
    compiler: CompilerProfile = field(default_factory=CompilerProfile)
    quality: QualityConfig = field(default_factory=QualityConfig)


def _range(value: Any, name: str) -> tuple[int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ConfigurationError(f"{name} must be a [low, high] pair, got {value!r}")
    return int(value[0]), int(value[1])


def subsystem_from_dict(data: dict[str, Any]) -> DesignatedSubsystem:
    if "name" not in data:
        raise ConfigurationError("Every [[subsystems]] entry needs a name")
    try:
        tier = SubsystemTier(data.get("tier", "secondary"))
    except ValueError:
        raise ConfigurationError(
            f"Unknown tier {data.get('tier')!r} for subsystem {data['name']!r}"
        ) from None
    return DesignatedSubsystem(
        name=data["name"],
        keywords=list(data.get("keywords", [])),
        globs=list(data.get("globs", [])),
        tier=tier,
        health_threshold=float(data.get("health_threshold", 90.0)),
        critical_threshold=int(data.get("critical_threshold", 5)),
        recommendation=data.get("recommendation", ""),
        validation_steps=list(data.get("validation_steps", [])),
    )


def parse_subsystem_option(value: str, tier: SubsystemTier = SubsystemTier.SECONDARY) -> DesignatedSubsystem:
    """Parse the CLI form ``Name`` or ``Name=kw1,kw2``."""
    name, _, keywords = value.partition("=")
    name = name.strip()
    if not name:
        raise ConfigurationError(f"Invalid subsystem option: {value!r}")
    kws = [k.strip() for k in keywords.split(",") if k.strip()]
    return DesignatedSubsystem(name=name, keywords=kws, tier=tier)


def load_config(project_path: Path | None = None) -> DiaglensConfig:
    """Load configuration from diaglens.toml if present, otherwise return defaults."""
    config = DiaglensConfig()

    if project_path is None:
        project_path = Path.cwd()

    config_file = project_path / CONFIG_FILENAME
    if not config_file.exists():
        return config

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid {CONFIG_FILENAME}: {exc}") from exc

    if "general" in data:
        gen = data["general"]
        if "exclude" in gen:
            config.exclude = gen["exclude"]

    if "analysis" in data:
        a = data["analysis"]
        if "max_diagnostics" in a:
            config.analysis.max_diagnostics = int(a["max_diagnostics"])
        if "include_dependencies" in a:
            config.analysis.include_dependencies = bool(a["include_dependencies"])

    if "subsystems" in data:
        config.analysis.designated_subsystems = [
            subsystem_from_dict(s) for s in data["subsystems"]
        ]

    if "compiler" in data:
        c = data["compiler"]
        if "command" in c:
            cmd = c["command"]
            config.compiler.command = cmd.split() if isinstance(cmd, str) else list(cmd)
        if "tsconfig" in c:
            config.compiler.tsconfig = c["tsconfig"]
        if "timeout_seconds" in c:
            config.compiler.timeout_seconds = int(c["timeout_seconds"])
        if "parse_range" in c:
            config.compiler.parse_range = _range(c["parse_range"], "parse_range")
        if "type_range" in c:
            config.compiler.type_range = _range(c["type_range"], "type_range")
        if "module_resolution_codes" in c:
            config.compiler.module_resolution_codes = [
                _range(r, "module_resolution_codes") for r in c["module_resolution_codes"]
            ]
        for attr in ("permissive_markers", "dynamic_eval_markers", "infrastructure_markers"):
            if attr in c:
                setattr(config.compiler, attr, list(c[attr]))

    if "quality" in data:
        q = data["quality"]
        if "complexity_score" in q:
            config.quality.complexity_score = float(q["complexity_score"])
        if "source_extensions" in q:
            config.quality.source_extensions = list(q["source_extensions"])
        w = q.get("weights", {})
        for attr in (
            "code",
            "domain",
            "security",
            "type_error_penalty",
            "subsystem_error_penalty",
            "vulnerability_penalty",
            "neutral_subsystem_score",
            "trend_tolerance",
        ):
            if attr in w:
                setattr(config.quality.weights, attr, float(w[attr]))

    if config.analysis.max_diagnostics < 0:
        raise ConfigurationError("max_diagnostics must not be negative")

    return config
