"""JSON report export shared by every stage.

Exported reports are the only files diaglens writes. Each carries a
``metadata`` block that downstream dashboards and CI gates key off to confirm
the run performed no source mutation.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from diaglens._version import __version__

logger = logging.getLogger(__name__)

SAFETY_MODE = "ANALYSIS_ONLY"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_metadata(engine_name: str, timestamp: datetime | None = None) -> dict[str, Any]:
    return {
        "engineName": engine_name,
        "version": __version__,
        "safetyMode": SAFETY_MODE,
        "manualApprovalRequired": True,
        "timestamp": (timestamp or utcnow()).isoformat(),
    }


def render_report(body: dict[str, Any], engine_name: str, timestamp: datetime | None = None) -> str:
    """Serialize a report body plus its metadata block.

    Keys keep insertion order, so identical inputs give identical text apart
    from the metadata timestamp.
    """
    data = dict(body)
    data["metadata"] = build_metadata(engine_name, timestamp)
    return json.dumps(data, indent=2, default=str)


def export_report(
    body: dict[str, Any],
    engine_name: str,
    output_path: Path,
    timestamp: datetime | None = None,
) -> Path:
    """Write a report to ``output_path``, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_report(body, engine_name, timestamp), encoding="utf-8")
    logger.info("%s report exported to %s", engine_name, output_path)
    return output_path
