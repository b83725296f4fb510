"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from snap_ui.models.results import RunResult


def generate_json_report(run_result: RunResult, output_path: Path) -> Path:
    """Write a machine-readable JSON report, with failing checks listed up front."""
    report = run_result.model_dump()
    report["failures"] = [
        {
            "check_name": r.check_name,
            "component_id": r.component_id,
            "variant": r.variant,
            "failure_kind": r.failure_kind,
            "failure_reason": r.failure_reason,
            "diff_path": r.diff_path,
        }
        for r in run_result.check_results
        if r.result != "pass"
    ]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
    return output_path
