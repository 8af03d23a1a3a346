from __future__ import annotations

import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from jsonschema import Draft202012Validator

from .sampling_profiler.model import ProfileReport
from .timing_harness.model import TimingReport, relative_to_fastest

SCHEMA_VERSION = "0.1.0"

ResultsKind = Literal["timing", "profile"]


def _schemas_dir() -> Path:
    return Path(__file__).resolve().parent / "schemas"


def default_schema_path(kind: ResultsKind) -> Path:
    return _schemas_dir() / f"{kind}_results.schema.json"


def validate_results_schema(results: dict[str, Any], *, kind: ResultsKind, schema_path: Path | None = None) -> None:
    schema_path = default_schema_path(kind) if schema_path is None else schema_path
    schema = json.loads(schema_path.read_text())
    Draft202012Validator(schema).validate(results)


def _run_info() -> dict[str, Any]:
    return {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "platform": {"os": platform.system().lower(), "arch": platform.machine().lower()},
        "python": {"implementation": sys.implementation.name, "version": platform.python_version()},
    }


def timing_results_payload(reports: dict[str, TimingReport]) -> dict[str, Any]:
    ratios = relative_to_fastest(reports)
    records: list[dict[str, Any]] = []
    for name, r in reports.items():
        rec = r.to_dict()
        rec["name"] = name
        rec["ratio_to_fastest"] = None if ratios[name] == float("inf") else ratios[name]
        records.append(rec)
    out = {"schema_version": SCHEMA_VERSION, "kind": "timing", "run": _run_info(), "records": records}
    validate_results_schema(out, kind="timing")
    return out


def profile_results_payload(report: ProfileReport) -> dict[str, Any]:
    out = {"schema_version": SCHEMA_VERSION, "kind": "profile", "run": _run_info(), "profile": report.to_dict()}
    validate_results_schema(out, kind="profile")
    return out


def write_results(path: Path, results: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(results, indent=2, sort_keys=True) + "\n")
