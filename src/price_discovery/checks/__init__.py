from __future__ import annotations

from .snapshot_checks import CheckResult, SnapshotCheckError, run_snapshot_checks

__all__ = ["CheckResult", "SnapshotCheckError", "run_snapshot_checks"]
