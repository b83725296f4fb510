"""Result data structures produced by baseline and regression checks."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class BaselineEntry(BaseModel):
    component_id: str
    variant: str = ""
    image_path: str
    width: int
    height: int
    image_hash: str  # SHA-256 hex digest
    captured_at: str  # ISO timestamp


class CheckResult(BaseModel):
    check_name: str
    component_id: str
    component_name: str
    page: str = ""
    group: str = ""
    variant: str = ""
    mode: str  # baseline, regression
    tags: list[str] = Field(default_factory=list)
    result: str  # pass, fail, error
    duration_seconds: float = 0.0
    failure_kind: Optional[str] = None
    failure_reason: Optional[str] = None
    diff_pixel_count: Optional[int] = None
    baseline_path: Optional[str] = None
    actual_path: Optional[str] = None
    diff_path: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class RunResult(BaseModel):
    run_id: str
    started_at: str
    completed_at: str
    total_checks: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    duration_seconds: float = 0.0
    check_results: list[CheckResult] = Field(default_factory=list)
