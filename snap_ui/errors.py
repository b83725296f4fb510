"""Error taxonomy for the visual regression engine.

Fatal errors subclass VisualRegressionError and fail exactly one check.
StabilizationTimeout is the one non-fatal kind: the stabilizer builds it,
logs it and keeps going.
"""

from __future__ import annotations

from pathlib import Path


class VisualRegressionError(Exception):
    """Base class for errors that fail a single visual check."""

    kind = "VisualRegressionError"


class NoBaselineError(VisualRegressionError):
    kind = "NoBaseline"

    def __init__(self, component_id: str, baseline_path: Path):
        self.component_id = component_id
        self.baseline_path = baseline_path
        super().__init__(
            f"No baseline found for '{component_id}' at {baseline_path}. "
            "Please run baseline generation first."
        )


class DimensionMismatchError(VisualRegressionError):
    kind = "DimensionMismatch"

    def __init__(self, baseline_size: tuple[int, int], actual_size: tuple[int, int]):
        self.baseline_size = baseline_size
        self.actual_size = actual_size
        super().__init__(
            "Image dimensions differ: baseline %dx%d, actual %dx%d"
            % (baseline_size[0], baseline_size[1], actual_size[0], actual_size[1])
        )


class PixelDiffExceededError(VisualRegressionError):
    kind = "PixelDiffExceeded"

    def __init__(
        self,
        component_name: str,
        diff_pixel_count: int,
        actual_path: Path | None = None,
        diff_path: Path | None = None,
    ):
        self.component_name = component_name
        self.diff_pixel_count = diff_pixel_count
        self.actual_path = actual_path
        self.diff_path = diff_path
        super().__init__(
            f'Visual regression detected for "{component_name}". '
            f"{diff_pixel_count} pixels differ."
        )


class ElementNotReadyError(VisualRegressionError):
    kind = "ElementNotReady"

    def __init__(self, selector: str, state: str, timeout_ms: int, detail: str | None = None):
        self.selector = selector
        self.state = state
        self.timeout_ms = timeout_ms
        message = f"Element '{selector}' did not become {state} within {timeout_ms}ms"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CaptureError(VisualRegressionError):
    kind = "CaptureFailed"


class PreconditionError(VisualRegressionError):
    kind = "PreconditionFailed"


class StabilizationTimeout(Exception):
    """A load-state or network-idle wait ran out. Logged, never fatal."""

    kind = "StabilizationTimeout"

    def __init__(self, state: str, timeout_ms: int):
        self.state = state
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out waiting for '{state}' after {timeout_ms}ms")
