"""Check runner — executes visual checks against live pages using Playwright."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Sequence

from playwright.async_api import Browser, async_playwright

from snap_ui.errors import PixelDiffExceededError, VisualRegressionError
from snap_ui.executor.checks import VisualCheck
from snap_ui.logging_setup import print_summary, setup_logging
from snap_ui.models.config import ViewportConfig, VisualSettings, check_unique_viewport_names
from snap_ui.models.results import BaselineEntry, CheckResult, RunResult
from snap_ui.reporter.json_report import generate_json_report
from snap_ui.store.baseline_store import BaselineStore, VariantKey
from snap_ui.utils.browser import create_visual_context, launch_browser

logger = logging.getLogger(__name__)

# Baselines are written before any regression check reads them
PHASE_ORDER = ("baseline", "regression")

Job = tuple[VisualCheck, ViewportConfig]


def plan_phases(checks: Sequence[VisualCheck], viewports: Sequence[ViewportConfig]) -> list[list[Job]]:
    """Split check x viewport jobs into ordered phases, one per mode.

    Jobs within a phase run concurrently, so each artifact key may appear
    at most once per phase. Raises ValueError otherwise.
    """
    check_unique_viewport_names(viewports)
    phases: dict[str, list[Job]] = {mode: [] for mode in PHASE_ORDER}
    seen: set[tuple[str, VariantKey]] = set()
    for check in checks:
        for viewport in viewports:
            key = VariantKey(check.component.id, viewport.name)
            if (check.mode, key) in seen:
                raise ValueError(
                    f"Check '{check.name}' would run twice in {check.mode} mode for {key.stem}"
                )
            seen.add((check.mode, key))
            phases[check.mode].append((check, viewport))
    return [phases[mode] for mode in PHASE_ORDER if phases[mode]]


class Runner:
    """Runs visual checks, each in its own browser context, and collects results."""

    def __init__(self, settings: VisualSettings | None = None, store: BaselineStore | None = None):
        self.settings = settings or VisualSettings()
        self.store = store or BaselineStore(self.settings.screenshots_dir)
        self.run_id = f"run_{uuid.uuid4().hex[:8]}"

    async def execute(
        self,
        checks: Sequence[VisualCheck],
        viewports: Sequence[ViewportConfig] | None = None,
    ) -> RunResult:
        """Run every check once per viewport variant.

        All baseline checks finish before the first regression check starts.
        A failing or crashing check is recorded and never stops its siblings.
        """
        viewports = list(viewports or self.settings.viewports)
        phases = plan_phases(checks, viewports)
        total = sum(len(phase) for phase in phases)
        started_at = time.strftime("%Y-%m-%dT%H:%M:%SZ")
        start_time = time.time()
        logger.info("Starting %s: %d checks x %d viewports",
                    self.run_id, len(checks), len(viewports))

        check_results: list[CheckResult] = []
        async with async_playwright() as p:
            browser = await launch_browser(p, headless=self.settings.headless)
            semaphore = asyncio.Semaphore(self.settings.max_parallel_contexts)

            async def _run_one(index: int, check: VisualCheck, viewport: ViewportConfig) -> CheckResult:
                async with semaphore:
                    logger.info("Running check [%d/%d]: %s (%s)",
                                index + 1, total, check.name, viewport.name)
                    return await self._run_check(browser, check, viewport)

            offset = 0
            for phase in phases:
                check_results.extend(await asyncio.gather(
                    *(_run_one(offset + i, check, vp) for i, (check, vp) in enumerate(phase))
                ))
                offset += len(phase)

            await browser.close()

        duration = time.time() - start_time
        run_result = RunResult(
            run_id=self.run_id,
            started_at=started_at,
            completed_at=time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            total_checks=len(check_results),
            passed=sum(1 for r in check_results if r.result == "pass"),
            failed=sum(1 for r in check_results if r.result == "fail"),
            errors=sum(1 for r in check_results if r.result == "error"),
            duration_seconds=round(duration, 2),
            check_results=check_results,
        )
        logger.info(
            "Run complete: %d passed, %d failed, %d errors (%.1fs)",
            run_result.passed, run_result.failed, run_result.errors, duration,
        )
        return run_result

    async def _run_check(self, browser: Browser, check: VisualCheck, viewport: ViewportConfig) -> CheckResult:
        check_start = time.time()
        variant = viewport.name
        key = VariantKey(check.component.id, variant)
        warnings: list[str] = []
        result = CheckResult(
            check_name=check.name,
            component_id=check.component.id,
            component_name=check.component.name,
            page=check.page,
            group=check.group,
            variant=variant,
            mode=check.mode,
            tags=check.tags,
            result="pass",
            baseline_path=str(self.store.baseline_path(key)),
            warnings=warnings,
        )

        context = None
        page = None
        try:
            context = await create_visual_context(
                browser, viewport={"width": viewport.width, "height": viewport.height},
            )
            page = await context.new_page()
            await page.goto(self.settings.url_override or check.url)
            outcome = await check.operation(
                page, variant, store=self.store, settings=self.settings, warnings=warnings,
            )
            if isinstance(outcome, BaselineEntry):
                result.baseline_path = outcome.image_path
            else:
                result.diff_pixel_count = outcome.diff_pixel_count
        except PixelDiffExceededError as e:
            result.result = "fail"
            result.failure_kind = e.kind
            result.failure_reason = str(e)
            result.diff_pixel_count = e.diff_pixel_count
            result.actual_path = str(e.actual_path) if e.actual_path else None
            result.diff_path = str(e.diff_path) if e.diff_path else None
        except VisualRegressionError as e:
            result.result = "fail"
            result.failure_kind = e.kind
            result.failure_reason = str(e)
        except Exception as e:
            logger.error("Check %s crashed: %s", check.name, e)
            result.result = "error"
            result.failure_kind = type(e).__name__
            result.failure_reason = str(e)
        finally:
            await self._close(page, context)

        result.warnings = warnings
        result.duration_seconds = round(time.time() - check_start, 2)
        logger.info("[%s] %s (%s)%s", result.result.upper(), check.name, variant,
                    f": {result.failure_reason}" if result.failure_reason else "")
        return result

    async def _close(self, page, context) -> None:
        # A browser that already died must not turn a recorded result into a crash
        for target in (page, context):
            if target is None:
                continue
            try:
                await target.close()
            except Exception as e:
                logger.warning("Failed to close %s: %s", type(target).__name__, e)


def run_checks(
    checks: Sequence[VisualCheck],
    settings: VisualSettings | None = None,
    report_path: Path | str | None = None,
    verbose: bool = False,
) -> RunResult:
    """Synchronous entry point: run checks and write a JSON report.

    The report goes to ``report_path`` or, when omitted, to
    ``{settings.report_output_dir}/report_{run_id}.json``.
    """
    if not logging.getLogger().handlers:
        setup_logging(verbose)
    runner = Runner(settings)
    run_result = asyncio.run(runner.execute(checks))
    if report_path is None:
        report_path = Path(runner.settings.report_output_dir) / f"report_{run_result.run_id}.json"
    print_summary(run_result)
    path = generate_json_report(run_result, Path(report_path))
    logger.info("JSON report: %s", path)
    return run_result
