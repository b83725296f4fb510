"""Baseline-update and regression-check pipelines for a single component."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from playwright.async_api import Page

from snap_ui.capture.screenshot import capture_element
from snap_ui.diff.diff_engine import compare_images, encode_png
from snap_ui.errors import DimensionMismatchError, PixelDiffExceededError, PreconditionError
from snap_ui.models.config import ComponentConfig, VisualSettings
from snap_ui.models.raster import DiffResult
from snap_ui.models.results import BaselineEntry
from snap_ui.stabilizer.force_hide import hide_elements
from snap_ui.stabilizer.page_stabilizer import prepare_element, prepare_for_visual_testing
from snap_ui.store.baseline_store import BaselineStore, VariantKey

logger = logging.getLogger(__name__)


@dataclass
class Capture:
    image: bytes
    warnings: list[str] = field(default_factory=list)


async def capture_component(
    page: Page,
    component: ComponentConfig,
    global_force_hide: Sequence[str],
    settings: VisualSettings,
) -> Capture:
    """Stabilize, run the precondition hook, apply hides and viewport, then capture."""
    report = await prepare_for_visual_testing(page, component.selector, settings)

    if component.pre_conditions is not None:
        logger.debug("Running preconditions for %s", component.id)
        try:
            await component.pre_conditions(page)
        except Exception as e:
            raise PreconditionError(f"Preconditions for '{component.name}' failed: {e}") from e

    if global_force_hide:
        await hide_elements(page, global_force_hide)
    if component.force_hide and component.force_hide.selectors:
        await hide_elements(
            page,
            component.force_hide.selectors,
            mode=component.force_hide.type,
            excludes=component.force_hide.excludes,
        )

    if component.viewport:
        await page.set_viewport_size(
            {"width": component.viewport.width, "height": component.viewport.height}
        )

    await prepare_element(page, component.selector, settings)
    image = await capture_element(page, component.selector, settings.capture_timeout_ms)
    return Capture(image=image, warnings=report.warnings)


async def generate_baseline(
    page: Page,
    component: ComponentConfig,
    global_force_hide: Sequence[str] = (),
    variant: str = "",
    *,
    store: BaselineStore | None = None,
    settings: VisualSettings | None = None,
    warnings: list[str] | None = None,
) -> BaselineEntry:
    """Capture the component and overwrite its baseline. Never compares."""
    settings = settings or VisualSettings()
    store = store or BaselineStore(settings.screenshots_dir)
    key = VariantKey(component.id, variant)

    capture = await capture_component(page, component, global_force_hide, settings)
    if warnings is not None:
        warnings.extend(capture.warnings)
    entry = store.store_baseline(key, capture.image)
    logger.info("Baseline saved: %s", component.name)
    return entry


async def run_regression(
    page: Page,
    component: ComponentConfig,
    global_force_hide: Sequence[str] = (),
    variant: str = "",
    *,
    store: BaselineStore | None = None,
    settings: VisualSettings | None = None,
    warnings: list[str] | None = None,
) -> DiffResult:
    """Capture the component and compare it with its stored baseline.

    Raises NoBaselineError before touching the page when no baseline exists,
    DimensionMismatchError on a size change and PixelDiffExceededError when
    any pixel differs beyond the threshold.
    """
    settings = settings or VisualSettings()
    store = store or BaselineStore(settings.screenshots_dir)
    key = VariantKey(component.id, variant)

    baseline = store.load_baseline(key)
    capture = await capture_component(page, component, global_force_hide, settings)
    if warnings is not None:
        warnings.extend(capture.warnings)

    threshold = component.threshold if component.threshold is not None else settings.threshold
    try:
        result = compare_images(
            baseline,
            capture.image,
            threshold=threshold,
            include_aa=settings.include_aa,
            blend_alpha=settings.diff_blend_alpha,
        )
    except DimensionMismatchError:
        store.store_actual(key, capture.image)
        store.remove_diff(key)
        raise

    if result.passed:
        store.cleanup_artifacts(key)
        logger.info("No visual changes: %s", component.name)
        return result

    actual_path = store.store_actual(key, capture.image)
    diff_path = store.store_diff(key, encode_png(result.composited_image))
    raise PixelDiffExceededError(component.name, result.diff_pixel_count, actual_path, diff_path)
