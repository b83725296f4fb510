"""Page stabilizer — waits out loading, media, lazy content and animation before capture."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from snap_ui.errors import ElementNotReadyError, StabilizationTimeout
from snap_ui.models.config import VisualSettings

logger = logging.getLogger(__name__)

DISABLE_MEDIA_SCRIPT = """() => {
    document.querySelectorAll('audio, video').forEach((el) => {
        el.muted = true;
        el.autoplay = false;
        el.pause();
    });
    HTMLMediaElement.prototype.play = function () {
        return Promise.resolve();
    };
}"""

SCROLL_TOP_SCRIPT = "() => window.scrollTo(0, 0)"
SCROLL_BOTTOM_SCRIPT = "() => window.scrollTo(0, document.body.scrollHeight)"
SCROLL_MIDDLE_SCRIPT = "() => window.scrollTo(0, document.body.scrollHeight / 2)"


@dataclass
class StabilizationReport:
    """Non-fatal problems met while stabilizing a page."""

    timeouts: list[StabilizationTimeout] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return [str(t) for t in self.timeouts]


async def disable_media(page: Page) -> None:
    """Mute and pause audio/video and turn play() into a no-op."""
    try:
        await page.evaluate(DISABLE_MEDIA_SCRIPT)
    except PlaywrightError as e:
        logger.debug("Could not disable media playback: %s", e)


async def _wait_for_state(page: Page, state: str, timeout_ms: int, report: StabilizationReport) -> bool:
    try:
        await page.wait_for_load_state(state, timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        timeout = StabilizationTimeout(state, timeout_ms)
        report.timeouts.append(timeout)
        logger.warning("%s - continuing anyway", timeout)
        return False


async def wait_for_page_load(page: Page, settings: VisualSettings, report: StabilizationReport) -> None:
    await _wait_for_state(page, "domcontentloaded", settings.load_timeout_ms, report)
    await _wait_for_state(page, "load", settings.load_timeout_ms, report)


async def wait_for_network_idle(page: Page, settings: VisualSettings, report: StabilizationReport) -> None:
    # Polling and analytics keep plenty of pages from ever going idle
    await _wait_for_state(page, "networkidle", settings.network_idle_timeout_ms, report)


async def trigger_lazy_loading(page: Page, settings: VisualSettings) -> None:
    """One fixed sweep: top, bottom, settle, middle, settle."""
    logger.debug("Scrolling through page to trigger lazy loading")
    try:
        await page.evaluate(SCROLL_TOP_SCRIPT)
        await page.evaluate(SCROLL_BOTTOM_SCRIPT)
        await page.wait_for_timeout(settings.lazy_load_settle_ms)
        await page.evaluate(SCROLL_MIDDLE_SCRIPT)
        await page.wait_for_timeout(settings.lazy_load_settle_ms)
    except PlaywrightError as e:
        logger.warning("Lazy-load scroll sweep failed: %s", e)


async def prepare_element(page: Page, selector: str, settings: VisualSettings) -> None:
    """Wait until the element is attached and visible, then let it settle in view.

    Raises ElementNotReadyError if either wait runs out, the selector is
    ambiguous, or the element cannot be scrolled into view.
    """
    logger.debug("Preparing element for screenshot: %s", selector)
    locator = page.locator(selector)
    for state in ("attached", "visible"):
        try:
            await locator.wait_for(state=state, timeout=settings.element_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementNotReadyError(selector, state, settings.element_timeout_ms) from e
        except PlaywrightError as e:
            # e.g. a strict-mode violation when the selector matches several nodes
            raise ElementNotReadyError(selector, state, settings.element_timeout_ms, str(e)) from e

    await page.wait_for_timeout(settings.animation_settle_ms)
    try:
        await locator.scroll_into_view_if_needed(timeout=settings.element_timeout_ms)
    except PlaywrightError as e:
        raise ElementNotReadyError(
            selector, "scrolled into view", settings.element_timeout_ms, str(e)
        ) from e
    await page.wait_for_timeout(settings.final_settle_ms)


async def prepare_for_visual_testing(
    page: Page,
    selector: str | None = None,
    settings: VisualSettings | None = None,
) -> StabilizationReport:
    """Bring the page into a deterministic visual state before capture."""
    settings = settings or VisualSettings()
    report = StabilizationReport()
    logger.debug("Preparing page for visual testing: %s", page.url)

    await disable_media(page)
    await wait_for_page_load(page, settings, report)
    await wait_for_network_idle(page, settings, report)
    await trigger_lazy_loading(page, settings)

    if selector:
        await prepare_element(page, selector, settings)

    logger.debug("Page prepared (%d non-fatal timeouts)", len(report.timeouts))
    return report
