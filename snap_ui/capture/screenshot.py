"""Element-scoped screenshot capture."""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from snap_ui.errors import CaptureError

logger = logging.getLogger(__name__)


async def capture_element(page: Page, selector: str, timeout_ms: int = 30000) -> bytes:
    """Screenshot one element as PNG with a transparent background.

    No retries: a detached element or closed page raises CaptureError.
    """
    try:
        image = await page.locator(selector).screenshot(
            type="png", omit_background=True, timeout=timeout_ms,
        )
    except PlaywrightError as e:
        raise CaptureError(f"Screenshot of '{selector}' failed: {e}") from e
    logger.debug("Captured %s (%d bytes)", selector, len(image))
    return image
