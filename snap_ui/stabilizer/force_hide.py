"""Force-hide: remove non-deterministic content from the page before capture."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from playwright.async_api import Page

logger = logging.getLogger(__name__)

HIDE_SCRIPT = """({ selectors, excludes, mode }) => {
    const isExcluded = (el) => excludes.some(
        (ex) => el.matches(ex) || el.querySelector(ex) !== null
    );
    const hidden = new Set();
    for (const selector of selectors) {
        for (const el of document.querySelectorAll(selector)) {
            if (!(el instanceof HTMLElement) || isExcluded(el)) continue;
            if (mode === 'visibility') {
                el.style.setProperty('visibility', 'hidden', 'important');
            } else {
                el.style.setProperty('display', 'none', 'important');
            }
            hidden.add(el);
        }
    }
    return hidden.size;
}"""


def merge_hide_selectors(*selector_lists: Iterable[str] | None) -> list[str]:
    """Ordered union of selector lists, duplicates and blanks dropped."""
    merged: list[str] = []
    seen: set[str] = set()
    for selectors in selector_lists:
        for selector in selectors or ():
            selector = selector.strip()
            if selector and selector not in seen:
                seen.add(selector)
                merged.append(selector)
    return merged


async def hide_elements(
    page: Page,
    selectors: Sequence[str],
    mode: str = "display",
    excludes: Sequence[str] = (),
) -> int:
    """Hide every element matching ``selectors`` except excluded ones.

    Re-applying the same list hides the same set. Returns how many
    elements matched and were hidden.
    """
    selectors = merge_hide_selectors(selectors)
    if not selectors:
        return 0
    count = await page.evaluate(
        HIDE_SCRIPT,
        {"selectors": selectors, "excludes": list(excludes), "mode": mode},
    )
    logger.debug("Force-hid %s element(s) for %d selector(s)", count, len(selectors))
    return count
