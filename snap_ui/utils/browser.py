"""Browser utilities — launch Chromium and create contexts tuned for repeatable captures."""

from __future__ import annotations

from playwright.async_api import Browser, BrowserContext, Playwright

_DETERMINISM_INIT_SCRIPT = """
// Media added after load must not start playing either
HTMLMediaElement.prototype.play = function () {
    this.muted = true;
    return Promise.resolve();
};

// Blinking carets show up as one-pixel diffs
document.addEventListener('DOMContentLoaded', () => {
    const style = document.createElement('style');
    style.textContent = '*, *::before, *::after { caret-color: transparent !important; }';
    document.head.appendChild(style);
});
"""


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch Chromium with flags that keep rendering stable across runs."""
    return await playwright.chromium.launch(
        headless=headless,
        args=[
            "--font-render-hinting=none",
            "--disable-skia-runtime-opts",
            "--force-color-profile=srgb",
        ],
    )


async def create_visual_context(browser: Browser, viewport: dict) -> BrowserContext:
    """Create a browser context with a fixed locale, timezone, scale and motion preference."""
    context = await browser.new_context(
        viewport=viewport,
        device_scale_factor=1,
        locale="en-US",
        timezone_id="America/New_York",
        reduced_motion="reduce",
    )
    await context.add_init_script(_DETERMINISM_INIT_SCRIPT)
    return context
