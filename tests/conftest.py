"""Pytest configuration and shared fixtures."""

import io
from typing import Callable, Optional
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image

from snap_ui.models.config import (
    ComponentConfig,
    ForceHideConfig,
    PageConfig,
    SuiteConfig,
    ViewportConfig,
    VisualSettings,
)
from snap_ui.store.baseline_store import BaselineStore

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def make_png(
    width: int = 100,
    height: int = 100,
    color: tuple = RED,
    patch: Optional[tuple[int, int, int, int]] = None,
    patch_color: tuple = BLUE,
) -> bytes:
    """Solid-colour PNG, optionally with a rectangular patch (x, y, w, h)."""
    img = Image.new("RGBA", (width, height), color)
    if patch:
        x, y, w, h = patch
        img.paste(Image.new("RGBA", (w, h), patch_color), (x, y))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    """Build PNG bytes on demand."""
    return make_png


@pytest.fixture
def red_png() -> bytes:
    return make_png()


@pytest.fixture
def red_png_with_blue_patch() -> bytes:
    return make_png(patch=(20, 30, 10, 10))


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings(tmp_path) -> VisualSettings:
    """Settings with zero settle delays and artifacts under tmp_path."""
    return VisualSettings(
        screenshots_dir=str(tmp_path / "screenshots"),
        lazy_load_settle_ms=0,
        animation_settle_ms=0,
        final_settle_ms=0,
        network_idle_timeout_ms=100,
        element_timeout_ms=100,
        report_output_dir=str(tmp_path / "reports"),
        max_parallel_contexts=2,
    )


@pytest.fixture
def store(settings: VisualSettings) -> BaselineStore:
    return BaselineStore(settings.screenshots_dir)


@pytest.fixture
def hero_component() -> ComponentConfig:
    return ComponentConfig(
        name="Hero Banner",
        id="hero",
        selector="section.hero",
        group="home",
        tags=["@home", "@home-hero-banner"],
        force_hide=ForceHideConfig(
            type="display",
            selectors=[".cookie-banner", ".notification-banner"],
            excludes=["#contact-us-button"],
        ),
    )


@pytest.fixture
def footer_component() -> ComponentConfig:
    return ComponentConfig(
        name="Footer",
        id="footer",
        selector="footer",
        group="home",
        tags=["@home", "@home-footer"],
    )


@pytest.fixture
def home_page(hero_component, footer_component) -> PageConfig:
    return PageConfig(
        page="home",
        url="https://example.com",
        tags=["@snap-ui", "@home-visual"],
        components=[hero_component, footer_component],
    )


@pytest.fixture
def suite(home_page) -> SuiteConfig:
    return SuiteConfig(
        pages=[home_page],
        force_hide_selectors=["#onetrust-consent-sdk", ".chat-widget"],
    )


@pytest.fixture
def mobile_viewport() -> ViewportConfig:
    return ViewportConfig(width=375, height=812, name="mobile")


# ============================================================================
# Page Fixtures
# ============================================================================


def make_mock_page(screenshot: bytes = b"", url: str = "https://example.com"):
    """AsyncMock page whose element locator returns ``screenshot``."""
    locator = AsyncMock()
    locator.screenshot = AsyncMock(return_value=screenshot)

    page = AsyncMock()
    page.url = url
    page.on = Mock()
    page.locator = Mock(return_value=locator)
    page.evaluate = AsyncMock(return_value=0)
    return page


@pytest.fixture
def mock_page_factory():
    return make_mock_page
