"""Tests for check descriptors built from suite configuration."""

from unittest.mock import AsyncMock, patch

import pytest

from snap_ui.executor.checks import (
    VisualCheck,
    build_all_checks,
    build_checks,
    build_suite_checks,
    filter_checks,
)


class TestBuildChecks:
    """Tests for build_checks."""

    def test_one_check_per_component(self, home_page):
        checks = build_checks([home_page])
        assert [c.component.id for c in checks] == ["hero", "footer"]
        assert all(isinstance(c, VisualCheck) for c in checks)

    def test_regression_names(self, home_page):
        checks = build_checks([home_page], mode="regression")
        assert [c.name for c in checks] == ["Hero Banner", "Footer"]
        assert {c.mode for c in checks} == {"regression"}

    def test_baseline_names(self, home_page):
        checks = build_checks([home_page], mode="baseline")
        assert [c.name for c in checks] == ["Hero Banner - Baseline", "Footer - Baseline"]

    def test_tags_merge_component_and_page(self, home_page):
        hero = build_checks([home_page])[0]
        assert hero.tags == ["@home", "@home-hero-banner", "@snap-ui", "@home-visual"]

    def test_page_details_carried(self, home_page):
        hero = build_checks([home_page])[0]
        assert hero.page == "home"
        assert hero.url == "https://example.com"
        assert hero.group == "home"

    def test_no_pages_no_checks(self):
        assert build_checks([]) == []

    def test_suite_checks_use_global_hides(self, suite):
        checks = build_suite_checks(suite, mode="baseline")
        assert len(checks) == 2
        assert checks[0].operation.args[2] == ["#onetrust-consent-sdk", ".chat-widget"]

    def test_all_checks_cover_both_modes(self, home_page):
        checks = build_all_checks([home_page])
        assert [c.mode for c in checks] == ["baseline", "baseline", "regression", "regression"]


class TestCheckOperation:
    """Tests for the bound check operation."""

    @pytest.mark.asyncio
    async def test_regression_operation_calls_pipeline(self, suite, settings):
        page = AsyncMock()
        with patch("snap_ui.executor.checks.run_regression", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = "ok"
            check = build_suite_checks(suite)[0]

        result = await check.operation(page, "mobile", settings=settings)

        assert result == "ok"
        mock_run.assert_awaited_once_with(
            page, check.component, suite.force_hide_selectors, "mobile", settings=settings,
        )

    @pytest.mark.asyncio
    async def test_variant_defaults_to_empty(self, home_page):
        page = AsyncMock()
        with patch("snap_ui.executor.checks.generate_baseline", new_callable=AsyncMock) as mock_gen:
            check = build_checks([home_page], mode="baseline")[0]

        await check.operation(page)

        mock_gen.assert_awaited_once_with(page, check.component, [], "")

    @pytest.mark.asyncio
    async def test_modes_bind_their_pipeline(self, home_page):
        from snap_ui.executor.operations import generate_baseline, run_regression

        baseline = build_checks([home_page], mode="baseline")[0]
        regression = build_checks([home_page], mode="regression")[0]
        assert baseline.operation.args[0] is generate_baseline
        assert regression.operation.args[0] is run_regression


class TestFilterChecks:
    """Tests for tag and group selection."""

    def test_no_filter_keeps_everything(self, home_page):
        checks = build_checks([home_page])
        assert filter_checks(checks) == checks

    def test_filter_by_tag(self, home_page):
        checks = build_checks([home_page])
        selected = filter_checks(checks, tags=["@home-footer"])
        assert [c.component.id for c in selected] == ["footer"]

    def test_page_tag_selects_all_components(self, home_page):
        checks = build_checks([home_page])
        assert len(filter_checks(checks, tags=["@home-visual"])) == 2

    def test_filter_by_group(self, home_page):
        checks = build_checks([home_page])
        assert filter_checks(checks, groups=["checkout"]) == []
        assert len(filter_checks(checks, groups=["home"])) == 2

    def test_tag_and_group_both_apply(self, home_page):
        checks = build_checks([home_page])
        selected = filter_checks(checks, tags=["@home-hero-banner"], groups=["home"])
        assert [c.component.id for c in selected] == ["hero"]
