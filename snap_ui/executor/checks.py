"""Declarative visual check descriptors built from a suite configuration.

Each component yields one baseline check and one regression check. The
surrounding runner enumerates the descriptors and calls ``operation`` with
a live page, so nothing is registered as a side effect of importing config.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Awaitable, Callable, Iterable, Literal, Sequence

from snap_ui.executor.operations import generate_baseline, run_regression
from snap_ui.models.config import ComponentConfig, PageConfig, SuiteConfig

CheckMode = Literal["baseline", "regression"]
CheckOperation = Callable[..., Awaitable[Any]]


@dataclass
class VisualCheck:
    name: str
    mode: CheckMode
    page: str
    url: str
    component: ComponentConfig
    operation: CheckOperation
    tags: list[str] = field(default_factory=list)

    @property
    def group(self) -> str:
        return self.component.group


def _check_name(component: ComponentConfig, mode: CheckMode) -> str:
    if mode == "baseline":
        return f"{component.name} - Baseline"
    return component.name


def _merge_tags(*tag_lists: Iterable[str]) -> list[str]:
    merged: list[str] = []
    for tags in tag_lists:
        for tag in tags:
            if tag not in merged:
                merged.append(tag)
    return merged


def build_checks(
    pages: Sequence[PageConfig],
    global_force_hide: Sequence[str] = (),
    mode: CheckMode = "regression",
) -> list[VisualCheck]:
    """One check per component. ``operation(page, variant, *, store, settings)`` runs it."""
    pipeline = generate_baseline if mode == "baseline" else run_regression
    hides = list(global_force_hide)
    checks = []
    for page_config in pages:
        for component in page_config.components:
            checks.append(VisualCheck(
                name=_check_name(component, mode),
                mode=mode,
                page=page_config.page,
                url=page_config.url,
                component=component,
                operation=partial(_run_pipeline, pipeline, component, hides),
                tags=_merge_tags(component.tags, page_config.tags),
            ))
    return checks


async def _run_pipeline(pipeline, component, global_force_hide, page, variant="", **kwargs):
    return await pipeline(page, component, global_force_hide, variant, **kwargs)


def build_suite_checks(suite: SuiteConfig, mode: CheckMode = "regression") -> list[VisualCheck]:
    return build_checks(suite.pages, suite.force_hide_selectors, mode)


def build_all_checks(
    pages: Sequence[PageConfig], global_force_hide: Sequence[str] = (),
) -> list[VisualCheck]:
    """Baseline and regression checks for every component."""
    return (
        build_checks(pages, global_force_hide, "baseline")
        + build_checks(pages, global_force_hide, "regression")
    )


def filter_checks(
    checks: Iterable[VisualCheck],
    tags: Iterable[str] | None = None,
    groups: Iterable[str] | None = None,
) -> list[VisualCheck]:
    """Keep checks carrying any of ``tags`` and belonging to any of ``groups``."""
    wanted_tags = set(tags or ())
    wanted_groups = set(groups or ())
    selected = []
    for check in checks:
        if wanted_tags and not wanted_tags.intersection(check.tags):
            continue
        if wanted_groups and check.group not in wanted_groups:
            continue
        selected.append(check)
    return selected
