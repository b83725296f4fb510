"""Configuration models for visual regression suites."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Component ids and variant names end up in artifact file names.
SAFE_NAME = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


def is_safe_name(value: str) -> bool:
    return SAFE_NAME.fullmatch(value) is not None


def check_unique_viewport_names(viewports: Iterable["ViewportConfig"]) -> None:
    """Viewport names become artifact variants, so two with one name would share files."""
    seen: set[str] = set()
    for viewport in viewports:
        if viewport.name in seen:
            raise ValueError(f"Duplicate viewport name '{viewport.name}'")
        seen.add(viewport.name)


PreConditionHook = Callable[[Any], Awaitable[None]]


class ViewportConfig(BaseModel):
    width: int = 1280
    height: int = 720
    name: str = "desktop"

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not is_safe_name(v):
            raise ValueError(f"Viewport name '{v}' is not usable in a file name")
        return v


class ForceHideConfig(BaseModel):
    type: Literal["display", "visibility"] = "display"
    selectors: list[str] = Field(default_factory=list)
    excludes: list[str] = Field(default_factory=list)


class ComponentConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    id: str
    selector: str
    group: str = ""
    tags: list[str] = Field(default_factory=list)
    force_hide: Optional[ForceHideConfig] = None
    # Awaited with the live page after stabilization, before hides are applied
    pre_conditions: Optional[PreConditionHook] = Field(default=None, exclude=True)
    viewport: Optional[ViewportConfig] = None
    threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    @field_validator("id")
    @classmethod
    def check_id(cls, v: str) -> str:
        if not is_safe_name(v):
            raise ValueError(f"Component id '{v}' is not usable in a file name")
        return v

    @field_validator("selector")
    @classmethod
    def check_selector(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Component selector must not be empty")
        return v


class PageConfig(BaseModel):
    page: str
    url: str
    tags: list[str] = Field(default_factory=list)
    components: list[ComponentConfig] = Field(default_factory=list)


class SuiteConfig(BaseModel):
    pages: list[PageConfig] = Field(default_factory=list)
    force_hide_selectors: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_ids(self) -> "SuiteConfig":
        seen: set[str] = set()
        for page in self.pages:
            for component in page.components:
                if component.id in seen:
                    raise ValueError(f"Duplicate component id '{component.id}'")
                seen.add(component.id)
        return self

    def find_page(self, name: str) -> PageConfig | None:
        return next((p for p in self.pages if p.page == name), None)

    @classmethod
    def load(cls, path: str | Path) -> "SuiteConfig":
        """Load a suite from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Suite config not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save the suite to a JSON file. Precondition hooks are not persisted."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)


class VisualSettings(BaseModel):
    # Artifacts
    screenshots_dir: str = "screenshots"

    # Comparison
    threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    include_aa: bool = False
    diff_blend_alpha: float = Field(default=0.2, ge=0.0, le=1.0)

    # Stabilization timings (milliseconds)
    load_timeout_ms: int = 30000
    network_idle_timeout_ms: int = 5000
    lazy_load_settle_ms: int = 1000
    element_timeout_ms: int = 15000
    animation_settle_ms: int = 1000
    final_settle_ms: int = 500
    capture_timeout_ms: int = 30000

    # Execution
    viewports: list[ViewportConfig] = Field(
        default_factory=lambda: [ViewportConfig(width=1280, height=720, name="desktop")]
    )
    max_parallel_contexts: int = 3
    headless: bool = True
    url_override: Optional[str] = None

    # Reporting
    report_output_dir: str = "./visual-reports"

    @field_validator("viewports")
    @classmethod
    def check_unique_viewports(cls, v: list[ViewportConfig]) -> list[ViewportConfig]:
        check_unique_viewport_names(v)
        return v

    @field_validator("url_override", mode="before")
    @classmethod
    def resolve_env_url(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and v.startswith("env:"):
            # An unset variable means "use each page's own url"
            return os.environ.get(v[4:]) or None
        return v

    @classmethod
    def load(cls, path: str | Path) -> "VisualSettings":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)


def _slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


def page_tags(brand_tag: str, page_name: str) -> list[str]:
    """Standard tag set for a page's visual checks."""
    return [
        brand_tag,
        f"@{page_name}",
        f"@{page_name}-regression",
        f"@{page_name}-visual",
        "@visual-regression",
    ]


def component_tags(brand_tag: str, group_name: str, component_name: str) -> list[str]:
    """Standard tag set for a single component's visual checks."""
    base_name = _slug(component_name)
    return [
        brand_tag,
        f"@{group_name}",
        f"@{group_name}-{base_name}",
        f"@{base_name}",
        "@component-visual",
    ]
