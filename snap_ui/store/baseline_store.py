"""Baseline store: on-disk baseline, actual and diff artifacts keyed by component and variant."""

from __future__ import annotations

import hashlib
import io
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from snap_ui.errors import NoBaselineError
from snap_ui.models.config import is_safe_name
from snap_ui.models.results import BaselineEntry

logger = logging.getLogger(__name__)

BASELINE_DIR = "baseline"
ACTUAL_DIR = "actual"
DIFF_DIR = "diff"


@dataclass(frozen=True)
class VariantKey:
    component_id: str
    variant: str = ""

    def __post_init__(self) -> None:
        if not is_safe_name(self.component_id):
            raise ValueError(f"Component id '{self.component_id}' is not usable in a file name")
        if self.variant and not is_safe_name(self.variant):
            raise ValueError(f"Variant '{self.variant}' is not usable in a file name")

    @property
    def stem(self) -> str:
        if self.variant:
            return f"{self.component_id}-{self.variant}"
        return self.component_id


def _atomic_write(path: Path, data: bytes) -> None:
    """Write via a temp file in the same directory so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class BaselineStore:
    """Reads and writes artifacts under ``root/{baseline,actual,diff}/{stem}.png``."""

    def __init__(self, root: Path | str = "screenshots"):
        self.root = Path(root)

    def baseline_path(self, key: VariantKey) -> Path:
        return self.root / BASELINE_DIR / f"{key.stem}.png"

    def actual_path(self, key: VariantKey) -> Path:
        return self.root / ACTUAL_DIR / f"{key.stem}.png"

    def diff_path(self, key: VariantKey) -> Path:
        return self.root / DIFF_DIR / f"{key.stem}.png"

    def has_baseline(self, key: VariantKey) -> bool:
        return self.baseline_path(key).is_file()

    def store_baseline(self, key: VariantKey, image: bytes) -> BaselineEntry:
        """Write (or overwrite) the baseline for a key and describe what was stored."""
        # Undecodable bytes must never replace a good baseline
        with Image.open(io.BytesIO(image)) as img:
            width, height = img.size

        dest = self.baseline_path(key)
        _atomic_write(dest, image)

        entry = BaselineEntry(
            component_id=key.component_id,
            variant=key.variant,
            image_path=str(dest),
            width=width,
            height=height,
            image_hash=hashlib.sha256(image).hexdigest(),
            captured_at=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        )
        logger.info("Stored baseline for %s (%dx%d)", key.stem, width, height)
        return entry

    def load_baseline(self, key: VariantKey) -> bytes:
        path = self.baseline_path(key)
        if not path.is_file():
            raise NoBaselineError(key.component_id, path)
        return path.read_bytes()

    def store_actual(self, key: VariantKey, image: bytes) -> Path:
        path = self.actual_path(key)
        _atomic_write(path, image)
        logger.debug("Wrote actual capture %s", path)
        return path

    def store_diff(self, key: VariantKey, image: bytes) -> Path:
        path = self.diff_path(key)
        _atomic_write(path, image)
        logger.debug("Wrote diff image %s", path)
        return path

    def remove_diff(self, key: VariantKey) -> None:
        self.diff_path(key).unlink(missing_ok=True)

    def cleanup_artifacts(self, key: VariantKey) -> None:
        """Drop stale actual/diff files for a key that now passes."""
        for path in (self.actual_path(key), self.diff_path(key)):
            path.unlink(missing_ok=True)
