"""
================================================================================
Visual Regression Engine
================================================================================

Captures a rendered surface, compares it with an approved baseline image and
manages the baseline lifecycle.

Verdicts:
    - pass:     pixel error percentage within tolerance (no diff written)
    - mismatch: VisualMismatchError with percentage, tolerance and diff path
    - missing:  MissingBaselineError when auto-creation is disabled
    - warning:  BaselineCreatedWarning after a baseline was auto-created

Artifact layout:
    {project}/{baseline_directory}/{browser}/{test}/{identifier}.png
    {screenshots}/{test}/VisualActuals/{browser}/{identifier}_actual_{timestamp}.png
    {screenshots}/{test}/VisualDiffs/{browser}/{identifier}_diff_{timestamp}.png

Example:
    engine = VisualRegressionEngine(PlaywrightFrameCapture(page), DirectoryManager(),
                                    VisualTestSettings.load())
    engine.assert_match("inventory_page", "test_visual_user_inventory", "chromium")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import io
import re
import shutil
import warnings
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Tuple, runtime_checkable

from loguru import logger
from PIL import Image

from autotest_tools.report_tools.allure_utils import attach_image_file, attach_json
from testsuites.ui_testing.framework.directory_manager import DirectoryManager
from testsuites.ui_testing.framework.image_compare import (
    ComparisonResult,
    DimensionMismatchError,
    ImageComparisonError,
    VisualAssertionError,
    compare_images,
    create_diff_mask,
)
from testsuites.ui_testing.framework.settings import VisualTestSettings


# ================================================================================
# Verdicts
# ================================================================================

class MissingBaselineError(VisualAssertionError):
    """No baseline exists and auto-creation is disabled."""

    def __init__(self, identifier: str, baseline_path: Path):
        self.identifier = identifier
        self.baseline_path = baseline_path
        super().__init__(
            f"Visual baseline missing for '{identifier}' at '{baseline_path}' "
            f"and auto-creation is disabled."
        )


class VisualMismatchError(VisualAssertionError):
    """Pixel error percentage exceeded the tolerance."""

    def __init__(
        self,
        identifier: str,
        result: ComparisonResult,
        tolerance_percent: float,
        diff_path: Path,
    ):
        self.identifier = identifier
        self.result = result
        self.pixel_error_percentage = result.pixel_error_percentage
        self.tolerance_percent = tolerance_percent
        self.diff_path = diff_path
        super().__init__(
            f"Visual mismatch for '{identifier}'. Pixel error "
            f"{result.pixel_error_percentage:.4g}% exceeded tolerance {tolerance_percent:.4g}% "
            f"({result.pixel_error_count}/{result.total_pixels} pixels). Diff image: {diff_path}"
        )


class InvalidCaptureRegionError(ValueError):
    """A capture region does not overlap the rendered surface."""
    pass


class BaselineCreatedWarning(UserWarning):
    """A new baseline was stored; review and commit it if correct."""
    pass


# ================================================================================
# Data Model
# ================================================================================

_INVALID_FILENAME_CHARS = '<>:"/\\\\|?*\\x00-\\x1f'
_SANITIZE_PATTERN = re.compile(
    rf"([{_INVALID_FILENAME_CHARS}]*\.+$)|([{_INVALID_FILENAME_CHARS}]+)"
)


def sanitize_filename(name: str) -> str:
    """
    Make a free-form name safe as a single path segment.

    Each run of invalid characters becomes one "_", and so does a trailing
    run of dots together with any invalid characters before it.
    """
    sanitized = _SANITIZE_PATTERN.sub("_", name or "")
    return sanitized or "_"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in surface pixels."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersect(self, other: "Rect") -> "Rect":
        """Overlap of two rectangles; width or height is <= 0 when they do not overlap."""
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        return Rect(
            x=left,
            y=top,
            width=min(self.right, other.right) - left,
            height=min(self.bottom, other.bottom) - top,
        )

    def as_box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) as expected by Pillow's crop."""
        return self.x, self.y, self.right, self.bottom


@dataclass(frozen=True)
class VisualCheckpoint:
    """A named visual assertion scoped by test and browser."""
    identifier: str
    test_name: str
    browser_name: str
    tolerance_percent: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.identifier or not self.identifier.strip():
            raise ValueError("Visual checkpoint identifier cannot be empty.")
        if self.tolerance_percent is not None:
            validate_tolerance(self.tolerance_percent)

    @property
    def baseline_key(self) -> Tuple[str, str, str]:
        """Sanitized (browser, test, identifier) namespace of the baseline."""
        return (
            sanitize_filename(self.browser_name),
            sanitize_filename(self.test_name),
            sanitize_filename(self.identifier),
        )


@dataclass(frozen=True)
class CaptureSpec:
    """Which part of the surface to capture: all of it, an element, or a rectangle."""
    element: Any = None
    region: Optional[Rect] = None

    @classmethod
    def full_surface(cls) -> "CaptureSpec":
        return cls()

    @classmethod
    def of_element(cls, element: Any) -> "CaptureSpec":
        return cls(element=element)

    @classmethod
    def of_region(cls, region: Rect) -> "CaptureSpec":
        return cls(region=region)


@dataclass(frozen=True)
class CheckpointPaths:
    baseline: Path
    actual: Path
    diff: Path


def validate_tolerance(tolerance_percent: float) -> float:
    if not 0 <= tolerance_percent <= 100:
        raise ValueError(f"Tolerance must be between 0 and 100 percent, got {tolerance_percent}")
    return float(tolerance_percent)


# ================================================================================
# Collaborators
# ================================================================================

@runtime_checkable
class FrameCapture(Protocol):
    """Source of rendered frames."""

    def capture_surface(self) -> bytes:
        """PNG bytes of the whole rendered surface."""
        ...

    def element_bounds(self, element: Any) -> Rect:
        """Bounds of an element in surface pixels."""
        ...


class PlaywrightFrameCapture:
    """FrameCapture over a Playwright page (viewport screenshots)."""

    def __init__(self, page):
        self.page = page

    def capture_surface(self) -> bytes:
        return self.page.screenshot(type="png")

    def element_bounds(self, element: Any) -> Rect:
        locator = self.page.locator(element) if isinstance(element, str) else element
        box = locator.bounding_box()
        if box is None:
            raise InvalidCaptureRegionError(
                f"Element '{element}' is detached or not visible; it has no bounding box."
            )
        scale = self.page.evaluate("window.devicePixelRatio") or 1
        return Rect(
            x=round(box["x"] * scale),
            y=round(box["y"] * scale),
            width=round(box["width"] * scale),
            height=round(box["height"] * scale),
        )


class BaselineStore:
    """
    Baseline images namespaced by VisualCheckpoint.baseline_key.

    Baselines are only ever created, never overwritten or deleted here.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, checkpoint: VisualCheckpoint) -> Path:
        browser, test, identifier = checkpoint.baseline_key
        return self.root / browser / test / f"{identifier}.png"

    def exists(self, checkpoint: VisualCheckpoint) -> bool:
        return self.path_for(checkpoint).is_file()

    def create_from(self, checkpoint: VisualCheckpoint, source: Path) -> Path:
        """Copy ``source`` byte for byte as the new baseline."""
        target = self.path_for(checkpoint)
        if target.exists():
            raise FileExistsError(f"Baseline already exists: {target}")
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        return target


# ================================================================================
# Engine
# ================================================================================

class VisualRegressionEngine:
    """
    Compares captured frames against stored baselines.

    One engine per test; instances share no mutable state.
    """

    def __init__(
        self,
        frame_capture: FrameCapture,
        directory_manager: DirectoryManager,
        settings: VisualTestSettings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.frame_capture = frame_capture
        self.directory_manager = directory_manager
        self.settings = settings
        self.baselines = BaselineStore(directory_manager.resolve(settings.baseline_directory))
        self._clock = clock

        logger.info(
            f"VisualRegressionEngine initialized. Baseline dir: {self.baselines.root}, "
            f"auto-create: {settings.auto_create_baseline_if_missing}, "
            f"default tolerance: {settings.default_comparison_tolerance_percent}%"
        )

    def assert_match(
        self,
        identifier: str,
        test_name: str,
        browser_name: str,
        element: Any = None,
        crop_area: Optional[Rect] = None,
        tolerance_percent: Optional[float] = None,
    ) -> Optional[ComparisonResult]:
        """
        Capture and compare a checkpoint.

        When both ``element`` and ``crop_area`` are given, the element wins.
        Returns the comparison numbers, or None when a new baseline was created.
        """
        checkpoint = VisualCheckpoint(
            identifier=identifier,
            test_name=test_name,
            browser_name=browser_name,
            tolerance_percent=tolerance_percent,
        )
        if element is not None:
            capture = CaptureSpec.of_element(element)
        elif crop_area is not None:
            capture = CaptureSpec.of_region(crop_area)
        else:
            capture = CaptureSpec.full_surface()
        return self.assert_checkpoint(checkpoint, capture)

    def assert_checkpoint(
        self,
        checkpoint: VisualCheckpoint,
        capture: Optional[CaptureSpec] = None,
    ) -> Optional[ComparisonResult]:
        capture = capture or CaptureSpec.full_surface()
        tolerance = (
            checkpoint.tolerance_percent
            if checkpoint.tolerance_percent is not None
            else validate_tolerance(self.settings.default_comparison_tolerance_percent)
        )
        paths = self._prepare_paths(checkpoint)

        logger.info(
            f"Visual assertion '{checkpoint.identifier}' in '{checkpoint.test_name}' "
            f"({checkpoint.browser_name}). Baseline: {paths.baseline}, tolerance: {tolerance}%"
        )

        self._capture_actual(paths.actual, capture)
        attach_image_file(paths.actual, f"Actual - {checkpoint.identifier}")

        if not paths.baseline.is_file():
            self._handle_missing_baseline(checkpoint, paths)
            return None

        attach_image_file(paths.baseline, f"Baseline - {checkpoint.identifier}")
        try:
            result = compare_images(paths.actual, paths.baseline)
        except DimensionMismatchError as e:
            logger.error(f"Visual comparison for '{checkpoint.identifier}' failed: {e}")
            raise
        except ImageComparisonError as e:
            logger.error(
                f"Error comparing {paths.actual} with {paths.baseline} "
                f"for '{checkpoint.identifier}': {e}"
            )
            raise

        logger.info(
            f"Comparison for '{checkpoint.identifier}': pixel error "
            f"{result.pixel_error_percentage:.4g}% ({result.pixel_error_count} pixels), "
            f"absolute error {result.absolute_error}"
        )

        if result.pixel_error_percentage > tolerance:
            logger.warning(
                f"Visual mismatch detected for '{checkpoint.identifier}'. "
                f"Error: {result.pixel_error_percentage:.4g}%, tolerance: {tolerance}%"
            )
            create_diff_mask(paths.actual, paths.baseline, paths.diff)
            attach_image_file(paths.diff, f"Difference - {checkpoint.identifier}")
            attach_json(
                {**asdict(result), "tolerance_percent": tolerance},
                name=f"Comparison - {checkpoint.identifier}",
            )
            raise VisualMismatchError(checkpoint.identifier, result, tolerance, paths.diff)

        logger.info(
            f"Visual match for '{checkpoint.identifier}'. Error "
            f"{result.pixel_error_percentage:.4g}% within tolerance {tolerance}%"
        )
        return result

    # --------------------------------------------------------------------------
    # Steps
    # --------------------------------------------------------------------------

    def _timestamp(self) -> str:
        now = self._clock()
        return f"{now:%Y-%m-%d_%H-%M-%S}-{now.microsecond // 1000:03d}"

    def _prepare_paths(self, checkpoint: VisualCheckpoint) -> CheckpointPaths:
        browser, test, identifier = checkpoint.baseline_key
        baseline_path = self.baselines.path_for(checkpoint)

        test_dir = self.directory_manager.get_and_ensure_test_screenshot_dir(test)
        actual_dir = test_dir / "VisualActuals" / browser
        diff_dir = test_dir / "VisualDiffs" / browser
        stamp = self._timestamp()

        for path, description in (
            (baseline_path.parent, "Baseline folder"),
            (actual_dir, "Visual actuals folder"),
            (diff_dir, "Visual diffs folder"),
        ):
            DirectoryManager.ensure_directory(path, description)

        paths = CheckpointPaths(
            baseline=baseline_path,
            actual=actual_dir / f"{identifier}_actual_{stamp}.png",
            diff=diff_dir / f"{identifier}_diff_{stamp}.png",
        )
        logger.debug(f"Prepared paths: baseline={paths.baseline}, actual={paths.actual}, diff={paths.diff}")
        return paths

    def _capture_actual(self, actual_path: Path, capture: CaptureSpec) -> None:
        raw = self.frame_capture.capture_surface()
        try:
            image = Image.open(io.BytesIO(raw))
            image.load()
        except OSError as e:
            raise ImageComparisonError(f"Captured frame is not a readable image: {e}") from e

        surface = Rect(0, 0, image.width, image.height)
        logger.debug(f"Captured surface {image.width}x{image.height}")

        if capture.element is not None:
            requested = self.frame_capture.element_bounds(capture.element)
            source = f"element '{capture.element}'"
        elif capture.region is not None:
            requested = capture.region
            source = "crop area"
        else:
            requested = None
            source = "surface"

        if requested is not None:
            region = requested.intersect(surface)
            if region.is_empty:
                raise InvalidCaptureRegionError(
                    f"Capture region for {source} {requested} does not overlap the "
                    f"{image.width}x{image.height} surface."
                )
            image = image.crop(region.as_box())
            logger.debug(f"Cropped actual image to {source} bounds {region}")

        image.save(actual_path, format="PNG")
        logger.info(f"Actual image saved: {actual_path}")

    def _handle_missing_baseline(self, checkpoint: VisualCheckpoint, paths: CheckpointPaths) -> None:
        logger.warning(f"Baseline image not found: {paths.baseline}")

        if not self.settings.auto_create_baseline_if_missing:
            logger.error(f"Auto-creation disabled; '{checkpoint.identifier}' has no baseline")
            raise MissingBaselineError(checkpoint.identifier, paths.baseline)

        created = self.baselines.create_from(checkpoint, paths.actual)
        logger.info(f"New baseline image automatically created: {created}")
        attach_image_file(created, f"Baseline (NEW) - {checkpoint.identifier}")

        if self.settings.warn_on_automatic_baseline_creation:
            warnings.warn(
                f"New visual baseline created for '{checkpoint.identifier}' at '{created}'. "
                f"Review and commit it if correct.",
                BaselineCreatedWarning,
                stacklevel=3,
            )


__all__ = [
    "BaselineCreatedWarning",
    "BaselineStore",
    "CaptureSpec",
    "FrameCapture",
    "InvalidCaptureRegionError",
    "MissingBaselineError",
    "PlaywrightFrameCapture",
    "Rect",
    "VisualAssertionError",
    "VisualCheckpoint",
    "VisualMismatchError",
    "VisualRegressionEngine",
    "sanitize_filename",
]
