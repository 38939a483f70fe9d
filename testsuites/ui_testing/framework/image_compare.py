"""
================================================================================
Image Comparison
================================================================================

Pixel-by-pixel comparison of two PNG frames with Pillow.

A pixel counts as different when any RGB channel differs by more than
``pixel_threshold`` (0 = exact match required). Images must have identical
dimensions; a size difference is reported separately from a pixel mismatch.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from loguru import logger
from PIL import Image, ImageChops, ImageEnhance, ImageStat


PathLike = Union[str, Path]

DIFF_HIGHLIGHT_COLOR = (255, 0, 0)
DIFF_BACKGROUND_BRIGHTNESS = 0.35


class VisualAssertionError(AssertionError):
    """Base class for visual regression verdict failures."""
    pass


class ImageComparisonError(VisualAssertionError):
    """An image could not be loaded or compared."""
    pass


class DimensionMismatchError(ImageComparisonError):
    """Actual and baseline images differ in size."""

    def __init__(self, actual_size: Tuple[int, int], baseline_size: Tuple[int, int]):
        self.actual_size = actual_size
        self.baseline_size = baseline_size
        super().__init__(
            f"Image dimensions differ: actual {actual_size[0]}x{actual_size[1]}, "
            f"baseline {baseline_size[0]}x{baseline_size[1]}"
        )


@dataclass(frozen=True)
class ComparisonResult:
    """Numbers produced by comparing an actual frame with its baseline."""
    pixel_error_count: int
    pixel_error_percentage: float
    absolute_error: int
    mean_error: float
    total_pixels: int

    @property
    def identical(self) -> bool:
        return self.pixel_error_count == 0


def _load_rgb(path: PathLike, role: str) -> Image.Image:
    try:
        with Image.open(path) as img:
            return img.convert("RGB")
    except OSError as e:
        raise ImageComparisonError(f"Cannot read {role} image '{path}': {e}") from e


def _load_pair(actual_path: PathLike, baseline_path: PathLike) -> Tuple[Image.Image, Image.Image]:
    actual = _load_rgb(actual_path, "actual")
    baseline = _load_rgb(baseline_path, "baseline")
    if actual.size != baseline.size:
        raise DimensionMismatchError(actual.size, baseline.size)
    return actual, baseline


def _difference_mask(actual: Image.Image, baseline: Image.Image, pixel_threshold: int) -> Tuple[Image.Image, Image.Image]:
    """Return (channel difference image, single-band mask with 255 on differing pixels)."""
    difference = ImageChops.difference(actual, baseline)
    bands = [
        band.point(lambda v: 255 if v > pixel_threshold else 0)
        for band in difference.split()
    ]
    mask = bands[0]
    for band in bands[1:]:
        mask = ImageChops.lighter(mask, band)
    return difference, mask


def compare_images(
    actual_path: PathLike,
    baseline_path: PathLike,
    pixel_threshold: int = 0,
) -> ComparisonResult:
    """
    Compare two images pixel by pixel.

    Args:
        actual_path: Freshly captured image
        baseline_path: Approved reference image
        pixel_threshold: Per-channel delta ignored when counting differing pixels

    Returns:
        ComparisonResult

    Raises:
        DimensionMismatchError: If the sizes differ
        ImageComparisonError: If either file cannot be read
    """
    actual, baseline = _load_pair(actual_path, baseline_path)
    difference, mask = _difference_mask(actual, baseline, pixel_threshold)

    width, height = actual.size
    total_pixels = width * height
    error_count = total_pixels - mask.histogram()[0]
    absolute_error = int(sum(ImageStat.Stat(difference).sum))

    result = ComparisonResult(
        pixel_error_count=error_count,
        pixel_error_percentage=(error_count / total_pixels * 100.0) if total_pixels else 0.0,
        absolute_error=absolute_error,
        mean_error=(absolute_error / total_pixels) if total_pixels else 0.0,
        total_pixels=total_pixels,
    )

    logger.debug(
        f"Compared {actual_path} with {baseline_path}: "
        f"{result.pixel_error_count}/{total_pixels} pixels differ "
        f"({result.pixel_error_percentage:.4g}%), absolute error {result.absolute_error}"
    )
    return result


def create_diff_mask(
    actual_path: PathLike,
    baseline_path: PathLike,
    output_path: PathLike,
    pixel_threshold: int = 0,
) -> Path:
    """
    Write a PNG that paints differing pixels red over a dimmed copy of the actual image.

    Returns:
        Path of the written diff image
    """
    actual, baseline = _load_pair(actual_path, baseline_path)
    _, mask = _difference_mask(actual, baseline, pixel_threshold)

    diff_image = ImageEnhance.Brightness(actual).enhance(DIFF_BACKGROUND_BRIGHTNESS)
    diff_image.paste(DIFF_HIGHLIGHT_COLOR, mask=mask)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    diff_image.save(output_path, format="PNG")
    logger.debug(f"Diff mask written to {output_path}")
    return output_path


__all__ = [
    "ComparisonResult",
    "DimensionMismatchError",
    "ImageComparisonError",
    "VisualAssertionError",
    "compare_images",
    "create_diff_mask",
]
