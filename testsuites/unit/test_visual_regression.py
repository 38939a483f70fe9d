import io
import warnings
from datetime import datetime

import pytest
from PIL import Image

from testsuites.ui_testing.framework.directory_manager import DirectoryManager
from testsuites.ui_testing.framework.image_compare import DimensionMismatchError
from testsuites.ui_testing.framework.settings import VisualTestSettings
from testsuites.ui_testing.framework.visual_regression import (
    BaselineCreatedWarning,
    BaselineStore,
    InvalidCaptureRegionError,
    MissingBaselineError,
    Rect,
    VisualCheckpoint,
    VisualMismatchError,
    VisualRegressionEngine,
    sanitize_filename,
)


FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 678000)
STAMP = "2024-01-02_03-04-05-678"
TEST_NAME = "TestInventory.test_visual"


class FakeFrameCapture:
    def __init__(self, image, bounds=None):
        self.image = image
        self.bounds = bounds or {}

    def capture_surface(self):
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()

    def element_bounds(self, element):
        return self.bounds[element]


def white(size=(100, 100)):
    return Image.new("RGB", size, "white")


def with_black_block(width, height, size=(100, 100)):
    image = white(size)
    image.paste((0, 0, 0), (0, 0, width, height))
    return image


def make_engine(tmp_path, image, bounds=None, **overrides):
    options = {
        "baseline_directory": "baselines",
        "auto_create_baseline_if_missing": True,
        "warn_on_automatic_baseline_creation": True,
        "default_comparison_tolerance_percent": 0.5,
    }
    options.update(overrides)
    capture = FakeFrameCapture(image, bounds)
    engine = VisualRegressionEngine(
        capture,
        DirectoryManager(tmp_path),
        VisualTestSettings(**options),
        clock=lambda: FIXED_NOW,
    )
    return engine, capture


def store_baseline(engine, identifier, image, browser="chromium"):
    checkpoint = VisualCheckpoint(identifier, TEST_NAME, browser)
    path = engine.baselines.path_for(checkpoint)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    return path


def actual_path(tmp_path, identifier, browser="chromium"):
    return (
        tmp_path / "test_output" / "screenshots" / TEST_NAME / "VisualActuals"
        / browser / f"{identifier}_actual_{STAMP}.png"
    )


def test_missing_baseline_is_created_with_warning(tmp_path):
    engine, _ = make_engine(tmp_path, white())

    with pytest.warns(BaselineCreatedWarning):
        result = engine.assert_match("inventory", TEST_NAME, "chromium")

    baseline = tmp_path / "baselines" / "chromium" / TEST_NAME / "inventory.png"
    actual = actual_path(tmp_path, "inventory")
    assert result is None
    assert baseline.read_bytes() == actual.read_bytes()


def test_baseline_creation_can_be_silent(tmp_path):
    engine, _ = make_engine(tmp_path, white(), warn_on_automatic_baseline_creation=False)

    with warnings.catch_warnings():
        warnings.simplefilter("error", BaselineCreatedWarning)
        engine.assert_match("inventory", TEST_NAME, "chromium")

    assert (tmp_path / "baselines" / "chromium" / TEST_NAME / "inventory.png").is_file()


def test_missing_baseline_fails_when_auto_create_disabled(tmp_path):
    engine, _ = make_engine(tmp_path, white(), auto_create_baseline_if_missing=False)

    with pytest.raises(MissingBaselineError) as excinfo:
        engine.assert_match("inventory", TEST_NAME, "chromium")

    assert not excinfo.value.baseline_path.exists()
    assert isinstance(excinfo.value, AssertionError)


def test_identical_capture_passes_without_diff(tmp_path):
    engine, _ = make_engine(tmp_path, white())
    store_baseline(engine, "inventory", white())

    result = engine.assert_match("inventory", TEST_NAME, "chromium")

    assert result.identical
    assert result.pixel_error_percentage == 0.0
    diff_dir = tmp_path / "test_output" / "screenshots" / TEST_NAME / "VisualDiffs" / "chromium"
    assert list(diff_dir.glob("*.png")) == []


def test_difference_within_tolerance_passes(tmp_path):
    engine, _ = make_engine(tmp_path, with_black_block(4, 5))
    store_baseline(engine, "inventory", white())

    result = engine.assert_match("inventory", TEST_NAME, "chromium")

    assert result.pixel_error_count == 20
    assert result.pixel_error_percentage == pytest.approx(0.2)
    diff = tmp_path / "test_output" / "screenshots" / TEST_NAME / "VisualDiffs" / "chromium"
    assert not (diff / f"inventory_diff_{STAMP}.png").exists()


def test_difference_over_tolerance_raises_with_diff_image(tmp_path):
    engine, _ = make_engine(tmp_path, with_black_block(10, 10))
    store_baseline(engine, "inventory", white())

    with pytest.raises(VisualMismatchError) as excinfo:
        engine.assert_match("inventory", TEST_NAME, "chromium")

    error = excinfo.value
    assert error.pixel_error_percentage == pytest.approx(1.0)
    assert error.tolerance_percent == 0.5
    assert "Pixel error 1% exceeded tolerance 0.5%" in str(error)
    assert error.diff_path.name == f"inventory_diff_{STAMP}.png"
    with Image.open(error.diff_path) as diff:
        assert diff.convert("RGB").getpixel((0, 0)) == (255, 0, 0)
        assert diff.convert("RGB").getpixel((50, 50)) != (255, 0, 0)


def test_single_pixel_mismatch_message_shows_nonzero_error(tmp_path):
    actual = white((1920, 1080))
    actual.putpixel((0, 0), (0, 0, 0))
    engine, _ = make_engine(tmp_path, actual, default_comparison_tolerance_percent=0.0)
    store_baseline(engine, "inventory", white((1920, 1080)))

    with pytest.raises(VisualMismatchError) as excinfo:
        engine.assert_match("inventory", TEST_NAME, "chromium")

    message = str(excinfo.value)
    assert "Pixel error 4.823e-05% exceeded tolerance 0%" in message
    assert "(1/2073600 pixels)" in message


def test_per_checkpoint_tolerance_overrides_default(tmp_path):
    engine, _ = make_engine(tmp_path, with_black_block(10, 10))
    store_baseline(engine, "inventory", white())

    result = engine.assert_match("inventory", TEST_NAME, "chromium", tolerance_percent=2.0)

    assert result.pixel_error_percentage == pytest.approx(1.0)


def test_dimension_mismatch_is_reported(tmp_path):
    engine, _ = make_engine(tmp_path, white())
    store_baseline(engine, "inventory", white((50, 50)))

    with pytest.raises(DimensionMismatchError) as excinfo:
        engine.assert_match("inventory", TEST_NAME, "chromium")

    assert excinfo.value.actual_size == (100, 100)
    assert excinfo.value.baseline_size == (50, 50)


@pytest.mark.parametrize("tolerance", [-1, 100.5, 150])
def test_invalid_tolerance_is_rejected(tmp_path, tolerance):
    engine, _ = make_engine(tmp_path, white())

    with pytest.raises(ValueError):
        engine.assert_match("inventory", TEST_NAME, "chromium", tolerance_percent=tolerance)


@pytest.mark.parametrize(
    "crop,expected_size",
    [
        (Rect(10, 10, 30, 20), (30, 20)),
        (Rect(90, 90, 50, 50), (10, 10)),
        (Rect(-5, 0, 10, 100), (5, 100)),
    ],
)
def test_crop_area_is_clipped_to_surface(tmp_path, crop, expected_size):
    engine, _ = make_engine(tmp_path, white(), warn_on_automatic_baseline_creation=False)

    engine.assert_match("header", TEST_NAME, "chromium", crop_area=crop)

    with Image.open(actual_path(tmp_path, "header")) as image:
        assert image.size == expected_size


def test_crop_outside_surface_is_rejected(tmp_path):
    engine, _ = make_engine(tmp_path, white())

    with pytest.raises(InvalidCaptureRegionError):
        engine.assert_match("header", TEST_NAME, "chromium", crop_area=Rect(200, 200, 10, 10))

    assert not (tmp_path / "baselines" / "chromium" / TEST_NAME / "header.png").exists()


def test_element_wins_over_crop_area(tmp_path):
    engine, _ = make_engine(
        tmp_path,
        white(),
        bounds={"#logo": Rect(5, 5, 20, 10)},
        warn_on_automatic_baseline_creation=False,
    )

    engine.assert_match("logo", TEST_NAME, "chromium", element="#logo", crop_area=Rect(0, 0, 50, 50))

    with Image.open(actual_path(tmp_path, "logo")) as image:
        assert image.size == (20, 10)


def test_baselines_are_namespaced_by_browser(tmp_path):
    engine, _ = make_engine(tmp_path, white(), warn_on_automatic_baseline_creation=False)

    engine.assert_match("inventory", TEST_NAME, "chromium")
    engine.assert_match("inventory", TEST_NAME, "firefox")

    assert (tmp_path / "baselines" / "chromium" / TEST_NAME / "inventory.png").is_file()
    assert (tmp_path / "baselines" / "firefox" / TEST_NAME / "inventory.png").is_file()


def test_existing_baseline_is_never_replaced(tmp_path):
    engine, capture = make_engine(tmp_path, white())
    baseline = store_baseline(engine, "inventory", white())
    original = baseline.read_bytes()
    capture.image = with_black_block(2, 2)

    engine.assert_match("inventory", TEST_NAME, "chromium")

    assert baseline.read_bytes() == original


def test_store_refuses_to_overwrite(tmp_path):
    store = BaselineStore(tmp_path)
    checkpoint = VisualCheckpoint("inventory", TEST_NAME, "chromium")
    source = tmp_path / "source.png"
    white().save(source)

    store.create_from(checkpoint, source)

    with pytest.raises(FileExistsError):
        store.create_from(checkpoint, source)


@pytest.mark.parametrize("identifier", ["", "   "])
def test_blank_identifier_is_rejected(identifier):
    with pytest.raises(ValueError):
        VisualCheckpoint(identifier, TEST_NAME, "chromium")


def test_checkpoint_key_is_sanitized():
    checkpoint = VisualCheckpoint("cart: badge?", "Test/cart", "chromium")

    assert checkpoint.baseline_key == ("chromium", "Test_cart", "cart_ badge_")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("a<>:b", "a_b"),
        ("name...", "name_"),
        ("x?..", "x_"),
        ("***", "_"),
        ("", "_"),
        ("..", "_"),
        ("tab\there", "tab_here"),
        ("Inventory.Page_1", "Inventory.Page_1"),
    ],
)
def test_sanitize_filename(raw, expected):
    assert sanitize_filename(raw) == expected


def test_rect_intersection():
    surface = Rect(0, 0, 100, 100)

    assert Rect(90, 80, 50, 50).intersect(surface) == Rect(90, 80, 10, 20)
    assert Rect(150, 0, 10, 10).intersect(surface).is_empty
    assert Rect(10, 20, 30, 40).as_box() == (10, 20, 40, 60)
