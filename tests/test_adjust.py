import numpy as np
import pytest

from imagealbum.adjust import (
    Adjustments,
    adjust_brightness_contrast,
    adjust_clarity,
    adjust_exposure,
    adjust_saturation,
    adjust_temperature,
    apply_adjustments,
    gaussian_blur,
    hsv_to_rgb,
    rgb_to_hsv,
    sharpen,
)


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(12, 9, 3), dtype=np.uint8)


def _solid(color, shape=(5, 6)):
    image = np.zeros(shape + (3,), dtype=np.uint8)
    image[...] = color
    return image


def test_adjustments_identity_flag():
    assert Adjustments().is_identity()
    assert not Adjustments(sharpen=1).is_identity()


def test_identity_pipeline_returns_equal_copy(random_image):
    original = random_image.copy()
    for order in (True, False):
        result = apply_adjustments(random_image, Adjustments(), order)
        assert np.array_equal(result, original)
        assert result is not random_image
    assert np.array_equal(random_image, original)


def test_brightness_offsets_unsaturated_pixels():
    image = _solid((10, 100, 200))
    result = adjust_brightness_contrast(image, 40, 0)
    delta = result.astype(int) - image.astype(int)
    assert (delta == 40).all()


def test_brightness_saturates_at_limits():
    image = _solid((250, 5, 128))
    bright = adjust_brightness_contrast(image, 100, 0)
    dark = adjust_brightness_contrast(image, -100, 0)
    assert bright[..., 0].max() == 255
    assert dark[..., 1].min() == 0


def test_contrast_minus_100_gives_black(random_image):
    result = adjust_brightness_contrast(random_image, 0, -100)
    assert not result.any()


def test_exposure_zero_is_copy(random_image):
    result = adjust_exposure(random_image, 0)
    assert np.array_equal(result, random_image)


def test_exposure_monotonic(random_image):
    brighter = adjust_exposure(random_image, 50)
    darker = adjust_exposure(random_image, -50)
    assert (brighter >= random_image).all()
    assert (darker <= random_image).all()


def test_hsv_of_primaries():
    image = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.uint8)
    hsv = rgb_to_hsv(image)
    assert hsv[0, :, 0].tolist() == [0, 60, 120]
    assert (hsv[..., 1] == 255).all()
    assert (hsv[..., 2] == 255).all()


def test_hsv_round_trip_is_close(random_image):
    back = hsv_to_rgb(rgb_to_hsv(random_image))
    diff = np.abs(back.astype(int) - random_image.astype(int))
    assert diff.max() <= 3


def test_grey_has_zero_saturation():
    hsv = rgb_to_hsv(_solid((77, 77, 77)))
    assert (hsv[..., 1] == 0).all()
    assert (hsv[..., 2] == 77).all()


def test_full_desaturation_gives_grey(random_image):
    result = adjust_saturation(random_image, -100)
    assert (result[..., 0] == result[..., 1]).all()
    assert (result[..., 1] == result[..., 2]).all()


def test_saturation_zero_is_copy(random_image):
    assert np.array_equal(adjust_saturation(random_image, 0), random_image)


def test_temperature_warms_and_cools():
    image = _solid((100, 100, 100))
    warm = adjust_temperature(image, 20)
    assert (warm[..., 0] > image[..., 0]).all()
    assert (warm[..., 1] == image[..., 1]).all()
    assert (warm[..., 2] < image[..., 2]).all()
    cool = adjust_temperature(image, -20)
    assert (cool[..., 0] < image[..., 0]).all()
    assert (cool[..., 2] > image[..., 2]).all()


def test_blur_keeps_constant_image():
    image = _solid((33, 66, 99), shape=(10, 10))
    assert np.array_equal(gaussian_blur(image, 1.0), image)


def test_blur_reduces_variation(random_image):
    blurred = gaussian_blur(random_image, 1.0)
    assert blurred.shape == random_image.shape
    assert blurred.astype(float).std() < random_image.astype(float).std()


def test_blur_rejects_bad_sigma(random_image):
    with pytest.raises(ValueError):
        gaussian_blur(random_image, 0)


def test_clarity_and_sharpen_keep_constant_image():
    image = _solid((120, 40, 200), shape=(8, 8))
    assert np.array_equal(adjust_clarity(image, 60), image)
    assert np.array_equal(sharpen(image), image)


def test_sharpen_increases_edge_contrast():
    image = np.zeros((6, 6, 3), dtype=np.uint8)
    image[:, 3:] = 100
    result = sharpen(image)
    assert result[2, 3, 0] > 100
    assert result[2, 2, 0] == 0


def test_pipeline_matches_single_steps(random_image):
    single = apply_adjustments(random_image, Adjustments(temperature=15))
    assert np.array_equal(single, adjust_temperature(random_image, 15))
    only_sharp = apply_adjustments(random_image, Adjustments(sharpen=30))
    assert np.array_equal(only_sharp, sharpen(random_image))


def test_pipeline_order_flag(random_image):
    settings = Adjustments(saturation=40, exposure=30)
    saved = apply_adjustments(random_image, settings, False)
    shown = apply_adjustments(random_image, settings, True)
    assert np.array_equal(
        saved, adjust_saturation(adjust_exposure(random_image, 30), 40)
    )
    assert np.array_equal(
        shown, adjust_exposure(adjust_saturation(random_image, 40), 30)
    )


@pytest.mark.parametrize(
    "bad",
    [
        np.zeros((4, 4), dtype=np.uint8),
        np.zeros((4, 4, 4), dtype=np.uint8),
        np.zeros((4, 4, 3), dtype=np.float32),
    ],
)
def test_invalid_images_rejected(bad):
    with pytest.raises(ValueError):
        apply_adjustments(bad, Adjustments())


def test_non_array_rejected():
    with pytest.raises(TypeError):
        sharpen([[1, 2, 3]])