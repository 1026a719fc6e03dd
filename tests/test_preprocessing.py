import numpy as np
import pytest

from digitshape.models import InvalidInputError
from digitshape.preprocessing import binarize, to_grayscale_float


def test_uint8_is_scaled_to_unit_range():
    img = np.array([[0, 255], [51, 102]], dtype=np.uint8)
    gray = to_grayscale_float(img)
    assert gray.dtype == np.float64
    assert gray.min() == 0.0
    assert gray.max() == 1.0


def test_binarize_fixed_threshold():
    img = np.array([[0, 40], [60, 255]], dtype=np.uint8)
    np.testing.assert_array_equal(binarize(img, 0.2), [[False, False], [True, True]])


def test_binarize_float_image():
    img = np.array([[0.1, 0.2], [0.21, 0.9]])
    np.testing.assert_array_equal(binarize(img, 0.2), [[False, False], [True, True]])


def test_single_channel_axis_is_squeezed():
    img = np.zeros((5, 5, 1), dtype=np.uint8)
    img[2, 2, 0] = 200
    binary = binarize(img)
    assert binary.shape == (5, 5)
    assert binary.sum() == 1


def test_binarize_otsu():
    img = np.full((10, 10), 20, dtype=np.uint8)
    img[3:7, 3:7] = 230
    binary = binarize(img, "otsu")
    assert binary.sum() == 16
    assert binary[3:7, 3:7].all()


def test_otsu_on_constant_image_is_empty():
    img = np.full((6, 6), 128, dtype=np.uint8)
    assert not binarize(img, "otsu").any()


@pytest.mark.parametrize("threshold", [-0.1, 1.5, "mean"])
def test_invalid_threshold(threshold):
    with pytest.raises(ValueError):
        binarize(np.zeros((3, 3), dtype=np.uint8), threshold)


@pytest.mark.parametrize("image", [
    np.zeros((4, 4, 3), dtype=np.uint8),
    np.zeros(7, dtype=np.uint8),
    np.array([["x"]]),
])
def test_malformed_grayscale(image):
    with pytest.raises(InvalidInputError):
        binarize(image)
