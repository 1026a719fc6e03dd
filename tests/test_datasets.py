import cv2
import numpy as np
import pytest

from digitshape.datasets import load_dataset, load_image_folder, load_npz, synthesize_digits


def test_synthesize_digits():
    images, labels = synthesize_digits(25)
    assert len(images) == 25
    assert labels == [i % 10 for i in range(25)]
    for img in images:
        assert img.shape == (28, 28)
        assert img.dtype == np.uint8
        assert img.max() > 0.2 * 255


def test_synthesize_is_deterministic():
    first, _ = synthesize_digits(10, seed=4)
    second, _ = synthesize_digits(10, seed=4)
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a, b)


def test_synthesize_negative_count():
    with pytest.raises(ValueError):
        synthesize_digits(-1)


def _write_folder(root):
    for label in (3, 7):
        class_dir = root / str(label)
        class_dir.mkdir()
        for i in range(2):
            img = np.zeros((28, 28), dtype=np.uint8)
            img[5:20, 10 + i:15 + i] = 255
            cv2.imwrite(str(class_dir / f"{i}.png"), img)
    (root / "notes").mkdir()
    (root / "3" / "readme.txt").write_text("skip me")


def test_load_image_folder(tmp_path):
    _write_folder(tmp_path)
    images, labels = load_image_folder(str(tmp_path))

    assert labels == [3, 3, 7, 7]
    assert all(img.shape == (28, 28) for img in images)
    assert images[0][10, 12] == 255


def test_load_image_folder_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_image_folder(str(tmp_path / "missing"))


def test_load_image_folder_unreadable(tmp_path):
    (tmp_path / "1").mkdir()
    (tmp_path / "1" / "broken.png").write_bytes(b"not an image")
    with pytest.raises(ValueError):
        load_image_folder(str(tmp_path))


def test_load_npz_keras_layout(tmp_path):
    path = tmp_path / "mnist.npz"
    x = np.zeros((4, 28, 28, 1), dtype=np.uint8)
    np.savez(path, x_train=x, y_train=np.array([5, 0, 4, 1]))

    images, labels = load_npz(str(path))
    assert labels == [5, 0, 4, 1]
    assert images[0].shape == (28, 28)


def test_load_npz_missing_keys(tmp_path):
    path = tmp_path / "bad.npz"
    np.savez(path, data=np.zeros((2, 3, 3)))
    with pytest.raises(ValueError):
        load_npz(str(path))


def test_load_npz_length_mismatch(tmp_path):
    path = tmp_path / "bad.npz"
    np.savez(path, images=np.zeros((2, 3, 3)), labels=np.array([1]))
    with pytest.raises(ValueError):
        load_npz(str(path))


def test_load_dataset_limit(tmp_path):
    path = tmp_path / "digits.npz"
    np.savez(path, images=np.zeros((6, 8, 8), dtype=np.uint8), labels=np.arange(6))

    images, labels = load_dataset('npz', path=str(path), limit=4)
    assert len(images) == 4
    assert labels == [0, 1, 2, 3]

    images, labels = load_dataset('synthetic', limit=12)
    assert len(images) == 12


@pytest.mark.parametrize("source, path", [('mnist', None), ('folder', None), ('npz', '')])
def test_load_dataset_bad_arguments(source, path):
    with pytest.raises(ValueError):
        load_dataset(source, path=path)
