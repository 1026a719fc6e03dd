"""
数据集模块 - 合成数字、图像文件夹与 npz 数据的加载
"""
import logging
import os
from typing import List, Optional, Tuple

import cv2
import numpy as np

from digitshape.utils import DIGIT_IMAGE_SIZE, IMAGE_EXTENSIONS, NUM_IMAGES_TO_ANALYZE

logger = logging.getLogger(__name__)

Dataset = Tuple[List[np.ndarray], List[int]]

# 合成数字使用的字体、缩放与线宽组合
SYNTH_FONTS = [cv2.FONT_HERSHEY_SIMPLEX, cv2.FONT_HERSHEY_DUPLEX]
SYNTH_SCALES = [0.7, 0.8, 0.9]
SYNTH_THICKNESSES = [1, 2]

SOURCES = ('synthetic', 'folder', 'npz')


def _truncate(images: List[np.ndarray], labels: List[int], limit: Optional[int]) -> Dataset:
    if limit is not None and limit >= 0:
        return images[:limit], labels[:limit]
    return images, labels


def synthesize_digits(count: int, size: int = DIGIT_IMAGE_SIZE, seed: int = 0) -> Dataset:
    """用 Hershey 字体渲染数字 0-9，标签按 0..9 循环

    字体、缩放、线宽和位置由随机种子决定，同一种子结果完全一致。
    """
    if count < 0:
        raise ValueError(f"图像数量不能为负: {count}")

    rng = np.random.default_rng(seed)
    images, labels = [], []
    for i in range(count):
        digit = i % 10
        font = SYNTH_FONTS[int(rng.integers(len(SYNTH_FONTS)))]
        scale = SYNTH_SCALES[int(rng.integers(len(SYNTH_SCALES)))] * size / DIGIT_IMAGE_SIZE
        thickness = SYNTH_THICKNESSES[int(rng.integers(len(SYNTH_THICKNESSES)))]

        # 按文字实际尺寸居中，再加一点随机偏移
        (text_w, text_h), _ = cv2.getTextSize(str(digit), font, scale, thickness)
        x = (size - text_w) // 2 + int(rng.integers(-2, 3))
        y = (size + text_h) // 2 + int(rng.integers(-2, 3))
        x = max(0, min(x, size - text_w))
        y = max(text_h, min(y, size - 1))

        canvas = np.zeros((size, size), dtype=np.uint8)
        cv2.putText(canvas, str(digit), (x, y), font, scale, 255, thickness, cv2.LINE_AA)
        images.append(canvas)
        labels.append(digit)

    logger.debug(f"已合成 {count} 张数字图像 (seed={seed})")
    return images, labels


def load_image_folder(root: str) -> Dataset:
    """加载 <root>/<数字>/*.png 结构的图像文件夹"""
    if not os.path.isdir(root):
        raise FileNotFoundError(f"数据目录不存在: {root}")

    images, labels = [], []
    for name in sorted(os.listdir(root)):
        class_dir = os.path.join(root, name)
        if not os.path.isdir(class_dir):
            continue
        try:
            label = int(name)
        except ValueError:
            logger.debug(f"跳过非数字目录: {class_dir}")
            continue

        for file_name in sorted(os.listdir(class_dir)):
            if not file_name.lower().endswith(IMAGE_EXTENSIONS):
                continue
            path = os.path.join(class_dir, file_name)
            image = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
            if image is None:
                raise ValueError(f"无法加载图像: {path}")
            images.append(image)
            labels.append(label)

    logger.info(f"从 {root} 加载了 {len(images)} 张图像")
    return images, labels


def load_npz(path: str) -> Dataset:
    """加载 npz 数据，支持 images/labels 或 Keras MNIST 的 x_train/y_train"""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"数据文件不存在: {path}")

    with np.load(path) as data:
        for image_key, label_key in (('images', 'labels'), ('x_train', 'y_train')):
            if image_key in data.files and label_key in data.files:
                stack = data[image_key]
                label_array = data[label_key]
                break
        else:
            raise ValueError(f"npz 中缺少 images/labels 或 x_train/y_train: {data.files}")

    if stack.ndim == 4 and stack.shape[-1] == 1:
        stack = stack[..., 0]
    if stack.ndim != 3:
        raise ValueError(f"图像数组应为 (N, H, W)，实际形状: {stack.shape}")
    if len(stack) != len(label_array):
        raise ValueError(f"图像数量 {len(stack)} 与标签数量 {len(label_array)} 不一致")

    return [img for img in stack], [int(v) for v in label_array]


def load_dataset(source: str = 'synthetic',
                 path: Optional[str] = None,
                 limit: Optional[int] = None,
                 seed: int = 0) -> Dataset:
    """按来源加载数据集，并截取前 limit 张"""
    if source == 'synthetic':
        count = limit if limit is not None else NUM_IMAGES_TO_ANALYZE
        return synthesize_digits(count, seed=seed)
    if source not in SOURCES:
        raise ValueError(f"未知的数据来源: {source}")
    if not path:
        raise ValueError(f"数据来源 {source} 需要指定路径")

    if source == 'folder':
        images, labels = load_image_folder(path)
    else:
        images, labels = load_npz(path)
    return _truncate(images, labels, limit)
