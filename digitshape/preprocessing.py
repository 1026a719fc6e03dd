"""
预处理模块 - 灰度归一化与二值化
"""
import logging
from typing import Union

import numpy as np
from skimage.filters import threshold_otsu
from skimage.util import img_as_float

from digitshape.models import InvalidInputError
from digitshape.utils import BINARIZE_THRESHOLD, OTSU_THRESHOLD

logger = logging.getLogger(__name__)


def to_grayscale_float(image) -> np.ndarray:
    """把灰度图像转换为 [0,1] 范围的浮点数组

    整数类型按其取值上限归一化（uint8 除以 255），浮点类型视为已归一化。
    末尾的单通道维度 (H, W, 1) 会被压缩。
    """
    arr = np.asarray(image)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    if arr.ndim != 2:
        raise InvalidInputError(f"需要二维灰度图像，实际形状: {arr.shape}")
    if arr.dtype != bool and not (np.issubdtype(arr.dtype, np.integer)
                                  or np.issubdtype(arr.dtype, np.floating)):
        raise InvalidInputError(f"不支持的像素类型: {arr.dtype}")
    return img_as_float(arr)


def binarize(image, threshold: Union[float, str] = BINARIZE_THRESHOLD) -> np.ndarray:
    """全局阈值二值化，灰度严格大于阈值的像素为前景

    Args:
        image: 二维灰度图像
        threshold: [0,1] 范围内的阈值，或 "otsu" 表示自动阈值

    Returns:
        np.ndarray: 布尔二值图像
    """
    gray = to_grayscale_float(image)

    if isinstance(threshold, str):
        if threshold.lower() != OTSU_THRESHOLD:
            raise ValueError(f"未知的阈值方法: {threshold}")
        if gray.size == 0 or gray.min() == gray.max():
            # 常数图像没有可分的前景
            return np.zeros(gray.shape, dtype=bool)
        level = float(threshold_otsu(gray))
        logger.debug(f"Otsu 阈值: {level:.4f}")
    else:
        level = float(threshold)
        if not 0.0 <= level <= 1.0:
            raise ValueError(f"阈值必须在 [0, 1] 范围内，实际为: {threshold}")

    return gray > level
