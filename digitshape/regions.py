"""
区域分析模块 - 连通域标记、二阶矩偏心率与基于孔洞计数的欧拉数
"""
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from digitshape.models import InvalidInputError, RegionProperties
from digitshape.utils import DEFAULT_CONNECTIVITY, MIN_REGION_AREA

logger = logging.getLogger(__name__)

# 光栅扫描中位于当前像素之前的邻居
_PREVIOUS_NEIGHBORS = {
    4: ((-1, 0), (0, -1)),
    8: ((-1, -1), (-1, 0), (-1, 1), (0, -1)),
}


class _DisjointSet:
    """并查集，根节点始终是集合中最小的标签"""

    def __init__(self):
        self.parent = [0]

    def make(self) -> int:
        label = len(self.parent)
        self.parent.append(label)
        return label

    def find(self, x: int) -> int:
        parent = self.parent
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(self, a: int, b: int) -> int:
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return root_a
        if root_a < root_b:
            self.parent[root_b] = root_a
            return root_a
        self.parent[root_a] = root_b
        return root_b


def _check_connectivity(connectivity: int) -> int:
    if connectivity not in _PREVIOUS_NEIGHBORS:
        raise ValueError(f"连通性只能是 4 或 8，实际为: {connectivity}")
    return connectivity


def _dual_connectivity(connectivity: int) -> int:
    """背景使用与前景对偶的连通性"""
    return 4 if _check_connectivity(connectivity) == 8 else 8


# ===== 输入校验 =====
def validate_binary(image) -> np.ndarray:
    """校验并转换二值图像

    Args:
        image: 二维布尔数组，或只包含 0/1 的数值数组

    Returns:
        np.ndarray: 布尔类型的二值图像

    Raises:
        InvalidInputError: 维度不是二维，或取值不是二值
    """
    arr = np.asarray(image)
    if arr.ndim != 2:
        raise InvalidInputError(f"二值图像必须是二维数组，实际维度: {arr.ndim}")
    if arr.dtype == bool:
        return arr
    if not (np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)):
        raise InvalidInputError(f"不支持的像素类型: {arr.dtype}")
    if arr.size > 0 and not np.isin(arr, (0, 1)).all():
        raise InvalidInputError("二值图像只能包含 0 和 1")
    return arr.astype(bool)


# ===== 连通域标记 =====
def label_components(binary, connectivity: int = DEFAULT_CONNECTIVITY) -> Tuple[np.ndarray, int]:
    """两遍扫描 + 并查集的连通域标记

    标签从 1 开始连续编号，顺序与各连通域第一个像素的光栅扫描顺序一致；背景为 0。

    Returns:
        tuple: (标签图, 连通域数量)
    """
    offsets = _PREVIOUS_NEIGHBORS[_check_connectivity(connectivity)]
    mask = validate_binary(binary)
    rows, cols = mask.shape

    pixels = mask.tolist()
    provisional = [[0] * cols for _ in range(rows)]
    forest = _DisjointSet()

    # 第一遍：分配临时标签并记录等价关系
    for r in range(rows):
        pixel_row = pixels[r]
        label_row = provisional[r]
        for c in range(cols):
            if not pixel_row[c]:
                continue
            current = 0
            for dr, dc in offsets:
                nr = r + dr
                nc = c + dc
                if nr < 0 or nc < 0 or nc >= cols:
                    continue
                neighbor = provisional[nr][nc]
                if neighbor == 0:
                    continue
                current = neighbor if current == 0 else forest.union(current, neighbor)
            if current == 0:
                current = forest.make()
            label_row[c] = current

    # 第二遍：把等价类压缩成连续标签
    lookup = np.zeros(len(forest.parent), dtype=np.int32)
    compact = {}
    for label in range(1, len(forest.parent)):
        root = forest.find(label)
        if root not in compact:
            compact[root] = len(compact) + 1
        lookup[label] = compact[root]

    label_image = lookup[np.array(provisional, dtype=np.intp).reshape(rows, cols)]
    return label_image, len(compact)


# ===== 拓扑特征 =====
def count_holes(binary, connectivity: int = DEFAULT_CONNECTIVITY) -> int:
    """统计被前景完全包围、不接触图像边界的背景区域数量"""
    mask = validate_binary(binary)
    # 外扩一圈背景，使所有接触边界的背景连成一个整体
    padded = np.pad(~mask, 1, mode='constant', constant_values=True)
    _, count = label_components(padded, _dual_connectivity(connectivity))
    return count - 1


def euler_number(binary, connectivity: int = DEFAULT_CONNECTIVITY) -> int:
    """整幅图像的欧拉数：连通域数量减去孔洞数量"""
    _, components = label_components(binary, connectivity)
    return components - count_holes(binary, connectivity)


def _moment_axes(rows: np.ndarray, cols: np.ndarray) -> Tuple[float, float, float, float]:
    """由二阶中心矩计算 (长轴, 短轴, 偏心率, 方向角)

    每个像素视为单位正方形，方差上加 1/12。
    """
    n = rows.size
    x = cols - cols.mean()
    y = -(rows - rows.mean())

    uxx = float(np.sum(x * x)) / n + 1.0 / 12.0
    uyy = float(np.sum(y * y)) / n + 1.0 / 12.0
    uxy = float(np.sum(x * y)) / n

    common = math.sqrt((uxx - uyy) ** 2 + 4.0 * uxy ** 2)
    major = 2.0 * math.sqrt(2.0) * math.sqrt(uxx + uyy + common)
    minor = 2.0 * math.sqrt(2.0) * math.sqrt(max(uxx + uyy - common, 0.0))
    eccentricity = math.sqrt(max(1.0 - (minor / major) ** 2, 0.0))

    if uyy > uxx:
        num = uyy - uxx + common
        den = 2.0 * uxy
    else:
        num = 2.0 * uxy
        den = uxx - uyy + common
    if num == 0 and den == 0:
        orientation = 0.0
    elif den == 0:
        orientation = 90.0
    else:
        orientation = math.degrees(math.atan(num / den))

    return major, minor, eccentricity, orientation


# ===== 区域测量 =====
def extract_regions(image,
                    connectivity: int = DEFAULT_CONNECTIVITY,
                    min_area: int = MIN_REGION_AREA) -> List[RegionProperties]:
    """测量二值图像中每个连通区域

    Args:
        image: 二维二值图像
        connectivity (int): 前景连通性，4 或 8
        min_area (int): 小于该面积的区域视为噪声丢弃，0 表示不过滤

    Returns:
        List[RegionProperties]: 按标签顺序排列的区域列表；空图像返回空列表

    Raises:
        InvalidInputError: 输入不是二维二值图像
    """
    binary = validate_binary(image)
    label_image, count = label_components(binary, connectivity)

    # 一次扫描按标签分组所有前景像素坐标
    all_rows, all_cols = np.nonzero(label_image)
    order = np.argsort(label_image[all_rows, all_cols], kind='stable')
    areas = np.bincount(label_image.ravel(), minlength=count + 1)[1:]
    bounds = np.cumsum(areas)[:-1]
    row_groups = np.split(all_rows[order], bounds)
    col_groups = np.split(all_cols[order], bounds)

    regions = []
    for label in range(1, count + 1):
        rows = row_groups[label - 1]
        cols = col_groups[label - 1]
        area = int(rows.size)
        if min_area > 0 and area < min_area:
            logger.debug(f"区域 #{label} 面积 {area} 小于阈值 {min_area}，已忽略")
            continue

        r0, r1 = int(rows.min()), int(rows.max()) + 1
        c0, c1 = int(cols.min()), int(cols.max()) + 1
        major, minor, eccentricity, orientation = _moment_axes(rows, cols)

        # 孔洞只在区域自身的掩码上统计，其他区域的像素视为背景
        region_mask = label_image[r0:r1, c0:c1] == label
        holes = count_holes(region_mask, connectivity)

        regions.append(RegionProperties(
            label=label,
            area=area,
            centroid=(float(rows.mean()), float(cols.mean())),
            bbox=(r0, c0, r1, c1),
            major_axis_length=major,
            minor_axis_length=minor,
            eccentricity=eccentricity,
            orientation=orientation,
            euler_number=1 - holes,
        ))

    return regions


def select_largest(regions: Sequence[RegionProperties]) -> Optional[RegionProperties]:
    """选取面积最大的区域，面积相同时取标签最小者"""
    if not regions:
        return None
    return max(regions, key=lambda r: r.area)
