"""
数据模型模块 - 定义区域描述子和单张图像的记录
"""
from dataclasses import dataclass
from typing import Tuple

from digitshape.utils import STATUS_SUCCESS


class InvalidInputError(ValueError):
    """输入图像格式非法（维度或取值范围错误）"""

    identifier = "InvalidInput"


@dataclass
class RegionProperties:
    """单个连通区域的测量结果"""
    label: int
    area: int
    centroid: Tuple[float, float]
    bbox: Tuple[int, int, int, int]        # (min_row, min_col, max_row, max_col)，max 不含
    major_axis_length: float
    minor_axis_length: float
    eccentricity: float
    orientation: float                     # 角度制，(-90, 90]
    euler_number: int


@dataclass
class DescriptorRecord:
    """单张图像的描述子记录"""
    index: int
    label: int
    area: int = 0
    eccentricity: float = 0.0
    euler_number: int = 0
    status: str = STATUS_SUCCESS

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS

    def to_dict(self) -> dict:
        return {
            'index': int(self.index),
            'label': int(self.label),
            'area': int(self.area),
            'eccentricity': float(self.eccentricity),
            'euler_number': int(self.euler_number),
            'status': self.status,
        }
