"""
批量分析核心模块 - 单张图像处理、批处理与统计汇总
"""
import logging
from collections import Counter
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from digitshape.models import DescriptorRecord
from digitshape.preprocessing import binarize
from digitshape.regions import extract_regions, select_largest
from digitshape.utils import (
    BINARIZE_THRESHOLD, DEFAULT_CONNECTIVITY, MIN_REGION_AREA,
    STATUS_NO_REGION, STATUS_ERROR_TEMPLATE, STATUS_SUCCESS,
    PROGRESS_LOG_INTERVAL, EXPECTED_EULER_NUMBERS
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, DescriptorRecord], None]


def _error_status(error: Exception) -> str:
    identifier = getattr(error, 'identifier', None) or type(error).__name__
    return STATUS_ERROR_TEMPLATE.format(identifier)


# ===== 单张图像处理 =====
def process_image(image,
                  label: int,
                  index: int = 0,
                  threshold: Union[float, str] = BINARIZE_THRESHOLD,
                  connectivity: int = DEFAULT_CONNECTIVITY,
                  min_area: int = MIN_REGION_AREA) -> DescriptorRecord:
    """二值化、提取区域并记录面积最大区域的描述子

    单张图像的任何错误都只体现在记录的 status 上，不会向外抛出。

    Args:
        image: 二维灰度图像
        label (int): 数字标签
        index (int): 图像在批次中的序号
        threshold: 二值化阈值或 "otsu"
        connectivity (int): 前景连通性
        min_area (int): 噪声过滤面积

    Returns:
        DescriptorRecord: 该图像的记录
    """
    # 标签无法转换时保留占位标签 -1，错误记入 status
    record = DescriptorRecord(index=index, label=-1)
    try:
        record.label = int(label)
        binary = binarize(image, threshold)
        regions = extract_regions(binary, connectivity=connectivity, min_area=min_area)
        largest = select_largest(regions)

        if largest is None:
            record.status = STATUS_NO_REGION
        else:
            if len(regions) > 1:
                logger.debug(f"图像 {index} 检测到 {len(regions)} 个区域，取面积最大的 #{largest.label}")
            record.area = largest.area
            record.eccentricity = largest.eccentricity
            record.euler_number = largest.euler_number
            record.status = STATUS_SUCCESS

    except Exception as e:
        logger.warning(f"图像 {index} (标签 {label}) 处理失败: {e}")
        record.status = _error_status(e)

    return record


# ===== 批处理 =====
def run_batch(images: Sequence,
              labels: Sequence[int],
              threshold: Union[float, str] = BINARIZE_THRESHOLD,
              connectivity: int = DEFAULT_CONNECTIVITY,
              min_area: int = MIN_REGION_AREA,
              on_progress: Optional[ProgressCallback] = None) -> List[DescriptorRecord]:
    """逐张处理图像，按输入顺序返回记录"""
    if len(images) != len(labels):
        raise ValueError(f"图像数量 {len(images)} 与标签数量 {len(labels)} 不一致")

    total = len(images)
    records = []
    for i, (image, label) in enumerate(zip(images, labels)):
        record = process_image(image, label, index=i, threshold=threshold,
                               connectivity=connectivity, min_area=min_area)
        records.append(record)

        logger.debug(f"Processing Image {i + 1} / {total} (Label: {record.label}) - Status: {record.status}")
        if (i + 1) % PROGRESS_LOG_INTERVAL == 0 or i + 1 == total:
            logger.info(f"已处理 {i + 1}/{total} 张图像")
        if on_progress is not None:
            on_progress(i, total, record)

    return records


# ===== 汇总 =====
def successful_records(records: Sequence[DescriptorRecord]) -> List[DescriptorRecord]:
    """只保留处理成功的记录"""
    return [r for r in records if r.succeeded]


def group_euler_by_label(records: Sequence[DescriptorRecord]) -> Dict[int, List[int]]:
    """按标签分组欧拉数（仅成功记录），键升序"""
    grouped: Dict[int, List[int]] = {}
    for r in successful_records(records):
        grouped.setdefault(r.label, []).append(int(r.euler_number))
    return {label: grouped[label] for label in sorted(grouped)}


def get_statistics(records: Sequence[DescriptorRecord]) -> Dict[str, object]:
    """获取批次的统计信息

    Args:
        records (Sequence[DescriptorRecord]): 全部记录，失败记录只计入 failed

    Returns:
        dict: total/success/failed 以及按标签的欧拉数统计 per_label
    """
    success = successful_records(records)
    per_label = {}

    for label, eulers in group_euler_by_label(records).items():
        label_records = [r for r in success if r.label == label]
        values = np.asarray(eulers, dtype=float)
        # 众数取出现次数最多的值，次数相同取较小值
        counts = Counter(eulers)
        mode = min(counts, key=lambda v: (-counts[v], v))

        expected = EXPECTED_EULER_NUMBERS.get(label)
        if expected is None:
            consistency = None
        else:
            consistency = float(sum(1 for e in eulers if e == expected)) / len(eulers)

        per_label[label] = {
            'count': len(eulers),
            'mean': float(np.mean(values)),
            'median': float(np.median(values)),
            'std': float(np.std(values)),
            'min': int(values.min()),
            'max': int(values.max()),
            'mode': int(mode),
            'expected': expected,
            'consistency': consistency,
            'area_mean': float(np.mean([r.area for r in label_records])),
            'eccentricity_mean': float(np.mean([r.eccentricity for r in label_records])),
        }

    return {
        'total': len(records),
        'success': len(success),
        'failed': len(records) - len(success),
        'per_label': per_label,
    }
