"""
手写数字形状特征分析 - 连通域测量（面积、偏心率、欧拉数）与按数字汇总
"""
from digitshape.models import DescriptorRecord, InvalidInputError, RegionProperties
from digitshape.regions import euler_number, extract_regions, label_components, select_largest
from digitshape.analyzer_core import process_image, run_batch

__version__ = "1.0.0"
