"""
手写数字形状特征分析 - 程序入口
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from digitshape.analyzer_core import get_statistics, group_euler_by_label, run_batch
from digitshape.datasets import SOURCES, load_dataset
from digitshape.report import export_report, save_boxplot, save_results
from digitshape.utils import (
    BINARIZE_THRESHOLD, DEFAULT_CONNECTIVITY, MIN_REGION_AREA,
    NUM_IMAGES_TO_ANALYZE, OTSU_THRESHOLD
)

logger = logging.getLogger(__name__)

# 配置matplotlib中文字体
plt.rcParams['font.sans-serif'] = ['Microsoft YaHei', 'DejaVu Sans']
plt.rcParams['axes.unicode_minus'] = False


def _threshold_arg(value: str):
    if value.lower() == OTSU_THRESHOLD:
        return OTSU_THRESHOLD
    try:
        level = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"阈值必须是 [0,1] 内的数值或 otsu: {value}")
    if not 0.0 <= level <= 1.0:
        raise argparse.ArgumentTypeError(f"阈值必须是 [0,1] 内的数值或 otsu: {value}")
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="手写数字形状特征分析（面积、偏心率、欧拉数）")
    parser.add_argument('--source', choices=SOURCES, default='synthetic', help="数据来源")
    parser.add_argument('--path', default=None, help="图像文件夹或 npz 文件路径")
    parser.add_argument('--limit', type=int, default=NUM_IMAGES_TO_ANALYZE, help="分析的图像数量")
    parser.add_argument('--threshold', type=_threshold_arg, default=BINARIZE_THRESHOLD,
                        help="二值化阈值 [0,1]，或 otsu")
    parser.add_argument('--connectivity', type=int, choices=(4, 8), default=DEFAULT_CONNECTIVITY)
    parser.add_argument('--min-area', type=int, default=MIN_REGION_AREA, help="噪声区域面积阈值，0 表示不过滤")
    parser.add_argument('--output-dir', default='output', help="结果输出目录")
    parser.add_argument('--seed', type=int, default=0, help="合成数据的随机种子")
    parser.add_argument('--verbose', action='store_true', help="输出调试日志")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    args = build_parser().parse_args(argv)

    # 日志配置
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s [%(levelname)s] %(message)s')

    logger.info("--- Loading handwritten digits dataset ---")
    try:
        images, labels = load_dataset(args.source, path=args.path, limit=args.limit, seed=args.seed)
    except (OSError, ValueError) as e:
        logger.error(f"数据集加载失败: {e}")
        return 1
    logger.info(f"Dataset loaded: {len(images)} images")

    logger.info("--- Starting image processing loop ---")
    records = run_batch(images, labels, threshold=args.threshold,
                        connectivity=args.connectivity, min_area=args.min_area)
    logger.info("--- Image processing complete ---")

    os.makedirs(args.output_dir, exist_ok=True)
    save_results(records, os.path.join(args.output_dir, 'results.csv'))
    save_results(records, os.path.join(args.output_dir, 'results.json'))
    export_report(records, os.path.join(args.output_dir, 'report.txt'))
    save_boxplot(group_euler_by_label(records), os.path.join(args.output_dir, 'euler_boxplot.png'))

    stats = get_statistics(records)
    logger.info(f"成功 {stats['success']} 张，失败 {stats['failed']} 张")
    for label, s in stats['per_label'].items():
        if s['consistency'] is not None:
            logger.info(f"数字 {label}: 欧拉数众数 {s['mode']}，期望 {s['expected']}，"
                        f"一致率 {s['consistency'] * 100:.1f}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
