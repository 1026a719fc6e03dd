"""
报告模块 - 结果保存、文本报告与欧拉数箱线图
"""
import csv
import json
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from matplotlib.figure import Figure

from digitshape.analyzer_core import get_statistics
from digitshape.models import DescriptorRecord
from digitshape.utils import EULER_NOTE, EULER_TICKS, EULER_TICK_LABELS

logger = logging.getLogger(__name__)

CSV_HEADER = ['Label', 'Area', 'Eccentricity', 'EulerNumber', 'Status']


# ===== 保存和导出 =====
def save_results(records: Sequence[DescriptorRecord], file_path: str) -> None:
    """按扩展名保存为 JSON 或 CSV"""
    if file_path.endswith('.json'):
        stats = get_statistics(records)
        data = {
            'statistics': {
                'total': stats['total'],
                'success': stats['success'],
                'failed': stats['failed'],
                'per_label': {str(k): v for k, v in stats['per_label'].items()},
            },
            'records': [r.to_dict() for r in records],
        }
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    elif file_path.endswith('.csv'):
        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for r in records:
                writer.writerow([
                    r.label,
                    r.area,
                    f"{r.eccentricity:.4f}",
                    r.euler_number,
                    r.status,
                ])
    else:
        raise ValueError(f"不支持的结果格式: {file_path}")

    logger.info(f"结果已保存到: {file_path}")


def build_text_report(records: Sequence[DescriptorRecord], stats: Optional[dict] = None) -> str:
    """生成纯文本分析报告"""
    if stats is None:
        stats = get_statistics(records)

    report = f"""
========================================
    手写数字形状特征分析报告
========================================
生成时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

----------------------------------------
    处理概况
----------------------------------------
图像总数: {stats['total']}
成功: {stats['success']}
失败: {stats['failed']}

----------------------------------------
    欧拉数统计（按标签）
----------------------------------------
标签    数量    均值      中位数    众数    期望    一致率
----------------------------------------
"""
    for label, s in stats['per_label'].items():
        expected_str = str(s['expected']) if s['expected'] is not None else "N/A"
        consistency_str = f"{s['consistency'] * 100:.1f}%" if s['consistency'] is not None else "N/A"
        report += (f"{label:<8}{s['count']:<8}{s['mean']:<10.2f}{s['median']:<10.1f}"
                   f"{s['mode']:<8}{expected_str:<8}{consistency_str}\n")

    failures = [r for r in records if not r.succeeded]
    if failures:
        report += """
----------------------------------------
    失败记录
----------------------------------------
"""
        for r in failures:
            report += f"#{r.index:<6}标签 {r.label:<4}{r.status}\n"

    report += """
========================================
            报告结束
========================================
"""
    return report


def export_report(records: Sequence[DescriptorRecord], file_path: str) -> None:
    """导出文本报告"""
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(build_text_report(records))
    logger.info(f"报告已导出到: {file_path}")


# ===== 可视化 =====
def plot_euler_boxplot(grouped: Dict[int, List[int]], ax=None) -> Figure:
    """绘制各数字标签的欧拉数箱线图

    Args:
        grouped: 标签 -> 欧拉数列表，通常来自 group_euler_by_label
        ax: 可选的现有坐标轴，为 None 时新建 Figure

    Returns:
        Figure: 图表对象
    """
    if ax is None:
        fig = Figure(figsize=(8, 6), dpi=100)
        ax = fig.add_subplot(111)
    else:
        fig = ax.figure

    labels = list(grouped.keys())
    if not labels:
        ax.text(0.5, 0.5, "No valid Euler number data",
                horizontalalignment='center', verticalalignment='center',
                transform=ax.transAxes)
        return fig

    ax.boxplot([grouped[label] for label in labels])
    ax.set_xticks(range(1, len(labels) + 1))
    ax.set_xticklabels([str(label) for label in labels])

    ax.set_title('Topological Consistency: Euler Number vs. Digit Label')
    ax.set_xlabel('Digit Label')
    ax.set_ylabel('Euler Number')
    ax.grid(True, alpha=0.3, linestyle='--')

    # y 轴刻度直接标注对应的数字
    ax.set_yticks(EULER_TICKS)
    ax.set_yticklabels(EULER_TICK_LABELS)

    fig.text(0.15, 0.02, EULER_NOTE, fontsize=8, wrap=True,
             bbox={'boxstyle': 'round', 'facecolor': 'white', 'alpha': 0.8})
    fig.subplots_adjust(bottom=0.2)
    return fig


def save_boxplot(grouped: Dict[int, List[int]], file_path: str) -> None:
    fig = plot_euler_boxplot(grouped)
    fig.savefig(file_path)
    logger.info(f"箱线图已保存到: {file_path}")
