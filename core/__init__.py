"""
汇总核心：单元格值归一化、区域排序、按行为类型统计判定结果。
"""

from .aggregate import (
    aggregate_verdicts,
    build_series,
    is_aggregation_ready,
    tally_records,
)
from .collation import collation_key_for, sort_texts, zh_collation_key
from .normalize import normalize_text

__all__ = [
    "aggregate_verdicts",
    "build_series",
    "collation_key_for",
    "is_aggregation_ready",
    "normalize_text",
    "sort_texts",
    "tally_records",
    "zh_collation_key",
]
