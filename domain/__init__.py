"""领域模型：仪表盘配置、字段选项、计数与图表数据点。"""

from .errors import AccessorError, VerdictChartError
from .verdict import (
    COUNTER_KEYS,
    FIELD_ROLES,
    CategoryTally,
    ChartConfig,
    FieldOption,
    SeriesPoint,
)

__all__ = [
    "AccessorError",
    "COUNTER_KEYS",
    "CategoryTally",
    "ChartConfig",
    "FIELD_ROLES",
    "FieldOption",
    "SeriesPoint",
    "VerdictChartError",
]
