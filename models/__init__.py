"""Pydantic Schema：应用配置各节与运行时路径。"""

from .schemas import (
    AggregationSection,
    AppConfigSchema,
    AppSection,
    ChartSection,
    ChartSeriesSchema,
    CollationSection,
    RunConfigSchema,
    VerdictSection,
)

__all__ = [
    "AggregationSection",
    "AppConfigSchema",
    "AppSection",
    "ChartSection",
    "ChartSeriesSchema",
    "CollationSection",
    "RunConfigSchema",
    "VerdictSection",
]
