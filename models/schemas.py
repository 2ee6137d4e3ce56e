"""
Pydantic V2 Schema：全局配置各节与运行时路径。

- AppConfigSchema: app_config.yaml 根结构（app / verdict / collation / aggregation / chart）。
- VerdictSection: 判定结果的规范文本（正常 / 违规）。
- ChartSection: 四条折线的名称与颜色。
- RunConfigSchema: CLI 运行时路径（输出目录、日志目录、配置存储文件）。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


def _strip_str(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


# 图表折线可引用的计数键
CounterKey = Literal["ai_normal", "ai_violation", "reviewer_normal", "reviewer_violation"]


# ----- 应用 -----


class AppSection(BaseModel):
    """应用级配置：输出文件名、工作表名、日志文件前缀。"""

    output_stem: str = Field(default="行为判定统计", description="结果文件名主体")
    sheet_title: str = Field(default="行为判定统计", description="结果工作表名")
    log_prefix: str = Field(default="verdict_chart", description="日志文件名前缀")
    config_store_filename: str = Field(default="dashboard_config.json", description="仪表盘字段配置的存储文件名")

    @field_validator("output_stem", "sheet_title", "log_prefix", "config_store_filename", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> str:
        return _strip_str(v)


# ----- 判定文本 -----


class VerdictSection(BaseModel):
    """判定结果的规范文本；单元格归一化后与之逐字比较。"""

    normal: str = Field(default="正常", min_length=1, description="判定为正常的文本")
    violation: str = Field(default="违规", min_length=1, description="判定为违规的文本")

    @field_validator("normal", "violation", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> str:
        return _strip_str(v)


# ----- 排序 -----


class CollationSection(BaseModel):
    """行为类型排序所用的区域设置。"""

    locale: str = Field(default="zh-CN", description="排序区域，zh 开头时按拼音排序")

    @field_validator("locale", mode="before")
    @classmethod
    def strip_locale(cls, v: Any) -> str:
        return _strip_str(v) or "zh-CN"


# ----- 汇总 -----


class AggregationSection(BaseModel):
    """汇总运行参数。"""

    fetch_concurrency: int = Field(default=1, ge=1, description="同时取值的记录数，1 表示逐条顺序读取")


# ----- 图表 -----


class ChartSeriesSchema(BaseModel):
    """单条折线：对应的计数键、图例名称、颜色。"""

    key: CounterKey = Field(description="对应的计数键")
    name: str = Field(description="图例名称")
    color: str = Field(default="", description="线条颜色，#RRGGBB")

    @field_validator("color", mode="after")
    @classmethod
    def strip_hash(cls, v: str) -> str:
        return v.strip().lstrip("#").upper()


def _default_series() -> list[ChartSeriesSchema]:
    return [
        ChartSeriesSchema(key="ai_normal", name="AI 正常", color="#82ca9d"),
        ChartSeriesSchema(key="ai_violation", name="AI 违规", color="#ff7300"),
        ChartSeriesSchema(key="reviewer_normal", name="复核员正常", color="#8884d8"),
        ChartSeriesSchema(key="reviewer_violation", name="复核员违规", color="#d0ed57"),
    ]


class ChartSection(BaseModel):
    """折线图配置：横轴标题、四条折线。"""

    title: str = Field(default="行为判定统计", description="图表标题")
    category_label: str = Field(default="行为类型", description="横轴（行为类型）列名")
    empty_text: str = Field(default="暂无数据，或尚未完成字段配置", description="无数据时的提示")
    series: list[ChartSeriesSchema] = Field(default_factory=_default_series, description="折线列表")


# ----- 根结构 -----


class AppConfigSchema(BaseModel):
    """app_config.yaml 根结构，各节均有默认值。"""

    app: AppSection = Field(default_factory=AppSection)
    verdict: VerdictSection = Field(default_factory=VerdictSection)
    collation: CollationSection = Field(default_factory=CollationSection)
    aggregation: AggregationSection = Field(default_factory=AggregationSection)
    chart: ChartSection = Field(default_factory=ChartSection)


# ----- 运行时路径 -----


class RunConfigSchema(BaseModel):
    """运行时路径配置：输出目录、日志目录、字段配置存储文件。"""

    output_dir: Path = Field(description="统计结果输出目录")
    log_dir: Path = Field(description="日志文件目录")
    config_dir: Path = Field(description="配置目录")
    config_store_filename: str = Field(default="dashboard_config.json", description="字段配置存储文件名")

    @property
    def config_store_path(self) -> Path:
        return self.config_dir / self.config_store_filename

    model_config = {"frozen": False}
