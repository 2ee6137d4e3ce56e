"""行为判定统计相关数据模型（Pydantic V2）。"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

# 计数键顺序：与图表折线、结果表列一致
COUNTER_KEYS = ("ai_normal", "ai_violation", "reviewer_normal", "reviewer_violation")

# 配置中的三个字段角色
FIELD_ROLES = ("behavior", "ai", "reviewer")


def _optional_id(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


class ChartConfig(BaseModel):
    """仪表盘配置：行为类型、AI 判定结果、复核员判定结果三个字段的 ID。

    宿主存储使用 camelCase 键（behaviorFieldId 等），两种写法均可构造。
    """

    behavior_field_id: str | None = Field(default=None, alias="behaviorFieldId", description="行为类型字段")
    ai_field_id: str | None = Field(default=None, alias="aiFieldId", description="AI 判定结果字段")
    reviewer_field_id: str | None = Field(default=None, alias="reviewerFieldId", description="复核员判定结果字段")

    @field_validator("behavior_field_id", "ai_field_id", "reviewer_field_id", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> str | None:
        return _optional_id(v)

    @property
    def is_complete(self) -> bool:
        """三个字段均已选择时才允许汇总。"""
        return bool(self.behavior_field_id and self.ai_field_id and self.reviewer_field_id)

    def field_id(self, role: str) -> str | None:
        """按角色（behavior / ai / reviewer）取字段 ID。"""
        if role not in FIELD_ROLES:
            raise ValueError(f"未知字段角色: {role}")
        return getattr(self, f"{role}_field_id")

    def with_field(self, role: str, field_id: str | None) -> ChartConfig:
        """返回替换了某个角色字段后的新配置。"""
        if role not in FIELD_ROLES:
            raise ValueError(f"未知字段角色: {role}")
        return self.model_copy(update={f"{role}_field_id": _optional_id(field_id)})

    def to_host(self) -> dict[str, str]:
        """宿主存储格式：camelCase 键，未设置的字段不输出。"""
        return self.model_dump(by_alias=True, exclude_none=True)

    model_config = {"populate_by_name": True, "frozen": True}


class FieldOption(BaseModel):
    """当前表的一个字段：ID 与显示名称，供配置下拉使用。"""

    id: str = Field(description="字段 ID")
    display_name: str = Field(default="", description="字段显示名称")

    @field_validator("id", "display_name", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    def to_option(self) -> dict[str, str]:
        """下拉选项结构：label 为显示名称，value 为字段 ID。"""
        return {"label": self.display_name, "value": self.id}


class CategoryTally(BaseModel):
    """单个行为类型的四项计数，仅在一次汇总运行内累加。"""

    ai_normal: int = Field(default=0, ge=0, description="AI 判定「正常」的数量")
    ai_violation: int = Field(default=0, ge=0, description="AI 判定「违规」的数量")
    reviewer_normal: int = Field(default=0, ge=0, description="复核员判定「正常」的数量")
    reviewer_violation: int = Field(default=0, ge=0, description="复核员判定「违规」的数量")

    def count(self, ai_text: str, reviewer_text: str, *, normal: str, violation: str) -> None:
        """按两个判定文本各自累加；既非正常也非违规（含空）时不计数。"""
        if ai_text == normal:
            self.ai_normal += 1
        elif ai_text == violation:
            self.ai_violation += 1

        if reviewer_text == normal:
            self.reviewer_normal += 1
        elif reviewer_text == violation:
            self.reviewer_violation += 1


class SeriesPoint(BaseModel):
    """图表数据点：一个行为类型及其四项计数，生成后不再修改。"""

    category: str = Field(description="行为类型")
    ai_normal: int = Field(default=0, ge=0, alias="aiNormal")
    ai_violation: int = Field(default=0, ge=0, alias="aiViolation")
    reviewer_normal: int = Field(default=0, ge=0, alias="reviewerNormal")
    reviewer_violation: int = Field(default=0, ge=0, alias="reviewerViolation")

    @classmethod
    def from_tally(cls, category: str, tally: CategoryTally) -> SeriesPoint:
        return cls(category=category, **tally.model_dump())

    def counts(self) -> tuple[int, int, int, int]:
        """四项计数，顺序同 COUNTER_KEYS。"""
        return (self.ai_normal, self.ai_violation, self.reviewer_normal, self.reviewer_violation)

    def to_row(self) -> tuple[str, int, int, int, int]:
        """转为 5 列结果行：(行为类型, AI 正常, AI 违规, 复核员正常, 复核员违规)。"""
        return (self.category, *self.counts())

    model_config = {"populate_by_name": True, "frozen": True}
