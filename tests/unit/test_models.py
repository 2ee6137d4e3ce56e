"""domain.verdict 单元测试：配置门槛、字段选项、计数与图表数据点。"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from domain.errors import AccessorError, VerdictChartError
from domain.verdict import CategoryTally, ChartConfig, FieldOption, SeriesPoint


class TestChartConfig:
    def test_defaults_incomplete(self) -> None:
        c = ChartConfig()
        assert c.behavior_field_id is None
        assert c.is_complete is False

    def test_host_aliases(self) -> None:
        c = ChartConfig.model_validate(
            {"behaviorFieldId": "fld1", "aiFieldId": "fld2", "reviewerFieldId": "fld3"}
        )
        assert c.ai_field_id == "fld2"
        assert c.is_complete is True
        assert c.to_host() == {"behaviorFieldId": "fld1", "aiFieldId": "fld2", "reviewerFieldId": "fld3"}

    def test_field_names_accepted(self) -> None:
        c = ChartConfig(behavior_field_id="fld1", ai_field_id="fld2", reviewer_field_id="fld3")
        assert c.is_complete is True

    def test_blank_ids_are_unset(self) -> None:
        c = ChartConfig(behaviorFieldId="  ", aiFieldId="fld2", reviewerFieldId="fld3")
        assert c.behavior_field_id is None
        assert c.is_complete is False
        assert c.to_host() == {"aiFieldId": "fld2", "reviewerFieldId": "fld3"}

    def test_with_field_returns_new_config(self) -> None:
        c = ChartConfig(aiFieldId="fld2")
        c2 = c.with_field("behavior", "fld1")
        assert c.behavior_field_id is None
        assert c2.behavior_field_id == "fld1"
        assert c2.field_id("ai") == "fld2"
        assert c2.with_field("ai", "").ai_field_id is None

    def test_frozen(self) -> None:
        c = ChartConfig()
        with pytest.raises(ValidationError):
            c.ai_field_id = "fld"  # type: ignore[misc]


class TestFieldOption:
    def test_to_option(self) -> None:
        f = FieldOption(id=" fld1 ", display_name=" 行为类型 ")
        assert f.to_option() == {"label": "行为类型", "value": "fld1"}


class TestTally:
    def test_count(self) -> None:
        t = CategoryTally()
        t.count("正常", "违规", normal="正常", violation="违规")
        t.count("违规", "", normal="正常", violation="违规")
        t.count("未知", "正常", normal="正常", violation="违规")
        assert (t.ai_normal, t.ai_violation, t.reviewer_normal, t.reviewer_violation) == (1, 1, 1, 1)

    def test_series_point_from_tally(self) -> None:
        t = CategoryTally(ai_normal=2, reviewer_violation=1)
        p = SeriesPoint.from_tally("辱骂", t)
        assert p.to_row() == ("辱骂", 2, 0, 0, 1)
        assert p.model_dump(by_alias=True) == {
            "category": "辱骂",
            "aiNormal": 2,
            "aiViolation": 0,
            "reviewerNormal": 0,
            "reviewerViolation": 1,
        }

    def test_negative_count_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SeriesPoint(category="A", ai_normal=-1)


def test_accessor_error_message() -> None:
    e = AccessorError("fld1", "rec9", "字段不存在")
    assert isinstance(e, VerdictChartError)
    assert isinstance(e, RuntimeError)
    assert "fld1" in str(e) and "rec9" in str(e)
    assert e.field_id == "fld1"
    assert e.record_id == "rec9"
