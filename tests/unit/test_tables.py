"""infrastructure 单元测试：Excel / JSON 宿主表、内存表取值、文件配置存储。"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from openpyxl import Workbook  # type: ignore[import-untyped]

from domain.errors import AccessorError
from domain.verdict import ChartConfig, FieldOption
from infrastructure.config_store import JsonConfigStore
from infrastructure.host import MemoryTable, make_getter, resolve_field_id
from infrastructure.tables import load_excel_table, load_json_table, open_table


def _write_xlsx(path: Path, rows: list[list[object]]) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "审核记录"
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


class TestExcelTable:
    def test_fields_and_records(self, tmp_path: Path) -> None:
        path = _write_xlsx(
            tmp_path / "审核记录.xlsx",
            [
                ["行为类型", "AI判定结果", "复核员判定结果"],
                ["辱骂", "正常", "违规"],
                [None, None, None],
                ["涉黄", "违规", "违规"],
            ],
        )
        table = load_excel_table(path)
        fields = asyncio.run(table.list_fields())
        assert [(f.id, f.display_name) for f in fields] == [
            ("A", "行为类型"),
            ("B", "AI判定结果"),
            ("C", "复核员判定结果"),
        ]
        assert asyncio.run(table.list_record_ids()) == ["rec2", "rec4"]
        assert asyncio.run(table.get_value("C", "rec2")) == "违规"
        assert asyncio.run(table.get_value("A", "rec4")) == "涉黄"

    def test_header_only(self, tmp_path: Path) -> None:
        path = _write_xlsx(tmp_path / "empty.xlsx", [["行为类型", "AI判定结果"]])
        table = load_excel_table(path)
        assert len(table) == 0
        assert len(asyncio.run(table.list_fields())) == 2

    def test_blank_header_columns_skipped(self, tmp_path: Path) -> None:
        path = _write_xlsx(tmp_path / "gap.xlsx", [["行为类型", None, "复核员判定结果"], ["A", "x", "正常"]])
        table = load_excel_table(path)
        assert [f.id for f in asyncio.run(table.list_fields())] == ["A", "C"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_excel_table(tmp_path / "missing.xlsx")


class TestJsonTable:
    def test_tagged_values_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "export.json"
        path.write_text(
            json.dumps(
                {
                    "fields": [
                        {"id": "fldBehavior", "name": "行为类型"},
                        {"fieldId": "fldAi", "display_name": "AI判定结果"},
                        {"name": "无 ID 字段"},
                    ],
                    "records": [
                        {"id": "recA", "fields": {"fldBehavior": [{"type": "text", "text": "辱骂"}]}},
                        {"recordId": "recB", "fields": {"fldAi": {"id": "opt1", "text": "违规"}}},
                        {"fields": None},
                        "bad",
                    ],
                },
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )
        table = load_json_table(path)
        assert [f.id for f in asyncio.run(table.list_fields())] == ["fldBehavior", "fldAi"]
        assert asyncio.run(table.list_record_ids()) == ["recA", "recB", "rec3"]
        assert asyncio.run(table.get_value("fldAi", "recB")) == {"id": "opt1", "text": "违规"}
        assert asyncio.run(table.get_value("fldAi", "recA")) is None

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON 解析失败"):
            load_json_table(path)

    def test_root_must_be_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_json_table(path)


class TestOpenTable:
    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="仅支持"):
            open_table(tmp_path / "records.csv")

    def test_dispatch_json(self, tmp_path: Path) -> None:
        path = tmp_path / "t.JSON"
        path.write_text('{"fields": [], "records": []}', encoding="utf-8")
        assert len(open_table(path)) == 0


class TestMemoryTable:
    def test_unknown_field_and_record(self, review_table: MemoryTable) -> None:
        with pytest.raises(AccessorError, match="字段不存在"):
            asyncio.run(review_table.get_value("fldMissing", "rec1"))
        with pytest.raises(AccessorError, match="记录不存在"):
            asyncio.run(review_table.get_value("fldAi", "rec99"))

    def test_make_getter(self, review_table: MemoryTable) -> None:
        getter = make_getter(review_table, "fldReviewer")
        assert asyncio.run(getter("rec3")) == "违规"


class TestResolveFieldId:
    def test_id_then_name(self, review_fields: list[FieldOption]) -> None:
        assert resolve_field_id(review_fields, "fldAi") == "fldAi"
        assert resolve_field_id(review_fields, " 复核员判定结果 ") == "fldReviewer"
        assert resolve_field_id(review_fields, "不存在") is None
        assert resolve_field_id(review_fields, None) is None

    def test_id_wins_over_name(self) -> None:
        fields = [FieldOption(id="B", display_name="A"), FieldOption(id="A", display_name="行为类型")]
        assert resolve_field_id(fields, "A") == "A"


class TestJsonConfigStore:
    CONFIG = ChartConfig(behaviorFieldId="A", aiFieldId="B", reviewerFieldId="C")

    def test_missing_file(self, tmp_path: Path) -> None:
        assert asyncio.run(JsonConfigStore(tmp_path / "none.json").get()) is None

    def test_save_writes_host_layout_and_notifies(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "dashboard_config.json"
        store = JsonConfigStore(path)
        listener = MagicMock()
        store.on_change(listener)

        asyncio.run(store.save(self.CONFIG))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {
            "customConfig": {"behaviorFieldId": "A", "aiFieldId": "B", "reviewerFieldId": "C"},
            "dataConditions": [],
        }
        listener.assert_called_once_with(self.CONFIG)
        assert asyncio.run(JsonConfigStore(path).get()) == self.CONFIG

    def test_flat_layout_accepted(self, tmp_path: Path) -> None:
        path = tmp_path / "flat.json"
        path.write_text('{"behaviorFieldId": "A", "aiFieldId": "B"}', encoding="utf-8")
        config = asyncio.run(JsonConfigStore(path).get())
        assert config == ChartConfig(behaviorFieldId="A", aiFieldId="B")

    def test_check_for_changes(self, tmp_path: Path) -> None:
        path = tmp_path / "dashboard_config.json"
        store = JsonConfigStore(path)
        asyncio.run(store.save(ChartConfig(behaviorFieldId="A")))
        listener = MagicMock()
        off = store.on_change(listener)

        assert store.check_for_changes() is False
        # 其他协作方改写了文件
        path.write_text(json.dumps({"customConfig": self.CONFIG.to_host()}), encoding="utf-8")
        assert store.check_for_changes() is True
        listener.assert_called_once_with(self.CONFIG)

        off()
        path.write_text(json.dumps({"customConfig": {"behaviorFieldId": "Z"}}), encoding="utf-8")
        assert store.check_for_changes() is True
        listener.assert_called_once()

    def test_corrupt_file_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "dashboard_config.json"
        path.write_text("not json", encoding="utf-8")
        store = JsonConfigStore(path)
        assert asyncio.run(store.get()) is None
        assert store.check_for_changes() is False
