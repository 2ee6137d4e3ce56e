"""
文件型宿主表：把 Excel 工作表或 JSON 导出加载为 MemoryTable。

- Excel（.xlsx）：第 1 行为表头；字段 ID 为列字母（A、B…），显示名称为表头文本；
  记录 ID 为 rec<行号>，整行为空的行跳过。
- JSON：{"fields": [{"id", "name"}], "records": [{"id", "fields": {字段ID: 值}}]}，
  可保存单选/多选/人员等带 text、name 的取值。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from openpyxl.utils import get_column_letter  # type: ignore[import-untyped]
from tqdm import tqdm  # type: ignore[import-untyped]

from core.utils.excel_io import cell_text, open_excel_read
from domain.verdict import FieldOption

from .host import MemoryTable

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".xlsx", ".json")
RECORD_ID_PREFIX = "rec"


def load_excel_table(path: Path, sheet_name: str | None = None) -> MemoryTable:
    """读取 Excel 工作表为内存表。"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"文件不存在: {path}")

    with open_excel_read(path, sheet_name) as (_wb, ws):
        if ws is None:
            raise ValueError(f"工作簿中没有活动表: {path}")
        rows = ws.iter_rows(min_row=1, values_only=True)
        header_row = next(rows, None)
        if not header_row:
            return MemoryTable([])
        columns: list[tuple[int, FieldOption]] = []
        for idx, value in enumerate(header_row):
            name = cell_text(value)
            if not name:
                continue
            columns.append((idx, FieldOption(id=get_column_letter(idx + 1), display_name=name)))

        records: list[tuple[str, dict[str, Any]]] = []
        total = ws.max_row - 1 if ws.max_row else None
        for row_no, row_tuple in enumerate(tqdm(rows, total=total, desc="读取记录", unit="行"), start=2):
            row = list(row_tuple) if row_tuple else []
            values = {f.id: (row[idx] if idx < len(row) else None) for idx, f in columns}
            if all(v is None or (isinstance(v, str) and not v.strip()) for v in values.values()):
                continue
            records.append((f"{RECORD_ID_PREFIX}{row_no}", values))

    logger.info("已读取 %s：字段 %d 个，记录 %d 条", path.name, len(columns), len(records))
    return MemoryTable([f for _, f in columns], records)


def _parse_field(raw: Any) -> FieldOption | None:
    if not isinstance(raw, dict):
        return None
    field_id = raw.get("id") or raw.get("fieldId")
    if not field_id:
        return None
    return FieldOption(id=field_id, display_name=raw.get("name") or raw.get("display_name") or field_id)


def load_json_table(path: Path) -> MemoryTable:
    """读取 JSON 导出为内存表；结构不符合约定时抛 ValueError。"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"文件不存在: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON 解析失败: {path}") from e
    if not isinstance(data, dict):
        raise ValueError(f"JSON 根节点应为对象: {path}")

    fields = [f for f in (_parse_field(raw) for raw in data.get("fields") or []) if f]
    records: list[tuple[str, dict[str, Any]]] = []
    for idx, raw in enumerate(data.get("records") or [], start=1):
        if not isinstance(raw, dict):
            continue
        record_id = str(raw.get("id") or raw.get("recordId") or f"{RECORD_ID_PREFIX}{idx}")
        values = raw.get("fields")
        records.append((record_id, values if isinstance(values, dict) else {}))

    logger.info("已读取 %s：字段 %d 个，记录 %d 条", path.name, len(fields), len(records))
    return MemoryTable(fields, records)


def open_table(path: Path, sheet_name: str | None = None) -> MemoryTable:
    """按后缀打开宿主表：.xlsx 或 .json。"""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        return load_excel_table(path, sheet_name)
    if suffix == ".json":
        return load_json_table(path)
    raise ValueError(f"仅支持 {' / '.join(SUPPORTED_SUFFIXES)} 输入，当前: {path.suffix or path.name}")
