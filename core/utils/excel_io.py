"""Excel 读写公共逻辑：只读打开、表头文本、新建带表头的工作表。"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import openpyxl  # type: ignore[import-untyped]
from openpyxl.styles import Font  # type: ignore[import-untyped]
from openpyxl.workbook import Workbook  # type: ignore[import-untyped]
from openpyxl.worksheet.worksheet import Worksheet  # type: ignore[import-untyped]


def cell_text(cell_or_value: Any) -> str:
    """支持 openpyxl Cell 或裸值，统一为去首尾空白的 str（用于表头）。"""
    v = getattr(cell_or_value, "value", cell_or_value)
    if v is None:
        return ""
    return str(v).strip()


@contextmanager
def open_excel_read(path: Path, sheet_name: str | None = None) -> Iterator[tuple[Workbook, Worksheet | None]]:
    """以只读、data_only 方式打开 Excel，yield (wb, ws)，退出时关闭 wb。未指定 sheet_name 时取活动表。"""
    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        if sheet_name:
            if sheet_name not in wb.sheetnames:
                raise ValueError(f"工作簿中没有工作表「{sheet_name}」: {path}")
            yield wb, wb[sheet_name]
        else:
            yield wb, wb.active
    finally:
        wb.close()


def new_sheet(
    sheet_title: str,
    headers: tuple[str, ...],
    rows: Iterable[tuple[Any, ...]],
) -> tuple[Workbook, Worksheet]:
    """新建工作簿：第 1 行为加粗表头，第 2 行起为数据；返回 (wb, ws)，由调用方保存。"""
    wb = openpyxl.Workbook()
    ws = wb.active
    if ws is None:
        raise RuntimeError("无法创建工作表")
    ws.title = sheet_title
    bold = Font(bold=True)
    for col, h in enumerate(headers, start=1):
        ws.cell(row=1, column=col, value=h).font = bold
    for row_idx, row_data in enumerate(rows, start=2):
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)
    return wb, ws
