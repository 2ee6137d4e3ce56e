"""统计结果输出：写入 Excel（数据表 + 四折线图），以及控制台文本表格。"""

from __future__ import annotations

import logging
import unicodedata
from pathlib import Path
from typing import Sequence

from openpyxl.chart import LineChart, Reference  # type: ignore[import-untyped]

from core.utils.excel_io import new_sheet
from domain.verdict import SeriesPoint
from models.schemas import ChartSection

logger = logging.getLogger(__name__)

# 图表放置位置（数据表右侧）
CHART_ANCHOR = "H2"


def series_headers(chart: ChartSection) -> tuple[str, ...]:
    """结果表表头：行为类型 + 各折线名称。"""
    return (chart.category_label, *(s.name for s in chart.series))


def series_rows(series: Sequence[SeriesPoint], chart: ChartSection) -> list[tuple[str | int, ...]]:
    """按折线配置顺序取计数，拼成结果行。"""
    return [(p.category, *(getattr(p, s.key) for s in chart.series)) for p in series]


def write_series_excel(
    series: Sequence[SeriesPoint],
    output_path: Path,
    chart: ChartSection | None = None,
    *,
    sheet_title: str = "行为判定统计",
) -> Path:
    """
    将图表数据写入 Excel：第 1 行表头，第 2 行起每个行为类型一行，右侧插入折线图。
    无数据时只写表头与提示文本，不插入图表。返回写入路径。
    """
    chart = chart or ChartSection()
    output_path = Path(output_path)
    rows = series_rows(series, chart)
    wb, ws = new_sheet(sheet_title, series_headers(chart), rows)

    if not rows:
        ws.cell(row=2, column=1, value=chart.empty_text)
    else:
        line_chart = LineChart()
        line_chart.title = chart.title
        line_chart.x_axis.title = chart.category_label
        line_chart.y_axis.title = "数量"
        line_chart.height = 10
        line_chart.width = max(16, 2.5 * len(rows))
        data = Reference(ws, min_col=2, max_col=1 + len(chart.series), min_row=1, max_row=len(rows) + 1)
        line_chart.add_data(data, titles_from_data=True)
        line_chart.set_categories(Reference(ws, min_col=1, min_row=2, max_row=len(rows) + 1))
        for line, cfg in zip(line_chart.series, chart.series):
            line.smooth = True
            if cfg.color:
                line.graphicalProperties.line.solidFill = cfg.color
        ws.add_chart(line_chart, CHART_ANCHOR)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        wb.save(output_path)
    finally:
        wb.close()
    logger.info("已写入统计结果: %s（%d 个行为类型）", output_path, len(rows))
    return output_path


def _display_width(text: str) -> int:
    """终端显示宽度：全角字符记 2。"""
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


def _pad(text: str, width: int) -> str:
    return text + " " * max(0, width - _display_width(text))


def format_series_table(series: Sequence[SeriesPoint], chart: ChartSection | None = None) -> str:
    """控制台文本表格；无数据时返回提示文本。"""
    chart = chart or ChartSection()
    if not series:
        return chart.empty_text
    headers = series_headers(chart)
    body = [[str(v) for v in row] for row in series_rows(series, chart)]
    widths = [max(_display_width(row[i]) for row in [list(headers), *body]) for i in range(len(headers))]
    lines = ["  ".join(_pad(h, w) for h, w in zip(headers, widths)).rstrip()]
    lines.append("  ".join("-" * w for w in widths))
    for row in body:
        lines.append("  ".join(_pad(v, w) for v, w in zip(row, widths)).rstrip())
    return "\n".join(lines)
