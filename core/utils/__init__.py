"""公共工具：Excel 读写。"""

from .excel_io import cell_text, new_sheet, open_excel_read

__all__ = [
    "cell_text",
    "new_sheet",
    "open_excel_read",
]
