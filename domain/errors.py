"""行为判定统计的异常类型。"""

from __future__ import annotations


class VerdictChartError(RuntimeError):
    """本项目异常基类。"""


class AccessorError(VerdictChartError):
    """读取单元格值失败（宿主 I/O 错误、字段或记录不存在）；整次汇总随之中止。"""

    def __init__(self, field_id: str | None, record_id: str | None, message: str = "") -> None:
        self.field_id = field_id
        self.record_id = record_id
        detail = message or "读取单元格失败"
        super().__init__(f"{detail}: field={field_id}, record={record_id}")
