"""应用层：仪表盘控制器与结果输出。"""

from .dashboard import DashboardMode, DashboardStatus, VerdictDashboard
from .output import format_series_table, write_series_excel

__all__ = [
    "DashboardMode",
    "DashboardStatus",
    "VerdictDashboard",
    "format_series_table",
    "write_series_excel",
]
