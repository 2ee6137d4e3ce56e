"""
行为判定统计入口：读取审核记录表（.xlsx / .json），按「行为类型」统计 AI 与复核员的
「正常 / 违规」判定数量，输出控制台表格与带折线图的 Excel。

流程拆分为：init_config -> load_table -> resolve_chart_config -> run_dashboard -> save_output，
便于单测与维护；支持可选命令行参数（字段名、--save-config、--list-fields、--no-loop）。
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime
from pathlib import Path

from app import DashboardMode, VerdictDashboard, format_series_table, write_series_excel
from core.config import (
    AggregationConfig,
    AppSettings,
    ChartStyleConfig,
    CollationConfig,
    VerdictConfig,
    get_config_dir,
    get_log_dir,
    get_output_dir,
    inject,
    inject_all,
    load_app_config,
    normalize_input_path,
)
from domain.verdict import FIELD_ROLES, ChartConfig, FieldOption, SeriesPoint
from infrastructure import JsonConfigStore, MemoryTable, open_table, resolve_field_id
from models.schemas import RunConfigSchema

logger = logging.getLogger(__name__)

QUIT_WORDS = ("q", "quit", "exit")

# 角色 -> 命令行参数中文说明
ROLE_LABELS = {
    "behavior": "行为类型字段",
    "ai": "AI 判定结果字段",
    "reviewer": "复核员判定结果字段",
}


def init_config(
    *,
    output_dir: Path | None = None,
    log_dir: Path | None = None,
    config_dir: Path | None = None,
) -> RunConfigSchema:
    """
    初始化配置与日志：加载应用配置、创建日志目录、配置 logging，返回 RunConfig。

    Args:
        output_dir: 结果输出目录，默认从 core.config.get_output_dir() 获取。
        log_dir: 日志目录，默认从 core.config.get_log_dir() 获取。
        config_dir: 配置目录（字段配置存储文件所在），默认从 core.config.get_config_dir() 获取。
    """
    load_app_config()
    app_cfg = inject(AppSettings)
    config = RunConfigSchema(
        output_dir=output_dir or get_output_dir(),
        log_dir=log_dir or get_log_dir(),
        config_dir=config_dir or get_config_dir(),
        config_store_filename=app_cfg.config_store_filename,
    )
    _setup_logging(config.log_dir, app_cfg.log_prefix)
    logger.info("配置已加载: output_dir=%s, config_store=%s", config.output_dir, config.config_store_path)
    return config


def _setup_logging(log_dir: Path, prefix: str = "verdict_chart") -> None:
    """
    将日志按日期写入 log_dir，文件名 <prefix>_YYYYMMDD.log。
    若已存在指向当日日志文件的 FileHandler 则不再添加，避免重复。
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y%m%d")
    log_file = log_dir / f"{prefix}_{today}.log"
    log_path = str(log_file.resolve())
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == log_path:
            return
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)


def load_table(path: Path, sheet_name: str | None = None) -> MemoryTable:
    """
    打开审核记录表。

    Raises:
        FileNotFoundError: 文件不存在。
        ValueError: 不支持的文件类型或内容无法解析。
    """
    try:
        return open_table(path, sheet_name)
    except (FileNotFoundError, ValueError):
        raise
    except Exception as e:
        raise ValueError(f"读取记录表失败: {path}") from e


def resolve_chart_config(
    fields: list[FieldOption],
    stored: ChartConfig | None,
    selections: dict[str, str | None],
) -> ChartConfig:
    """
    把命令行给出的字段（名称或 ID）解析为字段 ID；未给出的角色沿用已保存配置。

    Raises:
        ValueError: 命令行给出的字段在表中不存在。
    """
    config = stored or ChartConfig()
    for role in FIELD_ROLES:
        wanted = selections.get(role)
        if not wanted:
            continue
        field_id = resolve_field_id(fields, wanted)
        if field_id is None:
            raise ValueError(f"表中没有{ROLE_LABELS[role]}「{wanted}」")
        config = config.with_field(role, field_id)
    return config


async def run_dashboard(
    table: MemoryTable,
    store: JsonConfigStore,
    chart_config: ChartConfig,
    *,
    save: bool = False,
) -> VerdictDashboard:
    """按给定配置汇总一次；save 为 True 时先把配置写回存储。"""
    labels, collation, aggregation = inject_all(VerdictConfig, CollationConfig, AggregationConfig)
    dashboard = VerdictDashboard(
        store,
        table,
        mode=DashboardMode.VIEW,
        labels=labels,
        locale=collation.locale,
        concurrency=aggregation.fetch_concurrency,
    )
    dashboard.config = chart_config
    if save:
        await dashboard.save_config()
    await dashboard.refresh()
    return dashboard


async def list_field_options(table: MemoryTable, store: JsonConfigStore) -> list[dict[str, str]]:
    """配置态：列出当前表全部字段，供选择三个字段。"""
    dashboard = VerdictDashboard(store, table, mode=DashboardMode.CONFIG)
    await dashboard.start()
    dashboard.close()
    return dashboard.field_options


def save_output(
    series: list[SeriesPoint],
    output_dir: Path,
    *,
    source_stem: str | None = None,
) -> Path:
    """
    将统计结果写入 Excel 并保存到 output_dir。

    Returns:
        写入的 Excel 文件路径。

    Raises:
        RuntimeError: 写入 Excel 失败。
    """
    app_cfg = inject(AppSettings)
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if source_stem:
        output_filename = f"{source_stem}_{app_cfg.output_stem}_{stamp}.xlsx"
    else:
        output_filename = f"{app_cfg.output_stem}_{stamp}.xlsx"
    output_path = output_dir / output_filename
    try:
        write_series_excel(series, output_path, inject(ChartStyleConfig), sheet_title=app_cfg.sheet_title)
    except Exception as e:
        raise RuntimeError(f"写入结果文件失败: {output_path}") from e
    return output_path


def _selections(parsed: argparse.Namespace) -> dict[str, str | None]:
    return {
        "behavior": parsed.behavior_field,
        "ai": parsed.ai_field,
        "reviewer": parsed.reviewer_field,
    }


def _process_one_file(
    input_path: Path,
    config: RunConfigSchema,
    parsed: argparse.Namespace,
    store: JsonConfigStore | None = None,
) -> Path | None:
    """
    处理单个记录表：读取 -> 解析字段 -> 汇总 -> 写结果。
    返回结果文件路径；读取、字段解析或汇总失败时返回 None 并已打印原因。
    store 为空时按 config.config_store_path 新建字段配置存储。
    """
    try:
        table = load_table(input_path, parsed.sheet)
    except (FileNotFoundError, ValueError) as e:
        print(f"读取文件失败 {input_path}: {e}")
        return None

    if store is None:
        store = JsonConfigStore(config.config_store_path)
    fields = asyncio.run(table.list_fields())

    if parsed.list_fields:
        options = asyncio.run(list_field_options(table, store))
        for opt in options:
            print(f"  {opt['value']}\t{opt['label']}")
        return None

    try:
        stored = asyncio.run(store.get())
        chart_config = resolve_chart_config(fields, stored, _selections(parsed))
    except ValueError as e:
        print(f"字段配置有误: {e}")
        return None

    if not chart_config.is_complete:
        missing = [ROLE_LABELS[r] for r in FIELD_ROLES if not chart_config.field_id(r)]
        print(f"尚未完成字段配置，缺少: {'、'.join(missing)}")

    dashboard = asyncio.run(run_dashboard(table, store, chart_config, save=parsed.save_config))
    if dashboard.last_error is not None:
        print(f"汇总失败: {dashboard.last_error}")
        return None

    print(format_series_table(dashboard.series, inject(ChartStyleConfig)))
    try:
        out_path = save_output(dashboard.series, config.output_dir, source_stem=input_path.stem)
    except RuntimeError as e:
        print(e)
        return None
    print(f"已写入: {out_path}")
    return out_path


def _report_config_change(chart_config: ChartConfig) -> None:
    print(f"字段配置已更新: {chart_config.to_host()}")


def _parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """解析命令行参数；args 为 None 时使用 sys.argv，便于单测注入。"""
    parser = argparse.ArgumentParser(
        description="行为判定统计：按行为类型汇总 AI 与复核员的「正常 / 违规」判定数量并输出 Excel 折线图。",
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="审核记录表路径（.xlsx 或 .json）；不指定则进入交互式输入。",
    )
    parser.add_argument("--behavior-field", default=None, help="行为类型字段（名称或字段 ID）")
    parser.add_argument("--ai-field", default=None, help="AI 判定结果字段（名称或字段 ID）")
    parser.add_argument("--reviewer-field", default=None, help="复核员判定结果字段（名称或字段 ID）")
    parser.add_argument("--sheet", default=None, help="Excel 工作表名，默认活动表。")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="把本次使用的字段配置保存下来，之后可省略字段参数。",
    )
    parser.add_argument(
        "--list-fields",
        action="store_true",
        help="只列出记录表的字段（ID 与名称），不做统计。",
    )
    parser.add_argument(
        "--no-loop",
        action="store_true",
        help="指定 input_file 时仅处理该文件一次后退出，不进入交互循环。",
    )
    return parser.parse_args(args)


def main(args: list[str] | None = None) -> None:
    """
    入口：初始化配置 -> 循环处理输入文件或处理单文件后退出。

    支持命令行：
      python main.py                                   # 交互式输入文件路径
      python main.py 审核记录.xlsx --list-fields --no-loop
      python main.py 审核记录.xlsx --behavior-field 行为类型 --ai-field AI判定结果 \\
          --reviewer-field 复核员判定结果 --save-config --no-loop
    """
    parsed = _parse_args(args)
    config = init_config()
    store = JsonConfigStore(config.config_store_path)
    store.on_change(_report_config_change)

    if not parsed.no_loop or not parsed.input_file:
        print("请拖动或输入审核记录表路径（.xlsx / .json），输入 q 退出。\n")

    pending_path: str | None = parsed.input_file.strip() if parsed.input_file else None

    while True:
        file_path_str = pending_path if pending_path else input("文件路径: ").strip()
        pending_path = None

        if not file_path_str:
            continue
        if file_path_str.lower() in QUIT_WORDS:
            print("退出。")
            break

        path = normalize_input_path(file_path_str)
        if not path or not path.exists():
            print(f"文件不存在: {path}\n")
            if parsed.no_loop and parsed.input_file:
                break
            continue

        # 两次处理之间字段配置文件可能被其他协作方改写
        store.check_for_changes()
        _process_one_file(path, config, parsed, store)
        print(f"已处理: {path}\n")

        if parsed.no_loop and parsed.input_file:
            break


if __name__ == "__main__":
    main()
