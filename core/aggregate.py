"""
汇总引擎：按「行为类型」分组，统计 AI 与复核员的「正常 / 违规」判定数量。

对每条记录读取三个字段的原始值并归一化：行为类型为空的记录整条跳过；
AI 判定与复核员判定各自独立计数。结果按区域排序规则（默认中文拼音）升序返回。
任一取值失败时整次汇总中止并抛出 AccessorError，不返回部分结果。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from domain.errors import AccessorError
from domain.verdict import CategoryTally, ChartConfig, SeriesPoint
from models.schemas import VerdictSection

from .collation import sort_texts
from .normalize import normalize_text

logger = logging.getLogger(__name__)

# 按记录 ID 异步取单元格原始值
ValueGetter = Callable[[str], Awaitable[Any]]
# 一条记录的三个原始值：(行为类型, AI 判定, 复核员判定)
RawRecord = tuple[Any, Any, Any]


def is_aggregation_ready(config: ChartConfig | None) -> bool:
    """配置门槛：三个字段均已设置才可汇总。"""
    return config is not None and config.is_complete


async def _fetch(getter: ValueGetter, field_id: str | None, record_id: str) -> Any:
    """取一个值；宿主异常统一包装为 AccessorError。"""
    try:
        return await getter(record_id)
    except AccessorError:
        raise
    except Exception as e:
        raise AccessorError(field_id, record_id, f"取值失败（{type(e).__name__}）") from e


async def _fetch_records(
    config: ChartConfig,
    record_ids: Sequence[str],
    get_behavior: ValueGetter,
    get_ai: ValueGetter,
    get_reviewer: ValueGetter,
    concurrency: int,
) -> list[RawRecord]:
    """读取全部记录的三个原始值，返回顺序与 record_ids 一致。"""

    async def fetch_one(record_id: str) -> RawRecord:
        behavior_raw = await _fetch(get_behavior, config.behavior_field_id, record_id)
        ai_raw = await _fetch(get_ai, config.ai_field_id, record_id)
        reviewer_raw = await _fetch(get_reviewer, config.reviewer_field_id, record_id)
        return behavior_raw, ai_raw, reviewer_raw

    if concurrency <= 1:
        return [await fetch_one(record_id) for record_id in record_ids]

    sem = asyncio.Semaphore(concurrency)

    async def fetch_with_sem(record_id: str) -> RawRecord:
        async with sem:
            return await fetch_one(record_id)

    tasks = [asyncio.ensure_future(fetch_with_sem(record_id)) for record_id in record_ids]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        # 一条失败即整次中止，未完成的取值不再等待
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def tally_records(
    records: Sequence[RawRecord],
    *,
    normal: str = "正常",
    violation: str = "违规",
) -> dict[str, CategoryTally]:
    """把已取到的原始值按行为类型累加为计数表。"""
    tallies: dict[str, CategoryTally] = {}
    skipped = 0
    for behavior_raw, ai_raw, reviewer_raw in records:
        behavior = normalize_text(behavior_raw)
        if not behavior:
            # 没有行为类型就整条跳过，两项判定也不计入
            skipped += 1
            continue
        tally = tallies.setdefault(behavior, CategoryTally())
        tally.count(
            normalize_text(ai_raw),
            normalize_text(reviewer_raw),
            normal=normal,
            violation=violation,
        )
    if skipped:
        logger.debug("行为类型为空，跳过 %d 条记录", skipped)
    return tallies


def build_series(tallies: dict[str, CategoryTally], locale: str | None = None) -> list[SeriesPoint]:
    """计数表转为图表数据，按行为类型区域排序。"""
    categories = sort_texts(list(tallies), locale)
    return [SeriesPoint.from_tally(category, tallies[category]) for category in categories]


async def aggregate_verdicts(
    config: ChartConfig | None,
    record_ids: Sequence[str],
    get_behavior: ValueGetter,
    get_ai: ValueGetter,
    get_reviewer: ValueGetter,
    *,
    labels: VerdictSection | None = None,
    locale: str | None = None,
    concurrency: int = 1,
) -> list[SeriesPoint]:
    """
    汇总一次：返回按行为类型排序的图表数据。

    Args:
        config: 当前仪表盘配置；未完成三字段配置时直接返回 []，不调用任何取值函数。
        record_ids: 宿主给出的记录 ID 列表，顺序不影响结果。
        get_behavior / get_ai / get_reviewer: 三个字段的异步取值函数。
        labels: 「正常 / 违规」规范文本，默认 正常 / 违规。
        locale: 排序区域，默认 zh-CN。
        concurrency: 同时读取的记录数，1 为逐条顺序读取。

    Returns:
        list[SeriesPoint]：每个非空行为类型一项。

    Raises:
        AccessorError: 任一取值失败，整次汇总中止。
    """
    if config is None or not config.is_complete:
        logger.info("字段配置不完整，跳过汇总")
        return []
    labels = labels or VerdictSection()

    records = await _fetch_records(config, record_ids, get_behavior, get_ai, get_reviewer, concurrency)
    tallies = tally_records(records, normal=labels.normal, violation=labels.violation)
    series = build_series(tallies, locale)
    logger.info("汇总完成：记录 %d 条，行为类型 %d 个", len(record_ids), len(series))
    return series
