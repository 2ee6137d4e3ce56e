"""
仪表盘控制器：持有当前配置与图表数据，在配置或数据变化时重新汇总。

- 模式（DashboardMode）显式传入：创建 / 配置态只加载字段列表，展示态才汇总。
- 状态（DashboardStatus）：loading 加载中；empty 无数据或配置不完整；ready 有数据。
- 每次汇总分配递增的运行序号，只采用最新一次运行的结果，过期结果直接丢弃。
- 取值失败（AccessorError）时结束加载、保留上次结果并记录 last_error，不发布部分结果。
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable

from core.aggregate import aggregate_verdicts, is_aggregation_ready
from domain.errors import AccessorError
from domain.verdict import ChartConfig, SeriesPoint
from infrastructure.host import ConfigStore, RecordSource, SchemaLookup, Unsubscribe, make_getter
from models.schemas import VerdictSection

logger = logging.getLogger(__name__)

_STOP = "stop"


class DashboardMode(str, Enum):
    """宿主仪表盘所处模式。"""

    CREATE = "create"
    CONFIG = "config"
    VIEW = "view"

    @property
    def is_config(self) -> bool:
        return self in (DashboardMode.CREATE, DashboardMode.CONFIG)


class DashboardStatus(str, Enum):
    """展示状态：加载中与「已加载但为空」需可区分。"""

    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"


class VerdictDashboard:
    """行为判定统计仪表盘。使用方式：await start()，之后 refresh() 或在后台 run() 响应变更信号。"""

    def __init__(
        self,
        store: ConfigStore,
        source: RecordSource,
        schema: SchemaLookup | None = None,
        *,
        mode: DashboardMode = DashboardMode.VIEW,
        labels: VerdictSection | None = None,
        locale: str | None = None,
        concurrency: int = 1,
        on_rendered: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._source = source
        self._schema = schema
        self.mode = mode
        self.labels = labels or VerdictSection()
        self.locale = locale
        self.concurrency = concurrency
        self._on_rendered = on_rendered

        self.config = ChartConfig()
        self.series: list[SeriesPoint] = []
        self.status = DashboardStatus.EMPTY
        self.last_error: AccessorError | None = None
        self.field_options: list[dict[str, str]] = []

        self._generation = 0
        self._signals: asyncio.Queue[str] | None = None
        self._tasks: set[asyncio.Task[bool]] = set()
        self._unsubscribe: Unsubscribe | None = None

    @property
    def generation(self) -> int:
        """最近一次发起的汇总运行序号。"""
        return self._generation

    # ----- 生命周期 -----

    async def start(self) -> None:
        """读取已保存的配置、订阅配置变更，并按模式加载字段列表或汇总一次。"""
        stored = await self._store.get()
        if stored is not None:
            self.config = stored
        # 订阅前先建好信号队列，run() 启动前到达的变更不会丢失
        if self._signals is None:
            self._signals = asyncio.Queue()
        if self._unsubscribe is None:
            self._unsubscribe = self._store.on_change(self._on_config_change)
        if self.mode.is_config:
            await self.load_field_options()
        else:
            await self.refresh()

    def close(self) -> None:
        """取消配置变更订阅。"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def set_mode(self, mode: DashboardMode) -> None:
        """切换模式；切到展示态时发出一次重算信号。"""
        self.mode = mode
        if not mode.is_config:
            self._signal("mode")

    # ----- 变更信号与重算循环 -----

    def _on_config_change(self, config: ChartConfig) -> None:
        self.config = config
        logger.info("收到配置变更: %s", config.to_host())
        if not self.mode.is_config and not is_aggregation_ready(config):
            # 门槛不满足时立即清空，不等待重算循环
            self._clear_series()
            return
        self._signal("config")

    def notify_data_changed(self) -> None:
        """宿主数据变化时调用，触发一次重算。"""
        self._signal("data")

    def _signal(self, reason: str) -> None:
        if self._signals is not None:
            self._signals.put_nowait(reason)

    def stop(self) -> None:
        """结束 run() 循环（已发起的汇总会等待完成）。"""
        self._signal(_STOP)

    @staticmethod
    def _log_task_failure(task: asyncio.Task[bool]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("汇总任务异常退出", exc_info=exc)

    async def run(self) -> None:
        """重算循环：每收到一个信号就发起一次新的汇总；新运行会使仍在进行的旧运行结果作废。"""
        if self._signals is None:
            self._signals = asyncio.Queue()
        signals = self._signals
        try:
            while True:
                reason = await signals.get()
                if reason == _STOP:
                    break
                logger.debug("重算信号: %s", reason)
                task = asyncio.create_task(self.refresh())
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
                task.add_done_callback(self._log_task_failure)
        finally:
            if self._tasks:
                await asyncio.wait(list(self._tasks))

    # ----- 汇总 -----

    async def _list_record_ids(self) -> list[str]:
        try:
            return list(await self._source.list_record_ids())
        except AccessorError:
            raise
        except Exception as e:
            raise AccessorError(None, None, "读取记录列表失败") from e

    def _clear_series(self) -> bool:
        """配置不完整：作废进行中的运行，立即清空图表数据。"""
        logger.info("字段配置不完整，清空图表数据")
        self._generation += 1
        self.last_error = None
        return self._settle(self._generation, [])

    def _settle(self, generation: int, series: list[SeriesPoint] | None) -> bool:
        """运行结束：仅当仍是最新一次运行时更新数据与状态，并通知宿主渲染完成。"""
        if generation != self._generation:
            logger.info("丢弃过期的汇总运行 #%d（最新 #%d）", generation, self._generation)
            return False
        if series is not None:
            self.series = series
        self.status = DashboardStatus.READY if self.series else DashboardStatus.EMPTY
        if self._on_rendered is not None:
            self._on_rendered()
        return True

    async def refresh(self) -> bool:
        """
        按当前配置汇总一次。

        Returns:
            本次结果是否已采用；配置态、被更新的运行取代或取值失败时为 False。
        """
        if self.mode.is_config:
            return False

        config = self.config
        if not is_aggregation_ready(config):
            return self._clear_series()

        self._generation += 1
        generation = self._generation

        self.status = DashboardStatus.LOADING
        series: list[SeriesPoint] | None = None
        try:
            record_ids = await self._list_record_ids()
            series = await aggregate_verdicts(
                config,
                record_ids,
                make_getter(self._source, config.behavior_field_id or ""),
                make_getter(self._source, config.ai_field_id or ""),
                make_getter(self._source, config.reviewer_field_id or ""),
                labels=self.labels,
                locale=self.locale,
                concurrency=self.concurrency,
            )
        except AccessorError as e:
            if generation == self._generation:
                logger.error("汇总失败，保留上次结果: %s", e)
                self.last_error = e
        else:
            if generation == self._generation:
                self.last_error = None
        finally:
            accepted = self._settle(generation, series)
        return accepted and series is not None

    # ----- 配置态 -----

    async def load_field_options(self) -> list[dict[str, str]]:
        """读取当前表的全部字段，转为下拉选项 [{label, value}]。"""
        schema = self._schema if self._schema is not None else self._source
        fields = await schema.list_fields()  # type: ignore[union-attr]
        self.field_options = [f.to_option() for f in fields]
        return self.field_options

    def select_field(self, role: str, field_id: str | None) -> ChartConfig:
        """本地修改某个角色的字段（behavior / ai / reviewer），保存前不影响存储。"""
        self.config = self.config.with_field(role, field_id)
        return self.config

    async def save_config(self) -> None:
        """把当前配置写回宿主存储。"""
        await self._store.save(self.config)
