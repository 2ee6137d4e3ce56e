"""
宿主接口：配置存储、字段列表、记录取值三类外部协作方的约定，以及内存实现。

宿主可以是内存表、Excel 文件、JSON 导出或远端 API，只要满足以下约定：
- ConfigStore：get() / on_change(listener) / save(config)
- SchemaLookup：list_fields() -> [FieldOption]
- RecordSource：list_record_ids() / get_value(field_id, record_id)（异步）
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Awaitable, Callable, Protocol

from domain.errors import AccessorError
from domain.verdict import ChartConfig, FieldOption

logger = logging.getLogger(__name__)

ConfigListener = Callable[[ChartConfig], None]
Unsubscribe = Callable[[], None]


class ConfigStore(Protocol):
    """仪表盘配置存储，由宿主持有。"""

    async def get(self) -> ChartConfig | None: ...

    def on_change(self, listener: ConfigListener) -> Unsubscribe: ...

    async def save(self, config: ChartConfig) -> None: ...


class SchemaLookup(Protocol):
    """当前表的字段列表。"""

    async def list_fields(self) -> list[FieldOption]: ...


class RecordSource(Protocol):
    """记录 ID 列表与单元格取值。"""

    async def list_record_ids(self) -> list[str]: ...

    async def get_value(self, field_id: str, record_id: str) -> Any: ...


def make_getter(source: RecordSource, field_id: str) -> Callable[[str], Awaitable[Any]]:
    """把 source.get_value 绑定到某个字段，得到按记录 ID 取值的函数。"""

    async def getter(record_id: str) -> Any:
        return await source.get_value(field_id, record_id)

    return getter


def resolve_field_id(fields: Iterable[FieldOption], name_or_id: str | None) -> str | None:
    """按字段 ID 或显示名称查找字段，返回字段 ID；ID 优先，找不到返回 None。"""
    if not name_or_id:
        return None
    target = name_or_id.strip()
    fields = list(fields)
    for f in fields:
        if f.id == target:
            return f.id
    for f in fields:
        if f.display_name == target:
            return f.id
    return None


class ConfigListeners:
    """配置变更监听：登记、注销与通知。"""

    def __init__(self) -> None:
        self._listeners: list[ConfigListener] = []

    def on_change(self, listener: ConfigListener) -> Unsubscribe:
        self._listeners.append(listener)

        def off() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return off

    def _notify(self, config: ChartConfig) -> None:
        for listener in list(self._listeners):
            listener(config)


class MemoryConfigStore(ConfigListeners):
    """内存配置存储；save 后通知全部监听者（含其他协作方）。"""

    def __init__(self, config: ChartConfig | None = None) -> None:
        super().__init__()
        self._config = config

    async def get(self) -> ChartConfig | None:
        return self._config

    async def save(self, config: ChartConfig) -> None:
        self._config = config
        logger.debug("配置已保存: %s", config.to_host())
        self._notify(config)


class MemoryTable:
    """内存表：字段列表 + 按记录 ID 存放的单元格值。"""

    def __init__(
        self,
        fields: Iterable[FieldOption],
        records: Iterable[tuple[str, Mapping[str, Any]]] = (),
    ) -> None:
        self._fields = list(fields)
        self._field_ids = {f.id for f in self._fields}
        self._records: dict[str, dict[str, Any]] = {}
        for record_id, values in records:
            self._records[record_id] = dict(values)

    def __len__(self) -> int:
        return len(self._records)

    async def list_fields(self) -> list[FieldOption]:
        return list(self._fields)

    async def list_record_ids(self) -> list[str]:
        return list(self._records)

    async def get_value(self, field_id: str, record_id: str) -> Any:
        if field_id not in self._field_ids:
            raise AccessorError(field_id, record_id, "字段不存在")
        try:
            values = self._records[record_id]
        except KeyError:
            raise AccessorError(field_id, record_id, "记录不存在") from None
        return values.get(field_id)
