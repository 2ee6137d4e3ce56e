"""
文件型配置存储：仪表盘字段配置保存为 JSON，结构与宿主 saveConfig 一致：

    {"customConfig": {"behaviorFieldId": ..., "aiFieldId": ..., "reviewerFieldId": ...},
     "dataConditions": []}

save() 后通知监听者；check_for_changes() 检测其他协作方对文件的修改并通知。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from domain.verdict import ChartConfig

from .host import ConfigListeners

logger = logging.getLogger(__name__)

CUSTOM_CONFIG_KEY = "customConfig"
DATA_CONDITIONS_KEY = "dataConditions"


def _parse_config(data: Any) -> ChartConfig | None:
    """从存储内容解析配置；兼容直接存放三个字段的扁平结构。"""
    if not isinstance(data, dict):
        return None
    raw = data.get(CUSTOM_CONFIG_KEY, data)
    if not isinstance(raw, dict):
        return None
    try:
        return ChartConfig.model_validate(raw)
    except ValidationError as e:
        logger.warning("配置内容无效，已忽略: %s", e)
        return None


class JsonConfigStore(ConfigListeners):
    """以 JSON 文件持久化的配置存储。"""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._last: ChartConfig | None = None

    def _read(self) -> ChartConfig | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("读取配置文件失败 %s: %s", self.path, e)
            return None
        return _parse_config(data)

    async def get(self) -> ChartConfig | None:
        self._last = self._read()
        return self._last

    async def save(self, config: ChartConfig) -> None:
        payload = {CUSTOM_CONFIG_KEY: config.to_host(), DATA_CONDITIONS_KEY: []}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise RuntimeError(f"保存配置失败: {self.path}") from e
        logger.info("配置已保存: %s", self.path)
        self._last = config
        self._notify(config)

    def check_for_changes(self) -> bool:
        """重新读取文件；与上次读到的配置不同则通知监听者并返回 True。"""
        current = self._read()
        if current is None or current == self._last:
            return False
        self._last = current
        logger.info("检测到配置变更: %s", current.to_host())
        self._notify(current)
        return True
