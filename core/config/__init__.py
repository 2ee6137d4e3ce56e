"""
core.config：整合路径、统一 YAML 配置 app_config.yaml 及加载。

- 配置：config/app_config.yaml（含 app、verdict、collation、aggregation、chart）。
- 路径：config 目录及 output/logs（见 .paths）。
- 统一加载：load_app_config() 启动时调用一次；各节通过 inject(Annotated 类型) 获取。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from models.schemas import (
    AggregationSection,
    AppConfigSchema,
    AppSection,
    ChartSection,
    CollationSection,
    VerdictSection,
)

from . import deps as _deps
from . import loader as _loader
from . import paths as _paths

Depends = _deps.Depends
inject = _deps.inject
inject_all = _deps.inject_all
logger = logging.getLogger(__name__)

# ----- 路径（直接转发） -----

get_app_config_path = _loader.get_app_config_path
get_base_dir = _paths.get_base_dir
get_config_dir = _paths.get_config_dir
get_output_dir = _paths.get_output_dir
get_log_dir = _paths.get_log_dir
normalize_input_path = _paths.normalize_input_path

# ----- 统一加载与缓存 -----

_app_config: AppConfigSchema | None = None
_app_config_path: Path | None = None


def load_app_config(path: Path | None = None) -> AppConfigSchema:
    """加载全部配置：从 app_config.yaml 读取并缓存；已加载时直接返回缓存。"""
    global _app_config, _app_config_path

    if _app_config is not None:
        return _app_config

    _app_config_path = path or get_app_config_path()
    _app_config = _loader.load_app_config_yaml(_app_config_path)
    logger.debug("公用配置已加载: config_file=%s", _app_config_path)
    return _app_config


def reset_app_config() -> None:
    """清空缓存，下次 load_app_config() 重新读取文件。"""
    global _app_config, _app_config_path
    _app_config = None
    _app_config_path = None


def get_app_config() -> AppConfigSchema:
    """返回已加载的配置；未加载时先加载。"""
    return load_app_config()


def _get_app_section() -> AppSection:
    return get_app_config().app


def _get_verdict_section() -> VerdictSection:
    return get_app_config().verdict


def _get_collation_section() -> CollationSection:
    return get_app_config().collation


def _get_aggregation_section() -> AggregationSection:
    return get_app_config().aggregation


def _get_chart_section() -> ChartSection:
    return get_app_config().chart


# ----- 依赖注入：Annotated 类型别名（供 inject() 使用） -----

AppConfig = Annotated[AppConfigSchema, Depends(get_app_config)]
AppSettings = Annotated[AppSection, Depends(_get_app_section)]
VerdictConfig = Annotated[VerdictSection, Depends(_get_verdict_section)]
CollationConfig = Annotated[CollationSection, Depends(_get_collation_section)]
AggregationConfig = Annotated[AggregationSection, Depends(_get_aggregation_section)]
ChartStyleConfig = Annotated[ChartSection, Depends(_get_chart_section)]


__all__ = [
    "load_app_config",
    "reset_app_config",
    "get_app_config",
    "get_app_config_path",
    "get_base_dir",
    "get_config_dir",
    "get_output_dir",
    "get_log_dir",
    "normalize_input_path",
    "Depends",
    "inject",
    "inject_all",
    "AppConfig",
    "AppSettings",
    "VerdictConfig",
    "CollationConfig",
    "AggregationConfig",
    "ChartStyleConfig",
]
