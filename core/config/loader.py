"""统一配置加载：从 config/app_config.yaml 读取并用 AppConfigSchema 校验，缺失或无效时使用默认值。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from models.schemas import AppConfigSchema

from . import paths as _paths

logger = logging.getLogger(__name__)

APP_CONFIG_FILENAME = "app_config.yaml"


def get_app_config_path() -> Path:
    """app_config.yaml 路径（config 目录下）。"""
    return _paths.get_config_dir() / APP_CONFIG_FILENAME


def _load_yaml(path: Path) -> dict[str, Any] | None:
    """读取 YAML 文件；不存在或解析失败返回 None，根节点不是映射时视为空。"""
    if not path.exists():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError) as e:
        logger.warning("读取 YAML 失败 %s: %s", path, e)
        return None
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("配置文件根节点应为映射，已忽略: %s", path)
        return {}
    return data


def load_app_config_yaml(path: Path | None = None) -> AppConfigSchema:
    """
    加载统一配置：读取 app_config.yaml 并校验。
    文件不存在时使用默认；校验失败时记录警告并整体回退为默认。
    """
    yaml_path = path or get_app_config_path()
    data = _load_yaml(yaml_path)
    if data is None:
        logger.info("未找到配置文件，使用默认配置: %s", yaml_path)
        data = {}
    try:
        return AppConfigSchema.model_validate(data)
    except ValidationError as e:
        logger.warning("配置校验失败，使用默认配置: %s", e)
        return AppConfigSchema.model_validate({})
