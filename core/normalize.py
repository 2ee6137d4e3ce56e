"""
单元格值归一化：把宿主表格返回的各种取值「抠出一个可读字符串」。

取值形态：None、文本、带 text/name 的对象（单选、人员等）、以上形态的列表（多选、富文本分段），
以及数字、布尔等其他值。归一化对任意输入都不抛异常，无法识别的形态退化为字符串表示。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# 带标签对象按此顺序取值：text 优先于 name
TAG_KEYS = ("text", "name")

_MISSING = object()


def _tag_value(value: Any, key: str) -> Any:
    """取对象的标签值：映射按键取，其余对象按属性取；不存在时返回 _MISSING。"""
    if isinstance(value, Mapping):
        return value[key] if key in value else _MISSING
    try:
        return getattr(value, key, _MISSING)
    except Exception:
        return _MISSING


def _to_text(value: Any) -> str:
    """其他值转文本：布尔为 true/false，整数值的浮点数不带 .0，与表格中的显示一致。"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    try:
        return str(value)
    except Exception:
        return ""


def normalize_text(value: Any) -> str:
    """
    将单元格原始值归一化为规范文本，无有效文本时返回空字符串。

    - None -> ""
    - str -> 原样返回
    - list / tuple -> 逐层取第一个元素再归一化；空列表或引用自身的列表 -> ""
    - 带 text 或 name 的对象 -> text 优先，其次 name；标签值为 None 时 -> ""
    - 其他 -> 字符串表示
    """
    # 单选、多选字段常见结构：列表 / 对象里带 text 或 name
    seen: set[int] = set()
    while isinstance(value, (list, tuple)):
        if not value or id(value) in seen:
            return ""
        seen.add(id(value))
        value = value[0]

    if value is None:
        return ""
    if isinstance(value, str):
        return value

    for key in TAG_KEYS:
        tag = _tag_value(value, key)
        if tag is _MISSING:
            continue
        if tag is None:
            return ""
        return tag if isinstance(tag, str) else _to_text(tag)

    return _to_text(value)
