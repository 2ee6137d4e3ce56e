"""
区域感知的字符串排序键：中文区域下汉字按拼音（带声调序号）排序，排在拉丁字母与数字之后。

与浏览器 localeCompare(..., 'zh-CN') 的拼音排序一致到字符级：逐字比较，
非汉字按不区分大小写的字符比较，最后以原文兜底保证顺序稳定。
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

from pypinyin import Style, pinyin

DEFAULT_LOCALE = "zh-CN"

# 字符分组：数字/字母等非汉字在前，汉字在后
_GROUP_OTHER = 0
_GROUP_HAN = 1


def _is_han(ch: str) -> bool:
    code = ord(ch)
    return (
        0x4E00 <= code <= 0x9FFF
        or 0x3400 <= code <= 0x4DBF
        or 0x20000 <= code <= 0x2A6DF
        or 0xF900 <= code <= 0xFAFF
    )


@lru_cache(maxsize=4096)
def _han_pinyin(ch: str) -> str:
    """单个汉字的拼音（声调数字在末尾，轻声记 5），如 甲 -> jia3。"""
    syllables = pinyin(ch, style=Style.TONE3, heteronym=False, neutral_tone_with_five=True)
    if syllables and syllables[0]:
        return syllables[0][0]
    return ch


def _char_key(ch: str) -> tuple[int, str, str]:
    if _is_han(ch):
        return (_GROUP_HAN, _han_pinyin(ch), ch)
    return (_GROUP_OTHER, ch.casefold(), ch)


def zh_collation_key(text: str) -> tuple[tuple[tuple[int, str, str], ...], str]:
    """中文排序键：逐字 (分组, 拼音或小写字符, 原字符)，再以原文兜底。"""
    return tuple(_char_key(ch) for ch in text), text


def default_collation_key(text: str) -> tuple[str, str]:
    """非中文区域：不区分大小写比较，原文兜底。"""
    return text.casefold(), text


def collation_key_for(locale: str | None = None) -> Callable[[str], tuple]:
    """按区域返回排序键函数；zh 开头（zh、zh-CN、zh_TW 等）使用拼音排序。"""
    loc = (locale or DEFAULT_LOCALE).strip().lower().replace("_", "-")
    if loc == "zh" or loc.startswith("zh-"):
        return zh_collation_key
    return default_collation_key


def sort_texts(texts: list[str], locale: str | None = None) -> list[str]:
    """按区域排序文本列表（升序），不修改入参。"""
    return sorted(texts, key=collation_key_for(locale))
