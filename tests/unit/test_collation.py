"""core.collation 单元测试：中文按拼音排序，拉丁字母在汉字之前。"""

from __future__ import annotations

from core.collation import collation_key_for, default_collation_key, sort_texts, zh_collation_key


def test_han_sorted_by_pinyin_not_insertion_order() -> None:
    assert sort_texts(["乙", "甲", "丙"]) == ["丙", "甲", "乙"]


def test_multi_character_categories() -> None:
    texts = ["涉黄", "广告引流", "辱骂", "低俗"]
    # di < guang < ru < she
    assert sort_texts(texts, "zh-CN") == ["低俗", "广告引流", "辱骂", "涉黄"]


def test_latin_before_han_and_case_insensitive() -> None:
    assert sort_texts(["甲", "b", "A"]) == ["A", "b", "甲"]


def test_prefix_sorts_first() -> None:
    assert sort_texts(["广告引流", "广告"]) == ["广告", "广告引流"]


def test_locale_selection() -> None:
    assert collation_key_for("zh-CN") is zh_collation_key
    assert collation_key_for("zh_TW") is zh_collation_key
    assert collation_key_for("zh") is zh_collation_key
    assert collation_key_for(None) is zh_collation_key
    assert collation_key_for("en-US") is default_collation_key


def test_default_collation_casefold() -> None:
    assert sort_texts(["b", "A", "a"], "en-US") == ["A", "a", "b"]


def test_input_not_modified() -> None:
    texts = ["乙", "甲"]
    sort_texts(texts)
    assert texts == ["乙", "甲"]
