"""pytest 共享 fixture 与配置。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 保证项目根在 sys.path 中，便于导入 core / app / domain / infrastructure
_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from core.config import reset_app_config  # noqa: E402
from domain.verdict import FieldOption  # noqa: E402
from infrastructure.host import MemoryTable  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_app_config():
    """每个用例前后清空配置缓存，避免用例间互相影响。"""
    reset_app_config()
    yield
    reset_app_config()


@pytest.fixture
def review_fields() -> list[FieldOption]:
    """审核记录表的三个字段。"""
    return [
        FieldOption(id="fldBehavior", display_name="行为类型"),
        FieldOption(id="fldAi", display_name="AI判定结果"),
        FieldOption(id="fldReviewer", display_name="复核员判定结果"),
    ]


@pytest.fixture
def review_table(review_fields: list[FieldOption]) -> MemoryTable:
    """三条记录：A 两条、B 一条。"""
    return MemoryTable(
        review_fields,
        [
            ("rec1", {"fldBehavior": "A", "fldAi": "正常", "fldReviewer": "正常"}),
            ("rec2", {"fldBehavior": "A", "fldAi": "违规", "fldReviewer": "正常"}),
            ("rec3", {"fldBehavior": "B", "fldAi": "正常", "fldReviewer": "违规"}),
        ],
    )
