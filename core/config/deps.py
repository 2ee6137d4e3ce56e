"""
依赖注入：Annotated[T, Depends(getter)] 声明依赖，inject() 解析并返回。

用法：
    from core.config import inject, VerdictConfig

    labels = inject(VerdictConfig)
"""

from __future__ import annotations

from typing import Annotated, Any, Callable, get_args, get_origin


class Depends:
    """依赖标记：保存解析函数 getter，由 inject() 调用。"""

    __slots__ = ("getter",)

    def __init__(self, getter: Callable[[], Any]) -> None:
        self.getter = getter

    def __repr__(self) -> str:
        return f"Depends({getattr(self.getter, '__name__', self.getter)!r})"


def _find_depends(typed: Any) -> Depends:
    if get_origin(typed) is not Annotated:
        raise TypeError(f"期望 Annotated 类型，得到: {typed}")
    for meta in get_args(typed)[1:]:
        if isinstance(meta, Depends):
            return meta
    raise TypeError(f"未找到 Depends 元数据: {typed}")


def inject(typed: Any) -> Any:
    """解析 Annotated[T, Depends(getter)]，返回 getter() 的结果。"""
    return _find_depends(typed).getter()


def inject_all(*typed: Any) -> tuple[Any, ...]:
    """一次解析多个依赖，按入参顺序返回。"""
    return tuple(inject(t) for t in typed)
