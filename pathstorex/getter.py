"""
安全的巢狀值讀取工具。

Getter 包裝一個普通的巢狀值（dict、list、immutables.Map、pydantic 模型），
沿著路徑往下讀取；任何一段不存在時返回 NO_VALUE，絕不拋出異常。
"""
from collections.abc import Mapping, Sequence
from typing import Any, Iterable, Optional, Tuple

from pydantic import BaseModel


def to_path(key: Any = "", *remaining: Any) -> Tuple[str, ...]:
    """
    將各種路徑寫法正規化為片段元組。

    Args:
        key: 點分隔字串（如 "clock.sec"）或片段列表
        *remaining: 其餘片段，原樣加入

    Returns:
        字串片段組成的元組

    範例:
        >>> to_path("clock. sec")
        ('clock', 'sec')
        >>> to_path("clock", "sec")
        ('clock', 'sec')
        >>> to_path(["items", 0])
        ('items', '0')
    """
    if isinstance(key, (list, tuple)):
        segments: Iterable[Any] = [*key, *remaining]
    elif remaining:
        segments = [key, *remaining]
    else:
        # 單一字串：依 "." 切分，去除空白與空片段
        return tuple(s.strip() for s in str(key).split(".") if s.strip() != "")
    return tuple(str(s) for s in segments)


class _Missing:
    """代表「沒有值」的單例 getter，任何 get 都返回自身。"""

    __slots__ = ()

    def get(self, key: Any = "", *remaining: Any) -> "_Missing":
        return self

    @property
    def value(self) -> None:
        return None

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _Missing()


def _as_index(segment: str) -> Optional[int]:
    # 只接受 ASCII 數字；"²" 之類的 Unicode 數字 isdigit() 為 True 但 int() 會失敗
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return None


def _child(container: Any, segment: str) -> Any:
    """讀取單一片段，不存在時返回 NO_VALUE。"""
    if isinstance(container, Mapping):
        if segment in container:
            return container[segment]
        index = _as_index(segment)
        if index is not None and index in container:
            return container[index]
        return NO_VALUE
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes, bytearray)):
        index = _as_index(segment)
        if index is not None and index < len(container):
            return container[index]
        return NO_VALUE
    if isinstance(container, BaseModel):
        if not segment.startswith("_") and segment in type(container).model_fields:
            return getattr(container, segment)
        return NO_VALUE
    return NO_VALUE


class Getter:
    """
    安全地包裝並讀取巢狀值。

    Attributes:
        value: 被包裝的值
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any):
        self._value = value

    def get(self, key: Any = "", *remaining: Any):
        """
        沿路徑讀取子值。

        Args:
            key: 點分隔字串或片段列表
            *remaining: 其餘片段

        Returns:
            子值的 Getter，或任一片段缺失時的 NO_VALUE
        """
        current = self._value
        for segment in to_path(key, *remaining):
            current = _child(current, segment)
            if current is NO_VALUE:
                return NO_VALUE
        return Getter(current)

    @property
    def value(self) -> Any:
        return self._value

    def __repr__(self) -> str:
        return f"Getter({self._value!r})"
