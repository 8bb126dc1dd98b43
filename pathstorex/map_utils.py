from collections.abc import MutableMapping
from typing import Any, Sequence

from .errors import ReducerError


def ensure_path(state: MutableMapping, path: Sequence[str]) -> MutableMapping:
    """
    沿路徑走到巢狀的 dict，缺少（或為 None）的層級會就地建立為空 dict。

    Args:
        state: 頂層狀態，會被就地修改
        path: 要走的路徑片段

    Returns:
        路徑末端的可變映射

    Raises:
        ReducerError: 路徑上某一層存在但不是可變映射
    """
    current: Any = state
    for depth, segment in enumerate(path):
        child = current.get(segment)
        if child is None:
            child = current[segment] = {}
        elif not isinstance(child, MutableMapping):
            raise ReducerError(
                f"cannot write below a {type(child).__name__} value",
                selector=".".join(path[: depth + 1]),
            )
        current = child
    return current
