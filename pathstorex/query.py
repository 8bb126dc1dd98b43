"""
狀態樹的延遲路徑查詢。

StoreQuery 是不可變的 (根節點, 路徑) 配對。`get` 只會產生新的查詢，
直到 `subscribe` 時才會把路徑上缺少的節點升級為可觀察節點。
"""
import logging
from typing import Any, Optional, Tuple

import reactivex
from reactivex import Observer, abc
from reactivex.disposable import Disposable

from .errors import SelectorError
from .getter import NO_VALUE, Getter, to_path
from .observable import Unsubscribe, to_observer
from .tree import ReactiveNode
from .types import ChangeDetector, PathLike

logger = logging.getLogger(__name__)


def not_equal(old_value: Any, new_value: Any) -> bool:
    """預設的變更判斷：值不相等時才通知。"""
    return old_value != new_value


def always_update(old_value: Any, new_value: Any) -> bool:
    """每次都通知。"""
    return True


class StoreQuery:
    """
    用於查詢和訂閱狀態樹的物件。

    Args:
        root: 狀態樹的根節點
        path: 查詢路徑
        strict: 訂閱不存在的路徑時是否拋出 SelectorError
    """

    __slots__ = ("_root", "_path", "_strict")

    def __init__(self, root: ReactiveNode, path: Tuple[str, ...] = (), strict: bool = False):
        self._root = root
        self._path = tuple(path)
        self._strict = strict

    def get(self, key: PathLike = "", *remaining: Any) -> "StoreQuery":
        """
        串接路徑，返回新的查詢。不會修改狀態樹。

        範例:
            >>> store.get("clock").get("sec")
            >>> store.get("clock", "sec")
            >>> store.get(["clock", "sec"])
        """
        return StoreQuery(self._root, self._path + to_path(key, *remaining), self._strict)

    @property
    def path(self) -> Tuple[str, ...]:
        return self._path

    @property
    def value(self) -> Any:
        """路徑上的當前值，不存在時為 None。"""
        return Getter(self._root.value).get(list(self._path)).value

    def subscribe(self, observer: Any, change_detector: Optional[ChangeDetector] = None) -> Unsubscribe:
        """
        訂閱狀態樹上的某個值。

        第一個值一定會送出；之後只有 `change_detector(上次送出的值, 新值)`
        為 True 時才會通知 observer。

        Args:
            observer: reactivex observer 或普通函數
            change_detector: 變更判斷函數，預設為 not_equal

        Returns:
            取消訂閱的函數
        """
        should_update = change_detector or not_equal
        target = to_observer(observer)
        delivered = False
        previous: Any = None

        def next_with_condition(value: Any) -> None:
            nonlocal delivered, previous
            if not delivered or should_update(previous, value):
                delivered = True
                previous = value
                target.on_next(value)

        def on_completed() -> None:
            completed = getattr(target, "on_completed", None)
            if completed is not None:
                completed()

        wrapped = Observer(on_next=next_with_condition, on_completed=on_completed)

        with self._root.lock:
            node = self._locate()
            unsubscribe = node.observable.subscribe(wrapped)

        def locked_unsubscribe() -> None:
            with self._root.lock:
                unsubscribe()

        return locked_unsubscribe

    def _locate(self) -> ReactiveNode:
        """
        找到（必要時建立）路徑末端的節點。

        先盡量沿著已存在的節點往下走；在第一個不存在的片段停下，用 Getter
        檢查剩餘路徑在當前值中是否存在，然後把剩餘片段逐一升級成節點。
        """
        node = self._root
        for index, key in enumerate(self._path):
            child = node.get(key)
            if child is None:
                remaining = self._path[index:]
                if Getter(node.value).get(list(remaining)) is NO_VALUE:
                    if self._strict:
                        raise SelectorError("path does not exist on the state tree", self._path)
                    logger.debug("subscribing to missing path %s", ".".join(self._path))
                for segment in remaining:
                    node = node.upgrade(segment)
                return node
            node = child
        return node

    def to_observable(self, change_detector: Optional[ChangeDetector] = None) -> reactivex.Observable:
        """
        將查詢轉換為 reactivex Observable。

        每次訂閱都會建立一個查詢訂閱；dispose 時取消訂閱並釋放節點。
        """
        def subscribe(observer: abc.ObserverBase, scheduler: Optional[abc.SchedulerBase] = None) -> Disposable:
            return Disposable(self.subscribe(observer, change_detector))

        return reactivex.create(subscribe)

    def __repr__(self) -> str:
        return f"StoreQuery(path={'.'.join(self._path)!r})"
