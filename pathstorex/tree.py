"""
可觀察值組成的樹，按需鏡像狀態樹。

每個節點對應狀態樹中的一條路徑。只有當節點本身或其子孫有訂閱者時，
節點才會存在；一旦節點自身的訂閱者數量歸零，它會在同一個 unsubscribe
調用內立即脫離父節點。
"""
import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .getter import Getter
from .observable import ReactiveValue

logger = logging.getLogger(__name__)


class ReactiveNode:
    """
    可觀察值樹的節點。

    子節點把「對父節點的訂閱」當作父節點的一個訂閱者，因此只要有子孫被觀察，
    祖先節點的訂閱者數量就不會歸零；釋放會由下而上連鎖觸發。

    Args:
        observable: 此節點包裝的可觀察值，預設為 replay 的空值
        key: 在父節點中的鍵
        parent: 父節點，根節點為 None
    """

    def __init__(
        self,
        observable: Optional[ReactiveValue] = None,
        key: Optional[str] = None,
        parent: Optional["ReactiveNode"] = None,
    ):
        self._observable = observable if observable is not None else ReactiveValue(None, replay=True)
        self._key = key
        self._parent = parent
        self._children: Dict[str, ReactiveNode] = {}
        # 整棵樹共用一把可重入鎖
        self._lock = parent.lock if parent is not None else threading.RLock()
        self._unlink = None

        self._observable.add_unsubscribe_hook(self._release_if_unobserved)
        if parent is not None:
            self._unlink = parent.observable.subscribe(self._follow_parent)

    def _follow_parent(self, parent_value: Any) -> None:
        self._observable.on_next(Getter(parent_value).get([self._key]).value)

    def _release_if_unobserved(self) -> None:
        if len(self._observable) or self._parent is None:
            return
        logger.debug("releasing node %s", ".".join(self.path))
        self._children = {}
        parent, self._parent = self._parent, None
        if parent._children.get(self._key) is self:
            del parent._children[self._key]
        unlink, self._unlink = self._unlink, None
        if unlink is not None:
            unlink()

    @property
    def observable(self) -> ReactiveValue:
        return self._observable

    @property
    def value(self) -> Any:
        return self._observable.value

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def key(self) -> Optional[str]:
        return self._key

    @property
    def parent(self) -> Optional["ReactiveNode"]:
        return self._parent

    @property
    def is_attached(self) -> bool:
        """根節點永遠存在；非根節點在被釋放前都是 attached。"""
        return self._parent is not None or self._key is None

    @property
    def path(self) -> Tuple[str, ...]:
        """從根節點到此節點的路徑。"""
        segments = []
        node: Optional[ReactiveNode] = self
        while node is not None and node._key is not None:
            segments.append(node._key)
            node = node._parent
        return tuple(reversed(segments))

    @property
    def children(self) -> Mapping[str, "ReactiveNode"]:
        return MappingProxyType(self._children)

    def get(self, key: str) -> Optional["ReactiveNode"]:
        """查找子節點，不會建立。"""
        return self._children.get(key)

    def upgrade(self, key: str) -> "ReactiveNode":
        """
        取得或建立子節點。

        新節點以父節點當前值的 `key` 子值作為初始值，並在父節點每次送出
        新值時重新推導自己的值。

        Args:
            key: 子節點的鍵

        Returns:
            子節點
        """
        with self._lock:
            child = self._children.get(key)
            if child is not None:
                return child
            initial = Getter(self.value).get([key]).value
            child = ReactiveNode(ReactiveValue(initial, replay=True), key, self)
            self._children[key] = child
            logger.debug("upgraded node %s", ".".join(child.path))
            return child

    def complete(self) -> None:
        """先完成所有子孫節點，再完成自己。"""
        with self._lock:
            for child in list(self._children.values()):
                child.complete()
            self._children = {}
            self._observable.on_completed()

    def __repr__(self) -> str:
        return f"ReactiveNode(path={'.'.join(self.path)!r}, subscribers={len(self._observable)})"
