"""
PathStoreX 共用的類型定義。
"""
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar, Union

from typing_extensions import Protocol, TypedDict, runtime_checkable

S = TypeVar("S")  # 狀態類型
T = TypeVar("T")  # 值類型
P = TypeVar("P")  # 負載類型

# 路徑：點分隔字串或片段序列
PathLike = Union[str, Sequence[str]]

# 判斷訂閱者是否需要收到新值：(上一次送出的值, 候選值) -> bool
ChangeDetector = Callable[[Any, Any], bool]

# store.dispatch 的簽名，返回可 await 的結果
Dispatch = Callable[..., Awaitable[None]]

# 完整的 action handler：(state, action, dispatch) -> new state
ActionHandler = Callable[[Any, Any, Dispatch], Any]

# selector handler：(state-at-selector, payload, type, dispatch) -> new state-at-selector
Handler = Callable[..., Any]

# side effect：(read-only state view, type, dispatch) -> None | awaitable
SideEffect = Callable[..., Optional[Awaitable[None]]]


@runtime_checkable
class ObserverLike(Protocol):
    """與 reactivex observer 相容的最小介面。"""

    def on_next(self, value: Any) -> None: ...

    def on_completed(self) -> None: ...


class SelectorHandlerSpec(TypedDict):
    """register 所接受的 {selector, handler} 配對。"""

    selector: str
    handler: Handler


class SideEffectSpec(TypedDict, total=False):
    """side_effect 所接受的配置。"""

    action_type: Union[str, Sequence[str]]
    handler: SideEffect
