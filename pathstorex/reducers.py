"""
動態 reducer 組合。

把每個 (selector, handler) 註冊項包裝成完整的 action handler，再依 selector
深度分組，組合成一個就地更新狀態的 reducer。
"""
import inspect
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from .actions import Action
from .errors import ReducerError
from .map_utils import ensure_path
from .signature_utils import fit_arity
from .types import Dispatch, Handler

# (state, action, dispatch) -> new state 或 awaitable
StepHandler = Callable[[Any, Optional[Action], Optional[Dispatch]], Any]

# 狀態中沒有這個鍵；與值為 None 的鍵區分開
_MISSING = object()


@dataclass(frozen=True)
class SelectorHandlerEntry:
    """
    一筆已註冊的 selector handler。

    Attributes:
        name: 唯一的名稱
        types: 觸發此 handler 的 action 類型
        selector: 點分隔的狀態路徑
        handler: (state-at-selector, payload, type, dispatch) -> new state
    """
    name: str
    types: Tuple[str, ...]
    selector: str
    handler: Handler


@dataclass(frozen=True)
class ReducerStep:
    """在 `path` 底下的 `key` 依序執行 `handlers`。"""
    path: Tuple[str, ...]
    key: str
    handlers: Tuple[StepHandler, ...]

    @property
    def selector(self) -> str:
        return ".".join((*self.path, self.key))


def wrap_selector_handler(entry: SelectorHandlerEntry) -> StepHandler:
    """
    將 selector handler 包裝成 (state, action, dispatch) 的形式。

    - 狀態中沒有此鍵：初始化，以 state=None、payload=None、type=None 調用 handler
    - action 為 None：原樣返回 state
    - action.type 屬於此項目：以 action 的 payload 與 type 調用 handler，
      即使目前的值是 None
    - 其他情況：原樣返回 state
    """
    handler = fit_arity(entry.handler, 4)
    types: FrozenSet[str] = frozenset(entry.types)

    def action_handler(state: Any, action: Optional[Action], dispatch: Optional[Dispatch]) -> Any:
        if state is _MISSING:
            return handler(None, None, None, dispatch)
        if action is None:
            return state
        if action.type in types:
            return handler(state, action.payload, action.type, dispatch)
        return state

    action_handler.__name__ = f"{entry.name}_handler"
    return action_handler


def run_handlers(
    handlers: Sequence[StepHandler], state: Any, action: Optional[Action], dispatch: Optional[Dispatch]
) -> Any:
    """
    依序執行同一個 selector 的 handlers，後者接收前者的結果。

    全部同步時直接返回結果；遇到 awaitable 時返回一個協程繼續剩下的 handlers。
    """
    for index, handler in enumerate(handlers):
        state = handler(state, action, dispatch)
        if inspect.isawaitable(state):
            return _resume_handlers(handlers[index + 1:], state, action, dispatch)
    return state


async def _resume_handlers(
    handlers: Sequence[StepHandler], pending: Awaitable[Any], action: Optional[Action], dispatch: Optional[Dispatch]
) -> Any:
    state = await pending
    for handler in handlers:
        state = handler(state, action, dispatch)
        if inspect.isawaitable(state):
            state = await state
    return state


class ComposedReducer:
    """
    由多個 ReducerStep 組成的 reducer。

    調用時就地修改並返回同一個頂層狀態物件。所有 handler 都是同步時結果也是
    同步的；否則返回一個需要 await 的協程。
    """

    def __init__(self, steps: Iterable[ReducerStep]):
        self._steps: Tuple[ReducerStep, ...] = tuple(steps)

    @property
    def steps(self) -> Tuple[ReducerStep, ...]:
        return self._steps

    def __call__(self, state: Any = None, action: Optional[Action] = None, dispatch: Optional[Dispatch] = None) -> Any:
        if state is None:
            state = {}
        if not isinstance(state, MutableMapping):
            raise ReducerError(f"state must be a mutable mapping, got {type(state).__name__}")
        for position, step in enumerate(self._steps):
            container = ensure_path(state, step.path)
            result = run_handlers(step.handlers, container.get(step.key, _MISSING), action, dispatch)
            if inspect.isawaitable(result):
                return self._resume(state, position, container, result, action, dispatch)
            container[step.key] = result
        return state

    async def _resume(
        self,
        state: MutableMapping,
        position: int,
        container: MutableMapping,
        pending: Awaitable[Any],
        action: Optional[Action],
        dispatch: Optional[Dispatch],
    ) -> MutableMapping:
        container[self._steps[position].key] = await pending
        for step in self._steps[position + 1:]:
            container = ensure_path(state, step.path)
            result = run_handlers(step.handlers, container.get(step.key, _MISSING), action, dispatch)
            if inspect.isawaitable(result):
                result = await result
            container[step.key] = result
        return state

    def __repr__(self) -> str:
        return f"ComposedReducer(selectors={[step.selector for step in self._steps]!r})"


def compile_entries(entries: Iterable[SelectorHandlerEntry]) -> ComposedReducer:
    """
    將註冊項編譯為一個 ComposedReducer。

    沒有 "." 的 selector 直接更新根層級的鍵；巢狀 selector 更新去掉最後一段
    之後的路徑底下的鍵。同一 selector 的 handlers 依註冊順序組合。
    根層級的步驟先執行，巢狀步驟依父路徑首次出現的順序分組執行。
    """
    root: Dict[str, List[StepHandler]] = {}
    nested: Dict[Tuple[str, ...], Dict[str, List[StepHandler]]] = {}
    for entry in entries:
        segments = entry.selector.split(".")
        handler = wrap_selector_handler(entry)
        if len(segments) == 1:
            root.setdefault(segments[0], []).append(handler)
        else:
            parent = tuple(segments[:-1])
            nested.setdefault(parent, {}).setdefault(segments[-1], []).append(handler)

    steps = [ReducerStep((), key, tuple(handlers)) for key, handlers in root.items()]
    for parent, keys in nested.items():
        steps.extend(ReducerStep(parent, key, tuple(handlers)) for key, handlers in keys.items())
    return ComposedReducer(steps)


def combine_action_handlers(action_handlers: Dict[str, Union[StepHandler, Callable[..., Any]]]) -> ComposedReducer:
    """
    把 {鍵: action handler} 組合成一個 action handler。

    每個 handler 以 (state[key], action, dispatch) 調用，只需宣告它用到的參數。
    主要用於不經過 ActionsRegistry 直接建立 Store 的情況。

    範例:
        >>> reducer = combine_action_handlers({
        ...     "foo": lambda: "bar",
        ...     "bar": lambda state: {"baz": 42} if state is None else {"baz": state["baz"] + 1},
        ... })
        >>> store = Store(reducer)
        >>> store.init()
        >>> store.get_state()
        {'foo': 'bar', 'bar': {'baz': 42}}
    """
    return ComposedReducer(
        ReducerStep((), key, (_plain_handler(handler),)) for key, handler in action_handlers.items()
    )


def _plain_handler(handler: Callable[..., Any]) -> StepHandler:
    fitted = fit_arity(handler, 3)

    def action_handler(state: Any, action: Optional[Action], dispatch: Optional[Dispatch]) -> Any:
        return fitted(None if state is _MISSING else state, action, dispatch)

    return action_handler
