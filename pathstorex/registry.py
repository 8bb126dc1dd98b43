"""
Action 註冊表。

收集 (名稱, action 類型, {selector, handler}) 註冊項與 side effects，
編譯成一個組合 reducer 並據此建立 Store。
"""
import itertools
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from .config import StoreConfig
from .errors import RegistrationError
from .reducers import ComposedReducer, SelectorHandlerEntry, compile_entries
from .store import Store
from .types import Handler, SelectorHandlerSpec, SideEffect, SideEffectSpec

ActionTypes = Union[str, Sequence[str]]


@dataclass(frozen=True)
class SideEffectEntry:
    """一筆已註冊的 side effect。"""
    types: Tuple[str, ...]
    handler: SideEffect


def _is_handler_pair(obj: Any) -> bool:
    if isinstance(obj, Mapping):
        return "selector" in obj or "handler" in obj
    return hasattr(obj, "selector") and hasattr(obj, "handler")


def _read_pair(pair: Any) -> Tuple[Any, Any]:
    if isinstance(pair, Mapping):
        return pair.get("selector"), pair.get("handler")
    return getattr(pair, "selector", None), getattr(pair, "handler", None)


def _normalize_types(action_type: ActionTypes, name: Optional[str] = None) -> Tuple[str, ...]:
    types = (action_type,) if isinstance(action_type, str) else tuple(action_type)
    if not types or not all(isinstance(t, str) and t for t in types):
        raise RegistrationError(f"action types must be non-empty strings, got {action_type!r}", name=name)
    return types


class ActionsRegistry:
    """
    所有 selector handler 與 side effect 的註冊表。

    用法:
        ```python
        registry = ActionsRegistry()
        registry.register("increment", {
            "selector": "counter",
            "handler": lambda state: 0 if state is None else state + 1,
        })
        store = registry.create_store()
        await store.do("increment")
        ```
    """

    def __init__(self, config: Optional[StoreConfig] = None):
        self._config = config
        self._action_names: Dict[str, Tuple[str, ...]] = {}
        self._action_types: Set[str] = set()
        self._entries: List[SelectorHandlerEntry] = []
        self._side_effects: Dict[str, List[SideEffectEntry]] = {}
        self._type_counter = itertools.count(1)

    def _generate_type(self, name: str) -> str:
        while True:
            action_type = f"[{name}] #{next(self._type_counter)}"
            if action_type not in self._action_types:
                return action_type

    def register(
        self,
        name: str,
        action_type: Union[ActionTypes, SelectorHandlerSpec, Any, None] = None,
        action_handler: Union[SelectorHandlerSpec, Any, None] = None,
    ) -> SelectorHandlerEntry:
        """
        註冊一個 selector handler。

        兩種寫法：
            register(name, {"selector": ..., "handler": ...})  # 自動產生 action 類型
            register(name, "TYPE" 或 ["A", "B"], {"selector": ..., "handler": ...})

        handler 以 (state-at-selector, payload, type, dispatch) 調用，只需宣告用到的參數。

        Args:
            name: 唯一的名稱，用於 store.do(name) 與 store.actions[name]
            action_type: 一個或多個 action 類型；省略時自動產生
            action_handler: {selector, handler} 配對

        Returns:
            註冊項

        Raises:
            RegistrationError: 名稱重複或 selector/handler 不正確
        """
        if action_handler is None and _is_handler_pair(action_type):
            action_handler, action_type = action_type, None

        if name in self._action_names:
            raise RegistrationError(f'action with name: "{name}" already exists', name=name)
        if action_handler is None:
            raise RegistrationError("missing {selector, handler} pair", name=name)

        selector, handler = _read_pair(action_handler)
        if not isinstance(selector, str) or any(not segment.strip() for segment in selector.split(".")):
            raise RegistrationError(f"selector or handler is not correct; selector={selector!r}", name=name, selector=selector)
        if not callable(handler):
            raise RegistrationError(f"handler for selector={selector!r} is not callable", name=name, selector=selector)

        types = (self._generate_type(name),) if action_type is None else _normalize_types(action_type, name)

        entry = SelectorHandlerEntry(name, types, selector, handler)
        self._action_names[name] = types
        self._action_types.update(types)
        self._entries.append(entry)
        return entry

    def handler(self, name: str, action_type: Optional[ActionTypes] = None, *, selector: str) -> Callable[[Handler], Handler]:
        """
        裝飾器：註冊 selector handler。

        用法:
            ```python
            @registry.handler("increment", "INCREMENT", selector="counter")
            def increment(state, payload):
                return 0 if state is None else state + 1
            ```
        """
        def decorator(fn: Handler) -> Handler:
            self.register(name, action_type, {"selector": selector, "handler": fn})
            return fn
        return decorator

    def side_effect(
        self, action_type: Union[ActionTypes, SideEffectSpec, None] = None, handler: Optional[SideEffect] = None
    ) -> Any:
        """
        註冊 side effect，在 reducer 更新該類型的狀態之前執行。

        handler 以 (唯讀狀態 Getter, type, dispatch) 調用。可以傳入
        {"action_type": ..., "handler": ...}，或省略 handler 當作裝飾器使用。

        Raises:
            RegistrationError: 類型或 handler 不正確
        """
        if isinstance(action_type, Mapping):
            action_type, handler = action_type.get("action_type"), action_type.get("handler")
        if action_type is None:
            raise RegistrationError("side effect requires an action_type")
        types = _normalize_types(action_type)

        if handler is None:
            def decorator(fn: SideEffect) -> SideEffect:
                self.side_effect(types, fn)
                return fn
            return decorator

        if not callable(handler):
            raise RegistrationError(f"side effect handler for {types!r} is not callable")
        entry = SideEffectEntry(types, handler)
        for t in types:
            self._side_effects.setdefault(t, []).append(entry)
        return entry

    @property
    def action_names(self) -> Dict[str, Tuple[str, ...]]:
        return dict(self._action_names)

    @property
    def entries(self) -> Tuple[SelectorHandlerEntry, ...]:
        return tuple(self._entries)

    def compile(self) -> ComposedReducer:
        """將目前所有註冊項編譯為一個 reducer。"""
        return compile_entries(self._entries)

    def create_store(self, initial_state: Any = None, config: Optional[StoreConfig] = None) -> Store:
        """
        依目前的註冊項建立 Store 並初始化狀態。

        Args:
            initial_state: 可選的初始狀態
            config: Store 設定，預設使用註冊表的設定

        Returns:
            初始化完成的 Store
        """
        store = Store(
            self.compile(),
            self.action_names,
            {t: list(entries) for t, entries in self._side_effects.items()},
            config or self._config,
        )
        return store.init(initial_state)


# 預設的註冊表
registry = ActionsRegistry()
