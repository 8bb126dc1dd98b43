"""
PathStoreX：可依路徑訂閱的響應式狀態容器。

狀態是一棵巢狀的值樹；訂閱者可以訂閱任意子路徑，只有該路徑的值改變時才會
收到通知。狀態轉換透過一條序列化的 dispatch 管線完成，由各自註冊的
(selector, handler) 配對驅動。
"""
import logging

from .errors import (
    PathStoreError, ActionError, UnknownActionError, RegistrationError,
    ReducerError, SelectorError, StoreError,
)
from .actions import Action, create_action
from .config import StoreConfig
from .getter import Getter, NO_VALUE, to_path
from .observable import ReactiveValue, FunctionObserver
from .tree import ReactiveNode
from .query import StoreQuery, not_equal, always_update
from .reducers import (
    SelectorHandlerEntry, ReducerStep, ComposedReducer,
    compile_entries, combine_action_handlers,
)
from .middleware import BaseMiddleware, LoggerMiddleware
from .store import Store, DispatchState
from .registry import ActionsRegistry, SideEffectEntry, registry
from .immutable_utils import to_immutable, to_dict

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Errors
    "PathStoreError", "ActionError", "UnknownActionError", "RegistrationError",
    "ReducerError", "SelectorError", "StoreError",

    # Actions
    "Action", "create_action",

    # Config
    "StoreConfig",

    # Reactive core
    "Getter", "NO_VALUE", "to_path",
    "ReactiveValue", "FunctionObserver", "ReactiveNode",
    "StoreQuery", "not_equal", "always_update",

    # Reducers
    "SelectorHandlerEntry", "ReducerStep", "ComposedReducer",
    "compile_entries", "combine_action_handlers",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware",

    # Store
    "Store", "DispatchState", "ActionsRegistry", "SideEffectEntry", "registry",

    # Immutable Utils
    "to_immutable", "to_dict",
]
