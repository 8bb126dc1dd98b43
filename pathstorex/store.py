import asyncio
import enum
import functools
import inspect
import logging
from collections import deque
from types import MappingProxyType
from typing import Any, Callable, Deque, Dict, Generic, List, Mapping, NamedTuple, Optional, Sequence, Set, Union

import reactivex
from reactivex import operators as ops
from reactivex import Subject

from .actions import Action, create_action
from .config import StoreConfig
from .errors import StoreError, UnknownActionError
from .getter import Getter
from .immutable_utils import to_immutable
from .middleware import BaseMiddleware, LoggerMiddleware
from .query import StoreQuery, always_update
from .signature_utils import fit_arity
from .tree import ReactiveNode
from .types import ActionHandler, ChangeDetector, PathLike, S

logger = logging.getLogger(__name__)


class DispatchState(enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"


class _PendingDispatch(NamedTuple):
    action: Action
    future: "asyncio.Future[None]"


class Store(Generic[S]):
    """
    狀態容器，管理狀態樹並通知訂閱者路徑上的變更。

    所有 dispatch 依到達順序排入 FIFO 佇列，一次只處理一個；處理中發出的
    dispatch（包括 reducer 或 side effect 內部發出的）會排在目前這個之後。

    Args:
        action_handler: (state, action, dispatch) -> new state，可以是協程函數
        action_name_to_types: action 名稱到 action 類型的映射，用於建立具名 dispatch 捷徑
        side_effects: action 類型到 side effect handler 列表的映射
        config: Store 設定
    """

    def __init__(
        self,
        action_handler: Union[ActionHandler, Callable[..., Any]],
        action_name_to_types: Optional[Mapping[str, Sequence[str]]] = None,
        side_effects: Optional[Mapping[str, Sequence[Any]]] = None,
        config: Optional[StoreConfig] = None,
    ):
        self._config = config or StoreConfig()
        self._root = ReactiveNode()
        self._action_handler = fit_arity(action_handler, 3)
        self._actions: Dict[str, Callable[..., "asyncio.Future[None]"]] = {}
        self._side_effects: Dict[str, List[Callable[..., Any]]] = {
            action_type: [fit_arity(getattr(entry, "handler", entry), 3) for entry in entries]
            for action_type, entries in (side_effects or {}).items()
        }
        self._queue: Deque[_PendingDispatch] = deque()
        self._dispatch_state = DispatchState.IDLE
        self._drain_task: Optional[asyncio.Task] = None
        self._side_effect_tasks: Set[asyncio.Future] = set()
        self._middleware: List[BaseMiddleware] = []
        self._action_subject: Subject = Subject()
        self._closed = False

        # 建立具名的 dispatch 捷徑
        for name, types in (action_name_to_types or {}).items():
            if isinstance(types, str):
                types = (types,)
            self._actions[name] = self._create_action_dispatcher(name, tuple(types))

        if self._config.log_dispatches:
            self.apply_middleware(LoggerMiddleware)

    def _create_action_dispatcher(self, name: str, types: Sequence[str]) -> Callable[..., "asyncio.Future[None]"]:
        if len(types) == 1:
            creator = create_action(types[0])

            def dispatch_action(payload: Any = None) -> "asyncio.Future[None]":
                return self.dispatch(creator(payload))
        else:
            # 多類型的名稱：第一個參數選擇要分發的類型
            def dispatch_action(action_type: Optional[str] = None, payload: Any = None) -> "asyncio.Future[None]":
                if action_type not in types:
                    raise UnknownActionError(
                        f'action="{name}" does not handle type "{action_type}"', action_type, name=name
                    )
                return self.dispatch(Action(action_type, payload))

        dispatch_action.__name__ = name
        return dispatch_action

    def init(self, initial_state: Any = None) -> "Store[S]":
        """
        以 action=None 調用一次 action handler，得到初始狀態。

        讓每個 selector handler 在狀態中還沒有自己的鍵時產生預設值。

        Args:
            initial_state: 可選的初始狀態

        Raises:
            StoreError: action handler 在初始化時返回了 awaitable
        """
        state = self._action_handler(initial_state, None, self.dispatch)
        if inspect.isawaitable(state):
            if inspect.iscoroutine(state):
                state.close()
            raise StoreError("initial state must be computed synchronously", "init")
        self._set_state(state)
        return self

    def _set_state(self, value: Any) -> None:
        with self._root.lock:
            self._root.observable.on_next(value)

    @property
    def state(self) -> S:
        """當前狀態（即時物件，不要直接修改）。"""
        return self._root.value

    def get_state(self) -> S:
        return self._root.value

    def snapshot(self) -> Any:
        """當前狀態的不可變深拷貝（immutables.Map）。"""
        return to_immutable(self._root.value)

    @property
    def root(self) -> ReactiveNode:
        """響應式節點樹的根。"""
        return self._root

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def dispatch_state(self) -> DispatchState:
        return self._dispatch_state

    @property
    def pending(self) -> int:
        """排隊等待處理的 dispatch 數量。"""
        return len(self._queue)

    def get(self, key: PathLike = "", *remaining: Any) -> StoreQuery:
        """
        建立指向狀態樹某條路徑的查詢。

        Args:
            key: 點分隔字串或片段列表
            *remaining: 其餘片段

        Returns:
            StoreQuery
        """
        return StoreQuery(self._root, strict=self._config.strict_paths).get(key, *remaining)

    def subscribe(self, observer: Any, change_detector: Optional[ChangeDetector] = None) -> Callable[[], None]:
        """
        訂閱整個狀態。

        根狀態物件是就地更新的，所以預設每次 dispatch 都會通知。
        """
        return self.get().subscribe(observer, change_detector or always_update)

    def select(self, key: Any = "", change_detector: Optional[ChangeDetector] = None) -> reactivex.Observable:
        """
        以 reactivex Observable 的形式選擇狀態的一部分。

        Args:
            key: 點分隔字串或片段列表
            change_detector: 變更判斷函數

        Returns:
            發送該路徑值的 Observable
        """
        return self.get(key).to_observable(change_detector)

    @property
    def action_stream(self) -> reactivex.Observable:
        """每個處理完成的 Action 都會在這裡發出。"""
        return self._action_subject.pipe(ops.filter(lambda action: isinstance(action, Action)))

    def actions_of_type(self, *action_types: str) -> reactivex.Observable:
        return self.action_stream.pipe(ops.filter(lambda action: action.type in action_types))

    @property
    def actions(self) -> Mapping[str, Callable[..., "asyncio.Future[None]"]]:
        """所有具名的 dispatch 捷徑。"""
        return MappingProxyType(self._actions)

    def apply_middleware(self, *middlewares: Any) -> None:
        """
        註冊中介軟體，可以是類或實例。
        """
        for m in middlewares:
            inst = m() if inspect.isclass(m) else m
            self._middleware.append(inst)

    def dispatch(self, action: Union[Action, Mapping, str], payload: Any = None) -> "asyncio.Future[None]":
        """
        分發一個動作。

        傳入字串時視為已註冊的 action 名稱。此方法會同步地把動作排入佇列，
        所以在 handler 或 side effect 中可以直接調用而不必 await；
        返回的 future 在該動作處理完成後結束，handler 的異常也會由它傳出。

        Args:
            action: Action、{"type", "payload"} 映射，或 action 名稱
            payload: 以名稱分發時的負載；註冊了多個類型的名稱則是要分發的類型，
                需要同時帶負載時請用 do(name, action_type, payload)

        Returns:
            處理完成時結束的 future

        Raises:
            UnknownActionError: 名稱未註冊
            StoreError: 沒有運行中的事件循環，或 Store 已經 teardown
        """
        if isinstance(action, str):
            return self.do(action, payload)

        action = Action.coerce(action)
        if self._closed:
            raise StoreError("store has been torn down", "dispatch", action_type=action.type)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as err:
            raise StoreError("dispatch requires a running event loop", "dispatch", action_type=action.type) from err

        future = loop.create_future()
        self._queue.append(_PendingDispatch(action, future))
        if self._dispatch_state is DispatchState.DISPATCHING:
            logger.debug("queued %s (%d pending)", action.type, len(self._queue))
            return future

        self._dispatch_state = DispatchState.DISPATCHING
        self._drain_task = loop.create_task(self._drain())
        return future

    def do(self, name: str, *args: Any) -> "asyncio.Future[None]":
        """
        以名稱調用 action。

        單一類型的名稱接收 (payload)；多類型的名稱接收 (action_type, payload)，
        例如 store.do("changeCounter", "increment", 5)。

        Raises:
            UnknownActionError: 名稱未註冊，或類型不屬於該名稱
        """
        dispatcher = self._actions.get(name)
        if dispatcher is None:
            raise UnknownActionError(f'action="{name}" does not exist', name=name)
        return dispatcher(*args)

    async def _drain(self) -> None:
        try:
            while self._queue:
                pending = self._queue.popleft()
                if pending.future.done():
                    continue
                try:
                    await self._process(pending.action)
                except Exception as err:
                    if not pending.future.done():
                        pending.future.set_exception(err)
                else:
                    if not pending.future.done():
                        pending.future.set_result(None)
        finally:
            self._dispatch_state = DispatchState.IDLE
            self._drain_task = None
            # 只有在 drain 被取消時才會有剩下的項目
            while self._queue:
                self._queue.popleft().future.cancel()

    async def _process(self, action: Action) -> None:
        if self._middleware:
            prev_state = self.snapshot()
            for mw in self._middleware:
                mw.on_next(action, prev_state)
        try:
            self._run_side_effects(action)
            next_state = self._action_handler(self.state, action, self.dispatch)
            if inspect.isawaitable(next_state):
                next_state = await next_state
            self._set_state(next_state)
        except Exception as err:
            for mw in self._middleware:
                mw.on_error(err, action)
            raise
        for mw in self._middleware:
            mw.on_complete(self.state, action)
        self._action_subject.on_next(action)

    def _state_view(self) -> Getter:
        if self._config.snapshot_side_effect_state:
            return Getter(self.snapshot())
        return Getter(self.state)

    def _run_side_effects(self, action: Action) -> None:
        for handler in self._side_effects.get(action.type, ()):
            result = handler(self._state_view(), action.type, self.dispatch)
            if inspect.isawaitable(result):
                # 非同步的 side effect 在背景執行，可以在其中 await 自己發出的 dispatch
                task = asyncio.ensure_future(result)
                self._side_effect_tasks.add(task)
                task.add_done_callback(functools.partial(self._side_effect_done, action.type))

    def _side_effect_done(self, action_type: str, task: asyncio.Future) -> None:
        self._side_effect_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("side effect for %s failed: %s", action_type, error, exc_info=error)

    async def idle(self) -> None:
        """等待佇列清空且所有背景 side effect 完成。"""
        while self._drain_task is not None or self._side_effect_tasks:
            waiting = list(self._side_effect_tasks)
            if self._drain_task is not None:
                waiting.append(self._drain_task)
            await asyncio.gather(*waiting, return_exceptions=True)

    def teardown(self) -> None:
        """
        清理 Store：取消排隊中的 dispatch 與背景 side effect，完成所有訂閱。
        """
        if self._closed:
            return
        self._closed = True
        for task in list(self._side_effect_tasks):
            task.cancel()
        while self._queue:
            self._queue.popleft().future.cancel()
        if self._drain_task is not None:
            self._drain_task.cancel()
            self._drain_task = None
        self._dispatch_state = DispatchState.IDLE
        for mw in self._middleware:
            mw.teardown()
        self._root.complete()
        self._action_subject.on_completed()

    def __enter__(self) -> "Store[S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()

    def __repr__(self) -> str:
        return f"Store(state={self._dispatch_state.value}, actions={sorted(self._actions)!r})"
