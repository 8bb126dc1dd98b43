"""
基於 reactivex observer 介面的可觀察值。

ReactiveValue 持有一個當前值和一組訂閱者，並提供三種外部生命週期鉤子
（訂閱、取消訂閱、完成）。完成狀態是終態且可重複調用。
"""
from typing import Any, Callable, Generic, List, Optional, Union

from reactivex import Observer
from reactivex import abc

from .types import ObserverLike, T

Unsubscribe = Callable[[], None]


def _noop(*_: Any) -> None:
    pass


class FunctionObserver(Observer):
    """
    由普通函數包裝出來的 observer。

    記錄原始函數，讓 unsubscribe 可以直接傳入該函數取消訂閱。
    """

    def __init__(self, fn: Callable[[Any], Any]):
        super().__init__(on_next=fn, on_completed=_noop)
        self.origin = fn


def is_observer(obj: Any) -> bool:
    """判斷物件是否為 observer（而不是普通函數）。"""
    return isinstance(obj, abc.ObserverBase) or hasattr(obj, "on_next") or hasattr(obj, "on_completed")


def to_observer(observer: Any) -> Any:
    """
    將 observer 或普通函數轉換成 observer。

    Raises:
        TypeError: 既不是 observer 也不是可調用對象
    """
    if is_observer(observer):
        return observer
    if callable(observer):
        return FunctionObserver(observer)
    raise TypeError(f"expected an observer or a callable, got {type(observer).__name__}")


def _complete(observer: Any) -> None:
    on_completed = getattr(observer, "on_completed", None)
    if on_completed is not None:
        on_completed()


class ReactiveValue(Generic[T]):
    """
    可觀察值，類似帶有 replay 選項的 Subject。

    Args:
        value: 初始值
        replay: 新訂閱者是否立即收到當前值
    """

    def __init__(self, value: Optional[T] = None, replay: bool = False):
        self._value = value
        self._replay = replay
        self._is_completed = False
        self._observers: List[Any] = []
        self._subscribe_hooks: List[Callable[[Any], None]] = []
        self._unsubscribe_hooks: List[Callable[[], None]] = []
        self._complete_hooks: List[Callable[[], None]] = []

    def subscribe(self, observer: Union[ObserverLike, Callable[[Any], Any]]) -> Unsubscribe:
        """
        訂閱值的變化。

        Args:
            observer: reactivex observer 或普通函數

        Returns:
            取消這個訂閱的函數
        """
        obs = to_observer(observer)
        if self._is_completed:
            _complete(obs)
            return _noop

        self._observers.append(obs)
        try:
            if self._replay:
                obs.on_next(self._value)
            for hook in list(self._subscribe_hooks):
                hook(obs)
        except Exception:
            # 訂閱失敗時不保留 observer，取消訂閱鉤子會照常觸發
            self.unsubscribe(obs)
            raise

        def unsubscribe() -> None:
            self.unsubscribe(obs)

        return unsubscribe

    def unsubscribe(self, observer: Any) -> None:
        """
        取消訂閱。可以傳入 observer 本身或當初訂閱用的函數。

        只有訂閱者數量真的改變時才觸發取消訂閱鉤子。
        """
        original_length = len(self._observers)
        self._observers = [
            o for o in self._observers
            if o is not observer and getattr(o, "origin", None) is not observer
        ]
        if len(self._observers) != original_length:
            for hook in list(self._unsubscribe_hooks):
                hook()

    def on_next(self, data: T) -> None:
        """保存新值並依訂閱順序通知所有 observer。完成後為 no-op。"""
        if self._is_completed:
            return
        self._value = data
        for observer in list(self._observers):
            observer.on_next(data)

    def on_completed(self) -> None:
        """完成此可觀察值，通知 observer 並清空所有訂閱與鉤子。"""
        if self._is_completed:
            return
        self._is_completed = True
        for observer in list(self._observers):
            _complete(observer)
        hooks, self._complete_hooks = self._complete_hooks, []
        for hook in hooks:
            hook()
        self._observers = []
        self._subscribe_hooks = []
        self._unsubscribe_hooks = []

    def add_subscribe_hook(self, hook: Callable[[Any], None]) -> None:
        if self._is_completed:
            return
        self._subscribe_hooks.append(hook)

    def add_unsubscribe_hook(self, hook: Callable[[], None]) -> None:
        if self._is_completed:
            return
        self._unsubscribe_hooks.append(hook)

    def add_complete_hook(self, hook: Callable[[], None]) -> None:
        """註冊完成鉤子；如果已經完成則立即調用。"""
        if self._is_completed:
            hook()
            return
        self._complete_hooks.append(hook)

    @property
    def value(self) -> Optional[T]:
        """最後一次送出的值。"""
        return self._value

    @property
    def is_completed(self) -> bool:
        return self._is_completed

    def __len__(self) -> int:
        """訂閱者數量。"""
        return len(self._observers)

    def __repr__(self) -> str:
        return f"ReactiveValue(value={self._value!r}, observers={len(self._observers)})"
