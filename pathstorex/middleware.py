"""
PathStoreX 的中介軟體定義模組。

中介軟體可以介入動作分發的流程，在 reducer 執行前、動作處理完成後
或出現錯誤時執行自定義邏輯。
"""
import logging
import time
from typing import Any, Dict, Optional

from .actions import Action
from .immutable_utils import to_dict

logger = logging.getLogger(__name__)


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。
    """

    def on_next(self, action: Action[Any], prev_state: Any) -> None:
        """
        在 side effects 與 reducer 執行之前調用。

        Args:
            action: 正在處理的 Action
            prev_state: 處理之前的狀態快照
        """
        pass

    def on_complete(self, next_state: Any, action: Action[Any]) -> None:
        """
        在 reducer 更新完狀態之後調用。

        Args:
            next_state: 處理之後的最新狀態
            action: 剛剛處理的 Action
        """
        pass

    def on_error(self, error: Exception, action: Action[Any]) -> None:
        """
        如果處理過程中拋出異常，則調用此鉤子。異常仍會傳遞給 dispatch 的調用方。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """
        pass

    def teardown(self) -> None:
        """
        當 Store 清理資源時調用，用於清理中間件持有的資源。
        """
        pass


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，透過 logging 記錄每個 action 處理前後的 state 與耗時。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.log = log or logger
        self.level = level
        self._started: Dict[int, float] = {}

    def on_next(self, action: Action[Any], prev_state: Any) -> None:
        self._started[id(action)] = time.perf_counter()
        self.log.log(self.level, "dispatching %s", action.type)
        self.log.log(self.level, "state before %s: %r", action.type, to_dict(prev_state))

    def on_complete(self, next_state: Any, action: Action[Any]) -> None:
        elapsed_ms = (time.perf_counter() - self._started.pop(id(action), time.perf_counter())) * 1000
        self.log.log(self.level, "state after %s (%.2fms): %r", action.type, elapsed_ms, to_dict(next_state))

    def on_error(self, error: Exception, action: Action[Any]) -> None:
        self._started.pop(id(action), None)
        self.log.error("error in %s: %s", action.type, error)

    def teardown(self) -> None:
        self._started.clear()
