"""
PathStoreX 錯誤處理模組。

定義所有由 PathStoreX 拋出的異常類型。每個異常都帶有結構化的 details，
方便記錄日誌或轉換成字典上報。
"""
from typing import Any, Dict, Optional, Sequence


class PathStoreError(Exception):
    """所有 PathStoreX 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        將異常轉換為字典。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({detail_str})"


class ActionError(PathStoreError):
    """與 Action 相關的錯誤。"""

    def __init__(self, message: str, action_type: Optional[str] = None, payload: Any = None, **kwargs: Any):
        details = {"action_type": action_type, **kwargs}
        if payload is not None:
            details["payload"] = payload
        super().__init__(message, details)
        self.action_type = action_type
        self.payload = payload


class UnknownActionError(ActionError):
    """分發了一個未註冊的 action 名稱或類型。"""


class RegistrationError(PathStoreError):
    """註冊 selector/handler 時的錯誤，在註冊當下立即拋出。"""

    def __init__(self, message: str, name: Optional[str] = None, selector: Any = None, **kwargs: Any):
        super().__init__(message, {"name": name, "selector": selector, **kwargs})
        self.name = name
        self.selector = selector


class ReducerError(PathStoreError):
    """組合 reducer 執行時的錯誤。"""

    def __init__(self, message: str, selector: Optional[str] = None, action_type: Optional[str] = None, **kwargs: Any):
        super().__init__(message, {"selector": selector, "action_type": action_type, **kwargs})
        self.selector = selector
        self.action_type = action_type


class SelectorError(PathStoreError):
    """訂閱路徑相關的錯誤。"""

    def __init__(self, message: str, path: Sequence[str] = (), **kwargs: Any):
        super().__init__(message, {"path": ".".join(path), **kwargs})
        self.path = tuple(path)


class StoreError(PathStoreError):
    """與 Store 操作相關的錯誤。"""

    def __init__(self, message: str, operation: str, **kwargs: Any):
        super().__init__(message, {"operation": operation, **kwargs})
        self.operation = operation
