import functools
import inspect
from typing import Any, Callable


def positional_arity(fn: Callable[..., Any]) -> int:
    """
    計算函數能接收的位置參數數量。

    Returns:
        位置參數數量；接受 *args 或無法取得簽名時返回 -1
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return -1
    count = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return -1
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def fit_arity(fn: Callable[..., Any], max_args: int) -> Callable[..., Any]:
    """
    包裝函數，只傳入它宣告的前幾個位置參數。

    讓 handler 可以只寫 `lambda state: ...` 或 `lambda state, payload: ...`，
    不必列出所有參數。

    Args:
        fn: 被包裝的函數
        max_args: 調用方最多會傳入的參數數量

    Returns:
        接收 max_args 個位置參數的函數
    """
    arity = positional_arity(fn)
    if arity < 0 or arity >= max_args:
        return fn

    @functools.wraps(fn)
    def fitted(*args: Any) -> Any:
        return fn(*args[:arity])

    return fitted
