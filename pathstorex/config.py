from pydantic import BaseModel, ConfigDict


class StoreConfig(BaseModel):
    """
    Store 的行為設定。

    Attributes:
        strict_paths: 訂閱當前狀態中不存在的路徑時拋出 SelectorError，
            預設為寬鬆模式（建立節點並等待該路徑出現）
        snapshot_side_effect_state: side effect 收到的是 immutables.Map 快照
            而不是即時狀態
        log_dispatches: 自動安裝 LoggerMiddleware
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    strict_paths: bool = False
    snapshot_side_effect_state: bool = True
    log_dispatches: bool = False
