"""
使用 PathStoreX 的簡單計數器示例
文件名: counter_example.py
"""

import asyncio
import time

from pathstorex import ActionsRegistry, StoreConfig

# ============== 註冊 selector/handler ==============
registry = ActionsRegistry()


@registry.handler("increment", selector="counter.count")
def handle_increment(state):
    return 0 if state is None else state + 1


@registry.handler("decrement", selector="counter.count")
def handle_decrement(state):
    return 0 if state is None else state - 1


@registry.handler("incrementBy", "INCREMENT_BY", selector="counter.count")
def handle_increment_by(state, payload):
    return 0 if state is None else state + payload


@registry.handler("reset", ["RESET", "LOAD_COUNT_SUCCESS"], selector="counter.count")
def handle_reset(state, payload):
    return payload or 0


@registry.handler("touch", ["INCREMENT_BY", "RESET", "LOAD_COUNT_SUCCESS"], selector="counter.lastUpdated")
def handle_last_updated(state, payload, action_type):
    return None if action_type is None else time.time()


@registry.handler("setLoading", ["LOAD_COUNT_REQUEST", "LOAD_COUNT_SUCCESS"], selector="counter.loading")
def handle_loading(state, payload, action_type):
    return action_type == "LOAD_COUNT_REQUEST"


# ============== 定義 side effect ==============
@registry.side_effect("LOAD_COUNT_REQUEST")
async def load_count(state, action_type, dispatch):
    """模擬從 API 載入數據，成功後 dispatch LOAD_COUNT_SUCCESS"""
    print("Effect: Loading counter...")
    await asyncio.sleep(1.0)
    await dispatch({"type": "LOAD_COUNT_SUCCESS", "payload": 42})


async def main():
    store = registry.create_store(config=StoreConfig(log_dispatches=False))

    store.get("counter.count").subscribe(lambda count: print(f"計數: {count}"))
    store.get("counter.loading").subscribe(lambda loading: print(f"載入中: {loading}"))

    print("\n==== 開始執行計數器示例 ====")
    await store.do("increment")
    await store.do("increment")
    await store.do("decrement")
    await store.do("incrementBy", 5)
    await store.do("reset", "RESET", 10)

    print("\n==== 測試非同步 side effect ====")
    await store.dispatch({"type": "LOAD_COUNT_REQUEST"})
    await store.idle()

    print(f"\n最終狀態: {store.get_state()}")
    store.teardown()


if __name__ == "__main__":
    asyncio.run(main())
