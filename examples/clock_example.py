"""
巢狀 selector 與 reducer 內部 dispatch 的時鐘示例
文件名: clock_example.py
"""

import asyncio
import logging

from pathstorex import ActionsRegistry, StoreConfig, always_update

registry = ActionsRegistry()


def increment_sec(state, payload, action_type, dispatch):
    if state is None:
        return 0
    result = state + 1
    if result >= 60:
        # 在 reducer 中發出的 dispatch 會排在目前這個之後
        dispatch("incrementMin")
    return result % 60


def increment_min(state):
    if state is None:
        return 0
    return (state + 1) % 60


registry.register("incrementSec", {"selector": "clock.sec", "handler": increment_sec})
registry.register("incrementMin", {"selector": "clock.min", "handler": increment_min})
registry.register("resetClock", {"selector": "clock", "handler": lambda: {"sec": 0, "min": 0}})


async def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = registry.create_store(config=StoreConfig(strict_paths=True))

    store.get("clock", "min").subscribe(lambda minute: print(f"分鐘: {minute}"))
    # clock 物件是就地更新的，需要 always_update 才會每次通知
    store.get("clock").subscribe(lambda clock: print(f"時鐘: {clock['min']:02d}:{clock['sec']:02d}"), always_update)

    for _ in range(125):
        store.do("incrementSec")
    await store.idle()

    print(f"\n最終狀態: {store.get_state()}")
    await store.do("resetClock")
    store.teardown()


if __name__ == "__main__":
    asyncio.run(main())
