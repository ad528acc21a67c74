import logging

from counter_actions import decremented, incremented
from counter_store import store
from counter_thunks import increment_async, increment_if_odd

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # 訂閱狀態變化
    unsubscribe = store.subscribe(lambda: print(f"value: {store.get_state().value}"))
    store.select(lambda state: state.value).subscribe(
        on_next=lambda change: print(f"變化: {change[0]} -> {change[1]}")
    )

    # 分發actions
    print("\n==== 開始測試基本操作 ====")
    store.dispatch(incremented())
    store.dispatch(incremented())
    store.dispatch(decremented())
    store.dispatch(increment_if_odd())

    # 延遲 dispatch 由 Store 之外的計時器觸發
    print("\n==== 開始測試延遲操作 ====")
    timer = store.dispatch(increment_async(5, delay=0.5))
    timer.join()

    unsubscribe()
    print("\n==== 最終狀態 ====")
    print(store.state)
