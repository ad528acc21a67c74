"""
Reducer 工具模組。

Reducer 是純函數 (state, action) -> state：
- state 為 None 時返回初始狀態；
- 遇到未知的 action type 時必須返回同一個 state 物件，
  讓 Store 與選擇器可以用 `is` 快速判斷「沒有變化」。
"""
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from immutables import Map

from .actions import Action
from .types import Reducer

S = TypeVar("S")


def create_reducer(initial_state: S, *handlers) -> Reducer[S]:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    action_handlers: Dict[str, Callable[[S, Action[Any]], S]] = {}

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[_type_of(action_type)] = handler_fn
        elif isinstance(handler, Mapping):
            action_handlers.update(handler)
        else:
            raise TypeError(f"Unsupported reducer handler: {handler!r}")

    def reducer(state: Optional[S] = None, action: Optional[Action[Any]] = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_handlers.get(action.type)
        if handler:
            return handler(state, action)
        # 未知的 action：保留原物件
        return state

    reducer.initial_state = initial_state  # type: ignore[attr-defined]
    reducer.handlers = dict(action_handlers)  # type: ignore[attr-defined]

    return reducer


def on(action_creator_or_type, handler) -> Dict[str, Callable]:
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式或 Action 類型字串。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    return {_type_of(action_creator_or_type): handler}


def _type_of(action_creator_or_type) -> str:
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        return action_creator_or_type.type
    return str(action_creator_or_type)


def combine_reducers(reducers: Mapping[str, Reducer[Any]]) -> Reducer[Map]:
    """
    將多個特性 reducer 組合成一個作用於 immutables.Map 的根 reducer。

    每個特性 reducer 只處理自己鍵下的子狀態。若所有子狀態都沒有改變
    （返回同一物件），則返回原本的 Map；否則返回共享結構的新 Map。

    Args:
        reducers: 特性鍵名到 reducer 的映射。

    Returns:
        根 reducer，並帶有 `reducers` 屬性。
    """
    feature_reducers = dict(reducers)

    def root_reducer(state: Optional[Map] = None, action: Optional[Action[Any]] = None) -> Map:
        if state is None:
            state = Map()

        mutation = state.mutate()
        changed = False
        for feature_key, reducer in feature_reducers.items():
            prev_substate = state.get(feature_key)
            next_substate = reducer(prev_substate, action)
            if feature_key not in state or next_substate is not prev_substate:
                mutation[feature_key] = next_substate
                changed = True

        if not changed:
            return state
        return mutation.finish()

    root_reducer.reducers = feature_reducers  # type: ignore[attr-defined]

    return root_reducer
