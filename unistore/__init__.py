"""
unistore: 單向資料流的狀態容器。

一個 Store 持有唯一的當前狀態，只能透過純函數 reducer 與 dispatch 改變，
並在每次提交後通知訂閱者。
"""
from .errors import (
    UnistoreError, ActionError, InvalidActionError, ReducerError,
    StoreError, ReentrantDispatchError, ListenerError, ListenerFailure,
    MiddlewareError, SelectorError, ErrorHandler, global_error_handler, handle_error
)
from .actions import Action, ActionRecord, create_action, init_store, is_action, to_action
from .listeners import SubscriberRegistry
from .middleware import (
    BaseMiddleware, LoggerMiddleware, ThunkMiddleware, ErrorMiddleware,
    DevToolsMiddleware, PerformanceMonitorMiddleware, global_error
)
from .reducers import create_reducer, on, combine_reducers
from .store import Store, create_store
from .store_selectors import create_selector
from .immutable_utils import to_immutable, to_dict, to_pydantic

__version__ = "0.1.0"

__all__ = [
    # Errors
    "UnistoreError", "ActionError", "InvalidActionError", "ReducerError",
    "StoreError", "ReentrantDispatchError", "ListenerError", "ListenerFailure",
    "MiddlewareError", "SelectorError", "ErrorHandler", "global_error_handler", "handle_error",

    # Actions
    "Action", "ActionRecord", "create_action", "init_store", "is_action", "to_action",

    # Listeners
    "SubscriberRegistry",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware", "ThunkMiddleware", "ErrorMiddleware",
    "DevToolsMiddleware", "PerformanceMonitorMiddleware", "global_error",

    # Reducers
    "create_reducer", "on", "combine_reducers",

    # Store
    "Store", "create_store",

    # Selectors
    "create_selector",

    # Immutable Utils
    "to_immutable", "to_dict", "to_pydantic",
]
