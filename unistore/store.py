import inspect
import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

from reactivex import Observable, operators as ops
from reactivex.subject import Subject

from .actions import Action, init_store, to_action
from .errors import (
    ListenerError, MiddlewareError, ReducerError, ReentrantDispatchError, StoreError, UnistoreError
)
from .listeners import SubscriberRegistry
from .types import DispatchFunction, Listener, Reducer, Unsubscribe


S = TypeVar("S")

_LOGGER = logging.getLogger(__name__)


def _name_of(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


class Store(Generic[S]):
    """
    狀態容器，持有唯一的當前狀態，只能透過 reducer 與 dispatch 改變。

    每次 dispatch 會同步執行 reducer、提交新狀態，然後通知訂閱者的快照。
    dispatch 進行中（包括 reducer 與訂閱者回調內）再次 dispatch 會拋出
    ReentrantDispatchError。Store 本身不是執行緒安全的，多執行緒使用時
    需要由呼叫端加鎖。
    """

    def __init__(self, reducer: Reducer[S], preloaded_state: Optional[S] = None):
        """
        建立 Store，並立即以 (preloaded_state, init_store()) 呼叫 reducer
        取得初始狀態。初始化不會通知任何訂閱者。

        Args:
            reducer: 純函數 (state, action) -> state。
            preloaded_state: 可選的預載狀態。
        """
        if not callable(reducer):
            raise StoreError("Expected the reducer to be a function", "create_store", reducer=repr(reducer))

        self._reducer = reducer
        # 訂閱者註冊表
        self._listeners = SubscriberRegistry()
        # dispatch 進行中旗標
        self._is_dispatching = False
        # 狀態流，發送 (old_state, new_state)
        self._state_subject: Subject = Subject()
        # 中介軟體列表
        self._middleware: List[Any] = []
        self._dispatch_chain: DispatchFunction = self._dispatch_core

        init_action = init_store()
        self._is_dispatching = True
        try:
            self._state: S = self._run_reducer(preloaded_state, init_action)
        finally:
            self._is_dispatching = False

    # ———— 狀態讀取 ————

    def get_state(self) -> S:
        """
        返回當前已提交的狀態。

        在 dispatch 進行中（例如 reducer 內部）返回的是 dispatch 之前的狀態。
        """
        return self._state

    @property
    def state(self) -> S:
        return self._state

    @property
    def is_dispatching(self) -> bool:
        return self._is_dispatching

    # ———— Dispatch ————

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作，觸發狀態更新與訂閱者通知。

        Args:
            action: Action、帶 type 鍵的記錄，或（有 ThunkMiddleware 時）thunk 函數。

        Returns:
            正規化後的 Action；中介軟體可能返回其他值。

        Raises:
            InvalidActionError: action 缺少 type 標籤。
            ReentrantDispatchError: 在 dispatch 進行中再次 dispatch。
            ReducerError: reducer 拋出了異常，狀態未改變。
            ListenerError: 訂閱者拋出了異常，狀態已提交。
        """
        if not callable(action) or hasattr(action, "type"):
            action = to_action(action)
        if self._is_dispatching:
            raise ReentrantDispatchError(getattr(action, "type", None))
        return self._dispatch_chain(action)

    def _dispatch_core(self, action: Any) -> Action[Any]:
        action = to_action(action)

        if self._is_dispatching:
            raise ReentrantDispatchError(action.type)

        self._is_dispatching = True
        try:
            prev_state = self._state
            next_state = self._run_reducer(prev_state, action)
            self._state = next_state
            _LOGGER.debug("Committed %s (changed=%s)", action.type, next_state is not prev_state)

            try:
                self._listeners.notify(lambda listener: self._call_listener(listener, action))
            finally:
                # 已提交的狀態一定送進狀態流，即使訂閱者中途失敗
                self._state_subject.on_next((prev_state, next_state))
        finally:
            self._is_dispatching = False

        return action

    def _run_reducer(self, state: Optional[S], action: Action[Any]) -> S:
        try:
            return self._reducer(state, action)
        except UnistoreError:
            raise
        except Exception as err:
            raise ReducerError(
                f"Reducer raised {err.__class__.__name__}: {err}",
                _name_of(self._reducer),
                action.type,
                state,
            ) from err

    def _call_listener(self, listener: Listener, action: Action[Any]) -> None:
        try:
            listener()
        except UnistoreError:
            raise
        except Exception as err:
            raise ListenerError(
                f"Listener raised {err.__class__.__name__}: {err}",
                _name_of(listener),
                action.type,
            ) from err

    # ———— 訂閱 ————

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        註冊一個無參數的回調，在之後每次提交 dispatch 後被調用。

        同一個回調註冊兩次會得到兩個獨立的註冊。

        Returns:
            取消訂閱的函數；重複調用不會出錯。
        """
        if not callable(listener):
            raise StoreError("Expected the listener to be a function", "subscribe", listener=repr(listener))
        return self._listeners.add(listener)

    def select(self, selector: Optional[Callable[[S], Any]] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            一個可觀察對象，在每次提交後發送 (old, new)，訂閱者失敗時也照常發送；
            提供 selector 時只在選定部分變化時發送。
        """
        if selector is None:
            return self._state_subject.pipe(ops.share())

        return self._state_subject.pipe(
            ops.map(lambda change: (selector(change[0]), selector(change[1]))),
            ops.distinct_until_changed(lambda change: change[1]),
        )

    # ———— Reducer ————

    def replace_reducer(self, reducer: Reducer[S]) -> None:
        """
        替換之後 dispatch 所使用的 reducer。不改變當前狀態，也不通知訂閱者。
        """
        if not callable(reducer):
            raise StoreError("Expected the reducer to be a function", "replace_reducer", reducer=repr(reducer))
        if self._is_dispatching:
            raise ReentrantDispatchError(operation="replace_reducer")
        self._reducer = reducer
        _LOGGER.debug("Replaced reducer with %s", _name_of(reducer))

    # ———— 中介軟體 ————

    def apply_middleware(self, *middlewares: Any) -> "Store[S]":
        """
        一次註冊多個中介軟體，並重建 dispatch 鏈。

        Args:
            *middlewares: 中介軟體類、實例，或 store -> next -> dispatch 形式的工廠函數。
        """
        for m in middlewares:
            inst = m() if inspect.isclass(m) else m
            self._middleware.append(inst)
        self._dispatch_chain = self._apply_middleware_chain()
        return self

    def _apply_middleware_chain(self) -> DispatchFunction:
        dispatch: DispatchFunction = self._dispatch_core
        for mw in reversed(self._middleware):
            if callable(mw):
                # 工廠型：mw(store)(next_dispatch)
                dispatch = mw(self)(dispatch)
            elif hasattr(mw, "action_context"):
                dispatch = self._wrap_obj_middleware(mw, dispatch)
            else:
                raise MiddlewareError(
                    "Middleware must be a factory or define action_context",
                    type(mw).__name__,
                )
        return dispatch

    def _wrap_obj_middleware(self, mw: Any, next_dispatch: DispatchFunction) -> DispatchFunction:
        """以物件型中介軟體的 action_context 包裹下一層 dispatch。"""
        def dispatch(action: Any) -> Any:
            with mw.action_context(action, self._state) as context:
                result = next_dispatch(action)
                context['result'] = result
                context['next_state'] = self._state
                return result
        return dispatch

    # ———— 生命週期 ————

    def teardown(self) -> None:
        """釋放訂閱者註冊表、完成狀態流，並清理中介軟體持有的資源。"""
        self._listeners.clear()
        self._state_subject.on_completed()
        for mw in self._middleware:
            teardown = getattr(mw, "teardown", None)
            if callable(teardown):
                teardown()

    def __enter__(self) -> "Store[S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()


def create_store(
    reducer: Reducer[S],
    preloaded_state: Optional[S] = None,
    middleware: Optional[List[Any]] = None,
) -> Store[S]:
    """
    創建一個新的 Store 實例。

    Args:
        reducer: 根 reducer。
        preloaded_state: 可選的預載狀態，會與 init action 一起傳給 reducer。
        middleware: 可選的中介軟體列表。

    Returns:
        Store: 新創建的 Store 實例。
    """
    store = Store(reducer, preloaded_state)
    if middleware:
        store.apply_middleware(*middleware)
    return store
