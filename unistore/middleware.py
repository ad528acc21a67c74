"""
unistore 的中介軟體定義模組。

此模組提供各種中介軟體，用於在動作分發過程中插入自定義邏輯，
實現日誌記錄、thunk、錯誤轉發、歷史記錄與性能監控等功能。
"""

import contextlib
import datetime
import logging
import time
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple, Union, cast

from .actions import Action, create_action
from .errors import UnistoreError, global_error_handler
from .immutable_utils import to_dict
from .types import (
    ActionContext, DispatchFunction, MiddlewareFunction, NextDispatch, Store, ThunkFunction
)

_LOGGER = logging.getLogger(__name__)


def _type_of(action: Any) -> str:
    return getattr(action, "type", None) or repr(action)


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    """

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給 reducer 之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的 store.state
        """
        pass

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在 reducer 與訂閱者通知完成之後調用。

        Args:
            next_state: dispatch 之後的最新 store.state
            action: 剛剛 dispatch 的 Action
        """
        pass

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。異常之後仍會繼續向上拋出。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """
        pass

    def teardown(self) -> None:
        """當 Store 清理資源時調用。"""
        pass

    def _new_context(self, action: Any, prev_state: Any) -> ActionContext:
        return {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
        }

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        以上下文管理器的形式包住一次 dispatch 的生命週期。

        Store 在上下文內執行下一層 dispatch，並把 next_state、result
        寫回 context；離開上下文時依結果呼叫 on_complete 或 on_error。

        Yields:
            ActionContext: 在上下文內外之間傳遞資料的字典
        """
        context = self._new_context(action, prev_state)
        self.on_next(action, prev_state)
        try:
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise
        self.on_complete(context['next_state'], action)


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, level: int = logging.INFO, logger: Optional[logging.Logger] = None):
        self.level = level
        self.logger = logger or _LOGGER

    def _new_context(self, action: Any, prev_state: Any) -> ActionContext:
        context = super()._new_context(action, prev_state)
        context['timestamp'] = datetime.datetime.now()
        return context

    def on_next(self, action: Any, prev_state: Any) -> None:
        self.logger.log(self.level, "dispatching %s", _type_of(action))
        self.logger.log(self.level, "state before %s: %s", _type_of(action), to_dict(prev_state))

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.logger.log(self.level, "state after %s: %s", _type_of(action), to_dict(next_state))

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("error in %s: %s", _type_of(action), error)


# ———— ThunkMiddleware ————
class ThunkMiddleware(BaseMiddleware):
    """
    支援 dispatch 函數 (thunk)，在 thunk 內可讀取狀態並決定是否 dispatch。

    thunk 只能在 dispatch 之外分發；在 reducer 或訂閱者內分發 thunk 會在
    執行前拋出 ReentrantDispatchError。直接傳入 action 生成器（未呼叫）會拋出
    InvalidActionError。

    範例:
        ```python
        def increment_if_odd():
            def thunk(dispatch, get_state):
                if get_state()["value"] % 2 != 0:
                    dispatch(incremented())
            return thunk

        store.dispatch(increment_if_odd())
        ```
    """

    def __call__(self, store: Store[Any]) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Union[ThunkFunction, Action[Any]]) -> Any:
                if callable(action) and not hasattr(action, "type"):
                    return cast(ThunkFunction, action)(store.dispatch, store.get_state)
                return next_dispatch(cast(Action[Any], action))
            return dispatch
        return middleware


# ———— ErrorMiddleware ————
global_error = create_action("[Error] GlobalError", lambda info: info)


class ErrorMiddleware(BaseMiddleware):
    """
    捕獲 dispatch 過程中的異常，交給 global_error_handler 記錄，
    並在 dispatch 結束後分發一個全域錯誤 Action。原異常仍會拋給呼叫端。

    使用場景:
    - 當需要統一處理所有異常並記錄或讓 reducer 保存錯誤資訊時。
    """

    def __init__(self, report: bool = True) -> None:
        self.report = report
        self._reporting = False

    def __call__(self, store: Store[Any]) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                try:
                    return next_dispatch(action)
                except Exception as err:
                    if self.report:
                        global_error_handler.handle(err)
                    if not store.is_dispatching and not self._reporting:
                        self._reporting = True
                        try:
                            store.dispatch(global_error(self._error_info(err, action)))
                        except Exception as report_err:
                            # 錯誤 action 本身失敗時只記錄，呼叫端仍收到原異常
                            global_error_handler.handle(report_err)
                        finally:
                            self._reporting = False
                    raise err
            return dispatch
        return middleware

    def _error_info(self, error: Exception, action: Any) -> Dict[str, Any]:
        info = {
            "error": str(error),
            "error_type": error.__class__.__name__,
            "action": _type_of(action),
            "timestamp": time.time(),
        }
        if isinstance(error, UnistoreError):
            info["details"] = {k: repr(v) for k, v in error.details.items()}
        return info


# ———— DevToolsMiddleware ————
class DevToolsMiddleware(BaseMiddleware):
    """
    記錄每次 action 與 state 快照，支援時間旅行調試。

    使用場景:
    - 當需要回溯 state 的變化歷史以進行調試時。
    """

    def __init__(self, max_history: Optional[int] = None) -> None:
        self.max_history = max_history
        self.history: List[Tuple[Any, Action[Any], Any]] = []

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        with super().action_context(action, prev_state) as context:
            yield context
        self.history.append((prev_state, action, context['next_state']))
        if self.max_history is not None and len(self.history) > self.max_history:
            del self.history[0]

    def get_history(self) -> List[Tuple[Any, Action[Any], Any]]:
        """
        返回整個歷史快照列表。

        Returns:
            歷史快照列表，每項為 (prev_state, action, next_state)
        """
        return list(self.history)

    def states(self) -> List[Any]:
        """返回依序提交的狀態，第一項為第一次記錄前的狀態。"""
        if not self.history:
            return []
        return [self.history[0][0]] + [entry[2] for entry in self.history]

    def teardown(self) -> None:
        self.history.clear()


# ———— PerformanceMonitorMiddleware ————
class PerformanceMonitorMiddleware(BaseMiddleware):
    """
    性能監控中間件，記錄 action 處理時間。
    """

    def __init__(self, threshold_ms: float = 100, log_all: bool = False,
                 clock: Callable[[], float] = time.perf_counter):
        """
        Args:
            threshold_ms: 性能警告閾值，單位為毫秒，預設為 100 毫秒
            log_all: 是否記錄所有 action 的性能指標，預設為 False (只記錄超過閾值的)
            clock: 計時函數，預設為 time.perf_counter
        """
        self.threshold_ms = threshold_ms
        self.log_all = log_all
        self.clock = clock
        self.metrics: Dict[str, List[float]] = {}

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        action_type = _type_of(action)
        start_time = self.clock()
        try:
            with super().action_context(action, prev_state) as context:
                yield context
        except Exception as err:
            elapsed_ms = (self.clock() - start_time) * 1000
            _LOGGER.warning("Action %s failed after %.2fms: %s", action_type, elapsed_ms, err)
            raise
        elapsed_ms = (self.clock() - start_time) * 1000
        self.metrics.setdefault(action_type, []).append(elapsed_ms)
        if elapsed_ms > self.threshold_ms:
            _LOGGER.warning("Action %s exceeded threshold (%sms): took %.2fms",
                            action_type, self.threshold_ms, elapsed_ms)
        elif self.log_all:
            _LOGGER.info("Action %s took %.2fms", action_type, elapsed_ms)

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """
        獲取性能指標統計信息。
        """
        result = {}
        for action_type, times in self.metrics.items():
            if not times:
                continue
            result[action_type] = {
                'avg': sum(times) / len(times),
                'max': max(times),
                'min': min(times),
                'count': len(times)
            }
        return result

    def teardown(self) -> None:
        self.metrics.clear()
