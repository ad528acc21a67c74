"""
unistore 錯誤處理模組。

所有 unistore 拋出的異常都繼承自 UnistoreError，並攜帶結構化的 details，
方便日誌記錄與錯誤報告。ErrorHandler 提供集中式的日誌輸出與回調。
"""
import functools
import logging
import traceback as tb
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

F = TypeVar("F", bound=Callable[..., Any])


class UnistoreError(Exception):
    """所有 unistore 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = "".join(tb.format_stack()[:-1])

    def to_dict(self) -> Dict[str, Any]:
        """轉換為可序列化的字典，供日誌與報告使用。"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class ActionError(UnistoreError):
    """與 Action 相關的錯誤。"""

    def __init__(self, message: str, action_type: Optional[str] = None, payload: Any = None, **kwargs: Any) -> None:
        details = {"action_type": action_type, "payload": payload}
        details.update(kwargs)
        super().__init__(message, details)


class InvalidActionError(ActionError):
    """Action 缺少 type 標籤，或根本不是資料記錄。"""

    def __init__(self, message: str, value: Any = None, **kwargs: Any) -> None:
        super().__init__(message, value_type=type(value).__name__, **kwargs)
        self.value = value


class ReducerError(UnistoreError):
    """Reducer 在處理 action 時拋出了非 unistore 的異常。"""

    def __init__(self, message: str, reducer_name: str, action_type: str, state: Any = None, **kwargs: Any) -> None:
        details = {"reducer_name": reducer_name, "action_type": action_type, "state": state}
        details.update(kwargs)
        super().__init__(message, details)


class StoreError(UnistoreError):
    """與 Store 操作相關的錯誤。"""

    def __init__(self, message: str, operation: str, **kwargs: Any) -> None:
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)


class ReentrantDispatchError(StoreError):
    """在同一個 Store 的 dispatch 進行中再次呼叫 dispatch。"""

    def __init__(self, action_type: Optional[str] = None, operation: str = "dispatch") -> None:
        super().__init__(
            "Reducers and listeners may not dispatch actions",
            operation,
            action_type=action_type,
        )


class ListenerError(UnistoreError):
    """訂閱者回調在通知過程中拋出異常；state 已提交，不會回滾。"""

    def __init__(self, message: str, listener_name: str, action_type: Optional[str] = None, **kwargs: Any) -> None:
        details = {"listener_name": listener_name, "action_type": action_type}
        details.update(kwargs)
        super().__init__(message, details)


ListenerFailure = ListenerError


class MiddlewareError(UnistoreError):
    """與 Middleware 相關的錯誤。"""

    def __init__(self, message: str, middleware_name: str, action_type: Optional[str] = None, **kwargs: Any) -> None:
        details = {"middleware_name": middleware_name, "action_type": action_type}
        details.update(kwargs)
        super().__init__(message, details)


class SelectorError(UnistoreError):
    """與 Selector 相關的錯誤。"""

    def __init__(self, message: str, selector_name: Optional[str] = None, **kwargs: Any) -> None:
        details = {"selector_name": selector_name}
        details.update(kwargs)
        super().__init__(message, details)


class ErrorHandler:
    """
    集中式錯誤處理器，用於日誌記錄和錯誤報告。

    透過 logging 輸出到 "unistore" logger；可選擇額外寫入檔案，
    並將錯誤轉交給已註冊的回調函數。
    """

    def __init__(self, log_to_console: bool = True, log_to_file: bool = False, log_file: Optional[str] = None) -> None:
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.handlers: List[Callable[[UnistoreError], None]] = []
        self._logger = logging.getLogger("unistore")
        self._file_handler: Optional[logging.Handler] = None
        if log_to_file:
            self._file_handler = logging.FileHandler(log_file or "unistore_errors.log", encoding="utf-8")
            self._file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            self._logger.addHandler(self._file_handler)

    def register_handler(self, handler: Callable[[UnistoreError], None]) -> None:
        """註冊一個錯誤回調，handle() 時依註冊順序調用。"""
        self.handlers.append(handler)

    def handle(self, error: Union[UnistoreError, Exception]) -> None:
        """
        記錄錯誤並轉交給所有回調。

        非 UnistoreError 的異常會先包裝為 UnistoreError 再轉交。
        """
        if not isinstance(error, UnistoreError):
            wrapped = UnistoreError(str(error), {"error_type": error.__class__.__name__})
            wrapped.__cause__ = error
            error = wrapped

        if self.log_to_console or self.log_to_file:
            self._logger.error("%s: %s", error.__class__.__name__, error)

        for handler in list(self.handlers):
            handler(error)

    def close(self) -> None:
        """移除檔案 handler。"""
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None


# 單例錯誤處理器
global_error_handler = ErrorHandler()


def handle_error(func: F) -> F:
    """
    裝飾器：將函數拋出的異常交給 global_error_handler 記錄後重新拋出。
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception as err:
            global_error_handler.handle(err)
            raise
    return cast(F, wrapper)
