"""
unistore 共用的類型定義模組。

集中定義 TypeVar、回調函數別名、Protocol 與 TypedDict，
避免 store / middleware / reducers 之間互相引用造成循環導入。
"""
from typing import (
    TYPE_CHECKING, Any, Callable, Optional, TypeVar
)
from typing_extensions import Protocol, TypedDict, runtime_checkable

if TYPE_CHECKING:
    from .actions import Action


S = TypeVar("S")  # 狀態類型
T = TypeVar("T")
P = TypeVar("P")  # 負載類型
P_co = TypeVar("P_co", covariant=True)
R = TypeVar("R")
Input = TypeVar("Input")
Output = TypeVar("Output")

# ———— Reducer / Listener ————
Reducer = Callable[[Optional[S], "Action[Any]"], S]
Listener = Callable[[], None]
Unsubscribe = Callable[[], None]
GetState = Callable[[], Any]

# ———— Dispatch / Middleware ————
DispatchFunction = Callable[[Any], Any]
NextDispatch = Callable[["Action[Any]"], Any]
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]
ThunkFunction = Callable[[DispatchFunction, GetState], Any]

# ———— Selectors ————
StateSelector = Callable[[Input], Output]
ResultSelector = Callable[..., R]


class ActionCreator(Protocol[P_co]):
    """Action 生成器：可調用並帶有 type 標籤。"""

    type: str

    def __call__(self, *args: Any, **kwargs: Any) -> "Action[P_co]": ...

    def match(self, action: Any) -> bool: ...


ActionCreatorWithoutPayload = ActionCreator[None]
ActionCreatorWithPayload = ActionCreator


class ActionContext(TypedDict, total=False):
    """中介軟體 action_context 在前後階段之間傳遞的資料。"""

    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[Exception]
    timestamp: Any


@runtime_checkable
class Store(Protocol[S]):
    """中介軟體與 thunk 所看到的 Store 介面。"""

    @property
    def is_dispatching(self) -> bool: ...

    def get_state(self) -> S: ...

    def dispatch(self, action: Any) -> Any: ...

    def subscribe(self, listener: Listener) -> Unsubscribe: ...


