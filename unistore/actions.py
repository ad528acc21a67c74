"""
unistore 的 Action 定義模組。

此模組提供 Action 類別、創建 Action 的工廠函數，以及將外部傳入的
開放式記錄（dict / pydantic 模型）正規化為 Action 的功能。
Actions 是描述狀態變更意圖的不可變資料。
"""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Generic, Optional, Union, overload

from immutables import Map
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from .errors import InvalidActionError
from .immutable_utils import to_immutable
from .types import P, ActionCreator, ActionCreatorWithoutPayload, ActionCreatorWithPayload


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: str, payload: Optional[P] = None):
        if not isinstance(type, str) or not type:
            raise InvalidActionError("Action type must be a non-empty string", type)
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Cannot delete immutable instance attribute '{name}'")

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        try:
            return hash((self.type, self.payload))
        except TypeError:
            return hash((self.type, id(self.payload)))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={repr(self.payload)})"


class ActionRecord(BaseModel):
    """
    Action 的傳輸層形式：必須帶有 type 欄位的開放式記錄。

    額外欄位保留為負載。
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    type: StrictStr = Field(min_length=1)


def _process_payload(payload: Any) -> Any:
    """將字典類負載轉換為不可變結構。"""
    if isinstance(payload, (dict, list, set)):
        return to_immutable(payload)
    return payload


def _from_mapping(value: Mapping) -> Action[Any]:
    try:
        record = ActionRecord.model_validate(dict(value))
    except ValidationError as err:
        raise InvalidActionError(
            "Action records must carry a string 'type' field", value, reason=str(err)
        ) from err

    extra = dict(record.model_extra or {})
    if "payload" in extra:
        payload = extra.pop("payload")
        if extra:
            payload = {"payload": payload, **extra}
    else:
        payload = extra or None
    return Action(record.type, _process_payload(payload))


def to_action(value: Any) -> Action[Any]:
    """
    將 dispatch 收到的值正規化為 Action。

    接受:
        - Action 實例（原樣返回）
        - 帶有 "type" 鍵的 Mapping，例如 {"type": "counter/added", "amount": 2}
        - 帶有字串 type 欄位的 pydantic 模型（模型本身作為負載）

    Raises:
        InvalidActionError: 缺少 type 標籤，或不是資料記錄（函數、None 等）
    """
    if isinstance(value, Action):
        return value
    if isinstance(value, (Mapping, Map)):
        return _from_mapping(value)
    if isinstance(value, BaseModel):
        action_type = getattr(value, "type", None)
        if not isinstance(action_type, str) or not action_type:
            raise InvalidActionError("Action models must define a string 'type' field", value)
        return Action(action_type, value)
    if callable(value) and hasattr(value, "type"):
        raise InvalidActionError(
            f"Action creators must be called before dispatch: {value.type}()", value
        )
    if callable(value):
        raise InvalidActionError(
            "Actions must be plain data; apply ThunkMiddleware to dispatch functions", value
        )
    raise InvalidActionError("Actions must be Action instances or records with a 'type' field", value)


def is_action(value: Any) -> bool:
    """判斷一個值是否能被正規化為 Action。"""
    try:
        to_action(value)
    except InvalidActionError:
        return False
    return True


@overload
def create_action(action_type: str) -> ActionCreatorWithoutPayload:
    ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P]) -> ActionCreatorWithPayload[P]:
    ...


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> ActionCreator[Any]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action。
        生成器帶有 `type` 屬性與 `match(action)` 方法。

    範例:
        >>> incremented = create_action("counter/incremented")
        >>> incremented()
        Action(type='counter/incremented', payload=None)
        >>> added = create_action("counter/added", lambda amount: amount)
        >>> added(5)
        Action(type='counter/added', payload=5)
    """
    if not isinstance(action_type, str) or not action_type:
        raise InvalidActionError("Action type must be a non-empty string", action_type)

    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            payload = prepare_fn(*args, **kwargs)
        elif len(args) == 1 and not kwargs:
            payload = args[0]
        elif args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
        else:
            return Action(action_type)
        return Action(action_type, _process_payload(payload))

    def match(action: Any) -> bool:
        return isinstance(action, Action) and action.type == action_type

    action_creator.type = action_type  # type: ignore[attr-defined]
    action_creator.match = match  # type: ignore[attr-defined]
    action_creator.__name__ = action_creator.__qualname__ = f"create[{action_type}]"

    return action_creator  # type: ignore[return-value]


# 根 Actions
init_store: ActionCreatorWithoutPayload = create_action("[Root] Init Store")
