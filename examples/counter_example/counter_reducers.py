from pydantic import BaseModel, ConfigDict
from unistore import create_reducer, on

from counter_actions import decremented, incremented, incremented_by_amount


# ====== Model Definition ======
class CounterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int = 0


# ====== Handlers ======
def increment_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"value": state.value + 1})


def decrement_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"value": state.value - 1})


def increment_by_amount_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"value": state.value + action.payload})


counter_reducer = create_reducer(
    CounterState(),
    on(incremented, increment_handler),
    on(decremented, decrement_handler),
    on(incremented_by_amount, increment_by_amount_handler),
)
