import threading

from counter_actions import incremented, incremented_by_amount


def increment_if_odd():
    """只有在目前數值為奇數時才 dispatch incremented。"""
    def thunk(dispatch, get_state):
        if get_state().value % 2 != 0:
            dispatch(incremented())
    return thunk


def increment_async(amount: int, delay: float = 1.0):
    """
    延遲一段時間後 dispatch。計時器在 Store 之外，
    到期時只是一次普通、獨立的 dispatch。
    """
    def thunk(dispatch, get_state):
        timer = threading.Timer(delay, lambda: dispatch(incremented_by_amount(amount)))
        timer.start()
        return timer
    return thunk
