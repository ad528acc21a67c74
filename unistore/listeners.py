"""
訂閱者註冊表。

Store 每次提交新狀態後，依註冊順序通知一份快照中的訂閱者。
通知期間新增的訂閱者不在本輪快照內；本輪中在輪到之前被移除的
訂閱者會被跳過（調用前檢查是否仍然有效）。
"""
import itertools
from typing import Callable, Dict, Iterator, List, Tuple

from .types import Listener, Unsubscribe


class SubscriberRegistry:
    """
    有序的訂閱者集合。

    每次 add() 都是一筆獨立的註冊，即使傳入同一個回調兩次，
    也會得到兩個可分別移除的註冊。
    """

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._listeners: Dict[int, Listener] = {}

    def add(self, listener: Listener) -> Unsubscribe:
        """
        註冊一個訂閱者。

        Returns:
            移除該註冊的函數；重複調用不會出錯。
        """
        token = next(self._counter)
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def snapshot(self) -> List[Tuple[int, Listener]]:
        """返回目前有效註冊的有序副本。"""
        return list(self._listeners.items())

    def is_active(self, token: int) -> bool:
        return token in self._listeners

    def notify(self, invoke: Callable[[Listener], None]) -> int:
        """
        對一份快照逐一調用 invoke(listener)。

        調用前確認該註冊仍然有效；invoke 拋出的異常直接向上傳遞，
        本輪剩餘的訂閱者不再被調用。

        Returns:
            實際被調用的訂閱者數量
        """
        called = 0
        for token, listener in self.snapshot():
            if not self.is_active(token):
                continue
            invoke(listener)
            called += 1
        return called

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)

    def __iter__(self) -> Iterator[Listener]:
        return iter(list(self._listeners.values()))
