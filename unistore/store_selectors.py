import time
from typing import Any, Callable, List, Optional, Tuple, overload

from .errors import SelectorError, UnistoreError
from .types import Input, Output, R, StateSelector, ResultSelector


@overload
def create_selector(selector: StateSelector[Input, Output], *, deep: bool = False, ttl: Optional[float] = None, maxsize: int = 128) -> StateSelector[Input, Output]:
    """單一選擇器重載"""
    ...


@overload
def create_selector(*selectors: StateSelector[Input, Any], result_fn: ResultSelector[R], deep: bool = False, ttl: Optional[float] = None, maxsize: int = 128) -> StateSelector[Input, R]:
    """組合多個選擇器重載"""
    ...


def create_selector(*selectors: Callable[[Any], Any], result_fn: Optional[Callable[..., Any]] = None, deep: bool = False, ttl: Optional[float] = None, maxsize: int = 128) -> Callable[[Any], Any]:
    """
    創建一個複合選擇器，支援記憶化、深淺比較與TTL控制

    輸入選擇器的結果預設以 `is` 比較：reducer 對未知 action 返回同一物件，
    因此沒有變化的狀態不會觸發 result_fn 重新計算。

    Args:
        *selectors: 多個輸入選擇器，這些函數會從 state 中提取對應的值
        result_fn: 處理輸出結果的函數，將多個選擇器的輸出進行處理
        deep: 是否進行深度比較（預設為 False）
        ttl: 快取有效時間（秒），若超過此時間則重新計算，預設為無限
        maxsize: 緩存的最大條目數，預設為128

    Returns:
        經過快取優化的 selector 函數，帶有 cache_info() 與 cache_clear()

    Raises:
        SelectorError: 輸入選擇器或 result_fn 拋出異常時
    """
    if not selectors:
        raise SelectorError("create_selector requires at least one input selector")

    # 如果沒有 result_fn 且只有一個選擇器，直接返回該選擇器
    if not result_fn and len(selectors) == 1:
        return selectors[0]

    if not result_fn:
        result_fn = lambda *args: args

    cache: List[Tuple[float, Tuple[Any, ...], Any]] = []
    hits = 0
    misses = 0

    def selector(state: Any) -> Any:
        """
        Args:
            state: 當前的狀態，可以是單一狀態或 Store.select 發出的 (old, new) 元組
        """
        nonlocal cache, hits, misses

        # 處理 state 為 (old, new) 的元組情況，僅使用新狀態
        if isinstance(state, tuple) and len(state) == 2:
            _, state = state

        inputs = tuple(_run(select, state) for select in selectors)
        now = time.monotonic()

        if ttl is not None:
            cache = [item for item in cache if now - item[0] <= ttl]

        for _, cached_inputs, cached_result in cache:
            if deep:
                matched = _safe_deep_equals(inputs, cached_inputs)
            else:
                matched = all(a is b for a, b in zip(inputs, cached_inputs))
            if matched:
                hits += 1
                return cached_result

        misses += 1
        result = _run(result_fn, *inputs)
        while len(cache) >= maxsize:
            cache.pop(0)
        cache.append((now, inputs, result))
        return result

    def cache_info() -> Tuple[int, int, int, int]:
        return (hits, misses, maxsize, len(cache))

    def cache_clear() -> None:
        nonlocal hits, misses
        cache.clear()
        hits = misses = 0

    selector.cache_info = cache_info  # type: ignore
    selector.cache_clear = cache_clear  # type: ignore

    return selector


def _run(fn: Callable[..., Any], *args: Any) -> Any:
    try:
        return fn(*args)
    except UnistoreError:
        raise
    except Exception as err:
        raise SelectorError(
            f"Selector raised {err.__class__.__name__}: {err}",
            getattr(fn, "__name__", repr(fn)),
        ) from err


def _safe_deep_equals(a: Any, b: Any) -> bool:
    """深度比較，無法比較時返回False"""
    if a is b:
        return True
    if type(a) != type(b):
        return False
    if isinstance(a, dict):
        if len(a) != len(b):
            return False
        return all(key in b and _safe_deep_equals(a[key], b[key]) for key in a)
    if isinstance(a, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(_safe_deep_equals(x, y) for x, y in zip(a, b))
    try:
        return bool(a == b)
    except Exception:
        return False
