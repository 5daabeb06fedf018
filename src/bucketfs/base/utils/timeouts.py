"""
timeouts — ограничение времени одного синхронного вызова хранилища.

Вызов выполняется в отдельном потоке одноразового пула; вызывающий ждёт
future.result(timeout). При таймауте поток не прерывается (boto3 не умеет
отменять запрос), но результат игнорируется и вызывающий получает StoreTimeoutError.
Изменяющий вызов (put, copy, delete) при этом может всё же выполниться позже.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, TypeVar

from bucketfs.base.filestore.errors import StoreTimeoutError

T = TypeVar("T")


def call_with_timeout(fn: Callable[..., T], *args, timeout: float | None = None, **kwargs) -> T:
    """Вызывает fn(*args, **kwargs); при timeout=None — прямо в текущем потоке."""
    if timeout is None:
        return fn(*args, **kwargs)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="bucketfs-call")
    try:
        future = executor.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            # TimeoutError самого вызова (например, сокета) пробрасывается как есть
            if future.done():
                raise
            future.cancel()
            name = getattr(fn, "__name__", repr(fn))
            raise StoreTimeoutError(f"{name} exceeded timeout ({timeout:.3f}s)") from None
    finally:
        executor.shutdown(wait=False)
