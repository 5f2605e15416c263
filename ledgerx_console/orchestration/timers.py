"""Per-key cancelable display timers"""

import asyncio
from typing import Callable, Dict, Hashable


class TimerRegistry:
    """
    One pending `loop.call_later` handle per key.

    Scheduling under a key that already has a pending timer cancels the old
    one first, so a superseded callback can never fire after a newer state
    has been entered.
    """

    def __init__(self) -> None:
        self._handles: Dict[Hashable, asyncio.TimerHandle] = {}

    def schedule(self, key: Hashable, delay: float, callback: Callable[[], None]) -> None:
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._handles[key] = loop.call_later(delay, self._fire, key, callback)

    def _fire(self, key: Hashable, callback: Callable[[], None]) -> None:
        self._handles.pop(key, None)
        callback()

    def cancel(self, key: Hashable) -> bool:
        """Cancel the pending timer under `key`; False if there was none"""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._handles):
            self.cancel(key)

    def pending(self, key: Hashable) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)
