# PATH: apps/support/video/player/scheduler.py
#
# PURPOSE:
# - every player component runs on one cooperative event loop
# - timers are loop handles, blocking I/O runs in the loop executor and its
#   result is delivered back on the loop
#
# DESIGN:
# - BaseScheduler only needs now() / call_later() / run_blocking()
# - call_every() is derived (re-arms before invoking the callback)
# - TimerGroup owns every handle of one viewing session; cancel_all() is the
#   single teardown point

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class Handle(Protocol):
    def cancel(self) -> None:
        ...


class RepeatingTimer:
    def __init__(self, scheduler: "BaseScheduler", interval: float, callback: Callable, args: tuple):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._scheduler = scheduler
        self._interval = float(interval)
        self._callback = callback
        self._args = args
        self._cancelled = False
        self._handle = scheduler.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._scheduler.call_later(self._interval, self._fire)
        self._callback(*self._args)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def cancelled(self) -> bool:
        return self._cancelled


class BlockingCall:
    """
    Handle for run_blocking(). cancel() drops the result; the underlying
    call itself is not interrupted.
    """

    def __init__(self, on_result: Callable[[Any], Any], on_error: Callable[[BaseException], Any]):
        self._on_result = on_result
        self._on_error = on_error
        self._cancelled = False
        self._delivered = False

    def deliver(self, result: Any = None, error: Optional[BaseException] = None) -> None:
        if self._cancelled or self._delivered:
            return
        self._delivered = True
        if error is not None:
            self._on_error(error)
        else:
            self._on_result(result)

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def fired(self) -> bool:
        return self._delivered


class BaseScheduler:
    def now(self) -> float:
        """Wall clock, epoch seconds (token expiry is wall-clock based)."""
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callable, *args) -> Handle:
        raise NotImplementedError

    def run_blocking(
        self,
        func: Callable[[], Any],
        on_result: Callable[[Any], Any],
        on_error: Callable[[BaseException], Any],
    ) -> BlockingCall:
        raise NotImplementedError

    def call_every(self, interval: float, callback: Callable, *args) -> RepeatingTimer:
        return RepeatingTimer(self, interval, callback, args)


class LoopTimer:
    """asyncio.TimerHandle plus a fired flag, so TimerGroup can prune it."""

    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, callback: Callable, args: tuple):
        self._fired = False
        self._handle = loop.call_later(delay, self._run, callback, args)

    def _run(self, callback: Callable, args: tuple) -> None:
        self._fired = True
        callback(*args)

    def cancel(self) -> None:
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._handle.cancelled()

    def fired(self) -> bool:
        return self._fired

    def when(self) -> float:
        return self._handle.when()


class AsyncioScheduler(BaseScheduler):
    """
    Production scheduler. Build it inside a running loop, or pass the loop
    explicitly.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        # get_running_loop() raises outside a loop instead of creating one
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    def now(self) -> float:
        return time.time()

    def call_later(self, delay: float, callback: Callable, *args) -> LoopTimer:
        return LoopTimer(self._loop, max(0.0, float(delay)), callback, args)

    def run_blocking(self, func, on_result, on_error) -> BlockingCall:
        call = BlockingCall(on_result, on_error)
        fut = self._loop.run_in_executor(None, func)

        def _done(f: asyncio.Future) -> None:
            if f.cancelled():
                return
            exc = f.exception()
            if exc is not None:
                call.deliver(error=exc)
            else:
                call.deliver(result=f.result())

        # done callbacks run on the loop thread
        fut.add_done_callback(_done)
        return call


class TimerGroup:
    """All timers / pending calls of one session."""

    def __init__(self, scheduler: BaseScheduler):
        self.scheduler = scheduler
        self._handles: List[Any] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _track(self, handle):
        self._handles.append(handle)
        # drop finished one-shot handles so long sessions don't accumulate them
        if len(self._handles) > 64:
            self._handles = [h for h in self._handles if not _is_done(h)]
        return handle

    def later(self, delay: float, callback: Callable, *args) -> Optional[Handle]:
        if self._closed:
            return None
        return self._track(self.scheduler.call_later(delay, callback, *args))

    def every(self, interval: float, callback: Callable, *args) -> Optional[RepeatingTimer]:
        if self._closed:
            return None
        return self._track(self.scheduler.call_every(interval, callback, *args))

    def blocking(self, func, on_result, on_error) -> Optional[BlockingCall]:
        if self._closed:
            return None
        return self._track(self.scheduler.run_blocking(func, on_result, on_error))

    def active_count(self) -> int:
        return sum(1 for h in self._handles if not _is_done(h))

    def cancel_all(self) -> None:
        self._closed = True
        handles, self._handles = self._handles, []
        for h in handles:
            h.cancel()
        logger.debug("timer group closed handles=%s", len(handles))


def _is_done(handle) -> bool:
    cancelled = getattr(handle, "cancelled", None)
    if callable(cancelled) and cancelled():
        return True
    fired = getattr(handle, "fired", None)
    if callable(fired) and fired():
        return True
    return False
