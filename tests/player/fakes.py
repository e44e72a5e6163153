from __future__ import annotations

import heapq
import itertools
import json
from typing import Any, Dict, List, Optional

from apps.support.video.player.http_client import AccessToken
from apps.support.video.player.overlay import Rect
from apps.support.video.player.scheduler import BaseScheduler, BlockingCall

EMBED_ORIGIN = "https://www.youtube.com"


class ManualHandle:
    def __init__(self, when: float, callback, args):
        self.when = when
        self._callback = callback
        self._args = args
        self._cancelled = False
        self._fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def fired(self) -> bool:
        return self._fired

    def run(self) -> None:
        self._fired = True
        self._callback(*self._args)


class ManualScheduler(BaseScheduler):
    """Virtual clock; nothing runs until advance() is called."""

    def __init__(self, start: float = 1_700_000_000.0):
        self._now = float(start)
        self._queue: List[tuple] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay, callback, *args) -> ManualHandle:
        handle = ManualHandle(self._now + max(0.0, float(delay)), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def run_blocking(self, func, on_result, on_error) -> BlockingCall:
        call = BlockingCall(on_result, on_error)

        def _run():
            if call.cancelled():
                return
            try:
                result = func()
            except Exception as e:
                call.deliver(error=e)
                return
            call.deliver(result=result)

        self.call_later(0, _run)
        return call

    def advance(self, seconds: float = 0.0) -> None:
        target = self._now + float(seconds)
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self._now = max(self._now, when)
            handle.run()
        self._now = target

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled())


class FakeAPI:
    def __init__(self, scheduler: ManualScheduler, *, ttl: float = 300.0):
        self._scheduler = scheduler
        self.ttl = ttl
        self.issued: List[tuple] = []
        self.recorded: List[tuple] = []
        self.issue_errors: List[Exception] = []
        self.record_errors: List[Exception] = []

    def issue_token(self, lesson_id: int, course_id: int) -> AccessToken:
        self.issued.append((lesson_id, course_id))
        if self.issue_errors:
            raise self.issue_errors.pop(0)
        now = self._scheduler.now()
        return AccessToken(
            token=f"tok-{lesson_id}-{len(self.issued)}",
            lesson_id=lesson_id,
            course_id=course_id,
            video_id=f"vid{lesson_id}",
            issued_at=now,
            expires_at=now + self.ttl,
        )

    def record_progress(self, lesson_id: int, watch_time: int, completed: bool = True) -> Dict[str, Any]:
        self.recorded.append((lesson_id, watch_time, completed))
        if self.record_errors:
            raise self.record_errors.pop(0)
        return {"lessonId": lesson_id, "completed": completed, "watchTime": watch_time}


class FakeTransport:
    def __init__(self):
        self.messages: List[Dict[str, Any]] = []
        self.origins: List[str] = []

    def post_message(self, message: str, target_origin: str) -> None:
        self.messages.append(json.loads(message))
        self.origins.append(target_origin)

    def commands(self) -> List[str]:
        return [m["func"] for m in self.messages if m.get("event") == "command"]

    def handshakes(self) -> int:
        return sum(1 for m in self.messages if m.get("event") == "listening")


class FakeEmbedFactory:
    def __init__(self, fail: Optional[Exception] = None):
        self.created: List[tuple] = []
        self.transports: List[FakeTransport] = []
        self._fail = fail

    def __call__(self, video_id: str, params: Dict[str, Any]) -> FakeTransport:
        if self._fail is not None:
            raise self._fail
        transport = FakeTransport()
        self.created.append((video_id, params))
        self.transports.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.transports[-1]


class FakeElement:
    def __init__(self, rect: Optional[Rect] = None):
        self.rect = rect
        self.detached = False

    def bounding_rect(self) -> Optional[Rect]:
        if self.detached:
            raise RuntimeError("element detached")
        return self.rect


class FakeClipboard:
    def __init__(self):
        self.writes: List[str] = []

    def write_text(self, text: str) -> None:
        self.writes.append(text)


class RecordingNotifier:
    def __init__(self):
        self.notices: List[tuple] = []

    def notify(self, title: str, message: str) -> None:
        self.notices.append((title, message))
