from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from apps.support.video.player.scheduler import TimerGroup

logger = logging.getLogger(__name__)


class ProgressRecorder(Protocol):
    def record_progress(self, lesson_id: int, watch_time: int, completed: bool = True) -> Any:
        ...


class ProgressTracker:
    """
    Samples the controller's session on a fixed interval and reports
    completion once per session when watched fraction >= threshold.

    The upsert behind record_progress is idempotent, so a retryable failure
    clears the local flag and the next sample tries again, up to
    max_attempts reports per session. Terminal errors (AccessDenied,
    AuthRequired, ...) are not retried.
    """

    def __init__(
        self,
        controller,
        *,
        recorder: ProgressRecorder,
        timers: TimerGroup,
        threshold: float = 0.90,
        interval_seconds: float = 1.0,
        on_complete: Optional[Callable[[int], Any]] = None,
        max_attempts: int = 3,
    ):
        self._controller = controller
        self._recorder = recorder
        self._timers = timers
        self._threshold = float(threshold)
        self._interval = float(interval_seconds)
        self._on_complete = on_complete
        self._max_attempts = max(1, int(max_attempts))

        self.completed = False
        self.recorded = False
        self.attempts = 0
        self._stopped = False
        self._handle = None

    @property
    def lesson_id(self) -> int:
        return self._controller.lesson_id

    def start(self) -> None:
        if self._stopped or self._handle is not None:
            return
        self._handle = self._timers.every(self._interval, self.sample)

    def stop(self) -> None:
        self._stopped = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def sample(self) -> None:
        if self._stopped or self.completed:
            return
        session = self._controller.session
        if session.duration <= 0:
            return
        if session.current_time / session.duration >= self._threshold:
            self._record()

    def mark_complete(self) -> bool:
        """Manual completion, independent of the threshold."""
        if self._stopped or self.completed:
            return False
        self._record()
        return True

    def _record(self) -> None:
        self.completed = True
        self.attempts += 1
        lesson_id = self.lesson_id
        watch_time = int(self._controller.session.current_time)
        logger.info("lesson completion lesson_id=%s watch_time=%s", lesson_id, watch_time)
        self._timers.blocking(
            lambda: self._recorder.record_progress(lesson_id, watch_time, True),
            self._on_recorded,
            self._on_failed,
        )

    def _on_recorded(self, result: Any) -> None:
        self.recorded = True
        if self._on_complete is not None:
            self._on_complete(self.lesson_id)

    def _on_failed(self, exc: BaseException) -> None:
        if getattr(exc, "retryable", False) and self.attempts < self._max_attempts:
            logger.warning(
                "completion report failed lesson_id=%s attempt=%s err=%s",
                self.lesson_id, self.attempts, exc,
            )
            self.completed = False
            return
        # completed stays set: no further reports this session
        logger.error(
            "completion report abandoned lesson_id=%s attempts=%s err=%s",
            self.lesson_id, self.attempts, exc,
        )
