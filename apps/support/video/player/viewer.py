# PATH: apps/support/video/player/viewer.py
#
# Composition root of the protected lesson page.
#
# mount()          install the clipboard guard
# select_lesson()  tear the current lesson session down, build a new one
# unmount()        tear down + uninstall the guard

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Optional

from apps.support.video.player.clipboard import Clipboard, ClipboardGuard
from apps.support.video.player.config import Config
from apps.support.video.player.controller import EmbedFactory, PlaybackController
from apps.support.video.player.notifications import LoggingNotifier, Notifier
from apps.support.video.player.overlay import (
    PlayerElement,
    PointerKind,
    PointerResult,
    ProtectionOverlaySynchronizer,
)
from apps.support.video.player.progress import ProgressTracker
from apps.support.video.player.scheduler import BaseScheduler, TimerGroup
from apps.support.video.player.watermark import WatermarkAnimator, watermark_label

logger = logging.getLogger(__name__)


@dataclass
class LessonSession:
    lesson_id: int
    course_id: int
    controller: PlaybackController
    tracker: ProgressTracker
    overlay: Optional[ProtectionOverlaySynchronizer]
    watermark: Optional[WatermarkAnimator]
    timers: TimerGroup

    def teardown(self) -> None:
        self.tracker.stop()
        if self.overlay is not None:
            self.overlay.stop()
        if self.watermark is not None:
            self.watermark.stop()
        self.timers.cancel_all()
        self.controller.teardown()


class ProtectedLessonView:
    def __init__(
        self,
        *,
        api,
        scheduler: BaseScheduler,
        embed_factory: EmbedFactory,
        element: PlayerElement,
        clipboard: Clipboard,
        viewer_name: str,
        viewer_id: Any,
        cfg: Optional[Config] = None,
        notifier: Optional[Notifier] = None,
        custom_overlay: bool = True,
        on_auth_required: Optional[Callable[[], Any]] = None,
        on_complete: Optional[Callable[[int], Any]] = None,
        on_copy_attempt: Optional[Callable[[Optional[int], str], Any]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.cfg = cfg or Config()
        self._api = api
        self._scheduler = scheduler
        self._embed_factory = embed_factory
        self._element = element
        self._notifier = notifier or LoggingNotifier()
        self._custom_overlay = bool(custom_overlay)
        self._on_auth_required = on_auth_required
        self._on_complete = on_complete
        self._on_copy_attempt = on_copy_attempt
        self._rng = rng

        self.watermark_label = watermark_label(viewer_name, viewer_id)
        self.guard = ClipboardGuard(
            clipboard,
            inert_text=self._inert_text,
            hosts=self.cfg.VIDEO_HOSTS,
            notifier=self._notifier,
            on_copy_attempt=self._copy_attempted,
        )

        self.current: Optional[LessonSession] = None
        self._mounted = False

    def _inert_text(self) -> str:
        lesson_id = self.current.lesson_id if self.current is not None else ""
        return self.cfg.inert_url(lesson_id)

    def _copy_attempted(self, attempted: str) -> None:
        lesson_id = self.current.lesson_id if self.current is not None else None
        logger.warning("copy attempt lesson_id=%s", lesson_id)
        if self._on_copy_attempt is not None:
            self._on_copy_attempt(lesson_id, attempted)

    # --------------------------------------------------
    # lifecycle
    # --------------------------------------------------

    def mount(self) -> None:
        if self._mounted:
            return
        self.guard.install()
        self._mounted = True

    def unmount(self) -> None:
        self._teardown_current()
        self.guard.uninstall()
        self._mounted = False

    def __enter__(self) -> "ProtectedLessonView":
        self.mount()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    def _teardown_current(self) -> None:
        if self.current is None:
            return
        logger.debug("lesson session teardown lesson_id=%s", self.current.lesson_id)
        self.current.teardown()
        self.current = None

    def select_lesson(self, lesson_id: int, course_id: int) -> LessonSession:
        # old session first: no timer / listener of it may survive the switch
        self._teardown_current()

        timers = TimerGroup(self._scheduler)
        controller = PlaybackController(
            lesson_id=lesson_id,
            course_id=course_id,
            api=self._api,
            embed_factory=self._embed_factory,
            scheduler=self._scheduler,
            cfg=self.cfg,
            custom_overlay=self._custom_overlay,
            on_auth_required=self._on_auth_required,
        )
        tracker = ProgressTracker(
            controller,
            recorder=self._api,
            timers=timers,
            threshold=self.cfg.COMPLETION_THRESHOLD,
            interval_seconds=self.cfg.PROGRESS_SAMPLE_INTERVAL_SECONDS,
            on_complete=self._on_complete,
            max_attempts=self.cfg.RETRY_MAX_ATTEMPTS,
        )

        overlay = None
        watermark = None
        if self._custom_overlay:
            overlay = ProtectionOverlaySynchronizer(
                self._element,
                timers=timers,
                on_toggle=controller.toggle,
                write_inert=self.guard.write_inert,
                notifier=self._notifier,
                on_activity=controller.user_activity,
                poll_seconds=self.cfg.OVERLAY_POLL_SECONDS,
                debounce_seconds=self.cfg.OVERLAY_DEBOUNCE_SECONDS,
            )
            watermark = WatermarkAnimator(
                lambda: overlay.rect,
                timers=timers,
                label=self.watermark_label,
                width=self.cfg.WATERMARK_WIDTH,
                height=self.cfg.WATERMARK_HEIGHT,
                inset=self.cfg.WATERMARK_INSET,
                interval_seconds=self.cfg.WATERMARK_INTERVAL_SECONDS,
                rng=self._rng,
            )

        self.current = LessonSession(
            lesson_id=int(lesson_id),
            course_id=int(course_id),
            controller=controller,
            tracker=tracker,
            overlay=overlay,
            watermark=watermark,
            timers=timers,
        )

        logger.info("lesson session start lesson_id=%s course_id=%s", lesson_id, course_id)
        controller.start()
        tracker.start()
        if overlay is not None:
            overlay.start()
        if watermark is not None:
            watermark.start()
        return self.current

    # --------------------------------------------------
    # delegation
    # --------------------------------------------------

    def retry(self) -> bool:
        if self.current is None:
            return False
        return self.current.controller.retry()

    def mark_complete(self) -> bool:
        if self.current is None:
            return False
        return self.current.tracker.mark_complete()

    def handle_pointer(self, kind: PointerKind, x: float, y: float) -> Optional[PointerResult]:
        if self.current is None or self.current.overlay is None:
            return None
        return self.current.overlay.handle_pointer(kind, x, y)

    def notify_resize(self) -> None:
        if self.current is not None and self.current.overlay is not None:
            self.current.overlay.notify_resize()

    def notify_mutation(self) -> None:
        if self.current is not None and self.current.overlay is not None:
            self.current.overlay.notify_mutation()

    def notify_window_resize(self) -> None:
        if self.current is not None and self.current.overlay is not None:
            self.current.overlay.notify_window_resize()

    def handle_copy(self, selection: str) -> bool:
        return self.guard.handle_copy(selection)

    def handle_key(self, key: str, *, ctrl: bool = False, meta: bool = False, selection: str = "") -> bool:
        return self.guard.handle_key(key, ctrl=ctrl, meta=meta, selection=selection)
