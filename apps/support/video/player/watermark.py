from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from apps.support.video.player.overlay import Rect
from apps.support.video.player.scheduler import BaseScheduler, TimerGroup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatermarkState:
    x: float
    y: float
    last_moved_at: float
    width: float = 0.0
    height: float = 0.0


def watermark_label(name: str, user_id) -> str:
    return f"{name} • ID: {user_id}"


def _axis(origin: float, span: float, box: float, inset: float, rng: random.Random) -> float:
    low = origin + inset
    high = origin + span - inset - box
    if high < low:
        # area smaller than box + insets: pin to the inset corner, clamped inside
        return origin + max(0.0, min(inset, span - box))
    return rng.uniform(low, high)


class WatermarkAnimator:
    """
    Moves the identity watermark to a random spot inside the protected area
    every interval. No playback awareness.

    The box shrinks to the area when the area is smaller than width x height,
    so the watermark never extends past the protected area.
    """

    def __init__(
        self,
        bounds: Callable[[], Optional[Rect]],
        *,
        timers: TimerGroup,
        label: str,
        width: float = 200,
        height: float = 40,
        inset: float = 20,
        interval_seconds: float = 30.0,
        rng: Optional[random.Random] = None,
    ):
        self._bounds = bounds
        self._timers = timers
        self.label = label
        self.width = float(width)
        self.height = float(height)
        self.inset = float(inset)
        self._interval = float(interval_seconds)
        self._rng = rng or random.Random()

        self.state: Optional[WatermarkState] = None
        self._handle = None
        self._stopped = False

    @property
    def _scheduler(self) -> BaseScheduler:
        return self._timers.scheduler

    def start(self) -> None:
        if self._stopped or self._handle is not None:
            return
        self.move()
        self._handle = self._timers.every(self._interval, self.move)

    def stop(self) -> None:
        self._stopped = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def move(self) -> Optional[WatermarkState]:
        if self._stopped:
            return None
        try:
            area = self._bounds()
        except Exception as e:
            logger.debug("watermark bounds unavailable err=%s", e)
            return None
        if area is None:
            return None

        w = max(0.0, min(self.width, area.width))
        h = max(0.0, min(self.height, area.height))
        x = _axis(area.x, area.width, w, self.inset, self._rng)
        y = _axis(area.y, area.height, h, self.inset, self._rng)
        self.state = WatermarkState(x=x, y=y, last_moved_at=self._scheduler.now(), width=w, height=h)
        return self.state
