# PATH: apps/support/video/player/overlay.py
#
# Transparent layer kept on top of the player footprint.
#
# - resize / mutation / window-resize notifications are coalesced into one
#   deferred resync; a fallback poll resyncs directly
# - hot zones are derived from the synced rectangle with fixed fractions
# - best-effort: a failed measurement skips the frame

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol

from apps.support.video.player.notifications import (
    COPY_BLOCKED_MESSAGE,
    COPY_BLOCKED_TITLE,
    PROTECTED_MESSAGE,
    PROTECTED_TITLE,
    LoggingNotifier,
    Notifier,
)
from apps.support.video.player.scheduler import TimerGroup

logger = logging.getLogger(__name__)

BOTTOM_BAR_FRACTION = 0.15
RIGHT_CLUSTER_FRACTION = 0.12
TOP_MENU_HEIGHT_FRACTION = 0.15
TOP_MENU_WIDTH_FRACTION = 0.25


# ========================================================
# Geometry
# ========================================================

@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.right and self.y <= py < self.bottom


class ZoneKind(str, Enum):
    BOTTOM_CONTROL_BAR = "BottomControlBar"
    RIGHT_CONTROL_CLUSTER = "RightControlCluster"
    TOP_RIGHT_MENU = "TopRightMenu"


@dataclass(frozen=True)
class ProtectionZone:
    x: float
    y: float
    width: float
    height: float
    kind: ZoneKind

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height


def derive_zones(rect: Rect) -> List[ProtectionZone]:
    bottom_h = rect.height * BOTTOM_BAR_FRACTION
    right_w = rect.width * RIGHT_CLUSTER_FRACTION
    top_h = rect.height * TOP_MENU_HEIGHT_FRACTION
    top_w = rect.width * TOP_MENU_WIDTH_FRACTION

    return [
        ProtectionZone(rect.x, rect.bottom - bottom_h, rect.width, bottom_h, ZoneKind.BOTTOM_CONTROL_BAR),
        ProtectionZone(rect.right - right_w, rect.y, right_w, rect.height - bottom_h, ZoneKind.RIGHT_CONTROL_CLUSTER),
        ProtectionZone(rect.right - top_w, rect.y, top_w, top_h, ZoneKind.TOP_RIGHT_MENU),
    ]


# ========================================================
# Pointer handling
# ========================================================

class PointerKind(str, Enum):
    CLICK = "click"
    DOUBLE_CLICK = "dblclick"
    CONTEXT_MENU = "contextmenu"


@dataclass(frozen=True)
class PointerResult:
    canceled: bool
    action: str  # "blocked" | "toggle" | "notice" | "ignored"
    zone: Optional[ZoneKind] = None


class PlayerElement(Protocol):
    def bounding_rect(self) -> Optional[Rect]:
        ...


class ProtectionOverlaySynchronizer:
    def __init__(
        self,
        element: PlayerElement,
        *,
        timers: TimerGroup,
        on_toggle: Callable[[], Any],
        write_inert: Callable[[], Any],
        notifier: Optional[Notifier] = None,
        on_activity: Optional[Callable[[], Any]] = None,
        poll_seconds: float = 2.0,
        debounce_seconds: float = 0.1,
    ):
        self._element = element
        self._timers = timers
        self._on_toggle = on_toggle
        self._write_inert = write_inert
        self._notifier = notifier or LoggingNotifier()
        self._on_activity = on_activity
        self._poll_seconds = float(poll_seconds)
        self._debounce_seconds = float(debounce_seconds)

        self.rect: Optional[Rect] = None
        self.zones: List[ProtectionZone] = []
        self._pending = None
        self._poll = None
        self._stopped = False

    # --------------------------------------------------
    # sync
    # --------------------------------------------------

    def start(self) -> None:
        if self._stopped or self._poll is not None:
            return
        self.resync()
        self._poll = self._timers.every(self._poll_seconds, self.resync)

    def stop(self) -> None:
        self._stopped = True
        for handle in (self._pending, self._poll):
            if handle is not None:
                handle.cancel()
        self._pending = None
        self._poll = None

    def notify_resize(self) -> None:
        self._schedule_resync()

    def notify_mutation(self) -> None:
        self._schedule_resync()

    def notify_window_resize(self) -> None:
        self._schedule_resync()

    def _schedule_resync(self) -> None:
        if self._stopped or self._pending is not None:
            return
        self._pending = self._timers.later(self._debounce_seconds, self._deferred_resync)

    def _deferred_resync(self) -> None:
        self._pending = None
        self.resync()

    def resync(self) -> bool:
        """True when the overlay rectangle changed."""
        if self._stopped:
            return False
        try:
            rect = self._element.bounding_rect()
        except Exception as e:
            # detached element / layout not ready
            logger.debug("overlay measure skipped err=%s", e)
            return False
        if rect is None or rect == self.rect:
            return False

        self.rect = rect
        self.zones = derive_zones(rect)
        return True

    def zone_at(self, x: float, y: float) -> Optional[ProtectionZone]:
        for zone in self.zones:
            if zone.contains(x, y):
                return zone
        return None

    # --------------------------------------------------
    # pointer
    # --------------------------------------------------

    def handle_pointer(self, kind: PointerKind, x: float, y: float) -> PointerResult:
        kind = PointerKind(kind)
        if self._on_activity is not None:
            self._on_activity()

        zone = self.zone_at(x, y)
        if zone is not None:
            self._block_copy(zone.kind, kind)
            return PointerResult(canceled=True, action="blocked", zone=zone.kind)

        if kind == PointerKind.CLICK:
            self._on_toggle()
            return PointerResult(canceled=False, action="toggle")

        if kind == PointerKind.CONTEXT_MENU:
            self._notifier.notify(PROTECTED_TITLE, PROTECTED_MESSAGE)
            return PointerResult(canceled=True, action="notice")

        return PointerResult(canceled=False, action="ignored")

    def _block_copy(self, zone: ZoneKind, kind: PointerKind) -> None:
        logger.info("COPY_ATTEMPT_BLOCKED source=overlay zone=%s pointer=%s", zone.value, kind.value)
        try:
            self._write_inert()
        except Exception as e:
            logger.debug("inert clipboard write failed err=%s", e)
        self._notifier.notify(COPY_BLOCKED_TITLE, COPY_BLOCKED_MESSAGE)
