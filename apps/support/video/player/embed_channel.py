# PATH: apps/support/video/player/embed_channel.py
#
# Message-passing adapter around the embedded player's command protocol.
#
# outbound : {"event": "command", "func": <name>, "args": [...]}
# inbound  : onReady / infoDelivery / video-progress / onStateChange / onError
#            plus bare numeric payloads (current time, legacy)
#
# - commands are queued until the embed reports ready, then flushed in order
# - "listening" handshake is re-sent once if ready has not arrived in time
# - inbound messages from origins outside the allowlist are dropped silently

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence
from urllib.parse import urlencode

from apps.support.video.player.scheduler import TimerGroup

logger = logging.getLogger(__name__)


ALLOWED_COMMANDS = frozenset({
    "playVideo",
    "pauseVideo",
    "seekTo",
    "setVolume",
    "setPlaybackRate",
    "mute",
    "unMute",
})


class PlayerState(IntEnum):
    UNSTARTED = -1
    ENDED = 0
    PLAYING = 1
    PAUSED = 2
    BUFFERING = 3
    CUED = 5


@dataclass(frozen=True)
class EmbedEvent:
    kind: str  # "ready" | "progress" | "state" | "error"
    current_time: Optional[float] = None
    duration: Optional[float] = None
    state: Optional[PlayerState] = None
    error_code: Optional[int] = None


class EmbedTransport(Protocol):
    def post_message(self, message: str, target_origin: str) -> None:
        ...


def build_embed_url(base_url: str, video_id: str, params: Dict[str, Any]) -> str:
    return f"{base_url.rstrip('/')}/{video_id}?{urlencode(params)}"


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _player_state(value: Any) -> Optional[PlayerState]:
    num = _number(value)
    if num is None:
        return None
    try:
        return PlayerState(int(num))
    except ValueError:
        return None


def parse_event(data: Any) -> Optional[EmbedEvent]:
    """Inbound payload -> EmbedEvent; None for anything unrecognised."""
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return None

    # legacy: bare current time
    if not isinstance(data, dict):
        num = _number(data)
        if num is None:
            return None
        return EmbedEvent(kind="progress", current_time=num)

    event = data.get("event")
    info = data.get("info")

    if event in ("onReady", "ready"):
        src = info if isinstance(info, dict) else data
        return EmbedEvent(kind="ready", duration=_number(src.get("duration")))

    if event in ("infoDelivery", "video-progress"):
        src = info if isinstance(info, dict) else data
        return EmbedEvent(
            kind="progress",
            current_time=_number(src.get("currentTime")),
            duration=_number(src.get("duration")),
            state=_player_state(src.get("playerState")),
        )

    if event == "onStateChange":
        state = _player_state(info if not isinstance(info, dict) else info.get("playerState"))
        if state is None:
            return None
        return EmbedEvent(kind="state", state=state)

    if event == "onError":
        code = _number(info if not isinstance(info, dict) else info.get("code"))
        return EmbedEvent(kind="error", error_code=int(code) if code is not None else None)

    return None


class EmbedCommandChannel:
    def __init__(
        self,
        transport: EmbedTransport,
        *,
        timers: TimerGroup,
        target_origin: str,
        allowed_origins: Iterable[str],
        handshake_retry_seconds: float = 0.5,
    ):
        self._transport = transport
        self._timers = timers
        self._target_origin = target_origin
        self._allowed_origins = frozenset(o.rstrip("/") for o in allowed_origins)
        self._handshake_retry_seconds = float(handshake_retry_seconds)

        self._id = uuid.uuid4().hex
        self._queue: List[Dict[str, Any]] = []
        self._handlers: List[Callable[[EmbedEvent], Any]] = []
        self._ready = False
        self._closed = False
        self._handshake_retry = None

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_commands(self) -> int:
        return len(self._queue)

    # --------------------------------------------------
    # outbound
    # --------------------------------------------------

    def open(self) -> None:
        if self._closed:
            return
        self._post({"event": "listening", "id": self._id})
        self._handshake_retry = self._timers.later(
            self._handshake_retry_seconds,
            self._retry_handshake,
        )

    def _retry_handshake(self) -> None:
        self._handshake_retry = None
        if self._closed or self._ready:
            return
        logger.debug("embed handshake retry id=%s", self._id)
        self._post({"event": "listening", "id": self._id})

    def send(self, command: str, args: Sequence[Any] = ()) -> None:
        if command not in ALLOWED_COMMANDS:
            raise ValueError(f"unsupported embed command: {command}")
        if self._closed:
            return

        message = {"event": "command", "func": command, "args": list(args)}
        if not self._ready:
            self._queue.append(message)
            return
        self._post(message)

    def _post(self, message: Dict[str, Any]) -> None:
        self._transport.post_message(json.dumps(message), self._target_origin)

    # --------------------------------------------------
    # inbound
    # --------------------------------------------------

    def on_event(self, handler: Callable[[EmbedEvent], Any]) -> Callable[[], None]:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    def receive(self, data: Any, origin: str) -> Optional[EmbedEvent]:
        if self._closed:
            return None

        if (origin or "").rstrip("/") not in self._allowed_origins:
            logger.debug("embed message dropped origin=%s", origin)
            return None

        event = parse_event(data)
        if event is None:
            return None

        if event.kind == "ready" and not self._ready:
            self._ready = True
            if self._handshake_retry is not None:
                self._handshake_retry.cancel()
                self._handshake_retry = None
            queued, self._queue = self._queue, []
            for message in queued:
                self._post(message)

        for handler in list(self._handlers):
            handler(event)
        return event

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue = []
        self._handlers = []
        if self._handshake_retry is not None:
            self._handshake_retry.cancel()
            self._handshake_retry = None
