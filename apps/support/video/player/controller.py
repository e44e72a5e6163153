# PATH: apps/support/video/player/controller.py
#
# PURPOSE:
# - one viewing session of one lesson: token, embed, playback state
# - the only writer of PlaybackSession
#
# CONTRACT:
# - inbound embed events are authoritative for player state
# - commands are accepted in Ready / Playing / Paused / Buffering only
# - triggers without a transition row for the current state are ignored
# - teardown() cancels every timer of the session and detaches listeners

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from apps.support.video import errors
from apps.support.video.player.config import Config
from apps.support.video.player.embed_channel import (
    EmbedCommandChannel,
    EmbedEvent,
    EmbedTransport,
    PlayerState,
)
from apps.support.video.player.http_client import AccessToken
from apps.support.video.player.scheduler import BaseScheduler, TimerGroup

logger = logging.getLogger(__name__)


# ========================================================
# State machine
# ========================================================

class PlaybackState(str, Enum):
    UNINITIALIZED = "Uninitialized"
    LOADING = "Loading"
    READY = "Ready"
    PLAYING = "Playing"
    PAUSED = "Paused"
    BUFFERING = "Buffering"
    ENDED = "Ended"
    ERROR = "Error"


class Trigger(str, Enum):
    EMBED_CREATED = "embed_created"
    READY = "ready"
    PLAY = "play"
    PAUSE = "pause"
    BUFFERING = "buffering"
    RESUMED = "resumed"
    PAUSED = "paused"
    ENDED = "ended"


_S = PlaybackState

TRANSITIONS: Dict[tuple, PlaybackState] = {
    (_S.UNINITIALIZED, Trigger.EMBED_CREATED): _S.LOADING,
    (_S.LOADING, Trigger.READY): _S.READY,

    (_S.READY, Trigger.PLAY): _S.PLAYING,
    (_S.PAUSED, Trigger.PLAY): _S.PLAYING,
    (_S.PLAYING, Trigger.PAUSE): _S.PAUSED,

    (_S.PLAYING, Trigger.BUFFERING): _S.BUFFERING,
    (_S.PAUSED, Trigger.BUFFERING): _S.BUFFERING,

    # inbound "playing"
    (_S.BUFFERING, Trigger.RESUMED): _S.PLAYING,
    (_S.READY, Trigger.RESUMED): _S.PLAYING,
    (_S.PAUSED, Trigger.RESUMED): _S.PLAYING,

    # inbound "paused"
    (_S.PLAYING, Trigger.PAUSED): _S.PAUSED,
    (_S.BUFFERING, Trigger.PAUSED): _S.PAUSED,

    (_S.PLAYING, Trigger.ENDED): _S.ENDED,
    (_S.BUFFERING, Trigger.ENDED): _S.ENDED,
}

_INBOUND_TRIGGERS = {
    PlayerState.PLAYING: Trigger.RESUMED,
    PlayerState.PAUSED: Trigger.PAUSED,
    PlayerState.BUFFERING: Trigger.BUFFERING,
    PlayerState.ENDED: Trigger.ENDED,
}

COMMAND_STATES = frozenset({_S.READY, _S.PLAYING, _S.PAUSED, _S.BUFFERING})


@dataclass
class PlaybackSession:
    lesson_id: int
    course_id: int
    media_ref: str = ""
    state: PlaybackState = PlaybackState.UNINITIALIZED
    current_time: float = 0.0
    duration: float = 0.0  # 0 = unknown
    playback_rate: float = 1.0
    volume: int = 100
    muted: bool = False
    error: Optional[errors.VideoAccessError] = None

    @property
    def watch_fraction(self) -> float:
        if self.duration <= 0:
            return 0.0
        return self.current_time / self.duration


class TokenAPI(Protocol):
    def issue_token(self, lesson_id: int, course_id: int) -> AccessToken:
        ...


EmbedFactory = Callable[[str, Dict[str, Any]], EmbedTransport]
StateListener = Callable[[PlaybackState, PlaybackState], Any]


class PlaybackController:
    def __init__(
        self,
        *,
        lesson_id: int,
        course_id: int,
        api: TokenAPI,
        embed_factory: EmbedFactory,
        scheduler: BaseScheduler,
        cfg: Optional[Config] = None,
        custom_overlay: bool = True,
        on_auth_required: Optional[Callable[[], Any]] = None,
    ):
        self.cfg = cfg or Config()
        self.custom_overlay = bool(custom_overlay)

        self._api = api
        self._embed_factory = embed_factory
        self._scheduler = scheduler
        self._on_auth_required = on_auth_required
        self._listeners: List[StateListener] = []

        self.lesson_id = int(lesson_id)
        self.course_id = int(course_id)

        self._reset()
        self._closed = False

    def _reset(self) -> None:
        self.timers = TimerGroup(self._scheduler)
        self.session = PlaybackSession(lesson_id=self.lesson_id, course_id=self.course_id)
        self.token: Optional[AccessToken] = None
        self.channel: Optional[EmbedCommandChannel] = None
        self.controls_visible = True
        self._hide_handle = None
        self._refresh_in_flight = False

    # --------------------------------------------------
    # observers
    # --------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self.session.state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_state(self, new: PlaybackState) -> None:
        old = self.session.state
        if old == new:
            return
        self.session.state = new
        logger.debug("playback state lesson_id=%s %s -> %s", self.lesson_id, old.value, new.value)
        for listener in list(self._listeners):
            listener(old, new)

    def fire(self, trigger: Trigger) -> bool:
        new = TRANSITIONS.get((self.session.state, trigger))
        if new is None:
            logger.debug(
                "ignored trigger=%s state=%s lesson_id=%s",
                trigger.value,
                self.session.state.value,
                self.lesson_id,
            )
            return False
        self._set_state(new)
        return True

    def _fail(self, error: errors.VideoAccessError) -> None:
        logger.warning(
            "playback error lesson_id=%s code=%s message=%s",
            self.lesson_id,
            error.code,
            error.message,
        )
        self.session.error = error
        self._set_state(PlaybackState.ERROR)
        if isinstance(error, errors.AuthRequired) and self._on_auth_required is not None:
            self._on_auth_required()

    # --------------------------------------------------
    # session lifecycle
    # --------------------------------------------------

    def embed_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "enablejsapi": 1,
            "playsinline": 1,
            "rel": 0,
            "modestbranding": 1,
            "iv_load_policy": 3,
            "origin": self.cfg.PAGE_ORIGIN,
        }
        if self.custom_overlay:
            # embed chrome off, our controls + protection overlay on top
            params.update(controls=0, disablekb=1, fs=0)
        else:
            params.update(controls=1, disablekb=0, fs=1)
        return params

    def start(self) -> None:
        if self._closed or self.session.state != PlaybackState.UNINITIALIZED:
            return
        self.timers.blocking(
            lambda: self._api.issue_token(self.lesson_id, self.course_id),
            self._on_token,
            self._on_token_error,
        )

    def _on_token_error(self, exc: BaseException) -> None:
        if not isinstance(exc, errors.VideoAccessError):
            exc = errors.ServiceUnavailable(str(exc))
        self._fail(exc)

    def _on_token(self, token: AccessToken) -> None:
        self.token = token
        self.session.media_ref = token.video_id

        try:
            transport = self._embed_factory(token.video_id, self.embed_params())
        except Exception as e:
            self._fail(errors.EmbedLoadError(str(e)))
            return

        self.channel = EmbedCommandChannel(
            transport,
            timers=self.timers,
            target_origin=self.cfg.EMBED_TARGET_ORIGIN,
            allowed_origins=self.cfg.ALLOWED_EMBED_ORIGINS,
            handshake_retry_seconds=self.cfg.HANDSHAKE_RETRY_SECONDS,
        )
        self.channel.on_event(self.handle_event)
        self.fire(Trigger.EMBED_CREATED)
        self.channel.open()

        self.timers.every(self.cfg.TOKEN_CHECK_INTERVAL_SECONDS, self.check_token)
        self.user_activity()

    def retry(self) -> bool:
        """User "try again". Only meaningful in Error."""
        if self._closed or self.session.state != PlaybackState.ERROR:
            return False
        logger.info("playback retry lesson_id=%s", self.lesson_id)
        self._release()
        old = self.session.state
        self._reset()
        for listener in list(self._listeners):
            listener(old, self.session.state)
        self.start()
        return True

    def _release(self) -> None:
        self.timers.cancel_all()
        if self.channel is not None:
            self.channel.close()
        self.channel = None
        self.token = None

    def teardown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()
        self._listeners = []
        logger.debug("playback teardown lesson_id=%s", self.lesson_id)

    @property
    def closed(self) -> bool:
        return self._closed

    # --------------------------------------------------
    # inbound
    # --------------------------------------------------

    def handle_event(self, event: EmbedEvent) -> None:
        if self._closed:
            return

        if event.kind == "ready":
            if event.duration and event.duration > 0:
                self.session.duration = event.duration
            self.fire(Trigger.READY)
        elif event.kind == "progress":
            self._apply_progress(event)
            if event.state is not None:
                self._apply_player_state(event.state)
        elif event.kind == "state":
            self._apply_player_state(event.state)
        elif event.kind == "error":
            message = f"embed error code={event.error_code}"
            if self.session.state in (PlaybackState.UNINITIALIZED, PlaybackState.LOADING):
                self._fail(errors.EmbedLoadError(message))
            else:
                self._fail(errors.PlaybackError(message))

    def _apply_progress(self, event: EmbedEvent) -> None:
        if event.duration is not None and event.duration > 0:
            self.session.duration = event.duration
        if event.current_time is not None:
            self.session.current_time = self._clamp_time(event.current_time)

    def _apply_player_state(self, state: Optional[PlayerState]) -> None:
        trigger = _INBOUND_TRIGGERS.get(state)
        if trigger is not None:
            self.fire(trigger)

    def _clamp_time(self, seconds: float) -> float:
        t = max(0.0, float(seconds))
        if self.session.duration > 0:
            t = min(t, self.session.duration)
        return t

    # --------------------------------------------------
    # commands
    # --------------------------------------------------

    def _accepts_commands(self) -> bool:
        return (
            not self._closed
            and self.channel is not None
            and self.session.state in COMMAND_STATES
        )

    def play(self) -> bool:
        if not self._accepts_commands():
            return False
        self.channel.send("playVideo")
        self.fire(Trigger.PLAY)
        return True

    def pause(self) -> bool:
        if not self._accepts_commands():
            return False
        self.channel.send("pauseVideo")
        self.fire(Trigger.PAUSE)
        return True

    def toggle(self) -> bool:
        if self.session.state in (PlaybackState.PLAYING, PlaybackState.BUFFERING):
            return self.pause()
        return self.play()

    def seek(self, seconds: float) -> bool:
        if not self._accepts_commands():
            return False
        t = self._clamp_time(seconds)
        self.channel.send("seekTo", [t, True])
        self.session.current_time = t
        return True

    def set_rate(self, rate: float) -> bool:
        if not self._accepts_commands():
            return False
        r = min(max(float(rate), self.cfg.PLAYBACK_RATE_MIN), self.cfg.PLAYBACK_RATE_MAX)
        self.channel.send("setPlaybackRate", [r])
        self.session.playback_rate = r
        return True

    def set_volume(self, volume: float) -> bool:
        if not self._accepts_commands():
            return False
        v = int(min(max(float(volume), 0), 100))
        self.channel.send("setVolume", [v])
        self.session.volume = v
        if v == 0:
            self.session.muted = True
        elif self.session.muted:
            self.channel.send("unMute")
            self.session.muted = False
        return True

    def mute(self) -> bool:
        if not self._accepts_commands():
            return False
        self.channel.send("mute")
        self.session.muted = True
        return True

    def unmute(self) -> bool:
        if not self._accepts_commands():
            return False
        self.channel.send("unMute")
        self.session.muted = False
        return True

    # --------------------------------------------------
    # controls visibility
    # --------------------------------------------------

    def user_activity(self) -> None:
        if self._closed:
            return
        self.controls_visible = True
        if self._hide_handle is not None:
            self._hide_handle.cancel()
        self._hide_handle = self.timers.later(self.cfg.CONTROLS_HIDE_SECONDS, self._hide_controls)

    def _hide_controls(self) -> None:
        self._hide_handle = None
        self.controls_visible = False

    # --------------------------------------------------
    # token refresh
    # --------------------------------------------------

    def check_token(self) -> None:
        if self._closed or self.token is None or self._refresh_in_flight:
            return
        if self.session.state == PlaybackState.ERROR:
            return

        remaining = self.token.remaining(self._scheduler.now())
        if remaining > self.cfg.TOKEN_REFRESH_THRESHOLD_SECONDS:
            return

        self._refresh_in_flight = True
        logger.info("token refresh lesson_id=%s remaining=%.1fs", self.lesson_id, remaining)
        self.timers.blocking(
            lambda: self._api.issue_token(self.lesson_id, self.course_id),
            self._on_refreshed,
            self._on_refresh_failed,
        )

    def _on_refreshed(self, token: AccessToken) -> None:
        self._refresh_in_flight = False
        self.token = token

    def _on_refresh_failed(self, exc: BaseException) -> None:
        self._refresh_in_flight = False
        if self.token is not None and not self.token.is_expired(self._scheduler.now()):
            logger.warning(
                "token refresh failed, retry on next check lesson_id=%s err=%s",
                self.lesson_id,
                exc,
            )
            return
        if isinstance(exc, (errors.AuthRequired, errors.AccessDenied)):
            self._fail(exc)
        else:
            self._fail(errors.TokenExpired(f"token expired, refresh failed: {exc}"))
