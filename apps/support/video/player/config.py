from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple


def _float(name: str, default: str) -> float:
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return float(default)


def _int(name: str, default: str) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return int(default)


def _list(name: str, default: str) -> Tuple[str, ...]:
    raw = os.environ.get(name, default) or ""
    return tuple(v.strip() for v in raw.split(",") if v.strip())


@dataclass(frozen=True)
class Config:
    # API
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    HTTP_TIMEOUT_SECONDS: float = 10.0
    RETRY_MAX_ATTEMPTS: int = 3
    BACKOFF_BASE_SECONDS: float = 0.5
    BACKOFF_CAP_SECONDS: float = 4.0

    # Access token
    TOKEN_REFRESH_THRESHOLD_SECONDS: float = 60.0
    TOKEN_CHECK_INTERVAL_SECONDS: float = 30.0

    # Progress
    PROGRESS_SAMPLE_INTERVAL_SECONDS: float = 1.0
    COMPLETION_THRESHOLD: float = 0.90

    # Controls
    CONTROLS_HIDE_SECONDS: float = 10.0
    PLAYBACK_RATE_MIN: float = 0.25
    PLAYBACK_RATE_MAX: float = 2.0

    # Embed
    EMBED_BASE_URL: str = "https://www.youtube-nocookie.com/embed"
    EMBED_TARGET_ORIGIN: str = "https://www.youtube-nocookie.com"
    ALLOWED_EMBED_ORIGINS: Tuple[str, ...] = (
        "https://www.youtube.com",
        "https://www.youtube-nocookie.com",
    )
    PAGE_ORIGIN: str = "http://localhost:5173"
    HANDSHAKE_RETRY_SECONDS: float = 0.5

    # Overlay
    OVERLAY_POLL_SECONDS: float = 2.0
    OVERLAY_DEBOUNCE_SECONDS: float = 0.1

    # Watermark
    WATERMARK_INTERVAL_SECONDS: float = 30.0
    WATERMARK_WIDTH: int = 200
    WATERMARK_HEIGHT: int = 40
    WATERMARK_INSET: int = 20

    # Clipboard
    VIDEO_HOSTS: Tuple[str, ...] = ("youtube.com", "youtu.be", "youtube-nocookie.com")
    INERT_URL_BASE: str = "https://learnova.com/protected-content"

    def inert_url(self, lesson_id) -> str:
        return f"{self.INERT_URL_BASE.rstrip('/')}/{lesson_id}"


def load_config() -> Config:
    return Config(
        API_BASE_URL=os.environ.get("PLAYER_API_BASE_URL", "http://localhost:8000/api/v1").rstrip("/"),
        HTTP_TIMEOUT_SECONDS=_float("PLAYER_HTTP_TIMEOUT", "10.0"),
        RETRY_MAX_ATTEMPTS=_int("PLAYER_RETRY_MAX", "3"),
        BACKOFF_BASE_SECONDS=_float("PLAYER_BACKOFF_BASE", "0.5"),
        BACKOFF_CAP_SECONDS=_float("PLAYER_BACKOFF_CAP", "4.0"),

        TOKEN_REFRESH_THRESHOLD_SECONDS=_float("PLAYER_TOKEN_REFRESH_THRESHOLD", "60"),
        TOKEN_CHECK_INTERVAL_SECONDS=_float("PLAYER_TOKEN_CHECK_INTERVAL", "30"),

        PROGRESS_SAMPLE_INTERVAL_SECONDS=_float("PLAYER_PROGRESS_SAMPLE_INTERVAL", "1.0"),
        COMPLETION_THRESHOLD=_float("PLAYER_COMPLETION_THRESHOLD", "0.90"),

        CONTROLS_HIDE_SECONDS=_float("PLAYER_CONTROLS_HIDE_SECONDS", "10"),
        PLAYBACK_RATE_MIN=_float("PLAYER_RATE_MIN", "0.25"),
        PLAYBACK_RATE_MAX=_float("PLAYER_RATE_MAX", "2.0"),

        EMBED_BASE_URL=os.environ.get("PLAYER_EMBED_BASE_URL", "https://www.youtube-nocookie.com/embed"),
        EMBED_TARGET_ORIGIN=os.environ.get("PLAYER_EMBED_TARGET_ORIGIN", "https://www.youtube-nocookie.com"),
        ALLOWED_EMBED_ORIGINS=_list(
            "PLAYER_ALLOWED_EMBED_ORIGINS",
            "https://www.youtube.com,https://www.youtube-nocookie.com",
        ),
        PAGE_ORIGIN=os.environ.get("PLAYER_PAGE_ORIGIN", "http://localhost:5173"),
        HANDSHAKE_RETRY_SECONDS=_float("PLAYER_HANDSHAKE_RETRY", "0.5"),

        OVERLAY_POLL_SECONDS=_float("PLAYER_OVERLAY_POLL", "2.0"),
        OVERLAY_DEBOUNCE_SECONDS=_float("PLAYER_OVERLAY_DEBOUNCE", "0.1"),

        WATERMARK_INTERVAL_SECONDS=_float("PLAYER_WATERMARK_INTERVAL", "30"),
        WATERMARK_WIDTH=_int("PLAYER_WATERMARK_WIDTH", "200"),
        WATERMARK_HEIGHT=_int("PLAYER_WATERMARK_HEIGHT", "40"),
        WATERMARK_INSET=_int("PLAYER_WATERMARK_INSET", "20"),

        VIDEO_HOSTS=_list("PLAYER_VIDEO_HOSTS", "youtube.com,youtu.be,youtube-nocookie.com"),
        INERT_URL_BASE=os.environ.get("PLAYER_INERT_URL_BASE", "https://learnova.com/protected-content"),
    )
