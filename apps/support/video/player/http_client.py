# PATH: apps/support/video/player/http_client.py
#
# PURPOSE:
# - player-side HTTP client for the video token / progress API
# - blocking; callers run it through Scheduler.run_blocking()
#
# ENDPOINTS:
# - POST /api/v1/video-token/
# - GET  /api/v1/video-token/?token=&lessonId=
# - POST /api/v1/progress/
# - GET  /api/v1/progress/?course_id=
#
# DESIGN:
# - timeout on every request
# - connection errors / timeouts / 5xx -> ServiceUnavailable, retried with
#   exponential backoff up to RETRY_MAX_ATTEMPTS
# - 4xx are mapped to the shared error taxonomy and never retried

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import requests

from apps.support.video import errors
from apps.support.video.player.config import Config

logger = logging.getLogger("video_player.http")


@dataclass(frozen=True)
class AccessToken:
    token: str
    lesson_id: int
    course_id: int
    video_id: str
    issued_at: float
    expires_at: float

    def remaining(self, now: float) -> float:
        return self.expires_at - now

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def parse_timestamp(value: str) -> float:
    """ISO-8601 (DRF style, optional trailing Z) -> epoch seconds."""
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).timestamp()


class VideoTokenAPIClient:
    def __init__(
        self,
        cfg: Optional[Config] = None,
        *,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        cfg = cfg or Config()
        base_url = base_url or cfg.API_BASE_URL
        if not base_url:
            raise ValueError("base_url is required")

        self._base_url = str(base_url).rstrip("/")
        self._timeout = float(timeout_seconds or cfg.HTTP_TIMEOUT_SECONDS)
        self._max_attempts = max(1, int(cfg.RETRY_MAX_ATTEMPTS))
        self._backoff_base = float(cfg.BACKOFF_BASE_SECONDS)
        self._backoff_cap = max(self._backoff_base, float(cfg.BACKOFF_CAP_SECONDS))
        self._sleep = sleep
        self._clock = clock

        self._headers = {"Content-Type": "application/json"}
        if access_token:
            self.set_access_token(access_token)

        self._session = session or requests.Session()

    def set_access_token(self, access_token: Optional[str]) -> None:
        if access_token:
            self._headers["Authorization"] = f"Bearer {access_token}"
        else:
            self._headers.pop("Authorization", None)

    def close(self) -> None:
        self._session.close()

    # --------------------------------------------------
    # Token
    # --------------------------------------------------

    def issue_token(self, lesson_id: int, course_id: int) -> AccessToken:
        data = self._request(
            "POST",
            "/video-token/",
            json={"lessonId": int(lesson_id), "courseId": int(course_id)},
        )
        return AccessToken(
            token=data["token"],
            lesson_id=int(lesson_id),
            course_id=int(course_id),
            video_id=str(data.get("videoId") or ""),
            issued_at=self._clock(),
            expires_at=parse_timestamp(data["expiresAt"]),
        )

    def validate_token(self, token: str, lesson_id: int) -> Dict[str, Any]:
        return self._request(
            "GET",
            "/video-token/",
            params={"token": token, "lessonId": int(lesson_id)},
        )

    # --------------------------------------------------
    # Progress
    # --------------------------------------------------

    def record_progress(self, lesson_id: int, watch_time: int, completed: bool = True) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/progress/",
            json={
                "lessonId": int(lesson_id),
                "watchTime": max(0, int(watch_time)),
                "completed": bool(completed),
            },
        )

    def list_progress(self, course_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", "/progress/", params={"course_id": int(course_id)})

    # --------------------------------------------------
    # internals
    # --------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self._base_url}{path}"
        backoff = self._backoff_base
        last_error: Optional[errors.VideoAccessError] = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                resp = self._session.request(
                    method,
                    url,
                    headers=self._headers,
                    timeout=self._timeout,
                    **kwargs,
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                last_error = errors.ServiceUnavailable(str(e))
            else:
                if resp.status_code < 400:
                    return resp.json() if resp.content else {}
                last_error = _error_from_response(resp)
                if not last_error.retryable:
                    raise last_error

            if attempt < self._max_attempts:
                logger.warning(
                    "request failed method=%s path=%s attempt=%s/%s err=%s",
                    method,
                    path,
                    attempt,
                    self._max_attempts,
                    last_error,
                )
                self._sleep(min(backoff, self._backoff_cap))
                backoff = min(backoff * 2, self._backoff_cap)

        raise last_error


def _error_from_response(resp: requests.Response) -> errors.VideoAccessError:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    detail = body.get("detail") or ""
    if not isinstance(detail, str):
        detail = str(detail)

    if resp.status_code >= 500:
        return errors.ServiceUnavailable(detail or f"HTTP {resp.status_code}")
    if resp.status_code == 401:
        return errors.AuthRequired(detail)
    if resp.status_code == 403:
        return errors.AccessDenied(detail)
    if resp.status_code == 404:
        return errors.NotFound(detail)

    code = body.get("error") or "BadRequest"
    return errors.error_for_code(str(code), detail)
