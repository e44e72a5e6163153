# PATH: apps/support/video/errors.py
#
# Error taxonomy shared by the token API (server) and the player runtime
# (client). No Django import here: the player package uses it standalone.

from __future__ import annotations


class VideoAccessError(Exception):
    """
    Base error.

    code      : stable machine-readable name (also the API "error" field)
    retryable : transient failure, caller may retry with backoff
    """

    code = "VideoAccessError"
    retryable = False

    def __init__(self, message: str = "", *, code: str | None = None):
        self.message = message or self.code
        if code:
            self.code = code
        super().__init__(self.message)

    def __repr__(self):
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ========================================================
# Access (token issuance / validation)
# ========================================================

class AuthRequired(VideoAccessError):
    code = "AuthRequired"


class AccessDenied(VideoAccessError):
    code = "AccessDenied"


class NotFound(VideoAccessError):
    code = "NotFound"


class ServiceUnavailable(VideoAccessError):
    code = "ServiceUnavailable"
    retryable = True


class TokenExpired(VideoAccessError):
    code = "TokenExpired"


class BadSignature(VideoAccessError):
    code = "BadSignature"


class DomainMismatch(VideoAccessError):
    code = "DomainMismatch"


# ========================================================
# Playback
# ========================================================

class EmbedLoadError(VideoAccessError):
    code = "EmbedLoadError"


class PlaybackError(VideoAccessError):
    code = "PlaybackError"


# ========================================================
# Clipboard guard
# ========================================================

class ClipboardGuardConflict(RuntimeError):
    """Another guard already owns the clipboard object."""


# validation reason -> error type
REASON_ERRORS = {
    "Expired": TokenExpired,
    "BadSignature": BadSignature,
    "DomainMismatch": DomainMismatch,
}


def error_for_code(code: str, message: str = "") -> VideoAccessError:
    """Rebuild a typed error from an API "error" field."""
    for cls in (
        AuthRequired,
        AccessDenied,
        NotFound,
        ServiceUnavailable,
        TokenExpired,
        BadSignature,
        DomainMismatch,
        EmbedLoadError,
        PlaybackError,
    ):
        if cls.code == code:
            return cls(message)
    return VideoAccessError(message, code=code or None)
