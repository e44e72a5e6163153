"""
Protected lesson player runtime.

Plain Python on a cooperative event loop (no Django import): access token
refresh, embed command channel, playback state machine, completion tracking,
protection overlay, watermark and clipboard guard.
"""

from .clipboard import ClipboardGuard
from .config import Config, load_config
from .controller import PlaybackController, PlaybackSession, PlaybackState
from .embed_channel import EmbedCommandChannel, EmbedEvent, PlayerState
from .http_client import AccessToken, VideoTokenAPIClient
from .overlay import ProtectionOverlaySynchronizer, ProtectionZone, Rect, ZoneKind, derive_zones
from .progress import ProgressTracker
from .scheduler import AsyncioScheduler, BaseScheduler, TimerGroup
from .viewer import ProtectedLessonView
from .watermark import WatermarkAnimator, WatermarkState

__all__ = [
    "AccessToken",
    "AsyncioScheduler",
    "BaseScheduler",
    "ClipboardGuard",
    "Config",
    "EmbedCommandChannel",
    "EmbedEvent",
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
    "PlayerState",
    "ProgressTracker",
    "ProtectedLessonView",
    "ProtectionOverlaySynchronizer",
    "ProtectionZone",
    "Rect",
    "TimerGroup",
    "VideoTokenAPIClient",
    "WatermarkAnimator",
    "WatermarkState",
    "ZoneKind",
    "derive_zones",
    "load_config",
]
