from .token_views import VideoTokenView, VideoAccessTokenViewSet

__all__ = [
    "VideoTokenView",
    "VideoAccessTokenViewSet",
]
