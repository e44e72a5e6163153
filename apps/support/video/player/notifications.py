from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

COPY_BLOCKED_TITLE = "Link Copied"
COPY_BLOCKED_MESSAGE = "You can only access the video through Learnova."

PROTECTED_TITLE = "Protected content"
PROTECTED_MESSAGE = "This video is protected."


class Notifier(Protocol):
    """User-visible toast."""

    def notify(self, title: str, message: str) -> None:
        ...


class LoggingNotifier:
    def notify(self, title: str, message: str) -> None:
        logger.info("NOTICE title=%s message=%s", title, message)
