# PATH: apps/support/video/player/clipboard.py
#
# Scoped clipboard-write interception.
#
# - install() swaps the clipboard object's write_text for a guarded one,
#   uninstall() restores the original; both are idempotent
# - one guard per clipboard object at a time (single writer)
# - text that mentions the video host is replaced by an inert URL
# - handle_copy() / handle_key() cover copy events and Ctrl/Cmd+C on a
#   selection; they return True when the host should suppress the default copy

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, Optional, Protocol, Union

from apps.support.video.errors import ClipboardGuardConflict
from apps.support.video.player.notifications import (
    COPY_BLOCKED_MESSAGE,
    COPY_BLOCKED_TITLE,
    LoggingNotifier,
    Notifier,
)

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_HOSTS = ("youtube.com", "youtu.be", "youtube-nocookie.com")

# id(clipboard) -> installed guard
_OWNERS: Dict[int, "ClipboardGuard"] = {}


class Clipboard(Protocol):
    def write_text(self, text: str) -> Any:
        ...


def build_denylist(hosts: Iterable[str]) -> "re.Pattern[str]":
    parts = [re.escape(h.strip().lower()) for h in hosts if h and h.strip()]
    parts.append(r"/embed/")
    return re.compile("|".join(parts), re.IGNORECASE)


class ClipboardGuard:
    def __init__(
        self,
        clipboard: Clipboard,
        *,
        inert_text: Union[str, Callable[[], str]],
        hosts: Iterable[str] = DEFAULT_VIDEO_HOSTS,
        notifier: Optional[Notifier] = None,
        on_copy_attempt: Optional[Callable[[str], Any]] = None,
    ):
        self._clipboard = clipboard
        self.inert_text = inert_text
        self._denylist = build_denylist(hosts)
        self._notifier = notifier or LoggingNotifier()
        self.on_copy_attempt = on_copy_attempt

        self._original: Optional[Callable[[str], Any]] = None
        self._had_instance_attr = False
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def _inert(self) -> str:
        value = self.inert_text
        return value() if callable(value) else str(value)

    def is_protected(self, text: str) -> bool:
        return bool(text) and bool(self._denylist.search(str(text)))

    # --------------------------------------------------
    # install / uninstall
    # --------------------------------------------------

    def install(self) -> "ClipboardGuard":
        if self._installed:
            return self

        key = id(self._clipboard)
        owner = _OWNERS.get(key)
        if owner is not None and owner is not self:
            raise ClipboardGuardConflict("clipboard is already guarded by another owner")

        self._had_instance_attr = "write_text" in vars(self._clipboard)
        self._original = self._clipboard.write_text
        setattr(self._clipboard, "write_text", self._guarded_write)

        _OWNERS[key] = self
        self._installed = True
        logger.debug("clipboard guard installed")
        return self

    def uninstall(self) -> None:
        if not self._installed:
            return

        key = id(self._clipboard)
        if _OWNERS.get(key) is self:
            del _OWNERS[key]

        if self._had_instance_attr:
            setattr(self._clipboard, "write_text", self._original)
        else:
            # class-level method becomes visible again
            delattr(self._clipboard, "write_text")

        self._original = None
        self._installed = False
        logger.debug("clipboard guard uninstalled")

    def __enter__(self) -> "ClipboardGuard":
        return self.install()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.uninstall()

    # --------------------------------------------------
    # guarded write
    # --------------------------------------------------

    def write_inert(self) -> Any:
        """Write the inert URL through the original writer."""
        writer = self._original if self._installed else self._clipboard.write_text
        return writer(self._inert())

    def _guarded_write(self, text: str) -> Any:
        if not self.is_protected(text):
            return self._original(text)
        return self._block(text, source="clipboard")

    def handle_copy(self, selection: str) -> bool:
        """Copy event with the current selection. True = default was replaced."""
        if not self._installed or not self.is_protected(selection):
            return False
        self._block(selection, source="copy")
        return True

    def handle_key(self, key: str, *, ctrl: bool = False, meta: bool = False, selection: str = "") -> bool:
        if not (ctrl or meta) or key not in ("c", "C"):
            return False
        if not self._installed or not self.is_protected(selection):
            return False
        self._block(selection, source="keyboard")
        return True

    def _block(self, attempted: str, *, source: str) -> Any:
        inert = self._inert()
        logger.info("COPY_ATTEMPT_BLOCKED source=%s replaced_with=%s", source, inert)
        self._notifier.notify(COPY_BLOCKED_TITLE, COPY_BLOCKED_MESSAGE)
        if self.on_copy_attempt is not None:
            self.on_copy_attempt(attempted)
        return self._original(inert)
