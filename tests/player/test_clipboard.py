import pytest

from apps.support.video.errors import ClipboardGuardConflict
from apps.support.video.player.clipboard import ClipboardGuard
from apps.support.video.player.notifications import COPY_BLOCKED_MESSAGE, COPY_BLOCKED_TITLE
from tests.player.fakes import FakeClipboard, RecordingNotifier

INERT = "https://learnova.com/protected-content/1"


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def guard(clipboard, notifier):
    g = ClipboardGuard(
        clipboard,
        inert_text=INERT,
        hosts=("video-host.example",),
        notifier=notifier,
    )
    yield g
    g.uninstall()


def test_video_link_replaced_with_inert_url(clipboard, guard, notifier):
    guard.install()

    clipboard.write_text("https://video-host.example/watch?v=abc")

    assert clipboard.writes == [INERT]
    assert notifier.notices == [(COPY_BLOCKED_TITLE, COPY_BLOCKED_MESSAGE)]


def test_embed_path_replaced(clipboard, guard):
    guard.install()
    clipboard.write_text("https://cdn.other.example/embed/xyz")
    assert clipboard.writes == [INERT]


def test_host_match_is_case_insensitive(clipboard, guard):
    guard.install()
    clipboard.write_text("see HTTPS://VIDEO-HOST.EXAMPLE/watch?v=abc")
    assert clipboard.writes == [INERT]


def test_other_text_passes_through(clipboard, guard, notifier):
    guard.install()

    clipboard.write_text("hello world")

    assert clipboard.writes == ["hello world"]
    assert notifier.notices == []


def test_uninstall_restores_original_writer(clipboard, guard):
    guard.install()
    guard.uninstall()

    clipboard.write_text("https://video-host.example/watch?v=abc")
    clipboard.write_text("hello world")

    assert clipboard.writes == ["https://video-host.example/watch?v=abc", "hello world"]
    assert "write_text" not in vars(clipboard)


def test_install_and_uninstall_are_idempotent(clipboard, guard):
    guard.install()
    guard.install()
    assert guard.installed

    guard.uninstall()
    guard.uninstall()
    assert not guard.installed

    clipboard.write_text("hello world")
    assert clipboard.writes == ["hello world"]


def test_second_owner_conflicts(clipboard, guard):
    guard.install()
    other = ClipboardGuard(clipboard, inert_text=INERT)

    with pytest.raises(ClipboardGuardConflict):
        other.install()

    guard.uninstall()
    other.install()
    other.uninstall()


def test_context_manager_scopes_interception(clipboard, notifier):
    with ClipboardGuard(clipboard, inert_text=lambda: INERT, hosts=("video-host.example",), notifier=notifier):
        clipboard.write_text("https://video-host.example/watch?v=abc")

    clipboard.write_text("https://video-host.example/watch?v=abc")

    assert clipboard.writes == [INERT, "https://video-host.example/watch?v=abc"]


def test_write_inert_bypasses_guard(clipboard, guard, notifier):
    guard.install()
    guard.write_inert()

    assert clipboard.writes == [INERT]
    assert notifier.notices == []


def test_copy_event_on_video_link_writes_inert_url(clipboard, guard, notifier):
    attempts = []
    guard.on_copy_attempt = attempts.append
    guard.install()

    assert guard.handle_copy("https://video-host.example/watch?v=abc") is True

    assert clipboard.writes == [INERT]
    assert attempts == ["https://video-host.example/watch?v=abc"]
    assert notifier.notices == [(COPY_BLOCKED_TITLE, COPY_BLOCKED_MESSAGE)]


def test_copy_event_on_other_text_left_alone(clipboard, guard):
    guard.install()

    assert guard.handle_copy("lecture notes") is False
    assert guard.handle_copy("") is False
    assert clipboard.writes == []


def test_copy_event_ignored_when_not_installed(clipboard, guard):
    assert guard.handle_copy("https://video-host.example/watch?v=abc") is False
    assert clipboard.writes == []


@pytest.mark.parametrize(
    "key, ctrl, meta, blocked",
    [
        ("c", True, False, True),
        ("C", False, True, True),
        ("c", False, False, False),
        ("v", True, False, False),
    ],
)
def test_copy_shortcut_on_video_link(clipboard, guard, key, ctrl, meta, blocked):
    attempts = []
    guard.on_copy_attempt = attempts.append
    guard.install()

    handled = guard.handle_key(key, ctrl=ctrl, meta=meta, selection="https://video-host.example/watch?v=abc")

    assert handled is blocked
    assert clipboard.writes == ([INERT] if blocked else [])
    assert len(attempts) == (1 if blocked else 0)


def test_copy_shortcut_without_video_selection(clipboard, guard):
    guard.install()
    assert guard.handle_key("c", ctrl=True, selection="plain text") is False
    assert clipboard.writes == []


def test_guarded_write_reports_copy_attempt(clipboard, guard):
    attempts = []
    guard.on_copy_attempt = attempts.append
    guard.install()

    clipboard.write_text("https://video-host.example/watch?v=abc")
    clipboard.write_text("hello world")

    assert attempts == ["https://video-host.example/watch?v=abc"]
