import random

import pytest

from apps.support.video.player.controller import PlaybackState
from apps.support.video.player.overlay import PointerKind, Rect
from apps.support.video.player.viewer import ProtectedLessonView
from tests.player.fakes import (
    EMBED_ORIGIN,
    FakeAPI,
    FakeClipboard,
    FakeElement,
    FakeEmbedFactory,
    ManualScheduler,
    RecordingNotifier,
)


@pytest.fixture
def sched():
    return ManualScheduler()


@pytest.fixture
def api(sched):
    return FakeAPI(sched)


@pytest.fixture
def factory():
    return FakeEmbedFactory()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def completed():
    return []


@pytest.fixture
def copy_attempts():
    return []


@pytest.fixture
def view(sched, api, factory, clipboard, completed, copy_attempts):
    v = ProtectedLessonView(
        api=api,
        scheduler=sched,
        embed_factory=factory,
        element=FakeElement(Rect(0, 0, 1000, 500)),
        clipboard=clipboard,
        viewer_name="Jamie",
        viewer_id=42,
        notifier=RecordingNotifier(),
        on_complete=completed.append,
        on_copy_attempt=lambda lesson_id, text: copy_attempts.append((lesson_id, text)),
        rng=random.Random(3),
    )
    v.mount()
    yield v
    v.unmount()


def _open(view, sched, lesson_id, course_id=10, duration=100):
    session = view.select_lesson(lesson_id, course_id)
    sched.advance(0)
    session.controller.channel.receive(
        {"event": "onReady", "info": {"duration": duration}},
        EMBED_ORIGIN,
    )
    session.controller.play()
    return session


def _at(session, seconds):
    session.controller.channel.receive(
        {"event": "infoDelivery", "info": {"currentTime": seconds, "playerState": 1}},
        EMBED_ORIGIN,
    )


def test_completion_then_switch_leaves_no_stray_work(view, sched, api, completed):
    first = _open(view, sched, 1)
    _at(first, 92)
    sched.advance(1.0)

    assert api.recorded == [(1, 92, True)]
    assert completed == [1]

    second = _open(view, sched, 2)
    sched.advance(600.0)

    assert first.timers.active_count() == 0
    assert first.controller.timers.active_count() == 0
    assert first.controller.closed
    assert api.recorded == [(1, 92, True)]
    assert completed == [1]
    assert view.current is second
    assert second.controller.state == PlaybackState.PLAYING


def test_switch_before_sample_drops_pending_completion(view, sched, api, completed):
    first = _open(view, sched, 1)
    _at(first, 95)

    _open(view, sched, 2)
    sched.advance(60.0)

    assert api.recorded == []
    assert completed == []


def test_old_lesson_refresh_does_not_fire_after_switch(view, sched, api):
    _open(view, sched, 1)
    sched.advance(100.0)
    _open(view, sched, 2)

    # lesson 2 refreshes at +240; lesson 1's refresh would have been due at +240 from t0
    sched.advance(200.0)
    assert [lesson for lesson, _ in api.issued] == [1, 2]


def test_session_parts_started(view, sched):
    session = _open(view, sched, 1)

    assert session.overlay.rect == Rect(0, 0, 1000, 500)
    assert session.watermark.state is not None
    assert view.watermark_label == "Jamie • ID: 42"


def test_copy_of_video_link_uses_current_lesson_inert_url(view, sched, clipboard):
    _open(view, sched, 1)
    _open(view, sched, 2)

    clipboard.write_text("https://www.youtube.com/watch?v=vid2")

    assert clipboard.writes == ["https://learnova.com/protected-content/2"]


def test_copy_event_and_shortcut_report_lesson(view, sched, clipboard, copy_attempts):
    _open(view, sched, 4)
    link = "https://youtu.be/vid4"

    assert view.handle_copy(link) is True
    assert view.handle_key("c", meta=True, selection=link) is True
    assert view.handle_key("c", ctrl=True, selection="chapter 4 notes") is False

    assert clipboard.writes == ["https://learnova.com/protected-content/4"] * 2
    assert copy_attempts == [(4, link), (4, link)]


def test_copy_event_after_unmount_not_intercepted(view, sched, clipboard, copy_attempts):
    _open(view, sched, 4)
    view.unmount()

    assert view.handle_copy("https://youtu.be/vid4") is False
    assert clipboard.writes == []
    assert copy_attempts == []


def test_pointer_in_control_zone_writes_inert_url(view, sched, clipboard):
    _open(view, sched, 5)

    result = view.handle_pointer(PointerKind.CLICK, 500, 490)

    assert result.action == "blocked"
    assert clipboard.writes == ["https://learnova.com/protected-content/5"]


def test_click_outside_zones_toggles_playback(view, sched):
    session = _open(view, sched, 1)

    view.handle_pointer(PointerKind.CLICK, 300, 200)
    assert session.controller.state == PlaybackState.PAUSED

    view.handle_pointer(PointerKind.CLICK, 300, 200)
    assert session.controller.state == PlaybackState.PLAYING


def test_manual_mark_complete(view, sched, api, completed):
    session = _open(view, sched, 3)
    _at(session, 10)

    assert view.mark_complete() is True
    sched.advance(0)

    assert api.recorded == [(3, 10, True)]
    assert completed == [3]


def test_unmount_tears_down_and_restores_clipboard(view, sched, clipboard):
    session = _open(view, sched, 1)

    view.unmount()
    clipboard.write_text("https://www.youtube.com/watch?v=vid1")

    assert view.current is None
    assert session.controller.closed
    assert clipboard.writes == ["https://www.youtube.com/watch?v=vid1"]

    sched.advance(600.0)
    assert sched.pending == 0


def test_native_controls_skip_overlay(sched, api, factory, clipboard):
    view = ProtectedLessonView(
        api=api,
        scheduler=sched,
        embed_factory=factory,
        element=FakeElement(Rect(0, 0, 1000, 500)),
        clipboard=clipboard,
        viewer_name="Jamie",
        viewer_id=42,
        custom_overlay=False,
    )
    with view:
        session = view.select_lesson(1, 10)
        sched.advance(0)

        assert session.overlay is None
        assert session.watermark is None
        assert view.handle_pointer(PointerKind.CLICK, 10, 10) is None
        assert factory.created[0][1]["controls"] == 1
