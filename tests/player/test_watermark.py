import random

from apps.support.video.player.overlay import Rect
from apps.support.video.player.scheduler import TimerGroup
from apps.support.video.player.watermark import WatermarkAnimator, watermark_label
from tests.player.fakes import ManualScheduler


def _animator(area, sched=None, seed=1):
    sched = sched or ManualScheduler()
    holder = {"rect": area}
    animator = WatermarkAnimator(
        lambda: holder["rect"],
        timers=TimerGroup(sched),
        label=watermark_label("Jamie", 42),
        rng=random.Random(seed),
    )
    return animator, sched, holder


def test_label_format():
    assert watermark_label("Jamie", 42) == "Jamie • ID: 42"


def test_positions_stay_inside_inset_area():
    area = Rect(100, 50, 800, 450)
    animator, _, _ = _animator(area)

    for _ in range(200):
        state = animator.move()
        assert area.x + 20 <= state.x <= area.right - 20 - 200
        assert area.y + 20 <= state.y <= area.bottom - 20 - 40


def test_moves_every_interval():
    animator, sched, _ = _animator(Rect(0, 0, 1280, 720))
    animator.start()
    first = animator.state
    assert first.last_moved_at == sched.now()

    sched.advance(29.0)
    assert animator.state is first

    sched.advance(1.0)
    assert animator.state is not first
    assert animator.state.last_moved_at == sched.now()


def test_small_area_pins_inside_bounds():
    animator, _, _ = _animator(Rect(10, 10, 150, 30))
    state = animator.move()

    assert state.x == 10
    assert state.y == 10
    assert (state.width, state.height) == (150, 30)
    assert state.x + state.width <= 160
    assert state.y + state.height <= 40


def test_box_keeps_configured_size_when_area_fits():
    animator, _, _ = _animator(Rect(0, 0, 640, 360))
    state = animator.move()

    assert (state.width, state.height) == (200, 40)
    assert state.x + state.width <= 620


def test_area_just_fits_box_and_insets():
    animator, _, _ = _animator(Rect(0, 0, 240, 80))
    state = animator.move()
    assert state.x == 20
    assert state.y == 20


def test_missing_bounds_keeps_last_position():
    animator, _, holder = _animator(Rect(0, 0, 640, 360))
    state = animator.move()

    holder["rect"] = None
    assert animator.move() is None
    assert animator.state is state


def test_stop_cancels_timer():
    animator, sched, _ = _animator(Rect(0, 0, 640, 360))
    animator.start()
    state = animator.state
    animator.stop()

    sched.advance(120.0)
    assert animator.state is state
    assert sched.pending == 0
