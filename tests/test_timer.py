# tests/test_timer.py
from datetime import datetime, timezone

from interview_assistant.application.timer import InterviewTimer, TimerState

def run(timer, ticks):
    return [timer.tick() for _ in range(ticks)]

def test_countdown_expires_exactly_once():
    timer = InterviewTimer()
    timer.start(20)
    results = run(timer, 25)

    assert results.count(True) == 1
    assert results.index(True) == 19
    assert timer.state == TimerState.EXPIRED
    assert timer.remaining == 0

def test_pause_freezes_countdown():
    timer = InterviewTimer()
    timer.start(5)
    timer.tick()
    paused_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    timer.pause(paused_at)

    assert run(timer, 10) == [False] * 10
    assert timer.remaining == 4
    assert timer.paused_at == paused_at

    timer.resume()
    assert timer.state == TimerState.RUNNING
    assert timer.paused_at is None
    assert run(timer, 4)[-1] is True

def test_stop_cancels_countdown():
    timer = InterviewTimer()
    timer.start(2)
    timer.stop()
    assert run(timer, 5) == [False] * 5
    assert timer.state == TimerState.STOPPED

def test_start_rearms_after_expiry():
    timer = InterviewTimer()
    timer.start(1)
    assert timer.tick() is True
    timer.start(60)
    assert timer.is_running
    assert timer.remaining == 60

def test_resume_only_from_pause():
    timer = InterviewTimer()
    timer.resume()
    assert timer.state == TimerState.STOPPED

def test_restore_comes_back_paused():
    timer = InterviewTimer()
    timer.restore(12)
    assert timer.state == TimerState.PAUSED
    assert timer.paused_at is not None
    timer.restore(0)
    assert timer.state == TimerState.EXPIRED
