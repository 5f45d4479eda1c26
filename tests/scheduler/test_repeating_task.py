from __future__ import annotations

import threading

import pytest

from event_attendance.scheduler.task import RepeatingTask


def test_run_once_skips_while_previous_run_in_progress():
    entered = threading.Event()
    release = threading.Event()
    calls = []

    def slow():
        calls.append(1)
        entered.set()
        release.wait(5)

    task = RepeatingTask(slow, interval=60, name="slow")
    worker = threading.Thread(target=task.run_once)
    worker.start()
    assert entered.wait(5)

    assert task.run_once() is False

    release.set()
    worker.join(5)
    assert calls == [1]
    assert task.run_once() is True


def test_errors_are_logged_and_task_keeps_running(caplog):
    def boom():
        raise RuntimeError("boom")

    task = RepeatingTask(boom, interval=60, name="boom")

    assert task.run_once() is True
    assert task.run_once() is True
    assert "boom run failed" in caplog.text


def test_start_runs_immediately_and_stop_joins():
    ran = threading.Event()
    task = RepeatingTask(ran.set, interval=60, name="immediate")

    task.start()
    try:
        assert ran.wait(5)
        assert task.is_running
    finally:
        task.stop(timeout=5)

    assert not task.is_running


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        RepeatingTask(lambda: None, interval=0)


def test_restart_after_slow_stop_does_not_revive_old_thread():
    entered = threading.Event()
    release = threading.Event()

    def slow():
        entered.set()
        release.wait(5)

    task = RepeatingTask(slow, interval=60, name="slow-stop")
    task.start()
    assert entered.wait(5)
    old_thread = task._thread

    task.stop(timeout=0.05)
    assert old_thread.is_alive()

    task.start()
    release.set()
    old_thread.join(5)
    try:
        assert not old_thread.is_alive()
        assert task.is_running
    finally:
        task.stop(timeout=5)
