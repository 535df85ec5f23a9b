"""
Unit tests for DelayedCall and PeekTimer.

Tests cover single-slot arming, cancellation and zero-delay firing.
"""

import asyncio

import pytest

from hide_and_seek.services.peek_timer import PeekTimer
from hide_and_seek.services.timers import DelayedCall


class TestDelayedCall:
    """Test the generic cancellable timer."""

    @pytest.mark.asyncio
    async def test_fires_once_after_delay(self):
        fired = []
        timer = DelayedCall("test")

        timer.arm(0.02, lambda: fired.append("x"))
        assert timer.armed

        await asyncio.sleep(0.08)

        assert fired == ["x"]
        assert not timer.armed
        assert timer.fire_count == 1

    @pytest.mark.asyncio
    async def test_rearm_cancels_previous(self):
        fired = []
        timer = DelayedCall("test")

        timer.arm(0.02, lambda: fired.append("first"))
        timer.arm(0.02, lambda: fired.append("second"))
        await asyncio.sleep(0.08)

        assert fired == ["second"]

    @pytest.mark.asyncio
    async def test_disarm_before_fire(self):
        fired = []
        timer = DelayedCall("test")

        timer.arm(0.02, lambda: fired.append("x"))
        assert timer.disarm() is True
        await asyncio.sleep(0.05)

        assert fired == []
        assert timer.disarm() is False

    @pytest.mark.asyncio
    async def test_coroutine_callback_awaited(self):
        done = asyncio.Event()
        timer = DelayedCall("test")

        async def callback():
            await asyncio.sleep(0)
            done.set()

        timer.arm(0, callback)
        await asyncio.wait_for(done.wait(), timeout=1.0)

        assert done.is_set()

    @pytest.mark.asyncio
    async def test_disarm_during_callback_does_not_cancel_it(self):
        timer = DelayedCall("test")
        finished = []

        async def callback():
            timer.disarm()
            await asyncio.sleep(0.01)
            finished.append(True)

        timer.arm(0, callback)
        await asyncio.sleep(0.05)

        assert finished == [True]

    @pytest.mark.asyncio
    async def test_callback_error_is_logged_not_raised(self, caplog):
        timer = DelayedCall("boom")

        def callback():
            raise RuntimeError("kaboom")

        timer.arm(0, callback)
        await asyncio.sleep(0.02)

        assert "kaboom" in caplog.text

    @pytest.mark.asyncio
    async def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            DelayedCall("test").arm(-1, lambda: None)


class TestPeekTimer:
    """Test the peek auto-rehide timer."""

    @pytest.mark.asyncio
    async def test_zero_duration_fires_next_tick(self):
        fired = []
        timer = PeekTimer()

        timer.arm(0, lambda: fired.append(True))
        assert fired == []

        await asyncio.sleep(0.01)
        assert fired == [True]

    @pytest.mark.asyncio
    async def test_arm_replaces_pending_timer(self):
        fired = []
        timer = PeekTimer()

        timer.arm(20, lambda: fired.append("old"))
        timer.arm(20, lambda: fired.append("new"))
        await asyncio.sleep(0.08)

        assert fired == ["new"]

    @pytest.mark.asyncio
    async def test_disarm(self):
        fired = []
        timer = PeekTimer()

        timer.arm(20, lambda: fired.append(True))
        assert timer.armed
        assert timer.disarm() is True
        await asyncio.sleep(0.05)

        assert fired == []
        assert not timer.armed

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            PeekTimer().arm(-1, lambda: None)
