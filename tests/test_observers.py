"""
Tests for the listener registry.
"""

import asyncio

import pytest

from specdraft_api.agent.observers import Observable


class TestObservable:
    """Test suite for Observable."""

    def test_subscribe_and_notify(self):
        observable = Observable()
        calls = []
        observable.subscribe(lambda: calls.append("a"))
        observable.subscribe(lambda: calls.append("b"))

        observable.notify_listeners()

        assert calls == ["a", "b"]
        assert observable.listener_count == 2

    def test_unsubscribe_handle(self):
        observable = Observable()
        calls = []
        unsubscribe = observable.subscribe(lambda: calls.append(True))

        unsubscribe()
        unsubscribe()
        observable.notify_listeners()

        assert calls == []
        assert observable.listener_count == 0

    def test_failing_listener_does_not_block_others(self, caplog):
        observable = Observable()
        calls = []

        def broken():
            raise RuntimeError("listener bug")

        observable.subscribe(broken)
        observable.subscribe(lambda: calls.append(True))

        observable.notify_listeners()

        assert calls == [True]
        assert "failed" in caplog.text

    def test_listener_may_unsubscribe_during_notify(self):
        observable = Observable()
        calls = []

        def once():
            calls.append("once")
            unsubscribe()

        unsubscribe = observable.subscribe(once)
        observable.subscribe(lambda: calls.append("other"))

        observable.notify_listeners()
        observable.notify_listeners()

        assert calls == ["once", "other", "other"]

    def test_async_listener_without_running_loop(self):
        observable = Observable()
        calls = []

        async def listener():
            calls.append(True)

        observable.subscribe(listener)
        observable.notify_listeners()

        assert calls == [True]

    @pytest.mark.asyncio
    async def test_async_listener_inside_running_loop(self):
        observable = Observable()
        done = asyncio.Event()

        async def listener():
            done.set()

        observable.subscribe(listener)
        observable.notify_listeners()

        await asyncio.wait_for(done.wait(), timeout=1)
