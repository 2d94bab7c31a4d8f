"""Unit tests for single-event result streams."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import httpx
import pytest

from packages.networking_kit import (
    Attachment,
    DocumentKind,
    GenericError,
    InvalidResponseCodeError,
    MultipartUploader,
    NetworkError,
    ResultStream,
    Subscription,
)
from packages.networking_kit.multipart import CHUNK_SIZE
from packages.networking_kit.streams import cancellation_requested


class _Recorder:
    """Collect stream callbacks and signal when a terminal event arrives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self.finished = asyncio.Event()

    def on_next(self, value: Any) -> None:
        self.events.append(("next", value))

    def on_error(self, error: NetworkError) -> None:
        self.events.append(("error", error))
        self.finished.set()

    def on_completed(self) -> None:
        self.events.append(("completed", None))
        self.finished.set()


def test_subscribe_delivers_value_then_completion() -> None:
    """A successful stream emits one value followed by completion."""

    async def _run() -> list[tuple[str, Any]]:
        async def factory() -> int:
            return 42

        recorder = _Recorder()
        subscription = ResultStream(factory).subscribe(
            recorder.on_next, recorder.on_error, recorder.on_completed
        )
        await asyncio.wait_for(recorder.finished.wait(), timeout=1)
        assert subscription.done is True
        return recorder.events

    assert asyncio.run(_run()) == [("next", 42), ("completed", None)]


def test_subscribe_delivers_single_terminal_failure() -> None:
    """A failing stream emits exactly one error and never completes."""
    failure = InvalidResponseCodeError(code=404)

    async def _run() -> list[tuple[str, Any]]:
        async def factory() -> int:
            raise failure

        recorder = _Recorder()
        ResultStream(factory).subscribe(
            recorder.on_next, recorder.on_error, recorder.on_completed
        )
        await asyncio.wait_for(recorder.finished.wait(), timeout=1)
        await asyncio.sleep(0)
        return recorder.events

    assert asyncio.run(_run()) == [("error", failure)]


def test_subscribe_reduces_foreign_errors_to_generic_error() -> None:
    """Unexpected exceptions surface as GenericError."""

    async def _run() -> list[tuple[str, Any]]:
        async def factory() -> int:
            raise ValueError("unexpected")

        recorder = _Recorder()
        ResultStream(factory).subscribe(recorder.on_next, recorder.on_error)
        await asyncio.wait_for(recorder.finished.wait(), timeout=1)
        return recorder.events

    events = asyncio.run(_run())

    assert len(events) == 1
    assert events[0][0] == "error"
    assert isinstance(events[0][1], GenericError)
    assert events[0][1].message == "unexpected"


def test_cancelled_subscription_never_fires_callbacks() -> None:
    """No callback should fire after cancel returns."""

    async def _run() -> tuple[list[tuple[str, Any]], bool]:
        started = asyncio.Event()

        async def factory() -> int:
            started.set()
            await asyncio.sleep(0.05)
            return 1

        recorder = _Recorder()
        subscription = ResultStream(factory).subscribe(
            recorder.on_next, recorder.on_error, recorder.on_completed
        )
        await asyncio.wait_for(started.wait(), timeout=1)
        subscription.cancel()
        await asyncio.sleep(0.1)
        return recorder.events, subscription.cancelled

    events, cancelled = asyncio.run(_run())

    assert events == []
    assert cancelled is True


def test_cancel_from_progress_observer_stops_the_upload() -> None:
    """Cancelling inside on_progress ends the upload before more data is sent."""
    handled: list[httpx.Request] = []
    progress: list[float] = []
    subscriptions: list[Subscription] = []

    def handler(request: httpx.Request) -> httpx.Response:
        handled.append(request)
        return httpx.Response(200)

    def on_progress(fraction: float) -> None:
        progress.append(fraction)
        subscriptions[0].cancel()

    async def _run() -> list[tuple[str, Any]]:
        recorder = _Recorder()
        video = Attachment(data=b"v" * (CHUNK_SIZE * 4 + 1), kind=DocumentKind.VIDEO)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            uploader = MultipartUploader(client)
            stream = ResultStream(
                lambda: uploader.upload(
                    "https://example.test/upload",
                    {"video": video},
                    on_progress=on_progress,
                )
            )
            subscriptions.append(
                stream.subscribe(recorder.on_next, recorder.on_error, recorder.on_completed)
            )
            await asyncio.sleep(0.1)
        return recorder.events

    events = asyncio.run(_run())

    assert events == []
    assert len(progress) == 1
    assert handled == []
    assert subscriptions[0].cancelled is True
    assert subscriptions[0].done is False


def test_cancel_from_another_thread_suppresses_callbacks() -> None:
    """Cancelling off the callback loop still prevents every callback."""
    loop = asyncio.new_event_loop()
    loop_thread = threading.Thread(target=loop.run_forever, daemon=True)
    loop_thread.start()
    events: list[str] = []

    async def factory() -> str:
        await asyncio.sleep(0.05)
        return "late"

    try:
        subscription = ResultStream(factory, callback_loop=loop).subscribe(
            lambda value: events.append("next"),
            lambda error: events.append("error"),
            lambda: events.append("completed"),
        )
        subscription.cancel()
        asyncio.run_coroutine_threadsafe(asyncio.sleep(0.1), loop).result(timeout=2)
    finally:
        loop.call_soon_threadsafe(loop.stop)
        loop_thread.join(timeout=2)
        loop.close()

    assert events == []
    assert subscription.cancelled is True


def test_cancellation_requested_tracks_the_active_subscription() -> None:
    """Work can poll whether its own subscription has been cancelled."""
    observed: list[bool] = []
    subscriptions: list[Subscription] = []

    async def _run() -> None:
        async def factory() -> None:
            observed.append(cancellation_requested())
            subscriptions[0].cancel()
            observed.append(cancellation_requested())

        subscriptions.append(ResultStream(factory).subscribe(lambda value: None))
        await asyncio.sleep(0.05)

    asyncio.run(_run())

    assert cancellation_requested() is False
    assert observed == [False, True]


def test_each_subscription_runs_the_work_again() -> None:
    """Streams are cold: every subscription triggers a fresh call."""
    calls: list[int] = []

    async def _run() -> None:
        async def factory() -> int:
            calls.append(1)
            return len(calls)

        stream = ResultStream(factory)
        first, second = _Recorder(), _Recorder()
        stream.subscribe(first.on_next, first.on_error, first.on_completed)
        stream.subscribe(second.on_next, second.on_error, second.on_completed)
        await asyncio.wait_for(first.finished.wait(), timeout=1)
        await asyncio.wait_for(second.finished.wait(), timeout=1)

    asyncio.run(_run())

    assert len(calls) == 2


def test_callbacks_run_on_the_configured_callback_loop() -> None:
    """Subscribing from another thread delivers on the callback loop's thread."""
    loop = asyncio.new_event_loop()
    loop_thread = threading.Thread(target=loop.run_forever, daemon=True)
    loop_thread.start()
    delivered = threading.Event()
    callback_threads: list[int] = []
    values: list[str] = []

    async def factory() -> str:
        return "ok"

    def on_next(value: str) -> None:
        callback_threads.append(threading.get_ident())
        values.append(value)

    try:
        ResultStream(factory, callback_loop=loop).subscribe(
            on_next, on_completed=delivered.set
        )
        assert delivered.wait(timeout=2)
    finally:
        loop.call_soon_threadsafe(loop.stop)
        loop_thread.join(timeout=2)
        loop.close()

    assert values == ["ok"]
    assert callback_threads == [loop_thread.ident]


def test_async_iteration_yields_single_value() -> None:
    """Async iteration yields exactly one value."""

    async def _run() -> list[str]:
        async def factory() -> str:
            return "value"

        return [value async for value in ResultStream(factory)]

    assert asyncio.run(_run()) == ["value"]


def test_first_raises_network_error() -> None:
    """Awaiting the stream raises the failure it would have delivered."""

    async def _run() -> None:
        async def factory() -> str:
            raise RuntimeError("broken")

        await ResultStream(factory).first()

    with pytest.raises(GenericError, match="broken"):
        asyncio.run(_run())
