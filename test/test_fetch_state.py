# test/test_fetch_state.py
import asyncio

import pytest

from blog_posts.executor import FetchError
from blog_posts.fetch_state import (
    Empty,
    Failure,
    FetchStateMachine,
    Loading,
    Success,
    settle,
)
from blog_posts.models import Post


class FakeExecutor:
    def __init__(self, posts=(), error: Exception | None = None):
        self.posts = tuple(Post(title=t) for t in posts)
        self.error = error
        self.calls = 0

    async def fetch_all_posts(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.posts


class BlockingExecutor:
    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch_all_posts(self):
        self.started.set()
        await self.release.wait()
        return (Post(title="late"),)


@pytest.mark.asyncio
async def test_starts_in_loading():
    machine = FetchStateMachine(FakeExecutor(["A"]))
    assert isinstance(machine.state, Loading)


@pytest.mark.asyncio
async def test_empty_collection_settles_empty():
    state = await FetchStateMachine(FakeExecutor([])).wait()
    assert isinstance(state, Empty)


@pytest.mark.asyncio
async def test_non_empty_collection_keeps_order_and_duplicates():
    titles = ["B", "A", "B", "C"]
    state = await FetchStateMachine(FakeExecutor(titles)).wait()

    assert isinstance(state, Success)
    assert [p.title for p in state.posts] == titles


@pytest.mark.asyncio
async def test_failure_message_is_verbatim():
    machine = FetchStateMachine(FakeExecutor(error=FetchError("network down")))
    state = await machine.wait()
    assert state == Failure(message="network down")


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_failure():
    machine = FetchStateMachine(FakeExecutor(error=ConnectionError("reset by peer")))
    state = await machine.wait()
    assert isinstance(state, Failure)
    assert state.message == "reset by peer"


@pytest.mark.asyncio
async def test_executor_runs_once_and_listeners_see_one_transition():
    executor = FakeExecutor(["Hello"])
    machine = FetchStateMachine(executor)
    seen = []
    machine.subscribe(seen.append)

    machine.start()
    await machine.wait()
    await machine.wait()

    assert executor.calls == 1
    assert len(seen) == 1
    assert isinstance(seen[0], Success)


@pytest.mark.asyncio
async def test_start_twice_is_rejected():
    machine = FetchStateMachine(FakeExecutor())
    machine.start()
    with pytest.raises(RuntimeError):
        machine.start()
    await machine.wait()


@pytest.mark.asyncio
async def test_stays_loading_until_resolved():
    executor = BlockingExecutor()
    machine = FetchStateMachine(executor)
    machine.start()
    await executor.started.wait()

    assert isinstance(machine.state, Loading)

    executor.release.set()
    state = await machine.wait()
    assert [p.title for p in state.posts] == ["late"]


@pytest.mark.asyncio
async def test_teardown_discards_pending_result():
    executor = BlockingExecutor()
    machine = FetchStateMachine(executor)
    seen = []
    machine.subscribe(seen.append)
    task = machine.start()
    await executor.started.wait()

    machine.teardown()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert isinstance(machine.state, Loading)
    assert seen == []
    with pytest.raises(RuntimeError):
        machine.start()


@pytest.mark.asyncio
async def test_teardown_after_settle_keeps_terminal_state():
    machine = FetchStateMachine(FakeExecutor(["A"]))
    await machine.wait()
    machine.teardown()
    assert isinstance(machine.state, Success)


def test_settle():
    assert settle(()) == Empty()
    posts = (Post(title="A"), Post(title="B"))
    assert settle(posts) == Success(posts=posts)


def test_states_serialize_with_kind():
    assert Loading().model_dump() == {"kind": "loading"}
    assert Failure(message="x").model_dump() == {"kind": "failure", "message": "x"}
    assert Success(posts=(Post(title="A"),)).model_dump(mode="json") == {
        "kind": "success",
        "posts": [{"title": "A"}],
    }


@pytest.mark.asyncio
async def test_blank_error_message_falls_back_to_type():
    machine = FetchStateMachine(FakeExecutor(error=asyncio.TimeoutError()))
    state = await machine.wait()
    assert state == Failure(message="TimeoutError")

    machine = FetchStateMachine(FakeExecutor(error=FetchError("")))
    state = await machine.wait()
    assert state == Failure(message="FetchError")


@pytest.mark.asyncio
async def test_malformed_remote_payload_reaches_failure_readably():
    class MissingTitleExecutor:
        async def fetch_all_posts(self):
            return tuple(Post(title=p["title"]) for p in [{}])

    state = await FetchStateMachine(MissingTitleExecutor()).wait()
    assert state == Failure(message="missing field 'title'")


@pytest.mark.asyncio
async def test_failing_listener_does_not_hide_terminal_state():
    machine = FetchStateMachine(FakeExecutor(["A"]))
    seen = []

    def broken(state):
        raise ValueError("render failed")

    machine.subscribe(broken)
    machine.subscribe(seen.append)

    state = await machine.wait()

    assert isinstance(state, Success)
    assert seen == [state]
