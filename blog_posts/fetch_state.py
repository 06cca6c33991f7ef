# blog_posts/fetch_state.py
"""
Lifecycle of a single "all posts" fetch.

A machine starts in Loading and moves to exactly one of Empty, Failure or
Success. Nothing moves back to Loading; a refresh means a new machine.
"""
import asyncio
import logging
from typing import Annotated, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from blog_posts.executor import FetchError, PostsExecutor, error_message
from blog_posts.models import PostCollection

logger = logging.getLogger(__name__)


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["loading"] = "loading"


class Empty(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["empty"] = "empty"


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["failure"] = "failure"
    message: str


class Success(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["success"] = "success"
    posts: PostCollection


FetchState = Annotated[
    Union[Loading, Empty, Failure, Success], Field(discriminator="kind")
]

Listener = Callable[[FetchState], None]


def is_terminal(state: FetchState) -> bool:
    return not isinstance(state, Loading)


def settle(posts: PostCollection) -> FetchState:
    """The terminal state for a successful fetch."""
    if len(posts) == 0:
        return Empty()
    return Success(posts=tuple(posts))


class FetchStateMachine:
    """
    Drives one executor call per mount and tracks its lifecycle state.

    Usage:
        machine = FetchStateMachine(executor)
        machine.subscribe(render)
        machine.start()
        state = await machine.wait()
        ...
        machine.teardown()
    """

    def __init__(self, executor: PostsExecutor):
        self.executor = executor
        self._state: FetchState = Loading()
        self._task: asyncio.Task | None = None
        self._listeners: list[Listener] = []
        self._torn_down = False

    @property
    def state(self) -> FetchState:
        return self._state

    def subscribe(self, listener: Listener) -> None:
        """Registers a callback invoked with the new state after each transition."""
        self._listeners.append(listener)

    def start(self) -> asyncio.Task:
        """Schedules the single fetch. Must be called from a running event loop."""
        if self._task is not None:
            raise RuntimeError("Fetch already started for this mount")
        if self._torn_down:
            raise RuntimeError("Cannot start a torn down fetch")
        self._task = asyncio.create_task(self._run())
        return self._task

    async def wait(self) -> FetchState:
        """Starts the fetch if needed and waits for its terminal state."""
        if self._task is None:
            self.start()
        await self._task
        return self._state

    def teardown(self) -> None:
        """Stops consuming the pending result. The state stays as it is."""
        self._torn_down = True
        self._listeners.clear()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run(self) -> None:
        try:
            posts = await self.executor.fetch_all_posts()
        except asyncio.CancelledError:
            logger.info("Fetch cancelled before it resolved")
            raise
        except FetchError as e:
            self._transition(Failure(message=e.message or error_message(e)))
            return
        except Exception as e:
            logger.error(f"Executor raised outside FetchError: {e!r}")
            self._transition(Failure(message=error_message(e)))
            return
        self._transition(settle(posts))

    def _transition(self, new_state: FetchState) -> None:
        if self._torn_down:
            return
        if is_terminal(self._state):
            raise RuntimeError(
                f"Fetch already settled as {self._state.kind}, "
                f"refusing {new_state.kind}"
            )
        self._state = new_state
        logger.debug(f"Fetch state -> {new_state.kind}")
        for listener in list(self._listeners):
            # the state is already set; a listener error is only logged
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"Fetch state listener failed on {new_state.kind}: {e!r}")
