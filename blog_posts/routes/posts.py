# blog_posts/routes/posts.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from blog_posts.dependencies import get_posts_executor
from blog_posts.executor import PostsExecutor
from blog_posts.fetch_state import FetchState, FetchStateMachine
from blog_posts.perf import time_async_function
from blog_posts.views import select_view

logger = logging.getLogger(__name__)

router = APIRouter(tags=["posts"])

PAGE_TEMPLATE = """<!doctype html>
<html>
<head><title>Posts</title></head>
<body>
<h1>Posts</h1>
{body}
</body>
</html>
"""


async def run_fetch(executor: PostsExecutor) -> FetchState:
    """
    Mounts one fetch, waits for it to settle and tears it down.
    If the request is cancelled while waiting, the fetch is cancelled too.
    """
    machine = FetchStateMachine(executor)
    machine.subscribe(lambda s: logger.info(f"Posts fetch settled: {s.kind}"))
    try:
        return await machine.wait()
    finally:
        machine.teardown()


@router.get("/posts", response_class=HTMLResponse)
@time_async_function
async def posts_page(
    executor: PostsExecutor = Depends(get_posts_executor),
) -> HTMLResponse:
    state = await run_fetch(executor)
    return HTMLResponse(PAGE_TEMPLATE.format(body=select_view(state)))


@router.get("/api/posts/state")
async def posts_state(
    executor: PostsExecutor = Depends(get_posts_executor),
) -> dict:
    """Terminal lifecycle state of one fetch, for non-HTML consumers."""
    state = await run_fetch(executor)
    return state.model_dump(mode="json")
