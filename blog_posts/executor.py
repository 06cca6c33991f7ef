# blog_posts/executor.py
"""
Query executors: the leaf that reads "all posts" from somewhere.

Both executors expose `fetch_all_posts()` and raise `FetchError` on any
failure. The cause (network, store, schema) is not classified; the message
is passed through as-is, or the exception type when it is blank.
"""
import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from blog_posts.models import Post, PostCollection
from blog_posts.perf import async_perf_log
from blog_posts.store import StoreClient

logger = logging.getLogger(__name__)

ALL_POSTS_INDEX = "all_posts"

POSTS_QUERY = """
query POSTS {
  posts {
    title
  }
}
"""

CONNECT_TIMEOUT = 3.0
READ_TIMEOUT = 10.0


class FetchError(Exception):
    """A fetch of the post list failed. `message` is shown to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message: str = message


def error_message(e: BaseException) -> str:
    """A readable message for any exception, never empty."""
    if isinstance(e, KeyError) and e.args:
        return f"missing field '{e.args[0]}'"
    if isinstance(e, ValidationError) and e.errors():
        err = e.errors()[0]
        loc = ".".join(str(p) for p in err["loc"])
        return f"{loc}: {err['msg']}" if loc else err["msg"]
    return str(e) or type(e).__name__


class PostsExecutor(Protocol):
    async def fetch_all_posts(self) -> PostCollection: ...


class StorePostsExecutor:
    """Reads every record of the `all_posts` index, page by page."""

    def __init__(self, store: StoreClient):
        self.store = store

    async def fetch_all_posts(self) -> PostCollection:
        posts: list[Post] = []
        after: int | None = None
        try:
            async with async_perf_log(f"Index match: {ALL_POSTS_INDEX}", logger):
                while True:
                    page = await self.store.match_index(ALL_POSTS_INDEX, after=after)
                    posts.extend(Post(title=doc["title"]) for doc in page.data)
                    if page.after is None:
                        break
                    after = page.after
        except KeyError as e:
            # KeyError's str() wraps the message in quotes
            raise FetchError(e.args[0] if e.args else str(e)) from e
        except Exception as e:
            raise FetchError(error_message(e)) from e
        return tuple(posts)


class GraphQLPostsExecutor:
    """Runs the POSTS query against a GraphQL endpoint over HTTP."""

    def __init__(self, url: str, client: httpx.AsyncClient | None = None):
        self.url = url
        self.client = client

    async def _post(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.post(
            self.url,
            json={"query": POSTS_QUERY, "operationName": "POSTS"},
            headers={"Accept": "application/json"},
        )

    async def fetch_all_posts(self) -> PostCollection:
        try:
            if self.client is not None:
                r = await self._post(self.client)
            else:
                timeout = httpx.Timeout(
                    connect=CONNECT_TIMEOUT,
                    read=READ_TIMEOUT,
                    write=READ_TIMEOUT,
                    pool=READ_TIMEOUT,
                )
                async with httpx.AsyncClient(timeout=timeout) as client:
                    r = await self._post(client)
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            message = error_message(e)
            logger.error(f"GraphQL request to {self.url} failed - {message}")
            raise FetchError(message) from e

        try:
            return _parse_posts(body)
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            logger.error(f"Malformed posts response from {self.url}: {body!r}")
            raise FetchError(f"Malformed posts response: {error_message(e)}") from e


def _parse_posts(body: Any) -> PostCollection:
    """Maps a GraphQL response body to posts. Raises FetchError on `errors`."""
    if not isinstance(body, dict):
        raise TypeError(f"expected an object, got {type(body).__name__}")

    errors = body.get("errors")
    if errors:
        first = errors[0]
        if isinstance(first, dict):
            raise FetchError(first.get("message") or "Unknown GraphQL error")
        raise FetchError(str(first) or "Unknown GraphQL error")

    data = body.get("data") or {}
    raw_posts = data.get("posts")
    if raw_posts is None:
        raise FetchError("Response did not contain posts")
    return tuple(Post(title=p["title"]) for p in raw_posts)
