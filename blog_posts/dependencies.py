# blog_posts/dependencies.py
import logging

from fastapi import Depends

from blog_posts import store
from blog_posts.executor import (
    GraphQLPostsExecutor,
    PostsExecutor,
    StorePostsExecutor,
)
from blog_posts.settings import settings
from blog_posts.store import StoreClient

logger = logging.getLogger(__name__)


def get_store_client() -> StoreClient:
    # Looked up at call time so tests can swap the session factory
    return StoreClient(store.async_session, page_size=settings.page_size)


def get_store_executor(
    store_client: StoreClient = Depends(get_store_client),
) -> StorePostsExecutor:
    return StorePostsExecutor(store_client)


def get_posts_executor(
    store_executor: StorePostsExecutor = Depends(get_store_executor),
) -> PostsExecutor:
    """
    Executor used by the rendered views.
    Reads a remote GraphQL API when POSTS_GRAPHQL_URL is set, else the local store.
    """
    if settings.graphql_url:
        logger.debug(f"Using remote posts API at {settings.graphql_url}")
        return GraphQLPostsExecutor(settings.graphql_url)
    return store_executor


async def get_graphql_context(
    executor: StorePostsExecutor = Depends(get_store_executor),
) -> dict:
    # The GraphQL resolver always reads the local store
    return {"executor": executor}
