# blog_posts/schema.py
"""
GraphQL schema, built once at import:

    type Post { title: String! }
    type Query { posts: [Post!]! }
"""
import logging

import strawberry
from strawberry.types import Info

from blog_posts.executor import PostsExecutor

logger = logging.getLogger(__name__)


@strawberry.type(name="Post")
class PostType:
    title: str


async def resolve_posts(info: Info) -> list[PostType]:
    # FetchError propagates and lands in the response's "errors" array
    executor: PostsExecutor = info.context["executor"]
    posts = await executor.fetch_all_posts()
    return [PostType(title=p.title) for p in posts]


@strawberry.type
class Query:
    posts: list[PostType] = strawberry.field(resolver=resolve_posts)


schema = strawberry.Schema(query=Query)
