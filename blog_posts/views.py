# blog_posts/views.py
from html import escape

from blog_posts.fetch_state import Empty, Failure, FetchState, Loading, Success


def render_loading() -> str:
    return "<div>Loading posts...</div>"


def render_empty() -> str:
    return "<div>No posts yet!</div>"


def render_failure(message: str) -> str:
    return f"<div>Error: {escape(message)}</div>"


def render_success(state: Success) -> str:
    items = "".join(f"<li>{escape(post.title)}</li>" for post in state.posts)
    return f"<ul>{items}</ul>"


def select_view(state: FetchState) -> str:
    """Renders exactly one branch for the given lifecycle state."""
    if isinstance(state, Loading):
        return render_loading()
    if isinstance(state, Empty):
        return render_empty()
    if isinstance(state, Failure):
        return render_failure(state.message)
    if isinstance(state, Success):
        return render_success(state)
    raise TypeError(f"Unknown fetch state: {type(state).__name__}")
