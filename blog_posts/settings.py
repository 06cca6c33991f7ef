import os
from typing import NamedTuple

import dotenv

dotenv.load_dotenv()

DEFAULT_CORS_ORIGINS = (
    "http://localhost:4200",
    "http://localhost:8080",
    "http://localhost:8910",
    "http://127.0.0.1:4200",
    "http://127.0.0.1:8080",
    "http://127.0.0.1:8910",
)


class Settings(NamedTuple):
    db_url: str
    page_size: int  # store page size for index matches
    cors_origins: tuple[str, ...]
    log_level: str
    graphql_url: str | None  # remote endpoint, None means in-process store


def load_settings() -> Settings:
    """
    Reads settings from the environment (and .env, if present).

    Example .env:
    DB_URL=sqlite+aiosqlite:///./app.db
    POSTS_PAGE_SIZE=64
    CORS_ORIGINS=http://localhost:8910,http://127.0.0.1:8910
    LOG_LEVEL=DEBUG
    """
    raw_origins = os.environ.get("CORS_ORIGINS")
    if raw_origins:
        origins = tuple(o.strip() for o in raw_origins.split(",") if o.strip())
    else:
        origins = DEFAULT_CORS_ORIGINS

    page_size = int(os.environ.get("POSTS_PAGE_SIZE", "64"))
    if page_size < 1:
        raise ValueError(f"POSTS_PAGE_SIZE must be positive, got {page_size}")

    return Settings(
        db_url=os.environ.get("DB_URL", "sqlite+aiosqlite:///./app.db"),
        page_size=page_size,
        cors_origins=origins,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        graphql_url=os.environ.get("POSTS_GRAPHQL_URL") or None,
    )


settings = load_settings()
