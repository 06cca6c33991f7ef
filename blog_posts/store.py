import logging
from typing import Any, Callable, NamedTuple

from sqlalchemy import Index, Integer, Select, String, select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from blog_posts.settings import settings

logger = logging.getLogger(__name__)

# Database setup
engine = create_async_engine(
    settings.db_url,
    echo=False,
)
async_session = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


class PostRecord(Base):
    """A stored blog post. Only the title is ever read back out."""

    __tablename__ = "posts"

    __table_args__ = (Index("ix_posts_all_posts", "id", "title"),)

    # Surrogate key, gives the store its natural order and page cursors
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500))


class Page(NamedTuple):
    data: list[dict[str, Any]]
    after: int | None  # cursor for the next page, None on the last page


# --- Named indexes ---
# Each index maps a name to the statement that matches its records.
# Records come back in primary key order.
INDEXES: dict[str, Callable[[], Select]] = {
    "all_posts": lambda: select(PostRecord),
}


def _record_to_doc(record: PostRecord) -> dict[str, Any]:
    return {"ref": record.id, "title": record.title}


class StoreClient:
    """Read access to the document store through named indexes."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        page_size: int = settings.page_size,
    ):
        self.session_factory = session_factory
        self.page_size = page_size

    async def match_index(
        self, name: str, size: int | None = None, after: int | None = None
    ) -> Page:
        """
        Returns one page of the records matched by the index `name`.

        Pass the previous page's `after` to continue. Raises KeyError for
        an unknown index.
        """
        if name not in INDEXES:
            raise KeyError(f"Index '{name}' not found")
        size = size or self.page_size

        stmt = INDEXES[name]().order_by(PostRecord.id)
        if after is not None:
            stmt = stmt.where(PostRecord.id > after)
        # one extra row tells us whether another page exists
        stmt = stmt.limit(size + 1)

        async with self.session_factory() as session:
            rows = list((await session.execute(stmt)).scalars().all())

        has_more = len(rows) > size
        rows = rows[:size]
        next_cursor = rows[-1].id if has_more else None
        logger.debug(f"Index {name}: {len(rows)} records, after={next_cursor}")
        return Page(data=[_record_to_doc(r) for r in rows], after=next_cursor)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def add_posts(
    titles: list[str],
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """Seeds posts in the given order. Not exposed over HTTP."""
    factory = session_factory or async_session
    async with factory() as session:
        session.add_all([PostRecord(title=t) for t in titles])
        await session.commit()
