"""PostgreSQL storage of feed items and groups."""

from __future__ import annotations

import os
from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    false,
    insert,
    select,
    update,
)
from sqlalchemy.engine import URL, Engine

from .feed import FeedItem

if TYPE_CHECKING:
    from .group import Group

DATABASE_NAME = "newagregator"

_ID = BigInteger().with_variant(Integer(), "sqlite")

metadata = MetaData()

feed = Table(
    "feed",
    metadata,
    Column("id", _ID, primary_key=True),
    Column("md5", String),
    Column("time", DateTime(timezone=True)),
    Column("source_name", String),
    Column("parsed", Boolean),
    Column("title", Text),
    Column("description", Text),
    Column("full_text", Text),
    Column("link", String),
    Column("enclosure", String),
    Column("category", String, nullable=True),
)

groups = Table(
    "groups",
    metadata,
    Column("id", _ID, primary_key=True),
    Column("time", DateTime(timezone=True)),
    Column("feed_id", BigInteger),
    Column("is_rt", Boolean),
    Column("embedding", Text),
)

compares = Table(
    "compares",
    metadata,
    Column("group_id", BigInteger),
    Column("feed_id", BigInteger),
)

rt_words = Table(
    "rt_words",
    metadata,
    Column("word", String),
)


def connection_url() -> URL:
    """Database URL built from the ``DB_*`` environment variables."""
    port = os.environ.get("DB_PORT", "")
    password = os.environ.get("DB_PASSWORD") or None
    return URL.create(
        "postgresql",
        username=os.environ.get("DB_LOGIN") or None,
        password=password,
        host=os.environ.get("DB_HOST") or None,
        port=int(port) if port else None,
        database=DATABASE_NAME,
        query={"sslmode": "disable"},
    )


class Database:
    """Queries used by the group maker."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def connect(cls, max_connections: int) -> Database:
        """Open a pool of at most ``max_connections`` connections and check it."""
        idle = max(max_connections // 2, 1)
        engine = create_engine(
            connection_url(),
            pool_size=idle,
            max_overflow=max(max_connections - idle, 0),
            pool_recycle=300,
        )
        with engine.connect():
            pass
        return cls(engine)

    def update_parsed_batch(self, ids: Iterable[int], parsed: bool) -> None:
        with self._engine.begin() as conn:
            conn.execute(update(feed).where(feed.c.id.in_(list(ids))).values(parsed=parsed))

    def get(self) -> list[FeedItem]:
        """Unparsed feed items, newest id first."""
        query = select(feed).where(feed.c.parsed == false()).order_by(feed.c.id.desc())
        with self._engine.connect() as conn:
            return [FeedItem.from_row(row) for row in conn.execute(query)]

    def update_parsed(self, feed_id: int, parsed: bool) -> None:
        with self._engine.begin() as conn:
            conn.execute(update(feed).where(feed.c.id == feed_id).values(parsed=parsed))

    def insert(self, group: Group) -> int:
        """Store a new group and return its id."""
        statement = (
            insert(groups)
            .values(
                time=group.date,
                feed_id=group.content_id,
                is_rt=group.is_tatarstan(),
                embedding=group.centroid().to_pq_string(),
            )
            .returning(groups.c.id)
        )
        with self._engine.begin() as conn:
            return int(conn.execute(statement).scalar_one())

    def insert_compares(self, group_id: int, compare_id: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(insert(compares).values(group_id=group_id, feed_id=compare_id))

    def update_date(self, group_id: int, date: datetime, feed_id: int) -> None:
        """Point the group at its newest feed item."""
        with self._engine.begin() as conn:
            conn.execute(update(groups).where(groups.c.id == group_id).values(feed_id=feed_id))

    def update_rt(self, group_id: int, is_rt: bool) -> None:
        with self._engine.begin() as conn:
            conn.execute(update(groups).where(groups.c.id == group_id).values(is_rt=is_rt))

    def get_rt_words(self) -> list[str]:
        with self._engine.connect() as conn:
            return [row.word for row in conn.execute(select(rt_words.c.word))]

    def update_embedding(self, group_id: int, pq_vec: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                update(groups).where(groups.c.id == group_id).values(embedding=pq_vec)
            )