from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    false,
    or_,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from custom_search import config
from custom_search.predicates import PAGE_SIZE
from custom_search.schemas import PUBLISHED_STATUS, EmptyPredicate, SearchPredicate

engine = None
SessionLocal = None
Base = declarative_base()


class Post(Base):
    __tablename__ = "posts"
    id = Column(Integer, primary_key=True)
    post_type = Column(String(20), nullable=False, default="post")
    post_title = Column(Text, nullable=False, default="")
    post_content = Column(Text, nullable=False, default="")
    post_status = Column(String(20), nullable=False, default=PUBLISHED_STATUS)
    post_date = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    __table_args__ = (
        Index("idx_post_type_status_date", post_type, post_status, post_date),
    )


class SearchFormRecord(Base):
    __tablename__ = "search_forms"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False, default="")
    # NULL when the form has no selection of its own.
    selected_post_types = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))


class Option(Base):
    __tablename__ = "options"
    name = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)


@asynccontextmanager
async def get_session():
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def async_drop_db(db_engine=None):
    if db_engine is None:
        db_engine = engine
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def init_db(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def create_post(session: AsyncSession, **post_data) -> Post:
    """
    Create a post. Title, content, type and status fall back to the column
    defaults, so a published "post" with empty text.
    """
    post = Post(**post_data)
    session.add(post)
    await session.flush()
    return post


def predicate_clause(predicate: SearchPredicate | EmptyPredicate):
    """Compile a search predicate into a WHERE clause with bound parameters."""
    if isinstance(predicate, EmptyPredicate):
        return false()

    clause = or_(
        Post.post_title.ilike(predicate.pattern, escape="\\"),
        Post.post_content.ilike(predicate.pattern, escape="\\"),
    ) & Post.post_type.in_(predicate.post_types)

    if predicate.published_only:
        clause = clause & (Post.post_status == PUBLISHED_STATUS)
    return clause


async def search_posts(
    session: AsyncSession,
    predicate: SearchPredicate | EmptyPredicate,
    limit: int = PAGE_SIZE,
    offset: int = 0,
) -> list[Post]:
    """Return one page of posts matching the predicate, newest first."""
    query = (
        select(Post)
        .where(predicate_clause(predicate))
        .order_by(Post.post_date.desc(), Post.id.desc())
        .limit(limit)
        .offset(offset)
    )
    result = await session.execute(query)
    return list(result.scalars())


def init_db_connection(database_url=None):
    """Initialize database connection."""
    global engine, SessionLocal

    if database_url is None:
        database_url = config.database_url()

    engine = create_async_engine(
        database_url,
        echo=config.echo_sql_queries(),
        # Bound values carry visitor search terms.
        hide_parameters=True,
        poolclass=NullPool
    )

    SessionLocal = sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession
    )

    return engine, SessionLocal
