from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine.url import make_url

from .config import DATABASE_URL, DATABASE_ECHO


def build_engine(database_url: str, echo: bool = False):
    url = make_url(database_url)
    # only SQLite needs that arg
    opts = {"check_same_thread": False} if url.drivername.startswith("sqlite") else {}
    return create_async_engine(database_url, echo=echo, connect_args=opts)


def build_session_factory(bind, class_=AsyncSession):
    return sessionmaker(bind, class_=class_, expire_on_commit=False)


# Async engine (aiosqlite locally, asyncpg in production)
engine = build_engine(DATABASE_URL, echo=DATABASE_ECHO)
# Async session factory
async_session = build_session_factory(engine)


# Initialize DB (to call on startup)
async def init_db(bind=None):
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
