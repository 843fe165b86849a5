from sqlalchemy import BigInteger, Integer, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from event_manager.config.env import DATABASE_URL, DB_ECHO

Base = declarative_base()

# BIGINT keys on postgres; sqlite only autoincrements INTEGER PRIMARY KEY
BigIntId = BigInteger().with_variant(Integer, "sqlite")


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    # sqlite has no SELECT ... FOR UPDATE; take the write lock at BEGIN instead
    @event.listens_for(engine.sync_engine, "connect")
    def _configure_sqlite(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=echo, connect_args={"timeout": 30})
        _use_immediate_transactions(engine)
        return engine
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # keep loaded attributes readable after commit
        autoflush=False,
    )


if DATABASE_URL is None:
    raise ValueError("DATABASE_URL environment variable is not set")

engine = build_engine(DATABASE_URL, echo=DB_ECHO)
SessionLocal = build_sessionmaker(engine)
