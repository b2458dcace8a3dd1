import contextlib
import sys
from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from guestlist.config.settings import settings
from guestlist.errors import StoreUnavailableError


def _begin_immediate(engine: AsyncEngine) -> None:
    # pysqlite defers BEGIN until the first DML statement, which lets two
    # writers hold SHARED locks and deadlock on promotion. Take the write lock
    # up front instead.
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(url: str) -> AsyncEngine:
    url = str(url)
    use_echo = settings.LOG_DB
    if "sqlite" in url:
        engine = create_async_engine(
            url,
            echo=use_echo,
            connect_args={"timeout": 15},
            poolclass=NullPool,
        )
        _begin_immediate(engine)
        return engine
    return create_async_engine(url, echo=use_echo, pool_pre_ping=True)


def generate_test_db_dsn(dsn: str) -> str:
    part_dsn, db_name = str(dsn).rsplit("/", 1)
    return f"{part_dsn}/test_{db_name}"


engine = create_engine(settings.database_url)
if "pytest" in sys.modules:
    # point the engine at the testing database
    engine = create_engine(generate_test_db_dsn(settings.database_url))


async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


@contextlib.asynccontextmanager
async def async_session_manager(
    auto_commit=True, session_overwrite: AsyncSession | None = None
) -> AsyncIterator[AsyncSession]:
    if session_overwrite:
        yield session_overwrite
    else:
        async with async_session_maker() as session:
            try:
                yield session
                if auto_commit:
                    await session.commit()
            except (OperationalError, InterfaceError) as e:
                await session.rollback()
                raise StoreUnavailableError(str(e.orig or e)) from e
            except Exception as e:
                await session.rollback()
                raise e
