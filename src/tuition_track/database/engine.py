'''
Database Engine file.
1- Database: owns the Engine (TCP pool) and the AsyncSession factory bound to it.
   It is created by the app's lifespan and stored on `app.state.database`.
2- get_db_session: Dependency to create, yield and manage the life-cycle of a session.
'''
from typing import AsyncGenerator
from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base
from ..common.logger import log


class Database:
    """
    An explicitly constructed store handle. Nothing in the application
    reaches for a global engine; everything goes through this object.
    """
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self):
        """Creates every table that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("Database tables created (if missing).")

    async def dispose(self):
        await self.engine.dispose()
        log.info("Database engine disposed.")


def create_database(url: str) -> Database:
    """
    Creates the engine and session factory for the given URL.
    This is called by the app's lifespan event (and by the tests).
    """
    log.info("Creating database engine for URL...")
    try:
        if url.startswith("sqlite"):
            # In-memory SQLite must share one connection across sessions.
            engine = create_async_engine(
                url,
                echo=False,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            engine = create_async_engine(
                url,
                echo=False,
                pool_size=5,
                max_overflow=10,
                pool_timeout=30,
                pool_recycle=-1,
                pool_pre_ping=True
            )
        log.info("Async database engine and session factory created successfully.")
        return Database(engine)
    except Exception as e:
        log.critical(f"Failed to create async database engine: {e}", exc_info=True)
        raise


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. A session is created from the app's Database handle for each request.
    2. The session is yielded to the route.
    3. The session is committed if the request is successful.
    4. The session is rolled back if an exception occurs.
    5. The session is always closed after the request.
    """
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        log.error("Database handle is not initialized. App lifespan may not have run.")
        raise RuntimeError("Database session factory is not available.")

    session = database.session_factory()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        log.error(f"Database session rolled back due to error: {e}")
        raise
    finally:
        await session.close()
