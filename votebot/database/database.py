from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from votebot.database.models import Base
from votebot.utils.logger import setup_logger


def to_async_url(database_url: str) -> str:
    """Convert a plain sqlite URL to its aiosqlite form"""
    if database_url.startswith('sqlite:///'):
        return database_url.replace('sqlite:///', 'sqlite+aiosqlite:///', 1)
    return database_url


class Database:
    def __init__(self, database_url: str, echo: bool = False):
        self.logger = setup_logger(__name__)
        self.database_url = to_async_url(database_url)
        self.echo = echo
        self.engine = None
        self.async_session: Optional[async_sessionmaker] = None
        
    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")
        
        self.engine = create_async_engine(
            self.database_url,
            echo=self.echo,
            future=True
        )
        
        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            
        self.logger.info("Database initialized successfully")
    
    @property
    def session_factory(self) -> async_sessionmaker:
        if self.async_session is None:
            raise RuntimeError("Database not initialized")
        return self.async_session
    
    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
    
    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.
        
        All operations within the context are committed together on success,
        or rolled back together on failure. Exceptions must be allowed to
        propagate out of the context for rollback to occur.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
    
    async def ping(self) -> bool:
        """Check that the database answers a trivial query"""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            self.logger.warning(f"Database ping failed: {e}")
            return False
    
    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")
