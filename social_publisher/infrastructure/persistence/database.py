from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..logging import correlation_id, sweep_id
from .models import Base


def sql_trace_comment() -> str:
    """SQL comment naming the current request and sweep, empty outside both."""
    parts = [
        f"{name}={value}"
        for name, value in (("correlation_id", correlation_id.get()), ("sweep_id", sweep_id.get()))
        if value
    ]
    return f"/* {' '.join(parts)} */" if parts else ""


class Database:
    """Database connection manager."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self._engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        self._attach_trace_comment_hook()

    def _attach_trace_comment_hook(self) -> None:
        """Prefix SQL statements with the request or sweep ID as a comment."""

        @event.listens_for(self._engine.sync_engine, "before_cursor_execute", retval=True)
        def _inject_trace_comment(conn, cursor, statement, parameters, context, executemany):
            comment = sql_trace_comment()
            if comment:
                statement = f"{comment} {statement}"
            return statement, parameters

    async def create_tables(self) -> None:
        """Create all tables (for development only)."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        """Create a new session."""
        return self._session_factory()

    async def close(self) -> None:
        """Close the database connection."""
        await self._engine.dispose()
