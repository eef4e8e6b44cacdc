"""
Async bridge for dramatiq actors.

Dramatiq runs actors on plain worker threads. Each thread drives its own
event loop, and each task opens a short-lived engine on that loop, so pooled
asyncpg connections are never shared between loops.
"""

import asyncio
import threading
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from backoffice.config.settings import settings

T = TypeVar("T")

# One loop per worker thread
_thread_local = threading.local()


def get_event_loop() -> asyncio.AbstractEventLoop:
    """Get this worker thread's event loop, creating it on first use."""
    loop: asyncio.AbstractEventLoop | None = getattr(_thread_local, "loop", None)
    if loop is not None and not loop.is_closed():
        return loop

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    _thread_local.loop = loop
    logger.debug(
        f"Worker thread {threading.current_thread().name} started an event loop"
    )
    return loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Drive a coroutine to completion on the thread's loop.

    Args:
        coro: Task body

    Returns:
        Whatever the coroutine returns
    """
    return get_event_loop().run_until_complete(coro)


@asynccontextmanager
async def create_local_session() -> AsyncIterator[AsyncSession]:
    """
    Open a session on an engine owned by this task.

    NullPool keeps no connection alive after the block, and the engine is
    disposed on exit.

    Usage:
        async with create_local_session() as session:
            await CommissionEngine(session).calculate(order_id)

    Yields:
        AsyncSession configured like the application session maker
    """
    task_engine = create_async_engine(settings.database_url, poolclass=NullPool)
    session_maker = async_sessionmaker(
        task_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        async with session_maker() as session:
            yield session
    finally:
        await task_engine.dispose()
