"""
FastAPI dependencies shared by the routers.
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from selection_pipeline.db.session import get_db
from selection_pipeline.db.store import DataStore, SqlAlchemyDataStore
from selection_pipeline.services.notifications import NotificationSender, get_notification_sender


async def get_store(db: AsyncSession = Depends(get_db)) -> AsyncGenerator[DataStore, None]:
    """One data store per request, committed by get_db when the request ends."""
    yield SqlAlchemyDataStore(db)


def get_notifier() -> NotificationSender:
    return get_notification_sender()
