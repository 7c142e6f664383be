"""Store adapter over the participants and messages tables.

All SQLAlchemy and driver I/O failures leave this module as StoreError,
after the session has been rolled back.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import and_, delete, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from .errors import StoreError
from .models import Message, MessageType, Participant

logger = logging.getLogger(__name__)


class ChatStore:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except (SQLAlchemyError, OSError) as exc:
                await session.rollback()
                logger.error("Store %s failed: %s", operation, exc)
                raise StoreError(operation, str(exc)) from exc

    # participants

    async def insert_participant(self, participant: Participant) -> bool:
        """Insert unless the name is taken. Returns False on a duplicate name."""
        async with self._session("insert_participant") as session:
            session.add(participant)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
            return True

    async def find_participant(self, name: str) -> Optional[Participant]:
        async with self._session("find_participant") as session:
            return await session.get(Participant, name)

    async def list_participants(self) -> list[Participant]:
        async with self._session("list_participants") as session:
            result = await session.execute(select(Participant))
            return list(result.scalars().all())

    async def touch_participant(self, name: str, millis: int) -> Optional[Participant]:
        """Move last_status forward to `millis`; never moves it back.

        Returns None when the participant is gone.
        """
        stmt = (
            update(Participant)
            .where(col(Participant.name) == name, col(Participant.last_status) < millis)
            .values(last_status=millis)
        )
        async with self._session("touch_participant") as session:
            await session.execute(stmt)
            await session.commit()
            return await session.get(Participant, name)

    async def expired_participants(self, cutoff: int) -> list[str]:
        async with self._session("expired_participants") as session:
            result = await session.execute(
                select(Participant.name).where(Participant.last_status < cutoff)
            )
            return list(result.scalars().all())

    async def remove_participant(self, name: str, cutoff: Optional[int] = None) -> bool:
        """Delete a participant; with `cutoff`, only if still older than it."""
        stmt = delete(Participant).where(col(Participant.name) == name)
        if cutoff is not None:
            stmt = stmt.where(col(Participant.last_status) < cutoff)
        async with self._session("remove_participant") as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    async def clear_participants(self) -> int:
        async with self._session("clear_participants") as session:
            result = await session.execute(delete(Participant))
            await session.commit()
            return result.rowcount

    # messages

    async def insert_message(self, message: Message) -> Message:
        async with self._session("insert_message") as session:
            session.add(message)
            await session.commit()
            await session.refresh(message)
            return message

    async def visible_messages(
        self, viewer: Optional[str], limit: Optional[int] = None
    ) -> list[Message]:
        """Public messages plus private ones sent to or by `viewer`, oldest first.

        With `limit`, only the newest `limit` of those are returned.
        """
        visible = col(Message.type) == MessageType.PUBLIC.value
        if viewer is not None:
            visible = or_(
                visible,
                and_(
                    col(Message.type) == MessageType.PRIVATE.value,
                    or_(col(Message.to) == viewer, col(Message.sender) == viewer),
                ),
            )
        stmt = select(Message).where(visible)
        if limit is not None:
            stmt = stmt.order_by(col(Message.id).desc()).limit(limit)
        else:
            stmt = stmt.order_by(col(Message.id))
        async with self._session("visible_messages") as session:
            result = await session.execute(stmt)
            messages = list(result.scalars().all())
        if limit is not None:
            messages.reverse()
        return messages

    async def all_messages(self) -> list[Message]:
        async with self._session("all_messages") as session:
            result = await session.execute(select(Message).order_by(col(Message.id)))
            return list(result.scalars().all())
