"""Participant registry: presence and liveness of the people in the room."""

import logging
from typing import Any, Optional

from .errors import ConflictError, NotFoundError, StoreError, ValidationError
from .models import (
    BROADCAST_TARGET,
    STATUS_JOINED,
    STATUS_LEFT,
    Participant,
    now_millis,
    status_message,
)
from .store import ChatStore

logger = logging.getLogger(__name__)


def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(
            "name is required",
            details=[{"field": "name", "message": "must be a non-empty string"}],
        )
    if name == BROADCAST_TARGET:
        raise ValidationError(
            f"'{BROADCAST_TARGET}' is reserved",
            details=[{"field": "name", "message": "reserved name"}],
        )
    return name


async def register(store: ChatStore, name: Any, now: Optional[int] = None) -> Participant:
    name = validate_name(name)
    now = now_millis() if now is None else now

    participant = Participant(name=name, last_status=now)
    if not await store.insert_participant(participant):
        raise ConflictError(name)

    await store.insert_message(status_message(name, STATUS_JOINED, now))
    logger.info("%s joined the room", name)
    return participant


async def list_participants(store: ChatStore) -> list[Participant]:
    return await store.list_participants()


async def heartbeat(store: ChatStore, name: Optional[str], now: Optional[int] = None) -> Participant:
    if not name:
        raise NotFoundError("Participant", name)
    now = now_millis() if now is None else now
    participant = await store.touch_participant(name, now)
    if participant is None:
        raise NotFoundError("Participant", name)
    return participant


async def sweep_expired(store: ChatStore, now: int, ttl: float) -> list[str]:
    """Remove every participant silent for longer than `ttl` seconds.

    Each removal posts a "left" status message. A store failure for one
    participant, of any kind, is logged and the rest of the batch still runs;
    it will be retried on the next sweep.
    """
    cutoff = now - int(ttl * 1000)
    removed = []
    for name in await store.expired_participants(cutoff):
        try:
            # a heartbeat since the lookup keeps the participant in
            if not await store.remove_participant(name, cutoff=cutoff):
                continue
            await store.insert_message(status_message(name, STATUS_LEFT, now))
        except StoreError as exc:
            logger.warning("Could not expire %s: %s", name, exc.message)
            continue
        except Exception as exc:
            logger.error("Unexpected error expiring %s: %s", name, exc, exc_info=True)
            continue
        logger.info("%s left the room", name)
        removed.append(name)
    return removed
