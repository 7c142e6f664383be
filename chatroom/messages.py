"""Message log: posting and per-viewer reads."""

import logging
from typing import Any, Optional

from .errors import NotFoundError, ValidationError
from .models import POSTABLE_TYPES, Message, clock_time, now_millis
from .store import ChatStore

logger = logging.getLogger(__name__)


def _required_text(field: str, value: Any) -> dict | None:
    if not isinstance(value, str) or not value.strip():
        return {"field": field, "message": "must be a non-empty string"}
    return None


def validate_message(to: Any, text: Any, type: Any) -> None:
    problems = [
        problem
        for problem in (_required_text("to", to), _required_text("text", text))
        if problem
    ]
    if type not in POSTABLE_TYPES:
        problems.append(
            {"field": "type", "message": f"must be one of {', '.join(POSTABLE_TYPES)}"}
        )
    if problems:
        raise ValidationError("Invalid message", details=problems)


def parse_limit(raw: Any) -> Optional[int]:
    """Turn the `limit` query value into a positive int, or None when absent."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValidationError("limit must be a positive integer")
    if isinstance(raw, str):
        raw = raw.strip()
        # plain ASCII digits only: no sign, underscores or other scripts
        if not (raw.isascii() and raw.isdigit()):
            raise ValidationError("limit must be a positive integer")
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("limit must be a positive integer") from None
    if isinstance(raw, float) and raw != limit:
        raise ValidationError("limit must be a positive integer")
    if limit <= 0:
        raise ValidationError("limit must be a positive integer")
    return limit


async def post(
    store: ChatStore,
    sender: Optional[str],
    to: Any,
    text: Any,
    type: Any,
    now: Optional[int] = None,
) -> Message:
    validate_message(to, text, type)
    if not sender or await store.find_participant(sender) is None:
        raise NotFoundError("Participant", sender)

    now = now_millis() if now is None else now
    message = Message(sender=sender, to=to, text=text, type=type, time=clock_time(now))
    message = await store.insert_message(message)
    logger.debug("%s posted a %s to %s", sender, type, to)
    return message


async def list_messages(store: ChatStore, viewer: Optional[str], limit: Any = None) -> list[Message]:
    limit = parse_limit(limit)
    return await store.visible_messages(viewer, limit)
