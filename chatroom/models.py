from datetime import datetime
from enum import Enum
from typing import Optional
import time

from sqlalchemy import Column, String
from sqlmodel import SQLModel, Field

# Reserved recipient meaning "everyone in the room"
BROADCAST_TARGET = "Todos"

STATUS_JOINED = "joined"
STATUS_LEFT = "left"


class MessageType(str, Enum):
    PUBLIC = "message"
    PRIVATE = "private_message"
    STATUS = "status"


# Types a participant is allowed to post; status messages are system-only
POSTABLE_TYPES = (MessageType.PUBLIC.value, MessageType.PRIVATE.value)


def now_millis() -> int:
    return int(time.time() * 1000)


def clock_time(millis: int) -> str:
    """Format an epoch-millis timestamp as the HH:MM:SS shown next to messages."""
    return datetime.fromtimestamp(millis / 1000).strftime("%H:%M:%S")


class Participant(SQLModel, table=True):
    __tablename__ = "participants"

    # primary key doubles as the uniqueness constraint on names
    name: str = Field(primary_key=True)
    last_status: int = Field(index=True)

    def to_public(self) -> dict:
        return {"name": self.name, "lastStatus": self.last_status}


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    sender: str = Field(sa_column=Column("from", String, nullable=False, index=True))
    to: str = Field(index=True)
    text: str
    type: str = Field(index=True)
    time: str

    def to_public(self) -> dict:
        return {
            "from": self.sender,
            "to": self.to,
            "text": self.text,
            "type": self.type,
            "time": self.time,
        }


def status_message(name: str, text: str, millis: int) -> Message:
    return Message(
        sender=name,
        to=BROADCAST_TARGET,
        text=text,
        type=MessageType.STATUS.value,
        time=clock_time(millis),
    )
