import pytest

from chatroom import messages, participants
from chatroom.errors import NotFoundError, ValidationError
from chatroom.models import MessageType


@pytest.fixture
async def room(store):
    for name in ("Ana", "Bob", "Carol"):
        await participants.register(store, name)
    return store


def texts(items):
    return [m.text for m in items]


async def test_post_public_message(room):
    message = await messages.post(room, "Ana", "Todos", "hi", "message", now=0)

    assert message.id is not None
    assert message.sender == "Ana"
    assert message.type == MessageType.PUBLIC.value
    assert len(message.time) == 8


@pytest.mark.parametrize(
    "to, text, type",
    [
        (None, "hi", "message"),
        ("Todos", "", "message"),
        ("Todos", "hi", None),
        ("Todos", "hi", "status"),
        ("Todos", "hi", "shout"),
    ],
)
async def test_post_rejects_invalid_message(room, to, text, type):
    before = len(await room.all_messages())

    with pytest.raises(ValidationError):
        await messages.post(room, "Ana", to, text, type)

    assert len(await room.all_messages()) == before


async def test_post_from_unregistered_sender(room):
    before = len(await room.all_messages())

    with pytest.raises(NotFoundError):
        await messages.post(room, "Ghost", "Todos", "boo", "message")

    assert len(await room.all_messages()) == before


async def test_post_private_to_absent_recipient_is_allowed(room):
    message = await messages.post(room, "Ana", "Nobody", "hello?", "private_message")
    assert message.to == "Nobody"


async def test_public_messages_visible_to_everyone(room):
    await messages.post(room, "Ana", "Todos", "hi", "message")

    for viewer in ("Ana", "Bob", "Carol", "Stranger", None):
        assert texts(await messages.list_messages(room, viewer)) == ["hi"]


async def test_private_messages_visible_only_to_sender_and_recipient(room):
    await messages.post(room, "Ana", "Bob", "secret", "private_message")

    assert texts(await messages.list_messages(room, "Ana")) == ["secret"]
    assert texts(await messages.list_messages(room, "Bob")) == ["secret"]
    assert texts(await messages.list_messages(room, "Carol")) == []
    assert texts(await messages.list_messages(room, None)) == []


async def test_status_messages_are_not_listed(room):
    assert len(await room.all_messages()) == 3
    assert await messages.list_messages(room, "Ana") == []


async def test_list_keeps_insertion_order(room):
    await messages.post(room, "Ana", "Todos", "one", "message")
    await messages.post(room, "Bob", "Ana", "two", "private_message")
    await messages.post(room, "Carol", "Bob", "hidden", "private_message")
    await messages.post(room, "Bob", "Todos", "three", "message")

    assert texts(await messages.list_messages(room, "Ana")) == ["one", "two", "three"]
    assert texts(await messages.list_messages(room, "Carol")) == ["one", "hidden", "three"]


async def test_limit_returns_tail_of_visible_messages(room):
    await messages.post(room, "Ana", "Todos", "one", "message")
    await messages.post(room, "Carol", "Bob", "hidden", "private_message")
    await messages.post(room, "Bob", "Todos", "two", "message")
    await messages.post(room, "Bob", "Ana", "three", "private_message")

    assert texts(await messages.list_messages(room, "Ana", "2")) == ["two", "three"]
    assert texts(await messages.list_messages(room, "Ana", 10)) == ["one", "two", "three"]


@pytest.mark.parametrize("raw, expected", [(None, None), ("1", 1), (" 25 ", 25), (7, 7)])
def test_parse_limit_accepts_positive_integers(raw, expected):
    assert messages.parse_limit(raw) == expected


@pytest.mark.parametrize(
    "raw", ["0", "-3", "abc", "", "2.5", "1_0", "+3", "\u0663", 0, -1, 2.5, True]
)
def test_parse_limit_rejects_invalid_values(raw):
    with pytest.raises(ValidationError):
        messages.parse_limit(raw)
