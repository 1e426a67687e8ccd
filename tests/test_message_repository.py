import pytest

from roomchat.errors import ValidationError
from roomchat.repositories.message_repository import MessageRepository
from roomchat.repositories.room_repository import RoomRepository


@pytest.fixture
async def room_with_messages(db, make_user):
    alice_id = await make_user("alice")
    room_id = (await RoomRepository(db).create_room("Team", alice_id)).id
    repo = MessageRepository(db)
    for i in range(7):
        await repo.append(room_id, alice_id, f"message {i}")
    return room_id


async def test_append_returns_message_with_sender(db, make_user):
    alice_id = await make_user("alice")
    room_id = (await RoomRepository(db).create_room("Team", alice_id)).id

    message = await MessageRepository(db).append(room_id, alice_id, "hi")

    assert message.body == "hi"
    assert message.sender.username == "alice"
    assert message.sent_at is not None


async def test_first_window_is_most_recent_oldest_first(db, room_with_messages):
    window = await MessageRepository(db).read_window(room_with_messages, 0, 3)

    assert [m.body for m in window] == ["message 4", "message 5", "message 6"]


async def test_consecutive_windows_have_no_gap_or_overlap(db, room_with_messages):
    repo = MessageRepository(db)

    newest = await repo.read_window(room_with_messages, 0, 3)
    older = await repo.read_window(room_with_messages, 3, 3)
    oldest = await repo.read_window(room_with_messages, 6, 3)

    bodies = [m.body for m in oldest + older + newest]
    assert bodies == [f"message {i}" for i in range(7)]


async def test_window_is_scoped_to_room(db, make_user, room_with_messages):
    bob_id = await make_user("bobby")
    other_room = (await RoomRepository(db).create_room("Other", bob_id)).id

    assert await MessageRepository(db).read_window(other_room, 0, 10) == []


async def test_non_positive_limit_is_rejected(db, room_with_messages):
    with pytest.raises(ValidationError):
        await MessageRepository(db).read_window(room_with_messages, 0, 0)
