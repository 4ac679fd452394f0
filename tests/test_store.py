import pytest

from hotshot.core.errors import DuplicateError, ValidationError
from hotshot.models import Option, Question, Room
from hotshot.services.change_feed import INSERT, UPDATE


async def make_question(store) -> Question:
    room = await store.insert(Room(name="Room", host_session="h"))
    return await store.insert(Question(room_id=room.id, text="Q?", order_index=1))


async def test_insert_publishes_after_commit(store, feed):
    sub = feed.subscribe("rooms")
    room = await store.insert(Room(name="Room", host_session="h"))

    [event] = sub.drain()
    assert event.event == INSERT
    assert event.record["id"] == room.id
    assert (await store.get(Room, room.id)).name == "Room"


async def test_atomic_rollback_discards_writes_and_events(store, feed):
    sub = feed.subscribe("rooms")
    with pytest.raises(ValidationError):
        async with store.atomic() as tx:
            await tx.insert(Room(name="Ghost", host_session="h"))
            raise ValidationError("abort")

    assert sub.drain() == []
    assert await store.count(Room) == 0


async def test_unique_violation_raises_duplicate(store):
    question = await make_question(store)
    await store.insert(Option(question_id=question.id, text="Blue", normalized_text="blue"))

    with pytest.raises(DuplicateError):
        await store.insert(Option(question_id=question.id, text="BLUE", normalized_text="blue"))
    assert await store.count(Option, question_id=question.id) == 1


async def test_increment_is_applied_in_the_database(store, feed):
    question = await make_question(store)
    option = await store.insert(Option(question_id=question.id, text="Blue", normalized_text="blue"))
    sub = feed.subscribe("options", question_id=question.id)

    for _ in range(3):
        [option] = await store.increment(Option, "votes_count", id=option.id)

    assert option.votes_count == 3
    assert [e.event for e in sub.drain()] == [UPDATE, UPDATE, UPDATE]
    assert (await store.get(Option, option.id)).votes_count == 3


async def test_update_returns_matching_rows(store):
    room = await store.insert(Room(name="Room", host_session="h"))
    for index in (1, 2, 3):
        await store.insert(Question(room_id=room.id, text=f"Q{index}", order_index=index))

    updated = await store.update(Question, {"text": "changed"}, room_id=room.id, order_index=[1, 3])

    assert sorted(q.order_index for q in updated) == [1, 3]
    texts = [q.text for q in await store.select(Question, order_by=(Question.order_index,), room_id=room.id)]
    assert texts == ["changed", "Q2", "changed"]
    assert await store.max(Question, "order_index", room_id=room.id) == 3


async def test_increment_uses_the_sqlmodel_exec_api(store, recwarn):
    question = await make_question(store)
    option = await store.insert(Option(question_id=question.id, text="Blue", normalized_text="blue"))

    await store.increment(Option, "votes_count", id=option.id)

    assert not [w for w in recwarn if "session.exec" in str(w.message)]
