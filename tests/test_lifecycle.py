import pytest

from hotshot.core.errors import DuplicateError, NotFoundError, StateError, ValidationError
from hotshot.models import Player, Question, QuestionStatus, RoomStatus
from hotshot.services.store import RoomStore

HOST = "host-token"


async def open_count(store, room_id: str) -> int:
    return await store.count(Question, room_id=room_id, status=QuestionStatus.OPEN)


async def test_create_room_starts_as_draft(lifecycle):
    room = await lifecycle.create_room("  Trivia Night ", HOST)
    assert room.status == RoomStatus.DRAFT
    assert room.name == "Trivia Night"
    assert room.host_session == HOST
    assert lifecycle.is_host(room, HOST)
    assert not lifecycle.is_host(room, "someone-else")
    assert not lifecycle.is_host(room, None)


async def test_create_room_rejects_blank_name(lifecycle):
    with pytest.raises(ValidationError):
        await lifecycle.create_room("   ", HOST)


async def test_unknown_room(lifecycle):
    with pytest.raises(NotFoundError):
        await lifecycle.get_room("missing")


async def test_publish_requires_a_question(lifecycle):
    room = await lifecycle.create_room("Room", HOST)
    with pytest.raises(ValidationError):
        await lifecycle.publish_room(room.id)

    await lifecycle.add_question(room.id, "Q?", 5)
    room = await lifecycle.publish_room(room.id)
    assert room.status == RoomStatus.LIVE

    with pytest.raises(StateError):
        await lifecycle.publish_room(room.id)


async def test_add_question_assigns_increasing_order(lifecycle, settings):
    room = await lifecycle.create_room("Room", HOST)
    first = await lifecycle.add_question(room.id, "One", 5)
    second = await lifecycle.add_question(room.id, "Two")
    third = await lifecycle.add_question(room.id, "Three", 15)

    assert [first.order_index, second.order_index, third.order_index] == [1, 2, 3]
    assert second.max_options == settings.default_max_options
    assert all(q.status == QuestionStatus.CLOSED for q in (first, second, third))
    assert [q.text for q in await lifecycle.list_questions(room.id)] == ["One", "Two", "Three"]


@pytest.mark.parametrize("text, max_options", [("", 5), ("  ", 5), ("Q?", 0), ("Q?", 51)])
async def test_add_question_validation(lifecycle, text, max_options):
    room = await lifecycle.create_room("Room", HOST)
    with pytest.raises(ValidationError):
        await lifecycle.add_question(room.id, text, max_options)


async def test_open_question_requires_live_room(lifecycle):
    room = await lifecycle.create_room("Room", HOST)
    question = await lifecycle.add_question(room.id, "Q?", 5)
    with pytest.raises(StateError):
        await lifecycle.open_question(room.id, question.id)


async def test_only_one_question_is_open_at_a_time(lifecycle, store):
    room = await lifecycle.create_room("Room", HOST)
    questions = [await lifecycle.add_question(room.id, f"Q{i}", 5) for i in range(3)]
    await lifecycle.publish_room(room.id)

    for question in questions + questions[::-1]:
        opened = await lifecycle.open_question(room.id, question.id)
        assert opened.status == QuestionStatus.OPEN
        assert await open_count(store, room.id) == 1
        assert (await lifecycle.active_question(room.id)).id == question.id


async def test_reopening_the_open_question_is_a_noop(lifecycle, store, live_room):
    room, question = live_room
    again = await lifecycle.open_question(room.id, question.id)
    assert again.id == question.id
    assert await open_count(store, room.id) == 1


async def test_database_rejects_a_second_open_question(lifecycle, store, live_room):
    room, _ = live_room
    other = await lifecycle.add_question(room.id, "Another?", 5)
    with pytest.raises(DuplicateError):
        await store.update(Question, {"status": QuestionStatus.OPEN}, id=other.id)
    assert await open_count(store, room.id) == 1


async def test_open_racing_another_open_raises_state_error(lifecycle, voting, store, live_room, monkeypatch):
    room, question = live_room
    follow_up = await lifecycle.add_question(room.id, "Best animal?", 5)
    await voting.join(room.id, "alice", "Alice")
    await voting.propose_and_vote(room.id, "alice", question.id, "Blue")
    update = RoomStore.update

    async def update_missing_open_rows(self, model, values, **filters):
        # The open question was committed after this transaction looked for it
        if filters.get("status") == QuestionStatus.OPEN:
            return []
        return await update(self, model, values, **filters)

    monkeypatch.setattr(RoomStore, "update", update_missing_open_rows)
    with pytest.raises(StateError):
        await lifecycle.open_question(room.id, follow_up.id)
    monkeypatch.undo()

    assert [q.id for q in await store.select(Question, room_id=room.id, status=QuestionStatus.OPEN)] == [question.id]
    assert (await voting.find_player(room.id, "alice")).has_voted is True


async def test_opening_a_question_resets_players(lifecycle, voting, store, live_room):
    room, question = live_room
    await voting.join(room.id, "alice", "Alice")
    await voting.propose_and_vote(room.id, "alice", question.id, "Blue")
    assert (await voting.find_player(room.id, "alice")).has_voted

    follow_up = await lifecycle.add_question(room.id, "Best animal?", 5)
    await lifecycle.open_question(room.id, follow_up.id)

    player = await voting.find_player(room.id, "alice")
    assert player.has_voted is False
    assert player.current_question_id is None
    assert await store.count(Player, room_id=room.id, has_voted=True) == 0


async def test_close_question_aggregates_results(lifecycle, voting, live_room):
    room, question = live_room
    await voting.join(room.id, "alice", "Alice")
    await voting.join(room.id, "bob", "Bob")
    blue = await voting.propose_and_vote(room.id, "alice", question.id, "Blue")
    await voting.vote(room.id, "bob", question.id, blue.id)

    results = await lifecycle.close_question(room.id, question.id)

    assert results.question.status == QuestionStatus.CLOSED
    assert results.total_votes == 2
    assert [(o.text, o.votes_count) for o in results.options] == [("Blue", 2)]
    assert [(r.player, r.option) for r in results.rows] == [("Alice", "Blue"), ("Bob", "Blue")]
    assert await lifecycle.active_question(room.id) is None


async def test_question_from_another_room_is_not_found(lifecycle, live_room):
    _, question = live_room
    other = await lifecycle.create_room("Other", HOST)
    with pytest.raises(NotFoundError):
        await lifecycle.close_question(other.id, question.id)
