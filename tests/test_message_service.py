import pytest

from edubridge.repositories.message_repository import MessageGroupRepository, MessageRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.message import GroupCreate, MessageCreate
from edubridge.services.message_service import MessageService
from edubridge.utils.errors import ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def service(db):
    return MessageService(MessageRepository(db), MessageGroupRepository(db), UserRepository(db))


@pytest.fixture
async def people(make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    carol = await make_user("Carol")
    return alice["_id"], bob["_id"], carol["_id"]


async def read_flags(db, sender_id, receiver_id):
    cur = db["messages"].find({"sender_id": sender_id, "receiver_id": receiver_id})
    return [doc["is_read"] async for doc in cur]


async def test_mark_read_only_flips_partner_messages(db, service, people):
    alice, bob, _ = people
    await service.send_message(alice, MessageCreate(content="hi bob", receiver_id=bob))
    await service.send_message(bob, MessageCreate(content="hi alice", receiver_id=alice))
    await service.send_message(bob, MessageCreate(content="you there?", receiver_id=alice))

    updated = await service.mark_read(alice, bob)

    assert updated == 2
    assert await read_flags(db, bob, alice) == [True, True]
    assert await read_flags(db, alice, bob) == [False]


async def test_mark_read_is_idempotent(db, service, people):
    alice, bob, _ = people
    await service.send_message(bob, MessageCreate(content="ping", receiver_id=alice))

    assert await service.mark_read(alice, bob) == 1
    first = await read_flags(db, bob, alice)
    assert await service.mark_read(alice, bob) == 0
    assert await read_flags(db, bob, alice) == first


async def test_open_thread_returns_ascending_and_marks_read(db, service, people):
    alice, bob, carol = people
    await service.send_message(bob, MessageCreate(content="one", receiver_id=alice))
    await service.send_message(alice, MessageCreate(content="two", receiver_id=bob))
    await service.send_message(carol, MessageCreate(content="other thread", receiver_id=alice))

    thread = await service.open_thread(alice, bob)

    assert [m.content for m in thread] == ["one", "two"]
    assert thread[0].sender.name == "Bob"
    assert await service.unread_total(alice) == 1


async def test_conversations_and_unread(service, people):
    alice, bob, carol = people
    await service.send_message(alice, MessageCreate(content="a->b", receiver_id=bob))
    await service.send_message(bob, MessageCreate(content="b->a", receiver_id=alice))
    await service.send_message(carol, MessageCreate(content="c->a 1", receiver_id=alice))
    await service.send_message(carol, MessageCreate(content="c->a 2", receiver_id=alice))

    conversations = {c.partner_id: c for c in await service.list_conversations(alice)}

    assert set(conversations) == {bob, carol}
    assert conversations[bob].unread_count == 1
    assert conversations[bob].last_message.content == "b->a"
    assert conversations[carol].unread_count == 2
    assert conversations[carol].partner.name == "Carol"


async def test_conversation_with_deleted_user_is_skipped(db, service, people):
    alice, bob, carol = people
    await service.send_message(alice, MessageCreate(content="hello", receiver_id=bob))
    await service.send_message(alice, MessageCreate(content="hello", receiver_id=carol))
    await UserRepository(db).delete_by_id(carol)

    conversations = await service.list_conversations(alice)

    assert [c.partner_id for c in conversations] == [bob]


async def test_send_to_unknown_receiver(service, people):
    alice, _, _ = people
    with pytest.raises(NotFoundError):
        await service.send_message(alice, MessageCreate(content="x", receiver_id="65a000000000000000000000"))


async def test_send_to_self_rejected(service, people):
    alice, _, _ = people
    with pytest.raises(ValidationError):
        await service.send_message(alice, MessageCreate(content="x", receiver_id=alice))


async def test_group_flow(service, people):
    alice, bob, carol = people
    group = await service.create_group(alice, GroupCreate(name="Study", member_ids=[bob, bob]))

    assert group.member_ids == [alice, bob]
    assert group.member_count == 2

    await service.send_message(bob, MessageCreate(content="group hello", group_id=group.id))
    messages = await service.group_messages(alice, group.id)
    assert [m.content for m in messages] == ["group hello"]

    with pytest.raises(ForbiddenError):
        await service.send_message(carol, MessageCreate(content="let me in", group_id=group.id))
    with pytest.raises(ForbiddenError):
        await service.group_messages(carol, group.id)

    groups = await service.list_groups(bob)
    assert groups[0].last_message.content == "group hello"

    # group traffic never shows up as a direct conversation
    assert await service.list_conversations(alice) == []


async def test_inbox_contains_both_kinds(service, people):
    alice, bob, carol = people
    group = await service.create_group(alice, GroupCreate(name="Team", member_ids=[carol]))
    await service.send_message(bob, MessageCreate(content="direct", receiver_id=alice))
    await service.send_message(carol, MessageCreate(content="in group", group_id=group.id))

    inbox = await service.inbox(alice)

    assert {(e.kind, e.id) for e in inbox} == {("direct", bob), ("group", group.id)}
    direct = next(e for e in inbox if e.kind == "direct")
    assert direct.unread_count == 1
    assert direct.name == "Bob"


async def test_create_group_with_unknown_member(service, people):
    alice, _, _ = people
    with pytest.raises(NotFoundError):
        await service.create_group(alice, GroupCreate(name="Ghosts", member_ids=["65a000000000000000000000"]))
