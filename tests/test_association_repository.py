from sqlalchemy import func, select

from roomchat.models import Association, AssociationKind
from roomchat.repositories.association_repository import AssociationRepository

FRIEND = AssociationKind.FRIEND
BLOCK = AssociationKind.BLOCK


def ids(users):
    return [u.id for u in users]


async def test_mutual_friend_requests_make_friends(db, make_user):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    repo = AssociationRepository(db)

    await repo.set(alice_id, bob_id, FRIEND)
    await repo.set(bob_id, alice_id, FRIEND)

    assert ids(await repo.friends(alice_id)) == [bob_id]
    assert ids(await repo.friends(bob_id)) == [alice_id]
    assert await repo.incoming_requests(alice_id) == []
    assert await repo.unaccepted_outgoing(alice_id) == []


async def test_one_sided_request_is_pending(db, make_user):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    repo = AssociationRepository(db)

    await repo.set(alice_id, bob_id, FRIEND)

    assert await repo.friends(alice_id) == []
    assert ids(await repo.unaccepted_outgoing(alice_id)) == [bob_id]
    assert ids(await repo.incoming_requests(bob_id)) == [alice_id]
    assert await repo.incoming_requests(alice_id) == []


async def test_set_overwrites_existing_kind(db, make_user):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    repo = AssociationRepository(db)

    await repo.set(alice_id, bob_id, FRIEND)
    await repo.set(alice_id, bob_id, BLOCK)

    rows = await db.execute(select(func.count(Association.id)))
    assert rows.scalar() == 1
    assert ids(await repo.blocked(alice_id)) == [bob_id]
    assert await repo.unaccepted_outgoing(alice_id) == []


async def test_remove_tolerates_missing_rows(db, make_user):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    repo = AssociationRepository(db)

    await repo.remove(alice_id, bob_id)
    await repo.set(alice_id, bob_id, BLOCK)
    await repo.remove(alice_id, bob_id)

    assert await repo.blocked(alice_id) == []


async def test_summary_groups_all_views(db, make_user):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    carol_id = await make_user("carol")
    dave_id = await make_user("david")
    repo = AssociationRepository(db)
    await repo.set(alice_id, bob_id, FRIEND)
    await repo.set(bob_id, alice_id, FRIEND)
    await repo.set(carol_id, alice_id, FRIEND)
    await repo.set(alice_id, dave_id, BLOCK)

    summary = await repo.summary(alice_id)

    assert ids(summary["friends"]) == [bob_id]
    assert ids(summary["incoming_requests"]) == [carol_id]
    assert summary["unaccepted_requests"] == []
    assert ids(summary["blocked"]) == [dave_id]


async def test_search_hides_users_who_blocked_the_searcher(db, make_user):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    await make_user("bobcat")
    repo = AssociationRepository(db)
    await repo.set(bob_id, alice_id, BLOCK)

    found = await repo.search(alice_id, "BOB")

    assert [u.username for u in found] == ["bobcat"]


async def test_search_does_not_hide_users_the_searcher_blocked(db, make_user):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    repo = AssociationRepository(db)
    await repo.set(alice_id, bob_id, BLOCK)

    assert ids(await repo.search(alice_id, "bob")) == [bob_id]


async def test_search_excludes_self_and_escapes_wildcards(db, make_user):
    alice_id = await make_user("alice")
    await make_user("alicia")
    repo = AssociationRepository(db)

    assert [u.username for u in await repo.search(alice_id, "ali")] == ["alicia"]
    assert await repo.search(alice_id, "%") == []


async def test_set_overwrites_a_row_inserted_after_the_lookup(db, make_user, monkeypatch):
    alice_id = await make_user("alice")
    bob_id = await make_user("bobby")
    repo = AssociationRepository(db)
    await repo.set(alice_id, bob_id, FRIEND)
    get = repo.get
    lookups = []

    async def missing_on_first_lookup(user_id, other_id):
        lookups.append((user_id, other_id))
        if len(lookups) == 1:
            return None
        return await get(user_id, other_id)

    monkeypatch.setattr(repo, "get", missing_on_first_lookup)

    await repo.set(alice_id, bob_id, BLOCK)

    rows = await db.execute(select(func.count(Association.id)))
    assert rows.scalar() == 1
    assert len(lookups) == 2
    assert ids(await repo.blocked(alice_id)) == [bob_id]
