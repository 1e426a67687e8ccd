import pytest
from sqlalchemy import func, select

from roomchat.errors import SamePasswordError, UserNotFoundError, UsernameTakenError, WrongPasswordError
from roomchat.models import User
from roomchat.repositories.user_repository import UserRepository


async def test_register_stores_a_hash_not_the_password(db):
    user = await UserRepository(db).register("Alice", "password1")

    assert user.username == "Alice"
    assert user.password_hash != "password1"
    assert user.password_hash.startswith("$argon2")


@pytest.mark.parametrize("second", ["alice", "ALICE", "aLiCe"])
async def test_usernames_are_unique_ignoring_case(db, second):
    repo = UserRepository(db)
    await repo.register("Alice", "password1")

    with pytest.raises(UsernameTakenError):
        await repo.register(second, "password2")


async def test_verify_returns_the_user_id(db):
    repo = UserRepository(db)
    user_id = (await repo.register("alice", "password1")).id

    assert await repo.verify("ALICE", "password1") == user_id


async def test_verify_failures(db):
    repo = UserRepository(db)
    await repo.register("alice", "password1")

    with pytest.raises(WrongPasswordError):
        await repo.verify("alice", "password2")
    with pytest.raises(UserNotFoundError):
        await repo.verify("nobody", "password1")


async def test_change_password(db):
    repo = UserRepository(db)
    user_id = (await repo.register("alice", "password1")).id

    with pytest.raises(WrongPasswordError):
        await repo.change_password(user_id, "wrongpass1", "password2")
    with pytest.raises(SamePasswordError):
        await repo.change_password(user_id, "password1", "password1")

    await repo.change_password(user_id, "password1", "password2")

    assert await repo.verify("alice", "password2") == user_id
    with pytest.raises(WrongPasswordError):
        await repo.verify("alice", "password1")


async def test_unique_index_rejects_a_registration_that_passed_the_check(db, monkeypatch):
    repo = UserRepository(db)
    await repo.register("Alice", "password1")

    async def no_such_user(username):
        return None

    monkeypatch.setattr(repo, "get_by_username", no_such_user)

    with pytest.raises(UsernameTakenError):
        await repo.register("alice", "password2")

    users = await db.execute(select(func.count(User.id)))
    assert users.scalar() == 1
