"""Group service tests — per-owner uniqueness, rename, task cascade."""

import pytest

from conftest import TEST_BCRYPT_COST
from stormtask.services.errors import ConflictError, InvalidReferenceError
from stormtask.services.group_service import GroupService
from stormtask.services.task_service import TaskService
from stormtask.services.user_service import UserService


@pytest.fixture
def groups(db_session):
    return GroupService(db_session)


@pytest.fixture
def tasks(db_session):
    return TaskService(db_session)


@pytest.fixture
async def alice(db_session):
    users = UserService(db_session, bcrypt_cost=TEST_BCRYPT_COST)
    return await users.create_user("alice@x.com", "Alice", "pw")


@pytest.fixture
async def bob(db_session):
    users = UserService(db_session, bcrypt_cost=TEST_BCRYPT_COST)
    return await users.create_user("bob@x.com", "Bob", "pw")


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_group(groups, alice):
    group = await groups.create_group(alice.id, "Home")
    assert group.id is not None
    assert group.name == "Home"
    assert group.owner_id == alice.id


@pytest.mark.asyncio
async def test_duplicate_name_for_same_owner_conflicts(groups, alice):
    await groups.create_group(alice.id, "G")
    with pytest.raises(ConflictError):
        await groups.create_group(alice.id, "G")


@pytest.mark.asyncio
async def test_same_name_for_different_owners_is_allowed(groups, alice, bob):
    a = await groups.create_group(alice.id, "G")
    b = await groups.create_group(bob.id, "G")
    assert a.id != b.id


@pytest.mark.asyncio
async def test_create_group_for_missing_owner(groups):
    with pytest.raises(InvalidReferenceError):
        await groups.create_group(-1, "Orphan")


# ═══════════════════════════════════════════════════════════
# Read
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_get_group_by_owner_and_name(groups, alice, bob):
    mine = await groups.create_group(alice.id, "Home")
    await groups.create_group(bob.id, "Home")

    found = await groups.get_group_by_owner_and_name(alice.id, "Home")
    assert found.id == mine.id
    assert await groups.get_group_by_owner_and_name(alice.id, "Nope") is None


@pytest.mark.asyncio
async def test_list_groups_by_owner(groups, alice, bob):
    await groups.create_group(alice.id, "A")
    await groups.create_group(alice.id, "B")
    await groups.create_group(bob.id, "C")

    names = [g.name for g in await groups.list_groups_by_owner(alice.id)]
    assert names == ["A", "B"]


@pytest.mark.asyncio
async def test_list_groups_empty(groups, alice):
    assert await groups.list_groups_by_owner(alice.id) == []


@pytest.mark.asyncio
async def test_get_missing_group_returns_none(groups):
    assert await groups.get_group(999) is None


# ═══════════════════════════════════════════════════════════
# Rename
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_rename_group(groups, alice):
    group = await groups.create_group(alice.id, "Home")
    renamed = await groups.rename_group(group.id, "House")
    assert renamed.id == group.id
    assert renamed.name == "House"
    assert (await groups.get_group(group.id)).name == "House"


@pytest.mark.asyncio
async def test_rename_missing_group_returns_none(groups):
    assert await groups.rename_group(999, "Anything") is None


@pytest.mark.asyncio
async def test_rename_onto_existing_name_conflicts(groups, alice):
    await groups.create_group(alice.id, "Home")
    work = await groups.create_group(alice.id, "Work")
    with pytest.raises(ConflictError):
        await groups.rename_group(work.id, "Home")


@pytest.mark.asyncio
async def test_rename_to_same_name_is_noop(groups, alice):
    group = await groups.create_group(alice.id, "Home")
    same = await groups.rename_group(group.id, "Home")
    assert same.name == "Home"


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_group_removes_its_tasks(groups, tasks, alice):
    home = await groups.create_group(alice.id, "Home")
    work = await groups.create_group(alice.id, "Work")
    doomed = await tasks.create_task("Buy milk", group_id=home.id)
    await tasks.create_task("Fix sink", group_id=home.id)
    kept = await tasks.create_task("Write report", group_id=work.id)

    assert await groups.delete_group(home.id) is True

    assert await groups.get_group(home.id) is None
    assert await tasks.get_task(doomed.id) is None
    assert await tasks.list_tasks_by_group(home.id) == []
    assert [t.id for t in await tasks.list_tasks_by_group(work.id)] == [kept.id]


@pytest.mark.asyncio
async def test_delete_missing_group_returns_false(groups):
    assert await groups.delete_group(999) is False


@pytest.mark.asyncio
async def test_delete_groups_by_owner(groups, tasks, alice, bob):
    for name in ("A", "B"):
        group = await groups.create_group(alice.id, name)
        await tasks.create_task("t", group_id=group.id)
    bobs = await groups.create_group(bob.id, "A")

    assert await groups.delete_groups_by_owner(alice.id) == 2

    assert await groups.list_groups_by_owner(alice.id) == []
    assert [g.id for g in await groups.list_groups_by_owner(bob.id)] == [bobs.id]


@pytest.mark.asyncio
async def test_delete_groups_by_owner_without_groups(groups, alice):
    assert await groups.delete_groups_by_owner(alice.id) == 0
