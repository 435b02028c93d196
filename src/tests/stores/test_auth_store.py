import pytest

from vizstore import (
    Cancelled,
    Context,
    DuplicateError,
    ErrorKind,
    NotFoundError,
    Role,
    User,
    ValidationError,
)
from vizstore.models import UserRole


@pytest.mark.asyncio
async def test_permission_catalog(stores, ctx):
    catalog = stores.auth.permissions
    assert await catalog.all(ctx) == []

    await catalog.add(ctx, "read")
    await catalog.add(ctx, "write")
    await catalog.add(ctx, "admin")
    assert await catalog.all(ctx) == ["read", "write", "admin"]

    with pytest.raises(DuplicateError):
        await catalog.add(ctx, "write")
    with pytest.raises(ValidationError):
        await catalog.add(ctx, "")
    assert await catalog.all(ctx) == ["read", "write", "admin"]


@pytest.mark.asyncio
async def test_user_round_trip(stores, ctx):
    created = await stores.auth.users.add(
        ctx, User(name="alice", permissions=["read", "write", "read"])
    )
    assert created.id is not None

    got = await stores.auth.users.get(ctx, created.id)
    assert got.name == "alice"
    assert got.permissions == ["read", "write", "read"]
    assert got.roles == []


@pytest.mark.asyncio
async def test_add_does_not_touch_the_callers_copy(stores, ctx):
    user = User(name="carol")
    created = await stores.auth.users.add(ctx, user)
    assert user.id is None
    assert created is not user


@pytest.mark.asyncio
async def test_user_validation(stores, ctx):
    with pytest.raises(ValidationError) as err:
        await stores.auth.users.add(ctx, User(name=""))
    assert err.value.kind == ErrorKind.VALIDATION

    with pytest.raises(ValidationError):
        await stores.auth.users.add(ctx, User(name="bob", permissions=[1]))

    with pytest.raises(ValidationError):
        await stores.auth.users.add(ctx, User(name="bob", roles=[Role(name="ghost")]))


@pytest.mark.asyncio
async def test_user_with_unknown_role_is_not_created(stores, ctx):
    ghost = Role(name="ghost")
    ghost.id = 42
    with pytest.raises(ValidationError):
        await stores.auth.users.add(ctx, User(name="bob", roles=[ghost]))

    async with stores.storage.session() as session:
        assert await session.list(User) == []
        assert await session.list(UserRole) == []


@pytest.mark.asyncio
async def test_duplicate_user_name(stores, ctx):
    await stores.auth.users.add(ctx, User(name="alice"))
    with pytest.raises(DuplicateError) as err:
        await stores.auth.users.add(ctx, User(name="alice"))
    assert err.value.kind == ErrorKind.DUPLICATE


@pytest.mark.asyncio
async def test_effective_permissions_through_roles(stores, ctx):
    admin = await stores.auth.roles.add(
        ctx, Role(name="admin", permissions=["read", "write"])
    )
    alice = await stores.auth.users.add(ctx, User(name="alice", roles=[admin]))

    got = await stores.auth.users.get(ctx, alice.id)
    assert [role.name for role in got.roles] == ["admin"]
    assert set(got.effective_permissions()) == {"read", "write"}


@pytest.mark.asyncio
async def test_views_are_one_level_deep(stores, ctx):
    admin = await stores.auth.roles.add(ctx, Role(name="admin", permissions=["x"]))
    viewer = await stores.auth.roles.add(ctx, Role(name="viewer"))
    alice = await stores.auth.users.add(ctx, User(name="alice", roles=[admin, viewer]))
    bob = await stores.auth.users.add(ctx, User(name="bob", roles=[admin]))

    role = await stores.auth.roles.get(ctx, admin.id)
    assert [user.name for user in role.users] == ["alice", "bob"]
    assert all(user.roles == [] for user in role.users)

    user = await stores.auth.users.get(ctx, alice.id)
    assert [r.name for r in user.roles] == ["admin", "viewer"]
    assert all(r.users == [] for r in user.roles)

    assert (await stores.auth.roles.get(ctx, viewer.id)).users[0].id == alice.id
    assert (await stores.auth.users.get(ctx, bob.id)).roles[0].id == admin.id


@pytest.mark.asyncio
async def test_update_user(stores, ctx):
    admin = await stores.auth.roles.add(ctx, Role(name="admin", permissions=["all"]))
    viewer = await stores.auth.roles.add(ctx, Role(name="viewer", permissions=["read"]))
    alice = await stores.auth.users.add(ctx, User(name="alice", roles=[admin]))

    alice.permissions = ["export"]
    alice.roles = [viewer]
    updated = await stores.auth.users.update(ctx, alice)
    assert updated.permissions == ["export"]
    assert [r.name for r in updated.roles] == ["viewer"]

    got = await stores.auth.users.get(ctx, alice.id)
    assert got.effective_permissions() == ["export", "read"]
    assert (await stores.auth.roles.get(ctx, admin.id)).users == []


@pytest.mark.asyncio
async def test_update_missing_user_changes_nothing(stores, ctx):
    alice = await stores.auth.users.add(ctx, User(name="alice", permissions=["a"]))

    ghost = User(name="ghost", permissions=["b"])
    ghost.id = alice.id + 100
    with pytest.raises(NotFoundError) as err:
        await stores.auth.users.update(ctx, ghost)
    assert err.value.kind == ErrorKind.NOT_FOUND

    async with stores.storage.session() as session:
        users = await session.list(User)
    assert [(u.name, u.permissions) for u in users] == [("alice", ["a"])]


@pytest.mark.asyncio
async def test_update_with_unknown_role_is_rolled_back(stores, ctx):
    admin = await stores.auth.roles.add(ctx, Role(name="admin"))
    alice = await stores.auth.users.add(ctx, User(name="alice", roles=[admin]))

    ghost = Role(name="ghost")
    ghost.id = admin.id + 100
    alice.name = "renamed"
    alice.roles = [ghost]
    with pytest.raises(ValidationError):
        await stores.auth.users.update(ctx, alice)

    got = await stores.auth.users.get(ctx, alice.id)
    assert got.name == "alice"
    assert [r.id for r in got.roles] == [admin.id]


@pytest.mark.asyncio
async def test_delete_user(stores, ctx):
    admin = await stores.auth.roles.add(ctx, Role(name="admin"))
    alice = await stores.auth.users.add(ctx, User(name="alice", roles=[admin]))
    bob = await stores.auth.users.add(ctx, User(name="bob", roles=[admin]))

    await stores.auth.users.delete(ctx, alice)

    with pytest.raises(NotFoundError):
        await stores.auth.users.get(ctx, alice.id)
    with pytest.raises(NotFoundError):
        await stores.auth.users.delete(ctx, alice)

    role = await stores.auth.roles.get(ctx, admin.id)
    assert [u.id for u in role.users] == [bob.id]


@pytest.mark.asyncio
async def test_delete_without_id(stores, ctx):
    with pytest.raises(ValidationError):
        await stores.auth.users.delete(ctx, User(name="nobody"))


@pytest.mark.asyncio
async def test_role_crud(stores, ctx):
    alice = await stores.auth.users.add(ctx, User(name="alice"))
    bob = await stores.auth.users.add(ctx, User(name="bob"))

    role = await stores.auth.roles.add(
        ctx, Role(name="editors", permissions=["write"], users=[alice])
    )
    assert [u.name for u in role.users] == ["alice"]
    assert [r.name for r in (await stores.auth.users.get(ctx, alice.id)).roles] == [
        "editors"
    ]

    role.users = [bob]
    role.permissions = ["write", "publish"]
    updated = await stores.auth.roles.update(ctx, role)
    assert [u.name for u in updated.users] == ["bob"]
    assert updated.permissions == ["write", "publish"]
    assert (await stores.auth.users.get(ctx, alice.id)).roles == []

    await stores.auth.roles.delete(ctx, role)
    with pytest.raises(NotFoundError):
        await stores.auth.roles.get(ctx, role.id)
    # users stay, only the links go
    assert (await stores.auth.users.get(ctx, bob.id)).roles == []


@pytest.mark.asyncio
async def test_update_missing_role_changes_nothing(stores, ctx):
    alice = await stores.auth.users.add(ctx, User(name="alice"))
    admin = await stores.auth.roles.add(ctx, Role(name="admin", permissions=["a"]))

    ghost = Role(name="ghost", permissions=["b"], users=[alice])
    ghost.id = admin.id + 100
    with pytest.raises(NotFoundError) as err:
        await stores.auth.roles.update(ctx, ghost)
    assert err.value.kind == ErrorKind.NOT_FOUND

    async with stores.storage.session() as session:
        roles = await session.list(Role)
        links = await session.list(UserRole)
    assert [(r.name, r.permissions) for r in roles] == [("admin", ["a"])]
    assert links == []


@pytest.mark.asyncio
async def test_delete_missing_role_changes_nothing(stores, ctx):
    alice = await stores.auth.users.add(ctx, User(name="alice"))
    admin = await stores.auth.roles.add(ctx, Role(name="admin", users=[alice]))

    ghost = Role(name="ghost")
    ghost.id = admin.id + 100
    with pytest.raises(NotFoundError) as err:
        await stores.auth.roles.delete(ctx, ghost)
    assert err.value.kind == ErrorKind.NOT_FOUND

    kept = await stores.auth.roles.get(ctx, admin.id)
    assert kept.name == "admin"
    assert [u.name for u in kept.users] == ["alice"]


@pytest.mark.asyncio
async def test_duplicate_role_name(stores, ctx):
    await stores.auth.roles.add(ctx, Role(name="admin"))
    with pytest.raises(DuplicateError):
        await stores.auth.roles.add(ctx, Role(name="admin"))


@pytest.mark.asyncio
async def test_ids_are_not_reused_after_delete(stores, ctx):
    first = await stores.auth.users.add(ctx, User(name="first"))
    await stores.auth.users.delete(ctx, first)
    second = await stores.auth.users.add(ctx, User(name="first"))
    assert second.id != first.id


@pytest.mark.asyncio
async def test_cancelled_context_adds_nothing(stores):
    ctx = Context()
    ctx.cancel()

    with pytest.raises(Cancelled) as err:
        await stores.auth.users.add(ctx, User(name="alice"))
    assert err.value.kind == ErrorKind.CANCELLED

    with pytest.raises(NotFoundError):
        await stores.auth.users.get(Context(), 1)
    with pytest.raises(Cancelled):
        await stores.auth.permissions.all(ctx)
