from typing import ClassVar, Type, Union

from loguru import logger

from .adapter import StorageAdapter, require_id
from .stores import AuthStore, PermissionCatalog, RoleStore, UserStore
from ..context import Context
from ..errors import ValidationError
from ..models import Permission, Permissions, PermissionEntry, Role, User, UserRole
from ..storage import Storage, StorageSession


class PermissionCatalogAdapter(StorageAdapter, PermissionCatalog):
    async def all(self, ctx: Context) -> Permissions:
        return await self.transaction(ctx, self._all)

    async def _all(self, session: StorageSession) -> Permissions:
        entries = await session.list(PermissionEntry)
        return [Permission(entry.name) for entry in entries]

    async def add(self, ctx: Context, permission: Permission) -> Permission:
        if not isinstance(permission, str) or not permission:
            raise ValidationError("permission must be a non-empty string")
        return await self.transaction(ctx, self._add, permission)

    async def _add(self, session: StorageSession, permission: Permission) -> Permission:
        await session.create(PermissionEntry(name=permission))
        logger.debug(f"Registered permission '{permission}'")
        return Permission(permission)


class _LinkedAdapter(StorageAdapter):
    """
    Shared implementation of users and roles: a named set of permissions plus
    links to the other side, kept in the `UserRole` table and resolved on read.
    """

    model: ClassVar[Type[Union[User, Role]]]
    linked: ClassVar[Type[Union[User, Role]]]
    # link columns pointing at this side and at the linked side
    key: ClassVar[str]
    linked_key: ClassVar[str]
    # field holding the resolved linked entities
    view: ClassVar[str]

    @property
    def kind(self) -> str:
        return self.model.__name__.lower()

    def validate(self, entity):
        if not isinstance(entity, self.model):
            raise ValidationError(f"expected a {self.model.__name__}")
        if not isinstance(entity.name, str) or not entity.name.strip():
            raise ValidationError(f"{self.kind} name is required")
        if not isinstance(entity.permissions, list) or not all(
            isinstance(p, str) for p in entity.permissions
        ):
            raise ValidationError("permissions must be a list of strings")
        for other in getattr(entity, self.view):
            require_id(other, self.linked.__name__.lower())

    def linked_ids(self, entity) -> list[int]:
        # keep caller order, drop repeats
        return list(dict.fromkeys(other.id for other in getattr(entity, self.view)))

    async def _check_links(self, session: StorageSession, ids: list[int]):
        for id in ids:
            if await session.get(self.linked, filters={"id": id}) is None:
                raise ValidationError(
                    f"{self.linked.__name__.lower()} {id} does not exist"
                )

    async def _link(self, session: StorageSession, id: int, ids: list[int]):
        await session.delete(UserRole, filters={self.key: id})
        for other_id in ids:
            await session.create(UserRole(**{self.key: id, self.linked_key: other_id}))

    async def _resolve(self, session: StorageSession, entity):
        # linked entities are loaded from their own table only, so their view stays empty
        links = await session.list(UserRole, filters={self.key: entity.id})
        linked = []
        for link in links:
            other = await session.get(
                self.linked, filters={"id": getattr(link, self.linked_key)}
            )
            if other is not None:
                linked.append(other)
        setattr(entity, self.view, linked)
        return entity

    async def add(self, ctx: Context, entity):
        self.validate(entity)
        return await self.transaction(ctx, self._add, entity)

    async def _add(self, session: StorageSession, entity):
        ids = self.linked_ids(entity)
        await self._check_links(session, ids)
        created = await session.create(
            self.model(name=entity.name, permissions=list(entity.permissions))
        )
        await self._link(session, created.id, ids)
        logger.debug(f"Added {self.kind} {created.id} '{created.name}'")
        return await self._resolve(session, created)

    async def delete(self, ctx: Context, entity):
        id = require_id(entity, self.kind)
        await self.transaction(ctx, self._delete, id)

    async def _delete(self, session: StorageSession, id: int):
        await self.fetch(session, self.model, id)
        # links go with the entity, in the same transaction
        await session.delete(UserRole, filters={self.key: id})
        await session.delete(self.model, filters={"id": id})
        logger.debug(f"Deleted {self.kind} {id}")

    async def get(self, ctx: Context, id: int):
        return await self.transaction(ctx, self._get, id)

    async def _get(self, session: StorageSession, id: int):
        return await self._resolve(session, await self.fetch(session, self.model, id))

    async def update(self, ctx: Context, entity):
        id = require_id(entity, self.kind)
        self.validate(entity)
        return await self.transaction(ctx, self._update, id, entity)

    async def _update(self, session: StorageSession, id: int, entity):
        await self.fetch(session, self.model, id)
        ids = self.linked_ids(entity)
        await self._check_links(session, ids)
        updated = await session.update(
            self.model,
            filters={"id": id},
            updates={"name": entity.name, "permissions": list(entity.permissions)},
        )
        await self._link(session, id, ids)
        logger.debug(f"Updated {self.kind} {id}")
        return await self._resolve(session, updated)


class UserAdapter(_LinkedAdapter, UserStore):
    model = User
    linked = Role
    key = "user_id"
    linked_key = "role_id"
    view = "roles"


class RoleAdapter(_LinkedAdapter, RoleStore):
    model = Role
    linked = User
    key = "role_id"
    linked_key = "user_id"
    view = "users"


def storage_auth_store(storage: Storage) -> AuthStore:
    return AuthStore(
        permissions=PermissionCatalogAdapter(storage),
        users=UserAdapter(storage),
        roles=RoleAdapter(storage),
    )
