from .sql import SQLSession
from contextlib import asynccontextmanager
from .storage import Storage
from ..errors import StoreError, DuplicateError, ValidationError, BackendError
from ..models import Model
import aiosqlite
from typing import List, Optional, TypeVar, Type, Union

T = TypeVar("T", bound=Model)


class SQLiteSession(SQLSession):
    def __init__(self, conn_uri: str, timeout: float = 5.0):
        self.conn_uri = conn_uri
        self.timeout = timeout
        self.connection: aiosqlite.Connection = None
        self._in_transaction = False

    def python_to_sqltype(self, py_type):
        # If union, pick the first non-NoneType
        if isinstance(py_type, list):
            main_type = next((t for t in py_type if t != "NoneType"), "TEXT")
            return self.python_to_sqltype(main_type)

        mapping = {
            "str": "TEXT",
            "int": "INTEGER",
            "datetime": "TEXT",  # store as ISO string
            "json": "TEXT",
            "auto_increment": "AUTOINCREMENT",
        }
        return mapping.get(py_type, "TEXT")

    async def execute(self, sql: str, *args):
        async with self.connection.execute(sql, *args) as cursor:
            return cursor.lastrowid

    async def autocommit(self):
        # inside begin() the commit is controlled by the transaction
        if not self._in_transaction:
            await self.connection.commit()

    async def init_index(self, table: str, indexes: List[str]):
        if not indexes:
            return

        for col in indexes:
            index_name = f"{table}_{col}_idx"
            await self.connection.execute(
                f"CREATE INDEX IF NOT EXISTS {index_name} ON {table}({col});"
            )

        await self.autocommit()

    def _to_model(self, table: Type[T], row) -> T:
        # id is the first column and can't be passed to __init__
        schema = table.get_schema(exclude=["id"])
        result = dict(zip(schema, row[1:]))
        return table.from_record(row[0], self.decode(schema, result))

    def _where(self, filters: dict):
        where = " AND ".join([f"{attribute}=?" for attribute in filters])
        return where, list(filters.values())

    async def get(
        self,
        model: Union[T, Type[T]],
        filters: dict = None,
    ) -> Optional[T]:
        if not filters:
            raise ValueError("Filters must be provided for sqlite adapter")
        try:
            table = Storage.get_model_class(model)
            where, values = self._where(filters)
            select = f"SELECT * FROM {table.table_name()} WHERE {where} LIMIT 1"
            async with self.connection.execute(select, values) as cursor:
                row = await cursor.fetchone()
            if not row:
                return None
            return self._to_model(table, row)
        except Exception as e:
            raise self.process_exception(e)

    async def list(
        self,
        model: Union[T, Type[T]],
        filters: dict = None,
        limit: Optional[int] = None,
    ) -> list[T]:
        try:
            table = Storage.get_model_class(model)

            where = ""
            values = []
            if filters:
                clause, values = self._where(filters)
                where = f"WHERE {clause}"

            select = f"SELECT * FROM {table.table_name()} {where} ORDER BY id ASC"
            if limit is not None:
                select += f" LIMIT {int(limit)}"

            async with self.connection.execute(select, values) as cursor:
                rows = await cursor.fetchall()

            return [self._to_model(table, row) for row in rows]
        except Exception as e:
            raise self.process_exception(e)

    async def update(self, model: Union[T, Type[T]], filters: dict, updates: dict):
        """Update the rows matching filters and return the first updated one"""
        if not filters:
            raise ValueError("filters are empty")
        try:
            table = Storage.get_model_class(model)

            schema = table.get_schema(exclude=["id"])
            updates = self.encode(schema, updates)

            if not updates:
                return None

            set_clause = ", ".join([f"{attr}=?" for attr in updates])
            set_values = list(updates.values())
            where_clause, where_values = self._where(filters)

            sql = f"UPDATE {table.table_name()} SET {set_clause} WHERE {where_clause} RETURNING *"
            async with self.connection.execute(
                sql, (*set_values, *where_values)
            ) as cursor:
                row = await cursor.fetchone()
            await self.autocommit()
            if not row:
                return None
            return self._to_model(table, row)
        except Exception as e:
            raise self.process_exception(e)

    async def delete(self, model: Union[T, Type[T]], filters: dict) -> int:
        """Delete the rows matching filters, returns how many were removed"""
        if not filters:
            raise ValueError("filters are empty")
        try:
            table = Storage.get_model_class(model)
            where_clause, where_values = self._where(filters)

            sql = f"DELETE FROM {table.table_name()} WHERE {where_clause}"
            async with self.connection.execute(sql, where_values) as cursor:
                deleted = cursor.rowcount
            await self.autocommit()
            return deleted
        except Exception as e:
            raise self.process_exception(e)

    async def rollback(self):
        self._in_transaction = False
        return await self.connection.rollback()

    async def begin(self):
        # take the write lock up front so concurrent transactions queue on busy timeout
        try:
            await self.connection.execute("BEGIN IMMEDIATE")
        except Exception as e:
            raise self.process_exception(e)
        self._in_transaction = True

    async def commit(self):
        self._in_transaction = False
        try:
            await self.connection.commit()
        except Exception as e:
            raise self.process_exception(e)

    async def connect(self):
        try:
            self.connection = await aiosqlite.connect(
                self.conn_uri, timeout=self.timeout
            )
        except Exception as e:
            raise self.process_exception(e)
        return self

    async def close(self):
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    def get_placeholder(self, count: int):
        return ",".join("?" for _ in range(count))

    def process_exception(self, e: Exception) -> Exception:
        if isinstance(e, StoreError):
            return e

        if isinstance(e, aiosqlite.IntegrityError):
            msg = str(e)
            if "UNIQUE constraint failed" in msg:
                return DuplicateError(msg)
            elif "NOT NULL constraint failed" in msg:
                return ValidationError(f"missing required field, {msg}")
            return ValidationError(f"integrity error, {msg}")

        elif isinstance(e, aiosqlite.OperationalError):
            msg = str(e)
            if "no such table" in msg:
                return BackendError(f"table not found, {msg}")
            elif "no such column" in msg:
                return BackendError(f"invalid column, {msg}")
            return BackendError(f"operational error, {msg}")

        elif isinstance(e, aiosqlite.Error):
            return BackendError(str(e))

        return e


class SQLite(Storage):
    session_class: Type[SQLiteSession] = SQLiteSession

    def __init__(self, connection_uri: str, timeout: float = 5.0):
        self.conn_uri = connection_uri
        self.timeout = timeout

    @asynccontextmanager
    async def session(self):
        session = self.session_class(self.conn_uri, self.timeout)
        await session.connect()
        try:
            yield session
        finally:
            await session.close()
