from abc import abstractmethod
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
import json
from typing import Type
from .storage import StorageSession
from ..models import Model


def _json_default(value):
    # nested dataclasses (dashboard cells) are stored as plain objects
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class SQLSession(StorageSession):
    async def init_schema(self, model: Type[Model]) -> str:
        table_name = model.table_name()
        schema = model.get_schema()
        columns_sql = []
        indexes = []

        for column, info in schema.items():
            col_type = info["type"]
            default = info["default"]
            primary = info["primary_key"]
            index = info["index"]
            auto_increment = info["auto_increment"]
            unique = info["unique"]

            # the primary key is indexed already
            if index and not primary:
                indexes.append(column)

            constraints = []
            if primary:
                constraints.append("PRIMARY KEY")

            if auto_increment:
                constraints.append(self.python_to_sqltype("auto_increment"))

            if unique:
                constraints.append("UNIQUE")

            # SQL type
            sql_type = self.python_to_sqltype(col_type)

            # NOT NULL
            not_null = ""
            if isinstance(col_type, list) and "NoneType" not in col_type:
                not_null = "NOT NULL"
            elif isinstance(col_type, str) and col_type != "json":
                not_null = "NOT NULL"

            # the primary key is always backend assigned
            default_sql = "DEFAULT NULL" if default is None and not primary else ""

            parts = [column, sql_type, " ".join(constraints), not_null, default_sql]
            col_def = " ".join(part for part in parts if part)
            columns_sql.append(col_def)

        create_table_sql = (
            f"CREATE TABLE IF NOT EXISTS {table_name} (\n  "
            + ",\n  ".join(columns_sql)
            + "\n);"
        )
        await self.execute(create_table_sql)
        await self.init_index(table_name, indexes)
        return create_table_sql

    async def create(self, model: Model) -> Model:
        try:
            table_name = model.table_name()
            model_values = self.encode(model.get_schema(), model.get_values())
            columns = list(model_values.keys())
            values = list(model_values.values())
            placeholders = self.get_placeholder(len(values))
            column_names = ",".join(columns)
            sql = f"INSERT INTO {table_name} ({column_names}) VALUES ({placeholders})"
            row_id = await self.execute(sql, values)
            await self.autocommit()
            model.id = row_id
            return model
        except Exception as e:
            raise self.process_exception(e)

    @abstractmethod
    def python_to_sqltype(self, py_type: str) -> str:
        pass

    @abstractmethod
    async def execute(self, query, *args):
        pass

    @abstractmethod
    async def autocommit(self):
        """Commit a write made outside an explicit transaction."""

    @abstractmethod
    def get_placeholder(self, count: int):
        pass

    def format_datetime_for_db(self, dt: datetime) -> str:
        """Format datetime for database storage; naive values are taken as UTC"""
        if dt is None:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.isoformat()

    def parse_datetime_from_db(self, dt_str: str) -> datetime:
        """Parse datetime from database string"""
        if dt_str is None:
            return None
        dt = datetime.fromisoformat(dt_str)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    def encode(self, schema: dict, values: dict):
        new_values = {}
        for key, value in values.items():
            if key in schema:
                key_type = schema.get(key).get("type")
                if "json" in key_type and value is not None:
                    new_values[key] = json.dumps(value, default=_json_default)
                elif "datetime" in key_type and isinstance(value, datetime):
                    new_values[key] = self.format_datetime_for_db(value)
                else:
                    new_values[key] = value
        return new_values

    def decode(self, schema: dict, values: dict):
        new_values = {}
        for key, value in values.items():
            if key in schema:
                key_type = schema.get(key).get("type")
                if "json" in key_type and value is not None:
                    new_values[key] = json.loads(value)
                elif "datetime" in key_type and value is not None:
                    new_values[key] = self.parse_datetime_from_db(value)
                else:
                    new_values[key] = value
        return new_values

    @abstractmethod
    def process_exception(self, e: Exception) -> Exception:
        pass
