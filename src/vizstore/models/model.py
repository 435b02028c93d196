from abc import ABC
from dataclasses import dataclass, asdict, fields, MISSING, field
from typing import ClassVar
from typing import get_origin, get_args, Union, Optional
from types import UnionType
import copy


class MissingDefault:
    pass


def _type_name(field_type) -> str:
    # NewType ids (UserID, ExplorationID) are stored as their underlying type
    supertype = getattr(field_type, "__supertype__", None)
    if supertype is not None:
        return _type_name(supertype)
    return field_type.__name__ if hasattr(field_type, "__name__") else str(field_type)


@dataclass
class Model(ABC):
    # id is backend assigned: excluded from values, present in the schema, init=False so callers can't pick it
    exclude: ClassVar[list[str]] = ["id"]
    # fields resolved by the stores on read (relationship views); never stored as columns
    schema_exclude: ClassVar[list[str]] = []
    id: Optional[int] = field(
        default=None,
        metadata={"primary_key": True, "index": True, "auto_increment": True},
        init=False,
    )

    @classmethod
    def table_name(cls) -> str:
        return cls.__name__.lower()

    def to_dict(self, exclude: list[str] = [], include_none: bool = True) -> dict:
        data = asdict(self)
        return {
            k: v
            for k, v in data.items()
            if k not in exclude and (include_none or v is not None)
        }

    def get_values(self):
        """
        Return a dictionary representing the values to be inserted in the DB.
        None values are only kept when the schema allows None.
        """
        insert_data = {}
        for f in fields(self):
            origin = get_origin(f.type)
            if f.name in self.exclude or f.name in self.schema_exclude:
                continue

            value = getattr(self, f.name, None)
            if value is None:
                if origin is Union or origin is UnionType:
                    types = [_type_name(t) for t in get_args(f.type)]
                    if "NoneType" in types:
                        insert_data[f.name] = value
            else:
                insert_data[f.name] = value

        return insert_data

    def to_record(self) -> dict:
        """Detached copy of every stored column except id."""
        return {
            name: copy.deepcopy(getattr(self, name))
            for name in self.get_schema(exclude=["id"])
        }

    @classmethod
    def from_record(cls, id: int, record: dict):
        obj = cls(**record)
        obj.id = id
        return obj

    @classmethod
    def get_schema(cls, exclude=[]):
        """Generate the column schema; default values are ignored and only default_factory are considered"""
        schema = {}
        for field in fields(cls):
            if field.name in exclude or field.name in cls.schema_exclude:
                continue
            field_type = field.type
            field_name = field.name
            origin = get_origin(field_type)
            metadata = field.metadata
            default = MissingDefault()
            if field.default_factory is not MISSING:
                default = field.default_factory()
            elif field.default is not MISSING and field.default is None:
                default = None

            schema[field_name] = {
                "type": None,
                "default": default,
                "primary_key": metadata.get("primary_key", False),
                "index": metadata.get("index", False),
                "unique": metadata.get("unique", False),
                "auto_increment": metadata.get("auto_increment", False),
            }
            if origin is Union or origin is UnionType:
                schema[field_name]["type"] = [
                    _type_name(t) for t in get_args(field_type)
                ]
            # list[...] / dict[...] columns are json; Optional[list] stays a union
            elif origin in (list, dict):
                schema[field_name]["type"] = "json"
            else:
                schema[field_name]["type"] = [_type_name(field_type)]

        return schema
