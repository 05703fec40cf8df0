"""Entity metadata consumed by data mappers and resource metadata.

Only two things are needed from an ORM: whether a type is a mapped entity
(`is_transient`) and what fields and associations a mapped entity has
(`get_metadata_for`). `SqlAlchemyMetadata` answers both from SQLAlchemy
mappers.
"""

from __future__ import annotations

from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Type

import dataclasses
import operator
import re
import threading
from datetime import date
from datetime import datetime
from datetime import time
from datetime import timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapper

from restlayer import exceptions
from restlayer.utils.imports import full_class_name

# Python before 3.11 can't parse basic form offsets, like `+0000`.
_basic_offset_re = re.compile(r'([+-]\d{2})(\d{2})$')


def dump_datetime(value: datetime) -> str:
    """Format as ISO 8601 with basic offset form: 2020-01-02T03:04:05+0000

    Naive values are taken as UTC, SQLite returns them even for timezone
    aware columns.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S%z')


def dump_time(value: time) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime('%H:%M:%S%z')


class DataType:
    name: str = 'scalar'

    def load(self, value: Any) -> Any:
        return value

    def dump(self, value: Any) -> Any:
        return value

    def __repr__(self):
        return f'<{type(self).__name__}>'


class Scalar(DataType):
    pass


class Date(DataType):
    name = 'date'

    def load(self, value: Any):
        if value is None or value == '' or isinstance(value, date):
            return value or None
        return date.fromisoformat(value)

    def dump(self, value: Any):
        if isinstance(value, date):
            return value.isoformat()
        return value


class Time(DataType):
    name = 'time'

    def load(self, value: Any):
        if value is None or value == '' or isinstance(value, time):
            return value or None
        return time.fromisoformat(_basic_offset_re.sub(r'\1:\2', value))

    def dump(self, value: Any):
        if isinstance(value, time):
            return dump_time(value)
        return value


class DateTime(DataType):
    name = 'datetime'

    def load(self, value: Any):
        if value is None or value == '' or isinstance(value, datetime):
            return value or None
        return datetime.fromisoformat(_basic_offset_re.sub(r'\1:\2', value))

    def dump(self, value: Any):
        if isinstance(value, datetime):
            return dump_datetime(value)
        return value


def _getter(name: str) -> Callable[[Any], Any]:
    return operator.attrgetter(name)


def _setter(name: str) -> Callable[[Any, Any], None]:
    def setter(obj: Any, value: Any) -> None:
        setattr(obj, name, value)
    return setter


@dataclasses.dataclass(frozen=True)
class Field:
    name: str
    dtype: DataType = dataclasses.field(default_factory=Scalar)
    get: Callable[[Any], Any] = None
    set: Callable[[Any, Any], None] = None

    def __post_init__(self):
        if self.get is None:
            object.__setattr__(self, 'get', _getter(self.name))
        if self.set is None:
            object.__setattr__(self, 'set', _setter(self.name))

    @property
    def is_temporal(self) -> bool:
        return isinstance(self.dtype, (Date, Time, DateTime))


@dataclasses.dataclass(frozen=True)
class Association:
    name: str
    target: type
    is_collection: bool = False
    get: Callable[[Any], Any] = None

    def __post_init__(self):
        if self.get is None:
            object.__setattr__(self, 'get', _getter(self.name))


@dataclasses.dataclass(frozen=True)
class EntityMetadata:
    cls: type
    fields: Dict[str, Field]
    associations: Dict[str, Association]
    primary_key: List[str] = dataclasses.field(default_factory=list)

    @property
    def class_name(self) -> str:
        return full_class_name(self.cls)

    def identity(self, entity: Any) -> Dict[str, Any]:
        return {name: self.fields[name].get(entity) for name in self.primary_key}


class MetadataProvider:

    def is_transient(self, cls: Type) -> bool:
        raise NotImplementedError

    def get_metadata_for(self, cls: Type) -> EntityMetadata:
        raise NotImplementedError


def get_column_type(column_type: sa.types.TypeEngine) -> DataType:
    # DateTime must be checked before Date, SQLAlchemy types do not inherit
    # from each other, but dialect specific types inherit from these.
    if isinstance(column_type, sa.DateTime):
        return DateTime()
    if isinstance(column_type, sa.Date):
        return Date()
    if isinstance(column_type, sa.Time):
        return Time()
    return Scalar()


class SqlAlchemyMetadata(MetadataProvider):
    """Entity metadata read from SQLAlchemy mappers.

    Metadata of each class is built once and cached, accessor functions are
    created while building, so no attribute lookups by name happen later.
    """

    def __init__(self):
        self._cache: Dict[type, EntityMetadata] = {}
        self._lock = threading.Lock()

    def _get_mapper(self, cls: Type) -> Optional[Mapper]:
        if not isinstance(cls, type):
            return None
        return sa.inspect(cls, raiseerr=False)

    def is_transient(self, cls: Type) -> bool:
        return self._get_mapper(cls) is None

    def get_metadata_for(self, cls: Type) -> EntityMetadata:
        meta = self._cache.get(cls)
        if meta is not None:
            return meta
        with self._lock:
            if cls not in self._cache:
                self._cache[cls] = self._build(cls)
            return self._cache[cls]

    def _build(self, cls: Type) -> EntityMetadata:
        mapper = self._get_mapper(cls)
        if mapper is None:
            raise exceptions.UnknownEntity(entity=full_class_name(cls))

        fields = {}
        for attr in mapper.column_attrs:
            column = attr.columns[0]
            fields[attr.key] = Field(attr.key, get_column_type(column.type))

        associations = {}
        for rel in mapper.relationships:
            associations[rel.key] = Association(
                rel.key,
                target=rel.mapper.class_,
                is_collection=bool(rel.uselist),
            )

        primary_key = [
            mapper.get_property_by_column(column).key
            for column in mapper.primary_key
        ]

        return EntityMetadata(cls, fields, associations, primary_key)
