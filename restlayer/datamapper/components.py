"""Conversion between entity graphs and wire format strings.

`map()` decodes a string and assigns decoded values to a target object,
`reverse()` turns any value, entities included, into plain data and encodes
it. Plain data conversion is done by the `reverse` command, so other value
types can be supported by registering more implementations:

    @commands.reverse.register(DataMapper, Money)
    def reverse(mapper, value, *, seen):
        return str(value)

"""

from __future__ import annotations

from typing import Any
from typing import Dict
from typing import List
from typing import Set

import logging

from restlayer import commands
from restlayer import exceptions
from restlayer.entities import EntityMetadata
from restlayer.entities import MetadataProvider
from restlayer.formats.components import Format
from restlayer.utils.sentinels import NA

log = logging.getLogger(__name__)

CYCLE_POLICIES = ('omit', 'reference')
UNKNOWN_FIELD_POLICIES = ('reject', 'ignore')


def _check_policy(option: str, value: str, choices) -> str:
    if value not in choices:
        raise exceptions.UnknownPolicy(
            option=option,
            value=value,
            choices=', '.join(choices),
        )
    return value


class DataMapper:
    name: str = None

    def __init__(
        self,
        entities: MetadataProvider,
        *,
        cycles: str = 'omit',
        unknown_fields: str = 'reject',
        max_depth: int = 512,
    ):
        self.entities = entities
        self.cycles = _check_policy('cycles', cycles, CYCLE_POLICIES)
        self.unknown_fields = _check_policy(
            'unknown_fields',
            unknown_fields,
            UNKNOWN_FIELD_POLICIES,
        )
        self.max_depth = max_depth
        self.format = self.create_format()

    def __repr__(self):
        return f'<{type(self).__module__}.{type(self).__name__}>'

    def create_format(self) -> Format:
        raise NotImplementedError

    def map(self, target: Any, raw: str) -> Any:
        """Decode `raw` and assign decoded values to `target`.

        Nothing is assigned if any of the values can't be assigned.
        """
        if not isinstance(raw, str):
            raise exceptions.InvalidDataType(given=type(raw).__name__)

        data = self.format.decode(raw)
        if not isinstance(data, dict):
            raise exceptions.InvalidMappingData(given=type(data).__name__)

        if self.entities.is_transient(type(target)):
            setters = self._get_transient_setters(target, data)
        else:
            meta = self.entities.get_metadata_for(type(target))
            data = self.cast_field_data(meta, data)
            setters = self._get_entity_setters(meta, data)

        for setter, value in setters:
            setter(target, value)
        return target

    def _get_entity_setters(self, meta: EntityMetadata, data: Dict[str, Any]):
        setters = []
        unknown = []
        for key, value in data.items():
            if key in meta.fields:
                setters.append((meta.fields[key].set, value))
            elif key in meta.associations:
                # Associations are resolved by services, not by mappers.
                continue
            else:
                unknown.append(key)
        self._check_unknown(meta.class_name, unknown)
        return setters

    def _get_transient_setters(self, target: Any, data: Dict[str, Any]):
        setters = []
        unknown = []
        for key, value in data.items():
            if not key.startswith('_') and hasattr(target, key):
                setters.append((_attr_setter(key), value))
            else:
                unknown.append(key)
        self._check_unknown(type(target).__name__, unknown)
        return setters

    def _check_unknown(self, entity: str, unknown: List[str]) -> None:
        if not unknown:
            return
        if self.unknown_fields == 'reject':
            raise exceptions.MultipleErrors(
                exceptions.UnknownField(field=key, entity=entity)
                for key in unknown
            )
        log.info("Ignoring unknown fields of %s: %s.", entity, ', '.join(unknown))

    def cast_field_data(self, meta: EntityMetadata, data: Dict[str, Any]) -> Dict[str, Any]:
        """Load decoded values of temporal fields."""
        result = {}
        errors = []
        for key, value in data.items():
            field = meta.fields.get(key)
            if field is not None and field.is_temporal:
                try:
                    value = field.dtype.load(value)
                except (TypeError, ValueError):
                    errors.append(exceptions.InvalidFieldValue(
                        field=key,
                        given=value,
                        entity=meta.class_name,
                    ))
                    continue
            result[key] = value
        if errors:
            raise exceptions.MultipleErrors(errors)
        return result

    def reverse(self, source: Any) -> str:
        return self.format.encode(self.to_plain(source))

    def to_plain(self, source: Any) -> Any:
        return commands.reverse(self, source, seen=set())


def _attr_setter(name: str):
    def setter(obj: Any, value: Any) -> None:
        setattr(obj, name, value)
    return setter


@commands.reverse.register(DataMapper, dict)
def reverse(mapper: DataMapper, data: dict, *, seen: Set[int]) -> dict:
    return {
        k: commands.reverse(mapper, v, seen=seen)
        for k, v in data.items()
    }


@commands.reverse.register(DataMapper, (list, tuple))
def reverse(mapper: DataMapper, data, *, seen: Set[int]) -> list:
    return [commands.reverse(mapper, v, seen=seen) for v in data]


@commands.reverse.register(DataMapper, object)
def reverse(mapper: DataMapper, value: Any, *, seen: Set[int]) -> Any:
    if value is None or mapper.entities.is_transient(type(value)):
        return value
    return reverse_entity(mapper, value, seen=seen)


def reverse_entity(mapper: DataMapper, entity: Any, *, seen: Set[int]) -> Dict[str, Any]:
    """Reverse map an entity, fields first, then associations.

    `seen` holds ids of entities currently being expanded, an association
    pointing back to one of them is a cycle and is either left out or
    replaced with primary key values of the entity, depending on
    `mapper.cycles`.
    """
    meta = mapper.entities.get_metadata_for(type(entity))
    seen.add(id(entity))
    try:
        data = {}
        for name, field in meta.fields.items():
            data[name] = field.dtype.dump(field.get(entity))
        for name, assoc in meta.associations.items():
            # Attribute access loads lazy relationships.
            value = assoc.get(entity)
            if assoc.is_collection:
                if isinstance(value, dict):
                    value = value.values()
                items = (_reverse_associated(mapper, v, seen) for v in value or ())
                data[name] = [v for v in items if v is not NA]
            elif value is None:
                data[name] = None
            else:
                value = _reverse_associated(mapper, value, seen)
                if value is not NA:
                    data[name] = value
        return data
    finally:
        seen.discard(id(entity))


def _reverse_associated(mapper: DataMapper, entity: Any, seen: Set[int]) -> Any:
    if id(entity) in seen:
        if mapper.cycles == 'reference':
            meta = mapper.entities.get_metadata_for(type(entity))
            return meta.identity(entity)
        return NA
    return reverse_entity(mapper, entity, seen=seen)
