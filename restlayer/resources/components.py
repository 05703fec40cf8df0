from __future__ import annotations

from types import MappingProxyType
from typing import Dict
from typing import Mapping
from typing import Optional

import dataclasses

from restlayer import commands


@dataclasses.dataclass(frozen=True)
class SubResource:
    name: str
    field_name: str
    service: Optional[str] = None
    # Class name of the association target, set when resource metadata is
    # loaded.
    target: Optional[str] = None

    type = 'sub_resource'


@dataclasses.dataclass(frozen=True)
class ResourceMetadata:
    class_name: str
    name: str
    service: Optional[str] = None
    sub_resources: Mapping[str, SubResource] = dataclasses.field(default_factory=dict)
    cls: Optional[type] = dataclasses.field(default=None, compare=False)

    type = 'resource'

    def __post_init__(self):
        object.__setattr__(self, 'sub_resources', MappingProxyType(dict(self.sub_resources)))

    def get_sub_resource(self, name: str) -> Optional[SubResource]:
        return self.sub_resources.get(name)

    def replace(self, **changes) -> ResourceMetadata:
        return dataclasses.replace(self, **changes)


@commands.get_error_context.register(ResourceMetadata)
def get_error_context(resource: ResourceMetadata, *, prefix='this') -> Dict[str, str]:
    return {
        'resource': f'{prefix}.name',
        'class_name': f'{prefix}.class_name',
    }


@commands.get_error_context.register(SubResource)
def get_error_context(sub: SubResource, *, prefix='this') -> Dict[str, str]:
    return {
        'sub_resource': f'{prefix}.name',
        'field': f'{prefix}.field_name',
    }
