from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Union

import importlib
import inspect
import logging
import pathlib

from ruamel.yaml import YAML

from restlayer import exceptions
from restlayer.resources.components import ResourceMetadata
from restlayer.resources.components import SubResource
from restlayer.resources.mapping import get_resource_mark
from restlayer.utils.imports import full_class_name
from restlayer.utils.imports import importstr
from restlayer.utils.naming import to_resource_name

log = logging.getLogger(__name__)

yaml = YAML(typ='safe')


class Driver:
    """Reads resource metadata from some kind of declarations."""

    def load_all(self) -> Iterator[ResourceMetadata]:
        raise NotImplementedError


def build_metadata(
    cls: type,
    name: Optional[str] = None,
    service: Optional[str] = None,
    sub_resources: Union[Dict[str, Any], List[Dict[str, Any]], None] = None,
) -> ResourceMetadata:
    if isinstance(sub_resources, list):
        # YAML list form: [{name: assets, field: assets, service: ...}]
        items = [(params.get('name'), params) for params in sub_resources]
    else:
        items = list((sub_resources or {}).items())

    subs = {}
    for sub_name, params in items:
        if isinstance(params, str):
            params = {'field': params}
        elif not isinstance(params, dict) or not sub_name:
            raise exceptions.InvalidAssociationData(sub_resource=sub_name)
        if sub_name in subs:
            raise exceptions.DuplicateSubResource(sub_resource=sub_name)
        subs[sub_name] = SubResource(
            name=sub_name,
            field_name=params.get('field') or sub_name,
            service=params.get('service'),
        )
    return ResourceMetadata(
        class_name=full_class_name(cls),
        name=name or to_resource_name(cls.__name__),
        service=service,
        sub_resources=subs,
        cls=cls,
    )


class DecoratorDriver(Driver):
    """Collects classes marked with `@resource` from given modules."""

    def __init__(self, modules: Iterable[str] = ()):
        self.modules = list(modules)

    def load_all(self) -> Iterator[ResourceMetadata]:
        for module_path in self.modules:
            module = importlib.import_module(module_path)
            for _, cls in inspect.getmembers(module, inspect.isclass):
                if cls.__module__ != module.__name__:
                    continue
                mark = get_resource_mark(cls)
                if mark is None:
                    continue
                log.debug("Found resource class %s.", full_class_name(cls))
                yield build_metadata(
                    cls,
                    mark['name'],
                    mark['service'],
                    mark['sub_resources'],
                )


class DictDriver(Driver):
    """Reads resources from a dict.

        {
            'employee': {
                'class': 'app.models:Employee',
                'service': 'company.employee',
                'sub_resources': {
                    'assets': {'field': 'assets', 'service': 'company.asset'},
                },
            },
        }

    """

    def __init__(self, data: Dict[str, Dict[str, Any]]):
        self.data = data

    def load_all(self) -> Iterator[ResourceMetadata]:
        for name, params in self.data.items():
            cls = params['class']
            if isinstance(cls, str):
                cls = importstr(cls)
            yield build_metadata(
                cls,
                name,
                params.get('service'),
                params.get('sub_resources'),
            )


class YamlDriver(DictDriver):

    def __init__(self, path: pathlib.Path):
        self.path = pathlib.Path(path)
        data = yaml.load(self.path.read_text()) or {}
        super().__init__(data.get('resources', data))


class ChainDriver(Driver):

    def __init__(self, drivers: List[Driver]):
        self.drivers = drivers

    def load_all(self) -> Iterator[ResourceMetadata]:
        for driver in self.drivers:
            yield from driver.load_all()
