from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Union

import types

from restlayer import commands
from restlayer import exceptions
from restlayer.components import Verb
from restlayer.utils.imports import full_class_name

if TYPE_CHECKING:
    from restlayer.datamapper.components import DataMapper
    from restlayer.resources.components import ResourceMetadata


def _event_name(verb: Union[Verb, str]) -> str:
    return verb.value if isinstance(verb, Verb) else Verb(verb).value


class ServiceMetadata:
    """Listener methods of a service class, by verb.

    Listeners are kept as functions taken from the service class, they are
    bound to a service instance once, when the instance is loaded.
    """

    type = 'service'

    def __init__(self, cls: type, id: str = None, data_mapper: str = 'json'):
        self.cls = cls
        self.class_name = full_class_name(cls)
        self.id = id or self.class_name
        self.data_mapper = data_mapper
        self._listeners: Dict[str, List[Callable]] = {}

    def __repr__(self):
        return f'<{type(self).__module__}.{type(self).__name__}(id={self.id!r})>'

    def add_listener(self, verb: Union[Verb, str], method: Union[str, Callable]) -> None:
        if isinstance(method, str):
            func = getattr(self.cls, method, None)
            if not callable(func):
                raise exceptions.UnknownListener(self, method=method)
            method = func
        self._listeners.setdefault(_event_name(verb), []).append(method)

    def get_listeners(self, verb: Union[Verb, str]) -> List[Callable]:
        return list(self._listeners.get(_event_name(verb), ()))

    def set_all_listeners(self, listeners: Mapping[Union[Verb, str], Iterable]) -> None:
        self._listeners = {}
        for verb, methods in listeners.items():
            for method in methods:
                self.add_listener(verb, method)

    def get_all_listeners(self) -> Dict[str, List[Callable]]:
        return {k: list(v) for k, v in self._listeners.items()}

    def bind_listeners(self, service: Any) -> Dict[str, List[Callable]]:
        """Return all listeners bound to a given service instance."""
        return {
            event: [types.MethodType(func, service) for func in funcs]
            for event, funcs in self._listeners.items()
        }


@commands.get_error_context.register(ServiceMetadata)
def get_error_context(service: ServiceMetadata, *, prefix='this') -> Dict[str, str]:
    return {
        'service': f'{prefix}.id',
        'class_name': f'{prefix}.class_name',
    }


class Service:
    """Base class for services.

    Service instances are created by `ServiceManager`, one per resource
    context and owner, owner is usually a `RestManager`.
    """

    def __init__(self, owner: Any, resource: ResourceMetadata):
        self.owner = owner
        self.resource = resource

    @property
    def metadata(self) -> ServiceMetadata:
        return self.owner.get_service_metadata(type(self))

    @property
    def data_mapper(self) -> DataMapper:
        return self.owner.get_data_mapper(self.metadata.data_mapper)
