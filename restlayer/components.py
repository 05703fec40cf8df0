from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Set
from typing import Tuple

import dataclasses
import enum

if TYPE_CHECKING:
    from restlayer.core.config import RawConfig
    from restlayer.entities import MetadataProvider
    from restlayer.events import EventManager
    from restlayer.resources.factory import ResourceMetadataFactory
    from restlayer.services.factory import ServiceMetadataFactory


@dataclasses.dataclass
class _State:
    values: Dict[str, Any] = dataclasses.field(default_factory=dict)
    factories: Dict[str, Tuple[Callable, tuple, dict]] = dataclasses.field(default_factory=dict)
    # All names visible in this state.
    names: Set[str] = dataclasses.field(default_factory=set)
    # Names set or bound in this state.
    local: Set[str] = dataclasses.field(default_factory=set)


class Context:
    """Stack of named values shared by all components.

    Each `with context:` block pushes a new state, values set inside the
    block are discarded on exit. `fork()` creates a child context inheriting
    current values, so a forked context can be changed without affecting
    its parent.
    """

    _name: str
    _parent: Optional[Context]
    _states: List[_State]

    def __init__(self, name: str, parent: Context = None):
        self._name = name
        self._parent = parent
        if parent is None:
            self._states = [_State()]
        else:
            top = parent._states[-1]
            factories = {}
            for state in parent._states:
                factories.update(state.factories)
            # Values produced by bound factories are not inherited, a fork
            # calls the factory again.
            values = {k: v for k, v in top.values.items() if k not in factories}
            self._states = [_State(values, factories, set(top.names))]

    def __repr__(self):
        chain = []
        context = self
        while context is not None:
            chain.append(f'{context._name}:{len(context._states) - 1}')
            context = context._parent
        chain = ' < '.join(reversed(chain))
        return f'<{type(self).__module__}.{type(self).__name__}({chain}) at 0x{id(self):02x}>'

    def __enter__(self):
        top = self._states[-1]
        self._states.append(_State(dict(top.values), names=set(top.names)))
        return self

    def __exit__(self, *exc):
        self._states.pop()

    def fork(self, name: str) -> Context:
        return type(self)(name, self)

    def bind(self, name: str, factory: Callable, *args, **kwargs) -> None:
        """Bind a callable, called once on first access to `name`."""
        self._claim(name).factories[name] = (factory, args, kwargs)

    def set(self, name: str, value: Any) -> Any:
        self._claim(name).values[name] = value
        return value

    def get(self, name: str) -> Any:
        top = self._states[-1]
        if name in top.values:
            return top.values[name]

        for state in reversed(self._states):
            if name in state.factories:
                if name not in state.values:
                    factory, args, kwargs = state.factories[name]
                    state.values[name] = factory(*args, **kwargs)
                top.values[name] = state.values[name]
                return top.values[name]

        raise Exception(f"Unknown context variable {name!r}.")

    def has(self, name: str, local: bool = False, value: bool = False) -> bool:
        top = self._states[-1]
        if local and name not in top.local:
            return False
        if value and name not in top.values:
            return False
        return name in top.names

    def _claim(self, name: str) -> _State:
        # Redefining inherited names is allowed, local ones are not.
        state = self._states[-1]
        if name in state.local:
            raise Exception(f"Context variable {name!r} has been already set.")
        state.local.add(name)
        state.names.add(name)
        return state


class Store:
    """Process wide components, loaded once on startup."""

    rc: RawConfig = None
    entities: MetadataProvider = None
    resources: ResourceMetadataFactory = None
    services: ServiceMetadataFactory = None
    events: EventManager = None
    mappers: Dict[str, Any]
    formats: Dict[str, Any]

    def __init__(self):
        self.mappers = {}
        self.formats = {}


class Verb(enum.Enum):
    GET = 'GET'
    GET_COLLECTION = 'GET_COLLECTION'
    POST = 'POST'
    POST_COLLECTION = 'POST_COLLECTION'
    PUT = 'PUT'
    PUT_COLLECTION = 'PUT_COLLECTION'
    DELETE = 'DELETE'
    DELETE_COLLECTION = 'DELETE_COLLECTION'

    @property
    def is_collection(self) -> bool:
        return self.value.endswith('_COLLECTION')

    @classmethod
    def has_value(cls, value) -> bool:
        return value in cls._value2member_map_

    @classmethod
    def by_value(cls, value) -> Verb:
        return cls._value2member_map_[value]

    @classmethod
    def values(cls) -> List[str]:
        return list(cls._value2member_map_.keys())
