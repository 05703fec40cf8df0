from typing import Any
from typing import Callable
from typing import Dict
from typing import Optional
from typing import TypeVar

T = TypeVar('T', bound=type)

RESOURCE_ATTR = '__resource__'


def resource(
    name: Optional[str] = None,
    *,
    service: Optional[str] = None,
    sub_resources: Optional[Dict[str, Any]] = None,
) -> Callable[[T], T]:
    """Mark an entity class as a REST resource.

    Sub-resources are given as `{name: {'field': ..., 'service': ...}}`,
    a plain string value is a shortcut for `{'field': value}`.

        @resource('employee', service='company.employee', sub_resources={
            'assets': {'field': 'assets', 'service': 'company.asset'},
        })
        class Employee(Base):
            ...

    """

    def _(cls: T) -> T:
        # Stored on the class itself, inherited marks are ignored by drivers.
        setattr(cls, RESOURCE_ATTR, {
            'owner': cls,
            'name': name,
            'service': service,
            'sub_resources': dict(sub_resources or {}),
        })
        return cls

    return _


def get_resource_mark(cls: type) -> Optional[Dict[str, Any]]:
    mark = cls.__dict__.get(RESOURCE_ATTR)
    if mark is None or mark['owner'] is not cls:
        return None
    return mark
