from typing import Callable
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple
from typing import TypeVar
from typing import Union

from restlayer.components import Verb

T = TypeVar('T', bound=type)
F = TypeVar('F', bound=Callable)

SERVICE_ATTR = '__service__'
LISTENS_ATTR = '__listens__'


def service(id: Optional[str] = None, *, data_mapper: str = 'json') -> Callable[[T], T]:
    """Mark a class as a service, `id` is what resources refer to."""

    def _(cls: T) -> T:
        setattr(cls, SERVICE_ATTR, {
            'owner': cls,
            'id': id,
            'data_mapper': data_mapper,
        })
        return cls

    return _


def listener(*verbs: Union[Verb, str]) -> Callable[[F], F]:
    """Register a service method as listener of given verbs.

        @listener(Verb.GET)
        def get(self, event):
            ...

    """

    values = [v.value if isinstance(v, Verb) else Verb(v).value for v in verbs]

    def _(func: F) -> F:
        listens: List[str] = list(getattr(func, LISTENS_ATTR, []))
        # Decorators are applied bottom up, prepend to keep the top most
        # decorator first.
        listens[:0] = values
        setattr(func, LISTENS_ATTR, listens)
        return func

    return _


def get_service_mark(cls: type) -> Optional[Dict]:
    mark = cls.__dict__.get(SERVICE_ATTR)
    if mark is None or mark['owner'] is not cls:
        return None
    return mark


def iter_listeners(cls: type) -> Iterator[Tuple[str, Callable]]:
    """Yield `(verb, function)` pairs in method definition order.

    Base class methods come first, overridden methods keep position and
    verbs of the base class definition, unless decorated again.
    """
    names = []
    for klass in reversed(cls.__mro__):
        for name in vars(klass):
            if name not in names:
                names.append(name)
    for name in names:
        func = getattr(cls, name, None)
        if not callable(func):
            continue
        verbs = getattr(func, LISTENS_ATTR, None)
        if verbs is None:
            verbs = next((
                getattr(klass.__dict__[name], LISTENS_ATTR)
                for klass in cls.__mro__
                if hasattr(klass.__dict__.get(name), LISTENS_ATTR)
            ), ())
        for verb in verbs:
            yield verb, func
