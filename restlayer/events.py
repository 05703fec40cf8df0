from __future__ import annotations

from typing import Any
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Sequence

import logging
import threading

log = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class _Registration(NamedTuple):
    listener: Listener
    scope: Optional[Any]


class EventManager:
    """Named events with ordered listeners.

    Listeners can be registered globally (`scope=None`), then they are
    called for every dispatch of an event, or for a scope object, then they
    are called only when an event is dispatched for that same scope, or
    that scope is given as one of `parents`. Rest dispatcher uses loaded
    service instances as scopes, so firing `GET` for one service does not
    reach listeners of unrelated services. A sub-resource request notifies
    the primary resource service as a parent.
    """

    def __init__(self):
        self._listeners: Dict[str, List[_Registration]] = {}
        self._lock = threading.Lock()

    def add_listener(self, event: str, listener: Listener, scope: Any = None) -> None:
        with self._lock:
            self._listeners.setdefault(event, []).append(_Registration(listener, scope))

    def add_listeners(
        self,
        event: str,
        listeners: Iterable[Listener],
        scope: Any = None,
    ) -> None:
        with self._lock:
            registrations = self._listeners.setdefault(event, [])
            registrations.extend(_Registration(listener, scope) for listener in listeners)

    def remove_listeners(self, scope: Any) -> None:
        """Remove all listeners registered for a given scope."""
        with self._lock:
            for event, registrations in self._listeners.items():
                self._listeners[event] = [r for r in registrations if r.scope is not scope]

    def get_listeners(
        self,
        event: str,
        scope: Any = None,
        *,
        parents: Sequence[Any] = (),
    ) -> List[Listener]:
        """Return listeners of `event` for `scope` in registration order.

        Listeners of `parents` scopes come first, each parent in given
        order, then global listeners and listeners of `scope`.
        """
        registrations = self._listeners.get(event, ())
        parents = [p for p in parents if p is not None and p is not scope]
        listeners = [
            r.listener
            for parent in parents
            for r in registrations
            if r.scope is parent
        ]
        listeners.extend(
            r.listener
            for r in registrations
            if r.scope is None or r.scope is scope
        )
        return listeners

    def has_listeners(self, event: str, scope: Any = None) -> bool:
        return bool(self.get_listeners(event, scope))

    def dispatch(
        self,
        event: str,
        payload: Any = None,
        scope: Any = None,
        *,
        parents: Sequence[Any] = (),
    ) -> None:
        """Call listeners of `event` in registration order.

        Listener errors are not caught, first failing listener stops the
        dispatch.
        """
        listeners = self.get_listeners(event, scope, parents=parents)
        log.debug("Dispatching %s to %d listener(s).", event, len(listeners))
        for listener in listeners:
            listener(payload)
