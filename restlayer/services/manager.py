from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple

import logging
import threading

from restlayer import exceptions
from restlayer.events import EventManager
from restlayer.resources.components import ResourceMetadata
from restlayer.services.factory import ServiceMetadataFactory

log = logging.getLogger(__name__)


def get_service_key(owner: Any, resource_class_name: str) -> str:
    return f'{resource_class_name}#{id(owner):x}'


class ServiceManager:
    """Loads and caches service instances.

    There is at most one instance per service class, resource class name and
    owner. When an instance is created all listeners of its service are
    registered with the event manager, scoped to that instance. Creating and
    registering happens under one lock, so listeners are registered exactly
    once per instance.

    Keys use `id(owner)`, so cached instances must not outlive their owner,
    call `clear()` when the owner goes away.
    """

    def __init__(self, services: ServiceMetadataFactory, events: EventManager):
        self.services = services
        self.events = events
        self._loaded: Dict[Tuple[str, str], Any] = {}
        self._lock = threading.RLock()

    def __len__(self):
        return len(self._loaded)

    def get_service(
        self,
        service_id: str,
        owner: Any,
        resource_class_name: str,
        *,
        resource: Optional[ResourceMetadata] = None,
    ) -> Any:
        metadata = self.services.get_metadata_for(service_id)
        key = (metadata.class_name, get_service_key(owner, resource_class_name))
        with self._lock:
            if key not in self._loaded:
                if resource is None:
                    resource = owner.get_resource_metadata(resource_class_name)
                service = metadata.cls(owner, resource)
                for event, listeners in metadata.bind_listeners(service).items():
                    self.events.add_listeners(event, listeners, scope=service)
                self._loaded[key] = service
                log.debug(
                    "Loaded service %s for %s.",
                    metadata.class_name,
                    resource_class_name,
                )
            return self._loaded[key]

    def has_service(
        self,
        service_id: str,
        owner: Any,
        resource_class_name: str,
    ) -> bool:
        try:
            metadata = self.services.get_metadata_for(service_id)
        except exceptions.ServiceNotFound:
            return False
        key = (metadata.class_name, get_service_key(owner, resource_class_name))
        return key in self._loaded

    def clear(self) -> None:
        with self._lock:
            for service in self._loaded.values():
                self.events.remove_listeners(service)
            self._loaded.clear()
