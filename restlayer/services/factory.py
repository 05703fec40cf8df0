from __future__ import annotations

from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Union

import importlib
import inspect
import logging
import threading

from restlayer import exceptions
from restlayer.services.components import ServiceMetadata
from restlayer.services.mapping import SERVICE_ATTR
from restlayer.services.mapping import get_service_mark
from restlayer.services.mapping import iter_listeners
from restlayer.utils.imports import full_class_name
from restlayer.utils.imports import importstr

log = logging.getLogger(__name__)


class ServiceMetadataFactory:
    """Resolves service ids to classes and builds their metadata.

    A service id is either an id registered with `register()` (or given to
    `@service()` in one of scanned modules), or a `module:Name` import path.
    """

    def __init__(self, modules: Iterable[str] = ()):
        self.modules = list(modules)
        self._classes: Dict[str, type] = {}
        self._metadata: Dict[type, ServiceMetadata] = {}
        self._lock = threading.Lock()

    def load(self) -> ServiceMetadataFactory:
        for module_path in self.modules:
            module = importlib.import_module(module_path)
            for _, cls in inspect.getmembers(module, inspect.isclass):
                if cls.__module__ != module.__name__:
                    continue
                if get_service_mark(cls) is not None:
                    self.register(cls)
        log.info("Loaded %d service(s).", len(self._classes))
        return self

    def register(self, cls: type, service_id: Optional[str] = None) -> str:
        mark = get_service_mark(cls) or {}
        service_id = service_id or mark.get('id') or full_class_name(cls)
        with self._lock:
            existing = self._classes.get(service_id)
            if existing is not None and existing is not cls:
                raise exceptions.DuplicateService(
                    service=service_id,
                    existing=full_class_name(existing),
                )
            self._classes[service_id] = cls
        return service_id

    def resolve(self, service_id: str) -> type:
        if service_id in self._classes:
            return self._classes[service_id]
        if ':' in service_id:
            try:
                cls = importstr(service_id)
            except (ImportError, AttributeError, ValueError):
                raise exceptions.ServiceNotFound(service=service_id) from None
            if inspect.isclass(cls):
                return cls
        raise exceptions.ServiceNotFound(service=service_id)

    def has_service(self, service_id: str) -> bool:
        try:
            self.resolve(service_id)
        except exceptions.ServiceNotFound:
            return False
        return True

    def get_all_service_ids(self) -> List[str]:
        return list(self._classes)

    def get_metadata_for(self, service: Union[str, type]) -> ServiceMetadata:
        cls = service if isinstance(service, type) else self.resolve(service)
        metadata = self._metadata.get(cls)
        if metadata is not None:
            return metadata
        with self._lock:
            if cls not in self._metadata:
                self._metadata[cls] = self._build(cls, service)
            return self._metadata[cls]

    def _build(self, cls: type, service: Union[str, type]) -> ServiceMetadata:
        # Service options are inherited, so a subclass of a decorated
        # service works without decorating it again.
        mark = getattr(cls, SERVICE_ATTR, None) or {}
        service_id = mark.get('id') if get_service_mark(cls) else None
        if service_id is None and isinstance(service, str):
            service_id = service
        metadata = ServiceMetadata(
            cls,
            id=service_id,
            data_mapper=mark.get('data_mapper') or 'json',
        )
        for verb, func in iter_listeners(cls):
            metadata.add_listener(verb, func)
        log.debug("Built service metadata for %s.", metadata.class_name)
        return metadata
