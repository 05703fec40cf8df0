from __future__ import annotations

from typing import Dict
from typing import List
from typing import Optional
from typing import Union

import dataclasses
import logging
import threading

from restlayer import exceptions
from restlayer.entities import MetadataProvider
from restlayer.resources.components import ResourceMetadata
from restlayer.resources.drivers import Driver
from restlayer.utils.imports import full_class_name

log = logging.getLogger(__name__)


class ResourceMetadataFactory:
    """Registry of resource metadata.

    Metadata is added once on startup, either directly with `add()` or with
    `load()` from a driver, after that the factory is locked and can only be
    read.
    """

    def __init__(
        self,
        driver: Optional[Driver] = None,
        entities: Optional[MetadataProvider] = None,
    ):
        self.driver = driver
        self.entities = entities
        self._by_class: Dict[str, ResourceMetadata] = {}
        self._by_name: Dict[str, ResourceMetadata] = {}
        self._locked = False
        self._lock = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._locked

    def add(self, metadata: ResourceMetadata) -> ResourceMetadata:
        with self._lock:
            if self._locked:
                raise exceptions.MetadataLocked(name=metadata.name)
            existing = self._by_name.get(metadata.name)
            if existing is not None:
                raise exceptions.DuplicateResourceName(
                    metadata,
                    existing=existing.class_name,
                )
            if metadata.class_name in self._by_class:
                raise exceptions.DuplicateResourceName(
                    metadata,
                    existing=self._by_class[metadata.class_name].name,
                )
            self._by_class[metadata.class_name] = metadata
            self._by_name[metadata.name] = metadata
        return metadata

    def load(self) -> ResourceMetadataFactory:
        if self.driver is not None:
            for metadata in self.driver.load_all():
                self.add(metadata)
        self.link()
        self.lock()
        log.info("Loaded %d resource(s).", len(self._by_name))
        return self

    def link(self) -> None:
        """Resolve association target types of all sub-resources."""
        with self._lock:
            if self._locked:
                raise exceptions.MetadataLocked(name='link')
            for class_name, metadata in list(self._by_class.items()):
                if not metadata.sub_resources:
                    continue
                linked = metadata.replace(sub_resources={
                    name: self._link_sub_resource(metadata, sub)
                    for name, sub in metadata.sub_resources.items()
                })
                self._by_class[class_name] = linked
                self._by_name[linked.name] = linked

    def _link_sub_resource(self, metadata, sub):
        if sub.target is not None or self.entities is None or metadata.cls is None:
            return sub
        entity = self.entities.get_metadata_for(metadata.cls)
        association = entity.associations.get(sub.field_name)
        if association is None:
            raise exceptions.InvalidAssociation(sub, resource=metadata.name)
        return dataclasses.replace(sub, target=full_class_name(association.target))

    def lock(self) -> None:
        self._locked = True

    def get_metadata_for(self, cls: Union[str, type]) -> ResourceMetadata:
        class_name = cls if isinstance(cls, str) else full_class_name(cls)
        try:
            return self._by_class[class_name]
        except KeyError:
            raise exceptions.ResourceNotFound(resource=class_name) from None

    def get_metadata_by_resource_name(self, name: str) -> ResourceMetadata:
        try:
            return self._by_name[name]
        except KeyError:
            raise exceptions.ResourceNotFound(resource=name) from None

    def has_metadata_for(self, cls: Union[str, type]) -> bool:
        class_name = cls if isinstance(cls, str) else full_class_name(cls)
        return class_name in self._by_class

    def get_all_class_names(self) -> List[str]:
        return list(self._by_class)

    def get_all_metadata(self) -> List[ResourceMetadata]:
        return list(self._by_class.values())
