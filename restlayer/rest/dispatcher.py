from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple

import logging

from restlayer import exceptions
from restlayer.datamapper.components import DataMapper
from restlayer.resources.components import ResourceMetadata
from restlayer.resources.components import SubResource
from restlayer.resources.factory import ResourceMetadataFactory
from restlayer.rest.event import RequestEvent
from restlayer.rest.request import Request
from restlayer.services.components import ServiceMetadata
from restlayer.services.manager import ServiceManager

log = logging.getLogger(__name__)


class Dispatcher:
    """Routes a request to a service and fires the request verb.

    Resource path is either `name` or `name/sub_name`. For a sub-resource
    the service declared on the sub-resource handles the request, in the
    context of the association target. Listeners of the primary resource
    service are notified too, before the sub-resource service listeners,
    so the sub-resource service has the last word on `event.result`.

    Errors are never caught here, mapping them to responses is up to the
    caller.
    """

    def __init__(
        self,
        resources: ResourceMetadataFactory,
        service_manager: ServiceManager,
        *,
        owner: Any = None,
        mappers: Optional[Dict[str, DataMapper]] = None,
    ):
        self.resources = resources
        self.service_manager = service_manager
        self.owner = self if owner is None else owner
        self.mappers = mappers or {}

    @property
    def events(self):
        return self.service_manager.events

    def dispatch(self, request: Request, data: Any = None) -> RequestEvent:
        resource, parent = self.resolve(request.resource)
        service_id = resource.service
        if service_id is None:
            raise exceptions.ServiceNotFound(resource, service=service_id)

        service = self.service_manager.get_service(
            service_id,
            self.owner,
            resource.class_name,
            resource=resource,
        )

        parent_service = None
        if parent is not None and parent.service is not None:
            parent_service = self.service_manager.get_service(
                parent.service,
                self.owner,
                parent.class_name,
                resource=parent,
            )

        event = RequestEvent(
            request,
            data=data,
            resource=resource,
            parent=parent,
            service=service,
            parent_service=parent_service,
        )
        log.debug("Dispatching %s to %r.", request.verb.value, service)
        self.events.dispatch(
            request.verb.value,
            event,
            scope=service,
            parents=[parent_service],
        )
        return event

    def resolve(self, path: str) -> Tuple[ResourceMetadata, Optional[ResourceMetadata]]:
        """Return `(resource, parent)` context for a resource path."""
        name, _, sub_name = path.partition('/')
        primary = self.resources.get_metadata_by_resource_name(name)
        if not sub_name:
            return primary, None

        sub = primary.get_sub_resource(sub_name)
        if sub is None:
            raise exceptions.ResourceNotFound(resource=path)
        return self._get_sub_resource_context(primary, sub), primary

    def _get_sub_resource_context(
        self,
        primary: ResourceMetadata,
        sub: SubResource,
    ) -> ResourceMetadata:
        if sub.target is not None and self.resources.has_metadata_for(sub.target):
            metadata = self.resources.get_metadata_for(sub.target)
            return metadata.replace(service=sub.service or metadata.service)
        return ResourceMetadata(
            class_name=sub.target or f'{primary.class_name}.{sub.field_name}',
            name=sub.name,
            service=sub.service,
        )

    def get_resource_metadata(self, class_name: str) -> ResourceMetadata:
        return self.resources.get_metadata_for(class_name)

    def get_service_metadata(self, service) -> ServiceMetadata:
        return self.service_manager.services.get_metadata_for(service)

    def get_data_mapper(self, name: str) -> DataMapper:
        try:
            return self.mappers[name]
        except KeyError:
            raise exceptions.DataMapperNotFound(mapper=name) from None
