from __future__ import annotations

from typing import Any
from typing import Union

import logging

from restlayer import exceptions
from restlayer.components import Context
from restlayer.components import Store
from restlayer.components import Verb
from restlayer.datamapper.components import DataMapper
from restlayer.formats.components import Format
from restlayer.formats.negotiation import Negotiator
from restlayer.resources.components import ResourceMetadata
from restlayer.rest.dispatcher import Dispatcher
from restlayer.rest.request import Request
from restlayer.rest.request import Response
from restlayer.services.components import ServiceMetadata
from restlayer.services.manager import ServiceManager

log = logging.getLogger(__name__)

CREATED_VERBS = (Verb.POST, Verb.POST_COLLECTION)


class RestManager:
    """Processes requests using components of a loaded store.

    This is the owner of all service instances it creates, services reach
    metadata and data mappers through it.
    """

    def __init__(self, context: Context):
        self.context = context
        self.store: Store = context.get('store')
        self.negotiator: Negotiator = context.get('negotiator')
        rc = context.get('rc')
        self.request_scoped = rc.get('services', 'scope', default='process') == 'request'
        self.service_manager = self.create_service_manager()
        self.dispatcher = self.create_dispatcher(self.service_manager)

    def create_service_manager(self) -> ServiceManager:
        return ServiceManager(self.store.services, self.store.events)

    def create_dispatcher(self, service_manager: ServiceManager) -> Dispatcher:
        return Dispatcher(
            self.store.resources,
            service_manager,
            owner=self,
            mappers=self.store.mappers,
        )

    def process(self, request: Request) -> Response:
        """Process a request and return an encoded response.

        With request scoped services each call gets its own service cache,
        services created for one request are torn down when it ends, without
        touching services of other requests running at the same time.
        """
        if not self.request_scoped:
            return self._process(request, self.dispatcher)
        service_manager = self.create_service_manager()
        try:
            return self._process(request, self.create_dispatcher(service_manager))
        finally:
            service_manager.clear()

    def _process(self, request: Request, dispatcher: Dispatcher) -> Response:
        negotiated = self.negotiator.negotiate(request.accept)
        mapper = self.get_data_mapper(negotiated.converter)
        data = self.decode_payload(request)
        event = dispatcher.dispatch(request, data)
        result = event.result
        if event.status_code is not None:
            status_code = event.status_code
        elif request.verb in CREATED_VERBS:
            status_code = 201
        elif result is None:
            status_code = 204
        else:
            status_code = 200
        content = None if result is None else mapper.reverse(result)
        return Response(
            content,
            status_code=status_code,
            content_type=negotiated.content_type,
            headers=dict(event.headers),
        )

    def decode_payload(self, request: Request) -> Any:
        if request.payload is None or request.payload == '':
            return None
        content_type = request.content_type or self.negotiator.content_types[0]
        converter = self.negotiator.get_converter(content_type)
        return self.get_format(converter, content_type).decode(request.payload)

    def get_format(self, name: str, content_type: str) -> Format:
        try:
            return self.store.formats[name]
        except KeyError:
            raise exceptions.UnsupportedMediaType(content_type=content_type) from None

    def get_resource_metadata(self, class_name: str) -> ResourceMetadata:
        return self.store.resources.get_metadata_for(class_name)

    def get_resource_metadata_by_name(self, name: str) -> ResourceMetadata:
        return self.store.resources.get_metadata_by_resource_name(name)

    def get_service_metadata(self, service: Union[str, type]) -> ServiceMetadata:
        return self.store.services.get_metadata_for(service)

    def get_data_mapper(self, name: str) -> DataMapper:
        return self.dispatcher.get_data_mapper(name)
