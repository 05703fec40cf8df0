from restlayer import commands
from restlayer import exceptions
from restlayer.components import Context
from restlayer.components import Store
from restlayer.core.config import RawConfig
from restlayer.resources.drivers import DecoratorDriver
from restlayer.resources.drivers import Driver
from restlayer.resources.drivers import YamlDriver
from restlayer.resources.factory import ResourceMetadataFactory
from restlayer.services.factory import ServiceMetadataFactory
from restlayer.utils.imports import importstr


def get_resource_driver(rc: RawConfig) -> Driver:
    driver = rc.get('resources', 'driver', default='decorator')
    if driver == 'decorator':
        return DecoratorDriver(rc.get('resources', 'modules', cast=list, default=[]))
    if driver == 'yaml':
        return YamlDriver(rc.get('resources', 'path', required=True))
    raise exceptions.UnknownPolicy(
        option='resources.driver',
        value=driver,
        choices='decorator, yaml',
    )


@commands.load.register(Context, Store, RawConfig)
def load(context: Context, store: Store, rc: RawConfig) -> Store:
    """Load metadata, formats and data mappers from configuration."""

    store.rc = rc

    Entities = rc.get('components', 'entities', cast=importstr, required=True)
    store.entities = Entities()

    Events = rc.get('components', 'events', cast=importstr, required=True)
    store.events = Events()

    store.resources = ResourceMetadataFactory(
        get_resource_driver(rc),
        store.entities,
    ).load()

    store.services = ServiceMetadataFactory(
        rc.get('services', 'modules', cast=list, default=[]),
    ).load()

    max_depth = rc.get('mapping', 'max_depth', cast=int, default=512)

    store.formats = {}
    for name in rc.keys('formats'):
        Format = rc.get('formats', name, cast=importstr, required=True)
        store.formats[name] = Format(max_depth=max_depth)

    store.mappers = {}
    for name in rc.keys('mappers'):
        Mapper = rc.get('mappers', name, cast=importstr, required=True)
        store.mappers[name] = Mapper(
            store.entities,
            cycles=rc.get('mapping', 'cycles', default='omit'),
            unknown_fields=rc.get('mapping', 'unknown_fields', default='reject'),
            max_depth=max_depth,
        )

    return store
