CONFIG = {
    'commands': {
        'modules': [
            'restlayer.core',
            'restlayer.datamapper',
            'restlayer.formats',
            'restlayer.resources',
            'restlayer.services',
        ],
    },
    'components': {
        'core': {
            'context': 'restlayer.components:Context',
            'store': 'restlayer.components:Store',
        },
        'entities': 'restlayer.entities:SqlAlchemyMetadata',
        'events': 'restlayer.events:EventManager',
        'negotiator': 'restlayer.formats.negotiation:Negotiator',
    },
    # Response content types in order of server preference.
    'content_types': ['application/json'],
    # Content type -> format name.
    'converters': {
        'application/json': 'json',
    },
    'formats': {
        'json': 'restlayer.formats.json:Json',
    },
    # Format name -> data mapper, services refer to mappers by these names.
    'mappers': {
        'json': 'restlayer.datamapper.json:JsonMapper',
    },
    'resources': {
        # decorator: collect `@resource` classes from `resources.modules`.
        # yaml: read resource definitions from `resources.path`.
        'driver': 'decorator',
        'modules': [],
        'path': None,
    },
    'services': {
        'modules': [],
        # process: service instances live as long as the rest manager.
        # request: service cache is cleared after each processed request.
        'scope': 'process',
    },
    'mapping': {
        # omit | reference
        'cycles': 'omit',
        # reject | ignore
        'unknown_fields': 'reject',
        'max_depth': 512,
    },
    'logging': {
        # Daily rotated log files are written here, when set.
        'dir': None,
        'level': 'info',
    },
    'debug': False,
}
