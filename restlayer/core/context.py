import importlib
import pathlib
from typing import List
from typing import Type
from typing import TypeVar

from restlayer import commands
from restlayer.components import Context
from restlayer.components import Store
from restlayer.core.config import CliArgs
from restlayer.core.config import RawConfig
from restlayer.core.config import read_config
from restlayer.utils.imports import importstr

ContextType = TypeVar('ContextType', bound=Context)


def create_context(
    name: str = 'restlayer',
    rc: RawConfig = None,
    context: ContextType = None,
    args: List[str] = None,
    envfile: str = None,
) -> ContextType:
    if rc is None:
        rc = read_config(args, envfile)

    load_commands(rc.get('commands', 'modules', cast=list))

    if context is None:
        Context_: Type[Context] = rc.get('components', 'core', 'context', cast=importstr, required=True)
        context = Context_(name)

    context.set('rc', rc)

    Store_: Type[Store] = rc.get('components', 'core', 'store', cast=importstr, required=True)
    context.set('store', Store_())

    bind_components(context, rc)

    return context


def bind_components(context: Context, rc: RawConfig) -> None:
    Negotiator = rc.get('components', 'negotiator', cast=importstr, required=True)
    context.bind(
        'negotiator',
        Negotiator,
        rc.get('content_types', cast=list, default=[]),
        rc.get('converters', default={}),
    )


def load_commands(modules: List[str]) -> None:
    for module_path in modules:
        module = importlib.import_module(module_path)
        path = pathlib.Path(module.__file__).resolve()
        if path.name != '__init__.py':
            continue
        path = path.parent
        base = path.parents[module_path.count('.')]
        for path in sorted(path.glob('**/*.py')):
            if path.name == '__init__.py':
                module_path = path.parent.relative_to(base)
            else:
                module_path = path.relative_to(base).with_suffix('')
            importlib.import_module('.'.join(module_path.parts))


def configure_context(context: Context, *args: str, **options) -> Context:
    """Fork context with configuration overrides.

        configure_context(context, 'services.scope=request')
        configure_context(context, resources={'modules': ['app.models']})

    Forked context gets a new, not yet loaded store.
    """
    rc: RawConfig = context.get('rc')
    context = context.fork('configure')
    rc = rc.fork()
    if args:
        rc.read([CliArgs('configure.args', list(args))])
    if options:
        rc.add('configure', options)
    context.set('rc', rc)
    context.set('store', type(context.get('store'))())
    bind_components(context, rc)
    return context


def load_store(context: Context) -> Store:
    store: Store = context.get('store')
    rc: RawConfig = context.get('rc')
    return commands.load(context, store, rc)
