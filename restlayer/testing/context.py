from restlayer.components import Context
from restlayer.core.config import RawConfig
from restlayer.core.context import configure_context
from restlayer.core.context import create_context
from restlayer.core.context import load_store


def create_test_context(
    rc: RawConfig,
    *args: str,
    name: str = 'pytest',
    load: bool = True,
    **options,
) -> Context:
    """Create a context for tests, configuration is forked first.

        context = create_test_context(rc, 'mapping.cycles=reference')

    """
    context = create_context(name, rc.fork())
    if args or options:
        context = configure_context(context, *args, **options)
    if load:
        load_store(context)
    return context
