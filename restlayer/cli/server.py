import logging
from typing import List
from typing import Optional

from typer import Context as TyperContext
from typer import Option
from typer import echo

from restlayer.cli.helpers.store import load_store
from restlayer.core.context import configure_context

log = logging.getLogger(__name__)


def run(
    ctx: TyperContext,
    modules: Optional[List[str]] = Option(None, '-m', '--module', help=(
        "Python modules with resource classes"
    )),
    services: Optional[List[str]] = Option(None, '-s', '--service-module', help=(
        "Python modules with service classes"
    )),
    host: str = Option('127.0.0.1', help="Run server on given host"),
    port: int = Option(8000, help="Run server on given port"),
):
    """Run development server"""
    import uvicorn
    import restlayer.api

    options = {}
    if modules:
        options['resources'] = {'modules': modules}
    if services:
        options['services'] = {'modules': services}
    context = configure_context(ctx.obj, **options)
    load_store(context)
    app = restlayer.api.init(context)

    echo("Restlayer has started!")
    uvicorn.run(app, host=host, port=port)
