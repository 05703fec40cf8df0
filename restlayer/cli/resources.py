from typing import List
from typing import Optional

from typer import Context as TyperContext
from typer import Option
from typer import echo

from restlayer.cli.helpers.store import load_store
from restlayer.core.context import configure_context


def resources(
    ctx: TyperContext,
    modules: Optional[List[str]] = Option(None, '-m', '--module', help=(
        "Python modules with resource classes"
    )),
    services: Optional[List[str]] = Option(None, '-s', '--service-module', help=(
        "Python modules with service classes"
    )),
):
    """List resources and sub-resources"""
    options = {}
    if modules:
        options['resources'] = {'modules': modules}
    if services:
        options['services'] = {'modules': services}
    context = configure_context(ctx.obj, **options)
    store = load_store(context)

    for resource in sorted(store.resources.get_all_metadata(), key=lambda r: r.name):
        echo(f'{resource.name}  {resource.class_name}  {resource.service or "-"}')
        for sub in resource.sub_resources.values():
            echo(
                f'  {resource.name}/{sub.name}  '
                f'{sub.target or sub.field_name}  {sub.service or "-"}'
            )
