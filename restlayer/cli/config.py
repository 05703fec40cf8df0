from typing import List
from typing import Optional

import sys

from typer import Argument
from typer import Context as TyperContext

from restlayer.core.config import KeyFormat
from restlayer.core.context import configure_context


def config(
    ctx: TyperContext,
    name: Optional[List[str]] = Argument(None),
    fmt: KeyFormat = KeyFormat.cfg,
):
    """Show current configuration values"""
    context = configure_context(ctx.obj)
    rc = context.get('rc')
    rc.dump(*(name or []), fmt=fmt, file=sys.stdout)
