import logging

from restlayer.api import init
from restlayer.core.context import create_context
from restlayer.core.context import load_store
from restlayer.logging_config import setup_logging

context = create_context('asgi')

rc = context.get('rc')
if rc.get('logging', 'dir'):
    setup_logging(rc.get('logging', 'dir'), rc.get('logging', 'level', default='info'))
else:
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s',
    )

load_store(context)

app = init(context)
