from starlette.types import ASGIApp
from starlette.types import Receive
from starlette.types import Scope
from starlette.types import Send

from restlayer.components import Context


class ContextMiddleware:
    """Adds `request.state.context`.

    Each request gets its own fork of the global, already loaded context, so
    request handlers can set context values without affecting other
    requests.
    """

    def __init__(self, app: ASGIApp, *, context: Context) -> None:
        self.app = app
        self.context = context

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] == 'http':
            with self.context.fork('request') as context:
                scope.setdefault('state', {})
                scope['state']['context'] = context
                await self.app(scope, receive, send)
        else:
            await self.app(scope, receive, send)
