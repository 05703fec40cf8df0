from typing import Dict
from typing import Optional

import logging

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.requests import Request as HttpRequest
from starlette.responses import JSONResponse
from starlette.responses import Response as HttpResponse
from starlette.routing import Route

from restlayer.components import Context
from restlayer.components import Verb
from restlayer.exceptions import BaseError
from restlayer.exceptions import InvalidEncoding
from restlayer.exceptions import MethodNotAllowed
from restlayer.exceptions import MultipleErrors
from restlayer.exceptions import error_response
from restlayer.middlewares import ContextMiddleware
from restlayer.rest.manager import RestManager
from restlayer.rest.request import Request

log = logging.getLogger(__name__)

METHODS = ['GET', 'POST', 'PUT', 'DELETE']

SINGLE_VERBS: Dict[str, Verb] = {
    'GET': Verb.GET,
    'POST': Verb.POST,
    'PUT': Verb.PUT,
    'DELETE': Verb.DELETE,
}

COLLECTION_VERBS: Dict[str, Verb] = {
    'GET': Verb.GET_COLLECTION,
    'POST': Verb.POST_COLLECTION,
    'PUT': Verb.PUT_COLLECTION,
    'DELETE': Verb.DELETE_COLLECTION,
}


def get_verb(method: str, collection: bool) -> Verb:
    verbs = COLLECTION_VERBS if collection else SINGLE_VERBS
    try:
        return verbs[method]
    except KeyError:
        raise MethodNotAllowed(verb=method) from None


def decode_body(body: bytes) -> Optional[str]:
    if not body:
        return None
    try:
        return body.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidEncoding(encoding='utf-8', error=str(e)) from None


async def resource(request: HttpRequest) -> HttpResponse:
    """Handle all resource URLs.

        /{resource}                       collection verbs
        /{resource}/{id}                  single verbs
        /{resource}/{id}/{sub}            sub-resource collection verbs
        /{resource}/{id}/{sub}/{subid}    sub-resource single verbs

    """
    context: Context = request.state.context
    manager: RestManager = context.get('manager')

    params = request.path_params
    path = params['resource']
    if 'sub' in params:
        path = f'{path}/{params["sub"]}'
        collection = 'subid' not in params
    else:
        collection = 'id' not in params

    body = await request.body()
    req = Request(
        resource=path,
        verb=get_verb(request.method, collection),
        accept=request.headers.get('accept', '*/*'),
        content_type=request.headers.get('content-type'),
        payload=decode_body(body),
        identifier=params.get('id'),
        sub_identifier=params.get('subid'),
        params=dict(request.query_params),
    )

    resp = await run_in_threadpool(manager.process, req)
    return HttpResponse(
        resp.content,
        status_code=resp.status_code,
        media_type=resp.content_type if resp.content is not None else None,
        headers=resp.headers,
    )


async def error(request, exc):
    headers = {}

    if isinstance(exc, MultipleErrors):
        status_code = exc.status_code
        errors = [error_response(e) for e in exc.errors]

    elif isinstance(exc, BaseError):
        status_code = exc.status_code
        errors = [error_response(exc)]
        headers = exc.headers

    else:
        if isinstance(exc, HTTPException):
            status_code = exc.status_code
            message = exc.detail
        else:
            status_code = 500
            message = str(exc)

        errors = [
            {
                'code': type(exc).__name__,
                'message': message,
            }
        ]

    if status_code >= 500:
        log.exception("Error: %s", exc)
    else:
        log.info("%s: %s", type(exc).__name__, exc)

    return JSONResponse(
        {'errors': errors},
        status_code=status_code,
        headers=headers,
    )


def init(context: Context) -> Starlette:
    """Create application for a context with a loaded store."""
    rc = context.get('rc')

    context.set('manager', RestManager(context))

    routes = [
        Route('/{resource}', resource, methods=METHODS),
        Route('/{resource}/{id}', resource, methods=METHODS),
        Route('/{resource}/{id}/{sub}', resource, methods=METHODS),
        Route('/{resource}/{id}/{sub}/{subid}', resource, methods=METHODS),
    ]

    middleware = [Middleware(ContextMiddleware, context=context)]

    exception_handlers = {
        Exception: error,
        BaseError: error,
        MultipleErrors: error,
        HTTPException: error,
    }

    app = Starlette(
        debug=rc.get('debug', default=False) in (True, 'true', '1'),
        routes=routes,
        middleware=middleware,
        exception_handlers=exception_handlers,
    )

    app.state.context = context

    return app
