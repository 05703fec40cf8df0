import json
from datetime import date
from datetime import datetime
from datetime import time
from decimal import Decimal
from typing import Any
from uuid import UUID

import ujson

from restlayer import commands
from restlayer import exceptions
from restlayer.entities import dump_datetime
from restlayer.entities import dump_time
from restlayer.formats.components import Format


class Json(Format):
    name = 'json'
    content_type = 'application/json'
    accept_types = {
        'application/json',
    }

    def __init__(self, max_depth: int = 512):
        self.max_depth = max_depth

    def encode(self, data: Any) -> str:
        return commands.encode(self, data)

    def decode(self, raw: str) -> Any:
        return commands.decode(self, raw)


def encoder(o):
    if isinstance(o, datetime):
        return dump_datetime(o)
    if isinstance(o, date):
        return o.isoformat()
    if isinstance(o, time):
        return dump_time(o)
    if isinstance(o, UUID):
        return str(o)
    if isinstance(o, Decimal):
        return float(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable.")


@commands.encode.register(Json, object)
def encode(fmt: Json, data: Any) -> str:
    try:
        return ujson.dumps(
            data,
            ensure_ascii=False,
            escape_forward_slashes=False,
            default=encoder,
        )
    except TypeError as e:
        raise exceptions.NotSerializable(format=fmt.name, error=str(e)) from e


def get_nesting_depth(raw: str) -> int:
    """Return maximum nesting depth of arrays and objects in a JSON string."""
    depth = 0
    max_depth = 0
    in_string = False
    escaped = False
    for char in raw:
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in '[{':
            depth += 1
            if depth > max_depth:
                max_depth = depth
        elif char in ']}':
            depth -= 1
    return max_depth


@commands.decode.register(Json, str)
def decode(fmt: Json, raw: str) -> Any:
    if get_nesting_depth(raw) > fmt.max_depth:
        raise exceptions.JSONDepthExceeded(max_depth=fmt.max_depth)
    try:
        return json.loads(raw)
    except RecursionError:
        raise exceptions.JSONDepthExceeded(max_depth=fmt.max_depth) from None
    except json.JSONDecodeError as e:
        raise _classify_error(e) from e


def _classify_error(e: json.JSONDecodeError) -> exceptions.JSONError:
    context = {
        'error': e.msg,
        'line': e.lineno,
        'column': e.colno,
    }
    if e.msg.startswith('Invalid control character'):
        return exceptions.JSONControlCharacter(**context)
    if e.msg.startswith('Unterminated') or e.pos >= len(e.doc):
        return exceptions.JSONMalformed(**context)
    return exceptions.JSONSyntaxError(**context)
