from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Optional
from typing import Union

import dataclasses

from restlayer import exceptions
from restlayer.components import Verb


def get_verb(verb: Union[Verb, str]) -> Verb:
    if isinstance(verb, Verb):
        return verb
    if not Verb.has_value(verb):
        raise exceptions.MethodNotAllowed(verb=verb)
    return Verb.by_value(verb)


@dataclasses.dataclass
class Request:
    # `name` or `name/sub_name`
    resource: str
    verb: Verb
    accept: str = '*/*'
    content_type: Optional[str] = None
    payload: Optional[str] = None
    identifier: Optional[str] = None
    sub_identifier: Optional[str] = None
    params: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        self.verb = get_verb(self.verb)


@dataclasses.dataclass
class Response:
    content: Optional[str] = None
    status_code: int = 200
    content_type: Optional[str] = None
    headers: Dict[str, str] = dataclasses.field(default_factory=dict)
