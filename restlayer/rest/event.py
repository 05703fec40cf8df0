from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any
from typing import Dict
from typing import Optional

if TYPE_CHECKING:
    from restlayer.resources.components import ResourceMetadata
    from restlayer.rest.request import Request


class RequestEvent:
    """Payload passed to listeners of a verb.

    Listeners put whatever must be sent back to `result`, it is reverse
    mapped by `RestManager`. `status_code` and `headers` are optional.
    """

    result: Any = None
    status_code: Optional[int] = None

    def __init__(
        self,
        request: Request,
        data: Any = None,
        resource: ResourceMetadata = None,
        parent: Optional[ResourceMetadata] = None,
        service: Any = None,
        parent_service: Any = None,
    ):
        self.request = request
        self.data = data
        self.resource = resource
        self.parent = parent
        self.service = service
        self.parent_service = parent_service
        self.headers: Dict[str, str] = {}

    def __repr__(self):
        return (
            f'<{type(self).__module__}.{type(self).__name__}('
            f'{self.request.verb.value} {self.request.resource})>'
        )

    @property
    def verb(self):
        return self.request.verb

    @property
    def identifier(self) -> Optional[str]:
        return self.request.identifier
