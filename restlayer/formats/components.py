from typing import Any
from typing import Set


class Format:
    name: str
    content_type: str
    accept_types: Set[str]

    def __repr__(self):
        return f'<{type(self).__module__}.{type(self).__name__}({self.content_type})>'

    def encode(self, data: Any) -> str:
        raise NotImplementedError

    def decode(self, raw: str) -> Any:
        raise NotImplementedError
