from typing import Dict
from typing import Iterable
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Tuple

import re

from restlayer import exceptions

ACCEPT_HEADER_MAX_LENGTH = 1000
accept_re = re.compile(
    r"""
        # "application/json", "text/*", "*/*"
        ([\w.+-]+|\*)/([\w.+-]+|\*)
        # Parameters, only "q" is used.
        ((?:\s*;\s*[\w.+-]+\s*=\s*[^,;]*)*)
    """,
    re.VERBOSE,
)
quality_re = re.compile(r';\s*q\s*=\s*([0-9.]+)')


class NegotiatedResult(NamedTuple):
    content_type: str
    converter: str


def parse_accept_header(accept: str) -> List[Tuple[str, float]]:
    """Parse Accept header into `(media range, quality)` pairs.

    Pairs are ordered by quality, ranges with same quality keep header
    order. Ranges with zero quality and unparsable ranges are left out.

        >>> parse_accept_header('text/html;q=0.5, application/json')
        [('application/json', 1.0), ('text/html', 0.5)]

    """
    result = []
    for part in accept[:ACCEPT_HEADER_MAX_LENGTH].lower().split(','):
        match = accept_re.fullmatch(part.strip())
        if match is None:
            continue
        type_, subtype, params = match.groups()
        quality = quality_re.search(params)
        try:
            q = float(quality.group(1)) if quality else 1.0
        except ValueError:
            continue
        if q > 0:
            result.append((f'{type_}/{subtype}', q))
    result.sort(key=lambda x: x[1], reverse=True)
    return result


def _matches(media_range: str, content_type: str) -> bool:
    if media_range == '*/*':
        return True
    type_, subtype = media_range.split('/', 1)
    if subtype == '*':
        return content_type.split('/', 1)[0] == type_
    return media_range == content_type


class Negotiator:
    """Chooses response content type and its converter from Accept header.

    `content_types` are offered content types in order of server preference,
    `converters` map a content type to a converter name.
    """

    def __init__(self, content_types: Iterable[str], converters: Dict[str, str]):
        self.content_types = list(content_types)
        self.converters = dict(converters)

    def negotiate(
        self,
        accept: Optional[str],
        available: Optional[Iterable[str]] = None,
    ) -> NegotiatedResult:
        available = self.content_types if available is None else list(available)
        available = [c for c in available if c in self.converters]
        for media_range, _ in parse_accept_header(accept or '*/*'):
            for content_type in available:
                if _matches(media_range, content_type):
                    return NegotiatedResult(
                        content_type,
                        self.converters[content_type],
                    )
        raise exceptions.NotAcceptable(accept=accept)

    def get_converter(self, content_type: str) -> str:
        """Return converter name for a request content type."""
        media_type = content_type.split(';', 1)[0].strip().lower()
        try:
            return self.converters[media_type]
        except KeyError:
            raise exceptions.UnsupportedMediaType(content_type=content_type) from None
