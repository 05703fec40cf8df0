import re

from unidecode import unidecode

camel_cased_words = re.compile(r'([A-Z][a-z]+)')
split_words_re = re.compile(r'[^a-zA-Z0-9]+')
number_prefix_re = re.compile(r'^([0-9]+)')


def to_resource_name(name: str) -> str:
    """Derive wire name from a class name.

        Employee     -> employee
        CompanyAsset -> company_asset
        HTTPLog      -> http_log

    """
    name = unidecode(name)
    name = camel_cased_words.sub(r' \1', name).strip()
    words = filter(None, split_words_re.split(name))
    name = '_'.join(words).lower()
    return number_prefix_re.sub(r'n\1', name)
