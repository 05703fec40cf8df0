from typing import Any
from typing import Dict
from typing import Iterable
from typing import Optional
from typing import Tuple

import logging
import re

from restlayer import commands

log = logging.getLogger(__name__)


class UnknownValue:

    def __str__(self):
        return '[UNKNOWN]'

    __repr__ = __str__


UNKNOWN_VALUE = UnknownValue()


@commands.get_error_context.register(object)
def get_error_context(this: object, *, prefix: str = 'this') -> Dict[str, str]:
    return {}


def resolve_context_vars(
    schema: Dict[str, str],
    this: Optional[Any],
    kwargs: Dict[str, Any],
) -> Dict[str, Any]:
    """Resolve error context values from given kwargs and schema.

    Schema values are dotted paths starting from one of the kwargs names,
    `this` refers to the first positional argument given to the error.
    Trailing `()` in a path segment calls the attribute.
    """
    if this is not None:
        schema = {
            **commands.get_error_context(this),
            **schema,
        }
        kwargs = {**kwargs, 'this': this}

    added = set()
    context = {}
    if this is not None:
        context['component'] = type(this).__module__ + '.' + type(this).__name__
    for k, path in schema.items():
        path = path or k
        name, *names = path.split('.')
        if name not in kwargs:
            continue
        added.add(name)
        value = kwargs
        for name in [name] + names:
            call = name.endswith('()')
            if call:
                name = name[:-2]
            if isinstance(value, dict):
                value = value.get(name)
            elif hasattr(value, name):
                value = getattr(value, name)
            else:
                value = UNKNOWN_VALUE
                break
            if call:
                value = value()
        if value is not UNKNOWN_VALUE:
            context[k] = value

    for k in set(kwargs) - added:
        v = kwargs[k]
        if not isinstance(v, (int, float, str)):
            v = str(v)
        context[k] = v

    names = [
        'component',
        'resource',
        'sub_resource',
        'service',
        'entity',
        'field',
        'verb',
        'content_type',
    ]
    names += [x for x in schema if x not in names]
    names += [x for x in kwargs if x not in names]

    def sort_key(item: Tuple[str, Any]) -> Tuple[int, str]:
        key = item[0]
        try:
            return names.index(key), key
        except ValueError:
            return len(names), key

    return {k: v for k, v in sorted(context.items(), key=sort_key)}


class BaseError(Exception):
    type: str = None
    status_code: int = 500
    template: str = None
    headers: Dict[str, str] = {}
    context: Dict[str, Any] = {}

    def __init__(self, *args, **kwargs):
        if len(args) == 0:
            this = None
        elif len(args) == 1:
            this = args[0]
        else:
            this = None
            log.error(
                "Only one positional argument is allowed, but %d was given.",
                len(args),
                stack_info=True,
            )

        self.type = this.type if this is not None and hasattr(this, 'type') else 'system'
        self.context = resolve_context_vars(self.context, this, kwargs)

    def __str__(self):
        return (
            self.message + '\n' +
            ('  Context:\n' if self.context else '') +
            ''.join(
                f'    {k}: {v}\n'
                for k, v in self.context.items()
            )
        )

    @property
    def message(self):
        try:
            return _render_template(self)
        except KeyError:
            log.exception("Can't render error message for %s.", self.__class__.__name__)
            return self.template


def error_response(error: BaseError) -> Dict[str, Any]:
    return {
        'type': error.type,
        'code': type(error).__name__,
        'template': error.template,
        'context': error.context,
        'message': error.message,
    }


def _render_template(error: BaseError) -> str:
    if error.type in error.context:
        context = {
            **error.context,
            'this': f'<{error.type} name={error.context[error.type]!r}>',
        }
    else:
        context = error.context
    try:
        return error.template.format(**context)
    except KeyError:
        context = context.copy()
        template_vars_re = re.compile(r'\{(\w+)')
        for match in template_vars_re.finditer(error.template):
            name = match.group(1)
            if name not in context:
                context[name] = UNKNOWN_VALUE
        return error.template.format(**context)


class MultipleErrors(Exception):

    def __init__(self, errors: Iterable[BaseError]):
        self.errors = list(errors)
        super().__init__(
            'Multiple errors:\n' + ''.join([
                f' - {error.message}\n' +
                '     Context:\n' + ''.join(
                    f'       {k}: {v}\n' for k, v in error.context.items()
                )
                for error in self.errors
            ])
        )

    @property
    def status_code(self) -> int:
        return self.errors[0].status_code if self.errors else 500


class UserError(BaseError):
    status_code = 400


class NotFoundError(BaseError):
    status_code = 404
    template = "Not found."


class ResourceNotFound(NotFoundError):
    template = "Resource {resource!r} not found."


class ServiceNotFound(NotFoundError):
    template = "Service {service!r} not found."


class MethodNotAllowed(UserError):
    status_code = 405
    template = "Method {verb!r} not allowed."


class NotAcceptable(UserError):
    status_code = 406
    template = "None of the accepted content types {accept!r} can be produced."


class UnsupportedMediaType(UserError):
    status_code = 415
    template = "Unsupported content type {content_type!r}."


class DataMappingError(UserError):
    template = "Can't map given data."


class InvalidDataType(DataMappingError):
    template = "Supplied data is not a string, got {given!r}."


class InvalidMappingData(DataMappingError):
    template = "Supplied data must be an object, got {given!r}."


class JSONError(DataMappingError):
    template = "Error during JSON decoding."
    context = {
        'line': None,
        'column': None,
    }


class JSONDepthExceeded(JSONError):
    template = "Error during JSON decoding: maximum stack depth {max_depth} exceeded."


class JSONMalformed(JSONError):
    template = "Error during JSON decoding: invalid or malformed JSON, {error}."


class JSONControlCharacter(JSONError):
    template = "Error during JSON decoding: unexpected control character found, {error}."


class JSONSyntaxError(JSONError):
    template = "Error during JSON decoding: syntax error, {error}."


class UnknownField(DataMappingError):
    template = "Unknown field {field!r} given for {entity!r}."


class InvalidEncoding(DataMappingError):
    template = "Supplied data is not valid {encoding} text, {error}."


class InvalidFieldValue(DataMappingError):
    template = "Invalid value {given!r} for field {field!r}."


class NotSerializable(BaseError):
    status_code = 500
    template = "Can't encode value as {format}, {error}"


class MetadataError(BaseError):
    status_code = 500


class MetadataLocked(MetadataError):
    template = "Metadata is locked, can't add {name!r}."


class DuplicateResourceName(MetadataError):
    template = "Resource name {resource!r} is already used by {existing!r}."


class DuplicateSubResource(MetadataError):
    template = "Sub-resource {sub_resource!r} is already defined."


class InvalidAssociation(MetadataError):
    template = (
        "Unknown or invalid association {field!r} for sub-resource "
        "{sub_resource!r}."
    )


class InvalidAssociationData(MetadataError):
    template = "Invalid data provided to describe sub-resource {sub_resource!r}."


class UnknownListener(MetadataError):
    template = "Listener method {method!r} does not exist."


class DataMapperNotFound(MetadataError):
    template = "The data mapper {mapper!r} does not exist or could not be found."


class UnknownEntity(MetadataError):
    template = "Class {entity!r} is not a mapped entity."


class DuplicateService(MetadataError):
    template = "Service id {service!r} is already used by {existing!r}."


class UnknownPolicy(MetadataError):
    template = "Unknown {option!r} policy {value!r}, expected one of {choices}."


class ConfigError(BaseError):
    status_code = 500


class ConfigLocked(ConfigError):
    template = "Configuration is locked, use `rc.fork()` to change options."


class RequiredOption(ConfigError):
    template = "{option!r} is a required configuration option."


class UnknownConfigSource(ConfigError):
    template = "Configuration source {source!r} does not exist."
