from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple

import enum
import logging
import os
import pathlib
import sys

from ruamel.yaml import YAML

from restlayer import exceptions
from restlayer.utils.imports import importstr
from restlayer.utils.sentinels import NA

Key = Tuple[str, ...]

yaml = YAML(typ='safe')

log = logging.getLogger(__name__)

ENV_PREFIX = 'RESTLAYER_'


def read_config(args: List[str] = None, envfile: str = None) -> RawConfig:
    rc = RawConfig()
    rc.read([
        Path('restlayer', 'restlayer.config:CONFIG'),
        EnvFile('envfile', envfile or '.env'),
        EnvVars('envvars', os.environ),
        CliArgs('cliargs', args or []),
    ])

    # Extensions can provide their own defaults, they go right after
    # built-in defaults, so that env and cli can still override them.
    configs = rc.get('config', cast=list, default=[])
    if configs:
        rc.read([Path(c, c) for c in configs], after='restlayer')

    return rc


class KeyFormat(str, enum.Enum):
    cfg = 'cfg'
    env = 'env'


class ConfigSource:
    name: str = None
    config: Any

    def __init__(self, name: str = None, config: Any = None):
        self.name = name or self.name or type(self).__name__
        self.config = config

    def __str__(self):
        return self.name

    def __repr__(self):
        return f'{type(self).__module__}.{type(self).__name__}({self.name!r})'

    def read(self) -> None:
        config = {}
        for k, v in self.config.items():
            config.update(_traverse(v, k))
        self.config = config

    def keys(self) -> Iterator[Key]:
        yield from self.config

    def get(self, key: Key):
        return self.config.get(key, NA)


class PyDict(ConfigSource):
    """Nested dict, keys can be given in dotted form: `{'a.b': 1}`."""

    def read(self) -> None:
        self.config = {
            tuple(k.split('.')): v
            for k, v in self.config.items()
        }
        super().read()


class Path(PyDict):
    """YAML file path or python `dotted.path:NAME` pointing to a dict."""

    def read(self) -> None:
        if self.config.endswith(('.yml', '.yaml')):
            path = pathlib.Path(self.config)
            self.config = yaml.load(path.read_text()) or {}
        else:
            self.config = importstr(self.config)
        super().read()


class CliArgs(PyDict):
    name = 'cliargs'

    def read(self) -> None:
        config = {}
        for arg in self.config:
            key, val = arg.split('=', 1)
            if ',' in val:
                val = [v.strip() for v in val.split(',')]
            config[key] = val
        self.config = config
        super().read()


class EnvVars(ConfigSource):
    """Environment variables, `RESTLAYER_A__B=1` sets `a.b` option."""
    name = 'envvars'

    def read(self) -> None:
        config = {}
        for key, val in self.config.items():
            if not key.startswith(ENV_PREFIX):
                continue
            key = key[len(ENV_PREFIX):]
            config[tuple(key.lower().split('__'))] = val
        self.config = config


class EnvFile(EnvVars):
    name = 'envfile'

    def read(self) -> None:
        config = {}
        path = pathlib.Path(self.config)
        if path.exists():
            with path.open() as f:
                for line in f:
                    line = line.strip()
                    if line == '' or line.startswith('#') or '=' not in line:
                        continue
                    name, value = line.split('=', 1)
                    config[name.strip()] = value.strip()
        self.config = config
        super().read()


class RawConfig:
    """Layered configuration reader.

    Options are read from a list of `sources`, later sources override
    earlier ones. Supported sources:

    - `PyDict` - python `dict` objects.
    - `Path` - python module path pointing to a `dict` or a YAML file path.
    - `EnvVars` - environment variables with `RESTLAYER_` prefix.
    - `EnvFile` - `.env` files containing `RESTLAYER_` variables.
    - `CliArgs` - `name=value` command line options.

    """

    sources: List[ConfigSource]

    def __init__(self, sources: Optional[List[ConfigSource]] = None):
        self._locked = False
        self.sources = sources or []

    def read(self, sources: List[ConfigSource], after: Optional[str] = None):
        if self._locked:
            raise exceptions.ConfigLocked()

        for config in sources:
            log.debug("Reading config from %s.", config.name)
            config.read()

        if after is not None:
            pos = next((i for i, s in enumerate(self.sources) if s.name == after), None)
            if pos is None:
                raise exceptions.UnknownConfigSource(source=after)
            self.sources[pos + 1:pos + 1] = sources
        else:
            self.sources.extend(sources)

    def add(self, name: str, params: Dict[str, Any]) -> RawConfig:
        self.read([PyDict(name, params)])
        return self

    def fork(self, sources=None, after: str = None) -> RawConfig:
        rc = RawConfig(list(self.sources))
        if isinstance(sources, dict):
            rc.add('fork', sources)
        elif sources:
            rc.read(sources, after)
        return rc

    def lock(self) -> None:
        self._locked = True

    def has(self, *key: str) -> bool:
        return self.get(*key, default=NA) is not NA

    def get(
        self,
        *key: str,
        default: Any = NA,
        cast=None,
        required: bool = False,
        origin: bool = False,
    ) -> Any:
        value, config = self._get_config_value(key)

        if value is NA:
            inner = self.keys(*key)
            if inner:
                value = {k: self.get(*key, k) for k in inner}
            else:
                value = None if default is NA else default

        if cast is not None:
            if cast is list and isinstance(value, str):
                value = [v.strip() for v in value.split(',')] if value else []
            elif value is not None:
                value = cast(value)

        if required and value is None:
            raise exceptions.RequiredOption(option='.'.join(key))

        if origin:
            return value, config.name if config else ''
        return value

    def keys(self, *key: str) -> List[str]:
        """Return names of inner options of a given `key`."""
        n = len(key)
        keys = []
        for config in self.sources:
            for k in config.keys():
                if len(k) > n and k[:n] == key and k[n] not in keys:
                    keys.append(k[n])
        return keys

    def getall(self, *key: str, origin: bool = False) -> Iterator[tuple]:
        keys = self.keys(*key)
        if keys:
            for k in keys:
                yield from self.getall(*key, k, origin=origin)
        else:
            res = self.get(*key, origin=origin)
            res = res if origin else (res,)
            yield (key,) + res

    def dump(self, *names: str, fmt: KeyFormat = KeyFormat.cfg, file=sys.stdout):
        """Print options as an `Origin  Name  Value` table.

        Only options starting with one of `names` are listed, when given.
        With `file=None` table rows are returned instead of printed.
        """
        rows = [('Origin', 'Name', 'Value')]
        for key, val, origin in self.getall(origin=True):
            if names and not any(_key_matches(key, name) for name in names):
                continue
            name = _format_key(key, fmt)
            if isinstance(val, list):
                rows += [(origin, f'{name}.{i}', v) for i, v in enumerate(val)]
            else:
                rows.append((origin, name, val))

        widths = [max(len(str(row[i])) for row in rows) for i in range(3)]
        rows.insert(1, tuple('-' * w for w in widths))
        if not file:
            return rows
        for row in rows:
            print('  '.join(str(x).ljust(w) for x, w in zip(row, widths)), file=file)

    def to_dict(self, *names: str) -> Dict[str, Any]:
        result = {}
        for key, val in self.getall(*names):
            key = '.'.join(key[len(names):])
            result[key] = val
        return result

    def _get_config_value(self, key: Key):
        for config in reversed(self.sources):
            val = config.get(key)
            if val is not NA:
                return val, config
        return NA, None


def _traverse(value, path: Key = ()):
    if isinstance(value, dict) and value:
        for k, v in value.items():
            yield from _traverse(v, path + (k,))
    else:
        yield path, value


def _key_matches(key: Key, name: str) -> bool:
    # `a.b` matches `a.b.c` and also `a.bc`, like shell completion.
    parts = name.split('.')
    return all(
        key[i].startswith(part)
        for i, part in enumerate(parts)
        if part and i < len(key)
    )


def _format_key(key: Key, fmt: KeyFormat) -> str:
    if fmt == KeyFormat.env:
        return ENV_PREFIX + '__'.join(key).upper()
    return '.'.join(key)
