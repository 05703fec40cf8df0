import io

import pytest
from ruamel.yaml import YAML

from restlayer import exceptions
from restlayer.core.config import CliArgs
from restlayer.core.config import EnvFile
from restlayer.core.config import EnvVars
from restlayer.core.config import KeyFormat
from restlayer.core.config import Path
from restlayer.core.config import PyDict
from restlayer.core.config import RawConfig
from restlayer.core.config import read_config

yaml = YAML(typ='safe')


def test_envvars():
    config = EnvVars('envvars', {
        'RESTLAYER_SERVICES__SCOPE': 'request',
        'OTHER_VARIABLE': 'ignored',
    })
    config.read()
    assert config.config == {
        ('services', 'scope'): 'request',
    }


def test_envvars_multipart():
    config = EnvVars('envvars', {
        'RESTLAYER_CONTENT_TYPES': 'application/json',
    })
    config.read()
    assert config.config == {
        ('content_types',): 'application/json',
    }


def test_hardset():
    rc = RawConfig()
    rc.read([
        PyDict('defaults', {
            'mappers': {
                'json': 'restlayer.datamapper.json:JsonMapper',
            },
            'mapping': {
                'cycles': 'omit',
                'unknown_fields': 'reject',
            },
        }),
        EnvVars('envvars', {
            'RESTLAYER_MAPPING__CYCLES': 'reference',
        }),
        PyDict('app', {
            'mappers.xml': 'app.mappers:XmlMapper',
        }),
    ])
    assert rc.keys('mappers') == ['json', 'xml']
    assert rc.get('mappers', 'xml') == 'app.mappers:XmlMapper'
    assert rc.get('mapping', 'cycles') == 'reference'
    assert list(rc.getall()) == [
        (('mappers', 'json'), 'restlayer.datamapper.json:JsonMapper'),
        (('mappers', 'xml'), 'app.mappers:XmlMapper'),
        (('mapping', 'cycles'), 'reference'),
        (('mapping', 'unknown_fields'), 'reject'),
    ]


def test_update_config_from_cli():
    rc = RawConfig()
    rc.read([
        PyDict('defaults', {
            'services': {
                'scope': 'process',
            },
        }),
        CliArgs('cliargs', [
            'services.scope=request',
            'services.modules=app.services,app.more',
        ]),
    ])
    assert rc.keys('services') == ['scope', 'modules']
    assert rc.get('services', 'scope') == 'request'
    assert rc.get('services', 'modules') == ['app.services', 'app.more']


def test_update_config_from_env_file(tmp_path):
    envfile = tmp_path / '.env'
    envfile.write_text(
        '# comment line\n'
        '\n'
        'RESTLAYER_SERVICES__SCOPE=request\n'
        'RESTLAYER_MAPPING__MAX_DEPTH=16\n',
    )

    rc = RawConfig()
    rc.read([
        PyDict('defaults', {
            'services': {'scope': 'process'},
        }),
        EnvFile('envfile', str(envfile)),
    ])
    assert rc.get('services', 'scope') == 'request'
    assert rc.get('mapping', 'max_depth', cast=int) == 16


def test_missing_env_file(tmp_path):
    rc = RawConfig()
    rc.read([EnvFile('envfile', str(tmp_path / '.env'))])
    assert rc.keys() == []


def test_yaml_path(tmp_path):
    path = tmp_path / 'config.yml'
    path.write_text(
        'resources:\n'
        '  driver: yaml\n'
        '  path: resources.yml\n'
    )
    rc = RawConfig()
    rc.read([
        Path('defaults', 'restlayer.config:CONFIG'),
        Path('yaml', str(path)),
    ])
    assert rc.get('resources', 'driver') == 'yaml'
    assert rc.get('resources', 'path') == 'resources.yml'
    assert rc.get('services', 'scope') == 'process'


def test_get_nested_dict():
    rc = RawConfig()
    rc.read([Path('defaults', 'restlayer.config:CONFIG')])
    assert rc.get('converters') == {'application/json': 'json'}
    assert rc.get('mapping') == {
        'cycles': 'omit',
        'unknown_fields': 'reject',
        'max_depth': 512,
    }


def test_get_cast_list():
    rc = RawConfig()
    rc.read([PyDict('test', {'a': 'x, y', 'b': ''})])
    assert rc.get('a', cast=list) == ['x', 'y']
    assert rc.get('b', cast=list) == []
    assert rc.get('c', cast=list, default=[]) == []


def test_get_required():
    rc = RawConfig()
    with pytest.raises(exceptions.RequiredOption) as e:
        rc.get('resources', 'path', required=True)
    assert e.value.message == "'resources.path' is a required configuration option."


def test_get_origin():
    rc = RawConfig()
    rc.read([
        PyDict('defaults', {'debug': False}),
        CliArgs('cliargs', ['debug=true']),
    ])
    assert rc.get('debug', origin=True) == ('true', 'cliargs')


def test_read_after():
    rc = RawConfig()
    rc.read([
        PyDict('defaults', {'mapping.cycles': 'omit'}),
        PyDict('app', {'mapping.unknown_fields': 'ignore'}),
    ])
    rc.read([PyDict('ext', {'mapping.cycles': 'reference'})], after='defaults')
    assert [s.name for s in rc.sources] == ['defaults', 'ext', 'app']
    assert rc.get('mapping', 'cycles') == 'reference'

    with pytest.raises(exceptions.UnknownConfigSource):
        rc.read([PyDict('x', {})], after='missing')


def test_fork():
    rc = RawConfig()
    rc.read([PyDict('defaults', {'services.scope': 'process'})])
    rc.lock()

    with pytest.raises(exceptions.ConfigLocked):
        rc.add('test', {'services.scope': 'request'})

    forked = rc.fork({'services.scope': 'request'})
    assert forked.get('services', 'scope') == 'request'
    assert rc.get('services', 'scope') == 'process'


def test_to_dict():
    rc = RawConfig()
    rc.read([Path('defaults', 'restlayer.config:CONFIG')])
    assert rc.to_dict('mapping') == {
        'cycles': 'omit',
        'unknown_fields': 'reject',
        'max_depth': 512,
    }


def test_dump():
    rc = RawConfig()
    rc.read([
        PyDict('defaults', {'services': {'scope': 'process'}}),
        CliArgs('cliargs', ['services.scope=request']),
    ])
    out = io.StringIO()
    rc.dump(fmt=KeyFormat.cfg, file=out)
    assert out.getvalue().split() == [
        'Origin', 'Name', 'Value',
        '-------', '--------------', '-------',
        'cliargs', 'services.scope', 'request',
    ]


def test_dump_env_format():
    rc = RawConfig()
    rc.read([PyDict('defaults', {'services': {'scope': 'process'}})])
    table = rc.dump(fmt=KeyFormat.env, file=None)
    assert table[2] == ('defaults', 'RESTLAYER_SERVICES__SCOPE', 'process')


def test_read_config(tmp_path, monkeypatch):
    monkeypatch.setenv('RESTLAYER_SERVICES__SCOPE', 'request')
    rc = read_config(['mapping.cycles=reference'], str(tmp_path / '.env'))
    assert rc.get('services', 'scope') == 'request'
    assert rc.get('mapping', 'cycles') == 'reference'
    assert rc.get('mapping', 'unknown_fields') == 'reject'
