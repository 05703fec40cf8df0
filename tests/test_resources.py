import pytest

from restlayer import exceptions
from restlayer.entities import SqlAlchemyMetadata
from restlayer.resources.components import ResourceMetadata
from restlayer.resources.components import SubResource
from restlayer.resources.drivers import ChainDriver
from restlayer.resources.drivers import DecoratorDriver
from restlayer.resources.drivers import DictDriver
from restlayer.resources.drivers import YamlDriver
from restlayer.resources.drivers import build_metadata
from restlayer.resources.factory import ResourceMetadataFactory
from restlayer.resources.mapping import get_resource_mark
from restlayer.resources.mapping import resource
from restlayer.testing.models import Asset
from restlayer.testing.models import Department
from restlayer.testing.models import Employee
from restlayer.utils.naming import to_resource_name


@pytest.mark.parametrize('name, result', [
    ('Employee', 'employee'),
    ('CompanyAsset', 'company_asset'),
    ('HTTPLog', 'http_log'),
    ('Žmogus', 'zmogus'),
])
def test_to_resource_name(name, result):
    assert to_resource_name(name) == result


def test_resource_mark_is_not_inherited():
    @resource('base')
    class Base:
        pass

    class Child(Base):
        pass

    assert get_resource_mark(Base)['name'] == 'base'
    assert get_resource_mark(Child) is None


def test_build_metadata():
    metadata = build_metadata(Employee, service='company.employee', sub_resources={
        'assets': {'field': 'assets', 'service': 'company.asset'},
        'dept': 'department',
    })
    assert metadata.class_name == 'restlayer.testing.models.Employee'
    assert metadata.name == 'employee'
    assert metadata.cls is Employee
    assert metadata.sub_resources == {
        'assets': SubResource('assets', 'assets', 'company.asset'),
        'dept': SubResource('dept', 'department'),
    }


def test_build_metadata_list_form():
    metadata = build_metadata(Employee, sub_resources=[
        {'name': 'assets', 'service': 'company.asset'},
    ])
    assert metadata.get_sub_resource('assets') == SubResource('assets', 'assets', 'company.asset')
    assert metadata.get_sub_resource('missing') is None


def test_build_metadata_duplicate_sub_resource():
    with pytest.raises(exceptions.DuplicateSubResource):
        build_metadata(Employee, sub_resources=[
            {'name': 'assets'},
            {'name': 'assets', 'field': 'department'},
        ])


def test_build_metadata_invalid_sub_resource():
    with pytest.raises(exceptions.InvalidAssociationData):
        build_metadata(Employee, sub_resources={'assets': 42})


def test_metadata_is_immutable():
    metadata = build_metadata(Employee, sub_resources={'assets': 'assets'})
    with pytest.raises(TypeError):
        metadata.sub_resources['x'] = SubResource('x', 'x')
    with pytest.raises(AttributeError):
        metadata.name = 'staff'


def test_decorator_driver():
    driver = DecoratorDriver(['restlayer.testing.models'])
    resources = {r.name: r for r in driver.load_all()}
    assert sorted(resources) == ['department', 'employee']
    assert resources['employee'].service == 'company.employee'
    assert sorted(resources['employee'].sub_resources) == ['assets', 'department']
    assert resources['department'].service == 'company.department'


def test_dict_driver():
    driver = DictDriver({
        'staff': {
            'class': 'restlayer.testing.models:Employee',
            'service': 'company.employee',
            'sub_resources': {
                'assets': {'field': 'assets', 'service': 'company.asset'},
            },
        },
        'asset': {
            'class': Asset,
        },
    })
    resources = list(driver.load_all())
    assert [r.name for r in resources] == ['staff', 'asset']
    assert resources[0].cls is Employee
    assert resources[1].service is None


def test_yaml_driver(tmp_path):
    path = tmp_path / 'resources.yml'
    path.write_text(
        'resources:\n'
        '  staff:\n'
        '    class: restlayer.testing.models:Employee\n'
        '    service: company.employee\n'
        '    sub_resources:\n'
        '      - name: assets\n'
        '        service: company.asset\n'
    )
    [metadata] = YamlDriver(path).load_all()
    assert metadata.name == 'staff'
    assert metadata.sub_resources['assets'].service == 'company.asset'


def test_chain_driver():
    driver = ChainDriver([
        DecoratorDriver(['restlayer.testing.models']),
        DictDriver({'asset': {'class': Asset}}),
    ])
    assert sorted(r.name for r in driver.load_all()) == [
        'asset',
        'department',
        'employee',
    ]


@pytest.fixture
def factory():
    driver = DecoratorDriver(['restlayer.testing.models'])
    return ResourceMetadataFactory(driver, SqlAlchemyMetadata()).load()


def test_get_metadata(factory):
    for metadata in factory.get_all_metadata():
        assert factory.get_metadata_by_resource_name(metadata.name) == metadata
        assert factory.get_metadata_for(metadata.class_name) == metadata
        assert factory.get_metadata_for(metadata.cls) == metadata


def test_get_metadata_not_found(factory):
    with pytest.raises(exceptions.ResourceNotFound) as e:
        factory.get_metadata_by_resource_name('missing')
    assert e.value.status_code == 404
    assert e.value.context == {'resource': 'missing'}

    with pytest.raises(exceptions.NotFoundError):
        factory.get_metadata_for(Asset)

    assert not factory.has_metadata_for(Asset)
    assert factory.has_metadata_for(Employee)


def test_link_sub_resource_targets(factory):
    employee = factory.get_metadata_for(Employee)
    assert employee.sub_resources['assets'].target == 'restlayer.testing.models.Asset'
    assert employee.sub_resources['department'].target == 'restlayer.testing.models.Department'
    department = factory.get_metadata_for(Department)
    assert department.sub_resources['employees'].target == 'restlayer.testing.models.Employee'


def test_link_invalid_association():
    factory = ResourceMetadataFactory(entities=SqlAlchemyMetadata())
    factory.add(build_metadata(Employee, sub_resources={'badges': 'badges'}))
    with pytest.raises(exceptions.InvalidAssociation):
        factory.load()


def test_add_after_lock(factory):
    with pytest.raises(exceptions.MetadataLocked):
        factory.add(build_metadata(Asset))


def test_duplicate_resource_name():
    factory = ResourceMetadataFactory()
    factory.add(build_metadata(Employee, 'people'))
    with pytest.raises(exceptions.DuplicateResourceName) as e:
        factory.add(build_metadata(Department, 'people'))
    assert e.value.context['existing'] == 'restlayer.testing.models.Employee'


def test_duplicate_class_name():
    factory = ResourceMetadataFactory()
    factory.add(build_metadata(Employee, 'people'))
    with pytest.raises(exceptions.DuplicateResourceName):
        factory.add(build_metadata(Employee, 'staff'))


def test_load_without_driver():
    factory = ResourceMetadataFactory()
    factory.add(ResourceMetadata('app.Thing', 'thing', 'things'))
    factory.load()
    assert factory.locked
    assert factory.get_all_class_names() == ['app.Thing']
