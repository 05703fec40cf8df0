import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from restlayer import exceptions
from restlayer.components import Verb
from restlayer.rest.event import RequestEvent
from restlayer.rest.manager import RestManager
from restlayer.rest.request import Request
from restlayer.testing.context import create_test_context


def test_get(manager: RestManager):
    resp = manager.process(Request('employee', Verb.GET, identifier='1'))
    assert resp.status_code == 200
    assert resp.content_type == 'application/json'
    assert json.loads(resp.content) == {
        'id': 1,
        'name': 'John',
        'dob': '2020-01-02T03:04:05+0000',
        'department_id': None,
        'department': None,
        'assets': [],
    }


def test_get_collection(manager: RestManager):
    resp = manager.process(Request('employee', 'GET_COLLECTION'))
    assert resp.status_code == 200
    assert [e['name'] for e in json.loads(resp.content)] == ['John', 'Jane']


def test_get_sub_resource(manager: RestManager):
    resp = manager.process(Request('employee/department', Verb.GET, identifier='1'))
    assert resp.status_code == 200
    assert json.loads(resp.content) == {
        'id': 1,
        'name': 'Sales',
        'employees': [
            {
                'id': 1,
                'name': 'John',
                'dob': '2020-01-02T03:04:05+0000',
                'department_id': None,
                'assets': [],
            },
        ],
    }


def test_post_collection(manager: RestManager):
    resp = manager.process(Request(
        'employee',
        Verb.POST_COLLECTION,
        content_type='application/json',
        payload='{"name": "Jane", "dob": "1990-05-06T07:08:09+0000"}',
    ))
    assert resp.status_code == 201
    assert json.loads(resp.content) == {
        'id': 3,
        'name': 'Jane',
        'dob': '1990-05-06T07:08:09+0000',
        'department_id': None,
        'department': None,
        'assets': [],
    }


def test_post_collection_unknown_field(manager: RestManager):
    with pytest.raises(exceptions.MultipleErrors) as e:
        manager.process(Request(
            'employee',
            Verb.POST_COLLECTION,
            payload='{"name": "Jane", "age": 30}',
        ))
    assert e.value.status_code == 400


def test_no_content(manager: RestManager):
    resp = manager.process(Request('employee', Verb.DELETE, identifier='1'))
    assert resp.status_code == 204
    assert resp.content is None


def test_status_code_from_listener(manager: RestManager):
    def accepted(event):
        event.status_code = 202
        event.headers['location'] = '/employee/1'

    manager.store.events.add_listener('PUT', accepted)
    resp = manager.process(Request('employee', Verb.PUT, identifier='1'))
    assert resp.status_code == 202
    assert resp.headers == {'location': '/employee/1'}


def test_payload_is_decoded(manager: RestManager):
    received = []
    manager.store.events.add_listener('PUT', lambda event: received.append(event.data))
    manager.process(Request(
        'employee',
        Verb.PUT,
        identifier='1',
        content_type='application/json; charset=utf-8',
        payload='{"name": "Jane"}',
    ))
    assert received == [{'name': 'Jane'}]


def test_invalid_payload(manager: RestManager):
    with pytest.raises(exceptions.JSONSyntaxError):
        manager.process(Request('employee', Verb.PUT, identifier='1', payload='{x}'))


def test_not_acceptable(manager: RestManager):
    with pytest.raises(exceptions.NotAcceptable):
        manager.process(Request('employee', Verb.GET, identifier='1', accept='text/html'))


def test_unsupported_media_type(manager: RestManager):
    with pytest.raises(exceptions.UnsupportedMediaType):
        manager.process(Request(
            'employee',
            Verb.PUT,
            identifier='1',
            content_type='text/xml',
            payload='<employee/>',
        ))


def test_unknown_verb():
    with pytest.raises(exceptions.MethodNotAllowed):
        Request('employee', 'PATCH')


def test_process_scoped_services(manager: RestManager):
    manager.process(Request('employee', Verb.GET, identifier='1'))
    manager.process(Request('department', Verb.GET, identifier='1'))
    assert len(manager.service_manager) == 2


def test_request_scoped_services(rc):
    context = create_test_context(rc, 'services.scope=request')
    manager = RestManager(context)
    services = []
    manager.store.events.add_listener('GET', lambda event: services.append(event.service))
    manager.process(Request('employee', Verb.GET, identifier='1'))
    assert len(manager.service_manager) == 0
    service, = services
    # Only the global listener is left.
    assert len(manager.store.events.get_listeners('GET', scope=service)) == 1


def test_request_scoped_services_cleared_on_error(rc):
    context = create_test_context(rc, 'services.scope=request')
    manager = RestManager(context)
    events = manager.store.events
    services = []
    events.add_listener('POST_COLLECTION', lambda event: services.append(event.service))
    with pytest.raises(exceptions.MultipleErrors):
        manager.process(Request('employee', Verb.POST_COLLECTION, payload='{"age": 1}'))
    service, = services
    assert len(events.get_listeners('POST_COLLECTION', scope=service)) == 1


def test_request_scoped_services_interleaved(rc, mocker):
    context = create_test_context(rc, 'services.scope=request')
    manager = RestManager(context)
    other = []

    def create_event(*args, **kwargs):
        # Another request starts and ends after this one loaded its service.
        if not other:
            other.append(None)
            other[0] = manager.process(Request('employee', Verb.GET, identifier='2'))
        return RequestEvent(*args, **kwargs)

    mocker.patch('restlayer.rest.dispatcher.RequestEvent', side_effect=create_event)
    resp = manager.process(Request('employee', Verb.GET, identifier='1'))

    assert other[0].status_code == 200
    assert json.loads(other[0].content)['id'] == 2
    assert resp.status_code == 200
    assert json.loads(resp.content)['id'] == 1


def test_request_scoped_services_in_threads(rc):
    context = create_test_context(rc, 'services.scope=request')
    manager = RestManager(context)
    requests = [
        Request('employee', Verb.GET, identifier=str(i))
        for i in range(1, 51)
    ]
    with ThreadPoolExecutor(max_workers=8) as executor:
        responses = list(executor.map(manager.process, requests))
    assert [r.status_code for r in responses] == [200] * 50
    assert [json.loads(r.content)['id'] for r in responses] == list(range(1, 51))


def test_cycle_reference(rc):
    context = create_test_context(rc, mapping={'cycles': 'reference'})
    manager = RestManager(context)
    resp = manager.process(Request('department', Verb.GET, identifier='1'))
    employee, = json.loads(resp.content)['employees']
    assert employee['department'] == {'id': 1}


def test_metadata_accessors(manager: RestManager):
    assert manager.get_resource_metadata_by_name('employee').service == 'company.employee'
    assert manager.get_resource_metadata('restlayer.testing.models.Employee').name == 'employee'
    assert manager.get_service_metadata('company.asset').id == 'company.asset'
    assert manager.get_data_mapper('json').cycles == 'omit'
