from unittest.mock import MagicMock

import pytest
import requests

from dashboard.api import ApiError, TaskFlowClient
from dashboard.session import TOKEN_KEY, AuthSession


def make_response(status_code, body=None, reason='OK'):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = b'' if body is None else body.encode('utf-8')
    return response


@pytest.fixture
def session(storage):
    return AuthSession(storage)


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def client(session, http):
    return TaskFlowClient(session, base_url='http://api.test/', http=http)


def test_sends_bearer_token(client, session, http):
    session.persist('tok-1', {'id': 'u1', 'email': 'a@example.com', 'name': 'A'})
    http.request.return_value = make_response(200, '[]')

    assert client.list_tasks() == []

    http.request.assert_called_once_with('GET', 'http://api.test/api/tasks', json=None, params=None,
                                         headers={'Authorization': 'Bearer tok-1'}, timeout=10)


def test_no_auth_header_when_signed_out(client, http):
    http.request.return_value = make_response(200, '{"status": "ok"}')
    client.health()
    assert http.request.call_args.kwargs['headers'] == {}


def test_error_status_raises_with_server_message(client, http):
    http.request.return_value = make_response(404, '{"message": "Task not found"}', reason='NOT FOUND')

    with pytest.raises(ApiError) as excinfo:
        client.update_task('x' * 32, {'completed': True})

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == 'Task not found'


def test_error_without_json_uses_reason(client, http):
    http.request.return_value = make_response(502, '<html>bad gateway</html>', reason='Bad Gateway')

    with pytest.raises(ApiError) as excinfo:
        client.list_tasks()
    assert excinfo.value.message == 'Bad Gateway'


def test_no_content(client, http):
    http.request.return_value = make_response(204, reason='NO CONTENT')
    assert client.delete_task('x' * 32) is None


def test_summary_limit_is_a_query_param(client, http):
    http.request.return_value = make_response(200, '[]')
    client.list_summaries(limit=7)
    assert http.request.call_args.kwargs['params'] == {'limit': 7}


def test_login_persists_session(client, session, storage, http):
    body = '{"token": "tok-2", "user": {"id": "u1", "email": "a@example.com", "name": "A"}}'
    http.request.return_value = make_response(200, body)

    user = client.login('a@example.com', 'secret123')

    assert user['name'] == 'A'
    assert session.is_authenticated
    assert storage.get_item(TOKEN_KEY) == 'tok-2'


def test_failed_login_sets_session_error(client, session, http):
    http.request.return_value = make_response(401, '{"message": "Invalid credentials"}', reason='UNAUTHORIZED')

    with pytest.raises(ApiError):
        client.login('a@example.com', 'wrong')

    assert session.error == 'Invalid credentials'
    assert not session.is_authenticated


def test_logout_clears_session(client, session, storage):
    session.persist('tok-3', {'id': 'u1'})
    client.logout()
    assert not session.is_authenticated
    assert TOKEN_KEY not in storage
