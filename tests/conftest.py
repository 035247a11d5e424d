"""
Shared pytest fixtures: a fresh app per test, authenticated users, and a
requests-compatible bridge so the dashboard client can talk to the app.
"""
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from app import create_app
from config import TestingConfig
from dashboard.storage import LocalStorage
from summarizer import TaskSummarizer

BASE_URL = 'http://taskflow.test'


@pytest.fixture
def fake_llm():
    llm = MagicMock()
    llm.invoke.return_value = SimpleNamespace(content="You had a productive day!")
    return llm


@pytest.fixture
def app(fake_llm):
    """Create and configure a test Flask application."""
    test_app = create_app(TestingConfig, summarizer=TaskSummarizer(llm=fake_llm))
    yield test_app


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, email, password='secret123', name=None):
    payload = {'email': email, 'password': password}
    if name is not None:
        payload['name'] = name
    response = client.post('/api/auth/register', json=payload)
    assert response.status_code == 200, response.get_json()
    return response.get_json()


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(client):
    return bearer(register(client, 'alice@example.com', name='Alice')['token'])


@pytest.fixture
def other_headers(client):
    return bearer(register(client, 'bob@example.com', name='Bob')['token'])


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / 'local-storage.json'))


class FlaskHttp:
    """Stands in for requests.Session by dispatching to a Flask test client."""

    def __init__(self, test_client, base_url=BASE_URL):
        self.test_client = test_client
        self.base_url = base_url

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = url[len(self.base_url):]
        flask_response = self.test_client.open(path, method=method, json=json,
                                               query_string=params, headers=headers)
        response = requests.Response()
        response.status_code = flask_response.status_code
        response._content = flask_response.data
        response.reason = flask_response.status.split(' ', 1)[-1]
        response.headers['Content-Type'] = flask_response.content_type or ''
        response.encoding = 'utf-8'
        return response


@pytest.fixture
def flask_http(client):
    return FlaskHttp(client)


class FixedClock:
    def __init__(self, now=None):
        self.now = now or datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FixedClock()
