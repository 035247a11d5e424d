"""HTTP client for the TaskFlow API."""
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'http://localhost:4000'


class ApiError(Exception):
    """The server answered with an error status."""

    def __init__(self, status_code, message):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TaskFlowClient:
    def __init__(self, session, base_url=DEFAULT_BASE_URL, http=None, timeout=10):
        self.session = session
        self.base_url = base_url.rstrip('/')
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, json=None, params=None):
        response = self.http.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            params=params,
            headers=self.session.auth_headers(),
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            try:
                message = response.json().get('message')
            except ValueError:
                message = None
            raise ApiError(response.status_code, message or response.reason or 'Request failed')
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Auth

    def _authenticate(self, path, payload, fallback_message):
        try:
            data = self._request('POST', path, json=payload)
        except ApiError as e:
            self.session.error = e.message or fallback_message
            raise
        self.session.persist(data['token'], data['user'])
        return data['user']

    def register(self, name, email, password):
        return self._authenticate('/api/auth/register',
                                  {'name': name, 'email': email, 'password': password},
                                  'Registration failed')

    def login(self, email, password):
        return self._authenticate('/api/auth/login', {'email': email, 'password': password}, 'Login failed')

    def logout(self):
        self.session.clear()

    def health(self):
        return self._request('GET', '/health')

    # Tasks

    def list_tasks(self):
        return self._request('GET', '/api/tasks')

    def create_task(self, payload):
        return self._request('POST', '/api/tasks', json=payload)

    def update_task(self, task_id, payload):
        return self._request('PUT', f'/api/tasks/{task_id}', json=payload)

    def delete_task(self, task_id):
        return self._request('DELETE', f'/api/tasks/{task_id}')

    # Summaries

    def list_summaries(self, limit=30):
        return self._request('GET', '/api/summaries', params={'limit': limit})

    def get_summary(self, date):
        return self._request('GET', f'/api/summaries/{date}')

    def save_summary(self, payload):
        return self._request('POST', '/api/summaries', json=payload)

    def delete_summary(self, date):
        return self._request('DELETE', f'/api/summaries/{date}')

    def summaries_in_range(self, start_date, end_date):
        return self._request('GET', f'/api/summaries/range/{start_date}/{end_date}')

    def generate_summary(self, date, completed_tasks):
        return self._request('POST', '/api/summaries/generate',
                             json={'date': date, 'completedTasks': completed_tasks})
