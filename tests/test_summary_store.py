from unittest.mock import MagicMock

import pytest
import requests

from dashboard.api import ApiError
from dashboard.summary_store import SummaryStore, SummaryStoreError


def wire_summary(date, summary='Good day', task_count=1):
    return {'id': date.replace('-', '').ljust(32, '0'), 'date': date, 'summary': summary,
            'taskCount': task_count, 'categories': [], 'completedTasks': [],
            'createdAt': f'{date}T20:00:00Z'}


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def store(api):
    return SummaryStore(api)


def test_fetch_summaries(store, api):
    api.list_summaries.return_value = [wire_summary('2024-05-10'), wire_summary('2024-05-09')]

    summaries = store.fetch_summaries(limit=7)

    api.list_summaries.assert_called_once_with(limit=7)
    assert [s.date for s in summaries] == ['2024-05-10', '2024-05-09']
    assert store.error is None
    assert store.is_loading is False


def test_fetch_failure_sets_error(store, api):
    api.list_summaries.side_effect = requests.ConnectionError('offline')

    assert store.fetch_summaries() == []
    assert store.error == 'Failed to fetch summaries'
    assert store.is_loading is False


def test_get_missing_summary_is_none(store, api):
    api.get_summary.side_effect = ApiError(404, 'Summary not found')
    assert store.get_summary_by_date('2024-05-10') is None


def test_get_summary_other_errors_propagate(store, api):
    api.get_summary.side_effect = ApiError(500, 'Internal Server Error')
    with pytest.raises(ApiError):
        store.get_summary_by_date('2024-05-10')


def test_save_replaces_same_date_and_keeps_order(store, api):
    api.list_summaries.return_value = [wire_summary('2024-05-10', 'Draft'), wire_summary('2024-05-08')]
    store.fetch_summaries()
    api.save_summary.return_value = wire_summary('2024-05-10', 'Final', 2)

    saved = store.save_summary('2024-05-10', 'Final', 2, categories=['Work'])

    assert saved.summary == 'Final'
    assert [s.summary for s in store.summaries] == ['Final', 'Good day']
    payload = api.save_summary.call_args[0][0]
    assert payload == {'date': '2024-05-10', 'summary': 'Final', 'taskCount': 2,
                       'categories': ['Work'], 'completedTasks': []}


def test_save_inserts_in_date_order(store, api):
    api.list_summaries.return_value = [wire_summary('2024-05-10'), wire_summary('2024-05-08')]
    store.fetch_summaries()
    api.save_summary.return_value = wire_summary('2024-05-09')

    store.save_summary('2024-05-09', 'Good day', 1)

    assert [s.date for s in store.summaries] == ['2024-05-10', '2024-05-09', '2024-05-08']


def test_save_failure_raises(store, api):
    api.save_summary.side_effect = ApiError(400, 'Missing required fields')

    with pytest.raises(SummaryStoreError, match='Missing required fields'):
        store.save_summary('2024-05-10', 'x', 1)


def test_delete(store, api):
    api.list_summaries.return_value = [wire_summary('2024-05-10'), wire_summary('2024-05-09')]
    store.fetch_summaries()

    store.delete_summary('2024-05-10')

    assert [s.date for s in store.summaries] == ['2024-05-09']


def test_delete_failure_keeps_summary(store, api):
    api.list_summaries.return_value = [wire_summary('2024-05-10')]
    store.fetch_summaries()
    api.delete_summary.side_effect = requests.Timeout('slow')

    with pytest.raises(SummaryStoreError):
        store.delete_summary('2024-05-10')
    assert len(store.summaries) == 1


def test_weekly_summaries(store, api):
    api.summaries_in_range.return_value = [wire_summary('2024-05-06'), wire_summary('2024-05-07')]

    summaries = store.get_weekly_summaries('2024-05-06', '2024-05-12')

    api.summaries_in_range.assert_called_once_with('2024-05-06', '2024-05-12')
    assert [s.date for s in summaries] == ['2024-05-06', '2024-05-07']
