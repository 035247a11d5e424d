import logging

import requests

from dashboard.api import ApiError
from schemas import DailySummary

logger = logging.getLogger(__name__)


class SummaryStoreError(Exception):
    pass


def _message(error, fallback):
    if isinstance(error, ApiError) and error.message:
        return error.message
    return fallback


class SummaryStore:
    """Saved daily summaries, newest date first."""

    def __init__(self, api):
        self.api = api
        self.summaries = []
        self.is_loading = False
        self.error = None

    def fetch_summaries(self, limit=30):
        self.is_loading = True
        self.error = None
        try:
            data = self.api.list_summaries(limit=limit)
            self.summaries = [DailySummary.model_validate(item) for item in data]
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Failed to fetch summaries: {e}")
            self.error = _message(e, 'Failed to fetch summaries')
        finally:
            self.is_loading = False
        return self.summaries

    def get_summary_by_date(self, date):
        """Return the summary saved for date, or None if there is none."""
        try:
            data = self.api.get_summary(date)
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise
        return DailySummary.model_validate(data)

    def save_summary(self, date, summary, task_count, categories=None, completed_tasks=None):
        payload = {
            'date': date,
            'summary': summary,
            'taskCount': task_count,
            'categories': categories or [],
            'completedTasks': completed_tasks or [],
        }
        try:
            data = self.api.save_summary(payload)
        except (ApiError, requests.RequestException) as e:
            raise SummaryStoreError(_message(e, 'Failed to save summary')) from e

        saved = DailySummary.model_validate(data)
        others = [s for s in self.summaries if s.date != date]
        self.summaries = sorted([saved] + others, key=lambda s: s.date, reverse=True)
        return saved

    def delete_summary(self, date):
        try:
            self.api.delete_summary(date)
        except (ApiError, requests.RequestException) as e:
            raise SummaryStoreError(_message(e, 'Failed to delete summary')) from e
        self.summaries = [s for s in self.summaries if s.date != date]

    def get_weekly_summaries(self, start_date, end_date):
        try:
            data = self.api.summaries_in_range(start_date, end_date)
        except (ApiError, requests.RequestException) as e:
            raise SummaryStoreError(_message(e, 'Failed to fetch weekly summaries')) from e
        return [DailySummary.model_validate(item) for item in data]
