"""View-models for the dashboard screens.

Nothing here renders markup; each function turns store state into the plain
data a template or terminal front end needs.
"""
import logging
from datetime import datetime, timezone

import requests

from dashboard.api import ApiError
from dashboard.summary_store import SummaryStoreError
from schemas import DATE_FORMAT
from summarizer import SummaryGenerationError

logger = logging.getLogger(__name__)

STAT_CARDS = (
    ('Total Tasks', 'total', '#3B82F6'),
    ('Completed', 'completed', '#10B981'),
    ('Pending', 'pending', '#F59E0B'),
    ('Overdue', 'overdue', '#EF4444'),
)

SIDEBAR_SUMMARY_LIMIT = 7


def today_key(now=None):
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(DATE_FORMAT)


def stat_cards(stats):
    return [{'title': title, 'value': getattr(stats, field), 'color': color}
            for title, field, color in STAT_CARDS]


def empty_state(has_search_or_filters):
    if has_search_or_filters:
        return {'title': 'No tasks found',
                'message': "Try adjusting your search or filters to find what you're looking for.",
                'show_create': False}
    return {'title': 'No tasks yet',
            'message': 'Start by creating your first task to get organized and boost your productivity.',
            'show_create': True}


def task_card(store, task, now=None):
    return {
        'task': task,
        'overdue': store.is_overdue(task, now),
        'unsynced': store.is_unsynced(task.id),
    }


def dashboard_view(store):
    """Everything the main task screen shows, built from one TaskStore."""
    tasks = store.filtered_tasks
    has_search_or_filters = bool(store.search_query) or store.has_active_filters
    now = datetime.now(timezone.utc)
    return {
        'stats': stat_cards(store.stats),
        'filters': {
            'search_query': store.search_query,
            'selected_category': store.selected_category,
            'selected_priority': store.selected_priority,
            'categories': store.categories,
            'has_active_filters': store.has_active_filters,
        },
        'tasks': [task_card(store, task, now) for task in tasks],
        'empty_state': None if tasks else empty_state(has_search_or_filters),
    }


def summary_sidebar(summary_store, limit=SIDEBAR_SUMMARY_LIMIT):
    summaries = summary_store.fetch_summaries(limit=limit)
    total_tasks = sum(s.task_count for s in summaries)
    return {
        'summaries': summaries,
        'total_tasks': total_tasks,
        'average_tasks_per_day': int(total_tasks / len(summaries) + 0.5) if summaries else 0,
        'error': summary_store.error,
    }


def completed_on(tasks, date):
    """Tasks marked complete whose last change fell on date (UTC)."""
    return [task for task in tasks
            if task.completed and task.updated_at.astimezone(timezone.utc).strftime(DATE_FORMAT) == date]


def snapshot(task):
    return {
        'title': task.title,
        'description': task.description,
        'category': task.category,
        'priority': task.priority,
        'completedAt': task.updated_at.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z'),
    }


def distinct_categories(tasks):
    seen = []
    for task in tasks:
        if task.category not in seen:
            seen.append(task.category)
    return seen


class SummaryModal:
    """Generate, edit and save the summary for one day."""

    def __init__(self, task_store, summary_store, summarizer, date=None, existing_summary=None):
        self.task_store = task_store
        self.summary_store = summary_store
        self.summarizer = summarizer
        self.date = date or today_key()
        self.existing_summary = existing_summary
        self.summary = existing_summary.summary if existing_summary else ''
        self.error = None

    @classmethod
    def open(cls, task_store, summary_store, summarizer, date=None, summary=None):
        date = date or today_key()
        if summary is None:
            try:
                summary = summary_store.get_summary_by_date(date)
            except (ApiError, requests.RequestException) as e:
                logger.warning(f"Could not look up the summary for {date}: {e}")
                summary = None
        return cls(task_store, summary_store, summarizer, date=date, existing_summary=summary)

    @property
    def completed_tasks(self):
        return completed_on(self.task_store.tasks, self.date)

    def generate(self):
        self.error = None
        snapshots = [snapshot(task) for task in self.completed_tasks]
        try:
            self.summary = self.summarizer.generate_daily_summary(self.date, snapshots)
        except SummaryGenerationError as e:
            self.error = e.message
            return None
        return self.summary

    def save(self):
        text = self.summary.strip()
        if not text:
            return None

        self.error = None
        tasks = self.completed_tasks
        try:
            saved = self.summary_store.save_summary(
                date=self.date,
                summary=text,
                task_count=len(tasks),
                categories=distinct_categories(tasks),
                completed_tasks=[snapshot(task) for task in tasks],
            )
        except SummaryStoreError as e:
            self.error = str(e)
            return None

        self.existing_summary = saved
        return saved
