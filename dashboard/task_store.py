"""Client-side task state with optimistic updates.

The server is authoritative. Every mutation is applied to the in-memory list
first, mirrored to local storage and announced to subscribers, and only then
sent to the API. When the API call fails the store logs it and keeps the
best local state it has: creates stay in place (flagged as unsynced),
updates back out exactly the fields they changed, deletes put the removed
task back at the front of the list.
"""
import json
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, List, Optional

import requests
from pydantic import ValidationError

from dashboard.api import ApiError
from schemas import DEFAULT_CATEGORY, DEFAULT_PRIORITY, Task, TaskUpdate, ensure_utc, to_wire_fields

logger = logging.getLogger(__name__)

STORAGE_KEY = 'taskflow-tasks'
UNSYNCED_KEY = 'taskflow-unsynced'
ALL = 'all'

UPDATABLE_FIELDS = frozenset({'title', 'description', 'completed', 'priority', 'category', 'due_date'})

CATEGORY_COLORS = [
    '#3B82F6', '#14B8A6', '#F97316', '#8B5CF6',
    '#10B981', '#F59E0B', '#EF4444', '#6366F1',
]

# Failures that degrade to local state instead of reaching the caller.
SERVER_ERRORS = (ApiError, requests.RequestException)


def generate_temp_id():
    return f"temp_{int(time.time() * 1000)}_{uuid.uuid4().hex[:4]}"


def is_temp_id(task_id):
    return isinstance(task_id, str) and task_id.startswith('temp_')


def is_valid_task_id(task_id):
    if not isinstance(task_id, str):
        return False
    task_id = task_id.strip()
    return bool(task_id) and task_id not in ('undefined', 'null')


def _to_int32(n):
    n &= 0xFFFFFFFF
    return n - (1 << 32) if n & 0x80000000 else n


def category_color(category):
    """Pick a palette color from a 32-bit string hash of the category name."""
    encoded = category.encode('utf-16-le')
    h = 0
    for i in range(0, len(encoded), 2):
        code = encoded[i] | (encoded[i + 1] << 8)
        h = code + (_to_int32(_to_int32(h) << 5) - h)
    return CATEGORY_COLORS[abs(h) % len(CATEGORY_COLORS)]


@dataclass(frozen=True)
class PendingMutation:
    """The speculative delta of one optimistic update."""

    task_id: str
    changed: FrozenSet[str]
    prior: Dict[str, Any]

    @classmethod
    def capture(cls, task, updates):
        changed = frozenset(name for name in updates if name != 'updated_at')
        prior = {name: getattr(task, name) for name in changed} if task is not None else {}
        return cls(task_id=task.id if task is not None else None, changed=changed, prior=prior)

    def revert(self, task):
        return task.model_copy(update=self.prior)


@dataclass
class TaskStats:
    total: int
    completed: int
    pending: int
    overdue: int


@dataclass
class CategoryFacet:
    id: str
    name: str
    color: str
    count: int


class TaskStore:
    def __init__(self, api, storage, clock: Optional[Callable[[], datetime]] = None):
        self.api = api
        self.storage = storage
        self.tasks: List[Task] = []
        self.unsynced = set()
        self.search_query = ''
        self.selected_category = ALL
        self.selected_priority = ALL
        self._listeners = []
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # State plumbing

    def subscribe(self, listener):
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self):
        self._mirror()
        for listener in list(self._listeners):
            listener(self)

    def _mirror(self):
        self.storage.set_item(STORAGE_KEY, json.dumps([task.to_wire() for task in self.tasks]))
        self.storage.set_item(UNSYNCED_KEY, json.dumps(sorted(self.unsynced)))

    def _now(self):
        return ensure_utc(self._clock())

    def find(self, task_id):
        return next((task for task in self.tasks if task.id == task_id), None)

    def _replace(self, task_id, replacement):
        self.tasks = [replacement if task.id == task_id else task for task in self.tasks]

    # Loading

    def load(self):
        """Fetch the server's list, falling back to the local mirror."""
        try:
            data = self.api.list_tasks()
        except SERVER_ERRORS as e:
            logger.warning(f"Failed to load tasks from server, using local storage: {e}")
            self.tasks, self.unsynced = self._read_mirror()
        else:
            if self.unsynced:
                logger.warning(f"Dropping {len(self.unsynced)} unsynced task(s) missing from the server")
            self.tasks = [Task.model_validate(item) for item in data or []]
            self.unsynced = set()
        self._commit()
        return self.tasks

    def _read_mirror(self):
        saved_tasks = self.storage.get_item(STORAGE_KEY)
        if not saved_tasks:
            return [], set()
        try:
            tasks = [Task.model_validate(item) for item in json.loads(saved_tasks)]
            unsynced = set(json.loads(self.storage.get_item(UNSYNCED_KEY) or '[]'))
        except ValueError as e:
            logger.error(f"Error loading tasks from local storage: {e}")
            return [], set()
        known = {task.id for task in tasks}
        return tasks, unsynced & known

    # Mutations

    def add_task(self, title, description=None, priority=DEFAULT_PRIORITY, category=DEFAULT_CATEGORY,
                 due_date=None, completed=False):
        title = (title or '').strip()
        if not title:
            logger.error("Refusing to add a task without a title")
            return None

        now = self._now()
        try:
            temp_task = Task(
                id=generate_temp_id(),
                title=title,
                description=description,
                completed=completed,
                priority=priority,
                category=category or DEFAULT_CATEGORY,
                due_date=due_date,
                created_at=now,
                updated_at=now,
            )
        except ValidationError as e:
            logger.error(f"Refusing to add an invalid task: {e}")
            return None
        self.tasks = [temp_task] + self.tasks
        self._commit()

        return self._sync_created(temp_task)

    def _create_payload(self, task):
        return to_wire_fields({
            'title': task.title,
            'description': task.description,
            'completed': task.completed,
            'priority': task.priority,
            'category': task.category,
            'due_date': task.due_date,
        })

    def _sync_created(self, temp_task):
        try:
            data = self.api.create_task(self._create_payload(temp_task))
        except SERVER_ERRORS as e:
            logger.warning(f"Failed to save task to server: {e}")
            self.unsynced.add(temp_task.id)
            self._commit()
            return temp_task

        created = Task.model_validate(data)
        self.unsynced.discard(temp_task.id)
        self._replace(temp_task.id, created)
        self._commit()
        return created

    def retry_unsynced(self):
        """Re-send creates that never reached the server. Returns how many succeeded."""
        synced = 0
        for temp_id in sorted(self.unsynced):
            task = self.find(temp_id)
            if task is None:
                self.unsynced.discard(temp_id)
                continue
            if self._sync_created(task).id != temp_id:
                synced += 1
        self._commit()
        return synced

    def is_unsynced(self, task_id):
        return task_id in self.unsynced

    def update_task(self, task_id, updates):
        if not is_valid_task_id(task_id):
            logger.error(f"Invalid task ID for update: {task_id!r}")
            return None

        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            logger.error(f"Refusing to update unknown task fields: {sorted(unknown)}")
            return None

        try:
            updates = TaskUpdate.model_validate(updates).changes()
        except ValidationError as e:
            logger.error(f"Refusing invalid update for task {task_id}: {e}")
            return None
        if 'due_date' in updates:
            updates['due_date'] = ensure_utc(updates['due_date'])

        task = self.find(task_id)
        mutation = PendingMutation.capture(task, updates)
        if task is not None:
            task = task.model_copy(update=dict(updates, updated_at=self._now()))
            self._replace(task_id, task)
        self._commit()

        try:
            self.api.update_task(task_id, to_wire_fields(updates))
        except SERVER_ERRORS as e:
            logger.warning(f"Failed to update task on server: {e}")
            self._rollback(mutation)
            return self.find(task_id)
        return task

    def _rollback(self, mutation):
        current = self.find(mutation.task_id)
        if current is None or not mutation.prior:
            return
        self._replace(mutation.task_id, mutation.revert(current))
        self._commit()

    def toggle_task(self, task_id):
        task = self.find(task_id)
        if task is None:
            return None
        return self.update_task(task_id, {'completed': not task.completed})

    def delete_task(self, task_id):
        if not is_valid_task_id(task_id):
            logger.error(f"Invalid task ID for deletion: {task_id!r}")
            return False

        removed = self.find(task_id)
        was_unsynced = task_id in self.unsynced
        self.tasks = [task for task in self.tasks if task.id != task_id]
        self.unsynced.discard(task_id)
        self._commit()

        # The server never saw a temp id, so there is nothing to delete there.
        if is_temp_id(task_id):
            return True

        try:
            self.api.delete_task(task_id)
        except SERVER_ERRORS as e:
            logger.warning(f"Failed to delete task from server: {e}")
            if removed is not None:
                self.tasks = [removed] + self.tasks
                if was_unsynced:
                    self.unsynced.add(task_id)
                self._commit()
            return False
        return True

    # Derived views

    def set_filters(self, search_query=None, category=None, priority=None):
        if search_query is not None:
            self.search_query = search_query
        if category is not None:
            self.selected_category = category
        if priority is not None:
            self.selected_priority = priority
        for listener in list(self._listeners):
            listener(self)

    def clear_filters(self):
        self.set_filters(search_query='', category=ALL, priority=ALL)

    @property
    def has_active_filters(self):
        return self.selected_category != ALL or self.selected_priority != ALL

    def matches_filters(self, task):
        query = self.search_query.lower()
        matches_search = query in task.title.lower() or (
            task.description is not None and query in task.description.lower())
        matches_category = self.selected_category == ALL or task.category == self.selected_category
        matches_priority = self.selected_priority == ALL or task.priority == self.selected_priority
        return matches_search and matches_category and matches_priority

    @property
    def filtered_tasks(self):
        return [task for task in self.tasks if self.matches_filters(task)]

    def is_overdue(self, task, now=None):
        now = now or self._now()
        return not task.completed and task.due_date is not None and task.due_date < now

    @property
    def stats(self):
        now = self._now()
        completed = sum(1 for task in self.tasks if task.completed)
        return TaskStats(
            total=len(self.tasks),
            completed=completed,
            pending=len(self.tasks) - completed,
            overdue=sum(1 for task in self.tasks if self.is_overdue(task, now)),
        )

    @property
    def categories(self):
        counts = {}
        for task in self.tasks:
            counts[task.category] = counts.get(task.category, 0) + 1
        return [CategoryFacet(id=name, name=name, color=category_color(name), count=count)
                for name, count in counts.items()]
