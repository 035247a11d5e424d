"""Client side of TaskFlow: session, API client, stores and view-models."""
from dataclasses import dataclass

from dashboard.api import DEFAULT_BASE_URL, ApiError, TaskFlowClient
from dashboard.session import AuthSession
from dashboard.storage import LocalStorage
from dashboard.summary_store import SummaryStore
from dashboard.task_store import TaskStore


@dataclass
class Dashboard:
    storage: LocalStorage
    session: AuthSession
    api: TaskFlowClient
    tasks: TaskStore
    summaries: SummaryStore


def connect(base_url=DEFAULT_BASE_URL, storage_path=None, http=None):
    """Build the client components around one hydrated session."""
    storage = LocalStorage(storage_path)
    session = AuthSession(storage).hydrate()
    api = TaskFlowClient(session, base_url=base_url, http=http)
    return Dashboard(
        storage=storage,
        session=session,
        api=api,
        tasks=TaskStore(api, storage),
        summaries=SummaryStore(api),
    )


__all__ = ['ApiError', 'AuthSession', 'Dashboard', 'LocalStorage', 'SummaryStore', 'TaskFlowClient',
           'TaskStore', 'connect']
