import re
import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

ID_PATTERN = re.compile(r'[0-9a-f]{32}')


def new_id():
    return uuid.uuid4().hex


def is_valid_id(value):
    """True when value has the shape of an id issued by this store."""
    return isinstance(value, str) and bool(ID_PATTERN.fullmatch(value))


def utcnow():
    # Stored naive; every column holds UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage_datetime(value):
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat().replace('+00:00', 'Z')


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    tasks = db.relationship('Task', backref='user', lazy=True, cascade='all, delete-orphan')
    summaries = db.relationship('TaskSummary', backref='user', lazy=True, cascade='all, delete-orphan')

    def to_public(self):
        return {'id': self.id, 'email': self.email, 'name': self.name}

    def __repr__(self):
        return f'<User {self.email}>'


class Task(db.Model):
    __tablename__ = 'tasks'

    PRIORITIES = ('high', 'medium', 'low')

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    priority = db.Column(db.String(10), default='medium', nullable=False)
    category = db.Column(db.String(100), default='Personal', nullable=False)
    due_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'description': self.description,
            'completed': self.completed,
            'priority': self.priority,
            'category': self.category,
            'dueDate': isoformat_utc(self.due_date),
            'createdAt': isoformat_utc(self.created_at),
            'updatedAt': isoformat_utc(self.updated_at),
        }

    def __repr__(self):
        status = '✓' if self.completed else '○'
        return f'<Task {status} {self.title}>'


class TaskSummary(db.Model):
    __tablename__ = 'task_summaries'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='uq_task_summaries_user_date'),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    summary = db.Column(db.Text, nullable=False)
    task_count = db.Column(db.Integer, nullable=False)
    categories = db.Column(db.JSON, default=list, nullable=False)
    completed_tasks = db.Column(db.JSON, default=list, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'date': self.date,
            'summary': self.summary,
            'taskCount': self.task_count,
            'categories': list(self.categories or []),
            'completedTasks': list(self.completed_tasks or []),
            'createdAt': isoformat_utc(self.created_at),
            'updatedAt': isoformat_utc(self.updated_at),
        }

    def __repr__(self):
        return f'<TaskSummary {self.date} ({self.task_count} tasks)>'
