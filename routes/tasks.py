import logging

from flask import Blueprint, jsonify, request

from models import Task, db, is_valid_id, to_storage_datetime, utcnow
from schemas import TaskCreate, TaskUpdate
from tokens import current_user_id, token_required

logger = logging.getLogger(__name__)

tasks_bp = Blueprint('tasks', __name__, url_prefix='/api/tasks')


def _owned_task(task_id):
    return Task.query.filter_by(id=task_id, user_id=current_user_id()).first()


@tasks_bp.route('', methods=['GET'])
@token_required
def get_tasks():
    tasks = (Task.query
             .filter_by(user_id=current_user_id())
             .order_by(Task.created_at.desc())
             .all())
    return jsonify([task.to_dict() for task in tasks])


@tasks_bp.route('', methods=['POST'])
@token_required
def create_task():
    data = request.get_json(silent=True) or {}

    if not str(data.get('title') or '').strip():
        return jsonify({"message": "Title is required"}), 400

    payload = TaskCreate.model_validate(data)
    task = Task(
        user_id=current_user_id(),
        title=payload.title,
        description=payload.description,
        completed=False,
        priority=payload.priority,
        category=payload.category,
        due_date=to_storage_datetime(payload.due_date),
    )

    db.session.add(task)
    db.session.commit()
    logger.info(f"Created task {task.id} for user {task.user_id}")

    return jsonify(task.to_dict()), 201


@tasks_bp.route('/<task_id>', methods=['PUT'])
@token_required
def update_task(task_id):
    if not is_valid_id(task_id):
        return jsonify({"message": "Invalid task ID"}), 400

    payload = TaskUpdate.model_validate(request.get_json(silent=True) or {})

    task = _owned_task(task_id)
    if not task:
        return jsonify({"message": "Task not found"}), 404

    for name, value in payload.changes().items():
        if name == 'due_date':
            value = to_storage_datetime(value)
        setattr(task, name, value)
    task.updated_at = utcnow()

    db.session.commit()
    return jsonify(task.to_dict())


@tasks_bp.route('/<task_id>', methods=['DELETE'])
@token_required
def delete_task(task_id):
    if not is_valid_id(task_id):
        return jsonify({"message": "Invalid task ID"}), 400

    task = _owned_task(task_id)
    if not task:
        return jsonify({"message": "Task not found"}), 404

    db.session.delete(task)
    db.session.commit()
    logger.info(f"Deleted task {task_id}")

    return '', 204
