import logging

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from models import TaskSummary, db
from schemas import SummaryGenerateRequest, SummaryUpsert, validate_date_key
from summarizer import (InvalidApiKeyError, ModelUnavailableError, QuotaExceededError,
                        SummaryGenerationError, SummaryNotConfiguredError)
from tokens import current_user_id, token_required

logger = logging.getLogger(__name__)

summaries_bp = Blueprint('summaries', __name__, url_prefix='/api/summaries')

GENERATION_ERROR_STATUS = {
    SummaryNotConfiguredError: 503,
    InvalidApiKeyError: 502,
    QuotaExceededError: 429,
    ModelUnavailableError: 502,
}


def _user_summaries():
    return TaskSummary.query.filter_by(user_id=current_user_id())


def _list_limit():
    default = current_app.config['SUMMARY_LIST_DEFAULT_LIMIT']
    limit = request.args.get('limit', default, type=int)
    if limit is None or limit < 1:
        limit = default
    return min(limit, current_app.config['SUMMARY_LIST_MAX_LIMIT'])


@summaries_bp.route('', methods=['GET'])
@token_required
def list_summaries():
    summaries = (_user_summaries()
                 .order_by(TaskSummary.date.desc())
                 .limit(_list_limit())
                 .all())
    return jsonify([s.to_dict() for s in summaries])


@summaries_bp.route('/<date>', methods=['GET'])
@token_required
def get_summary(date):
    summary = _user_summaries().filter_by(date=date).first()
    if not summary:
        return jsonify({"message": "Summary not found"}), 404
    return jsonify(summary.to_dict())


@summaries_bp.route('', methods=['POST'])
@token_required
def upsert_summary():
    data = request.get_json(silent=True) or {}

    if not data.get('date') or not data.get('summary') or data.get('taskCount') is None:
        return jsonify({"message": "Missing required fields"}), 400

    payload = SummaryUpsert.model_validate(data)
    user_id = current_user_id()

    summary = _user_summaries().filter_by(date=payload.date).first()
    if summary is None:
        summary = TaskSummary(user_id=user_id, date=payload.date)
        db.session.add(summary)

    summary.summary = payload.summary
    summary.task_count = payload.task_count
    summary.categories = payload.categories
    summary.completed_tasks = [
        task.model_dump(by_alias=True, mode='json', exclude_none=True)
        for task in payload.completed_tasks
    ]

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(f"Summary upsert for {payload.date} lost a race for user {user_id}")
        return jsonify({"message": "Summary already exists for this date"}), 409

    return jsonify(summary.to_dict()), 201


@summaries_bp.route('/<date>', methods=['DELETE'])
@token_required
def delete_summary(date):
    summary = _user_summaries().filter_by(date=date).first()
    if not summary:
        return jsonify({"message": "Summary not found"}), 404

    db.session.delete(summary)
    db.session.commit()
    return '', 204


@summaries_bp.route('/range/<start_date>/<end_date>', methods=['GET'])
@token_required
def get_summaries_in_range(start_date, end_date):
    try:
        start_date = validate_date_key(start_date)
        end_date = validate_date_key(end_date)
    except ValueError as e:
        return jsonify({"message": str(e)}), 400

    summaries = (_user_summaries()
                 .filter(TaskSummary.date >= start_date, TaskSummary.date <= end_date)
                 .order_by(TaskSummary.date.asc())
                 .all())
    return jsonify([s.to_dict() for s in summaries])


@summaries_bp.route('/generate', methods=['POST'])
@token_required
def generate_summary():
    payload = SummaryGenerateRequest.model_validate(request.get_json(silent=True) or {})
    summarizer = current_app.extensions['summarizer']

    try:
        text = summarizer.generate_daily_summary(payload.date, payload.completed_tasks)
    except SummaryGenerationError as e:
        status = GENERATION_ERROR_STATUS.get(type(e), 502)
        return jsonify({"message": e.message}), status

    return jsonify({"date": payload.date, "summary": text})
