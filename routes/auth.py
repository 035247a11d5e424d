import logging

from flask import Blueprint, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from models import User, db
from tokens import issue_token

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _credentials(data):
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    return email, password


def _auth_response(user):
    return jsonify({"token": issue_token(user), "user": user.to_public()})


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    email, password = _credentials(data)

    if not email or not password:
        return jsonify({"message": "Email and password are required"}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"message": "Email already registered"}), 409

    name = (data.get('name') or '').strip() or email.split('@')[0]
    user = User(name=name, email=email, password_hash=generate_password_hash(password))

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(f"Concurrent registration for {email}")
        return jsonify({"message": "Email already registered"}), 409

    logger.info(f"Registered user {user.id}")
    return _auth_response(user)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email, password = _credentials(data)

    if not email or not password:
        return jsonify({"message": "Email and password are required"}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not check_password_hash(user.password_hash, password):
        return jsonify({"message": "Invalid credentials"}), 401

    return _auth_response(user)
