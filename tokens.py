"""Signed bearer tokens.

Tokens are stateless: the signed payload carries the user's id, email and
name, and verification never touches the database.
"""
import logging
from functools import wraps

from flask import current_app, g, jsonify, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

TOKEN_SALT = 'taskflow-auth'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['TOKEN_SECRET'], salt=TOKEN_SALT)


def issue_token(user):
    return _serializer().dumps({'sub': user.id, 'email': user.email, 'name': user.name})


def verify_token(token):
    """Return the identity encoded in token, or None if it is invalid or expired."""
    max_age = current_app.config['TOKEN_MAX_AGE'].total_seconds()
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        logger.info("Rejected expired token")
        return None
    except BadSignature:
        logger.info("Rejected token with bad signature")
        return None

    if not isinstance(payload, dict) or not payload.get('sub'):
        return None
    return {'id': str(payload['sub']), 'email': payload.get('email'), 'name': payload.get('name')}


def bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[7:].strip() or None
    return None


def token_required(f):
    """Reject the request with 401 unless it carries a valid bearer token."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"message": "Missing token"}), 401

        identity = verify_token(token)
        if identity is None:
            return jsonify({"message": "Invalid token"}), 401

        g.current_user = identity
        return f(*args, **kwargs)

    return decorated


def current_user_id():
    return g.current_user['id']
