from flask import Flask, jsonify
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException
import logging

from config import Config
from models import db
from routes.auth import auth_bp
from routes.summaries import summaries_bp
from routes.tasks import tasks_bp
from summarizer import TaskSummarizer

logger = logging.getLogger(__name__)


def _validation_errors(error):
    return [
        {"field": ".".join(str(part) for part in err['loc']), "message": err['msg']}
        for err in error.errors()
    ]


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"message": "Invalid request", "errors": _validation_errors(e)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        logger.exception(f"Unhandled error: {e}")
        return jsonify({"message": "Internal Server Error"}), 500


def create_app(config_class=Config, summarizer=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))

    CORS(app, resources={r"/api/*": {"origins": app.config['CLIENT_ORIGIN']}}, supports_credentials=True)

    db.init_app(app)
    app.extensions['summarizer'] = summarizer or TaskSummarizer.from_config(app.config)

    app.register_blueprint(auth_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(summaries_bp)
    register_error_handlers(app)

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    app = create_app()
    logger.info(f"Server running on http://localhost:{app.config['PORT']}")
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=True)
