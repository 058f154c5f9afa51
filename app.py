"""
Site Shift Planner - Flask Application

Generates draft staff schedules for a site:
- Shifts sliced from the site's opening hours
- Employees picked by availability, veteran/novice pairing and conflicts
- Generated shifts saved as drafts for review
"""

from datetime import date
import logging

from flask import Flask, jsonify, request
from flask_login import login_required, current_user
from werkzeug.exceptions import HTTPException

from config import get_config
from models import init_db
from auth import auth_bp, login_manager
import db_service
from scheduler import (
    GenerationRequest,
    ScheduleGenerator,
    ScheduleGenerationError,
    InvalidRequestError,
    SiteNotFoundError,
    DataLoadError,
    PersistenceError
)

logger = logging.getLogger(__name__)


def _configure_logging(app):
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    logging.getLogger().setLevel(level)


def create_app(config_name=None):
    """Application factory."""
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    _configure_logging(app)
    init_db(app)
    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    _register_routes(app)

    return app


def _parse_generation_request():
    """Parse the JSON body into a GenerationRequest (raises InvalidRequestError)."""
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidRequestError("Request body must be JSON.")
    return GenerationRequest.from_dict(data)


def _parse_optional_date(name):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidRequestError(f"{name} must be an ISO date (YYYY-MM-DD).")


def _register_routes(app):

    @app.errorhandler(ScheduleGenerationError)
    def handle_generation_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        # 404, 405 and the like keep their own status
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({'error': 'An unexpected error occurred.'}), 500

    # ==================== HEALTH ====================

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    # ==================== SCHEDULE API ====================

    @app.route('/api/generate-schedule', methods=['POST'])
    @login_required
    def generate_schedule():
        """Generate draft shifts for a site and save them."""
        gen_request = _parse_generation_request()
        logger.info("Generation request from user %s: %s", current_user.id, gen_request.to_dict())

        try:
            snapshot = db_service.load_generation_snapshot(gen_request, current_user.id)
        except DataLoadError as e:
            db_service.record_failed_generation(gen_request, current_user.id, e.message)
            raise

        try:
            result = ScheduleGenerator(snapshot).generate(gen_request)
        except Exception as e:
            db_service.record_failed_generation(
                gen_request, current_user.id, f"Schedule generation failed: {e}"
            )
            raise

        try:
            db_service.persist_generated_schedule(gen_request, result, current_user.id)
        except PersistenceError as e:
            db_service.record_failed_generation(gen_request, current_user.id, e.message)
            raise

        return jsonify({
            'success': True,
            'shiftsCreated': result.shifts_created,
            'assignmentsCreated': result.assignments_created
        })

    @app.route('/api/generate-schedule/preview', methods=['POST'])
    @login_required
    def preview_schedule():
        """Generate draft shifts without saving them."""
        gen_request = _parse_generation_request()
        snapshot = db_service.load_generation_snapshot(gen_request, current_user.id)
        result = ScheduleGenerator(snapshot).generate(gen_request)

        return jsonify({
            'success': True,
            'shiftsCreated': result.shifts_created,
            'assignmentsCreated': result.assignments_created,
            **result.to_dict()
        })

    # ==================== SITE API ====================

    @app.route('/api/sites/<site_id>/shifts', methods=['GET'])
    @login_required
    def get_site_shifts(site_id):
        """List the saved shifts of a site, optionally between ?start= and ?end=."""
        site = db_service.get_user_site(site_id, current_user.id)
        if site is None:
            raise SiteNotFoundError(f"Site {site_id} not found.")

        start = _parse_optional_date('start')
        end = _parse_optional_date('end')
        if start and end and start > end:
            raise InvalidRequestError("start must be on or before end.")

        shifts = db_service.get_site_shifts(site.id, start, end)
        return jsonify({
            'success': True,
            'site': site.to_dict(),
            'shifts': [s.to_dict() for s in shifts]
        })

    @app.route('/api/sites/<site_id>/generation-requests', methods=['GET'])
    @login_required
    def get_generation_history(site_id):
        """Recent generation audit records for a site."""
        site = db_service.get_user_site(site_id, current_user.id)
        if site is None:
            raise SiteNotFoundError(f"Site {site_id} not found.")

        history = db_service.get_generation_history(site.id)
        return jsonify({
            'success': True,
            'requests': [r.to_dict() for r in history]
        })


if __name__ == '__main__':
    app = create_app()
    logger.info("Starting Site Shift Planner at http://localhost:5000")
    app.run(debug=app.config.get('DEBUG', False), port=5000)
