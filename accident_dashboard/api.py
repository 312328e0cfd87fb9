"""
REST endpoints, mounted on the Dash app's Flask server.

Every endpoint is a read-only GET. Validation errors become 400 responses
that name the offending parameter and list the accepted values; store
errors become 500 responses whose details are only exposed in development.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from .dispatcher import parse_year
from .errors import UpstreamQueryError, ValidationError

logger = logging.getLogger(__name__)

DISPATCHER_KEY = "accident_dispatcher"
SETTINGS_KEY = "accident_settings"


def _dispatcher():
    return current_app.extensions[DISPATCHER_KEY]


def _development_only(value):
    settings = current_app.extensions.get(SETTINGS_KEY)
    if settings is not None and settings.is_development:
        return value
    return None


def _error_body(message, **extra):
    body = {"error": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


def create_api_blueprint(name: str = "accidents") -> Blueprint:
    bp = Blueprint(name, __name__)

    @bp.errorhandler(ValidationError)
    def handle_validation_error(error):
        logger.info(f"Rejected {request.path}: {error.message} ({error.field}={error.received!r})")
        body = _error_body(
            error.message,
            field=error.field,
            received=error.received,
            validOptions=error.valid_options,
            details=_development_only(error.details),
        )
        return jsonify(body), 400

    @bp.errorhandler(UpstreamQueryError)
    def handle_upstream_error(error):
        logger.error(f"GET {request.path} failed: {error}")
        body = _error_body("Error retrieving accident data", details=_development_only(str(error)))
        return jsonify(body), 500

    @bp.get("/years")
    def years():
        return jsonify(_dispatcher().get_years())

    @bp.get("/summary")
    def summary():
        year = parse_year(request.args.get("year"))
        counts = _dispatcher().get_summary(year)
        return jsonify({
            "status": "success",
            "year": year,
            "data": counts,
        })

    @bp.get("/multi-year")
    def multi_year():
        accident_type = request.args.get("accidentType", "non-fatal")
        segment_type = request.args.get("segmentType", "age")

        data = _dispatcher().get_multi_year(accident_type, segment_type)
        return jsonify({
            "status": "success",
            "accidentType": accident_type,
            "segmentType": segment_type,
            "count": len(data),
            "data": data,
        })

    @bp.get("/filter-options")
    def filter_options():
        return jsonify(_dispatcher().get_filter_options())

    @bp.get("/<accident_type>/<segment_type>")
    def segment(accident_type, segment_type):
        result = _dispatcher().get_segment(accident_type, segment_type, request.args.get("year"))
        return jsonify({
            "status": "success",
            "accidentType": accident_type,
            "segmentType": segment_type,
            "year": result["year"],
            "count": result["count"],
            "data": result["rows"],
        })

    return bp


def register_api(server, dispatcher, settings):
    """Attach the accidents API and the status probe to a Flask server."""
    server.extensions[DISPATCHER_KEY] = dispatcher
    server.extensions[SETTINGS_KEY] = settings
    server.register_blueprint(create_api_blueprint(), url_prefix=settings.api_prefix)

    @server.get("/api/status")
    def status():
        if _dispatcher().ping():
            return jsonify({"status": "API running", "db": "connected"})
        return jsonify({"status": "API running", "db": "unavailable"}), 503

    logger.info(f"Accidents API mounted at {settings.api_prefix}")
