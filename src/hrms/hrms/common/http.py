"""Helpers shared by the JSON controllers."""

from __future__ import annotations

from functools import wraps

from flask import jsonify, request

from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..logging_config import get_logger

logger = get_logger(__name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(message: str, status: int):
    return jsonify({"error": message}), status


def api_view(view):
    """Map domain exceptions to JSON error responses.

    Unit-of-work blocks have already rolled back by the time an exception
    reaches this wrapper.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return error_response(str(e), 400)
        except AuthenticationError as e:
            return error_response(str(e), 401)
        except NotFoundError as e:
            return error_response(str(e), 404)
        except Exception as e:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return error_response(str(e) or e.__class__.__name__, 500)

    return wrapper
