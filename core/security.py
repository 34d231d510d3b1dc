from functools import wraps
from core.imports import jsonify, verify_jwt_in_request, get_jwt


def admin_required(fn):
    """Reject the request unless it carries a valid admin JWT."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        claims = get_jwt()
        if claims.get("role") != "admin":
            return jsonify({"message": "Forbidden"}), 403
        return fn(*args, **kwargs)
    return wrapper


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"message": "Authorization token is missing"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"message": "Token is not valid"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"message": "Token has expired"}), 401
