"""Identity context: bearer tokens in, a verified caller ObjectId out."""

from bson import ObjectId
from flask import Flask, g, jsonify, request
from flask_jwt_extended import JWTManager, create_access_token, get_jwt_identity, verify_jwt_in_request

from taskapi.utils.db import to_object_id

INVALID_CREDENTIALS = "Invalid authentication credentials"


def _auth_failure(message: str):
    return jsonify(message=message), 401


def init_jwt(app: Flask) -> JWTManager:
    """Install JWT handling with JSON 401 responses for every token problem."""
    jwt = JWTManager(app)

    @jwt.unauthorized_loader
    def missing_token(reason):
        app.logger.debug("Missing token: %s", reason)
        return _auth_failure("Authorization token is required")

    @jwt.invalid_token_loader
    def invalid_token(reason):
        app.logger.debug("Invalid token: %s", reason)
        return _auth_failure(INVALID_CREDENTIALS)

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return _auth_failure("Token has expired")

    return jwt


def issue_token(user_id: ObjectId) -> str:
    return create_access_token(identity=str(user_id))


def require_caller():
    """``before_request`` hook: reject the request unless it carries a valid token.

    On success the caller's ObjectId is stored on ``g.caller``.
    """
    if request.method == "OPTIONS":
        return None
    verify_jwt_in_request()
    caller = to_object_id(get_jwt_identity())
    if caller is None:
        return _auth_failure(INVALID_CREDENTIALS)
    g.caller = caller
    return None


def current_caller() -> ObjectId:
    return g.caller
