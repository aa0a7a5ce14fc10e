from flask import Blueprint, current_app, jsonify, request
from pymongo.errors import DuplicateKeyError

from taskapi.models.payloads import Credentials, PayloadError
from taskapi.utils.auth import issue_token
from taskapi.utils.db import STORE_ERRORS, get_user_store


auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register")
def register():
    try:
        creds = Credentials.from_payload(request.get_json(silent=True), registering=True)
    except PayloadError as exc:
        return jsonify(message=str(exc)), 400

    try:
        user = get_user_store().register(creds.email, creds.password, name=creds.name)
    except DuplicateKeyError:
        return jsonify(message="Email is already registered"), 409
    except STORE_ERRORS:
        current_app.logger.exception("User registration failed")
        return jsonify(message="Server error"), 500

    current_app.logger.info("Registered user %s", user.id)
    return jsonify(token=issue_token(user.id), user=user.to_dict()), 201


@auth_bp.post("/login")
def login():
    try:
        creds = Credentials.from_payload(request.get_json(silent=True))
    except PayloadError as exc:
        return jsonify(message=str(exc)), 400

    try:
        user = get_user_store().find_by_email(creds.email)
    except STORE_ERRORS:
        current_app.logger.exception("Login lookup failed")
        return jsonify(message="Server error"), 500

    # Same answer for unknown email and wrong password.
    if user is None or not user.check_password(creds.password):
        return jsonify(message="Invalid email or password"), 401
    return jsonify(token=issue_token(user.id), user=user.to_dict()), 200
