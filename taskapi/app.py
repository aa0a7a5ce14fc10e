from flask import Flask, jsonify, request
from flask_cors import CORS
from pymongo.errors import PyMongoError

from taskapi.config import Config
from taskapi.models.task_model import TaskStore
from taskapi.models.user_model import UserStore
from taskapi.utils.auth import init_jwt
from taskapi.utils.db import (
    EXTENSION_KEY,
    TASK_STORE_KEY,
    USER_STORE_KEY,
    MongoConnection,
    get_db,
    init_app as init_db,
)


def create_app(config_object=None, mongo_client=None):
    """Build the Flask app.

    ``mongo_client`` replaces the real ``MongoClient`` (tests pass a
    ``mongomock.MongoClient``). The Mongo connection is reachable as
    ``app.extensions["taskapi.mongo"]`` and must be closed by the owner of
    the app.
    """
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core extensions
    origins = app.config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}})
    init_jwt(app)

    connection = MongoConnection(
        app.config["MONGO_URI"],
        app.config["MONGO_DB_NAME"],
        timeout_ms=app.config.get("MONGO_TIMEOUT_MS", 2000),
        client=mongo_client,
    )
    db = init_db(app, connection)

    task_store = TaskStore(db["tasks"])
    user_store = UserStore(db["users"])
    try:
        task_store.ensure_indexes()
        user_store.ensure_indexes()
    except PyMongoError as exc:
        # Keep serving so "/" still answers; store calls will fail with 500s.
        app.logger.warning("Could not create MongoDB indexes: %s", exc)
    app.extensions[TASK_STORE_KEY] = task_store
    app.extensions[USER_STORE_KEY] = user_store

    # Register blueprints
    from taskapi.routes.auth_routes import auth_bp
    from taskapi.routes.task_routes import tasks_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(tasks_bp, url_prefix="/tasks")

    @app.get("/")
    def index():
        return jsonify(message="Server is live"), 200

    @app.get("/health")
    def health():
        return jsonify(status="ok", service="Task API", database=get_db().name), 200

    @app.after_request
    def log_request(response):
        app.logger.info("%s %s %s", request.method, request.path, response.status_code)
        return response

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(message="Not Found"), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify(message="Method Not Allowed"), 405

    @app.errorhandler(500)
    def server_error(_):
        return jsonify(message="Server error"), 500

    return app


def close_app(app: Flask) -> None:
    app.extensions[EXTENSION_KEY].close()
