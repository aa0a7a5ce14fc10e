from flask import Blueprint, current_app, jsonify, request

from taskapi.models.payloads import PayloadError, TaskCreate, TaskUpdate
from taskapi.utils.auth import current_caller, require_caller
from taskapi.utils.db import STORE_ERRORS, get_task_store


tasks_bp = Blueprint("tasks", __name__)

# Every task route requires a verified caller.
tasks_bp.before_request(require_caller)


def _server_error(action):
    current_app.logger.exception("Task %s failed", action)
    return jsonify(message="Server error"), 500


def _task_required():
    return jsonify(message="Task is required"), 400


def _not_found():
    return jsonify(message="Task not found"), 404


def _owned_task(task_id):
    """Fetch a task only if the caller owns it; otherwise None, whether or not it exists."""
    task = get_task_store().find_by_id(task_id)
    if task is None or not task.owned_by(current_caller()):
        return None
    return task


@tasks_bp.post("")
@tasks_bp.post("/")
def create_task():
    try:
        data = TaskCreate.from_payload(request.get_json(silent=True))
    except PayloadError as exc:
        return jsonify(message=str(exc)), 400

    try:
        task = get_task_store().create(current_caller(), data.title, data.description)
    except STORE_ERRORS:
        return _server_error("create")
    return jsonify(task.to_dict()), 201


@tasks_bp.get("")
@tasks_bp.get("/")
def list_tasks():
    try:
        tasks = get_task_store().find_by_owner(current_caller())
    except STORE_ERRORS:
        return _server_error("list")
    return jsonify([t.to_dict() for t in tasks]), 200


@tasks_bp.put("")
@tasks_bp.put("/")
@tasks_bp.delete("")
@tasks_bp.delete("/")
def missing_task_id():
    return _task_required()


@tasks_bp.get("/<task_id>")
def get_task(task_id):
    if not task_id.strip():
        return _task_required()
    try:
        task = _owned_task(task_id)
    except STORE_ERRORS:
        return _server_error("get")
    if task is None:
        return _not_found()
    return jsonify(task.to_dict()), 200


@tasks_bp.put("/<task_id>")
def update_task(task_id):
    if not task_id.strip():
        return _task_required()
    try:
        changes = TaskUpdate.from_payload(request.get_json(silent=True))
    except PayloadError as exc:
        return jsonify(message=str(exc)), 400

    try:
        task = _owned_task(task_id)
        if task is None:
            return _not_found()
        changes.apply(task)
        get_task_store().save(task)
    except STORE_ERRORS:
        return _server_error("update")
    return jsonify(task.to_dict()), 200


@tasks_bp.delete("/<task_id>")
def delete_task(task_id):
    if not task_id.strip():
        return _task_required()
    try:
        task = _owned_task(task_id)
        if task is None:
            return _not_found()
        get_task_store().delete(task)
    except STORE_ERRORS:
        return _server_error("delete")
    return jsonify(message="Task removed"), 200
