"""Task and sub-task routes."""
import logging

from flask import Blueprint, g, jsonify
from flask_babel import gettext as _

from visiondesk.errors import ValidationError
from visiondesk.models import Task, SubTask, Project, User, TASK_STATUSES, TASK_PRIORITIES
from visiondesk.routes.auth import token_required, permission_required
from visiondesk.services import policy
from visiondesk.services.store import get_store
from visiondesk.validation import (
    get_json, require_fields, parse_bool, parse_choice, parse_date, parse_int, parse_optional_id, parse_text,
)

logger = logging.getLogger('visiondesk.tasks')

tasks_bp = Blueprint('tasks', __name__, url_prefix='/api')

SUBTASK_STATUSES = ['pending', 'in_progress', 'completed']


def _parse_task_fields(store, data):
    """Parse the task fields present in ``data`` into column values."""
    values = {}
    if 'title' in data:
        values['title'] = parse_text(data['title'], 'title')
    if 'description' in data:
        values['description'] = parse_text(data['description'], 'description', required=False)
    if 'project_id' in data:
        project_id = parse_int(data['project_id'], 'project_id', minimum=1)
        if store.find(Project, project_id) is None:
            raise ValidationError(_('Project %(id)s does not exist.', id=project_id))
        values['project_id'] = project_id
    if 'assigned_to' in data:
        assigned_to = parse_optional_id(data['assigned_to'], 'assigned_to')
        if assigned_to is not None and store.find(User, assigned_to) is None:
            raise ValidationError(_('User %(id)s does not exist.', id=assigned_to))
        values['assigned_to'] = assigned_to
    if 'status' in data:
        values['status'] = parse_choice(data['status'], TASK_STATUSES, 'status')
    if 'priority' in data:
        values['priority'] = parse_choice(data['priority'], TASK_PRIORITIES, 'priority')
    if 'progress_percentage' in data:
        values['progress_percentage'] = parse_int(data['progress_percentage'], 'progress_percentage', 0, 100)
    if 'deadline' in data:
        values['deadline'] = parse_date(data['deadline'], 'deadline')
    return values


def _visible_task(task_id):
    task = get_store().find(Task, task_id)
    policy.ensure_visible(task is not None and policy.can_view_task(g.caller, task), 'Task')
    return task


@tasks_bp.route('/tasks', methods=['GET'])
@token_required
def list_tasks():
    tasks = get_store().list(Task, policy.task_scope(g.caller), order_by=Task.created_at.desc())
    return jsonify([task.to_dict() for task in tasks])


@tasks_bp.route('/tasks/<int:task_id>', methods=['GET'])
@token_required
def get_task(task_id):
    return jsonify(_visible_task(task_id).to_dict())


@tasks_bp.route('/tasks', methods=['POST'])
@permission_required('task', 'create')
def create_task():
    data = get_json()
    require_fields(data, 'title', 'project_id')
    store = get_store()
    task = Task(created_by=g.caller.id, status='not_started', priority='medium', progress_percentage=0)
    for field, value in _parse_task_fields(store, data).items():
        setattr(task, field, value)
    store.add(task)
    logger.info('User %s created task %s in project %s', g.caller.id, task.id, task.project_id)
    return jsonify(task.to_dict()), 201


@tasks_bp.route('/tasks/<int:task_id>', methods=['PUT'])
@token_required
def update_task(task_id):
    """Update a task; the assigned developer may only move status and progress."""
    store = get_store()
    task = store.get(Task, task_id)
    values = _parse_task_fields(store, get_json())
    changes = {field: value for field, value in values.items() if getattr(task, field) != value}
    policy.check_task_update(g.caller, task, changes)

    for field, value in changes.items():
        setattr(task, field, value)
    store.commit()
    return jsonify(task.to_dict())


@tasks_bp.route('/tasks/<int:task_id>', methods=['DELETE'])
@permission_required('task', 'delete')
def delete_task(task_id):
    store = get_store()
    task = store.get(Task, task_id)
    store.delete(task)
    logger.info('User %s deleted task %s', g.caller.id, task_id)
    return jsonify({'message': _('Task deleted successfully.')})


# ==================== SUB-TASKS ====================

def _parse_subtask_fields(data):
    values = {}
    if 'title' in data:
        values['title'] = parse_text(data['title'], 'title')
    if 'description' in data:
        values['description'] = parse_text(data['description'], 'description', required=False)
    if 'status' in data:
        values['status'] = parse_choice(data['status'], SUBTASK_STATUSES, 'status')
    if 'approved' in data:
        values['approved'] = parse_bool(data['approved'], 'approved')
    return values


@tasks_bp.route('/tasks/<int:task_id>/subtasks', methods=['GET'])
@token_required
def list_subtasks(task_id):
    _visible_task(task_id)
    subtasks = get_store().list(SubTask, SubTask.task_id == task_id, order_by=SubTask.created_at.desc())
    return jsonify([subtask.to_dict() for subtask in subtasks])


@tasks_bp.route('/tasks/<int:task_id>/subtasks', methods=['POST'])
@token_required
def create_subtask(task_id):
    data = get_json()
    require_fields(data, 'title')
    store = get_store()
    task = store.get(Task, task_id)
    values = _parse_subtask_fields(data)
    if not values.get('approved'):
        values.pop('approved', None)
    policy.check_subtask_write(g.caller, task, 'create', values)

    subtask = SubTask(task_id=task.id, created_by=g.caller.id, status='pending', approved=False)
    for field, value in values.items():
        setattr(subtask, field, value)
    store.add(subtask)
    return jsonify(subtask.to_dict()), 201


@tasks_bp.route('/subtasks/<int:subtask_id>', methods=['PUT'])
@token_required
def update_subtask(subtask_id):
    store = get_store()
    subtask = store.get(SubTask, subtask_id)
    values = _parse_subtask_fields(get_json())
    changes = {field: value for field, value in values.items() if getattr(subtask, field) != value}
    policy.check_subtask_write(g.caller, subtask.task, 'update', changes)

    for field, value in changes.items():
        setattr(subtask, field, value)
    store.commit()
    return jsonify(subtask.to_dict())


@tasks_bp.route('/subtasks/<int:subtask_id>', methods=['DELETE'])
@token_required
def delete_subtask(subtask_id):
    store = get_store()
    subtask = store.get(SubTask, subtask_id)
    policy.check_subtask_write(g.caller, subtask.task, 'delete')

    store.delete(subtask)
    return jsonify({'message': _('Sub-task deleted successfully.')})
