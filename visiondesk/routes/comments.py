"""Comment routes - client feedback on projects and tasks."""
from flask import Blueprint, g, jsonify, request
from flask_babel import gettext as _

from visiondesk.errors import ValidationError
from visiondesk.models import Comment, Project, Task
from visiondesk.routes.auth import token_required
from visiondesk.services import policy
from visiondesk.services.store import get_store
from visiondesk.validation import get_json, require_fields, parse_optional_id, parse_text

comments_bp = Blueprint('comments', __name__, url_prefix='/api/comments')


def _target(project_id, task_id):
    if (project_id is None) == (task_id is None):
        raise ValidationError(_('Either project_id or task_id must be provided, but not both.'))


@comments_bp.route('', methods=['GET'])
@token_required
def list_comments():
    project_id = parse_optional_id(request.args.get('project_id'), 'project_id')
    task_id = parse_optional_id(request.args.get('task_id'), 'task_id')
    _target(project_id, task_id)

    store = get_store()
    if project_id is not None:
        project = store.find(Project, project_id)
        policy.ensure_visible(project is not None and policy.can_view_comments(g.caller, project=project), 'Project')
        criterion = Comment.project_id == project_id
    else:
        task = store.find(Task, task_id)
        policy.ensure_visible(task is not None and policy.can_view_comments(g.caller, task=task), 'Task')
        criterion = Comment.task_id == task_id

    comments = store.list(Comment, criterion, order_by=Comment.created_at.desc())
    return jsonify([comment.to_dict() for comment in comments])


@comments_bp.route('', methods=['POST'])
@token_required
def create_comment():
    data = get_json()
    require_fields(data, 'content')
    project_id = parse_optional_id(data.get('project_id'), 'project_id')
    task_id = parse_optional_id(data.get('task_id'), 'task_id')
    _target(project_id, task_id)

    store = get_store()
    if project_id is not None:
        project = store.get(Project, project_id)
    else:
        project = store.get(Task, task_id).project
    policy.check_comment_create(g.caller, project)

    comment = Comment(content=parse_text(data['content'], 'content'), author_id=g.caller.id,
                      project_id=project_id, task_id=task_id)
    store.add(comment)
    return jsonify(comment.to_dict()), 201


@comments_bp.route('/<int:comment_id>', methods=['PUT'])
@token_required
def update_comment(comment_id):
    data = get_json()
    require_fields(data, 'content')
    store = get_store()
    comment = store.get(Comment, comment_id)
    policy.check_comment_update(g.caller, comment)

    comment.content = parse_text(data['content'], 'content')
    store.commit()
    return jsonify(comment.to_dict())


@comments_bp.route('/<int:comment_id>', methods=['DELETE'])
@token_required
def delete_comment(comment_id):
    store = get_store()
    comment = store.get(Comment, comment_id)
    policy.check_comment_delete(g.caller, comment)

    store.delete(comment)
    return jsonify({'message': _('Comment deleted successfully.')})
