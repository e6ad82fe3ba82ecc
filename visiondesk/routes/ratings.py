"""Project and task rating routes."""
from flask import Blueprint, g, jsonify, request
from flask_babel import gettext as _

from visiondesk.errors import NotFound, ValidationError
from visiondesk.extensions import db
from visiondesk.models import Project, Task, ProjectRating, TaskRating, RATING_TYPES
from visiondesk.routes.auth import token_required, staff_required
from visiondesk.services import policy, ratings
from visiondesk.services.store import get_store
from visiondesk.validation import (
    get_json, require_fields, parse_bool, parse_choice, parse_int, parse_optional_id, parse_text,
)

ratings_bp = Blueprint('ratings', __name__, url_prefix='/api')


def _rating_value(data):
    return parse_int(data['rating'], 'rating', 1, 5)


def _visible(model, ident, predicate, resource):
    instance = get_store().find(model, ident)
    policy.ensure_visible(instance is not None and predicate(g.caller, instance), resource)
    return instance


def _rating_of(model, rating_id, parent_column, parent_id):
    rating = get_store().find(model, rating_id)
    if rating is None or getattr(rating, parent_column) != parent_id:
        raise NotFound(_('Rating not found.'))
    return rating


# ==================== PROJECT RATINGS ====================

@ratings_bp.route('/projects/<int:project_id>/ratings', methods=['GET'])
@token_required
def list_project_ratings(project_id):
    _visible(Project, project_id, policy.can_view_project_ratings, 'Project')
    rows = get_store().list(ProjectRating, ProjectRating.project_id == project_id,
                            order_by=ProjectRating.created_at.desc())
    return jsonify([rating.to_dict() for rating in rows])


@ratings_bp.route('/projects/<int:project_id>/ratings', methods=['POST'])
@token_required
def rate_project(project_id):
    """Create the caller's rating for a project, or replace it."""
    data = get_json()
    require_fields(data, 'rating')
    store = get_store()
    project = store.get(Project, project_id)
    policy.check_project_rating(g.caller, project)

    would_recommend = data.get('would_recommend')
    rating = ratings.upsert_project_rating(
        store, g.caller.id, project.id,
        rating=_rating_value(data),
        comment=parse_text(data.get('comment'), 'comment', required=False) or None,
        would_recommend=parse_bool(would_recommend, 'would_recommend') if would_recommend is not None else None,
    )
    return jsonify(rating.to_dict())


@ratings_bp.route('/projects/<int:project_id>/ratings/<int:rating_id>', methods=['PUT'])
@token_required
def update_project_rating(project_id, rating_id):
    rating = _rating_of(ProjectRating, rating_id, 'project_id', project_id)
    policy.check_rating_owner(g.caller, rating, 'project_rating', 'update')

    data = get_json()
    if 'rating' in data:
        rating.rating = _rating_value(data)
    if 'comment' in data:
        rating.comment = parse_text(data['comment'], 'comment', required=False) or None
    if 'would_recommend' in data:
        rating.would_recommend = parse_bool(data['would_recommend'], 'would_recommend')
    get_store().commit()
    return jsonify(rating.to_dict())


@ratings_bp.route('/projects/<int:project_id>/ratings/<int:rating_id>', methods=['DELETE'])
@token_required
def delete_project_rating(project_id, rating_id):
    rating = _rating_of(ProjectRating, rating_id, 'project_id', project_id)
    policy.check_rating_owner(g.caller, rating, 'project_rating', 'delete')
    get_store().delete(rating)
    return jsonify({'message': _('Rating deleted successfully.')})


# ==================== TASK RATINGS ====================

@ratings_bp.route('/tasks/<int:task_id>/ratings', methods=['GET'])
@token_required
def list_task_ratings(task_id):
    _visible(Task, task_id, policy.can_view_task_ratings, 'Task')
    rows = get_store().list(TaskRating, TaskRating.task_id == task_id,
                            order_by=TaskRating.created_at.desc())
    return jsonify([rating.to_dict() for rating in rows])


@ratings_bp.route('/tasks/<int:task_id>/ratings', methods=['POST'])
@token_required
def rate_task(task_id):
    """Create the caller's rating of one type for a task, or replace it."""
    data = get_json()
    require_fields(data, 'rating')
    store = get_store()
    task = store.get(Task, task_id)
    policy.check_task_rating(g.caller, task)

    rating = ratings.upsert_task_rating(
        store, g.caller.id, task.id,
        rating=_rating_value(data),
        rating_type=parse_choice(data.get('rating_type') or 'overall', RATING_TYPES, 'rating_type'),
        comment=parse_text(data.get('comment'), 'comment', required=False) or None,
    )
    return jsonify(rating.to_dict())


@ratings_bp.route('/tasks/<int:task_id>/ratings/<int:rating_id>', methods=['PUT'])
@token_required
def update_task_rating(task_id, rating_id):
    rating = _rating_of(TaskRating, rating_id, 'task_id', task_id)
    policy.check_rating_owner(g.caller, rating, 'task_rating', 'update')

    data = get_json()
    if 'rating' in data:
        rating.rating = _rating_value(data)
    if 'comment' in data:
        rating.comment = parse_text(data['comment'], 'comment', required=False) or None
    get_store().commit()
    return jsonify(rating.to_dict())


@ratings_bp.route('/tasks/<int:task_id>/ratings/<int:rating_id>', methods=['DELETE'])
@token_required
def delete_task_rating(task_id, rating_id):
    rating = _rating_of(TaskRating, rating_id, 'task_id', task_id)
    policy.check_rating_owner(g.caller, rating, 'task_rating', 'delete')
    get_store().delete(rating)
    return jsonify({'message': _('Rating deleted successfully.')})


# ==================== AGGREGATES ====================

@ratings_bp.route('/ratings/average', methods=['GET'])
@token_required
def average():
    project_id = parse_optional_id(request.args.get('project_id'), 'project_id')
    task_id = parse_optional_id(request.args.get('task_id'), 'task_id')
    if (project_id is None) == (task_id is None):
        raise ValidationError(_('Either project_id or task_id must be provided, but not both.'))

    if project_id is not None:
        _visible(Project, project_id, policy.can_view_project_ratings, 'Project')
        result = ratings.average_rating(db.session, ProjectRating.rating, ProjectRating.project_id, project_id)
    else:
        _visible(Task, task_id, policy.can_view_task_ratings, 'Task')
        result = ratings.average_rating(db.session, TaskRating.rating, TaskRating.task_id, task_id)
    return jsonify(result)


@ratings_bp.route('/ratings/dashboard/summary', methods=['GET'])
@staff_required
def dashboard_summary():
    return jsonify(ratings.dashboard_summary(db.session))
