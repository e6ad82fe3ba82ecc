"""Reporting routes - deadlines, workload and project progress."""
from flask import Blueprint, g, jsonify

from visiondesk.models import Project
from visiondesk.routes.auth import token_required, permission_required
from visiondesk.services import policy, reports
from visiondesk.services.store import get_store

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')


@reports_bp.route('/deadlines')
@permission_required('report', 'read')
def deadlines():
    return jsonify(reports.deadline_report(get_store()))


@reports_bp.route('/workload')
@permission_required('report', 'read')
def workload():
    return jsonify(reports.workload_report(get_store()))


@reports_bp.route('/projects/<int:project_id>/progress')
@token_required
def project_progress(project_id):
    """Progress of one project, for anyone who can see it."""
    project = get_store().find(Project, project_id)
    policy.ensure_visible(project is not None and policy.can_view_project(g.caller, project), 'Project')
    return jsonify(reports.project_progress(project))
