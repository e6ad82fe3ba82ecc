"""Project routes, including the project document."""
import io
import logging
from datetime import datetime

from flask import Blueprint, current_app, g, jsonify, request, send_file
from flask_babel import gettext as _
from werkzeug.utils import secure_filename

from visiondesk.errors import NotFound, ValidationError
from visiondesk.models import Project, Company
from visiondesk.routes.auth import token_required, permission_required
from visiondesk.services import policy
from visiondesk.services.store import get_store
from visiondesk.validation import get_json, require_fields, parse_date, parse_int, parse_text

logger = logging.getLogger('visiondesk.projects')

projects_bp = Blueprint('projects', __name__, url_prefix='/api/projects')

PROJECT_STATUSES = ['active', 'on_hold', 'completed', 'cancelled']


def _apply(store, project, data):
    if 'name' in data:
        project.name = parse_text(data['name'], 'name')
    if 'description' in data:
        project.description = parse_text(data['description'], 'description', required=False)
    if 'client_company_id' in data:
        company_id = parse_int(data['client_company_id'], 'client_company_id', minimum=1)
        if store.find(Company, company_id) is None:
            raise ValidationError(_('Company %(id)s does not exist.', id=company_id))
        project.client_company_id = company_id
    if 'status' in data:
        if data['status'] not in PROJECT_STATUSES:
            raise ValidationError(_('status must be one of: %(choices)s.', choices=', '.join(PROJECT_STATUSES)))
        project.status = data['status']
    if 'deadline' in data:
        project.deadline = parse_date(data['deadline'], 'deadline')


def _visible_project(project_id, predicate=policy.can_view_project):
    project = get_store().find(Project, project_id)
    policy.ensure_visible(project is not None and predicate(g.caller, project), 'Project')
    return project


@projects_bp.route('', methods=['GET'])
@token_required
def list_projects():
    """Projects visible to the caller, newest first."""
    projects = get_store().list(Project, policy.project_scope(g.caller), order_by=Project.created_at.desc())
    return jsonify([project.to_dict() for project in projects])


@projects_bp.route('/<int:project_id>', methods=['GET'])
@token_required
def get_project(project_id):
    return jsonify(_visible_project(project_id).to_dict())


@projects_bp.route('', methods=['POST'])
@permission_required('project', 'create')
def create_project():
    data = get_json()
    require_fields(data, 'name', 'client_company_id')
    store = get_store()
    project = Project(admin_id=g.caller.id, status='active')
    _apply(store, project, data)
    store.add(project)
    logger.info('User %s created project %s', g.caller.id, project.id)
    return jsonify(project.to_dict()), 201


@projects_bp.route('/<int:project_id>', methods=['PUT'])
@permission_required('project', 'update')
def update_project(project_id):
    store = get_store()
    project = store.get(Project, project_id)
    _apply(store, project, get_json())
    store.commit()
    return jsonify(project.to_dict())


@projects_bp.route('/<int:project_id>', methods=['DELETE'])
@token_required
def delete_project(project_id):
    store = get_store()
    project = store.get(Project, project_id)
    policy.check_project_delete(g.caller, project, store)

    store.delete(project)
    logger.info('User %s deleted project %s', g.caller.id, project_id)
    return jsonify({'message': _('Project deleted successfully.')})


# ==================== DOCUMENT ====================

@projects_bp.route('/<int:project_id>/document', methods=['GET'])
@token_required
def get_document(project_id):
    """View the project document inline, or download it with ``?download=1``."""
    project = _visible_project(project_id, policy.can_view_document)
    if not project.document_name:
        raise NotFound(_('This project has no document.'))
    return send_file(
        io.BytesIO(project.document_data),
        mimetype=project.document_mimetype or 'application/octet-stream',
        download_name=project.document_name,
        as_attachment=request.args.get('download') in ('1', 'true'),
    )


@projects_bp.route('/<int:project_id>/document', methods=['PUT'])
@permission_required('project', 'update')
def upload_document(project_id):
    store = get_store()
    project = store.get(Project, project_id)

    file = request.files.get('file')
    if not file or not file.filename:
        raise ValidationError(_('Please select a file.'))
    content = file.read()
    if len(content) > current_app.config['MAX_DOCUMENT_SIZE']:
        raise ValidationError(_('The document is too large.'))

    project.document_name = secure_filename(file.filename) or 'document'
    project.document_mimetype = file.mimetype or 'application/octet-stream'
    project.document_data = content
    project.document_uploaded_at = datetime.utcnow()
    store.commit()
    logger.info('User %s uploaded %s (%d bytes) to project %s',
                g.caller.id, project.document_name, len(content), project_id)
    return jsonify(project.to_dict())


@projects_bp.route('/<int:project_id>/document', methods=['DELETE'])
@permission_required('project', 'update')
def delete_document(project_id):
    store = get_store()
    project = store.get(Project, project_id)
    project.document_name = None
    project.document_mimetype = None
    project.document_data = None
    project.document_uploaded_at = None
    store.commit()
    return jsonify(project.to_dict())
