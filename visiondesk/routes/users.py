"""User management routes."""
import logging

from flask import Blueprint, g, jsonify
from flask_babel import gettext as _

from visiondesk.errors import Conflict
from visiondesk.models import User, ROLES
from visiondesk.routes.auth import token_required, permission_required, resolve_company
from visiondesk.services import identity, policy
from visiondesk.services.store import get_store
from visiondesk.validation import (
    get_json, require_fields, check_email, check_password,
    parse_bool, parse_choice, parse_optional_id, parse_text,
)

logger = logging.getLogger('visiondesk.users')

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@users_bp.route('', methods=['GET'])
@permission_required('user', 'list')
def list_users():
    users = get_store().list(User, order_by=User.created_at.desc())
    return jsonify([user.to_dict() for user in users])


@users_bp.route('/<int:user_id>', methods=['GET'])
@token_required
def get_user(user_id):
    user = get_store().find(User, user_id)
    policy.ensure_visible(user is not None and policy.can_view_user(g.caller, user), 'User')
    return jsonify(user.to_dict())


@users_bp.route('', methods=['POST'])
@permission_required('user', 'create')
def create_user():
    """Create a user of any role."""
    data = get_json()
    require_fields(data, 'email', 'password', 'name', 'role')
    email = check_email(data['email'])
    password = check_password(data['password'])
    role = parse_choice(data['role'], ROLES, 'role')

    store = get_store()
    if store.list(User, User.email == email):
        raise Conflict(_('The user %(email)s is already registered.', email=email))

    user = User(
        email=email,
        name=parse_text(data['name'], 'name'),
        role=role,
        company_id=resolve_company(store, parse_optional_id(data.get('company_id'), 'company_id'), role),
        is_active=parse_bool(data.get('is_active', True), 'is_active'),
        password_hash=identity.hash_password(password),
    )
    store.add(user)
    logger.info('User %s created user %s (%s)', g.caller.id, user.id, role)
    return jsonify(user.to_dict()), 201


@users_bp.route('/<int:user_id>', methods=['PUT'])
@token_required
def update_user(user_id):
    """Update a user. Only fields present in the body are considered."""
    store = get_store()
    user = store.get(User, user_id)
    data = get_json()

    changes = {}
    if 'name' in data:
        changes['name'] = parse_text(data['name'], 'name')
    if 'role' in data:
        changes['role'] = parse_choice(data['role'], ROLES, 'role')
    if 'company_id' in data:
        changes['company_id'] = parse_optional_id(data['company_id'], 'company_id')
    if 'is_active' in data:
        changes['is_active'] = parse_bool(data['is_active'], 'is_active')
    changes = {field: value for field, value in changes.items() if getattr(user, field) != value}
    if data.get('password'):
        changes['password_hash'] = identity.hash_password(check_password(data['password']))

    fields = {'password' if field == 'password_hash' else field for field in changes}
    policy.check_user_update(g.caller, user, fields)

    if 'role' in changes or 'company_id' in changes:
        changes['company_id'] = resolve_company(
            store, changes.get('company_id', user.company_id), changes.get('role', user.role)
        )

    for field, value in changes.items():
        setattr(user, field, value)
    store.commit()
    return jsonify(user.to_dict())


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@token_required
def delete_user(user_id):
    store = get_store()
    user = store.get(User, user_id)
    policy.check_user_delete(g.caller, user)

    store.delete(user)
    logger.info('User %s deleted user %s', g.caller.id, user_id)
    return jsonify({'message': _('User deleted successfully.')})
