"""Authentication routes and decorators."""
from functools import wraps

from flask import Blueprint, g, jsonify, request
from flask_babel import gettext as _

from visiondesk.errors import Conflict, ForbiddenOperation, ValidationError
from visiondesk.models import User, Company, ROLES
from visiondesk.services import identity
from visiondesk.services.policy import require
from visiondesk.services.store import get_store
from visiondesk.validation import (
    get_json, require_fields, check_email, check_password, parse_optional_id, parse_choice, parse_text,
)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

# Roles a visitor may pick when registering.
SELF_REGISTER_ROLES = ['developer', 'client']


# ==================== Auth decorators ====================

def token_required(f):
    """Authenticate the bearer token and expose the caller as ``g.caller``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.caller = identity.authenticate(request.headers.get('Authorization'), get_store())
        return f(*args, **kwargs)
    return decorated_function


def role_required(roles):
    def decorator(f):
        @wraps(f)
        @token_required
        def decorated_function(*args, **kwargs):
            if g.caller.role not in roles:
                raise ForbiddenOperation()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def staff_required(f):
    return role_required(['admin', 'manager'])(f)


def admin_required(f):
    return role_required(['admin'])(f)


def permission_required(resource, operation):
    """Check the static operation table before the handler runs."""
    def decorator(f):
        @wraps(f)
        @token_required
        def decorated_function(*args, **kwargs):
            require(g.caller, resource, operation)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def resolve_company(store, company_id, role):
    """Validate the company link of a user; clients must belong to one."""
    if company_id is None:
        if role == 'client':
            raise ValidationError(_('Client users must belong to a company.'))
        return None
    if store.find(Company, company_id) is None:
        raise ValidationError(_('Company %(id)s does not exist.', id=company_id))
    return company_id


# ==================== Routes ====================

@auth_bp.route('/register', methods=['POST'])
def register():
    data = get_json()
    require_fields(data, 'email', 'password', 'name')
    email = check_email(data['email'])
    password = check_password(data['password'])
    role = parse_choice(data.get('role') or 'developer', ROLES, 'role')

    if role not in SELF_REGISTER_ROLES:
        raise ForbiddenOperation(_('Accounts with role %(role)s must be created by an administrator.', role=role))

    store = get_store()
    if store.list(User, User.email == email):
        raise Conflict(_('The user %(email)s is already registered.', email=email))

    user = User(
        email=email,
        name=parse_text(data['name'], 'name'),
        role=role,
        company_id=resolve_company(store, parse_optional_id(data.get('company_id'), 'company_id'), role),
        password_hash=identity.hash_password(password),
    )
    store.add(user)
    return jsonify({'user': user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = get_json()
    require_fields(data, 'email', 'password')
    email = parse_text(data['email'], 'email').lower()
    token, user = identity.login(email, data['password'], get_store())
    return jsonify({'token': token, 'user': user.to_dict()})


@auth_bp.route('/validate')
@token_required
def validate():
    user = get_store().get(User, g.caller.id)
    return jsonify({'user': user.to_dict()})
