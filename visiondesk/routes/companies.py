"""Company routes."""
import logging

from flask import Blueprint, g, jsonify
from flask_babel import gettext as _

from visiondesk.models import Company
from visiondesk.routes.auth import permission_required
from visiondesk.services import policy
from visiondesk.services.store import get_store
from visiondesk.validation import get_json, require_fields, check_email, parse_text

logger = logging.getLogger('visiondesk.companies')

companies_bp = Blueprint('companies', __name__, url_prefix='/api/companies')

COMPANY_FIELDS = ['name', 'contact_email', 'phone', 'address']


def _apply(company, data):
    if 'name' in data:
        company.name = parse_text(data['name'], 'name')
    if 'contact_email' in data:
        company.contact_email = check_email(data['contact_email'])
    if 'phone' in data:
        company.phone = parse_text(data['phone'], 'phone', required=False) or None
    if 'address' in data:
        company.address = parse_text(data['address'], 'address', required=False) or None


@companies_bp.route('', methods=['GET'])
@permission_required('company', 'read')
def list_companies():
    companies = get_store().list(Company, order_by=Company.name)
    return jsonify([company.to_dict() for company in companies])


@companies_bp.route('/<int:company_id>', methods=['GET'])
@permission_required('company', 'read')
def get_company(company_id):
    return jsonify(get_store().get(Company, company_id).to_dict())


@companies_bp.route('', methods=['POST'])
@permission_required('company', 'create')
def create_company():
    data = get_json()
    require_fields(data, 'name', 'contact_email')
    company = Company()
    _apply(company, {field: data.get(field) for field in COMPANY_FIELDS})
    get_store().add(company)
    logger.info('User %s created company %s', g.caller.id, company.id)
    return jsonify(company.to_dict()), 201


@companies_bp.route('/<int:company_id>', methods=['PUT'])
@permission_required('company', 'update')
def update_company(company_id):
    store = get_store()
    company = store.get(Company, company_id)
    _apply(company, get_json())
    store.commit()
    return jsonify(company.to_dict())


@companies_bp.route('/<int:company_id>', methods=['DELETE'])
@permission_required('company', 'delete')
def delete_company(company_id):
    store = get_store()
    company = store.get(Company, company_id)
    policy.check_company_delete(g.caller, company, store)

    store.delete(company)
    logger.info('User %s deleted company %s', g.caller.id, company_id)
    return jsonify({'message': _('Company deleted successfully.')})
