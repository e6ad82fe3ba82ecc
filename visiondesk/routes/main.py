"""Main routes - health check, language switching."""
from flask import Blueprint, jsonify, make_response, current_app
from sqlalchemy import text

from visiondesk.extensions import db

main_bp = Blueprint('main', __name__, url_prefix='/api')


@main_bp.route('/health')
def health():
    db.session.execute(text('SELECT 1'))
    return jsonify({'status': 'OK', 'message': 'Server is running'})


@main_bp.route('/set_language/<lang>', methods=['POST'])
def set_language(lang):
    if lang not in current_app.config['SUPPORTED_LOCALES']:
        lang = current_app.config['BABEL_DEFAULT_LOCALE']
    resp = make_response(jsonify({'locale': lang}))
    resp.set_cookie('babel_translation', lang)
    return resp
