"""
VisionDesk - Application Factory
"""
import logging
import os

import click
from flask import Flask, current_app, has_request_context, request
from dotenv import load_dotenv

from visiondesk.extensions import db, babel
from visiondesk.errors import register_error_handlers
from visiondesk.routes import register_blueprints
from config.settings import config


def get_locale():
    """Determine the best locale for the user."""
    if not has_request_context():
        return None
    supported = current_app.config['SUPPORTED_LOCALES']
    lang = request.cookies.get('babel_translation')
    if lang in supported:
        return lang
    return request.accept_languages.best_match(supported)


def create_app(config_name=None):
    """Application Factory."""
    load_dotenv()

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    babel.init_app(app, locale_selector=get_locale)

    register_error_handlers(app)
    register_blueprints(app)

    # CLI Commands
    register_cli_commands(app)

    return app


def configure_logging(app):
    """Route the ``visiondesk.*`` loggers to stderr at LOG_LEVEL."""
    logger = logging.getLogger('visiondesk')
    logger.setLevel(app.config['LOG_LEVEL'])
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        logger.addHandler(handler)


def register_cli_commands(app):
    """Register CLI commands."""

    @app.cli.command("init-db")
    def init_db_command():
        """Creates database tables."""
        db.create_all()
        print("Initialized the database.")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    @click.option("--name", default="Administrator")
    def create_admin_command(email, password, name):
        """Creates an admin account."""
        from visiondesk.models import User
        from visiondesk.services.identity import hash_password

        if User.query.filter_by(email=email.lower()).first() is not None:
            print(f"User {email} already exists.")
            return
        db.session.add(User(email=email.lower(), name=name, role='admin',
                            password_hash=hash_password(password)))
        db.session.commit()
        print(f"Created admin {email}.")
