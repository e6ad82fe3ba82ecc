"""Routes package - Blueprint registration."""
from visiondesk.routes.main import main_bp
from visiondesk.routes.auth import auth_bp
from visiondesk.routes.users import users_bp
from visiondesk.routes.companies import companies_bp
from visiondesk.routes.projects import projects_bp
from visiondesk.routes.tasks import tasks_bp
from visiondesk.routes.ratings import ratings_bp
from visiondesk.routes.comments import comments_bp
from visiondesk.routes.reports import reports_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(companies_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(ratings_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(reports_bp)
