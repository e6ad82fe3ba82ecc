"""Flask extensions, bound to the app in create_app()."""
from flask_sqlalchemy import SQLAlchemy
from flask_babel import Babel

db = SQLAlchemy()
babel = Babel()
