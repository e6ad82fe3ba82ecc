"""Resource store - the only place handlers and policy touch the session."""
from flask_babel import gettext as _

from visiondesk.errors import NotFound
from visiondesk.extensions import db


class ResourceStore:
    """Thin access layer over a SQLAlchemy session.

    The session is injected so the store can be built around the request
    session in handlers and around any other session in scripts or tests.
    """

    def __init__(self, session):
        self.session = session

    def find(self, model, ident):
        """Return the row with primary key ``ident`` or None."""
        if ident is None:
            return None
        return self.session.get(model, ident)

    def get(self, model, ident):
        """Return the row with primary key ``ident`` or raise NotFound."""
        instance = self.find(model, ident)
        if instance is None:
            raise NotFound(_('%(resource)s not found.', resource=model.__name__))
        return instance

    def list(self, model, *criteria, order_by=None):
        query = self.session.query(model)
        criteria = [c for c in criteria if c is not None]
        if criteria:
            query = query.filter(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def count_referencing(self, column, parent_id):
        """Count child rows whose foreign key ``column`` equals ``parent_id``."""
        return self.session.query(column.class_).filter(column == parent_id).count()

    def add(self, instance):
        self.session.add(instance)
        self.session.commit()
        return instance

    def delete(self, instance):
        self.session.delete(instance)
        self.session.commit()

    def commit(self):
        self.session.commit()


def get_store():
    """Store bound to the current request session."""
    return ResourceStore(db.session)
