import pytest

from visiondesk import create_app
from visiondesk.extensions import db
from visiondesk.models import User, Company, Project, Task
from visiondesk.services.identity import hash_password, issue_token

PASSWORD = 'Secret123!'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def password_hash():
    # Hashing is slow; share one hash between the seeded users.
    return hash_password(PASSWORD)


@pytest.fixture
def seed(app, password_hash):
    """Two client companies (7 and 9), one project each, one task per project.

    dev1 works on the company-7 project, dev2 on the company-9 project.
    """
    acme = Company(id=7, name='Acme', contact_email='ops@acme.test')
    globex = Company(id=9, name='Globex', contact_email='ops@globex.test')
    db.session.add_all([acme, globex])
    db.session.flush()

    users = {
        'admin': User(email='admin@visiondesk.test', name='Admin', role='admin'),
        'manager': User(email='manager@visiondesk.test', name='Manager', role='manager'),
        'dev1': User(email='dev1@visiondesk.test', name='Dev One', role='developer'),
        'dev2': User(email='dev2@visiondesk.test', name='Dev Two', role='developer'),
        'client7': User(email='client@acme.test', name='Acme Client', role='client', company_id=7),
        'client9': User(email='client@globex.test', name='Globex Client', role='client', company_id=9),
    }
    for user in users.values():
        user.password_hash = password_hash
    db.session.add_all(users.values())
    db.session.flush()

    p7 = Project(name='Acme portal', client_company_id=7, admin_id=users['admin'].id)
    p9 = Project(name='Globex app', client_company_id=9, admin_id=users['admin'].id)
    db.session.add_all([p7, p9])
    db.session.flush()

    t1 = Task(title='Build login', project_id=p7.id, assigned_to=users['dev1'].id)
    t2 = Task(title='Build billing', project_id=p9.id, assigned_to=users['dev2'].id)
    db.session.add_all([t1, t2])
    db.session.commit()

    return {
        'users': users,
        'companies': {'acme': acme, 'globex': globex},
        'projects': {'p7': p7, 'p9': p9},
        'tasks': {'t1': t1, 't2': t2},
    }


@pytest.fixture
def auth(seed):
    """``auth('client7')`` -> headers carrying that user's bearer token."""
    def headers(name):
        return {'Authorization': f'Bearer {issue_token(seed["users"][name])}'}
    return headers
