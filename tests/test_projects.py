import io

import sqlalchemy as sa

from visiondesk.extensions import db
from visiondesk.models import Project


def project_names(response):
    return sorted(p['name'] for p in response.get_json())


def test_client_lists_only_own_company_projects(client, auth, seed):
    response = client.get('/api/projects', headers=auth('client7'))
    assert response.status_code == 200
    body = response.get_json()
    assert [p['client_company_id'] for p in body] == [7]
    assert project_names(response) == ['Acme portal']


def test_developer_lists_projects_with_assigned_tasks(client, auth, seed):
    assert project_names(client.get('/api/projects', headers=auth('dev2'))) == ['Globex app']


def test_staff_list_all_projects(client, auth, seed):
    for role in ('admin', 'manager'):
        assert project_names(client.get('/api/projects', headers=auth(role))) == ['Acme portal', 'Globex app']


def test_hidden_project_reads_as_not_found(client, auth, seed):
    p9 = seed['projects']['p9'].id
    hidden = client.get(f'/api/projects/{p9}', headers=auth('client7'))
    missing = client.get('/api/projects/4242', headers=auth('client7'))
    assert hidden.status_code == missing.status_code == 404
    assert client.get(f'/api/projects/{p9}', headers=auth('client9')).status_code == 200


def test_create_project_records_creator(client, auth, seed):
    response = client.post('/api/projects', headers=auth('manager'), json={
        'name': 'Acme intranet', 'description': 'Internal tools', 'client_company_id': 7, 'deadline': '2030-01-31',
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body['admin_id'] == seed['users']['manager'].id
    assert body['status'] == 'active'
    assert body['deadline'] == '2030-01-31'


def test_create_project_validation(client, auth, seed):
    missing = client.post('/api/projects', headers=auth('admin'), json={'name': 'No company'})
    assert missing.status_code == 400
    unknown = client.post('/api/projects', headers=auth('admin'), json={'name': 'X', 'client_company_id': 55})
    assert unknown.status_code == 400
    bad_date = client.post('/api/projects', headers=auth('admin'),
                           json={'name': 'X', 'client_company_id': 7, 'deadline': 'soon'})
    assert bad_date.status_code == 400


def test_non_staff_cannot_write_projects(client, auth, seed):
    p7 = seed['projects']['p7'].id
    for name in ('dev1', 'client7'):
        assert client.post('/api/projects', headers=auth(name),
                           json={'name': 'X', 'client_company_id': 7}).status_code == 403
        assert client.put(f'/api/projects/{p7}', headers=auth(name), json={'name': 'X'}).status_code == 403
        assert client.delete(f'/api/projects/{p7}', headers=auth(name)).status_code == 403


def test_update_project(client, auth, seed):
    p7 = seed['projects']['p7'].id
    response = client.put(f'/api/projects/{p7}', headers=auth('admin'), json={'status': 'on_hold'})
    assert response.status_code == 200
    assert response.get_json()['status'] == 'on_hold'
    assert client.put('/api/projects/4242', headers=auth('admin'), json={'status': 'on_hold'}).status_code == 404


def test_delete_project_with_tasks_conflicts(client, auth, seed):
    p7 = seed['projects']['p7'].id
    response = client.delete(f'/api/projects/{p7}', headers=auth('admin'))
    assert response.status_code == 409
    assert response.get_json()['error'] == 'conflict'
    assert db.session.get(Project, p7) is not None


def test_delete_project_without_tasks_succeeds(client, auth, seed):
    created = client.post('/api/projects', headers=auth('admin'), json={'name': 'Scratch', 'client_company_id': 9})
    project_id = created.get_json()['id']
    assert client.delete(f'/api/projects/{project_id}', headers=auth('manager')).status_code == 200
    assert db.session.get(Project, project_id) is None
    assert client.delete(f'/api/projects/{project_id}', headers=auth('manager')).status_code == 404


def upload(client, headers, project_id, content=b'%PDF-1.4 brief', filename='brief.pdf'):
    return client.put(
        f'/api/projects/{project_id}/document',
        headers=headers,
        data={'file': (io.BytesIO(content), filename, 'application/pdf')},
        content_type='multipart/form-data',
    )


def test_document_upload_and_visibility(client, auth, seed):
    p7 = seed['projects']['p7'].id
    response = upload(client, auth('manager'), p7)
    assert response.status_code == 200
    assert response.get_json()['document']['name'] == 'brief.pdf'

    for name in ('client7', 'dev1', 'admin'):
        view = client.get(f'/api/projects/{p7}/document', headers=auth(name))
        assert view.status_code == 200
        assert view.data == b'%PDF-1.4 brief'

    download = client.get(f'/api/projects/{p7}/document?download=1', headers=auth('client7'))
    assert 'attachment' in download.headers['Content-Disposition']

    for name in ('client9', 'dev2'):
        assert client.get(f'/api/projects/{p7}/document', headers=auth(name)).status_code == 404


def test_document_rules(client, auth, seed, app):
    p9 = seed['projects']['p9'].id
    assert client.get(f'/api/projects/{p9}/document', headers=auth('admin')).status_code == 404
    assert upload(client, auth('client9'), p9).status_code == 403

    app.config['MAX_DOCUMENT_SIZE'] = 4
    assert upload(client, auth('admin'), p9).status_code == 400

    app.config['MAX_DOCUMENT_SIZE'] = 1024
    assert upload(client, auth('admin'), p9).status_code == 200
    assert client.delete(f'/api/projects/{p9}/document', headers=auth('admin')).get_json()['document'] is None


def test_project_fields_must_be_strings(client, auth, seed):
    response = client.post('/api/projects', headers=auth('admin'), json={'name': 123, 'client_company_id': 7})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'validation_error'
    p7 = seed['projects']['p7'].id
    assert client.put(f'/api/projects/{p7}', headers=auth('admin'), json={'description': ['x']}).status_code == 400
    assert client.post('/api/projects', headers=auth('admin'),
                       json={'name': 'X', 'client_company_id': 7.5}).status_code == 400


def test_document_bytes_load_on_access(client, auth, seed):
    p7 = seed['projects']['p7'].id
    upload(client, auth('admin'), p7)
    db.session.expunge_all()

    project = db.session.get(Project, p7)
    assert 'document_data' in sa.inspect(project).unloaded
    assert project.document_data == b'%PDF-1.4 brief'
