from visiondesk.extensions import db
from visiondesk.models import Task, SubTask


def task_titles(response):
    return sorted(t['title'] for t in response.get_json())


def test_task_lists_are_scoped(client, auth, seed):
    assert task_titles(client.get('/api/tasks', headers=auth('dev1'))) == ['Build login']
    assert task_titles(client.get('/api/tasks', headers=auth('client9'))) == ['Build billing']
    assert task_titles(client.get('/api/tasks', headers=auth('manager'))) == ['Build billing', 'Build login']


def test_hidden_task_reads_as_not_found(client, auth, seed):
    t2 = seed['tasks']['t2'].id
    assert client.get(f'/api/tasks/{t2}', headers=auth('dev1')).status_code == 404
    assert client.get(f'/api/tasks/{t2}', headers=auth('client7')).status_code == 404
    assert client.get(f'/api/tasks/{t2}', headers=auth('dev2')).status_code == 200


def test_create_task(client, auth, seed):
    response = client.post('/api/tasks', headers=auth('manager'), json={
        'title': 'Write docs', 'project_id': seed['projects']['p7'].id,
        'assigned_to': seed['users']['dev2'].id, 'priority': 'high', 'deadline': '2030-02-01',
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body['status'] == 'not_started'
    assert body['progress_percentage'] == 0
    assert body['created_by'] == seed['users']['manager'].id

    # dev2 now sees the Acme project through the new assignment.
    names = sorted(p['name'] for p in client.get('/api/projects', headers=auth('dev2')).get_json())
    assert names == ['Acme portal', 'Globex app']


def test_create_task_rules(client, auth, seed):
    p7 = seed['projects']['p7'].id
    assert client.post('/api/tasks', headers=auth('dev1'), json={'title': 'X', 'project_id': p7}).status_code == 403
    assert client.post('/api/tasks', headers=auth('admin'), json={'title': 'X'}).status_code == 400
    assert client.post('/api/tasks', headers=auth('admin'),
                       json={'title': 'X', 'project_id': p7, 'priority': 'whenever'}).status_code == 400
    assert client.post('/api/tasks', headers=auth('admin'),
                       json={'title': 'X', 'project_id': p7, 'progress_percentage': 150}).status_code == 400


def test_assigned_developer_updates_status_and_progress(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    response = client.put(f'/api/tasks/{t1}', headers=auth('dev1'),
                          json={'status': 'in_progress', 'progress_percentage': 40})
    assert response.status_code == 200
    assert response.get_json()['progress_percentage'] == 40
    assert db.session.get(Task, t1).status == 'in_progress'


def test_developer_may_resend_unchanged_fields(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    current = client.get(f'/api/tasks/{t1}', headers=auth('dev1')).get_json()
    response = client.put(f'/api/tasks/{t1}', headers=auth('dev1'), json={
        'title': current['title'], 'priority': current['priority'], 'status': 'blocked',
    })
    assert response.status_code == 200
    assert response.get_json()['status'] == 'blocked'


def test_developer_cannot_update_unassigned_task(client, auth, seed):
    t2 = seed['tasks']['t2'].id
    response = client.put(f'/api/tasks/{t2}', headers=auth('dev1'), json={'status': 'completed'})
    assert response.status_code == 403
    assert db.session.get(Task, t2).status == 'not_started'


def test_developer_cannot_reassign_or_rename(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    assert client.put(f'/api/tasks/{t1}', headers=auth('dev1'), json={'title': 'Mine now'}).status_code == 403
    assert client.put(f'/api/tasks/{t1}', headers=auth('dev1'),
                      json={'assigned_to': seed['users']['dev2'].id}).status_code == 403


def test_client_cannot_update_tasks(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    assert client.put(f'/api/tasks/{t1}', headers=auth('client7'), json={'status': 'completed'}).status_code == 403


def test_update_missing_task(client, auth, seed):
    assert client.put('/api/tasks/4242', headers=auth('dev1'), json={'status': 'completed'}).status_code == 404


def test_delete_task_is_staff_only(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    assert client.delete(f'/api/tasks/{t1}', headers=auth('dev1')).status_code == 403
    assert client.delete(f'/api/tasks/{t1}', headers=auth('admin')).status_code == 200
    assert db.session.get(Task, t1) is None


def test_subtask_lifecycle(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    created = client.post(f'/api/tasks/{t1}/subtasks', headers=auth('dev1'), json={'title': 'Design form'})
    assert created.status_code == 201
    subtask = created.get_json()
    assert subtask['approved'] is False
    assert subtask['status'] == 'pending'

    listed = client.get(f'/api/tasks/{t1}/subtasks', headers=auth('client7'))
    assert [s['title'] for s in listed.get_json()] == ['Design form']
    assert client.get(f'/api/tasks/{t1}/subtasks', headers=auth('client9')).status_code == 404

    done = client.put(f'/api/subtasks/{subtask["id"]}', headers=auth('dev1'), json={'status': 'completed'})
    assert done.get_json()['status'] == 'completed'

    assert client.put(f'/api/subtasks/{subtask["id"]}', headers=auth('dev1'),
                      json={'approved': True}).status_code == 403
    approved = client.put(f'/api/subtasks/{subtask["id"]}', headers=auth('manager'), json={'approved': True})
    assert approved.get_json()['approved'] is True

    assert client.delete(f'/api/subtasks/{subtask["id"]}', headers=auth('dev2')).status_code == 403
    assert client.delete(f'/api/subtasks/{subtask["id"]}', headers=auth('dev1')).status_code == 200
    assert db.session.get(SubTask, subtask['id']) is None


def test_clients_cannot_write_subtasks(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    assert client.post(f'/api/tasks/{t1}/subtasks', headers=auth('client7'), json={'title': 'X'}).status_code == 403


def test_deleting_task_removes_its_subtasks(client, auth, seed):
    t1 = seed['tasks']['t1'].id
    sub_id = client.post(f'/api/tasks/{t1}/subtasks', headers=auth('manager'),
                         json={'title': 'Tidy up'}).get_json()['id']
    assert client.delete(f'/api/tasks/{t1}', headers=auth('manager')).status_code == 200
    assert db.session.get(SubTask, sub_id) is None


def test_task_payload_types(client, auth, seed):
    p7, t1 = seed['projects']['p7'].id, seed['tasks']['t1'].id
    assert client.post('/api/tasks', headers=auth('manager'), json={'title': 5, 'project_id': p7}).status_code == 400
    assert client.put(f'/api/tasks/{t1}', headers=auth('dev1'), json={'progress_percentage': 50.5}).status_code == 400
    assert db.session.get(Task, t1).progress_percentage == 0
    assert client.post(f'/api/tasks/{t1}/subtasks', headers=auth('dev1'), json={'title': ['x']}).status_code == 400
