"""Role and visibility policy.

Two questions are answered here for every request:

* operation permission - may this role perform this operation on this
  resource type at all (``PERMISSIONS`` and ``require``), refined by the
  per-instance ``check_*`` functions;
* instance visibility - which rows a caller may read.  ``*_scope``
  functions return a SQL criterion so list endpoints narrow in the query,
  and ``can_view_*`` functions evaluate the same rule against one row.

Write checks raise ``ForbiddenOperation`` (or ``Conflict`` for delete
guards).  Read checks return booleans; handlers report hidden rows as
``NotFound`` so existence is not revealed.
"""
from flask_babel import gettext as _
from sqlalchemy import false, select

from visiondesk.errors import ForbiddenOperation, Conflict, NotFound
from visiondesk.models import Project, Task, User

STAFF = frozenset(['admin', 'manager'])
AUTHENTICATED = frozenset(['admin', 'manager', 'developer', 'client'])

# Fields the assigned developer may change on a task.
DEVELOPER_TASK_FIELDS = frozenset(['status', 'progress_percentage'])

# Fields on a user that only staff may change.
PRIVILEGED_USER_FIELDS = frozenset(['role', 'company_id', 'is_active'])

PERMISSIONS = {
    ('project', 'create'): STAFF,
    ('project', 'update'): STAFF,
    ('project', 'delete'): STAFF,
    ('task', 'create'): STAFF,
    ('task', 'update'): STAFF | {'developer'},  # developer: own task, limited fields
    ('task', 'delete'): STAFF,
    ('subtask', 'create'): STAFF | {'developer'},
    ('subtask', 'update'): STAFF | {'developer'},
    ('subtask', 'delete'): STAFF | {'developer'},
    ('user', 'list'): STAFF,
    ('user', 'create'): frozenset(['admin']),
    ('user', 'update'): AUTHENTICATED,  # self, or staff
    ('user', 'delete'): STAFF,
    ('company', 'read'): AUTHENTICATED,
    ('company', 'create'): frozenset(['admin']),
    ('company', 'update'): frozenset(['admin']),
    ('company', 'delete'): frozenset(['admin']),
    ('project_rating', 'create'): frozenset(['client']),
    ('project_rating', 'update'): AUTHENTICATED,  # owner, or staff
    ('project_rating', 'delete'): AUTHENTICATED,  # owner, or staff
    ('task_rating', 'create'): frozenset(['client']),
    ('task_rating', 'update'): AUTHENTICATED,
    ('task_rating', 'delete'): AUTHENTICATED,
    ('comment', 'create'): frozenset(['client']),
    ('comment', 'update'): AUTHENTICATED,  # author only
    ('comment', 'delete'): AUTHENTICATED,  # author, or staff
    ('report', 'read'): STAFF,
}


class Caller:
    """The authenticated identity making a request."""

    def __init__(self, id, email, role, company_id=None):
        self.id = id
        self.email = email
        self.role = role
        self.company_id = company_id

    @property
    def is_staff(self):
        return self.role in STAFF

    def __repr__(self):
        return f'<Caller {self.id} {self.role}>'


def require(caller, resource, operation):
    """Raise ForbiddenOperation unless the caller's role may do ``operation``."""
    allowed = PERMISSIONS.get((resource, operation), frozenset())
    if caller.role not in allowed:
        raise ForbiddenOperation(_('Role %(role)s may not %(operation)s %(resource)s.',
                                   role=caller.role, operation=operation,
                                   resource=resource.replace('_', ' ')))


def ensure_visible(visible, resource):
    """Report a hidden row exactly like a missing one."""
    if not visible:
        raise NotFound(_('%(resource)s not found.', resource=resource))


def _owns_company_of(caller, project):
    return (
        caller.role == 'client'
        and caller.company_id is not None
        and project is not None
        and project.client_company_id == caller.company_id
    )


def _assigned_on(caller, project):
    return caller.role == 'developer' and any(
        task.assigned_to == caller.id for task in project.tasks
    )


# ==================== Visibility: list scopes ====================

def project_scope(caller):
    """WHERE criterion narrowing projects to the caller, or None for all."""
    if caller.is_staff:
        return None
    if caller.role == 'client':
        if caller.company_id is None:
            return false()
        return Project.client_company_id == caller.company_id
    if caller.role == 'developer':
        assigned = select(Task.project_id).where(Task.assigned_to == caller.id)
        return Project.id.in_(assigned)
    return false()


def task_scope(caller):
    """WHERE criterion narrowing tasks to the caller, or None for all."""
    if caller.is_staff:
        return None
    if caller.role == 'developer':
        return Task.assigned_to == caller.id
    if caller.role == 'client':
        if caller.company_id is None:
            return false()
        company_projects = select(Project.id).where(Project.client_company_id == caller.company_id)
        return Task.project_id.in_(company_projects)
    return false()


# ==================== Visibility: single instance ====================

def can_view_project(caller, project):
    if caller.is_staff:
        return True
    return _owns_company_of(caller, project) or _assigned_on(caller, project)


def can_view_task(caller, task):
    if caller.is_staff:
        return True
    if caller.role == 'developer':
        return task.assigned_to == caller.id
    return _owns_company_of(caller, task.project)


def can_view_document(caller, project):
    """Company owns the project, staff, or the caller has a task on it."""
    return (
        caller.is_staff
        or _owns_company_of(caller, project)
        or any(task.assigned_to == caller.id for task in project.tasks)
    )


def can_view_user(caller, user):
    return caller.is_staff or user.id == caller.id


# Ratings and comments are readable by whoever can read their parent.
can_view_project_ratings = can_view_project
can_view_task_ratings = can_view_task


def can_view_comments(caller, project=None, task=None):
    if project is not None:
        return can_view_project(caller, project)
    return can_view_task(caller, task)


# ==================== Write checks ====================

def check_task_update(caller, task, fields):
    """Staff may change anything; the assignee only status and progress."""
    require(caller, 'task', 'update')
    if caller.is_staff:
        return
    if task.assigned_to != caller.id:
        raise ForbiddenOperation(_('Only the assigned developer may update this task.'))
    extra = set(fields) - DEVELOPER_TASK_FIELDS
    if extra:
        raise ForbiddenOperation(_('Developers may only change: %(fields)s.',
                                   fields=', '.join(sorted(DEVELOPER_TASK_FIELDS))))


def check_subtask_write(caller, task, operation, fields=()):
    """Sub-task writes follow the parent task: staff, or its assigned developer."""
    require(caller, 'subtask', operation)
    if caller.is_staff:
        return
    if task.assigned_to != caller.id:
        raise ForbiddenOperation(_('Only the assigned developer may change sub-tasks of this task.'))
    if 'approved' in fields:
        raise ForbiddenOperation(_('Only managers may approve sub-tasks.'))


def check_user_update(caller, user, fields):
    require(caller, 'user', 'update')
    is_self = user.id == caller.id
    if not (caller.is_staff or is_self):
        raise ForbiddenOperation(_('You may only update your own account.'))
    privileged = set(fields) & PRIVILEGED_USER_FIELDS
    if privileged and not caller.is_staff:
        raise ForbiddenOperation(_('Only managers may change %(fields)s.', fields=', '.join(sorted(privileged))))
    if is_self and 'role' in fields:
        raise ForbiddenOperation(_('You cannot change your own role.'))


def check_user_delete(caller, user):
    if user.id == caller.id:
        raise Conflict(_('Cannot delete your own account.'))
    require(caller, 'user', 'delete')


def check_company_delete(caller, company, store):
    require(caller, 'company', 'delete')
    if store.count_referencing(User.company_id, company.id):
        raise Conflict(_('Cannot delete company with associated users.'))
    if store.count_referencing(Project.client_company_id, company.id):
        raise Conflict(_('Cannot delete company with associated projects.'))


def check_project_delete(caller, project, store):
    require(caller, 'project', 'delete')
    if store.count_referencing(Task.project_id, project.id):
        raise Conflict(_('Cannot delete project with associated tasks.'))


def check_project_rating(caller, project):
    require(caller, 'project_rating', 'create')
    if not _owns_company_of(caller, project):
        raise ForbiddenOperation(_('You can only rate projects of your own company.'))


def check_task_rating(caller, task):
    require(caller, 'task_rating', 'create')
    if not _owns_company_of(caller, task.project):
        raise ForbiddenOperation(_('You can only rate tasks of your own company\'s projects.'))


def check_rating_owner(caller, rating, resource, operation):
    require(caller, resource, operation)
    if not (caller.is_staff or rating.user_id == caller.id):
        raise ForbiddenOperation(_('You can only change your own ratings.'))


def check_comment_create(caller, project):
    require(caller, 'comment', 'create')
    if not _owns_company_of(caller, project):
        raise ForbiddenOperation(_('You can only comment on your own company\'s projects.'))


def check_comment_update(caller, comment):
    require(caller, 'comment', 'update')
    if comment.author_id != caller.id:
        raise ForbiddenOperation(_('You can only edit your own comments.'))


def check_comment_delete(caller, comment):
    require(caller, 'comment', 'delete')
    if not (caller.is_staff or comment.author_id == caller.id):
        raise ForbiddenOperation(_('You can only delete your own comments.'))
