"""Deadline, workload and progress reports."""
from datetime import date

from visiondesk.models import Project, Task, User

DEADLINE_STATUSES = ['upcoming', 'due_today', 'overdue', 'completed']

# Workload weights: (divisor, cap) per factor, summed and capped at 100.
TASK_COUNT_WEIGHT = (10, 40)
OVERDUE_WEIGHT = (5, 30)
BLOCKED_WEIGHT = (3, 30)


def deadline_status(deadline, completed=False, today=None):
    """Classify a deadline relative to ``today``.

    Returns None when there is no deadline.
    """
    if completed:
        return 'completed'
    if deadline is None:
        return None
    today = today or date.today()
    days = (deadline - today).days
    if days == 0:
        return 'due_today'
    if days < 0:
        return 'overdue'
    return 'upcoming'


def is_overdue(task, today=None):
    return deadline_status(task.deadline, task.is_completed, today) == 'overdue'


def deadline_report(store, today=None):
    today = today or date.today()
    entries = []
    for project in store.list(Project, Project.deadline.isnot(None), order_by=Project.deadline):
        entries.append({
            'type': 'project',
            'id': project.id,
            'title': project.name,
            'project_id': project.id,
            'deadline': project.deadline.isoformat(),
            'status': deadline_status(project.deadline, project.status == 'completed', today),
        })
    for task in store.list(Task, Task.deadline.isnot(None), order_by=Task.deadline):
        entries.append({
            'type': 'task',
            'id': task.id,
            'title': task.title,
            'project_id': task.project_id,
            'assigned_to': task.assigned_to,
            'deadline': task.deadline.isoformat(),
            'status': deadline_status(task.deadline, task.is_completed, today),
        })

    counts = {status: 0 for status in DEADLINE_STATUSES}
    for entry in entries:
        counts[entry['status']] += 1
    return {'deadlines': entries, 'counts': counts}


def _weighted(count, weight):
    divisor, cap = weight
    return min(count / divisor * cap, cap)


def workload_percentage(total, overdue, blocked):
    score = (
        _weighted(total, TASK_COUNT_WEIGHT)
        + _weighted(overdue, OVERDUE_WEIGHT)
        + _weighted(blocked, BLOCKED_WEIGHT)
    )
    return round(min(score, 100))


def workload_report(store, today=None):
    """Per-developer task counts and a 0-100 workload score."""
    today = today or date.today()
    developers = store.list(User, User.role == 'developer', User.is_active.is_(True), order_by=User.name)
    report = []
    for developer in developers:
        tasks = store.list(Task, Task.assigned_to == developer.id)
        completed = [t for t in tasks if t.is_completed]
        in_progress = [t for t in tasks if t.status == 'in_progress' and t.progress_percentage < 100]
        blocked = [t for t in tasks if t.status == 'blocked']
        overdue = [t for t in tasks if is_overdue(t, today)]
        project_ids = sorted({t.project_id for t in tasks})
        report.append({
            'id': developer.id,
            'name': developer.name,
            'email': developer.email,
            'total_tasks': len(tasks),
            'completed_tasks': len(completed),
            'in_progress_tasks': len(in_progress),
            'blocked_tasks': len(blocked),
            'overdue_tasks': len(overdue),
            'workload_percentage': workload_percentage(len(tasks), len(overdue), len(blocked)),
            'project_ids': project_ids,
        })
    return report


def project_progress(project, today=None):
    """Average task progress and share of completed tasks, as percentages."""
    tasks = project.tasks
    if not tasks:
        return {
            'project_id': project.id,
            'total_tasks': 0,
            'average_progress': 0,
            'completion_percentage': 0,
            'overdue_tasks': 0,
            'deadline_status': deadline_status(project.deadline, project.status == 'completed', today),
        }
    completed = sum(1 for t in tasks if t.is_completed)
    return {
        'project_id': project.id,
        'total_tasks': len(tasks),
        'average_progress': round(sum(t.progress_percentage for t in tasks) / len(tasks), 2),
        'completion_percentage': round(completed / len(tasks) * 100, 2),
        'overdue_tasks': sum(1 for t in tasks if is_overdue(t, today)),
        'deadline_status': deadline_status(project.deadline, project.status == 'completed', today),
    }
