"""Rating upserts and aggregates."""
import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite

from visiondesk.models import ProjectRating, TaskRating, Project, Task

logger = logging.getLogger('visiondesk.ratings')

RECENT_LIMIT = 5


def _insert(session, model):
    """Dialect-specific INSERT supporting ON CONFLICT."""
    dialect = session.get_bind().dialect.name
    if dialect == 'postgresql':
        return postgresql.insert(model)
    if dialect == 'sqlite':
        return sqlite.insert(model)
    raise RuntimeError(f'Rating upsert is not supported on {dialect}')


def _upsert(store, model, key_columns, values, update_columns):
    now = datetime.utcnow()
    stmt = _insert(store.session, model).values(created_at=now, updated_at=now, **values)
    set_ = {column: stmt.excluded[column] for column in update_columns}
    set_['updated_at'] = stmt.excluded.updated_at
    stmt = stmt.on_conflict_do_update(index_elements=key_columns, set_=set_)
    store.session.execute(stmt)
    store.commit()

    criteria = [getattr(model, column) == values[column] for column in key_columns]
    return store.list(model, *criteria)[0]


def upsert_project_rating(store, user_id, project_id, rating, comment=None, would_recommend=None):
    """Insert or update the single rating a user holds for a project."""
    logger.info('User %s rated project %s with %s', user_id, project_id, rating)
    return _upsert(
        store, ProjectRating,
        key_columns=['project_id', 'user_id'],
        values={
            'project_id': project_id,
            'user_id': user_id,
            'rating': rating,
            'comment': comment,
            'would_recommend': would_recommend,
        },
        update_columns=['rating', 'comment', 'would_recommend'],
    )


def upsert_task_rating(store, user_id, task_id, rating, rating_type='overall', comment=None):
    """Insert or update a user's rating of one kind for a task."""
    logger.info('User %s rated task %s (%s) with %s', user_id, task_id, rating_type, rating)
    return _upsert(
        store, TaskRating,
        key_columns=['task_id', 'user_id', 'rating_type'],
        values={
            'task_id': task_id,
            'user_id': user_id,
            'rating': rating,
            'rating_type': rating_type,
            'comment': comment,
        },
        update_columns=['rating', 'comment'],
    )


def average_rating(session, rating_column, parent_column, parent_id):
    average, total = (
        session.query(func.avg(rating_column), func.count(rating_column))
        .filter(parent_column == parent_id)
        .one()
    )
    return {
        'average_rating': round(float(average), 2) if average is not None else 0,
        'total_ratings': total,
    }


def _summary(session, model, parent_column):
    average, total, rated, raters = session.query(
        func.avg(model.rating),
        func.count(model.id),
        func.count(func.distinct(parent_column)),
        func.count(func.distinct(model.user_id)),
    ).one()
    return {
        'total_ratings': total,
        'average_rating': round(float(average), 2) if average is not None else 0,
        'rated': rated,
        'unique_raters': raters,
    }


def dashboard_summary(session):
    """Totals, averages and the most recent ratings across the system."""
    projects = _summary(session, ProjectRating, ProjectRating.project_id)
    projects['projects_rated'] = projects.pop('rated')
    tasks = _summary(session, TaskRating, TaskRating.task_id)
    tasks['tasks_rated'] = tasks.pop('rated')

    recent_projects = []
    for rating, project_name in (
        session.query(ProjectRating, Project.name)
        .join(Project, ProjectRating.project_id == Project.id)
        .order_by(ProjectRating.created_at.desc(), ProjectRating.id.desc())
        .limit(RECENT_LIMIT)
    ):
        recent_projects.append(dict(rating.to_dict(), project_name=project_name))

    recent_tasks = []
    for rating, task_title, project_name in (
        session.query(TaskRating, Task.title, Project.name)
        .join(Task, TaskRating.task_id == Task.id)
        .join(Project, Task.project_id == Project.id)
        .order_by(TaskRating.created_at.desc(), TaskRating.id.desc())
        .limit(RECENT_LIMIT)
    ):
        recent_tasks.append(dict(rating.to_dict(), task_title=task_title, project_name=project_name))

    return {
        'project_ratings': projects,
        'task_ratings': tasks,
        'recent_project_ratings': recent_projects,
        'recent_task_ratings': recent_tasks,
    }
