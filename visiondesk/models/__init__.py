"""Models package - Re-exports all models for convenient importing."""
from visiondesk.extensions import db
from visiondesk.models.user import User, Company, ROLES
from visiondesk.models.project import Project, Task, SubTask, TASK_STATUSES, TASK_PRIORITIES
from visiondesk.models.rating import ProjectRating, TaskRating, RATING_TYPES
from visiondesk.models.comment import Comment

__all__ = [
    'db', 'User', 'Company', 'Project', 'Task', 'SubTask',
    'ProjectRating', 'TaskRating', 'Comment',
    'ROLES', 'TASK_STATUSES', 'TASK_PRIORITIES', 'RATING_TYPES',
]
