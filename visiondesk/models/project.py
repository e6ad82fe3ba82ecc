"""Project, Task and SubTask models."""
from datetime import datetime
from visiondesk.extensions import db

TASK_STATUSES = ['not_started', 'in_progress', 'blocked', 'completed']
TASK_PRIORITIES = ['low', 'medium', 'high', 'urgent']


def _iso(value):
    return value.isoformat() if value else None


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    client_company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    admin_id = db.Column(db.Integer, db.ForeignKey('users.id'))  # Creator
    status = db.Column(db.String(20), default='active')
    deadline = db.Column(db.Date)

    # Attached document
    document_name = db.Column(db.String(255))
    document_mimetype = db.Column(db.String(100))
    document_data = db.deferred(db.Column(db.LargeBinary))
    document_uploaded_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client_company = db.relationship('Company', backref='projects')
    admin = db.relationship('User', foreign_keys=[admin_id])
    tasks = db.relationship('Task', backref='project', lazy=True)
    ratings = db.relationship('ProjectRating', backref='project', lazy=True, cascade='all, delete-orphan')
    comments = db.relationship('Comment', backref='project', lazy=True, cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'client_company_id': self.client_company_id,
            'client_company_name': self.client_company.name if self.client_company else None,
            'admin_id': self.admin_id,
            'admin_name': self.admin.name if self.admin else None,
            'status': self.status,
            'deadline': _iso(self.deadline),
            'document': {
                'name': self.document_name,
                'mimetype': self.document_mimetype,
                'uploaded_at': _iso(self.document_uploaded_at),
            } if self.document_name else None,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Task(db.Model):
    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    assigned_to = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    status = db.Column(db.String(20), nullable=False, default='not_started')
    priority = db.Column(db.String(20), nullable=False, default='medium')
    progress_percentage = db.Column(db.Integer, nullable=False, default=0)
    deadline = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignee = db.relationship('User', foreign_keys=[assigned_to])
    subtasks = db.relationship('SubTask', backref='task', lazy=True, cascade='all, delete-orphan')
    ratings = db.relationship('TaskRating', backref='task', lazy=True, cascade='all, delete-orphan')
    comments = db.relationship('Comment', backref='task', lazy=True, cascade='all, delete-orphan')

    @property
    def is_completed(self):
        return self.status == 'completed' or self.progress_percentage == 100

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'project_id': self.project_id,
            'project_name': self.project.name if self.project else None,
            'assigned_to': self.assigned_to,
            'assigned_name': self.assignee.name if self.assignee else None,
            'created_by': self.created_by,
            'status': self.status,
            'priority': self.priority,
            'progress_percentage': self.progress_percentage,
            'deadline': _iso(self.deadline),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class SubTask(db.Model):
    __tablename__ = 'sub_tasks'

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), default='pending')
    approved = db.Column(db.Boolean, nullable=False, default=False)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = db.relationship('User', foreign_keys=[created_by])

    def to_dict(self):
        return {
            'id': self.id,
            'task_id': self.task_id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'approved': self.approved,
            'created_by': self.created_by,
            'created_by_name': self.author.name if self.author else None,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
