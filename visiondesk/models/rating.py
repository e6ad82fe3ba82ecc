"""ProjectRating and TaskRating models."""
from datetime import datetime
from visiondesk.extensions import db

RATING_TYPES = ['quality', 'communication', 'timeliness', 'overall']


class ProjectRating(db.Model):
    __tablename__ = 'project_ratings'
    __table_args__ = (
        db.UniqueConstraint('project_id', 'user_id', name='uq_project_ratings_project_user'),
    )

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)  # 1..5
    comment = db.Column(db.Text)
    would_recommend = db.Column(db.Boolean)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'user_id': self.user_id,
            'rating': self.rating,
            'comment': self.comment,
            'would_recommend': self.would_recommend,
            'user_name': self.user.name if self.user else None,
            'user_role': self.user.role if self.user else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class TaskRating(db.Model):
    __tablename__ = 'task_ratings'
    __table_args__ = (
        db.UniqueConstraint('task_id', 'user_id', 'rating_type', name='uq_task_ratings_task_user_type'),
    )

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)  # 1..5
    comment = db.Column(db.Text)
    rating_type = db.Column(db.String(20), nullable=False, default='overall')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'task_id': self.task_id,
            'user_id': self.user_id,
            'rating': self.rating,
            'comment': self.comment,
            'rating_type': self.rating_type,
            'user_name': self.user.name if self.user else None,
            'user_role': self.user.role if self.user else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
