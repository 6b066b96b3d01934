# models/reviewer.py

from extensions import db


class Reviewer(db.Model):
    __tablename__ = 'reviewers'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    # Set by the reviewer on submit, cleared only by an administrator
    submitted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    scores = db.relationship('Score', backref='reviewer', lazy=True, cascade="all, delete-orphan")
    evaluations = db.relationship('Evaluation', backref='reviewer', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'submitted': self.submitted}
