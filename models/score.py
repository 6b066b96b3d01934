# models/score.py

from extensions import db
from sqlalchemy import CheckConstraint


class Score(db.Model):
    __tablename__ = 'scores'
    id = db.Column(db.Integer, primary_key=True)
    reviewer_id = db.Column(db.Integer, db.ForeignKey('reviewers.id', ondelete='CASCADE'), nullable=False)
    proposal_id = db.Column(db.Integer, db.ForeignKey('proposals.id', ondelete='CASCADE'), nullable=False)
    criterion_id = db.Column(db.Integer, db.ForeignKey('criteria.id', ondelete='CASCADE'), nullable=False)
    grade = db.Column(db.Integer, nullable=False)
    # Derived from grade when written; never recomputed afterwards
    value = db.Column(db.Float, nullable=False)
    scored_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    criterion = db.relationship('Criterion')

    __table_args__ = (
        db.UniqueConstraint('reviewer_id', 'proposal_id', 'criterion_id', name='unique_score'),
        CheckConstraint("grade BETWEEN 1 AND 5", name="check_grade"),
        CheckConstraint("value >= 0", name="check_value"),
    )
