# models/evaluation.py
# One summary row per (reviewer, proposal); written together with its scores

from extensions import db


class Evaluation(db.Model):
    __tablename__ = 'evaluations'
    id = db.Column(db.Integer, primary_key=True)
    reviewer_id = db.Column(db.Integer, db.ForeignKey('reviewers.id', ondelete='CASCADE'), nullable=False)
    proposal_id = db.Column(db.Integer, db.ForeignKey('proposals.id', ondelete='CASCADE'), nullable=False)
    total_score = db.Column(db.Float, nullable=False)
    comment = db.Column(db.Text, nullable=False, default='')
    saved_at = db.Column(db.DateTime, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('reviewer_id', 'proposal_id', name='unique_evaluation'),
    )
