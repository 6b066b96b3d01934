# models/proposal.py

from extensions import db


class Proposal(db.Model):
    __tablename__ = 'proposals'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    order = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    # Deleting a proposal removes every score and evaluation made for it
    scores = db.relationship('Score', backref='proposal', lazy=True, cascade="all, delete-orphan")
    evaluations = db.relationship('Evaluation', backref='proposal', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'order': self.order}
