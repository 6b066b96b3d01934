# models/criterion.py
# Rubric line items; loaded from rubric.py, not edited at runtime

from extensions import db
from sqlalchemy import CheckConstraint
from sqlalchemy.orm import validates

from grading import rubric_max_score


class Criterion(db.Model):
    __tablename__ = 'criteria'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False)
    category = db.Column(db.String(100), nullable=False)
    sub_category = db.Column(db.String(100), nullable=True)
    name = db.Column(db.String, nullable=False)
    max_score = db.Column(db.Float, nullable=False)
    order = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("max_score > 0", name="check_max_score"),
    )

    @validates('max_score')
    def validate_max_score(self, key, value):
        return rubric_max_score(value)

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'category': self.category,
            'sub_category': self.sub_category,
            'name': self.name,
            'max_score': self.max_score,
            'order': self.order,
        }
