# seed_data.py
# Resets the database to the built-in rubric and three sample proposals
# Run: python seed_data.py

import logging

from app import create_app
from extensions import db
from models import Proposal, Reviewer, Criterion, Score, Evaluation
from rubric import load_rubric

logger = logging.getLogger(__name__)

SAMPLE_PROPOSALS = ['제안사 A', '제안사 B', '제안사 C']


def seed():
    # Reverse dependency order
    logger.info("Clearing existing data...")
    db.session.query(Score).delete()
    db.session.query(Evaluation).delete()
    db.session.query(Reviewer).delete()
    db.session.query(Proposal).delete()
    db.session.query(Criterion).delete()
    db.session.commit()

    load_rubric()
    db.session.add_all([Proposal(name=name, order=order) for order, name in enumerate(SAMPLE_PROPOSALS, start=1)])
    db.session.commit()
    logger.info("Seeded %d criteria and %d proposals", Criterion.query.count(), Proposal.query.count())


if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        db.create_all()
        try:
            seed()
        except Exception:
            db.session.rollback()
            logger.exception("Seeding failed")
            raise
