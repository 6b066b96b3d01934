# tests/conftest.py

"""
Shared fixtures: an app on in-memory SQLite with the built-in rubric,
three proposals and helpers for logged-in clients.
"""

import pytest

from app import create_app
from config import TestConfig
from extensions import db
from logic import find_or_create_reviewer
from models import Criterion, Proposal
from rubric import load_rubric


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        load_rubric()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def proposals(app):
    items = [Proposal(name=name, order=order) for order, name in enumerate(['A', 'B', 'C'], start=1)]
    db.session.add_all(items)
    db.session.commit()
    return items


@pytest.fixture
def reviewer(app):
    return find_or_create_reviewer('Reviewer 1')


@pytest.fixture
def grades(app):
    """Build a complete grade sheet, every criterion at the same level."""
    def build(level=1):
        return {c.id: level for c in Criterion.query.all()}
    return build


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def reviewer_client(app, proposals):
    client = app.test_client()
    response = client.post('/login', json={'name': 'Reviewer 1'})
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post('/admin/login', json={'key': TestConfig.ADMIN_KEY})
    assert response.status_code == 200
    return client
