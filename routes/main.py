# routes/main.py
# Reviewer-facing endpoints: rubric, scoring sheet, saves and submit

from functools import wraps

from flask import Blueprint, abort, g, request, session

from errors import ValidationError
from extensions import db
from grading import Grade, parse_grade, score_item
from logic import (reviewer_evaluation, reviewer_evaluations, reviewer_progress,
                   save_evaluation, submit)
from models import Criterion, Proposal, Reviewer
from routes import ok

main_bp = Blueprint('main', __name__)


def login_required(f):
    """Any session: reviewer or administrator."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'reviewer_id' not in session and not session.get('is_admin'):
            abort(401, description='Log in to access this page.')
        return f(*args, **kwargs)
    return decorated_function


def reviewer_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        reviewer_id = session.get('reviewer_id')
        reviewer = db.session.get(Reviewer, reviewer_id) if reviewer_id else None
        if reviewer is None:
            # Reviewer was deleted or reset while logged in
            session.clear()
            abort(401, description='Log in as a reviewer to access this page.')
        g.reviewer = reviewer
        return f(*args, **kwargs)
    return decorated_function


def _grade_levels(max_score):
    return [
        {
            'grade': int(level),
            'label': level.label,
            'percentage': int(level.percentage * 100),
            'score': score_item(max_score, level),
        }
        for level in Grade
    ]


@main_bp.route('/criteria')
@login_required
def list_criteria():
    criteria = Criterion.query.order_by(Criterion.order).all()
    data = []
    for c in criteria:
        item = c.to_dict()
        item['grades'] = _grade_levels(c.max_score)
        data.append(item)
    return ok(data)


@main_bp.route('/proposals')
@login_required
def list_proposals():
    proposals = Proposal.query.order_by(Proposal.order, Proposal.id).all()
    return ok([p.to_dict() for p in proposals])


@main_bp.route('/grades')
@login_required
def grade_scores():
    max_score = request.args.get('max_score', type=float)
    return ok(_grade_levels(max_score))


@main_bp.route('/score-item')
@login_required
def score_one_item():
    max_score = request.args.get('max_score', type=float)
    grade = parse_grade(request.args.get('grade', ''))
    return ok({'max_score': max_score, 'grade': int(grade), 'score': score_item(max_score, grade)})


@main_bp.route('/me')
@reviewer_required
def me():
    return ok({'reviewer': g.reviewer.to_dict(), 'progress': reviewer_progress(g.reviewer)})


@main_bp.route('/evaluations')
@reviewer_required
def my_evaluations():
    return ok(reviewer_evaluations(g.reviewer.id))


@main_bp.route('/evaluations/<int:proposal_id>', methods=['GET'])
@reviewer_required
def my_evaluation(proposal_id):
    # None means "not scored yet", which is not an error
    return ok(reviewer_evaluation(g.reviewer.id, proposal_id))


def _grade_map(raw):
    """JSON object keys are strings; numeric keys are criterion ids, others are codes."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError('grades must be an object of criterion -> grade')
    grades = {}
    for key, grade in raw.items():
        key = int(key) if key.isdecimal() else key
        grades[key] = grade
    return grades


@main_bp.route('/evaluations/<int:proposal_id>', methods=['PUT', 'POST'])
@reviewer_required
def save_my_evaluation(proposal_id):
    payload = request.get_json(silent=True) or {}
    comment = payload.get('comment')
    if comment is None:
        comment = ''
    if not isinstance(comment, str):
        raise ValidationError('comment must be text')

    evaluation = save_evaluation(g.reviewer.id, proposal_id, _grade_map(payload.get('grades')), comment)
    return ok({
        'evaluation': reviewer_evaluation(g.reviewer.id, evaluation.proposal_id),
        'progress': reviewer_progress(g.reviewer),
    })


@main_bp.route('/submit', methods=['POST'])
@reviewer_required
def submit_evaluations():
    reviewer = submit(g.reviewer.id)
    return ok({'reviewer': reviewer.to_dict(), 'progress': reviewer_progress(reviewer)})
