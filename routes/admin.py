# routes/admin.py
# Administrator endpoints: proposals, reviewers, results, reset

from functools import wraps

from flask import Blueprint, abort, request, session

from errors import ValidationError
from logic import (create_proposal, data_status, delete_proposal, delete_reviewer,
                   proposal_result, ranked_results, rename_reviewer, reset_evaluations,
                   reviewer_progress, reviewers_overview, unlock, update_proposal)
from models import Proposal
from routes import ok

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get('is_admin'):
            abort(403, description='Administrator access required.')
        return f(*args, **kwargs)
    return decorated_function


def _order(payload):
    order = payload.get('order')
    if order is None:
        return None
    if isinstance(order, bool) or not isinstance(order, int) or order < 1:
        raise ValidationError('order must be a positive integer')
    return order


# --- Proposals ---

@admin_bp.route('/proposals', methods=['GET', 'POST'])
@admin_required
def manage_proposals():
    if request.method == 'POST':
        payload = request.get_json(silent=True) or {}
        proposal = create_proposal(payload.get('name'), _order(payload))
        return ok(proposal.to_dict(), 201)

    proposals = Proposal.query.order_by(Proposal.order, Proposal.id).all()
    return ok([p.to_dict() for p in proposals])


@admin_bp.route('/proposal/<int:proposal_id>', methods=['PATCH'])
@admin_required
def edit_proposal(proposal_id):
    payload = request.get_json(silent=True) or {}
    proposal = update_proposal(proposal_id, payload.get('name'), _order(payload))
    return ok(proposal.to_dict())


@admin_bp.route('/proposal/<int:proposal_id>', methods=['DELETE'])
@admin_required
def remove_proposal(proposal_id):
    delete_proposal(proposal_id)
    return ok({'deleted': proposal_id})


# --- Reviewers ---

@admin_bp.route('/reviewers')
@admin_required
def manage_reviewers():
    return ok(reviewers_overview())


@admin_bp.route('/reviewer/<int:reviewer_id>', methods=['PATCH'])
@admin_required
def edit_reviewer(reviewer_id):
    payload = request.get_json(silent=True) or {}
    reviewer = rename_reviewer(reviewer_id, payload.get('name'))
    return ok(reviewer.to_dict())


@admin_bp.route('/reviewer/<int:reviewer_id>', methods=['DELETE'])
@admin_required
def remove_reviewer(reviewer_id):
    delete_reviewer(reviewer_id)
    return ok({'deleted': reviewer_id})


@admin_bp.route('/reviewer/<int:reviewer_id>/unlock', methods=['POST'])
@admin_required
def unlock_reviewer(reviewer_id):
    reviewer = unlock(reviewer_id)
    return ok({'reviewer': reviewer.to_dict(), 'progress': reviewer_progress(reviewer)})


# --- Results ---

@admin_bp.route('/results')
@admin_required
def admin_results_view():
    return ok(ranked_results())


@admin_bp.route('/results/<int:proposal_id>')
@admin_required
def admin_proposal_result(proposal_id):
    return ok(proposal_result(proposal_id))


# --- Maintenance ---

@admin_bp.route('/status')
@admin_required
def status():
    return ok(data_status())


@admin_bp.route('/reset', methods=['POST'])
@admin_required
def reset():
    return ok({'deleted': reset_evaluations()})
