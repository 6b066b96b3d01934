# routes/auth.py
# Reviewer and administrator sessions

import hmac

from flask import Blueprint, abort, current_app, request, session

from logic import find_or_create_reviewer, reviewer_progress
from routes import ok

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    payload = request.get_json(silent=True) or {}
    # First login with a new name registers the reviewer
    reviewer = find_or_create_reviewer(payload.get('name'))

    session.clear()
    session['reviewer_id'] = reviewer.id
    return ok({'reviewer': reviewer.to_dict(), 'progress': reviewer_progress(reviewer)})


@auth_bp.route('/admin/login', methods=['POST'])
def admin_login():
    payload = request.get_json(silent=True) or {}
    key = str(payload.get('key') or '')
    if not hmac.compare_digest(key.encode(), current_app.config['ADMIN_KEY'].encode()):
        abort(401, description='Invalid administrator key.')

    session.clear()
    session['is_admin'] = True
    return ok({'admin': True})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return ok({'logged_out': True})
