# logic.py
# Evaluation workflow: reviewers, saves, submission lifecycle and result views

import logging
import time
from collections import defaultdict
from datetime import datetime, timezone
from enum import Enum

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError

from aggregation import MeanRounding, RankingTies, aggregate, rank_proposals
from errors import (IncompleteEvaluation, NameConflict, NotAllScored, NotFound,
                    SubmissionLocked, ValidationError)
from extensions import db
from grading import parse_grade, score_item, total_score
from models import Criterion, Evaluation, Proposal, Reviewer, Score

logger = logging.getLogger(__name__)


def _with_retry(operation, retry_on=(OperationalError,)):
    """
    Run a unit of work, retrying transient storage failures.

    Only the exceptions in retry_on are retried (OperationalError by
    default); the session is rolled back before each new attempt.
    ReviewError rejections pass straight through.
    """
    attempts = max(1, current_app.config.get('STORE_RETRY_ATTEMPTS', 3))
    backoff = current_app.config.get('STORE_RETRY_BACKOFF') or [0]
    for attempt in range(attempts):
        try:
            return operation()
        except retry_on as e:
            db.session.rollback()
            if attempt == attempts - 1:
                raise
            delay = backoff[min(attempt, len(backoff) - 1)]
            logger.warning("Retry %d/%d after storage error: %s. Waiting %ss", attempt + 1, attempts, e, delay)
            time.sleep(delay)


def _get(model, ident, kind):
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFound(kind, ident)
    return obj


def mean_rounding():
    return MeanRounding(current_app.config.get('MEAN_ROUNDING', MeanRounding.ROUND))


def ranking_ties():
    return RankingTies(current_app.config.get('RANKING_TIES', RankingTies.SEQUENTIAL))


def _clean_name(name, what):
    name = (name or '').strip()
    if not name:
        raise ValidationError(f'{what} name is required')
    return name


# --- Reviewers ---

def find_or_create_reviewer(name):
    """Return the reviewer with this display name, creating it on first use."""
    name = _clean_name(name, 'Reviewer')
    reviewer = Reviewer.query.filter_by(name=name).first()
    if reviewer:
        return reviewer

    reviewer = Reviewer(name=name, submitted=False)
    db.session.add(reviewer)
    try:
        db.session.commit()
    except IntegrityError:
        # Someone else created the same name between the lookup and the insert
        db.session.rollback()
        return Reviewer.query.filter_by(name=name).one()
    logger.info("Reviewer '%s' created (id=%s)", name, reviewer.id)
    return reviewer


def rename_reviewer(reviewer_id, name):
    reviewer = _get(Reviewer, reviewer_id, 'Reviewer')
    name = _clean_name(name, 'Reviewer')
    if name == reviewer.name:
        return reviewer
    if Reviewer.query.filter(Reviewer.name == name, Reviewer.id != reviewer.id).first():
        raise NameConflict(name)

    reviewer.name = name
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise NameConflict(name)
    return reviewer


def delete_reviewer(reviewer_id):
    reviewer = _get(Reviewer, reviewer_id, 'Reviewer')
    name = reviewer.name
    db.session.delete(reviewer)
    db.session.commit()
    logger.info("Reviewer '%s' deleted with their scores", name)


# --- Proposals ---

def create_proposal(name, order=None):
    name = _clean_name(name, 'Proposal')
    if order is None:
        max_order = db.session.query(func.max(Proposal.order)).scalar()
        order = (max_order or 0) + 1
    proposal = Proposal(name=name, order=order)
    db.session.add(proposal)
    db.session.commit()
    return proposal


def update_proposal(proposal_id, name=None, order=None):
    proposal = _get(Proposal, proposal_id, 'Proposal')
    if name is not None:
        proposal.name = _clean_name(name, 'Proposal')
    if order is not None:
        proposal.order = order
    db.session.commit()
    return proposal


def delete_proposal(proposal_id):
    proposal = _get(Proposal, proposal_id, 'Proposal')
    name = proposal.name
    db.session.delete(proposal)
    db.session.commit()
    logger.info("Proposal '%s' deleted with its scores and evaluations", name)


# --- Submission lifecycle ---

class SubmissionState(str, Enum):
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    ALL_SCORED = 'all_scored'
    SUBMITTED = 'submitted'


def submission_state(submitted, saved_count, proposal_count):
    """Derive a reviewer's state from the submitted flag and their saved evaluation count."""
    if submitted:
        return SubmissionState.SUBMITTED
    if saved_count == 0:
        return SubmissionState.NOT_STARTED
    if saved_count >= proposal_count:
        return SubmissionState.ALL_SCORED
    return SubmissionState.IN_PROGRESS


def reviewer_progress(reviewer):
    saved = Evaluation.query.filter_by(reviewer_id=reviewer.id).count()
    total = Proposal.query.count()
    return {
        'state': submission_state(reviewer.submitted, saved, total).value,
        'saved': saved,
        'total': total,
    }


def reviewers_overview():
    """Every reviewer with their state, oldest first."""
    total = Proposal.query.count()
    saved_by_reviewer = dict(
        db.session.query(Evaluation.reviewer_id, func.count(Evaluation.id))
        .group_by(Evaluation.reviewer_id)
    )
    overview = []
    for reviewer in Reviewer.query.order_by(Reviewer.id).all():
        saved = saved_by_reviewer.get(reviewer.id, 0)
        data = reviewer.to_dict()
        data.update({
            'state': submission_state(reviewer.submitted, saved, total).value,
            'saved': saved,
            'total': total,
        })
        overview.append(data)
    return overview


def submit(reviewer_id):
    """Freeze the reviewer's scores. Requires every proposal to be scored."""
    reviewer = _get(Reviewer, reviewer_id, 'Reviewer')
    if reviewer.submitted:
        return reviewer

    scored = {pid for (pid,) in db.session.query(Evaluation.proposal_id).filter_by(reviewer_id=reviewer.id)}
    proposals = Proposal.query.order_by(Proposal.order, Proposal.id).all()
    missing = [p.name for p in proposals if p.id not in scored]
    if missing or not proposals:
        raise NotAllScored(missing)

    def write():
        reviewer.submitted = True
        db.session.commit()
        return reviewer

    _with_retry(write)
    logger.info("Reviewer '%s' submitted %d evaluations", reviewer.name, len(scored))
    return reviewer


def unlock(reviewer_id):
    """Administrator action: reopen a submitted reviewer for editing."""
    reviewer = _get(Reviewer, reviewer_id, 'Reviewer')

    def write():
        reviewer.submitted = False
        db.session.commit()
        return reviewer

    _with_retry(write)
    logger.info("Reviewer '%s' unlocked by administrator", reviewer.name)
    return reviewer


# --- Evaluations ---

def _resolve_criteria(grades, criteria):
    """Map grade-map keys (criterion id or code) onto criteria."""
    by_id = {c.id: c for c in criteria}
    by_code = {c.code: c for c in criteria}
    resolved = {}
    for key, grade in grades.items():
        criterion = by_id.get(key) if isinstance(key, int) else by_code.get(key)
        if criterion is None:
            raise NotFound('Criterion', key)
        if criterion.id in resolved:
            raise ValidationError(f'Criterion {criterion.code} is graded more than once')
        resolved[criterion.id] = grade
    return resolved


def save_evaluation(reviewer_id, proposal_id, grades, comment=''):
    """
    Save one reviewer's complete grade sheet for one proposal.

    Existing scores of the pair are replaced (delete-then-insert) and the
    evaluation summary is upserted, in a single transaction. Rejects with
    SubmissionLocked after submit and IncompleteEvaluation when any
    criterion lacks a grade; nothing is written in either case.
    """
    reviewer = _get(Reviewer, reviewer_id, 'Reviewer')
    proposal = _get(Proposal, proposal_id, 'Proposal')
    if reviewer.submitted:
        raise SubmissionLocked(reviewer.name)

    criteria = Criterion.query.order_by(Criterion.order).all()
    resolved = _resolve_criteria(grades or {}, criteria)
    missing = [c.code for c in criteria if resolved.get(c.id) is None]
    if missing:
        raise IncompleteEvaluation(missing)

    sheet = [(c, parse_grade(resolved[c.id])) for c in criteria]
    total = total_score((c.max_score, grade) for c, grade in sheet)
    comment = comment or ''

    def write():
        # Re-read the flag inside the transaction that writes
        if db.session.get(Reviewer, reviewer.id).submitted:
            raise SubmissionLocked(reviewer.name)

        Score.query.filter_by(reviewer_id=reviewer.id, proposal_id=proposal.id).delete()
        db.session.add_all([
            Score(
                reviewer_id=reviewer.id,
                proposal_id=proposal.id,
                criterion_id=c.id,
                grade=int(grade),
                value=score_item(c.max_score, grade),
            )
            for c, grade in sheet
        ])

        evaluation = Evaluation.query.filter_by(reviewer_id=reviewer.id, proposal_id=proposal.id).first()
        if evaluation is None:
            evaluation = Evaluation(reviewer_id=reviewer.id, proposal_id=proposal.id)
            db.session.add(evaluation)
        evaluation.total_score = total
        evaluation.comment = comment
        evaluation.saved_at = datetime.now(timezone.utc).replace(tzinfo=None)
        db.session.commit()
        return evaluation

    # A concurrent first save of the same pair can win the insert; the
    # retry then finds its row and overwrites it
    evaluation = _with_retry(write, retry_on=(OperationalError, IntegrityError))
    logger.info("Saved evaluation of '%s' for proposal '%s': %s", reviewer.name, proposal.name, total)
    return evaluation


def evaluation_to_dict(evaluation, scores=None):
    if scores is None:
        scores = Score.query.filter_by(
            reviewer_id=evaluation.reviewer_id, proposal_id=evaluation.proposal_id
        ).all()
    return {
        'reviewer_id': evaluation.reviewer_id,
        'proposal_id': evaluation.proposal_id,
        'grades': {s.criterion_id: s.grade for s in scores},
        'scores': {s.criterion_id: s.value for s in scores},
        'total_score': evaluation.total_score,
        'comment': evaluation.comment,
        'saved_at': evaluation.saved_at.isoformat() if evaluation.saved_at else None,
    }


def reviewer_evaluations(reviewer_id):
    """All saved evaluations of one reviewer, in proposal order."""
    reviewer = _get(Reviewer, reviewer_id, 'Reviewer')
    evaluations = (
        Evaluation.query.filter_by(reviewer_id=reviewer.id)
        .join(Proposal)
        .order_by(Proposal.order, Proposal.id)
        .all()
    )
    scores_by_proposal = defaultdict(list)
    for s in Score.query.filter_by(reviewer_id=reviewer.id):
        scores_by_proposal[s.proposal_id].append(s)
    return [evaluation_to_dict(e, scores_by_proposal[e.proposal_id]) for e in evaluations]


def reviewer_evaluation(reviewer_id, proposal_id):
    """Saved evaluation for one pair, or None when the proposal is not scored yet."""
    _get(Reviewer, reviewer_id, 'Reviewer')
    _get(Proposal, proposal_id, 'Proposal')
    evaluation = Evaluation.query.filter_by(reviewer_id=reviewer_id, proposal_id=proposal_id).first()
    return evaluation_to_dict(evaluation) if evaluation else None


# --- Results ---

def _result(proposal, evaluations):
    result = aggregate(
        ((e.reviewer_id, e.total_score, e.reviewer.name) for e in evaluations),
        mean_rounding(),
    )
    return {
        'proposal': proposal.to_dict(),
        'reviewer_count': result.count,
        'total_sum': result.total_sum,
        'raw_mean': result.raw_mean,
        'trimmed_mean': result.trimmed_mean,
        'unscored': result.unscored,
        'reviewers': [
            {
                'reviewer_id': r.reviewer_id,
                'reviewer_name': r.reviewer_name,
                'total_score': r.total,
                'excluded_high': r.excluded_high,
                'excluded_low': r.excluded_low,
            }
            for r in result.reviewers
        ],
    }


def _evaluations_in_reviewer_order(**filters):
    return (
        Evaluation.query.filter_by(**filters)
        .join(Reviewer)
        .order_by(Reviewer.id)
        .all()
    )


def proposal_result(proposal_id):
    """Raw and trimmed mean for one proposal, with per-reviewer exclusion flags."""
    proposal = _get(Proposal, proposal_id, 'Proposal')
    return _result(proposal, _evaluations_in_reviewer_order(proposal_id=proposal.id))


def ranked_results():
    """Every proposal's result, ranked by trimmed mean (best first)."""
    proposals = Proposal.query.order_by(Proposal.order, Proposal.id).all()
    by_proposal = defaultdict(list)
    for e in _evaluations_in_reviewer_order():
        by_proposal[e.proposal_id].append(e)

    results = {p.id: _result(p, by_proposal[p.id]) for p in proposals}
    ranking = rank_proposals(
        [(p.id, results[p.id]['trimmed_mean']) for p in proposals],
        ranking_ties(),
    )
    ranked = []
    for entry in ranking:
        row = results[entry.proposal_id]
        row['rank'] = entry.rank
        ranked.append(row)
    return ranked


# --- Maintenance ---

def data_status():
    return {
        'reviewers': Reviewer.query.count(),
        'scores': Score.query.count(),
        'evaluations': Evaluation.query.count(),
        'proposals': Proposal.query.count(),
        'criteria': Criterion.query.count(),
    }


def reset_evaluations():
    """Remove every score, evaluation and reviewer. Proposals and criteria stay."""
    def write():
        counts = {
            'scores': Score.query.delete(),
            'evaluations': Evaluation.query.delete(),
            'reviewers': Reviewer.query.delete(),
        }
        db.session.commit()
        return counts

    counts = _with_retry(write)
    logger.info("Evaluation data reset: %s", counts)
    return counts
