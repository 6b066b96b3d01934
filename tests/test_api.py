# tests/test_api.py

"""
HTTP endpoints: every rejection comes back as {"data": null, "error": {...}}
with its own status code, every success as {"data": ..., "error": null}.
"""

import pytest

from models import Criterion, Proposal


def full_sheet(level=1):
    return {c.code: level for c in Criterion.query.all()}


def save(client, proposal_id, level=1, comment=''):
    return client.put(f'/evaluations/{proposal_id}', json={'grades': full_sheet(level), 'comment': comment})


class TestAuth:

    def test_login_creates_reviewer(self, client, proposals):
        response = client.post('/login', json={'name': 'Kim'})
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['reviewer']['name'] == 'Kim'
        assert data['progress'] == {'state': 'not_started', 'saved': 0, 'total': 3}

    def test_login_requires_a_name(self, client):
        response = client.post('/login', json={})
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'VALIDATION_ERROR'

    def test_wrong_admin_key(self, client):
        response = client.post('/admin/login', json={'key': 'nope'})
        assert response.status_code == 401
        assert response.get_json()['data'] is None

    def test_pages_need_a_session(self, client):
        assert client.get('/criteria').status_code == 401
        assert client.get('/me').status_code == 401

    def test_reviewer_cannot_use_admin_pages(self, reviewer_client):
        assert reviewer_client.get('/admin/results').status_code == 403

    def test_logout(self, reviewer_client):
        reviewer_client.post('/logout')
        assert reviewer_client.get('/me').status_code == 401


class TestScoringSheet:

    def test_criteria_carry_grade_scores(self, reviewer_client):
        data = reviewer_client.get('/criteria').get_json()['data']
        assert len(data) == 23
        first = data[0]
        assert first['code'] == 'c1-1'
        assert [g['score'] for g in first['grades']] == [4.0, 3.6, 3.2, 2.8, 2.4]
        assert [g['label'] for g in first['grades']] == ['수', '우', '미', '양', '가']

    def test_score_item(self, reviewer_client):
        response = reviewer_client.get('/score-item?max_score=3&grade=2')
        assert response.get_json()['data']['score'] == 2.7

    def test_score_item_invalid_grade(self, reviewer_client):
        response = reviewer_client.get('/score-item?max_score=3&grade=9')
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_GRADE'

    def test_score_item_non_ascii_digit_grade(self, reviewer_client):
        response = reviewer_client.get('/score-item', query_string={'max_score': 4, 'grade': '²'})
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_GRADE'

    def test_score_item_invalid_max_score(self, reviewer_client):
        response = reviewer_client.get('/score-item?max_score=-2&grade=1')
        assert response.get_json()['error']['code'] == 'INVALID_MAX_SCORE'

    def test_proposals_in_order(self, reviewer_client):
        data = reviewer_client.get('/proposals').get_json()['data']
        assert [p['name'] for p in data] == ['A', 'B', 'C']


class TestEvaluations:

    def test_save_and_read_back(self, reviewer_client, proposals):
        response = save(reviewer_client, proposals[0].id, level=2, comment='good')
        assert response.status_code == 200
        body = response.get_json()
        assert body['error'] is None
        assert body['data']['evaluation']['total_score'] == 63.0
        assert body['data']['progress']['state'] == 'in_progress'

        saved = reviewer_client.get(f'/evaluations/{proposals[0].id}').get_json()['data']
        assert saved['comment'] == 'good'
        assert set(saved['grades'].values()) == {2}

    def test_not_scored_yet_is_empty_not_an_error(self, reviewer_client, proposals):
        response = reviewer_client.get(f'/evaluations/{proposals[1].id}')
        assert response.status_code == 200
        assert response.get_json() == {'data': None, 'error': None}

    def test_incomplete_sheet(self, reviewer_client, proposals):
        sheet = full_sheet()
        sheet.pop('c6-1')
        response = reviewer_client.put(f'/evaluations/{proposals[0].id}', json={'grades': sheet})
        assert response.status_code == 422
        error = response.get_json()['error']
        assert error['code'] == 'INCOMPLETE_EVALUATION'
        assert error['details']['missing'] == ['c6-1']

    def test_superscript_key_is_an_unknown_criterion(self, reviewer_client, proposals):
        sheet = full_sheet()
        sheet['²'] = 1
        response = reviewer_client.put(f'/evaluations/{proposals[0].id}', json={'grades': sheet})
        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'NOT_FOUND'

    def test_superscript_grade_is_invalid(self, reviewer_client, proposals):
        sheet = full_sheet()
        sheet['c1-1'] = '²'
        response = reviewer_client.put(f'/evaluations/{proposals[0].id}', json={'grades': sheet})
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_GRADE'

    @pytest.mark.parametrize('comment', [0, False, [], 12])
    def test_comment_must_be_text(self, reviewer_client, proposals, comment):
        response = reviewer_client.put(
            f'/evaluations/{proposals[0].id}', json={'grades': full_sheet(), 'comment': comment}
        )
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'VALIDATION_ERROR'

    def test_missing_proposal(self, reviewer_client):
        response = save(reviewer_client, 999)
        assert response.status_code == 404

    def test_list_my_evaluations(self, reviewer_client, proposals):
        save(reviewer_client, proposals[1].id)
        save(reviewer_client, proposals[0].id)
        data = reviewer_client.get('/evaluations').get_json()['data']
        assert [e['proposal_id'] for e in data] == [proposals[0].id, proposals[1].id]


class TestSubmitAndUnlock:

    def test_submit_before_all_scored(self, reviewer_client, proposals):
        save(reviewer_client, proposals[0].id)
        response = reviewer_client.post('/submit')
        assert response.status_code == 422
        assert response.get_json()['error']['code'] == 'NOT_ALL_SCORED'

    def test_locked_until_admin_unlocks(self, app, reviewer_client, admin_client, proposals):
        for p in proposals:
            save(reviewer_client, p.id, level=3)
        response = reviewer_client.post('/submit')
        assert response.get_json()['data']['progress']['state'] == 'submitted'

        locked = save(reviewer_client, proposals[0].id, level=1)
        assert locked.status_code == 423
        assert locked.get_json()['error']['code'] == 'SUBMISSION_LOCKED'

        reviewer_id = reviewer_client.get('/me').get_json()['data']['reviewer']['id']
        unlocked = admin_client.post(f'/admin/reviewer/{reviewer_id}/unlock')
        assert unlocked.get_json()['data']['reviewer']['submitted'] is False

        assert save(reviewer_client, proposals[0].id, level=1).status_code == 200


class TestAdmin:

    def test_results_ranked(self, app, admin_client, proposals):
        for name, level in [('R1', 1), ('R2', 2), ('R3', 5)]:
            client = app.test_client()
            client.post('/login', json={'name': name})
            save(client, proposals[2].id, level=level)

        data = admin_client.get('/admin/results').get_json()['data']
        assert data[0]['proposal']['name'] == 'C'
        assert data[0]['rank'] == 1
        assert data[0]['raw_mean'] == 58.33
        assert data[0]['trimmed_mean'] == 63.0
        assert [r['unscored'] for r in data] == [False, True, True]

        single = admin_client.get(f'/admin/results/{proposals[2].id}').get_json()['data']
        excluded = [(r['reviewer_name'], r['excluded_high'], r['excluded_low']) for r in single['reviewers']]
        assert excluded == [('R1', True, False), ('R2', False, False), ('R3', False, True)]

    def test_proposal_crud(self, admin_client, proposals):
        created = admin_client.post('/admin/proposals', json={'name': 'D'})
        assert created.status_code == 201
        new_id = created.get_json()['data']['id']
        assert created.get_json()['data']['order'] == 4

        renamed = admin_client.patch(f'/admin/proposal/{new_id}', json={'name': 'Delta', 'order': 2})
        assert renamed.get_json()['data'] == {'id': new_id, 'name': 'Delta', 'order': 2}

        assert admin_client.patch(f'/admin/proposal/{new_id}', json={'order': 'x'}).status_code == 400
        assert admin_client.delete(f'/admin/proposal/{new_id}').status_code == 200
        assert Proposal.query.count() == 3

    def test_rename_conflict(self, app, admin_client):
        for name in ['Kim', 'Lee']:
            app.test_client().post('/login', json={'name': name})
        reviewers = admin_client.get('/admin/reviewers').get_json()['data']
        response = admin_client.patch(f"/admin/reviewer/{reviewers[0]['id']}", json={'name': 'Lee'})
        assert response.status_code == 409

    def test_deleted_reviewer_session_is_dropped(self, reviewer_client, admin_client):
        reviewer_id = reviewer_client.get('/me').get_json()['data']['reviewer']['id']
        assert admin_client.delete(f'/admin/reviewer/{reviewer_id}').status_code == 200
        assert reviewer_client.get('/me').status_code == 401

    def test_status_and_reset(self, reviewer_client, admin_client, proposals):
        save(reviewer_client, proposals[0].id)
        status = admin_client.get('/admin/status').get_json()['data']
        assert (status['reviewers'], status['scores'], status['evaluations']) == (1, 23, 1)

        deleted = admin_client.post('/admin/reset').get_json()['data']['deleted']
        assert deleted == {'scores': 23, 'evaluations': 1, 'reviewers': 1}
        assert admin_client.get('/admin/status').get_json()['data']['proposals'] == 3
