from datetime import timedelta
from unittest.mock import patch

from credibility.pipeline.orchestrator import RecalculationError
from credibility.services.user_score_service import UserScoreCalculator


class TestHealthRoutes:
    def test_health(self, client):
        resp = client.get('/health')
        assert resp.status_code == 200
        assert resp.json['status'] == 'ok'

    def test_ready(self, client):
        resp = client.get('/ready')
        assert resp.status_code == 200
        assert resp.json['db'] is True


class TestScoreRoutes:
    def test_missing_scores_404(self, client):
        assert client.get('/api/scores/hash/nope').status_code == 404
        assert client.get('/api/scores/record/nope').status_code == 404
        assert client.get('/api/scores/user/nope').status_code == 404

    def test_hash_score(self, client, facts):
        facts.hash_score('hash-1', 64)

        resp = client.get('/api/scores/hash/hash-1')

        assert resp.status_code == 200
        assert resp.json['score'] == 64
        assert set(resp.json['breakdown']) == {
            'base', 'verification_bonus', 'implicit_review_bonus', 'dispute_penalty',
        }

    def test_user_history_paginated(self, client, db_session, now):
        calc = UserScoreCalculator()
        for i in range(3):
            calc.compute_user_score('user-1', trigger='manual', now=now + timedelta(hours=i))

        resp = client.get('/api/scores/user/user-1/history?per_page=2')

        assert resp.status_code == 200
        assert resp.json['total'] == 3
        assert len(resp.json['history']) == 2

        user = client.get('/api/scores/user/user-1')
        assert user.json['credibility_score'] == 0
        assert user.json['calculation_version'] == 1

    def test_history_page_size_capped(self, client, db_session, now):
        UserScoreCalculator().compute_user_score('user-1', now=now)

        resp = client.get('/api/scores/user/user-1/history?per_page=5000')

        assert resp.status_code == 200
        assert resp.json['per_page'] == 100
        assert resp.json['total'] == 1


class TestAdminRoutes:
    def test_requires_key(self, client):
        resp = client.post('/api/admin/recalculate', json={})
        assert resp.status_code == 401

    def test_bearer_token_accepted(self, client, app, facts):
        facts.verification()
        resp = client.post(
            '/api/admin/recalculate',
            json={'record_hash': 'hash-1', 'record_id': 'record-1', 'user_id': 'verifier-1'},
            headers={'Authorization': f"Bearer {app.config['ADMIN_API_KEY']}"},
        )
        assert resp.status_code == 200

    def test_disabled_without_configured_key(self, client, app, monkeypatch):
        monkeypatch.setitem(app.config, 'ADMIN_API_KEY', None)
        resp = client.post('/api/admin/recalculate', json={}, headers={'X-Admin-Key': 'anything'})
        assert resp.status_code == 503

    def test_missing_fields(self, client, admin_headers):
        resp = client.post('/api/admin/recalculate', json={'record_hash': 'hash-1'},
                           headers=admin_headers)
        assert resp.status_code == 400

    def test_invalid_trigger(self, client, admin_headers):
        resp = client.post('/api/admin/recalculate', json={
            'record_hash': 'hash-1', 'record_id': 'record-1', 'user_id': 'user-1', 'trigger': 'later',
        }, headers=admin_headers)
        assert resp.status_code == 400

    def test_recalculate(self, client, admin_headers, facts):
        facts.verification(level='Full')

        resp = client.post('/api/admin/recalculate', json={
            'record_hash': 'hash-1',
            'record_id': 'record-1',
            'user_id': 'verifier-1',
            'trigger': 'verification',
        }, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json['trigger'] == 'verification'
        assert resp.json['hash_score']['score'] == 75
        assert resp.json['record_score']['score'] == 75
        assert resp.json['user_score']['user_id'] == 'verifier-1'

    def test_store_failure_returns_503(self, client, admin_headers):
        with patch('credibility.routes.admin.recalculate',
                   side_effect=RecalculationError('hash', 'database unavailable')):
            resp = client.post('/api/admin/recalculate', json={
                'record_hash': 'hash-1', 'record_id': 'record-1', 'user_id': 'user-1',
            }, headers=admin_headers)

        assert resp.status_code == 503
        assert resp.json['step'] == 'hash'
        assert resp.json['retry'] is True

    def test_trigger_sweep(self, client, admin_headers):
        from credibility.routes import admin

        with patch('credibility.routes.admin.run_sweep') as sweep:
            resp = client.post('/api/admin/sweep', headers=admin_headers)
            admin._sweep_thread.join(timeout=5)

        assert resp.status_code == 202
        sweep.assert_called_once_with()
