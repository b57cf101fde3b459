import pytest
from datetime import datetime, timezone, timedelta

from credibility import create_app
from credibility.extensions import db as _db
from credibility.models.dispute import Dispute, DisputeReaction
from credibility.models.membership import RecordMembership, UserProfile, UnacceptedFlag
from credibility.models.score import HashScore, UserScore
from credibility.models.verification import Verification
from credibility.models.view import RecordView
from config import TestConfig

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope='session')
def app():
    """Create app with test config."""
    app = create_app(TestConfig)
    return app


@pytest.fixture(autouse=True)
def setup_db(app):
    """Create tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(app):
    return {'X-Admin-Key': app.config['ADMIN_API_KEY']}


@pytest.fixture
def db_session(app):
    with app.app_context():
        yield _db.session


@pytest.fixture
def now():
    return NOW


class FactBuilder:
    """Inserts credibility facts with sensible defaults and commits each one."""

    def __init__(self, session):
        self.session = session

    def _save(self, row):
        self.session.add(row)
        self.session.commit()
        return row

    def verification(self, record_hash='hash-1', verifier_id='verifier-1', level='Full',
                     record_id='record-1', is_active=True, created_at=None):
        row = Verification(
            record_hash=record_hash,
            record_id=record_id,
            verifier_id=verifier_id,
            level=level,
            is_active=is_active,
        )
        if created_at:
            row.created_at = created_at
        return self._save(row)

    def dispute(self, record_hash='hash-1', disputer_id='disputer-1', severity='Major',
                culpability='Reckless', record_id='record-1', is_active=True, created_at=None):
        row = Dispute(
            record_hash=record_hash,
            record_id=record_id,
            disputer_id=disputer_id,
            severity=severity,
            culpability=culpability,
            is_active=is_active,
        )
        if created_at:
            row.created_at = created_at
        return self._save(row)

    def reaction(self, dispute, reactor_id, supports, is_active=True):
        return self._save(DisputeReaction(
            dispute_id=dispute.id,
            reactor_id=reactor_id,
            supports_dispute=supports,
            is_active=is_active,
        ))

    def view(self, viewer_id, days_ago, record_hash='hash-1'):
        return self._save(RecordView(
            record_hash=record_hash,
            viewer_id=viewer_id,
            viewed_at=NOW - timedelta(days=days_ago),
        ))

    def membership(self, user_id, record_id='record-1', role='owner', is_active=True):
        return self._save(RecordMembership(
            record_id=record_id,
            user_id=user_id,
            role=role,
            is_active=is_active,
        ))

    def profile(self, user_id, identity_verified=False, verified_provider=False):
        return self._save(UserProfile(
            user_id=user_id,
            identity_verified=identity_verified,
            verified_provider=verified_provider,
        ))

    def flag(self, subject_id, record_id='record-1', is_active=True):
        return self._save(UnacceptedFlag(record_id=record_id, subject_id=subject_id, is_active=is_active))

    def user_score(self, user_id, credibility_score):
        return self._save(UserScore(
            user_id=user_id,
            credibility_score=credibility_score,
            last_calculated_at=NOW,
            calculation_version=1,
        ))

    def hash_score(self, record_hash, score, record_id='record-1', days_stale=0):
        return self._save(HashScore(
            record_hash=record_hash,
            record_id=record_id,
            score=score,
            base_score=50,
            stats_json={},
            calculation_version=1,
            last_calculated=NOW - timedelta(days=days_stale),
        ))


@pytest.fixture
def facts(db_session):
    return FactBuilder(db_session)
