from credibility.extensions import db
from sqlalchemy import func

SCORE_TRIGGERS = ('scheduled', 'verification', 'dispute', 'dispute-reaction', 'manual')


def _iso(value):
    return value.isoformat() if value else None


class HashScore(db.Model):
    __tablename__ = 'hash_scores'

    id = db.Column(db.Integer, primary_key=True)
    record_hash = db.Column(db.String(128), nullable=False, unique=True)
    record_id = db.Column(db.String(128), nullable=False, default='')
    score = db.Column(db.Integer, nullable=False)

    # Breakdown
    base_score = db.Column(db.Float, nullable=False)
    verification_bonus = db.Column(db.Float, default=0.0)
    implicit_review_bonus = db.Column(db.Float, default=0.0)
    dispute_penalty = db.Column(db.Float, default=0.0)

    stats_json = db.Column(db.JSON, nullable=False, default=dict)
    calculation_version = db.Column(db.Integer, nullable=False, default=1)
    last_calculated = db.Column(db.DateTime(timezone=True), nullable=False)

    __table_args__ = (
        db.Index('ix_hash_scores_record_id', 'record_id'),
    )

    @property
    def breakdown(self):
        return {
            'base': self.base_score,
            'verification_bonus': self.verification_bonus or 0.0,
            'implicit_review_bonus': self.implicit_review_bonus or 0.0,
            'dispute_penalty': self.dispute_penalty or 0.0,
        }

    def to_dict(self):
        return {
            'record_hash': self.record_hash,
            'record_id': self.record_id,
            'score': self.score,
            'breakdown': self.breakdown,
            'stats': self.stats_json or {},
            'calculation_version': self.calculation_version,
            'last_calculated': _iso(self.last_calculated),
        }


class RecordScore(db.Model):
    __tablename__ = 'record_scores'

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(db.String(128), nullable=False, unique=True)
    score = db.Column(db.Integer, nullable=False)
    hash_count = db.Column(db.Integer, default=0)
    active_subject_count = db.Column(db.Integer, default=0)
    calculation_version = db.Column(db.Integer, nullable=False, default=1)
    last_calculated = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self):
        return {
            'record_id': self.record_id,
            'score': self.score,
            'hash_count': self.hash_count or 0,
            'active_subject_count': self.active_subject_count or 0,
            'calculation_version': self.calculation_version,
            'last_calculated': _iso(self.last_calculated),
        }


class UserScore(db.Model):
    __tablename__ = 'user_scores'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, unique=True)
    credibility_score = db.Column(db.Integer, nullable=False)

    # Average score of records where the user is owner, admin or subject
    average_record_score = db.Column(db.Float, default=0.0)
    record_count = db.Column(db.Integer, default=0)

    # Verification accuracy
    total_verifications_given = db.Column(db.Integer, default=0)
    total_verifications_disputed = db.Column(db.Integer, default=0)

    # Dispute accuracy
    total_disputes_filed = db.Column(db.Integer, default=0)
    total_disputes_supported = db.Column(db.Integer, default=0)
    total_unaccepted_flags = db.Column(db.Integer, default=0)

    last_calculated_at = db.Column(db.DateTime(timezone=True), nullable=False)
    calculation_version = db.Column(db.Integer, nullable=False, default=1)

    def snapshot(self):
        """Fields copied verbatim into every history entry."""
        return {
            'credibility_score': self.credibility_score,
            'average_record_score': self.average_record_score,
            'record_count': self.record_count,
            'total_verifications_given': self.total_verifications_given,
            'total_verifications_disputed': self.total_verifications_disputed,
            'total_disputes_filed': self.total_disputes_filed,
            'total_disputes_supported': self.total_disputes_supported,
            'total_unaccepted_flags': self.total_unaccepted_flags,
            'calculation_version': self.calculation_version,
        }

    def to_dict(self):
        return {
            'user_id': self.user_id,
            **self.snapshot(),
            'last_calculated_at': _iso(self.last_calculated_at),
        }


class ScoreHistory(db.Model):
    """Append-only snapshot of a UserScore. Rows are never updated."""
    __tablename__ = 'score_history'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False)
    credibility_score = db.Column(db.Integer, nullable=False)
    average_record_score = db.Column(db.Float, default=0.0)
    record_count = db.Column(db.Integer, default=0)
    total_verifications_given = db.Column(db.Integer, default=0)
    total_verifications_disputed = db.Column(db.Integer, default=0)
    total_disputes_filed = db.Column(db.Integer, default=0)
    total_disputes_supported = db.Column(db.Integer, default=0)
    total_unaccepted_flags = db.Column(db.Integer, default=0)
    calculation_version = db.Column(db.Integer, nullable=False)
    triggered_by = db.Column(db.String(32), nullable=False, default='manual')
    calculated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    __table_args__ = (
        db.Index('ix_score_history_user_calculated', 'user_id', 'calculated_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'credibility_score': self.credibility_score,
            'average_record_score': self.average_record_score,
            'record_count': self.record_count,
            'total_verifications_given': self.total_verifications_given,
            'total_verifications_disputed': self.total_verifications_disputed,
            'total_disputes_filed': self.total_disputes_filed,
            'total_disputes_supported': self.total_disputes_supported,
            'total_unaccepted_flags': self.total_unaccepted_flags,
            'calculation_version': self.calculation_version,
            'trigger': self.triggered_by,
            'calculated_at': _iso(self.calculated_at),
        }
