from credibility.extensions import db
from sqlalchemy import func


class Dispute(db.Model):
    __tablename__ = 'disputes'

    id = db.Column(db.Integer, primary_key=True)
    record_hash = db.Column(db.String(128), nullable=False)
    record_id = db.Column(db.String(128), nullable=False)
    disputer_id = db.Column(db.String(128), nullable=False)
    severity = db.Column(db.String(16), nullable=False)
    culpability = db.Column(db.String(16), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        db.Index('ix_disputes_record_hash', 'record_hash'),
        db.Index('ix_disputes_disputer_active', 'disputer_id', 'is_active'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'record_hash': self.record_hash,
            'record_id': self.record_id,
            'disputer_id': self.disputer_id,
            'severity': self.severity,
            'culpability': self.culpability,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class DisputeReaction(db.Model):
    __tablename__ = 'dispute_reactions'

    id = db.Column(db.Integer, primary_key=True)
    dispute_id = db.Column(db.Integer, db.ForeignKey('disputes.id'), nullable=False)
    reactor_id = db.Column(db.String(128), nullable=False)
    supports_dispute = db.Column(db.Boolean, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        db.Index('ix_dispute_reactions_dispute', 'dispute_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'dispute_id': self.dispute_id,
            'reactor_id': self.reactor_id,
            'supports_dispute': self.supports_dispute,
            'is_active': self.is_active,
        }
