from credibility.extensions import db
from sqlalchemy import func


class Verification(db.Model):
    __tablename__ = 'verifications'

    id = db.Column(db.Integer, primary_key=True)
    record_hash = db.Column(db.String(128), nullable=False)
    record_id = db.Column(db.String(128), nullable=False)
    verifier_id = db.Column(db.String(128), nullable=False)
    level = db.Column(db.String(16), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        db.Index('ix_verifications_record_hash', 'record_hash'),
        db.Index('ix_verifications_verifier_active', 'verifier_id', 'is_active'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'record_hash': self.record_hash,
            'record_id': self.record_id,
            'verifier_id': self.verifier_id,
            'level': self.level,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
