from credibility.extensions import db
from sqlalchemy import func


class RecordMembership(db.Model):
    """A user's role on a logical record (owner, admin or subject)."""
    __tablename__ = 'record_memberships'

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(db.String(128), nullable=False)
    user_id = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(16), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        db.UniqueConstraint('record_id', 'user_id', 'role', name='uq_record_membership'),
        db.Index('ix_record_memberships_user_active', 'user_id', 'is_active'),
        db.Index('ix_record_memberships_record_role', 'record_id', 'role'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'record_id': self.record_id,
            'user_id': self.user_id,
            'role': self.role,
            'is_active': self.is_active,
        }


class UserProfile(db.Model):
    __tablename__ = 'user_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, unique=True)
    identity_verified = db.Column(db.Boolean, default=False, nullable=False)
    verified_provider = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'identity_verified': self.identity_verified,
            'verified_provider': self.verified_provider,
        }


class UnacceptedFlag(db.Model):
    """Raised when a subject refuses to accept an update to their record."""
    __tablename__ = 'unaccepted_flags'

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(db.String(128), nullable=False)
    subject_id = db.Column(db.String(128), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        db.Index('ix_unaccepted_flags_subject_active', 'subject_id', 'is_active'),
    )
