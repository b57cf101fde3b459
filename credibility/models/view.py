from credibility.extensions import db


class RecordView(db.Model):
    __tablename__ = 'record_views'

    id = db.Column(db.Integer, primary_key=True)
    record_hash = db.Column(db.String(128), nullable=False)
    viewer_id = db.Column(db.String(128), nullable=False)
    viewed_at = db.Column(db.DateTime(timezone=True), nullable=False)

    __table_args__ = (
        db.Index('ix_record_views_record_hash', 'record_hash'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'record_hash': self.record_hash,
            'viewer_id': self.viewer_id,
            'viewed_at': self.viewed_at.isoformat() if self.viewed_at else None,
        }
