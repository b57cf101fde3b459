import logging
from sqlalchemy.exc import SQLAlchemyError
from credibility.extensions import db
from credibility.models.dispute import Dispute, DisputeReaction
from credibility.models.membership import RecordMembership, UserProfile, UnacceptedFlag
from credibility.models.score import HashScore, RecordScore, UserScore, ScoreHistory
from credibility.models.verification import Verification
from credibility.models.view import RecordView
from credibility.utils.batching import batched

logger = logging.getLogger(__name__)

DEFAULT_PARTITION_SIZE = 30


class ScoreStoreGateway:
    """
    Read/write access to credibility facts and computed scores.

    Reads return model rows. Writes are single-row upserts committed on
    their own; a failed write rolls the session back and re-raises.
    """

    def __init__(self, partition_size=DEFAULT_PARTITION_SIZE):
        if partition_size < 1:
            raise ValueError(f"partition_size must be positive, got {partition_size}")
        self.partition_size = partition_size

    # ---- Facts ----

    def get_verifications(self, record_hash):
        return Verification.query.filter_by(record_hash=record_hash).order_by(Verification.id).all()

    def get_disputes(self, record_hash):
        return Dispute.query.filter_by(record_hash=record_hash).order_by(Dispute.id).all()

    def get_views(self, record_hash):
        return RecordView.query.filter_by(record_hash=record_hash).order_by(RecordView.id).all()

    def get_reactions(self, dispute_id):
        return DisputeReaction.query.filter_by(dispute_id=dispute_id).order_by(DisputeReaction.id).all()

    def get_user_verifications(self, user_id):
        return Verification.query.filter_by(verifier_id=user_id, is_active=True).all()

    def get_user_disputes(self, user_id):
        return Dispute.query.filter_by(disputer_id=user_id, is_active=True).all()

    def get_disputes_for_hashes(self, record_hashes):
        """Active disputes on any of the given hashes."""
        return self._fetch_in_partitions(
            lambda chunk: Dispute.query.filter(
                Dispute.record_hash.in_(chunk),
                Dispute.is_active.is_(True),
            ).all(),
            record_hashes,
        )

    def get_user_profile(self, user_id):
        return UserProfile.query.filter_by(user_id=user_id).first()

    def count_unaccepted_flags(self, user_id):
        return UnacceptedFlag.query.filter_by(subject_id=user_id, is_active=True).count()

    def get_user_record_ids(self, user_id):
        """Records where the user is an active owner, admin or subject."""
        rows = db.session.query(RecordMembership.record_id).filter(
            RecordMembership.user_id == user_id,
            RecordMembership.is_active.is_(True),
        ).distinct().all()
        return sorted(r[0] for r in rows)

    def get_active_subjects(self, record_id):
        return RecordMembership.query.filter_by(
            record_id=record_id, role='subject', is_active=True,
        ).count()

    # ---- Provider scores (cached priors) ----

    def get_provider_scores(self, user_ids):
        """
        Map user_id -> credibility_score for the given ids.
        Ids without a UserScore are omitted. A partition that fails is logged
        and skipped, so its ids read as absent (callers fall back to neutral).
        """
        scores = {}
        ids = sorted(uid for uid in set(user_ids) if uid)
        for chunk in batched(ids, self.partition_size):
            try:
                rows = self._query_provider_partition(chunk)
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.warning(
                    f"Provider score partition failed ({len(chunk)} ids), treating as neutral: {e}"
                )
                continue
            for user_id, credibility_score in rows:
                scores[user_id] = credibility_score
        return scores

    def _query_provider_partition(self, chunk):
        return db.session.query(UserScore.user_id, UserScore.credibility_score).filter(
            UserScore.user_id.in_(chunk)
        ).all()

    # ---- Computed scores ----

    def get_hash_score(self, record_hash):
        return HashScore.query.filter_by(record_hash=record_hash).first()

    def get_hash_scores(self, record_id):
        return HashScore.query.filter_by(record_id=record_id).order_by(HashScore.id).all()

    def get_record_score(self, record_id):
        return RecordScore.query.filter_by(record_id=record_id).first()

    def get_record_scores(self, record_ids):
        return self._fetch_in_partitions(
            lambda chunk: RecordScore.query.filter(RecordScore.record_id.in_(chunk)).all(),
            record_ids,
        )

    def get_user_score(self, user_id):
        return UserScore.query.filter_by(user_id=user_id).first()

    def get_score_history(self, user_id):
        return ScoreHistory.query.filter_by(user_id=user_id).order_by(
            ScoreHistory.calculated_at.desc(), ScoreHistory.id.desc()
        )

    def put_hash_score(self, record_hash, **fields):
        row = self._locked(HashScore, record_hash=record_hash)
        if not row:
            row = HashScore(record_hash=record_hash)
            db.session.add(row)
        return self._overwrite(row, fields)

    def put_record_score(self, record_id, **fields):
        row = self._locked(RecordScore, record_id=record_id)
        if not row:
            row = RecordScore(record_id=record_id)
            db.session.add(row)
        return self._overwrite(row, fields)

    def put_user_score(self, user_id, **fields):
        row = self._locked(UserScore, user_id=user_id)
        if not row:
            row = UserScore(user_id=user_id)
            db.session.add(row)
        return self._overwrite(row, fields)

    def append_score_history(self, user_score, trigger, calculated_at):
        entry = ScoreHistory(
            user_id=user_score.user_id,
            triggered_by=trigger,
            calculated_at=calculated_at,
            **user_score.snapshot(),
        )
        db.session.add(entry)
        self._commit()
        return entry

    # ---- Sweep listings ----

    def list_record_hashes(self):
        hashes = set()
        for model in (Verification, Dispute, RecordView):
            hashes.update(r[0] for r in db.session.query(model.record_hash).distinct().all())
        hashes.update(r[0] for r in db.session.query(HashScore.record_hash).all())
        return sorted(hashes)

    def record_id_for_hash(self, record_hash):
        """Best known record id for a hash ('' if none)."""
        for model in (Verification, Dispute):
            row = db.session.query(model.record_id).filter(model.record_hash == record_hash).first()
            if row and row[0]:
                return row[0]
        existing = self.get_hash_score(record_hash)
        return existing.record_id if existing else ''

    def list_record_ids(self):
        ids = set()
        for model in (HashScore, RecordMembership):
            ids.update(r[0] for r in db.session.query(model.record_id).distinct().all() if r[0])
        return sorted(ids)

    def list_user_ids(self):
        ids = set()
        for column in (
            UserScore.user_id,
            RecordMembership.user_id,
            Verification.verifier_id,
            Dispute.disputer_id,
            DisputeReaction.reactor_id,
            RecordView.viewer_id,
            UserProfile.user_id,
            UnacceptedFlag.subject_id,
        ):
            ids.update(r[0] for r in db.session.query(column).distinct().all() if r[0])
        return sorted(ids)

    # ---- Internals ----

    def _fetch_in_partitions(self, fetch, keys):
        results = []
        for chunk in batched(sorted(set(keys)), self.partition_size):
            results.extend(fetch(chunk))
        return results

    def _locked(self, model, **key):
        # Row lock until commit; serializes writers across worker processes.
        # No-op on SQLite.
        return model.query.filter_by(**key).with_for_update().first()

    def _overwrite(self, row, fields):
        for name, value in fields.items():
            setattr(row, name, value)
        self._commit()
        return row

    def _commit(self):
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
