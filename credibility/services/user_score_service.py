import logging
from datetime import datetime, timezone
from credibility.models.score import SCORE_TRIGGERS
from credibility.scoring_config import ScoringConfig
from credibility.services.store_gateway import ScoreStoreGateway
from credibility.utils.scoring import clamp_score, ensure_utc, round_half_up

logger = logging.getLogger(__name__)


class UserScoreCalculator:
    """
    User credibility =
        average score of records where the user is owner, admin or subject
      + verification accuracy bonus
      + dispute accuracy bonus
      + identity verification bonus
      + verified provider bonus
      - unaccepted flag penalty

    The result becomes the provider score other users' facts are weighted
    by on the next hash recalculation. Nothing here recomputes those hashes.
    """

    def __init__(self, config=None, gateway=None):
        self.config = config or ScoringConfig()
        self.gateway = gateway or ScoreStoreGateway(self.config.provider_partition_size)

    def compute_user_score(self, user_id, trigger='manual', now=None):
        if not user_id:
            raise ValueError('user_id is required')
        if trigger not in SCORE_TRIGGERS:
            raise ValueError(f"Invalid trigger: {trigger}")
        now = now or datetime.now(timezone.utc)

        record_ids = self.gateway.get_user_record_ids(user_id)
        record_scores = self.gateway.get_record_scores(record_ids) if record_ids else []
        if record_scores:
            average_record_score = sum(r.score for r in record_scores) / len(record_scores)
        else:
            average_record_score = 0.0

        accuracy = self._accuracy_counters(user_id)
        profile = self.gateway.get_user_profile(user_id)
        unaccepted_flags = self.gateway.count_unaccepted_flags(user_id)

        raw = (
            average_record_score
            + self._verification_accuracy_bonus(accuracy)
            + self._dispute_accuracy_bonus(accuracy)
            - self.config.flag_penalty * unaccepted_flags
        )
        if profile and profile.identity_verified:
            raw += self.config.identity_bonus
        if profile and profile.verified_provider:
            raw += self.config.verified_provider_bonus

        credibility_score = round_half_up(clamp_score(raw))

        user_score = self.gateway.put_user_score(
            user_id,
            credibility_score=credibility_score,
            average_record_score=round(average_record_score, 2),
            record_count=len(record_scores),
            total_unaccepted_flags=unaccepted_flags,
            last_calculated_at=now,
            calculation_version=self.config.calculation_version,
            **accuracy,
        )
        self.gateway.append_score_history(user_score, trigger=trigger, calculated_at=now)

        logger.info(
            f"[UserScore] {user_id}: {credibility_score} "
            f"(avg record {average_record_score:.1f} over {len(record_scores)}, trigger={trigger})"
        )
        return user_score

    def _accuracy_counters(self, user_id):
        verifications = self.gateway.get_user_verifications(user_id)
        disputes = self.gateway.get_user_disputes(user_id)

        support_cache = {}

        def upheld(dispute):
            if dispute.id not in support_cache:
                support_cache[dispute.id] = self.is_net_supported(self.gateway.get_reactions(dispute.id))
            return support_cache[dispute.id]

        # A verification is wrong once another user files a dispute on the same
        # hash at or after it and that dispute is upheld
        hashes = {v.record_hash for v in verifications}
        upheld_by_hash = {}
        if hashes:
            for dispute in self.gateway.get_disputes_for_hashes(hashes):
                if dispute.disputer_id != user_id and upheld(dispute):
                    upheld_by_hash.setdefault(dispute.record_hash, []).append(dispute)

        def disputed(verification):
            return any(
                self.filed_after(d, verification) for d in upheld_by_hash.get(verification.record_hash, [])
            )

        return {
            'total_verifications_given': len(verifications),
            'total_verifications_disputed': sum(1 for v in verifications if disputed(v)),
            'total_disputes_filed': len(disputes),
            'total_disputes_supported': sum(1 for d in disputes if upheld(d)),
        }

    @staticmethod
    def filed_after(dispute, verification):
        if dispute.created_at is None or verification.created_at is None:
            return True
        return ensure_utc(dispute.created_at) >= ensure_utc(verification.created_at)

    @staticmethod
    def is_net_supported(reactions):
        supports = sum(1 for r in reactions if r.is_active and r.supports_dispute)
        opposes = sum(1 for r in reactions if r.is_active and not r.supports_dispute)
        return supports > opposes

    def _verification_accuracy_bonus(self, accuracy):
        given = accuracy['total_verifications_given']
        if not given:
            return 0.0
        accurate = given - accuracy['total_verifications_disputed']
        return self.config.verification_accuracy_weight * accurate / given

    def _dispute_accuracy_bonus(self, accuracy):
        filed = accuracy['total_disputes_filed']
        if not filed:
            return 0.0
        return self.config.dispute_accuracy_weight * accuracy['total_disputes_supported'] / filed
