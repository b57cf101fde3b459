import logging
from datetime import datetime, timezone
from credibility.scoring_config import ScoringConfig
from credibility.services.store_gateway import ScoreStoreGateway
from credibility.utils.scoring import clamp_score, days_between, round_half_up

logger = logging.getLogger(__name__)


class HashScoreCalculator:
    """
    Score one immutable content hash.

    score = base
          + verification bonus (capped)
          + implicit review bonus (capped)
          - dispute penalty (uncapped, discounted by peer reactions)

    Provider scores are read as cached priors: whatever UserScore was last
    committed for each referenced user, neutral when there is none.
    """

    def __init__(self, config=None, gateway=None):
        self.config = config or ScoringConfig()
        self.gateway = gateway or ScoreStoreGateway(self.config.provider_partition_size)

    def compute_hash_score(self, record_hash, record_id=None, now=None):
        if not record_hash:
            raise ValueError('record_hash is required')
        now = now or datetime.now(timezone.utc)

        verifications = self.gateway.get_verifications(record_hash)
        disputes = self.gateway.get_disputes(record_hash)
        views = self.gateway.get_views(record_hash)
        reactions = {
            d.id: [r for r in self.gateway.get_reactions(d.id) if r.is_active]
            for d in disputes if d.is_active
        }

        user_ids = set()
        user_ids.update(v.verifier_id for v in verifications)
        user_ids.update(d.disputer_id for d in disputes)
        user_ids.update(v.viewer_id for v in views)
        for dispute_reactions in reactions.values():
            user_ids.update(r.reactor_id for r in dispute_reactions)
        provider_scores = self.gateway.get_provider_scores(user_ids) if user_ids else {}

        verification_bonus, level_counts = self._verification_bonus(verifications, provider_scores)
        implicit_bonus, implicit_count = self._implicit_review_bonus(
            views, verifications, disputes, provider_scores, now
        )
        dispute_penalty, active_disputes = self._dispute_penalty(disputes, reactions, provider_scores)

        raw = self.config.base_score + verification_bonus + implicit_bonus - dispute_penalty
        score = round_half_up(clamp_score(raw))

        record_id = record_id or self._resolve_record_id(record_hash, verifications, disputes)
        stats = {
            'active_verifications': sum(level_counts.values()),
            'provenance_count': level_counts.get('Provenance', 0),
            'content_count': level_counts.get('Content', 0),
            'full_count': level_counts.get('Full', 0),
            'active_disputes': active_disputes,
            'implicit_reviews': implicit_count,
        }

        hash_score = self.gateway.put_hash_score(
            record_hash,
            record_id=record_id,
            score=score,
            base_score=self.config.base_score,
            verification_bonus=round(verification_bonus, 2),
            implicit_review_bonus=round(implicit_bonus, 2),
            dispute_penalty=round(dispute_penalty, 2),
            stats_json=stats,
            calculation_version=self.config.calculation_version,
            last_calculated=now,
        )
        logger.info(
            f"[HashScore] {record_hash}: {score} "
            f"(+{verification_bonus:.2f} verif, +{implicit_bonus:.2f} implicit, -{dispute_penalty:.2f} disputes)"
        )
        return hash_score

    def _multiplier(self, provider_scores, user_id):
        return self.config.provider_multiplier(
            provider_scores.get(user_id, self.config.neutral_provider_score)
        )

    def _verification_bonus(self, verifications, provider_scores):
        bonus = 0.0
        counts = {}
        for v in verifications:
            if not v.is_active:
                continue
            weight = self.config.verification_weights.get(v.level)
            if weight is None:
                logger.warning(f"[HashScore] Unknown verification level {v.level!r} on {v.record_hash}")
                weight = 0
            bonus += weight * self._multiplier(provider_scores, v.verifier_id)
            counts[v.level] = counts.get(v.level, 0) + 1
        return min(bonus, self.config.max_verification_bonus), counts

    def _implicit_review_bonus(self, views, verifications, disputes, provider_scores, now):
        # Anyone who ever verified or disputed this hash gave an explicit review
        reviewers = {v.verifier_id for v in verifications} | {d.disputer_id for d in disputes}

        bonus = 0.0
        count = 0
        for view in views:
            if view.viewer_id in reviewers or view.viewed_at is None:
                continue
            days_since_view = days_between(view.viewed_at, now)
            if days_since_view < self.config.implicit_review_min_days:
                continue
            count += 1
            time_weight = self.config.implicit_time_weight(days_since_view)
            bonus += (
                self.config.implicit_review_points
                * time_weight
                * self._multiplier(provider_scores, view.viewer_id)
            )
        return min(bonus, self.config.max_implicit_bonus), count

    def _dispute_penalty(self, disputes, reactions, provider_scores):
        penalty = 0.0
        active = 0
        for d in disputes:
            if not d.is_active:
                continue
            active += 1
            if d.severity not in self.config.severity_weights:
                logger.warning(f"[HashScore] Unknown dispute severity {d.severity!r} on {d.record_hash}")
            if d.culpability not in self.config.culpability_multipliers:
                logger.warning(f"[HashScore] Unknown dispute culpability {d.culpability!r} on {d.record_hash}")
            severity_weight = self.config.severity_weights.get(d.severity, 0)
            culpability = self.config.culpability_multipliers.get(d.culpability, 1.0)
            base_penalty = severity_weight * culpability * self._multiplier(provider_scores, d.disputer_id)
            penalty += base_penalty * self.reaction_adjustment(reactions.get(d.id, []), provider_scores)
        return penalty, active

    def reaction_adjustment(self, reactions, provider_scores):
        """
        (supports + 1) / (supports + opposes + 1), reputation-weighted.
        1.0 for an unreacted dispute; tends to 0 but never reaches it.
        """
        supports = 0.0
        opposes = 0.0
        for r in reactions:
            if not r.is_active:
                continue
            weight = self._multiplier(provider_scores, r.reactor_id)
            if r.supports_dispute:
                supports += weight
            else:
                opposes += weight
        return (supports + 1) / (supports + opposes + 1)

    def _resolve_record_id(self, record_hash, verifications, disputes):
        for fact in list(verifications) + list(disputes):
            if fact.record_id:
                return fact.record_id
        existing = self.gateway.get_hash_score(record_hash)
        return existing.record_id if existing else ''
