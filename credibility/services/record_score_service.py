import logging
from datetime import datetime, timezone
from credibility.scoring_config import ScoringConfig
from credibility.services.store_gateway import ScoreStoreGateway
from credibility.utils.scoring import clamp_score, days_between, round_half_up

logger = logging.getLogger(__name__)


class RecordScoreAggregator:
    """Recency-weighted average of every hash score belonging to a record."""

    def __init__(self, config=None, gateway=None):
        self.config = config or ScoringConfig()
        self.gateway = gateway or ScoreStoreGateway(self.config.provider_partition_size)

    def recency_weight(self, last_calculated, now):
        # computed now -> 1.0, a year stale -> 0.5
        days_since = max(0.0, days_between(last_calculated, now))
        return 1 / (1 + days_since / self.config.record_recency_days)

    def compute_record_score(self, record_id, now=None):
        if not record_id:
            raise ValueError('record_id is required')
        now = now or datetime.now(timezone.utc)

        hash_scores = self.gateway.get_hash_scores(record_id)

        weighted_sum = 0.0
        total_weight = 0.0
        for hash_score in hash_scores:
            weight = self.recency_weight(hash_score.last_calculated, now)
            weighted_sum += hash_score.score * weight
            total_weight += weight

        if total_weight > 0:
            score = round_half_up(clamp_score(weighted_sum / total_weight))
        else:
            score = round_half_up(clamp_score(self.config.base_score))

        active_subjects = self.gateway.get_active_subjects(record_id)

        record_score = self.gateway.put_record_score(
            record_id,
            score=score,
            hash_count=len(hash_scores),
            active_subject_count=active_subjects,
            calculation_version=self.config.calculation_version,
            last_calculated=now,
        )
        logger.info(f"[RecordScore] {record_id}: {score} from {len(hash_scores)} hashes")
        return record_score
