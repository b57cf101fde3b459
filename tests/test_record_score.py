from datetime import timedelta

from credibility.models.score import RecordScore
from credibility.services.record_score_service import RecordScoreAggregator


class TestRecordScore:
    def test_no_hash_scores_returns_base(self, db_session, now):
        result = RecordScoreAggregator().compute_record_score('record-empty', now=now)

        assert result.score == 50
        assert result.hash_count == 0
        assert RecordScore.query.filter_by(record_id='record-empty').count() == 1

    def test_single_hash(self, facts, now):
        facts.hash_score('hash-1', 72)
        assert RecordScoreAggregator().compute_record_score('record-1', now=now).score == 72

    def test_recent_hash_dominates(self, facts, now):
        """80 today (weight 1.0) and 20 a year stale (weight 0.5) -> 60, not the naive 50."""
        facts.hash_score('hash-new', 80)
        facts.hash_score('hash-old', 20, days_stale=365)

        result = RecordScoreAggregator().compute_record_score('record-1', now=now)

        assert result.score == 60
        assert result.hash_count == 2

    def test_other_records_ignored(self, facts, now):
        facts.hash_score('hash-1', 90)
        facts.hash_score('hash-2', 10, record_id='record-2')

        assert RecordScoreAggregator().compute_record_score('record-1', now=now).score == 90

    def test_active_subject_count(self, facts, now):
        facts.membership('subject-1', role='subject')
        facts.membership('subject-2', role='subject')
        facts.membership('subject-3', role='subject', is_active=False)
        facts.membership('owner-1', role='owner')

        result = RecordScoreAggregator().compute_record_score('record-1', now=now)

        assert result.active_subject_count == 2

    def test_recency_weight(self, app, now):
        aggregator = RecordScoreAggregator()
        assert aggregator.recency_weight(now, now) == 1.0
        assert aggregator.recency_weight(now - timedelta(days=365), now) == 0.5
        # future timestamps never weigh more than fresh ones
        assert aggregator.recency_weight(now + timedelta(days=10), now) == 1.0

    def test_overwrites_previous_snapshot(self, facts, now):
        aggregator = RecordScoreAggregator()
        facts.hash_score('hash-1', 40)
        aggregator.compute_record_score('record-1', now=now)
        facts.hash_score('hash-2', 60)
        result = aggregator.compute_record_score('record-1', now=now)

        assert result.score == 50
        assert RecordScore.query.filter_by(record_id='record-1').count() == 1
