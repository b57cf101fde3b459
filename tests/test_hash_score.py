import dataclasses
import pytest
from types import SimpleNamespace

from credibility.models.score import HashScore
from credibility.scoring_config import ScoringConfig
from credibility.services.hash_score_service import HashScoreCalculator


def _reaction(reactor_id, supports, is_active=True):
    return SimpleNamespace(reactor_id=reactor_id, supports_dispute=supports, is_active=is_active)


class TestHashScoreBasics:
    def test_no_facts_returns_base(self, db_session, now):
        result = HashScoreCalculator().compute_hash_score('hash-empty', now=now)

        assert result.score == 50
        assert result.breakdown == {
            'base': 50,
            'verification_bonus': 0.0,
            'implicit_review_bonus': 0.0,
            'dispute_penalty': 0.0,
        }
        assert result.stats_json['active_verifications'] == 0
        assert result.stats_json['implicit_reviews'] == 0

    def test_empty_hash_rejected(self, db_session):
        with pytest.raises(ValueError):
            HashScoreCalculator().compute_hash_score('')

    def test_full_verification_from_neutral_verifier(self, facts, now):
        """One Full verification (25) at neutral reputation -> 75."""
        facts.verification(level='Full')

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.score == 75
        assert result.verification_bonus == 25.0
        assert result.stats_json['full_count'] == 1
        assert result.record_id == 'record-1'

    def test_reckless_major_dispute_with_one_opposing_reaction(self, facts, now):
        """45 penalty halved by one opposing reaction: 75 - 22.5 = 52.5 -> 53."""
        facts.verification(level='Full')
        dispute = facts.dispute(severity='Major', culpability='Reckless')
        facts.reaction(dispute, 'reactor-1', supports=False)

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.dispute_penalty == 22.5
        assert result.score == 53
        assert result.stats_json['active_disputes'] == 1

    def test_score_persisted_once_per_hash(self, facts, now):
        facts.verification()
        calc = HashScoreCalculator()
        calc.compute_hash_score('hash-1', now=now)
        calc.compute_hash_score('hash-1', now=now)

        assert HashScore.query.filter_by(record_hash='hash-1').count() == 1

    def test_recomputation_is_idempotent(self, facts, now):
        facts.verification(level='Content')
        facts.dispute(severity='Moderate', culpability='Systemic')
        facts.view('viewer-1', days_ago=40)

        calc = HashScoreCalculator()
        first = calc.compute_hash_score('hash-1', now=now).to_dict()
        second = calc.compute_hash_score('hash-1', now=now).to_dict()

        assert first == second


class TestVerificationBonus:
    def test_inactive_verification_ignored(self, facts, now):
        facts.verification(is_active=False)
        assert HashScoreCalculator().compute_hash_score('hash-1', now=now).score == 50

    def test_bonus_capped(self, facts, now):
        for i in range(3):
            facts.verification(verifier_id=f'verifier-{i}', level='Full')

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.verification_bonus == 50.0
        assert result.score == 100

    def test_adding_verification_never_decreases_score(self, facts, now):
        calc = HashScoreCalculator()
        facts.dispute(severity='Moderate', culpability='Preventable')
        previous = calc.compute_hash_score('hash-1', now=now).score

        for i, level in enumerate(['Provenance', 'Content', 'Full', 'Full', 'Provenance']):
            facts.verification(verifier_id=f'verifier-{i}', level=level)
            current = calc.compute_hash_score('hash-1', now=now).score
            assert current >= previous
            previous = current

    def test_high_reputation_verifier_weighs_more(self, facts, now):
        facts.user_score('verifier-1', 100)
        facts.verification(level='Full')

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        # 25 * 1.5 = 37.5 -> 87.5 -> 88
        assert result.score == 88

    def test_unknown_level_weighs_nothing(self, facts, now):
        facts.verification(level='Sideways')
        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)
        assert result.score == 50


class TestImplicitReviews:
    def test_view_needs_cooling_off_period(self, facts, now):
        facts.view('viewer-1', days_ago=3)
        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)
        assert result.score == 50
        assert result.stats_json['implicit_reviews'] == 0

    def test_time_weights(self, facts, now):
        facts.view('viewer-1', days_ago=10)   # 3 * 1.0
        facts.view('viewer-2', days_ago=45)   # 3 * 1.5
        facts.view('viewer-3', days_ago=120)  # 3 * 2.0

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.implicit_review_bonus == 13.5
        assert result.score == 64  # 63.5 rounds up
        assert result.stats_json['implicit_reviews'] == 3

    def test_reviewers_excluded(self, facts, now):
        facts.verification(verifier_id='verifier-1', is_active=False)
        facts.dispute(disputer_id='disputer-1', is_active=False)
        facts.view('verifier-1', days_ago=20)
        facts.view('disputer-1', days_ago=20)

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.stats_json['implicit_reviews'] == 0
        assert result.score == 50

    def test_bonus_capped(self, facts, now):
        for i in range(10):
            facts.view(f'viewer-{i}', days_ago=100)

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.implicit_review_bonus == 20.0
        assert result.score == 70

    def test_view_only_hash_keeps_given_record(self, facts, now):
        facts.view('viewer-1', days_ago=10, record_hash='hash-views')
        result = HashScoreCalculator().compute_hash_score('hash-views', record_id='record-9', now=now)
        assert result.record_id == 'record-9'


class TestDisputePenalty:
    def test_unreacted_dispute_applies_full_penalty(self, facts, now):
        facts.verification(level='Full')
        facts.dispute(severity='Moderate', culpability='Preventable')

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.dispute_penalty == 15.0
        assert result.score == 60

    def test_deactivating_disputes_restores_bonuses_only(self, facts, db_session, now):
        facts.verification(level='Full')
        facts.view('viewer-1', days_ago=10)
        d1 = facts.dispute(disputer_id='disputer-1')
        d2 = facts.dispute(disputer_id='disputer-2', severity='Negligible', culpability='Intentional')

        calc = HashScoreCalculator()
        assert calc.compute_hash_score('hash-1', now=now).score < 78

        d1.is_active = False
        d2.is_active = False
        db_session.commit()

        result = calc.compute_hash_score('hash-1', now=now)
        assert result.dispute_penalty == 0.0
        assert result.score == 78

    def test_penalties_sum_and_clamp_at_zero(self, facts, now):
        for i in range(5):
            facts.dispute(disputer_id=f'disputer-{i}', severity='Major', culpability='Intentional')

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.dispute_penalty == 300.0
        assert result.score == 0

    def test_supporting_reactions_keep_penalty(self, facts, now):
        dispute = facts.dispute(severity='Moderate', culpability='Preventable')
        facts.reaction(dispute, 'reactor-1', supports=True)
        facts.reaction(dispute, 'reactor-2', supports=True)

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.dispute_penalty == 15.0

    def test_inactive_reactions_ignored(self, facts, now):
        dispute = facts.dispute(severity='Moderate', culpability='Preventable')
        facts.reaction(dispute, 'reactor-1', supports=False, is_active=False)

        result = HashScoreCalculator().compute_hash_score('hash-1', now=now)

        assert result.dispute_penalty == 15.0


class TestReactionAdjustment:
    def test_unreacted_is_one(self, app):
        assert HashScoreCalculator().reaction_adjustment([], {}) == 1.0

    def test_ten_opposes_never_reaches_zero(self, app):
        reactions = [_reaction(f'r-{i}', supports=False) for i in range(10)]
        adjustment = HashScoreCalculator().reaction_adjustment(reactions, {})
        assert adjustment == 1 / 11
        assert adjustment > 0

    def test_reputation_weighted(self, app):
        calc = HashScoreCalculator()
        reactions = [_reaction('trusted', supports=False)]
        # multiplier 1.5 -> 1 / 2.5
        assert calc.reaction_adjustment(reactions, {'trusted': 100}) == 1 / 2.5


class TestCustomConfig:
    def test_alternate_base_score(self, facts, now):
        config = dataclasses.replace(ScoringConfig(), base_score=40.0)
        facts.verification(level='Provenance')

        result = HashScoreCalculator(config).compute_hash_score('hash-1', now=now)

        assert result.score == 50
        assert result.base_score == 40.0

    def test_calculation_version_stamped(self, facts, now):
        config = dataclasses.replace(ScoringConfig(), calculation_version=3)
        result = HashScoreCalculator(config).compute_hash_score('hash-1', now=now)
        assert result.calculation_version == 3
