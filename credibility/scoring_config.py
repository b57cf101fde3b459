"""
Scoring configuration.

Every weight, cap and multiplier used by the calculators lives here, in one
frozen structure handed to each calculator at construction. Tests build
alternate configs with ``dataclasses.replace``.
"""
from dataclasses import dataclass, field
from types import MappingProxyType

from credibility.utils.scoring import clamp_score

DEFAULT_VERIFICATION_WEIGHTS = {'Provenance': 10, 'Content': 15, 'Full': 25}
DEFAULT_SEVERITY_WEIGHTS = {'Negligible': 5, 'Moderate': 15, 'Major': 30}
DEFAULT_CULPABILITY_MULTIPLIERS = {
    'NoFault': 0.5,
    'Systemic': 0.75,
    'Preventable': 1.0,
    'Reckless': 1.5,
    'Intentional': 2.0,
}

# (upper bound in days, weight); views older than the last bound get IMPLICIT_WEIGHT_OLDEST
DEFAULT_IMPLICIT_TIME_WEIGHTS = ((30, 1.0), (90, 1.5))
IMPLICIT_WEIGHT_OLDEST = 2.0


def _frozen(mapping):
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ScoringConfig:
    base_score: float = 50.0
    max_verification_bonus: float = 50.0
    max_implicit_bonus: float = 20.0
    verification_weights: MappingProxyType = field(
        default_factory=lambda: _frozen(DEFAULT_VERIFICATION_WEIGHTS))
    severity_weights: MappingProxyType = field(
        default_factory=lambda: _frozen(DEFAULT_SEVERITY_WEIGHTS))
    culpability_multipliers: MappingProxyType = field(
        default_factory=lambda: _frozen(DEFAULT_CULPABILITY_MULTIPLIERS))
    implicit_review_points: float = 3.0
    implicit_review_min_days: int = 7
    implicit_time_weights: tuple = DEFAULT_IMPLICIT_TIME_WEIGHTS
    implicit_weight_oldest: float = IMPLICIT_WEIGHT_OLDEST

    provider_multiplier_min: float = 0.5
    provider_multiplier_max: float = 1.5
    neutral_provider_score: float = 50.0
    provider_partition_size: int = 30

    record_recency_days: float = 365.0

    verification_accuracy_weight: float = 10.0
    dispute_accuracy_weight: float = 10.0
    identity_bonus: float = 5.0
    verified_provider_bonus: float = 10.0
    flag_penalty: float = 5.0

    calculation_version: int = 1

    def __post_init__(self):
        # Accept plain dicts from callers but never expose a mutable table
        for name in ('verification_weights', 'severity_weights', 'culpability_multipliers'):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, _frozen(value))
        if self.provider_partition_size < 1:
            raise ValueError('provider_partition_size must be positive')

    @classmethod
    def from_mapping(cls, config):
        """Build from a Flask config (or any mapping) using SCORE_* keys."""
        defaults = cls()
        return cls(
            base_score=float(config.get('SCORE_BASE', defaults.base_score)),
            max_verification_bonus=float(
                config.get('SCORE_MAX_VERIFICATION_BONUS', defaults.max_verification_bonus)),
            max_implicit_bonus=float(config.get('SCORE_MAX_IMPLICIT_BONUS', defaults.max_implicit_bonus)),
            verification_weights=config.get('SCORE_VERIFICATION_WEIGHTS', defaults.verification_weights),
            severity_weights=config.get('SCORE_SEVERITY_WEIGHTS', defaults.severity_weights),
            culpability_multipliers=config.get(
                'SCORE_CULPABILITY_MULTIPLIERS', defaults.culpability_multipliers),
            implicit_review_points=float(
                config.get('SCORE_IMPLICIT_REVIEW_POINTS', defaults.implicit_review_points)),
            implicit_review_min_days=int(
                config.get('SCORE_IMPLICIT_REVIEW_MIN_DAYS', defaults.implicit_review_min_days)),
            provider_multiplier_min=float(
                config.get('SCORE_PROVIDER_MULTIPLIER_MIN', defaults.provider_multiplier_min)),
            provider_multiplier_max=float(
                config.get('SCORE_PROVIDER_MULTIPLIER_MAX', defaults.provider_multiplier_max)),
            neutral_provider_score=float(config.get('SCORE_NEUTRAL_PROVIDER', defaults.neutral_provider_score)),
            provider_partition_size=int(
                config.get('SCORE_PROVIDER_PARTITION_SIZE', defaults.provider_partition_size)),
            verification_accuracy_weight=float(
                config.get('SCORE_VERIFICATION_ACCURACY_WEIGHT', defaults.verification_accuracy_weight)),
            dispute_accuracy_weight=float(
                config.get('SCORE_DISPUTE_ACCURACY_WEIGHT', defaults.dispute_accuracy_weight)),
            identity_bonus=float(config.get('SCORE_IDENTITY_BONUS', defaults.identity_bonus)),
            verified_provider_bonus=float(
                config.get('SCORE_VERIFIED_PROVIDER_BONUS', defaults.verified_provider_bonus)),
            flag_penalty=float(config.get('SCORE_FLAG_PENALTY', defaults.flag_penalty)),
            calculation_version=int(config.get('SCORE_CALCULATION_VERSION', defaults.calculation_version)),
        )

    def provider_multiplier(self, score):
        """
        Map a 0-100 reputation onto a weighting multiplier.
        Linear: 0 -> provider_multiplier_min, 100 -> provider_multiplier_max.
        With the defaults a neutral 50 maps to exactly 1.0.
        """
        if score is None:
            score = self.neutral_provider_score
        score = clamp_score(float(score))
        span = self.provider_multiplier_max - self.provider_multiplier_min
        return self.provider_multiplier_min + span * score / 100.0

    def implicit_time_weight(self, days_since_view):
        for upper_days, weight in self.implicit_time_weights:
            if days_since_view < upper_days:
                return weight
        return self.implicit_weight_oldest


def scoring_config_from_app(app=None):
    """ScoringConfig for the given (or current) Flask app."""
    if app is None:
        from flask import current_app
        app = current_app
    return ScoringConfig.from_mapping(app.config)
