import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from sqlalchemy.exc import SQLAlchemyError
from credibility.extensions import db
from credibility.models.score import SCORE_TRIGGERS
from credibility.scoring_config import scoring_config_from_app
from credibility.services.hash_score_service import HashScoreCalculator
from credibility.services.record_score_service import RecordScoreAggregator
from credibility.services.store_gateway import ScoreStoreGateway
from credibility.services.user_score_service import UserScoreCalculator
from credibility.utils.locks import KeyedLocks

logger = logging.getLogger(__name__)

# Same-key recalculations are serialized; different keys run in parallel.
_key_locks = KeyedLocks()


class RecalculationError(RuntimeError):
    """The store failed part-way through a recalculation. Safe to retry."""

    def __init__(self, step, message):
        super().__init__(f"{step} step failed: {message}")
        self.step = step


@dataclass
class RecalculationResult:
    hash_score: object
    record_score: object
    user_score: object
    trigger: str

    def to_dict(self):
        return {
            'trigger': self.trigger,
            'hash_score': self.hash_score.to_dict(),
            'record_score': self.record_score.to_dict(),
            'user_score': self.user_score.to_dict(),
        }


def _build_calculators(config=None):
    config = config or scoring_config_from_app()
    gateway = ScoreStoreGateway(config.provider_partition_size)
    return (
        HashScoreCalculator(config, gateway),
        RecordScoreAggregator(config, gateway),
        UserScoreCalculator(config, gateway),
    )


def _run_step(step, lock_key, func, *args, **kwargs):
    with _key_locks.hold(lock_key):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"[Recalc] {step} failed for {lock_key}: {e}", exc_info=True)
            db.session.rollback()
            raise RecalculationError(step, str(e)) from e


def recalculate(record_hash, record_id, triggering_user_id, trigger='manual', now=None, config=None):
    """
    Recompute hash -> record -> user for one triggering event.

    Each step commits before the next starts. If a step fails the remaining
    steps are skipped and RecalculationError is raised; already committed
    steps stay, and re-running the whole call is safe.

    Users whose provider scores were read while scoring the hash are not
    recomputed here; the scheduled sweep brings them up to date.
    """
    if trigger not in SCORE_TRIGGERS:
        raise ValueError(f"Invalid trigger: {trigger}")
    missing = [name for name, value in (
        ('record_hash', record_hash),
        ('record_id', record_id),
        ('user_id', triggering_user_id),
    ) if not value]
    if missing:
        raise ValueError(f"Missing fields: {missing}")

    now = now or datetime.now(timezone.utc)
    hash_calc, record_calc, user_calc = _build_calculators(config)

    logger.info(f"[Recalc] {trigger}: hash={record_hash} record={record_id} user={triggering_user_id}")

    hash_score = _run_step(
        'hash', f'hash:{record_hash}',
        hash_calc.compute_hash_score, record_hash, record_id=record_id, now=now,
    )
    record_score = _run_step(
        'record', f'record:{record_id}',
        record_calc.compute_record_score, record_id, now=now,
    )
    user_score = _run_step(
        'user', f'user:{triggering_user_id}',
        user_calc.compute_user_score, triggering_user_id, trigger=trigger, now=now,
    )

    logger.info(
        f"[Recalc] Complete: hash={hash_score.score} record={record_score.score} "
        f"user={user_score.credibility_score}"
    )
    return RecalculationResult(hash_score, record_score, user_score, trigger)


def run_sweep(now=None, config=None):
    """
    Recompute every known hash, then every record, then every user.
    A failure on one key is logged and counted; the sweep moves on.
    """
    now = now or datetime.now(timezone.utc)
    hash_calc, record_calc, user_calc = _build_calculators(config)
    gateway = hash_calc.gateway
    results = {'hashes': 0, 'records': 0, 'users': 0, 'errors': 0}

    logger.info("=== Score sweep starting ===")

    for record_hash in gateway.list_record_hashes():
        try:
            _run_step(
                'hash', f'hash:{record_hash}',
                hash_calc.compute_hash_score, record_hash,
                record_id=gateway.record_id_for_hash(record_hash) or None, now=now,
            )
            results['hashes'] += 1
        except RecalculationError as e:
            logger.error(f"[Sweep] {e}")
            results['errors'] += 1

    for record_id in gateway.list_record_ids():
        try:
            _run_step('record', f'record:{record_id}', record_calc.compute_record_score, record_id, now=now)
            results['records'] += 1
        except RecalculationError as e:
            logger.error(f"[Sweep] {e}")
            results['errors'] += 1

    for user_id in gateway.list_user_ids():
        try:
            _run_step(
                'user', f'user:{user_id}',
                user_calc.compute_user_score, user_id, trigger='scheduled', now=now,
            )
            results['users'] += 1
        except RecalculationError as e:
            logger.error(f"[Sweep] {e}")
            results['errors'] += 1

    logger.info(f"=== Score sweep complete: {results} ===")
    return results
