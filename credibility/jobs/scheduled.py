import logging

logger = logging.getLogger(__name__)


def _score_sweep_job(app):
    with app.app_context():
        logger.info("[Job] Starting score sweep")
        from credibility.pipeline.orchestrator import run_sweep
        results = run_sweep()
        logger.info(f"[Job] Score sweep: {results}")


def _upsert_job(scheduler, **kwargs):
    scheduler.add_job(replace_existing=True, **kwargs)


def register_jobs(scheduler, app):
    """Register all scheduled jobs."""
    _upsert_job(
        scheduler,
        id='score_sweep',
        func=_score_sweep_job,
        trigger='cron',
        args=[app],
        hour=app.config.get('SWEEP_HOUR', 3),
        minute=app.config.get('SWEEP_MINUTE', 15),
        misfire_grace_time=3600,
        coalesce=True,
        max_instances=1,
    )

    logger.info("All scheduled jobs registered")
