"""
Celery tasks for the carbon credit pipeline
"""

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.db import DatabaseError

from .aggregation_service import ActivitySnapshot, AggregationService, unaggregated_activities
from .ranking_service import LeaderboardRankingJob

logger = logging.getLogger(__name__)


@shared_task(
    name="carbon.aggregate_activity",
    acks_late=True,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    max_retries=8,
)
def aggregate_activity(snapshot):
    """
    Apply a newly stored activity's credits to its owner and create its suggestion.

    DatabaseError is retried with backoff. Any other failure is acked by the
    worker and not redelivered; requeue_unaggregated_activities queues the
    activity again if its credits were never applied.

    Args:
        snapshot: ActivitySnapshot.as_dict() of the activity as written

    Returns:
        The AggregationOutcome value
    """
    activity_snapshot = ActivitySnapshot.from_dict(snapshot)
    try:
        outcome = AggregationService().aggregate(activity_snapshot)
    except Exception:
        logger.exception(f"Aggregation failed for activity {activity_snapshot.activity_id}")
        raise
    return outcome.value


@shared_task(name="carbon.requeue_unaggregated_activities")
def requeue_unaggregated_activities():
    """
    Scheduled by Celery beat (CARBON_AGGREGATION_SWEEP_INTERVAL_MINUTES).
    Queues aggregation for approved activities whose notification was lost.
    Safe to overlap with normal delivery: the increment is keyed by activity id.

    Returns:
        Number of activities queued
    """
    grace = timedelta(minutes=settings.CARBON_AGGREGATION_SWEEP_GRACE_MINUTES)
    queued = 0
    for activity in unaggregated_activities(grace).iterator():
        aggregate_activity.delay(ActivitySnapshot.from_activity(activity).as_dict())
        queued += 1

    if queued:
        logger.warning(f"Re-queued aggregation for {queued} activities without applied credits.")
    return queued


@shared_task(name="carbon.update_leaderboard_ranks")
def update_leaderboard_ranks():
    """
    Scheduled by Celery beat (LEADERBOARD_RANK_INTERVAL_MINUTES).
    A failed run keeps the previous ranks until the next tick.

    Returns:
        Number of ranked farmers
    """
    logger.info("Running scheduled job to update leaderboard ranks.")
    return LeaderboardRankingJob().run()
