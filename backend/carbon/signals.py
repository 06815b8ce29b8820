import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from .aggregation_service import ActivitySnapshot
from .models import Activity

logger = logging.getLogger(__name__)


def enqueue_aggregation(activity):
    """
    Queue aggregation for the activity as written, once the write commits.

    A failed publish is logged and does not fail the write; the activity is
    picked up by requeue_unaggregated_activities instead.
    """
    from .tasks import aggregate_activity

    snapshot = ActivitySnapshot.from_activity(activity)

    def publish():
        aggregate_activity.delay(snapshot.as_dict())

    transaction.on_commit(publish, robust=True)
    logger.info(f"Aggregation queued for activity {activity.id}")


@receiver(post_save, sender=Activity, dispatch_uid='carbon.activity_created')
def on_activity_created(sender, instance, created, **kwargs):
    if created:
        enqueue_aggregation(instance)
