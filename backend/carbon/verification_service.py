import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .choices import PENDING, APPROVED
from .models import Activity
from .signals import enqueue_aggregation

logger = logging.getLogger(__name__)


class VerificationError(Exception):
    def __init__(self, message, not_found=False):
        super().__init__(message)
        self.not_found = not_found


class ActivityVerificationService:
    """Manual approval of activities still waiting for review"""

    def approve_activity(self, activity_id, verifier=None):
        with transaction.atomic():
            try:
                activity = Activity.objects.select_for_update().get(pk=activity_id)
            except (Activity.DoesNotExist, ValidationError, ValueError):
                raise VerificationError("Activity not found", not_found=True)

            if activity.status != PENDING:
                raise VerificationError(f"Activity is {activity.status}, only Pending activities can be approved")

            activity.status = APPROVED
            activity.verified_at = timezone.now()
            activity.save(update_fields=['status', 'verified_at'])

            # Admin approvals are not aggregated unless explicitly enabled
            if settings.CARBON_AGGREGATE_ADMIN_APPROVALS:
                enqueue_aggregation(activity)

        logger.info(
            f"Activity {activity.id} approved by {getattr(verifier, 'username', 'system')}"
        )
        return activity
