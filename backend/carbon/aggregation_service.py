import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from farmers.models import Farmer
from .choices import APPROVED, GENERIC_SUGGESTION_TEXT
from .models import Activity, CreditAggregation, Suggestion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivitySnapshot:
    """An activity as it was written, carried by the aggregation notification"""
    activity_id: str
    user_id: int
    status: str
    calculated_credits: Optional[float] = None
    climate_impact_analysis: Optional[str] = None

    @classmethod
    def from_activity(cls, activity):
        return cls(
            activity_id=str(activity.id),
            user_id=activity.user_id,
            status=activity.status,
            calculated_credits=activity.calculated_credits,
            climate_impact_analysis=activity.climate_impact_analysis,
        )

    @classmethod
    def from_dict(cls, data):
        return cls(**data)

    def as_dict(self):
        return asdict(self)


class AggregationOutcome(str, Enum):
    SKIPPED = 'skipped'
    APPLIED = 'applied'
    ALREADY_APPLIED = 'already_applied'


class AggregationService:
    """
    Folds an approved activity's credits into its owner's running total and
    leaves one suggestion for it.

    Safe under at-least-once delivery: the increment is keyed by activity id
    through CreditAggregation, so a redelivered notification only retries
    whatever did not complete the first time.
    """

    def aggregate(self, snapshot: ActivitySnapshot) -> AggregationOutcome:
        if snapshot.status != APPROVED or not snapshot.calculated_credits:
            logger.warning(
                f"Activity {snapshot.activity_id} is not approved or has no credits "
                f"(status={snapshot.status}, credits={snapshot.calculated_credits}). Skipping aggregation."
            )
            return AggregationOutcome.SKIPPED

        applied = self.apply_credits(snapshot)
        self.create_suggestion(snapshot)

        return AggregationOutcome.APPLIED if applied else AggregationOutcome.ALREADY_APPLIED

    def apply_credits(self, snapshot: ActivitySnapshot) -> bool:
        """Increment the owner's total once per activity. Returns False if already applied."""
        try:
            with transaction.atomic():
                CreditAggregation.objects.create(
                    activity_id=snapshot.activity_id,
                    user_id=snapshot.user_id,
                    credits=snapshot.calculated_credits,
                )
                farmer, created = Farmer.objects.get_or_create(user_id=snapshot.user_id)
                if created:
                    logger.info(f"Created farmer profile {farmer.id} for user {snapshot.user_id}")
                # Server-side increment, no read-modify-write
                Farmer.objects.filter(pk=farmer.pk).update(
                    total_carbon_credits=F('total_carbon_credits') + snapshot.calculated_credits
                )
        except IntegrityError:
            if CreditAggregation.objects.filter(activity_id=snapshot.activity_id).exists():
                logger.info(f"Credits for activity {snapshot.activity_id} were already applied")
                return False
            raise

        logger.info(f"User {snapshot.user_id} credits incremented by {snapshot.calculated_credits}.")
        return True

    def create_suggestion(self, snapshot: ActivitySnapshot) -> Suggestion:
        suggestion, created = Suggestion.objects.get_or_create(
            related_activity_id=snapshot.activity_id,
            defaults={
                'user_id': snapshot.user_id,
                'suggestion_text': snapshot.climate_impact_analysis or GENERIC_SUGGESTION_TEXT,
            }
        )
        if created:
            logger.info(f"Suggestion created for activity {snapshot.activity_id}.")
        return suggestion


def unaggregated_activities(grace=None):
    """
    Approved, credited activities that have no CreditAggregation marker yet.

    Activities approved by a verifier are only included when
    CARBON_AGGREGATE_ADMIN_APPROVALS is on. ``grace`` leaves recent activities
    to the on-commit trigger.
    """
    queryset = Activity.objects.filter(
        status=APPROVED,
        calculated_credits__gt=0,
        aggregation__isnull=True,
    )
    if not settings.CARBON_AGGREGATE_ADMIN_APPROVALS:
        queryset = queryset.filter(verified_at__isnull=True)
    if grace is not None:
        queryset = queryset.filter(created_at__lte=timezone.now() - grace)
    return queryset.order_by('created_at')
