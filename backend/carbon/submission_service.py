import logging
from dataclasses import dataclass

from asgiref.sync import sync_to_async
from django.db import transaction

from .choices import APPROVED
from .external.inference_gateway import InferenceGateway, PromptKind, fallback_for
from .models import Activity

logger = logging.getLogger(__name__)

# Photo slots in the order the gateway prompt expects them
PHOTO_SLOTS = ('activityPhotoUrl', 'cropPhotoUrl', 'pesticidePhotoUrl')


@dataclass
class SubmissionResult:
    activity: Activity
    estimate: dict
    used_fallback: bool

    @property
    def activity_id(self):
        return self.activity.id


def build_carbon_credit_request(user, data):
    """Gateway input for a carbon credit estimate, from validated submission data"""
    photos = list(data.get('photos') or [])
    request = {
        'userId': str(user.pk),
        'activityType': data['activity_type'],
        'area': data.get('area'),
        'pesticideUsed': data.get('pesticide_used'),
        'pesticideAmount': data.get('pesticide_amount'),
        'notes': data.get('notes'),
    }
    for slot, photo in zip(PHOTO_SLOTS, photos):
        request[slot] = photo
    return {key: value for key, value in request.items() if value not in (None, '')}


class ActivitySubmissionService:
    """
    Turns a farmer's submission into a scored, persisted activity.

    Scoring is a single gateway call; any failure falls back to a fixed
    estimate so the farmer is always credited. The activity is always stored
    as Approved. Only the persisted activity is returned to the caller.
    """

    def __init__(self, gateway=None):
        self.gateway = gateway or InferenceGateway()

    async def estimate(self, user, data):
        """Phase 1: score the activity. Returns (estimate, used_fallback)."""
        try:
            estimate = await self.gateway.infer(
                PromptKind.CARBON_CREDITS,
                build_carbon_credit_request(user, data)
            )
            return estimate, False
        except Exception as e:
            logger.warning(
                f"Carbon credit inference failed for user {user.pk} "
                f"({data.get('activity_type')}), using fallback estimate: {e}"
            )
            return fallback_for(PromptKind.CARBON_CREDITS), True

    async def submit(self, user, data):
        estimate, used_fallback = await self.estimate(user, data)

        # Phase 2: the stored activity is the source of truth
        @sync_to_async
        def persist_activity():
            with transaction.atomic():
                return Activity.objects.create(
                    user=user,
                    activity_type=data['activity_type'],
                    area=data.get('area'),
                    pesticide_used=data.get('pesticide_used') or None,
                    pesticide_amount=data.get('pesticide_amount'),
                    notes=data.get('notes') or None,
                    photo_urls=list(data.get('photos') or []),
                    status=APPROVED,
                    calculated_credits=estimate['estimated_co2_saved_kg'],
                    reward_points=estimate.get('reward_points'),
                    advice=estimate['reduction_advice'],
                    climate_impact_analysis=estimate.get('climate_impact_analysis') or None,
                    verification_details=estimate.get('verification_details'),
                    pesticide_analysis=estimate.get('pesticide_analysis'),
                    proper_use_advice=estimate.get('proper_use_advice'),
                    used_fallback=used_fallback,
                )

        activity = await persist_activity()
        logger.info(
            f"Activity {activity.id} stored for user {user.pk}: "
            f"{activity.calculated_credits} credits{' (fallback)' if used_fallback else ''}"
        )
        return SubmissionResult(activity=activity, estimate=estimate, used_fallback=used_fallback)
