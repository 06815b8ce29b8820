import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .choices import ACTIVITY_STATUS_CHOICES, PENDING, APPROVED


class Activity(models.Model):
    """A farmer's claimed climate-smart practice, scored in carbon credits (kg CO2e)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='activities'
    )
    activity_type = models.CharField(max_length=100)
    area = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Area in acres where the practice was applied"
    )
    pesticide_used = models.CharField(max_length=255, null=True, blank=True)
    pesticide_amount = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Litres of pesticide used"
    )
    notes = models.TextField(null=True, blank=True)
    photo_urls = models.JSONField(default=list, blank=True, help_text="Up to 3 evidence photos as data URIs")
    status = models.CharField(
        max_length=10,
        choices=ACTIVITY_STATUS_CHOICES,
        default=PENDING,
        db_index=True
    )
    # Scoring result, stored exactly as estimated
    calculated_credits = models.FloatField(null=True, blank=True)
    reward_points = models.FloatField(null=True, blank=True)
    advice = models.TextField(null=True, blank=True)
    climate_impact_analysis = models.TextField(null=True, blank=True)
    verification_details = models.TextField(null=True, blank=True)
    pesticide_analysis = models.TextField(null=True, blank=True)
    proper_use_advice = models.TextField(null=True, blank=True)
    used_fallback = models.BooleanField(default=False)
    verified_at = models.DateTimeField(null=True, blank=True, help_text="Set when a verifier approved a pending activity")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = "Activities"

    def __str__(self):
        return f"{self.activity_type} by {self.user_id} - {self.status}"

    @property
    def is_aggregatable(self):
        return self.status == APPROVED and bool(self.calculated_credits)


class CreditAggregation(models.Model):
    """
    Marker for an activity whose credits were added to the owner's total.

    Written in the same transaction as the increment; the one-to-one key on
    the activity makes a redelivered aggregation skip the increment.
    """
    activity = models.OneToOneField(
        Activity,
        on_delete=models.PROTECT,
        primary_key=True,
        related_name='aggregation'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='credit_aggregations'
    )
    credits = models.FloatField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"+{self.credits} for activity {self.activity_id}"


class Suggestion(models.Model):
    """Advisory note created once per aggregated activity."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='suggestions'
    )
    related_activity = models.OneToOneField(
        Activity,
        on_delete=models.PROTECT,
        related_name='suggestion'
    )
    suggestion_text = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Suggestion for activity {self.related_activity_id}"
