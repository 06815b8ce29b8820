from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

class Farmer(models.Model):
    """
    Farmer profile and carbon credit rollup.

    total_carbon_credits is only changed by the aggregation service (atomic
    increment) and rank only by the leaderboard ranking job.
    """
    UNIT_SYSTEM_CHOICES = [
        ('metric', 'Metric'),
        ('imperial', 'Imperial'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='farmer_profile')
    full_name = models.CharField(max_length=255, blank=True)
    farm_name = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=15, blank=True)
    location = models.CharField(max_length=255, blank=True)
    district = models.CharField(max_length=255, blank=True)
    farm_size = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Farm size in acres"
    )
    unit_system = models.CharField(max_length=10, choices=UNIT_SYSTEM_CHOICES, default='metric')
    sms_notifications_enabled = models.BooleanField(default=False)
    email_notifications_enabled = models.BooleanField(default=True)
    push_notifications_enabled = models.BooleanField(default=False)
    # Carbon credit rollup
    total_carbon_credits = models.FloatField(default=0, db_index=True)
    rank = models.PositiveIntegerField(null=True, blank=True, help_text="Leaderboard position, 1 = most credits")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name or self.user.username

    @property
    def display_name(self):
        return self.full_name or self.user.get_username()
