import re

from rest_framework import serializers

from .choices import MAX_ACTIVITY_PHOTOS
from .models import Activity, Suggestion

DATA_URI_PATTERN = re.compile(r'data:[\w.+-]+/[\w.+-]+;base64,[A-Za-z0-9+/]+={0,2}')


class ActivitySubmissionSerializer(serializers.Serializer):
    """Input for a new activity; the owner comes from the authenticated user"""
    activity_type = serializers.CharField(max_length=100)
    area = serializers.FloatField(required=False, allow_null=True, min_value=0)
    pesticide_used = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    pesticide_amount = serializers.FloatField(required=False, allow_null=True, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    photos = serializers.ListField(
        child=serializers.CharField(trim_whitespace=False),
        required=False,
        max_length=MAX_ACTIVITY_PHOTOS,
        default=list
    )

    def validate_activity_type(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Activity type is required")
        return value

    def validate_photos(self, value):
        photos = [photo for photo in value if photo]
        for photo in photos:
            if not DATA_URI_PATTERN.fullmatch(photo):
                raise serializers.ValidationError("Photos must be base64 data URIs (data:<mime>;base64,...)")
        return photos


class CarbonCreditResultSerializer(serializers.Serializer):
    """Scoring result returned to the submitter"""
    estimatedCO2SavedKg = serializers.FloatField(source='estimated_co2_saved_kg')
    rewardPoints = serializers.FloatField(source='reward_points')
    reductionAdvice = serializers.CharField(source='reduction_advice')
    climateImpactAnalysis = serializers.CharField(source='climate_impact_analysis', allow_null=True)
    isApproved = serializers.BooleanField(source='is_approved')
    verificationDetails = serializers.CharField(source='verification_details')
    pesticideAnalysis = serializers.CharField(source='pesticide_analysis')
    properUseAdvice = serializers.CharField(source='proper_use_advice')


class ActivitySerializer(serializers.ModelSerializer):
    user_id = serializers.ReadOnlyField(source='user.id')

    class Meta:
        model = Activity
        fields = [
            'id', 'user_id', 'activity_type', 'area', 'pesticide_used', 'pesticide_amount',
            'notes', 'photo_urls', 'status', 'calculated_credits', 'reward_points', 'advice',
            'climate_impact_analysis', 'verification_details', 'pesticide_analysis',
            'proper_use_advice', 'used_fallback', 'verified_at', 'created_at'
        ]
        read_only_fields = fields


class SimpleActivitySerializer(serializers.ModelSerializer):
    """Activity listing without the photo payloads"""
    user_id = serializers.ReadOnlyField(source='user.id')
    photo_count = serializers.SerializerMethodField()

    class Meta:
        model = Activity
        fields = [
            'id', 'user_id', 'activity_type', 'area', 'status', 'calculated_credits',
            'advice', 'photo_count', 'created_at'
        ]

    def get_photo_count(self, obj):
        return len(obj.photo_urls or [])


class SuggestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Suggestion
        fields = ['id', 'related_activity', 'suggestion_text', 'is_read', 'created_at']
        read_only_fields = fields
