import re

from rest_framework import serializers
from .models import Farmer

PHONE_PATTERN = re.compile(r'^\+?\d{7,14}$')

class FarmerSerializer(serializers.ModelSerializer):
    user_id = serializers.ReadOnlyField(source='user.id')

    class Meta:
        model = Farmer
        fields = [
            'id', 'user_id', 'full_name', 'farm_name', 'phone_number', 'location',
            'district', 'farm_size', 'unit_system', 'sms_notifications_enabled',
            'email_notifications_enabled', 'push_notifications_enabled',
            'total_carbon_credits', 'rank', 'created_at', 'updated_at'
        ]
        read_only_fields = ['total_carbon_credits', 'rank', 'created_at', 'updated_at', 'user_id']

    def validate_phone_number(self, value):
        if value and not PHONE_PATTERN.match(value):
            raise serializers.ValidationError("Phone number must contain 7-14 digits with an optional leading +")
        return value

    def validate(self, attrs):
        request = self.context.get('request')
        if self.instance is None and request is not None:
            if Farmer.objects.filter(user=request.user).exists():
                raise serializers.ValidationError("A farmer profile already exists for this user")
        return attrs

    def create(self, validated_data):
        validated_data['user'] = self.context['request'].user
        return super().create(validated_data)

class SimpleFarmerSerializer(serializers.ModelSerializer):
    """Public leaderboard view of a farmer"""
    user_id = serializers.ReadOnlyField(source='user.id')
    full_name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = Farmer
        fields = ['user_id', 'full_name', 'district', 'total_carbon_credits', 'rank']
