from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()

class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'phone_number', 'role', 'is_active')
        read_only_fields = fields

class UserRegistrationSerializer(serializers.ModelSerializer):
    """Self-service sign-up; the role is always FARMER, verifiers are promoted by an admin."""
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'password', 'phone_number', 'role')
        read_only_fields = ('id', 'role')

    def create(self, validated_data):
        return User.objects.create_user(role='FARMER', **validated_data)
