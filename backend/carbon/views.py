import logging

from asgiref.sync import async_to_sync
from django.db import DatabaseError
from rest_framework import mixins, viewsets, status, generics
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from farmers.models import Farmer
from farmers.serializers import SimpleFarmerSerializer
from .models import Activity, Suggestion
from .permissions import IsCarbonVerifier, is_carbon_verifier
from .serializers import (
    ActivitySerializer, ActivitySubmissionSerializer, CarbonCreditResultSerializer,
    SimpleActivitySerializer, SuggestionSerializer
)
from .submission_service import ActivitySubmissionService
from .verification_service import ActivityVerificationService, VerificationError

logger = logging.getLogger(__name__)


class ActivityViewSet(mixins.CreateModelMixin,
                      mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      viewsets.GenericViewSet):
    """
    Submit and review farming activities.

    Farmers see their own activities; verifiers see every activity and can
    approve pending ones.
    """
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = Activity.objects.select_related('user')
        if is_carbon_verifier(self.request.user):
            return queryset
        return queryset.filter(user=self.request.user)

    def get_serializer_class(self):
        if self.action == 'create':
            return ActivitySubmissionSerializer
        if self.action == 'list':
            return SimpleActivitySerializer
        return ActivitySerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = async_to_sync(ActivitySubmissionService().submit)(request.user, serializer.validated_data)
        except DatabaseError as e:
            logger.error(f"Failed to store activity for user {request.user.id}: {e}")
            return Response(
                {"error": "Your activity could not be saved. Please try again."},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response({
            'activity_id': str(result.activity_id),
            'result': CarbonCreditResultSerializer(result.estimate).data,
            'used_fallback': result.used_fallback,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, IsCarbonVerifier])
    def verify(self, request, pk=None):
        """Approve a pending activity"""
        try:
            activity = ActivityVerificationService().approve_activity(pk, verifier=request.user)
        except VerificationError as e:
            return Response(
                {"error": str(e)},
                status=status.HTTP_404_NOT_FOUND if e.not_found else status.HTTP_400_BAD_REQUEST
            )
        return Response(ActivitySerializer(activity).data)


class SuggestionListView(generics.ListAPIView):
    """The current user's suggestions, newest first"""
    serializer_class = SuggestionSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Suggestion.objects.filter(user=self.request.user).order_by('-created_at')


class LeaderboardView(generics.ListAPIView):
    """Ranked farmers, best first. Unranked profiles are left out until the next ranking run."""
    serializer_class = SimpleFarmerSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Farmer.objects.select_related('user').filter(rank__gt=0).order_by('rank')
