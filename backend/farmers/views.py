import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Farmer
from .serializers import FarmerSerializer

logger = logging.getLogger(__name__)

class FarmerViewSet(viewsets.ModelViewSet):
    """
    API endpoints for farmer profiles
    """
    serializer_class = FarmerSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'put', 'patch', 'head', 'options']

    def get_queryset(self):
        """
        Filter farmers based on user role:
        - Staff users can see all farmers
        - Regular users can only see their own farmer profile
        """
        if self.request.user.is_staff:
            return Farmer.objects.select_related('user')
        return Farmer.objects.filter(user=self.request.user)

    def perform_create(self, serializer):
        farmer = serializer.save()
        logger.info(f"Created farmer profile {farmer.id} for user {self.request.user.id}")

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Get the current user's profile"""
        farmer = Farmer.objects.filter(user=request.user).first()
        if farmer is None:
            return Response(
                {"detail": "No farmer profile yet."},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(self.get_serializer(farmer).data)
