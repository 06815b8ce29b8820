from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.conf import settings
from django.conf.urls.static import static


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request):
    """
    Root endpoint that provides API information and links
    """
    base_url = request.build_absolute_uri('/').rstrip('/')

    return Response({
        "message": "Welcome to the AgriVision Carbon Credits API",
        "version": "1.0.0",
        "documentation": f"{base_url}/api/docs/",
        "endpoints": {
            "auth": f"{base_url}/api/auth/",
            "farmers": f"{base_url}/api/farmers/",
            "activities": f"{base_url}/api/carbon/activities/",
            "suggestions": f"{base_url}/api/carbon/suggestions/",
            "leaderboard": f"{base_url}/api/carbon/leaderboard/",
            "docs": f"{base_url}/api/docs/"
        },
        "status": "online"
    })


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api_root, name='api-root'),
    path('api-auth/', include('rest_framework.urls')),
    path('api/auth/', include('authentication.urls')),
    path('api/farmers/', include('farmers.urls')),
    path('api/carbon/', include('carbon.urls')),
    path('api/schema/', SpectacularAPIView.as_view(permission_classes=[AllowAny]), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema', permission_classes=[AllowAny]), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema', permission_classes=[AllowAny]), name='redoc'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
