from rest_framework.routers import SimpleRouter
from . import views

# Registered at the include root, so no browsable API root view here
router = SimpleRouter()
router.register(r'', views.FarmerViewSet, basename='farmer')

urlpatterns = router.urls
