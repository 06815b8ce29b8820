from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ActivityViewSet, LeaderboardView, SuggestionListView

router = DefaultRouter()
router.register(r'activities', ActivityViewSet, basename='activity')

urlpatterns = [
    path('', include(router.urls)),
    path('suggestions/', SuggestionListView.as_view(), name='suggestion-list'),
    path('leaderboard/', LeaderboardView.as_view(), name='carbon-leaderboard'),
]
