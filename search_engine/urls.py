"""
URL configuration for search_engine.
"""

from django.urls import path

from .views import HealthCheckView, SearchView, StatusView

app_name = "search_engine"

urlpatterns = [
    path("api/search/", SearchView.as_view(), name="search"),
    path("api/status/", StatusView.as_view(), name="status"),
    path("api/health/", HealthCheckView.as_view(), name="health"),
]
