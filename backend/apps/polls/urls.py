"""
URLs for Polls app.
"""

from django.urls import path

from .views import ResultsView, StatusView

urlpatterns = [
    path("results", ResultsView.as_view(), name="poll-results"),
    path("status", StatusView.as_view(), name="poll-status"),
]
