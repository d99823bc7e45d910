"""
URLs for Analytics app.
"""

from django.urls import path

from .views import AdminLogsView

urlpatterns = [
    path("admin/logs", AdminLogsView.as_view(), name="admin-logs"),
]
